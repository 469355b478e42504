"""
Fuentes de archivos CSV.

Una *fuente* sabe responder dos preguntas sobre un nombre de archivo:
- ¿existe? (sondeo usado por el resolvedor de nombres)
- ¿cuál es su contenido de texto? (lectura usada por el cargador)

Implementaciones:
- ``FuenteDirectorio``: carpeta local (``JUDI_DATA_DIR``).
- ``FuenteHttp``: servidor de estáticos (``JUDI_DATA_BASE_URL``), vía httpx.

No guarda nada; solo lee.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote

import httpx

from judistats.config import Settings
from judistats.errores import ErrorCarga
from judistats.utils.paths import safe_file_name

logger = logging.getLogger(__name__)


class FuenteArchivos(Protocol):
    """Contrato mínimo de una fuente de archivos."""

    def existe(self, nombre: str) -> bool: ...

    def leer_texto(self, nombre: str) -> str: ...


def _decode(raw: bytes) -> str:
    # utf-8 (con o sin BOM) primero; latin-1 como respaldo para exports de Excel.
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


class FuenteDirectorio:
    """Lee CSV desde un directorio local."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, nombre: str) -> Path:
        return self.base_dir / safe_file_name(nombre)

    def existe(self, nombre: str) -> bool:
        return self._path(nombre).is_file()

    def leer_texto(self, nombre: str) -> str:
        path = self._path(nombre)
        try:
            return _decode(path.read_bytes())
        except OSError as e:
            raise ErrorCarga(f"Error al cargar el archivo {nombre}: {e}") from e

    def __repr__(self) -> str:
        return f"FuenteDirectorio({self.base_dir.as_posix()!r})"


class FuenteHttp:
    """Lee CSV desde un servidor HTTP de archivos estáticos.

    Cualquier respuesta 2xx cuenta como existencia. Los errores de transporte
    se tratan como ausencia en ``existe`` y como `ErrorCarga` en ``leer_texto``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def _url(self, nombre: str) -> str:
        return f"{self.base_url}/{quote(nombre)}"

    def existe(self, nombre: str) -> bool:
        try:
            r = self._client.get(self._url(nombre))
        except httpx.HTTPError as e:
            logger.debug("Sondeo fallido para %s: %s", nombre, e)
            return False
        return r.is_success

    def leer_texto(self, nombre: str) -> str:
        try:
            r = self._client.get(self._url(nombre))
        except httpx.HTTPError as e:
            raise ErrorCarga(f"Error al cargar el archivo {nombre}: {e}") from e
        if not r.is_success:
            raise ErrorCarga(f"Error al cargar el archivo {nombre}: {r.status_code} {r.reason_phrase}")
        return _decode(r.content)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "FuenteHttp":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FuenteHttp({self.base_url!r})"


def fuente_desde_settings(settings: Settings) -> FuenteArchivos:
    """Elige la fuente según configuración: HTTP si hay base URL, si no directorio."""
    if settings.data_base_url:
        return FuenteHttp(settings.data_base_url, timeout=settings.http_timeout)
    return FuenteDirectorio(settings.data_dir)
