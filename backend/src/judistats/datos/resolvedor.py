"""judistats.datos.resolvedor

Resolución de ``(año, mes)`` -> nombre del CSV publicado.

Los archivos mensuales se publicaron a mano durante años y sus nombres no son
uniformes (``Hoja1`` / ``Hoja 1`` / ``Sheet1``, espacios alrededor del guion,
sin sufijo...). La estrategia por defecto sondea una lista **ordenada** de
variantes y devuelve la primera que la fuente reconoce.

Notas
-----
- Sin caché: cada llamada repite el sondeo completo.
- Sondeo secuencial; la primera variante que existe gana.
- Nunca lanza: un fallo de sondeo cuenta como "no existe" y el resultado final
  es ``None`` si ninguna variante responde.
- ``ResolvedorManifiesto`` permite reemplazar el sondeo por un índice
  (``manifest.json``) sin tocar a los callers.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Protocol

from judistats.datos.fuentes import FuenteArchivos
from judistats.datos.periodos import period_code
from judistats.errores import ErrorCarga

logger = logging.getLogger(__name__)


MANIFEST_NAME = "manifest.json"


def file_name_variants(year: int, month: int) -> List[str]:
    """Variantes de nombre en orden de preferencia para un periodo."""
    base = f"Datos {period_code(year, month)}"
    return [
        f"{base} - Hoja1.csv",
        f"{base} - Hoja 1.csv",
        f"{base} - Sheet1.csv",
        f"{base} - Sheet 1.csv",
        f"{base} - Hoja1 .csv",
        f"{base} -Hoja1.csv",
        f"{base}- Hoja1.csv",
        f"{base}.csv",
    ]


class Resolvedor(Protocol):
    """Estrategia de resolución de nombres de archivo."""

    def resolve(self, year: int, month: int) -> Optional[str]: ...


class ResolvedorNombres:
    """Sondeo secuencial de variantes de nombre contra una fuente."""

    def __init__(self, fuente: FuenteArchivos) -> None:
        self.fuente = fuente

    def resolve(self, year: int, month: int) -> Optional[str]:
        try:
            variants = file_name_variants(year, month)
        except ValueError:
            logger.info("Periodo fuera de rango: %s-%s", year, month)
            return None

        for name in variants:
            try:
                if self.fuente.existe(name):
                    logger.info("Archivo CSV encontrado: %s", name)
                    return name
            except Exception as e:  # cualquier fallo de sondeo = variante ausente
                logger.debug("Sondeo de %s falló: %s", name, e)
                continue

        logger.info("No se encontró CSV para %s-%02d", year, int(month))
        return None


class ResolvedorManifiesto:
    """Resolución vía índice ``manifest.json`` publicado junto a los CSV.

    Estructura esperada: ``{"202103": "Datos 202103 - Hoja1.csv", ...}``.
    El manifest se relee en cada llamada (sin caché, igual que el sondeo).
    """

    def __init__(self, fuente: FuenteArchivos, manifest_name: str = MANIFEST_NAME) -> None:
        self.fuente = fuente
        self.manifest_name = manifest_name

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self.fuente.leer_texto(self.manifest_name))
        except (ErrorCarga, ValueError) as e:
            logger.warning("Manifest %s no disponible: %s", self.manifest_name, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v}

    def resolve(self, year: int, month: int) -> Optional[str]:
        try:
            code = period_code(year, month)
        except ValueError:
            return None
        return self._load().get(code)
