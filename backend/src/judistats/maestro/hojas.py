"""judistats.maestro.hojas

Lectura de la planilla maestra y de las planillas individuales en Google Sheets.

La planilla maestra indexa, por periodo, qué hoja individual contiene las
estadísticas de cada juzgado/sala (columnas ``Plantilla, Numero, ANIO, MES,
ID_ORIGINAL, ID_CONFIRMADO, Estado``). Cada hoja individual es una tabla libre
cuya primera fila son los encabezados.

El cliente gspread se construye de forma perezosa (una sola vez) a partir de
las credenciales de la cuenta de servicio. En tests se inyecta un cliente
falso con la misma forma mínima: ``open_by_key(id).get_worksheet(0).get_all_values()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from judistats.datos.cargador import parse_entero
from judistats.errores import ErrorMaestro

logger = logging.getLogger(__name__)


SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
)

TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class EntradaMaestra:
    plantilla: str
    numero: int
    anio: int
    mes: int
    id_original: str
    id_confirmado: str
    estado: str


@dataclass
class DatosDependencia:
    id: str
    plantilla: str
    numero: int
    anio: int
    mes: int
    data: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class EstadisticasProcesadas:
    previsional: List[DatosDependencia] = field(default_factory=list)
    tributaria: List[DatosDependencia] = field(default_factory=list)
    sala: List[DatosDependencia] = field(default_factory=list)

    def categorias(self) -> List[Tuple[str, List[DatosDependencia]]]:
        return [
            ("previsional", self.previsional),
            ("tributaria", self.tributaria),
            ("sala", self.sala),
        ]


def _tabla_a_dicts(values: List[List[Any]]) -> List[Dict[str, str]]:
    """Primera fila = encabezados; celdas faltantes -> ``""``."""
    if not values:
        return []
    headers = [str(h).strip() for h in values[0]]
    out: List[Dict[str, str]] = []
    for raw in values[1:]:
        row: Dict[str, str] = {}
        for i, h in enumerate(headers):
            if not h:
                continue
            cell = raw[i] if i < len(raw) else ""
            row[h] = "" if cell is None else str(cell)
        out.append(row)
    return out


class MasterSheetsService:
    """Acceso de solo lectura a la planilla maestra y sus hojas individuales."""

    def __init__(
        self,
        service_account_email: Optional[str] = None,
        private_key: Optional[str] = None,
        *,
        client: Any = None,
    ) -> None:
        self._email = service_account_email
        self._key = private_key
        self._client = client

    # -- autenticación -----------------------------------------------------

    def is_ready(self) -> bool:
        """True si hay cliente inyectado o credenciales completas."""
        return self._client is not None or bool(self._email and self._key)

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not (self._email and self._key):
            raise ErrorMaestro("Faltan credenciales de Google Sheets en el entorno")

        import gspread
        from google.oauth2.service_account import Credentials

        info = {
            "type": "service_account",
            "client_email": self._email,
            "private_key": self._key,
            "token_uri": TOKEN_URI,
        }
        try:
            creds = Credentials.from_service_account_info(info, scopes=list(SCOPES))
        except ValueError as e:
            raise ErrorMaestro(f"Credenciales de Google inválidas: {e}") from e

        self._client = gspread.authorize(creds)
        logger.info("Cliente de Google Sheets inicializado")
        return self._client

    def _primera_hoja(self, sheet_id: str) -> List[List[Any]]:
        doc = self._get_client().open_by_key(sheet_id)
        return doc.get_worksheet(0).get_all_values()

    # -- lecturas ----------------------------------------------------------

    def load_master_sheet(self, sheet_id: str) -> List[EntradaMaestra]:
        """Entradas de la planilla maestra; omite filas sin Plantilla o ID_CONFIRMADO."""
        try:
            rows = _tabla_a_dicts(self._primera_hoja(sheet_id))
        except ErrorMaestro:
            raise
        except Exception as e:
            logger.error("No se pudo cargar la planilla maestra %s: %s", sheet_id, e)
            raise ErrorMaestro(f"No se pudo cargar la planilla maestra: {e}") from e

        entries: List[EntradaMaestra] = []
        for row in rows:
            plantilla = row.get("Plantilla", "").strip()
            id_confirmado = row.get("ID_CONFIRMADO", "").strip()
            if not plantilla or not id_confirmado:
                continue
            entries.append(
                EntradaMaestra(
                    plantilla=plantilla,
                    numero=parse_entero(row.get("Numero")),
                    anio=parse_entero(row.get("ANIO")),
                    mes=parse_entero(row.get("MES")),
                    id_original=row.get("ID_ORIGINAL", "").strip(),
                    id_confirmado=id_confirmado,
                    estado=row.get("Estado", "").strip(),
                )
            )

        logger.info("Cargadas %d entradas de la planilla maestra", len(entries))
        return entries

    def load_individual_sheet(self, sheet_id: str) -> List[Dict[str, str]]:
        """Filas de una hoja individual; ``[]`` ante cualquier fallo."""
        try:
            data = _tabla_a_dicts(self._primera_hoja(sheet_id))
        except Exception as e:
            logger.error("No se pudo cargar la hoja individual %s: %s", sheet_id, e)
            return []
        logger.info("Cargadas %d filas de la hoja %s", len(data), sheet_id)
        return data

    def process_all_statistics(
        self,
        sheet_id: str,
        year: int,
        month: int,
        entries: Optional[Sequence[EntradaMaestra]] = None,
    ) -> EstadisticasProcesadas:
        """Carga y clasifica las hojas individuales de un periodo.

        `entries` evita releer la planilla maestra cuando el caller ya la tiene.
        """
        if entries is None:
            entries = self.load_master_sheet(sheet_id)
        entries = [
            e for e in entries
            if e.anio == year and e.mes == month and e.id_confirmado
        ]

        result = EstadisticasProcesadas()
        for entry in entries:
            dep = DatosDependencia(
                id=entry.id_confirmado,
                plantilla=entry.plantilla,
                numero=entry.numero,
                anio=entry.anio,
                mes=entry.mes,
                data=self.load_individual_sheet(entry.id_confirmado),
            )
            if "Previsional" in entry.plantilla:
                result.previsional.append(dep)
            elif "Tributaria" in entry.plantilla:
                result.tributaria.append(dep)
            elif "Sala" in entry.plantilla:
                result.sala.append(dep)

        logger.info(
            "Estadísticas %s/%s: previsional=%d tributaria=%d sala=%d",
            year, month, len(result.previsional), len(result.tributaria), len(result.sala),
        )
        return result

    def get_available_periods(self, sheet_id: str) -> List[Tuple[int, int]]:
        """Pares ``(año, mes)`` distintos, del más reciente al más antiguo."""
        try:
            entries = self.load_master_sheet(sheet_id)
        except ErrorMaestro as e:
            logger.error("No se pudieron obtener periodos: %s", e)
            return []
        periods = {(e.anio, e.mes) for e in entries if e.anio and e.mes}
        return sorted(periods, reverse=True)
