"""judistats.datos.cargador

Carga de CSV mensuales a filas crudas (``RawRow``) y accessors de columnas.

Esquema de los archivos
-----------------------
``Dependencia, Codigo, CodObjeto, Naturaleza, Objeto, Período|Periodo,
cantidad|Cantidad, Objeto-Desc - Tipo_Expte``

El esquema cambió con los años: los archivos antiguos usan ``Período`` (con
acento) y ``Cantidad``; los recientes ``Periodo`` y ``cantidad``. Por eso las
columnas semánticas se leen **siempre** a través de los accessors
(`cantidad`, `periodo`, `dependencia`, `objeto`) y nunca con acceso directo.

Reglas de parseo
----------------
- Primera fila = encabezados (recortados, NFC, sin BOM).
- Valores como strings recortados; sin tipado dinámico.
- Líneas vacías se omiten.
- Filas con más celdas que encabezados: se registran en log y se truncan.
  Filas con menos celdas: se completan con ``""``.
"""

from __future__ import annotations

import csv
import io
import logging
import re
import unicodedata
from typing import Dict, List, Mapping, Optional

import pandas as pd

from judistats.datos.fuentes import FuenteArchivos
from judistats.errores import ErrorCarga

logger = logging.getLogger(__name__)

RawRow = Dict[str, str]

SIN_CATEGORIA = "Sin categoría"

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_SEPARADORES = (",", ";", "\t", "|")


# ---------------------------------------------------------------------------
# Accessors (preferencia + fallback entre eras del esquema)
# ---------------------------------------------------------------------------

def parse_entero(value: object) -> int:
    """Parseo entero por prefijo: ``"42"``->42, ``"7.9"``->7, ``"x"``->0."""
    if value is None:
        return 0
    m = _INT_PREFIX_RE.match(str(value))
    if not m:
        return 0
    return int(m.group(1))


def cantidad(row: Mapping[str, object]) -> int:
    """Cantidad de la fila: ``cantidad`` primero, ``Cantidad`` como respaldo.

    Decide la *presencia* de la clave, no su contenido: si ``cantidad`` existe
    pero está vacía, el resultado es 0 aunque ``Cantidad`` tenga valor.
    """
    if "cantidad" in row:
        return parse_entero(row["cantidad"])
    if "Cantidad" in row:
        return parse_entero(row["Cantidad"])
    return 0


def periodo(row: Mapping[str, object]) -> str:
    """Periodo ``YYYYMM`` de la fila: ``Período`` primero, ``Periodo`` como respaldo."""
    if "Período" in row:
        return str(row["Período"] if row["Período"] is not None else "")
    if "Periodo" in row:
        return str(row["Periodo"] if row["Periodo"] is not None else "")
    return ""


def dependencia(row: Mapping[str, object]) -> str:
    """Nombre de la dependencia recortado (``""`` si falta)."""
    return str(row.get("Dependencia") or "").strip()


def objeto(row: Mapping[str, object]) -> str:
    """Objeto/categoría recortado (``""`` si falta)."""
    return str(row.get("Objeto") or "").strip()


# ---------------------------------------------------------------------------
# Parseo
# ---------------------------------------------------------------------------

def normalizar_encabezado(name: str) -> str:
    """Recorta, quita BOM y normaliza a NFC un encabezado.

    NFC importa: ``Período`` puede llegar descompuesto (``i`` + acento) desde
    algunos exports y debe coincidir con la clave que buscan los accessors.
    """
    s = str(name).replace("\ufeff", "").strip()
    return unicodedata.normalize("NFC", s)


def _detectar_separador(texto: str) -> str:
    """Elige el separador más frecuente en la primera línea no vacía."""
    for line in texto.splitlines():
        if line.strip():
            counts = {sep: line.count(sep) for sep in _SEPARADORES}
            best = max(_SEPARADORES, key=lambda s: counts[s])
            return best if counts[best] > 0 else ","
    return ","


def parse_csv(texto: str, *, origen: str = "<texto>") -> List[RawRow]:
    """Parsea texto CSV a una lista de `RawRow`.

    Los problemas de parseo se registran como warnings y no abortan: en el
    peor caso se devuelve una lista vacía.
    """
    if not texto or not texto.strip():
        return []

    sep = _detectar_separador(texto)
    problemas: List[str] = []

    def _bad_line(fields: List[str]) -> List[str]:
        problemas.append(sep.join(fields)[:120])
        return fields[: len(header)]

    header_line = next(line for line in texto.splitlines() if line.strip())
    header = next(csv.reader([header_line], delimiter=sep))

    try:
        df = pd.read_csv(
            io.StringIO(texto),
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            engine="python",
            on_bad_lines=_bad_line,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error) as e:
        logger.warning("Errores al parsear CSV %s: %s", origen, e)
        return []

    if problemas:
        logger.warning("CSV %s: %d filas con celdas de más (truncadas)", origen, len(problemas))
        for detalle in problemas[:5]:
            logger.warning("- Fila irregular: %s", detalle)

    df.columns = [normalizar_encabezado(c) for c in df.columns]
    if df.empty:
        return []
    df = df.fillna("")
    df = df.apply(lambda col: col.astype(str).str.strip())

    rows: List[RawRow] = df.to_dict(orient="records")
    logger.debug("CSV %s: %d filas, columnas=%s", origen, len(rows), list(df.columns))
    return rows


class CargadorCsv:
    """Lee un archivo desde una fuente y lo parsea a `RawRow`."""

    def __init__(self, fuente: FuenteArchivos) -> None:
        self.fuente = fuente

    def load(self, nombre: Optional[str]) -> List[RawRow]:
        """Carga `nombre` desde la fuente.

        Raises
        ------
        ErrorCarga
            Si `nombre` es ``None`` o la lectura falla (archivo ausente, HTTP, red).
        """
        if not nombre:
            raise ErrorCarga("Archivo no resuelto para el periodo solicitado")
        texto = self.fuente.leer_texto(nombre)
        return parse_csv(texto, origen=nombre)


# ---------------------------------------------------------------------------
# Vista tabular canónica
# ---------------------------------------------------------------------------

COLUMNAS_CANONICAS = ("dependencia", "objeto", "periodo", "cantidad")


def a_dataframe(rows: List[RawRow]) -> pd.DataFrame:
    """Construye un DataFrame con columnas canónicas usando los accessors.

    ``objeto`` va recortado pero sin reemplazar vacíos: el motor de agregación
    decide la etiqueta ``Sin categoría``.
    """
    if not rows:
        return pd.DataFrame({c: pd.Series(dtype=object) for c in COLUMNAS_CANONICAS}).astype(
            {"cantidad": "int64"}
        )
    return pd.DataFrame(
        {
            "dependencia": [dependencia(r) for r in rows],
            "objeto": [objeto(r) for r in rows],
            "periodo": [periodo(r) for r in rows],
            "cantidad": [cantidad(r) for r in rows],
        }
    )
