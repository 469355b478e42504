"""judistats.datos.agregaciones

Motor de filtrado y agregación sobre filas crudas de un CSV mensual.

Reglas de negocio
-----------------
1) Filtro exacto por dependencia (string recortado, no vacío) y por periodo
   ``YYYYMM`` (leído con el accessor `periodo`).
2) Filtro opcional por tipo de objeto (exacto, recortado). Los centinelas
   ``TODOS`` / ``ALL`` desactivan el filtro.
3) Agrupación por ``Objeto`` (vacío -> ``Sin categoría``) sumando el accessor
   `cantidad`.

El resultado es un mapping ``categoria -> suma``; no depende del orden de las
filas de entrada.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from judistats.datos.cargador import SIN_CATEGORIA, RawRow, a_dataframe

logger = logging.getLogger(__name__)


TIPO_OBJETO_TODOS = "TODOS"
_CENTINELAS_TODOS = frozenset({TIPO_OBJETO_TODOS, "ALL"})

TOP_N = 10


def es_todos(object_type: Optional[str]) -> bool:
    """True si `object_type` no restringe (None, vacío o centinela)."""
    if object_type is None:
        return True
    s = str(object_type).strip()
    return not s or s in _CENTINELAS_TODOS


def _mask(df: pd.DataFrame, dependency: str, period_code: str, object_type: Optional[str]) -> pd.Series:
    dep = str(dependency or "").strip()
    mask = df["dependencia"].ne("") & df["dependencia"].eq(dep)
    mask &= df["periodo"].eq(str(period_code))
    if not es_todos(object_type):
        mask &= df["objeto"].str.strip().eq(str(object_type).strip())
    return mask


def filtrar(
    rows: Sequence[RawRow],
    dependency: str,
    period_code: str,
    object_type: Optional[str] = None,
) -> pd.DataFrame:
    """Subconjunto canónico (ver `a_dataframe`) que cumple los filtros."""
    df = a_dataframe(list(rows))
    if df.empty:
        return df
    out = df.loc[_mask(df, dependency, period_code, object_type)]
    logger.debug(
        "Filtradas %d/%d filas para dependencia=%r periodo=%s objeto=%r",
        len(out), len(df), dependency, period_code, object_type,
    )
    return out


def agrupar(df: pd.DataFrame) -> Dict[str, int]:
    """Agrupa un subconjunto canónico por objeto sumando cantidades."""
    if df.empty:
        return {}
    categorias = df["objeto"].where(df["objeto"].ne(""), SIN_CATEGORIA)
    grouped = df["cantidad"].groupby(categorias, sort=False).sum()
    return {str(k): int(v) for k, v in grouped.items()}


def aggregate(
    rows: Sequence[RawRow],
    dependency: str,
    period_code: str,
    object_type: Optional[str] = None,
) -> Dict[str, int]:
    """Filtra y agrupa: ``{categoria: suma_de_cantidades}``."""
    return agrupar(filtrar(rows, dependency, period_code, object_type))


def total(
    rows: Sequence[RawRow],
    dependency: str,
    period_code: str,
    object_type: Optional[str] = None,
) -> int:
    """Suma de cantidades del subconjunto filtrado (0 si está vacío)."""
    df = filtrar(rows, dependency, period_code, object_type)
    if df.empty:
        return 0
    return int(df["cantidad"].sum())


def top_categorias(grouped: Dict[str, int], limit: int = TOP_N) -> List[Tuple[str, int]]:
    """Ordena por valor descendente y trunca a `limit` categorías."""
    items = sorted(grouped.items(), key=lambda kv: kv[1], reverse=True)
    return items[:limit]


def valores_distintos(rows: Sequence[RawRow], column: str, *, dependency: Optional[str] = None) -> List[str]:
    """Valores distintos (recortados, no vacíos) de ``dependencia`` u ``objeto``.

    Si se pasa `dependency`, solo considera filas de esa dependencia.
    """
    df = a_dataframe(list(rows))
    if df.empty:
        return []
    if dependency is not None:
        dep = str(dependency).strip()
        df = df.loc[df["dependencia"].ne("") & df["dependencia"].eq(dep)]
    values = df[column].astype(str).str.strip()
    return sorted({v for v in values.tolist() if v})
