"""judistats.datos.periodos

Helpers de periodos ``YYYYMM`` y meses en castellano.

Los consumidores (UI, routers) hablan en nombres de mes ("Enero".."Diciembre")
y año como string; los archivos y la columna ``Período`` usan el código de seis
dígitos ``YYYYMM``.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from judistats.errores import PeriodoInvalidoError


MESES: Tuple[str, ...] = (
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
)


def period_code(year: int, month: int) -> str:
    """Concatena año y mes con relleno de ceros (``2021, 3`` -> ``"202103"``)."""
    if not 1 <= int(month) <= 12:
        raise PeriodoInvalidoError(f"Mes fuera de rango: {month}")
    return f"{int(year)}{int(month):02d}"


def month_index(name: str) -> int:
    """Índice 0-based de un nombre de mes; ``-1`` si no se reconoce."""
    try:
        return MESES.index(str(name))
    except ValueError:
        return -1


def to_period_code(month: str, year: str) -> str:
    """Convierte mes (nombre) y año a ``YYYYMM``; ``""`` si el mes es inválido."""
    idx = month_index(month)
    if idx < 0:
        return ""
    return f"{year}{idx + 1:02d}"


def split_period_code(code: str) -> Optional[Tuple[int, int]]:
    """Parsea ``YYYYMM`` a ``(year, month)``; ``None`` si no es válido."""
    s = str(code or "").strip()
    if len(s) != 6 or not s.isdigit():
        return None
    year, month = int(s[:4]), int(s[4:])
    if not 1 <= month <= 12:
        return None
    return year, month


def format_period(code: str) -> Dict[str, str]:
    """Convierte ``YYYYMM`` a ``{"month": "Marzo", "year": "2021"}``.

    Devuelve strings vacíos cuando el código no tiene 6 caracteres o el mes no
    existe.
    """
    s = str(code or "")
    if len(s) != 6:
        return {"month": "", "year": ""}
    try:
        month_num = int(s[4:6])
    except ValueError:
        return {"month": "", "year": ""}
    month = MESES[month_num - 1] if 1 <= month_num <= 12 else ""
    return {"month": month, "year": s[:4]}


def month_range(start_month: str, end_month: str) -> List[int]:
    """Índices (1-based) de los meses entre `start_month` y `end_month` inclusive.

    Raises
    ------
    PeriodoInvalidoError
        Si algún nombre no existe o el inicio es posterior al fin.
    """
    start = month_index(start_month)
    end = month_index(end_month)
    if start < 0 or end < 0:
        raise PeriodoInvalidoError(f"Mes inválido: {start_month!r} / {end_month!r}")
    if start > end:
        raise PeriodoInvalidoError("El mes de inicio debe ser anterior al mes final")
    return list(range(start + 1, end + 2))


def sort_key_newest_first(item: Dict[str, str]) -> Tuple[int, int]:
    """Clave para ordenar ``{month, year}`` del más reciente al más antiguo."""
    try:
        year = int(item.get("year") or 0)
    except ValueError:
        year = 0
    return (-year, -month_index(item.get("month") or ""))
