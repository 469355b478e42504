"""judistats.dashboard.consultas

Fachada de consultas sobre los CSV mensuales.

Compone resolvedor de nombres -> cargador -> motor de agregación para cada caso
de uso del tablero:

- ``fetch_dependency_stats``: foto de una dependencia en un mes (top 10).
- ``fetch_comparison_stats``: varias dependencias en un mismo mes.
- ``fetch_evolution_stats``: serie mensual de una dependencia dentro de un año.
- ``fetch_dependencies`` / ``fetch_object_types``: descubrimiento de catálogos.

Contrato de errores
-------------------
Todas las operaciones son *no-throw* en su borde: cualquier fallo interno se
registra y degrada a un resultado vacío (o a puntos con valor 0 en evolución).
La única excepción es `fetch_evolution_stats`, que valida los nombres de mes y
su orden **antes** de cualquier lectura y lanza `PeriodoInvalidoError`.

Asimetría: en la foto de una dependencia, cero filas tras el filtro
es un error (`SinDatosError`, atrapado y devuelto como ``[]``); en comparación,
evolución y descubrimiento un subconjunto vacío simplemente no aporta.

Limitación conocida del descubrimiento
--------------------------------------
``fetch_dependencies`` y ``fetch_object_types`` **no** recorren el catálogo
completo: muestrean una lista fija de periodos históricos y cortan temprano.
Una dependencia o tipo de objeto que solo aparece fuera de esa muestra no se
descubre aunque su archivo exista.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from judistats.datos import agregaciones
from judistats.datos.agregaciones import TIPO_OBJETO_TODOS
from judistats.datos.cargador import CargadorCsv, RawRow, dependencia, periodo
from judistats.datos.fuentes import FuenteArchivos
from judistats.datos.periodos import (
    MESES,
    format_period,
    month_range,
    sort_key_newest_first,
    split_period_code,
    to_period_code,
)
from judistats.datos.resolvedor import Resolvedor, ResolvedorNombres
from judistats.errores import ErrorCarga, PeriodoInvalidoError, SinDatosError
from judistats.observability.bus_eventos import EV_CONSULTA_FAILED, publicador

logger = logging.getLogger(__name__)


# Muestra fija de periodos para descubrir dependencias (orden de escaneo).
PERIODOS_MUESTRA_DEPENDENCIAS: Tuple[str, ...] = (
    "201409", "201408", "201407", "201406", "201405", "201404", "201403", "201402",
    "201309", "201308", "201307", "201306", "201305", "201304", "201303", "201302",
    "201209", "201208", "201207", "201206", "201205", "201204", "201203", "201202",
    "200502", "200503", "200504",
)

# Muestra fija de (año, mes) para descubrir tipos de objeto de una dependencia.
PERIODOS_MUESTRA_OBJETOS: Tuple[Tuple[int, int], ...] = (
    (2014, 8), (2014, 9), (2014, 7), (2013, 8), (2013, 9), (2012, 8),
)

# Corte temprano del descubrimiento.
MIN_ARCHIVOS_DESCUBRIMIENTO = 5
MIN_VALORES_DESCUBRIMIENTO = 10

DEPENDENCIAS_RESPALDO: Tuple[str, ...] = (
    "CAMARA FEDERAL DE LA SEGURIDAD SOCIAL - SALA 1-",
    "CAMARA FEDERAL DE LA SEGURIDAD SOCIAL - SALA 2-",
    "CAMARA FEDERAL DE LA SEGURIDAD SOCIAL - SALA 3-",
)

PRIMER_ANIO_PUBLICADO = 2005


# ---------------------------------------------------------------------------
# Tipos de salida
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DependencyStat:
    category: str
    value: int


@dataclass(frozen=True)
class ComparisonStat:
    dependency: str
    category: str
    value: int


@dataclass(frozen=True)
class EvolutionPoint:
    period: str
    value: int
    year: str
    month: str


def as_dicts(items: Sequence[Any]) -> List[Dict[str, Any]]:
    """Serializa dataclasses de salida a dicts (para JSON)."""
    return [asdict(x) for x in items]


def _fallo(operacion: str, error: Exception, **contexto: Any) -> None:
    logger.warning("%s falló: %s", operacion, error)
    publicador(EV_CONSULTA_FAILED, {"operacion": operacion, "error": str(error), **contexto})


# ---------------------------------------------------------------------------
# Fachada
# ---------------------------------------------------------------------------

class ConsultasEstadisticas:
    """Pipeline sin estado: cada llamada resuelve, carga y agrega de nuevo.

    Parameters
    ----------
    fuente:
        Origen de los CSV (directorio local o HTTP).
    resolvedor:
        Estrategia de resolución de nombres; por defecto sondeo de variantes.
    """

    def __init__(self, fuente: FuenteArchivos, resolvedor: Optional[Resolvedor] = None) -> None:
        self.fuente = fuente
        self.resolvedor: Resolvedor = resolvedor or ResolvedorNombres(fuente)
        self.cargador = CargadorCsv(fuente)

    def close(self) -> None:
        close = getattr(self.fuente, "close", None)
        if callable(close):
            close()

    # -- helpers -----------------------------------------------------------

    def _cargar_periodo(self, code: str) -> List[RawRow]:
        """Resuelve y carga el archivo de `code`; `ErrorCarga` si no hay archivo."""
        parsed = split_period_code(code)
        if parsed is None:
            raise PeriodoInvalidoError(f"Período inválido: {code!r}")
        year, month = parsed
        nombre = self.resolvedor.resolve(year, month)
        if not nombre:
            raise ErrorCarga(f"Archivo no encontrado para {code}")
        rows = self.cargador.load(nombre)
        logger.info("Cargado %s: %d registros", nombre, len(rows))
        return rows

    # -- consultas ---------------------------------------------------------

    def fetch_dependency_stats(self, dependency: str, month: str, year: str) -> List[DependencyStat]:
        """Top 10 categorías (desc) de una dependencia en un mes; ``[]`` ante cualquier fallo."""
        try:
            code = to_period_code(month, year)
            if not code:
                raise PeriodoInvalidoError(f"Período inválido: {month} {year}")

            rows = self._cargar_periodo(code)
            subset = agregaciones.filtrar(rows, dependency, code)
            if subset.empty:
                raise SinDatosError(f"No se encontraron datos para {dependency} en {month} {year}")

            grouped = agregaciones.agrupar(subset)
            return [DependencyStat(category=c, value=v) for c, v in agregaciones.top_categorias(grouped)]
        except Exception as e:
            _fallo("fetch_dependency_stats", e, dependencia=dependency, mes=month, anio=year)
            return []

    def fetch_comparison_stats(
        self, dependencies: Sequence[str], month: str, year: str
    ) -> List[ComparisonStat]:
        """Categorías por dependencia en un mismo mes, en el orden pedido.

        Las dependencias sin filas no aportan entradas (ni error).
        """
        try:
            code = to_period_code(month, year)
            if not code:
                raise PeriodoInvalidoError(f"Período inválido: {month} {year}")

            rows = self._cargar_periodo(code)
            result: List[ComparisonStat] = []
            for dep in dependencies:
                for category, value in agregaciones.aggregate(rows, dep, code).items():
                    result.append(ComparisonStat(dependency=dep, category=category, value=value))
            return result
        except Exception as e:
            _fallo("fetch_comparison_stats", e, dependencias=list(dependencies), mes=month, anio=year)
            return []

    def fetch_evolution_stats(
        self,
        dependency: str,
        start_month: str,
        end_month: str,
        year: str,
        object_type: Optional[str] = None,
    ) -> List[EvolutionPoint]:
        """Un punto por mes entre `start_month` y `end_month` (inclusive).

        Raises
        ------
        PeriodoInvalidoError
            Antes de cualquier lectura, si un mes no existe o el inicio es
            posterior al fin.
        """
        months = month_range(start_month, end_month)

        result: List[EvolutionPoint] = []
        for month_num in months:
            month_name = MESES[month_num - 1]
            code = f"{year}{month_num:02d}"
            try:
                rows = self._cargar_periodo(code)
                value = agregaciones.total(rows, dependency, code, object_type)
            except Exception as e:
                logger.warning("No se pudo cargar datos para %s %s: %s", month_name, year, e)
                value = 0
            result.append(EvolutionPoint(period=code, value=value, year=str(year), month=month_name))
        return result

    def fetch_dependencies(self) -> List[str]:
        """Dependencias vistas en la muestra fija de periodos (orden alfabético)."""
        try:
            found: set = set()
            loaded = 0
            for code in PERIODOS_MUESTRA_DEPENDENCIAS:
                try:
                    rows = self._cargar_periodo(code)
                except Exception as e:
                    logger.warning("No se pudo cargar período %s: %s", code, e)
                    continue
                if not rows:
                    continue

                found.update(agregaciones.valores_distintos(rows, "dependencia"))
                loaded += 1
                logger.info(
                    "Cargado %s: %d registros, %d dependencias únicas hasta ahora",
                    code, len(rows), len(found),
                )
                if loaded >= MIN_ARCHIVOS_DESCUBRIMIENTO and len(found) > MIN_VALORES_DESCUBRIMIENTO:
                    break

            if not found:
                logger.info("No se encontraron dependencias en ningún archivo")
            return sorted(found)
        except Exception as e:
            _fallo("fetch_dependencies", e)
            return list(DEPENDENCIAS_RESPALDO)

    def fetch_object_types(self, dependency: str) -> List[str]:
        """``["TODOS", *tipos]`` para una dependencia, usando la muestra fija."""
        try:
            found: set = set()
            for year, month in PERIODOS_MUESTRA_OBJETOS:
                try:
                    nombre = self.resolvedor.resolve(year, month)
                    if not nombre:
                        continue
                    rows = self.cargador.load(nombre)
                except Exception as e:
                    logger.info("No se pudo cargar %d%02d: %s", year, month, e)
                    continue

                found.update(agregaciones.valores_distintos(rows, "objeto", dependency=dependency))
                if len(found) > MIN_VALORES_DESCUBRIMIENTO:
                    break

            return [TIPO_OBJETO_TODOS, *sorted(found)]
        except Exception as e:
            _fallo("fetch_object_types", e, dependencia=dependency)
            return [TIPO_OBJETO_TODOS]

    # -- utilidades de archivo --------------------------------------------

    def fetch_available_periods(self, file_name: str) -> List[Dict[str, str]]:
        """Periodos presentes en un archivo, del más reciente al más antiguo."""
        try:
            rows = self.cargador.load(file_name)
            codes = {periodo(r) for r in rows}
            formatted = [format_period(c) for c in codes if c and len(c) == 6]
            formatted = [p for p in formatted if p["month"] and p["year"]]
            return sorted(formatted, key=sort_key_newest_first)
        except Exception as e:
            _fallo("fetch_available_periods", e, archivo=file_name)
            return []

    def check_csv_availability(self, file_name: str) -> bool:
        try:
            return bool(self.fuente.existe(file_name))
        except Exception as e:
            logger.warning("Error al verificar disponibilidad de %s: %s", file_name, e)
            return False

    def get_csv_stats(self, file_name: str) -> Dict[str, Any]:
        """Totales de un archivo: registros, dependencias y periodos distintos."""
        try:
            rows = self.cargador.load(file_name)
            dependencias = {dependencia(r) for r in rows} - {""}
            periodos = {periodo(r) for r in rows} - {""}
            today = date.today()
            return {
                "total_records": len(rows),
                "dependencies": len(dependencias),
                "periods": len(periodos),
                "last_update": f"{today.day}/{today.month}/{today.year}",
            }
        except Exception as e:
            _fallo("get_csv_stats", e, archivo=file_name)
            return {"total_records": 0, "dependencies": 0, "periods": 0, "last_update": "No disponible"}


def get_available_csv_files(current_year: Optional[int] = None) -> List[str]:
    """Nombres canónicos esperados desde 2005 hasta `current_year` (incl.)."""
    last = current_year if current_year is not None else date.today().year
    return [
        f"Datos {year}{month:02d} - Hoja1.csv"
        for year in range(PRIMER_ANIO_PUBLICADO, last + 1)
        for month in range(1, 13)
    ]
