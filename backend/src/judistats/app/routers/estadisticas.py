# backend/src/judistats/app/routers/estadisticas.py
"""Router de estadísticas sobre los CSV mensuales publicados.

Endpoints
---------
- GET /estadisticas/dependencia   -> top 10 categorías de una dependencia en un mes.
- GET /estadisticas/comparacion   -> categorías de varias dependencias en un mes.
- GET /estadisticas/evolucion     -> serie mensual (un punto por mes, 0 si falta).
- GET /estadisticas/dependencias  -> catálogo de dependencias (muestreo).
- GET /estadisticas/tipos-objeto  -> catálogo de tipos de objeto de una dependencia.
- GET /estadisticas/periodos      -> periodos presentes en un archivo.
- GET /estadisticas/archivo       -> disponibilidad y totales de un archivo.

El router es delgado: la lógica vive en `judistats.dashboard.consultas`, que
nunca lanza salvo por meses inválidos en la evolución (-> 422).
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from judistats.app.dependencias import get_consultas
from judistats.app.schemas.estadisticas import (
    ArchivoStatus,
    ComparisonStatOut,
    DependencyStatOut,
    EvolutionPointOut,
    ListaTextos,
    PeriodoOut,
    PeriodosArchivo,
)
from judistats.dashboard.consultas import ConsultasEstadisticas, as_dicts
from judistats.errores import PeriodoInvalidoError

router = APIRouter()


@router.get("/dependencia", response_model=List[DependencyStatOut])
def estadisticas_dependencia(
    dependencia: str = Query(..., description="Nombre exacto de la dependencia."),
    mes: str = Query(..., description="Mes en castellano ('Enero'..'Diciembre')."),
    anio: str = Query(..., description="Año, p.ej. '2021'."),
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> List[DependencyStatOut]:
    stats = consultas.fetch_dependency_stats(dependencia, mes, anio)
    return [DependencyStatOut(**d) for d in as_dicts(stats)]


@router.get("/comparacion", response_model=List[ComparisonStatOut])
def estadisticas_comparacion(
    dependencias: List[str] = Query(..., description="Repetible: ?dependencias=A&dependencias=B"),  # noqa: B008
    mes: str = Query(...),
    anio: str = Query(...),
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> List[ComparisonStatOut]:
    stats = consultas.fetch_comparison_stats(dependencias, mes, anio)
    return [ComparisonStatOut(**d) for d in as_dicts(stats)]


@router.get("/evolucion", response_model=List[EvolutionPointOut])
def estadisticas_evolucion(
    dependencia: str = Query(...),
    mes_inicio: str = Query(..., description="Mes inicial (incl.)."),
    mes_fin: str = Query(..., description="Mes final (incl.)."),
    anio: str = Query(...),
    tipo_objeto: Optional[str] = Query(None, description="Filtro opcional; 'TODOS' equivale a sin filtro."),
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> List[EvolutionPointOut]:
    try:
        puntos = consultas.fetch_evolution_stats(dependencia, mes_inicio, mes_fin, anio, tipo_objeto)
    except PeriodoInvalidoError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return [EvolutionPointOut(**d) for d in as_dicts(puntos)]


@router.get("/dependencias", response_model=ListaTextos)
def estadisticas_dependencias(
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> ListaTextos:
    return ListaTextos(items=consultas.fetch_dependencies())


@router.get("/tipos-objeto", response_model=ListaTextos)
def estadisticas_tipos_objeto(
    dependencia: str = Query(...),
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> ListaTextos:
    return ListaTextos(items=consultas.fetch_object_types(dependencia))


@router.get("/periodos", response_model=PeriodosArchivo)
def estadisticas_periodos(
    archivo: str = Query(..., description="Nombre del CSV, p.ej. 'Datos 202103 - Hoja1.csv'."),
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> PeriodosArchivo:
    items = [PeriodoOut(**p) for p in consultas.fetch_available_periods(archivo)]
    return PeriodosArchivo(archivo=archivo, items=items)


@router.get("/archivo", response_model=ArchivoStatus)
def estadisticas_archivo(
    archivo: str = Query(...),
    consultas: ConsultasEstadisticas = Depends(get_consultas),  # noqa: B008
) -> ArchivoStatus:
    disponible = consultas.check_csv_availability(archivo)
    if not disponible:
        return ArchivoStatus(archivo=archivo, disponible=False, last_update="No disponible")
    return ArchivoStatus(archivo=archivo, disponible=True, **consultas.get_csv_stats(archivo))
