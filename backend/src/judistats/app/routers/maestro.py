# backend/src/judistats/app/routers/maestro.py
"""Router del pipeline maestro (Google Sheets -> base relacional).

- GET  /maestro/status              -> estado del sincronizador.
- POST /maestro/sync                -> sync completo de un periodo (503 si falla).
- GET  /maestro/resumen             -> conteos por entrada del índice maestro.
- GET  /maestro/grafico             -> puntos listos para graficar (mock si no hay base).
- GET  /maestro/comparacion         -> dos periodos lado a lado.
- GET  /maestro/periodos            -> periodos presentes en la planilla maestra.
- POST /maestro/auto-sync/start|stop
"""

from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from judistats.app.dependencias import get_servicio_maestro
from judistats.app.schemas.maestro import (
    ComparacionOut,
    PeriodoMaestroOut,
    PeriodosMaestro,
    PuntoGraficoOut,
    ResumenOut,
    SyncRequest,
    SyncResponse,
    SyncStatusOut,
)
from judistats.errores import ErrorMaestro
from judistats.maestro.servicio import MasterDataService

router = APIRouter()


def _status(servicio: MasterDataService) -> SyncStatusOut:
    return SyncStatusOut(**asdict(servicio.get_sync_status()))


@router.get("/status", response_model=SyncStatusOut)
def maestro_status(servicio: MasterDataService = Depends(get_servicio_maestro)) -> SyncStatusOut:  # noqa: B008
    return _status(servicio)


@router.post("/sync", response_model=SyncResponse)
def maestro_sync(
    req: Optional[SyncRequest] = None,
    servicio: MasterDataService = Depends(get_servicio_maestro),  # noqa: B008
) -> SyncResponse:
    req = req or SyncRequest()
    try:
        conteos = servicio.perform_full_sync(req.anio, req.mes)
    except ErrorMaestro as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return SyncResponse(ok=True, conteos=conteos, status=_status(servicio))


@router.get("/resumen", response_model=List[ResumenOut])
def maestro_resumen(
    anio: Optional[int] = Query(None),
    mes: Optional[int] = Query(None, ge=1, le=12, description="Solo aplica junto con anio."),
    servicio: MasterDataService = Depends(get_servicio_maestro),  # noqa: B008
) -> List[ResumenOut]:
    return [ResumenOut(**asdict(r)) for r in servicio.get_statistics_summary(anio, mes)]


@router.get("/grafico", response_model=List[PuntoGraficoOut])
def maestro_grafico(
    anio: Optional[int] = Query(None),
    mes: Optional[int] = Query(None, ge=1, le=12),
    servicio: MasterDataService = Depends(get_servicio_maestro),  # noqa: B008
) -> List[PuntoGraficoOut]:
    try:
        puntos = servicio.get_chart_data(anio, mes)
    except Exception as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return [PuntoGraficoOut(**asdict(p)) for p in puntos]


@router.get("/comparacion", response_model=ComparacionOut)
def maestro_comparacion(
    anio_a: Optional[int] = Query(None),
    mes_a: Optional[int] = Query(None, ge=1, le=12),
    anio_b: Optional[int] = Query(None),
    mes_b: Optional[int] = Query(None, ge=1, le=12),
    servicio: MasterDataService = Depends(get_servicio_maestro),  # noqa: B008
) -> ComparacionOut:
    try:
        comp = servicio.get_comparison_data(anio_a, mes_a, anio_b, mes_b)
    except Exception as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return ComparacionOut(**asdict(comp))


@router.get("/periodos", response_model=PeriodosMaestro)
def maestro_periodos(servicio: MasterDataService = Depends(get_servicio_maestro)) -> PeriodosMaestro:  # noqa: B008
    items = [PeriodoMaestroOut(year=y, month=m) for y, m in servicio.get_available_periods()]
    return PeriodosMaestro(items=items)


@router.post("/auto-sync/start", response_model=SyncStatusOut)
def maestro_auto_sync_start(servicio: MasterDataService = Depends(get_servicio_maestro)) -> SyncStatusOut:  # noqa: B008
    servicio.start_auto_sync()
    return _status(servicio)


@router.post("/auto-sync/stop", response_model=SyncStatusOut)
def maestro_auto_sync_stop(servicio: MasterDataService = Depends(get_servicio_maestro)) -> SyncStatusOut:  # noqa: B008
    servicio.stop_auto_sync()
    return _status(servicio)
