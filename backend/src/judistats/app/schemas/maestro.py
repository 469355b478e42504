# backend/src/judistats/app/schemas/maestro.py
"""Esquemas (Pydantic) para la API ``/maestro/*`` (pipeline Sheets -> SQL)."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SyncStatusOut(BaseModel):
    """Estado actual del sincronizador maestro."""

    is_active: bool = Field(..., description="True si el auto-sync está corriendo.")
    last_sync: Optional[datetime] = None
    next_sync: Optional[datetime] = None
    status: str = Field(..., description="idle | syncing | error")
    message: str


class SyncRequest(BaseModel):
    """Body de ``POST /maestro/sync``. Sin valores usa el mes actual."""

    anio: Optional[int] = Field(None, ge=2000, le=2100)
    mes: Optional[int] = Field(None, ge=1, le=12)


class SyncResponse(BaseModel):
    ok: bool = True
    conteos: Dict[str, int] = Field(default_factory=dict, description="Dependencias por categoría.")
    status: SyncStatusOut


class ResumenOut(BaseModel):
    plantilla: str
    numero: int
    anio: int
    mes: int
    total_records: int
    last_updated: datetime


class PuntoGraficoOut(BaseModel):
    id: str
    object_type: str
    count: int
    category: str
    label: str
    value: int


class ComparacionOut(BaseModel):
    data_a: List[PuntoGraficoOut] = Field(default_factory=list)
    data_b: List[PuntoGraficoOut] = Field(default_factory=list)


class PeriodoMaestroOut(BaseModel):
    year: int
    month: int


class PeriodosMaestro(BaseModel):
    items: List[PeriodoMaestroOut] = Field(default_factory=list)
