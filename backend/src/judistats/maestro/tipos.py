"""Tipos de salida del servicio maestro."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class PuntoGrafico:
    id: str
    object_type: str
    count: int
    category: str
    label: str
    value: int


@dataclass(frozen=True)
class Comparacion:
    data_a: List[PuntoGrafico]
    data_b: List[PuntoGrafico]


@dataclass(frozen=True)
class EstadoSync:
    """Estado del sync; se reemplaza completo en cada transición."""

    is_active: bool = False
    last_sync: Optional[datetime] = None
    next_sync: Optional[datetime] = None
    status: str = "idle"  # idle | syncing | error
    message: str = "Servicio no inicializado"
