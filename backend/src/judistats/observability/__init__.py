"""
Paquete de observabilidad.
Exporta el bus de eventos y los tópicos conocidos.
"""

from .bus_eventos import (
    BUS,
    EV_CONSULTA_FAILED,
    EV_SYNC_COMPLETED,
    EV_SYNC_FAILED,
    EV_SYNC_STARTED,
    publicador,
    suscribir,
)

__all__ = [
    "BUS",
    "EV_CONSULTA_FAILED",
    "EV_SYNC_COMPLETED",
    "EV_SYNC_FAILED",
    "EV_SYNC_STARTED",
    "publicador",
    "suscribir",
]
