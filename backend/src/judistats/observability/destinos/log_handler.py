"""
Destino de observabilidad vía logging.

Se suscribe al bus in-memory para:
  - sync.started | sync.completed | sync.failed
  - consulta.failed

y escribe cada evento en el logger ``judistats.events`` con el correlation_id
del evento. Idempotente (_WIRED) para no duplicar suscripciones con --reload.
"""

import logging
from typing import Tuple

from ..bus_eventos import (
    BUS,
    EV_CONSULTA_FAILED,
    EV_SYNC_COMPLETED,
    EV_SYNC_FAILED,
    EV_SYNC_STARTED,
    Evento,
)
from ..logging_context import correlation_id_var

logger = logging.getLogger("judistats.events")

_WIRED = False

TOPICS: Tuple[str, ...] = (
    EV_SYNC_STARTED,
    EV_SYNC_COMPLETED,
    EV_SYNC_FAILED,
    EV_CONSULTA_FAILED,
)


def _to_log(evt: Evento) -> None:
    # El cid viaja por el ContextVar: con la LogRecordFactory instalada,
    # extra={"correlation_id": ...} chocaría con el atributo ya presente.
    level = logging.WARNING if evt.name.endswith(".failed") else logging.INFO
    token = correlation_id_var.set(evt.correlation_id)
    try:
        logger.log(level, "%s %s", evt.name, evt.payload)
    finally:
        correlation_id_var.reset(token)


def wire_logging_destination() -> None:
    """Conecta una única vez el handler de logging a los tópicos conocidos."""
    global _WIRED
    if _WIRED:
        return

    for topic in TOPICS:
        BUS.subscribe(topic, _to_log)

    _WIRED = True
    logger.info("Observability logging wired for topics: %s", TOPICS)
