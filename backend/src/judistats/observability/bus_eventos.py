# backend/src/judistats/observability/bus_eventos.py
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .logging_context import get_correlation_id

# Tópicos conocidos
EV_SYNC_STARTED = "sync.started"
EV_SYNC_COMPLETED = "sync.completed"
EV_SYNC_FAILED = "sync.failed"
EV_CONSULTA_FAILED = "consulta.failed"


@dataclass
class Evento:
    name: str              # e.g., "sync.completed"
    ts: float              # epoch seconds
    correlation_id: str    # cid del request o uuid del ciclo de sync
    payload: Dict[str, Any]


class EventBus:
    """Bus in-memory (pub/sub) sin garantías de entrega.

    Los handlers que fallan se registran y se ignoran: un destino de
    observabilidad nunca corta el flujo de negocio.
    """

    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Evento], None]]] = {}
        self._log = logging.getLogger("judistats.events.bus")

    def subscribe(self, topic: str, handler: Callable[[Evento], None]) -> None:
        self._subs.setdefault(topic, []).append(handler)

    def unsubscribe(self, topic: str, handler: Callable[[Evento], None]) -> None:
        handlers = self._subs.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, topic: str, payload: Dict[str, Any]) -> Evento:
        cid = payload.get("correlation_id") or get_correlation_id()
        evt = Evento(
            name=topic,
            ts=time.time(),
            correlation_id=cid if cid and cid != "-" else uuid.uuid4().hex,
            payload=payload,
        )
        handlers = list(self._subs.get(topic, []))
        if not handlers:
            self._log.debug("event=%s payload=%s", evt.name, evt.payload)
            return evt

        for handler in handlers:
            try:
                handler(evt)
            except Exception as e:
                self._log.warning("Handler error for topic=%s: %s", topic, e)
        return evt


BUS = EventBus()


def publicador(event: str, payload: Dict[str, Any]) -> Evento:
    """Punto único para publicar eventos desde el dominio."""
    return BUS.publish(event, payload)


def suscribir(topic: str, handler: Callable[[Evento], None]) -> None:
    BUS.subscribe(topic, handler)


__all__ = [
    "Evento",
    "EventBus",
    "BUS",
    "publicador",
    "suscribir",
    "EV_SYNC_STARTED",
    "EV_SYNC_COMPLETED",
    "EV_SYNC_FAILED",
    "EV_CONSULTA_FAILED",
]
