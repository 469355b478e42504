# backend/src/judistats/observability/logging_context.py
"""
Contexto de logging por request.

- `correlation_id_var` guarda el X-Correlation-Id del request actual.
- `CorrelationIdLogFilter` garantiza que todo LogRecord tenga `correlation_id`
  (lo usa el formatter de ``logging_config``).
- `install_logrecord_factory` inyecta el valor del ContextVar en cada record.
"""
from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


class CorrelationIdLogFilter(logging.Filter):
    """Completa 'correlation_id' con '-' si el record no lo trae."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def set_correlation_id(cid: Optional[str]) -> None:
    """Fija el correlation_id del contexto actual (p.ej. en jobs CLI)."""
    correlation_id_var.set((cid or "").strip() or "-")


def get_correlation_id() -> str:
    return correlation_id_var.get()


def install_logrecord_factory() -> None:
    """
    Instala una LogRecordFactory que agrega 'correlation_id' **sin sobrescribir**
    el que venga por extra=... Idempotente: no encadena factories propias.
    """
    old_factory = logging.getLogRecordFactory()
    if getattr(old_factory, "_judistats_cid", False):
        return

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        current = record.__dict__.get("correlation_id")
        if not current or current == "-":
            record.__dict__["correlation_id"] = correlation_id_var.get() or "-"
        return record

    record_factory._judistats_cid = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(record_factory)
