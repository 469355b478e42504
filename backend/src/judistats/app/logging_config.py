# backend/src/judistats/app/logging_config.py
import logging
import logging.config
import os

_LEVEL = os.getenv("JUDI_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,  # mantiene loggers de uvicorn/fastapi
    "filters": {
        "cid": {
            "()": "judistats.observability.logging_context.CorrelationIdLogFilter"
        }
    },
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s [cid=%(correlation_id)s] %(name)s: %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": _LEVEL,
            "filters": ["cid"],
            "formatter": "default",
        },
    },
    "root": {
        "level": _LEVEL,
        "handlers": ["console"]
    },
    "loggers": {
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "judistats": {"level": _LEVEL, "handlers": ["console"], "propagate": False},
    },
}


def setup_logging():
    logging.config.dictConfig(LOGGING)
