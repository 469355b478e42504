"""
Módulo principal de la API de estadísticas judiciales.

Responsabilidades:
- Instanciación de FastAPI
- Registro de routers (/estadisticas sobre CSV, /maestro sobre Sheets + SQL)
- Endpoint global /health
- CORS para el frontend (orígenes desde JUDI_ALLOWED_ORIGINS)
- Middleware de Correlation-Id (X-Correlation-Id) y destino de logging para
  los eventos sync.* y consulta.failed
- Inicialización opcional del servicio maestro (JUDI_ENABLE_MASTER=1)
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from judistats.app.dependencias import get_consultas, get_servicio_maestro, get_settings
from judistats.app.logging_config import setup_logging
from judistats.observability.destinos.log_handler import wire_logging_destination
from judistats.observability.logging_context import install_logrecord_factory
from judistats.observability.middleware_correlation import CorrelationIdMiddleware

from .routers import estadisticas, maestro

log = logging.getLogger("judistats")

app = FastAPI(title="Estadísticas Judiciales API", version=os.getenv("API_VERSION", "0.1.0"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=600,
)

# Agrega/propaga X-Correlation-Id y lo expone en request.state.correlation_id
app.add_middleware(CorrelationIdMiddleware)


@app.on_event("startup")
def _startup() -> None:
    """
    - Configura logging (dictConfig con filtro cid)
    - Instala LogRecordFactory que inyecta correlation_id desde ContextVar
    - Conecta el destino de logging a los eventos del bus
    - Inicializa el servicio maestro si está habilitado
    """
    setup_logging()
    install_logrecord_factory()
    wire_logging_destination()

    if get_settings().enable_master:
        try:
            get_servicio_maestro().initialize()
        except Exception as e:
            # Sin respaldo mock el servicio lanza; la API sigue sirviendo /estadisticas.
            log.error("Servicio maestro no disponible: %s", e)


@app.on_event("shutdown")
def _shutdown() -> None:
    # Cierra el httpx.Client de FuenteHttp (no-op para FuenteDirectorio).
    get_consultas().close()
    if get_settings().enable_master:
        get_servicio_maestro().shutdown()


@app.get("/health")
def health() -> dict:
    """Endpoint de salud: permite saber si la API está arriba."""
    return {"status": "ok"}


app.include_router(estadisticas.router, prefix="/estadisticas", tags=["estadisticas"])
app.include_router(maestro.router,      prefix="/maestro",      tags=["maestro"])
