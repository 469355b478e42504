# backend/src/judistats/app/dependencias.py
"""Proveedores de dependencias (FastAPI ``Depends``) para los routers.

Cada proveedor se construye una vez por proceso (``lru_cache``). En tests se
reemplazan con ``app.dependency_overrides`` o se limpian con ``cache_clear``.
"""

from __future__ import annotations

from functools import lru_cache

from judistats.config import Settings, load_settings
from judistats.dashboard.consultas import ConsultasEstadisticas
from judistats.datos.fuentes import fuente_desde_settings
from judistats.maestro.servicio import MasterDataService, crear_servicio_maestro


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_consultas() -> ConsultasEstadisticas:
    return ConsultasEstadisticas(fuente_desde_settings(get_settings()))


@lru_cache(maxsize=1)
def get_servicio_maestro() -> MasterDataService:
    return crear_servicio_maestro(get_settings())


def reset_cache() -> None:
    """Olvida settings y servicios construidos (útil tras cambiar el entorno)."""
    for fn in (get_settings, get_consultas, get_servicio_maestro):
        fn.cache_clear()
