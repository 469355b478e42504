# backend/src/judistats/app/schemas/estadisticas.py
"""Esquemas (Pydantic) para la API de estadísticas sobre CSV mensuales.

Contratos de respuesta de ``/estadisticas/*``. Los nombres de campo siguen a
los que ya consume el frontend (``category``, ``value``, ``dependency``...).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class DependencyStatOut(BaseModel):
    """Un ítem del top de categorías de una dependencia."""

    category: str = Field(..., description="Objeto/tipo de causa ('Sin categoría' si vacío).")
    value: int = Field(..., description="Suma de cantidades de la categoría.")


class ComparisonStatOut(BaseModel):
    dependency: str = Field(..., description="Dependencia solicitada.")
    category: str
    value: int


class EvolutionPointOut(BaseModel):
    """Un punto mensual de la serie de evolución."""

    period: str = Field(..., description="Código YYYYMM.")
    value: int = Field(..., description="Total del mes (0 si el archivo no existe).")
    year: str
    month: str = Field(..., description="Nombre del mes en castellano.")


class ListaTextos(BaseModel):
    """Contrato para catálogos simples (dependencias, tipos de objeto)."""

    items: List[str] = Field(default_factory=list)


class PeriodoOut(BaseModel):
    month: str
    year: str


class PeriodosArchivo(BaseModel):
    """Contrato para ``GET /estadisticas/periodos``."""

    archivo: str
    items: List[PeriodoOut] = Field(default_factory=list, description="Del más reciente al más antiguo.")


class ArchivoStatus(BaseModel):
    """Contrato para ``GET /estadisticas/archivo``."""

    archivo: str
    disponible: bool = Field(..., description="True si la fuente reconoce el archivo.")
    total_records: int = 0
    dependencies: int = 0
    periods: int = 0
    last_update: Optional[str] = Field(None, description="Fecha de la consulta o 'No disponible'.")
