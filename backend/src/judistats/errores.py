"""Excepciones del dominio de estadísticas judiciales.

La fachada de consultas atrapa casi todas ellas y degrada a resultados vacíos;
solo `PeriodoInvalidoError` escapa de `fetch_evolution_stats` y la capa HTTP la
traduce a 422. `ErrorMaestro` se traduce a 503.
"""

from __future__ import annotations


class ErrorCarga(RuntimeError):
    """Fallo al obtener un archivo (inexistente, HTTP no-2xx, red)."""


class SinDatosError(LookupError):
    """El filtro por dependencia/periodo no dejó filas."""


class PeriodoInvalidoError(ValueError):
    """Mes desconocido o rango de meses invertido."""


class ErrorMaestro(RuntimeError):
    """Fallo del pipeline maestro (planilla, credenciales o base de datos)."""
