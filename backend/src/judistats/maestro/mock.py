"""Datos estáticos de respaldo cuando la base maestra no está disponible."""

from __future__ import annotations

import random
from dataclasses import replace
from typing import List, Optional

from judistats.maestro.tipos import Comparacion, PuntoGrafico


def mock_chart_data() -> List[PuntoGrafico]:
    return [
        PuntoGrafico("prev-1", "Previsional", 150, "previsional", "Previsional #1", 150),
        PuntoGrafico("prev-2", "Previsional", 120, "previsional", "Previsional #2", 120),
        PuntoGrafico("trib-1", "Tributaria", 200, "tributaria", "Tributaria #1", 200),
        PuntoGrafico("trib-2", "Tributaria", 180, "tributaria", "Tributaria #2", 180),
        PuntoGrafico("sala-1", "Sala", 90, "sala", "Sala #1", 90),
        PuntoGrafico("sala-2", "Sala", 85, "sala", "Sala #2", 85),
    ]


def mock_comparison_data(rng: Optional[random.Random] = None) -> Comparacion:
    """Periodo A fijo; periodo B con ruido de +-10 sobre los mismos puntos."""
    rng = rng or random.Random()
    data_a = mock_chart_data()
    data_b = []
    for p in data_a:
        delta = rng.randint(-10, 9)
        data_b.append(replace(p, id=f"{p.id}-b", count=p.count + delta, value=p.value + delta))
    return Comparacion(data_a=data_a, data_b=data_b)
