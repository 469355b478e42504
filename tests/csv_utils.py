# tests/csv_utils.py
"""Helpers para escribir CSV mensuales de prueba."""

import csv
from pathlib import Path
from typing import Dict, List

HEADER = ["Dependencia", "Codigo", "CodObjeto", "Naturaleza", "Objeto", "Período", "cantidad"]


def write_csv(base: Path, name: str, rows: List[Dict[str, str]], header: List[str] = HEADER) -> Path:
    """Escribe un CSV con el encabezado dado (celdas faltantes vacías)."""
    base.mkdir(parents=True, exist_ok=True)
    path = base / name
    with path.open("w", encoding="utf-8", newline="") as fh:
        w = csv.DictWriter(fh, fieldnames=header, extrasaction="ignore")
        w.writeheader()
        for r in rows:
            w.writerow({k: r.get(k, "") for k in header})
    return path


def fila(dep: str, obj: str, periodo: str, cant) -> Dict[str, str]:
    return {"Dependencia": dep, "Objeto": obj, "Período": periodo, "cantidad": str(cant)}
