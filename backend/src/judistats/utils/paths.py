"""
judistats.utils.paths
=====================

Resolver único de rutas del backend.

Reglas de resolución
--------------------
- ``repo_root`` se infiere:
  1) ``JUDI_PROJECT_ROOT`` si está definido.
  2) Subiendo desde este archivo buscando ``pyproject.toml`` o carpeta ``backend/``.
  3) Fallback: ``Path.cwd()``.
- Los CSV mensuales viven en ``JUDI_DATA_DIR`` o, por defecto, en ``<repo_root>/data``.

Este módulo es intencionalmente **pequeño** y **sin side effects** (no crea carpetas).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
import os
import re


_SEGMENT_RE = re.compile(r"[^\w .()-]+")


def safe_file_name(value: Any) -> str:
    """Convierte `value` en un nombre de archivo seguro (sin separadores de path).

    A diferencia de un slug, respeta espacios y acentos porque los CSV se
    publican con nombres como ``Datos 202103 - Hoja1.csv``.
    """
    s = str(value or "").strip()
    s = s.replace("\\", "_").replace("/", "_")
    s = s.replace("..", "_")
    s = _SEGMENT_RE.sub("_", s)
    return s or "x"


def _find_project_root() -> Path:
    """Encuentra una raíz razonable del repo.

    Orden:
    1) JUDI_PROJECT_ROOT si existe.
    2) Buscar hacia arriba un dir con pyproject.toml o backend/.
    3) Fallback al cwd.
    """
    env_root = os.getenv("JUDI_PROJECT_ROOT")
    if env_root:
        p = Path(env_root).expanduser().resolve()
        if p.exists():
            return p

    here = Path(__file__).resolve()
    for p in (here, *here.parents):
        if (p / "pyproject.toml").exists() or (p / "backend").is_dir():
            return p

    return Path.cwd().resolve()


def project_root(*, refresh: bool = False) -> Path:
    """Retorna la raíz del repo (ver `_find_project_root`)."""
    global _PROJECT_ROOT_CACHE
    if refresh or _PROJECT_ROOT_CACHE is None:
        _PROJECT_ROOT_CACHE = _find_project_root()
    return _PROJECT_ROOT_CACHE


_PROJECT_ROOT_CACHE: Optional[Path] = None


def data_dir() -> Path:
    """Directorio de los CSV mensuales.

    - Prioriza JUDI_DATA_DIR si está definido (se relee en cada llamada).
    - Si no, usa <repo_root>/data.
    """
    env_dir = os.getenv("JUDI_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return (project_root() / "data").resolve()


def default_database_url() -> str:
    """URL SQLAlchemy por defecto: SQLite dentro de ``data/``."""
    return f"sqlite:///{(data_dir() / 'estadisticas.db').as_posix()}"
