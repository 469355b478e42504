# tests/conftest.py
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from judistats.app.dependencias import get_consultas
from judistats.app.main import app
from judistats.dashboard.consultas import ConsultasEstadisticas
from judistats.datos.fuentes import FuenteDirectorio


@pytest.fixture
def datos_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def consultas(datos_dir: Path) -> ConsultasEstadisticas:
    return ConsultasEstadisticas(FuenteDirectorio(datos_dir))


@pytest.fixture
def client(consultas: ConsultasEstadisticas):
    app.dependency_overrides[get_consultas] = lambda: consultas
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
