"""tests.unit.test_resolvedor

Resolución ``(año, mes) -> nombre de archivo`` contra fuentes locales y HTTP.
"""

from __future__ import annotations

import json
from typing import List
from urllib.parse import unquote

import httpx
import pytest

from judistats.datos.fuentes import FuenteDirectorio, FuenteHttp
from judistats.datos.resolvedor import ResolvedorManifiesto, ResolvedorNombres, file_name_variants
from judistats.errores import ErrorCarga


def test_variantes_en_orden():
    assert file_name_variants(2021, 3) == [
        "Datos 202103 - Hoja1.csv",
        "Datos 202103 - Hoja 1.csv",
        "Datos 202103 - Sheet1.csv",
        "Datos 202103 - Sheet 1.csv",
        "Datos 202103 - Hoja1 .csv",
        "Datos 202103 -Hoja1.csv",
        "Datos 202103- Hoja1.csv",
        "Datos 202103.csv",
    ]


def test_primera_variante_existente_gana(tmp_path):
    (tmp_path / "Datos 202103 - Sheet1.csv").write_text("x", encoding="utf-8")
    (tmp_path / "Datos 202103.csv").write_text("x", encoding="utf-8")
    assert ResolvedorNombres(FuenteDirectorio(tmp_path)).resolve(2021, 3) == "Datos 202103 - Sheet1.csv"


def test_sin_archivo_devuelve_none(tmp_path):
    assert ResolvedorNombres(FuenteDirectorio(tmp_path)).resolve(2021, 3) is None


def test_mes_fuera_de_rango_devuelve_none(tmp_path):
    assert ResolvedorNombres(FuenteDirectorio(tmp_path)).resolve(2021, 13) is None


def test_idempotente_mientras_no_cambian_los_archivos(tmp_path):
    (tmp_path / "Datos 202103 - Hoja 1.csv").write_text("x", encoding="utf-8")
    r = ResolvedorNombres(FuenteDirectorio(tmp_path))
    assert r.resolve(2021, 3) == r.resolve(2021, 3) == "Datos 202103 - Hoja 1.csv"

    # Sin caché: un archivo nuevo con mayor prioridad se ve en la siguiente llamada.
    (tmp_path / "Datos 202103 - Hoja1.csv").write_text("x", encoding="utf-8")
    assert r.resolve(2021, 3) == "Datos 202103 - Hoja1.csv"


class _FuenteRota:
    """Falla en las primeras variantes; la última existe."""

    def __init__(self) -> None:
        self.sondeos: List[str] = []

    def existe(self, nombre: str) -> bool:
        self.sondeos.append(nombre)
        if nombre.endswith("Sheet1.csv"):
            return True
        raise OSError("red caída")

    def leer_texto(self, nombre: str) -> str:
        raise ErrorCarga(nombre)


def test_excepcion_de_sondeo_cuenta_como_ausencia():
    fuente = _FuenteRota()
    assert ResolvedorNombres(fuente).resolve(2014, 8) == "Datos 201408 - Sheet1.csv"
    assert fuente.sondeos[:3] == [
        "Datos 201408 - Hoja1.csv",
        "Datos 201408 - Hoja 1.csv",
        "Datos 201408 - Sheet1.csv",
    ]


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def _fuente_http(archivos: dict) -> FuenteHttp:
    def handler(request: httpx.Request) -> httpx.Response:
        nombre = unquote(request.url.path.rsplit("/", 1)[-1])
        if nombre in archivos:
            return httpx.Response(200, content=archivos[nombre].encode("utf-8"))
        return httpx.Response(404)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return FuenteHttp("http://csv.local/data/", client=client)


def test_http_resuelve_y_lee():
    fuente = _fuente_http({"Datos 201409 - Hoja 1.csv": "Dependencia,cantidad\nX,1\n"})
    assert ResolvedorNombres(fuente).resolve(2014, 9) == "Datos 201409 - Hoja 1.csv"
    assert "Dependencia" in fuente.leer_texto("Datos 201409 - Hoja 1.csv")


def test_http_no_2xx_es_error_de_carga():
    fuente = _fuente_http({})
    assert fuente.existe("nada.csv") is False
    with pytest.raises(ErrorCarga):
        fuente.leer_texto("nada.csv")


def test_http_error_de_transporte():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("sin red", request=request)

    fuente = FuenteHttp("http://csv.local", client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert fuente.existe("Datos 201409 - Hoja1.csv") is False
    with pytest.raises(ErrorCarga):
        fuente.leer_texto("Datos 201409 - Hoja1.csv")
    assert ResolvedorNombres(fuente).resolve(2014, 9) is None


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------

def test_manifiesto(tmp_path):
    (tmp_path / "manifest.json").write_text(
        json.dumps({"202103": "Datos 202103 (final).csv"}), encoding="utf-8"
    )
    r = ResolvedorManifiesto(FuenteDirectorio(tmp_path))
    assert r.resolve(2021, 3) == "Datos 202103 (final).csv"
    assert r.resolve(2021, 4) is None


def test_manifiesto_ausente_o_corrupto(tmp_path):
    r = ResolvedorManifiesto(FuenteDirectorio(tmp_path))
    assert r.resolve(2021, 3) is None
    (tmp_path / "manifest.json").write_text("{no-json", encoding="utf-8")
    assert r.resolve(2021, 3) is None
