"""tests.unit.test_cargador

Accessors con preferencia por presencia de clave y parseo tolerante de CSV.
"""

from __future__ import annotations

import logging
import unicodedata

import pytest

from judistats.datos.agregaciones import aggregate
from judistats.datos.cargador import (
    CargadorCsv,
    a_dataframe,
    cantidad,
    dependencia,
    objeto,
    parse_csv,
    parse_entero,
    periodo,
)
from judistats.datos.fuentes import FuenteDirectorio
from judistats.errores import ErrorCarga


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------

def test_cantidad_solo_mayuscula():
    assert cantidad({"Cantidad": "42"}) == 42


def test_cantidad_minuscula_gana():
    assert cantidad({"cantidad": "5", "Cantidad": "99"}) == 5


def test_cantidad_presente_pero_vacia_no_cae_al_respaldo():
    assert cantidad({"cantidad": "", "Cantidad": "99"}) == 0


def test_cantidad_ausente():
    assert cantidad({}) == 0


@pytest.mark.parametrize(
    "raw,esperado",
    [("42", 42), ("7.9", 7), ("12abc", 12), ("-3", -3), (" 8 ", 8), ("abc", 0), ("", 0), (None, 0)],
)
def test_parse_entero_por_prefijo(raw, esperado):
    assert parse_entero(raw) == esperado


def test_periodo_acento_y_respaldo():
    assert periodo({"Periodo": "202103"}) == "202103"
    assert periodo({"Período": "202001", "Periodo": "199901"}) == "202001"
    assert periodo({}) == ""


def test_dependencia_y_objeto_recortados():
    row = {"Dependencia": "  JUZGADO 1 ", "Objeto": " Amparo "}
    assert dependencia(row) == "JUZGADO 1"
    assert objeto(row) == "Amparo"
    assert dependencia({}) == ""


# ---------------------------------------------------------------------------
# parse_csv
# ---------------------------------------------------------------------------

def test_parse_csv_basico_recorta_y_salta_lineas_vacias():
    texto = " Dependencia , Objeto ,Período,cantidad\nX , Tipo1 ,202001, 5\n\nX,Tipo2,202001,2\n"
    rows = parse_csv(texto)
    assert rows == [
        {"Dependencia": "X", "Objeto": "Tipo1", "Período": "202001", "cantidad": "5"},
        {"Dependencia": "X", "Objeto": "Tipo2", "Período": "202001", "cantidad": "2"},
    ]


def test_parse_csv_no_tipa_dinamicamente():
    rows = parse_csv("Dependencia,Período,cantidad\nX,202001,007\n")
    assert rows[0]["Período"] == "202001"
    assert rows[0]["cantidad"] == "007"


def test_parse_csv_bom_y_nfc_en_encabezados():
    decomposed = unicodedata.normalize("NFD", "Período")
    texto = "\ufeffDependencia," + decomposed + ",cantidad\nX,202103,1\n"
    rows = parse_csv(texto)
    assert periodo(rows[0]) == "202103"
    assert "Dependencia" in rows[0]


def test_parse_csv_punto_y_coma():
    rows = parse_csv("Dependencia;Objeto;Periodo;Cantidad\nX;T;202001;3\n")
    assert cantidad(rows[0]) == 3
    assert periodo(rows[0]) == "202001"


def test_parse_csv_filas_irregulares_no_abortan(caplog):
    texto = "Dependencia,Objeto,Período,cantidad\nX,T,202001\nX,T,202001,4,extra\n"
    with caplog.at_level(logging.WARNING):
        rows = parse_csv(texto, origen="irregular.csv")
    assert len(rows) == 2
    assert rows[0]["cantidad"] == ""
    assert rows[1]["cantidad"] == "4"
    assert "irregular.csv" in caplog.text


def test_parse_csv_delimitador_final_en_todas_las_filas():
    texto = "Dependencia,Objeto,Período,cantidad\nX,Tipo1,202001,5,\nX,Tipo2,202001,2,\n"
    rows = parse_csv(texto)
    assert rows == [
        {"Dependencia": "X", "Objeto": "Tipo1", "Período": "202001", "cantidad": "5"},
        {"Dependencia": "X", "Objeto": "Tipo2", "Período": "202001", "cantidad": "2"},
    ]
    assert aggregate(rows, "X", "202001") == {"Tipo1": 5, "Tipo2": 2}


def test_parse_csv_vacio():
    assert parse_csv("") == []
    assert parse_csv("Dependencia,cantidad\n") == []


# ---------------------------------------------------------------------------
# CargadorCsv
# ---------------------------------------------------------------------------

def test_load_sin_nombre_lanza():
    with pytest.raises(ErrorCarga):
        CargadorCsv(FuenteDirectorio(".")).load(None)


def test_load_archivo_inexistente_lanza(tmp_path):
    with pytest.raises(ErrorCarga):
        CargadorCsv(FuenteDirectorio(tmp_path)).load("Datos 202001 - Hoja1.csv")


def test_load_latin1(tmp_path):
    (tmp_path / "x.csv").write_bytes("Dependencia,Objeto,Período,cantidad\nX,Daños,202001,1\n".encode("latin-1"))
    rows = CargadorCsv(FuenteDirectorio(tmp_path)).load("x.csv")
    assert rows[0]["Objeto"] == "Daños"
    assert periodo(rows[0]) == "202001"


def test_a_dataframe_columnas_canonicas():
    df = a_dataframe([{"Dependencia": " X ", "Objeto": "", "Periodo": "202001", "Cantidad": "3"}])
    assert list(df.columns) == ["dependencia", "objeto", "periodo", "cantidad"]
    assert df.iloc[0].to_dict() == {"dependencia": "X", "objeto": "", "periodo": "202001", "cantidad": 3}
    assert a_dataframe([]).empty
