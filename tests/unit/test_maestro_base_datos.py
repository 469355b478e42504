"""tests.unit.test_maestro_base_datos

MasterDatabaseService sobre un SQLite temporal.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from judistats.errores import ErrorMaestro
from judistats.maestro.base_datos import MasterDatabaseService, parse_numero
from judistats.maestro.hojas import DatosDependencia, EntradaMaestra, EstadisticasProcesadas


@pytest.fixture
def db(tmp_path):
    svc = MasterDatabaseService(f"sqlite:///{(tmp_path / 'sub' / 'm.db').as_posix()}")
    svc.connect()
    yield svc
    svc.disconnect()


def _entrada(plantilla="Juzgado Previsional", numero=1, anio=2024, mes=3, idc="p1"):
    return EntradaMaestra(plantilla, numero, anio, mes, "", idc, "")


def _dep(idc="p1", plantilla="Juzgado Previsional", numero=1, anio=2024, mes=3, data=None):
    return DatosDependencia(idc, plantilla, numero, anio, mes, data or [])


def _scalar(db, sql, **params):
    with db._require().connect() as conn:
        return conn.execute(text(sql), params).scalar()


def test_parse_numero():
    assert parse_numero("12.5 casos") == 12.5
    assert parse_numero("-3") == -3.0
    assert parse_numero(".5") == 0.5
    assert parse_numero("abc") is None


def test_sin_conexion_lanza():
    svc = MasterDatabaseService("sqlite://")
    assert svc.is_connected() is False
    with pytest.raises(ErrorMaestro):
        svc.get_statistics_summary()


def test_test_connection_conecta(tmp_path):
    svc = MasterDatabaseService(f"sqlite:///{(tmp_path / 'x.db').as_posix()}")
    assert svc.test_connection() is True
    assert svc.is_connected() is True
    svc.disconnect()
    assert svc.is_connected() is False


def test_insert_master_reemplaza_todo(db):
    db.insert_master_sheet_data([_entrada(idc="a"), _entrada(numero=2, idc="b")])
    db.insert_master_sheet_data([_entrada(idc="c")])
    assert _scalar(db, "SELECT COUNT(*) FROM master_sheets") == 1
    assert _scalar(db, "SELECT id_confirmado FROM master_sheets") == "c"
    assert db.get_last_sync_time("master_sheet") is not None


def test_insert_master_clave_repetida_gana_la_ultima(db):
    db.insert_master_sheet_data([_entrada(idc="viejo"), _entrada(idc="nuevo")])
    assert _scalar(db, "SELECT id_confirmado FROM master_sheets") == "nuevo"
    registrados = _scalar(
        db,
        "SELECT records_processed FROM master_sync_log WHERE sync_type = :t AND status = 'success'",
        t="master_sheet",
    )
    assert registrados == 1


def test_insert_dependency_statistics_aplanado(db):
    dep = _dep(data=[
        {"Objeto": "Amparo", "Cantidad": "10", "Obs": ""},
        {"Objeto": "Reajuste", "Cantidad": "5"},
    ])
    n = db.insert_dependency_statistics(dep)
    # campos repetidos en filas posteriores pisan a los anteriores; vacíos no se guardan
    assert n == 2
    assert _scalar(db, "SELECT field_value FROM dependency_statistics WHERE field_name = 'Objeto'") == "Reajuste"
    assert float(_scalar(db, "SELECT numeric_value FROM dependency_statistics WHERE field_name = 'Cantidad'")) == 5.0
    assert _scalar(db, "SELECT numeric_value FROM dependency_statistics WHERE field_name = 'Objeto'") is None

    db.insert_dependency_statistics(_dep(data=[{"Objeto": "X"}]))
    assert _scalar(db, "SELECT COUNT(*) FROM dependency_statistics WHERE sheet_id = 'p1'") == 1


def test_process_all_statistics_y_agregados(db):
    processed = EstadisticasProcesadas(
        previsional=[
            _dep("p1", data=[{"a": "1"}, {"a": "2"}]),
            _dep("p2", numero=2, data=[{"a": "1"}]),
        ],
        sala=[_dep("s1", plantilla="Sala", data=[])],
    )
    db.process_all_statistics(processed)

    rows = db.get_aggregated_data(plantilla="previsional")
    metrics = {r["metric_name"]: r["metric_value"] for r in rows}
    assert metrics == {
        "avg_records_per_dependency": 1.5,
        "total_dependencies": 2.0,
        "total_records": 3.0,
    }
    assert all(r["count_dependencies"] == 2 for r in rows)
    assert [r["metric_name"] for r in rows] == sorted(metrics)
    assert {r["plantilla"] for r in db.get_aggregated_data()} == {"previsional", "sala"}
    assert db.get_aggregated_data(year=1999) == []

    assert db.get_last_sync_time("individual_sheets") is not None
    assert db.get_last_sync_time("aggregation") is not None
    assert db.get_last_sync_time("master_sheet") is None


def test_statistics_summary_left_join_y_orden(db):
    db.insert_master_sheet_data([
        _entrada("Juzgado Tributaria", 1, 2024, 3, "t1"),
        _entrada("Juzgado Previsional", 2, 2024, 3, "p2"),
        _entrada("Juzgado Previsional", 1, 2024, 2, "p1-feb"),
        _entrada("Juzgado Previsional", 1, 2024, 3, "p1"),
        _entrada("Juzgado Previsional", 1, 2023, 12, "p1-old"),
    ])
    db.insert_dependency_statistics(_dep("p1", data=[{"a": "1", "b": "2"}]))

    summary = db.get_statistics_summary()
    keys = [(s.plantilla, s.numero, s.anio, s.mes) for s in summary]
    assert keys == [
        ("Juzgado Previsional", 1, 2024, 3),
        ("Juzgado Previsional", 1, 2024, 2),
        ("Juzgado Previsional", 1, 2023, 12),
        ("Juzgado Previsional", 2, 2024, 3),
        ("Juzgado Tributaria", 1, 2024, 3),
    ]
    totals = {(s.plantilla, s.numero, s.anio, s.mes): s.total_records for s in summary}
    assert totals[("Juzgado Previsional", 1, 2024, 3)] == 2
    assert totals[("Juzgado Tributaria", 1, 2024, 3)] == 0
    assert all(s.last_updated is not None for s in summary)


def test_statistics_summary_filtros(db):
    db.insert_master_sheet_data([
        _entrada(anio=2024, mes=3, idc="a"),
        _entrada(anio=2024, mes=2, idc="b"),
        _entrada(anio=2023, mes=3, idc="c"),
    ])
    assert len(db.get_statistics_summary(2024, 3)) == 1
    assert len(db.get_statistics_summary(2024)) == 2
    # el mes solo filtra junto con el año
    assert len(db.get_statistics_summary(None, 3)) == 3
