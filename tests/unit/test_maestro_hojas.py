"""tests.unit.test_maestro_hojas

MasterSheetsService con un cliente falso (sin red ni credenciales).
"""

from __future__ import annotations

import pytest

from judistats.errores import ErrorMaestro
from judistats.maestro.hojas import EntradaMaestra, MasterSheetsService

from maestro_fakes import FakeSheetsClient, sample_client


def test_is_ready():
    assert MasterSheetsService().is_ready() is False
    assert MasterSheetsService("svc@x.iam.gserviceaccount.com", "KEY").is_ready() is True
    assert MasterSheetsService(client=sample_client()).is_ready() is True


def test_sin_credenciales_lanza_error_maestro():
    with pytest.raises(ErrorMaestro):
        MasterSheetsService().load_master_sheet("MASTER")


def test_load_master_sheet_omite_filas_incompletas():
    entries = MasterSheetsService(client=sample_client()).load_master_sheet("MASTER")
    assert len(entries) == 6
    assert entries[0] == EntradaMaestra(
        plantilla="Juzgado Previsional", numero=1, anio=2024, mes=3,
        id_original="orig-p1", id_confirmado="p1", estado="OK",
    )
    assert all(e.plantilla and e.id_confirmado for e in entries)


def test_load_master_sheet_enteros_tolerantes():
    client = FakeSheetsClient({"M": [
        ["Plantilla", "Numero", "ANIO", "MES", "ID_CONFIRMADO"],
        ["Sala", "n/a", "2024", "3.0", "x"],
    ]})
    (entry,) = MasterSheetsService(client=client).load_master_sheet("M")
    assert (entry.numero, entry.anio, entry.mes) == (0, 2024, 3)
    assert entry.id_original == "" and entry.estado == ""


def test_load_master_sheet_error_del_cliente():
    with pytest.raises(ErrorMaestro):
        MasterSheetsService(client=FakeSheetsClient({})).load_master_sheet("MASTER")


def test_load_individual_sheet():
    svc = MasterSheetsService(client=sample_client())
    assert svc.load_individual_sheet("t1") == [{"Objeto": "Ejecución", "Cantidad": "7.5", "Obs": ""}]
    assert svc.load_individual_sheet("no-existe") == []


def test_process_all_statistics_clasifica():
    processed = MasterSheetsService(client=sample_client()).process_all_statistics("MASTER", 2024, 3)
    assert [d.id for d in processed.previsional] == ["p1", "p2"]
    assert [d.id for d in processed.tributaria] == ["t1"]
    assert [d.id for d in processed.sala] == ["s1"]
    assert len(processed.previsional[0].data) == 2
    assert processed.sala[0].data == []


def test_process_all_statistics_reutiliza_entradas():
    client = sample_client()
    svc = MasterSheetsService(client=client)
    entries = svc.load_master_sheet("MASTER")
    client.opened.clear()
    svc.process_all_statistics("MASTER", 2024, 2, entries=entries)
    assert client.opened == ["p1-feb"]


def test_get_available_periods():
    svc = MasterSheetsService(client=sample_client())
    assert svc.get_available_periods("MASTER") == [(2024, 3), (2024, 2)]
    assert MasterSheetsService(client=FakeSheetsClient({})).get_available_periods("MASTER") == []
