"""tests.unit.test_cmd_sync_maestro"""

from __future__ import annotations

import pytest

from judistats.app.jobs import cmd_sync_maestro
from judistats.maestro.base_datos import MasterDatabaseService
from judistats.maestro.hojas import MasterSheetsService
from judistats.maestro.servicio import MasterDataService

from maestro_fakes import sample_client


@pytest.fixture
def servicio(tmp_path, monkeypatch):
    svc = MasterDataService(
        MasterSheetsService(client=sample_client()),
        MasterDatabaseService(f"sqlite:///{(tmp_path / 'cli.db').as_posix()}"),
        master_sheet_id="MASTER",
        auto_sync=False,
    )
    monkeypatch.setattr(cmd_sync_maestro, "setup_logging", lambda: None)
    monkeypatch.setattr(cmd_sync_maestro, "crear_servicio_maestro", lambda settings: svc)
    return svc


def test_cli_sync_ok(servicio, capsys):
    assert cmd_sync_maestro.main(["--anio", "2024", "--mes", "3"]) == 0
    out = capsys.readouterr().out
    assert "[OK] Sync completado" in out
    assert "'previsional': 2" in out
    assert servicio.database.is_connected() is False


def test_cli_sync_sin_planilla_sale_con_1(servicio):
    servicio.master_sheet_id = ""
    assert cmd_sync_maestro.main(["--anio", "2024", "--mes", "3"]) == 1


def test_cli_mes_fuera_de_rango(servicio):
    with pytest.raises(SystemExit):
        cmd_sync_maestro.main(["--mes", "13"])
