"""tests.unit.test_programador"""

from __future__ import annotations

import threading

import pytest

from judistats.maestro.programador import SyncScheduler


def test_run_once_reporta_exito_y_fallo():
    llamadas = []
    assert SyncScheduler(lambda: llamadas.append(1), 60).run_once() is True
    assert llamadas == [1]

    def boom():
        raise RuntimeError("x")

    assert SyncScheduler(boom, 60).run_once() is False


def test_intervalo_invalido():
    with pytest.raises(ValueError):
        SyncScheduler(lambda: None, 0)


def test_start_stop_ejecuta_periodicamente():
    ejecutado = threading.Event()
    sched = SyncScheduler(ejecutado.set, 0.01)
    sched.start()
    try:
        assert sched.is_running
        assert sched.next_run is not None
        assert ejecutado.wait(2.0)
    finally:
        sched.stop()
    assert not sched.is_running
    assert sched.next_run is None


def test_start_reinicia():
    sched = SyncScheduler(lambda: None, 60)
    sched.start()
    primero = sched._thread
    sched.start()
    try:
        assert sched._thread is not primero
        assert not primero.is_alive()
    finally:
        sched.stop()


def test_stop_durante_la_tarea_no_reprograma():
    stop = threading.Event()
    sched = SyncScheduler(stop.set, 0.01)
    sched._loop(stop)
    assert sched.next_run is None
