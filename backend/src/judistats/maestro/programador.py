"""judistats.maestro.programador

Temporizador del auto-sync maestro.

`SyncScheduler` dueño de su propio ciclo de vida: ``start()`` lanza un hilo
daemon que ejecuta la tarea cada ``interval_seconds`` hasta ``stop()``. Los
tests usan ``run_once()`` sin arrancar ningún hilo.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SyncScheduler:
    def __init__(self, task: Callable[[], None], interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds debe ser > 0")
        self.task = task
        self.interval_seconds = float(interval_seconds)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.next_run: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> bool:
        """Ejecuta la tarea una vez; False si falló (el error queda en el log)."""
        logger.info("Auto sync disparado")
        try:
            self.task()
            return True
        except Exception as e:
            logger.error("Auto sync falló: %s", e)
            return False

    def _loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_seconds):
            self.run_once()
            # stop() pudo vencer su join durante una tarea larga
            if not stop.is_set():
                self.next_run = datetime.now() + timedelta(seconds=self.interval_seconds)

    def start(self) -> None:
        """Arranca (o reinicia) el ciclo periódico."""
        if self.is_running:
            self.stop()
        self._stop = threading.Event()
        self.next_run = datetime.now() + timedelta(seconds=self.interval_seconds)
        self._thread = threading.Thread(target=self._loop, args=(self._stop,), name="judistats-auto-sync", daemon=True)
        self._thread.start()
        logger.info("Auto sync iniciado cada %.0f s", self.interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self.next_run = None
        logger.info("Auto sync detenido")
