"""judistats.maestro.servicio

Orquestador del pipeline maestro: Sheets -> base relacional -> datos de gráfico.

Política de fallos
------------------
- ``initialize`` prueba ambas conexiones; si alguna falla y el respaldo está
  desactivado, lanza `ErrorMaestro`. Con respaldo activo queda en "modo mock".
- ``perform_full_sync`` siempre propaga su error (como `ErrorMaestro`) tras
  dejar el estado en ``error`` y publicar ``sync.failed``.
- Las lecturas (gráfico, comparación) devuelven datos mock si la base no está
  conectada o si la consulta falla con respaldo activo.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from judistats.config import Settings
from judistats.errores import ErrorMaestro
from judistats.maestro.base_datos import MasterDatabaseService, ResumenEstadistica
from judistats.maestro.hojas import MasterSheetsService
from judistats.maestro.mock import mock_chart_data, mock_comparison_data
from judistats.maestro.programador import SyncScheduler
from judistats.maestro.tipos import Comparacion, EstadoSync, PuntoGrafico
from judistats.observability.bus_eventos import (
    EV_SYNC_COMPLETED,
    EV_SYNC_FAILED,
    EV_SYNC_STARTED,
    publicador,
)

logger = logging.getLogger(__name__)


def categoria_plantilla(plantilla: str) -> str:
    if "Previsional" in plantilla:
        return "previsional"
    if "Tributaria" in plantilla:
        return "tributaria"
    if "Sala" in plantilla:
        return "sala"
    return "other"


def nombre_corto_plantilla(plantilla: str) -> str:
    if "Previsional" in plantilla:
        return "Previsional"
    if "Tributaria" in plantilla:
        return "Tributaria"
    if "Sala" in plantilla:
        return "Sala"
    return "Otro"


def _a_punto(item: ResumenEstadistica) -> PuntoGrafico:
    return PuntoGrafico(
        id=f"{item.plantilla}-{item.numero}-{item.anio}-{item.mes}",
        object_type=item.plantilla,
        count=item.total_records,
        category=categoria_plantilla(item.plantilla),
        label=f"{nombre_corto_plantilla(item.plantilla)} #{item.numero}",
        value=item.total_records,
    )


class MasterDataService:
    def __init__(
        self,
        sheets: MasterSheetsService,
        database: MasterDatabaseService,
        *,
        master_sheet_id: str = "",
        fallback_mock: bool = True,
        auto_sync: bool = True,
        sync_interval_minutes: int = 5,
        scheduler: Optional[SyncScheduler] = None,
    ) -> None:
        self.sheets = sheets
        self.database = database
        self.master_sheet_id = master_sheet_id
        self.fallback_mock = fallback_mock
        self.auto_sync = auto_sync
        self.sync_interval_minutes = sync_interval_minutes
        self.scheduler = scheduler or SyncScheduler(self._auto_sync_task, max(sync_interval_minutes, 1) * 60)
        self._status = EstadoSync()
        # El auto-sync escribe el estado desde otro hilo.
        self._status_lock = threading.Lock()
        self._initialized = False

    # -- estado ------------------------------------------------------------

    def is_ready(self) -> bool:
        return self._initialized

    def get_sync_status(self) -> EstadoSync:
        with self._status_lock:
            status = self._status
        if status.is_active and self.scheduler.next_run is not None:
            status = replace(status, next_sync=self.scheduler.next_run)
        return status

    def _update_status(self, status: str, message: str) -> None:
        with self._status_lock:
            last_sync = datetime.now() if status == "idle" else self._status.last_sync
            self._status = replace(self._status, status=status, message=message, last_sync=last_sync)

    # -- ciclo de vida -----------------------------------------------------

    def test_connections(self) -> Dict[str, bool]:
        results = {"database": False, "google_sheets": False}
        try:
            results["database"] = self.database.test_connection()
        except Exception as e:
            logger.error("Prueba de base de datos falló: %s", e)
        try:
            results["google_sheets"] = self.sheets.is_ready()
        except Exception as e:
            logger.error("Prueba de Google Sheets falló: %s", e)
        return results

    def initialize(self) -> None:
        if self._initialized:
            return

        logger.info("Inicializando servicio maestro...")
        try:
            conexiones = self.test_connections()
            if not conexiones["database"]:
                logger.warning("Conexión a base de datos no disponible")
                if not self.fallback_mock:
                    raise ErrorMaestro("Se requiere conexión a la base de datos")
            if not conexiones["google_sheets"]:
                logger.warning("Conexión a Google Sheets no disponible")
                if not self.fallback_mock:
                    raise ErrorMaestro("Se requiere conexión a Google Sheets")

            ambas = conexiones["database"] and conexiones["google_sheets"]
            if ambas and self.master_sheet_id:
                self.perform_full_sync()
            if ambas and self.auto_sync:
                self.start_auto_sync()

            self._initialized = True
            self._update_status("idle", "Servicio inicializado correctamente")
            logger.info("Servicio maestro inicializado")
        except Exception as e:
            logger.error("Fallo inicializando servicio maestro: %s", e)
            self._update_status("error", f"Error de inicialización: {e}")
            if not self.fallback_mock:
                raise
            logger.info("Usando datos mock como respaldo")
            self._initialized = True

    def shutdown(self) -> None:
        self.stop_auto_sync()
        self.database.disconnect()

    # -- sync --------------------------------------------------------------

    def perform_full_sync(self, year: Optional[int] = None, month: Optional[int] = None) -> Dict[str, int]:
        """Sincroniza índice maestro y hojas individuales de un periodo.

        Por defecto usa el año/mes actual. Devuelve conteos por categoría.
        """
        if not self.master_sheet_id:
            raise ErrorMaestro("Master Sheet ID no configurado")

        today = date.today()
        target_year = year or today.year
        target_month = month or today.month

        self._update_status("syncing", "Sincronizando datos...")
        publicador(EV_SYNC_STARTED, {"anio": target_year, "mes": target_month})
        logger.info("Sync completo para %s/%s", target_year, target_month)

        try:
            entries = self.sheets.load_master_sheet(self.master_sheet_id)
            self.database.insert_master_sheet_data(entries)
            processed = self.sheets.process_all_statistics(
                self.master_sheet_id, target_year, target_month, entries=entries
            )
            self.database.process_all_statistics(processed)
        except Exception as e:
            self._update_status("error", f"Error en sincronización: {e}")
            publicador(EV_SYNC_FAILED, {"anio": target_year, "mes": target_month, "error": str(e)})
            if isinstance(e, ErrorMaestro):
                raise
            raise ErrorMaestro(f"Error en sincronización: {e}") from e

        conteos = {name: len(deps) for name, deps in processed.categorias()}
        self._update_status("idle", f"Sincronización completada para {target_year}/{target_month}")
        publicador(EV_SYNC_COMPLETED, {"anio": target_year, "mes": target_month, **conteos})
        return conteos

    def _auto_sync_task(self) -> None:
        self.perform_full_sync()

    def start_auto_sync(self) -> None:
        self.scheduler.start()
        with self._status_lock:
            self._status = replace(self._status, is_active=True, next_sync=self.scheduler.next_run)
        logger.info("Auto sync cada %d minutos", self.sync_interval_minutes)

    def stop_auto_sync(self) -> None:
        self.scheduler.stop()
        with self._status_lock:
            self._status = replace(self._status, is_active=False, next_sync=None)

    # -- lecturas ----------------------------------------------------------

    def get_chart_data(self, year: Optional[int] = None, month: Optional[int] = None) -> List[PuntoGrafico]:
        if not self.database.is_connected():
            logger.info("Base no conectada; devolviendo datos mock")
            return mock_chart_data()
        try:
            return [_a_punto(item) for item in self.database.get_statistics_summary(year, month)]
        except Exception as e:
            logger.error("Fallo obteniendo datos de gráfico: %s", e)
            if self.fallback_mock:
                return mock_chart_data()
            raise

    def get_comparison_data(
        self,
        year_a: Optional[int] = None,
        month_a: Optional[int] = None,
        year_b: Optional[int] = None,
        month_b: Optional[int] = None,
    ) -> Comparacion:
        if not self.database.is_connected():
            logger.info("Base no conectada; devolviendo comparación mock")
            return mock_comparison_data()
        try:
            return Comparacion(
                data_a=self.get_chart_data(year_a, month_a),
                data_b=self.get_chart_data(year_b, month_b),
            )
        except Exception as e:
            logger.error("Fallo obteniendo comparación: %s", e)
            if self.fallback_mock:
                return mock_comparison_data()
            raise

    def get_available_periods(self) -> List[Tuple[int, int]]:
        if not self.master_sheet_id:
            return []
        try:
            return self.sheets.get_available_periods(self.master_sheet_id)
        except Exception as e:
            logger.error("Fallo obteniendo periodos: %s", e)
            return []

    def get_statistics_summary(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> List[ResumenEstadistica]:
        if not self.database.is_connected():
            return []
        try:
            return self.database.get_statistics_summary(year, month)
        except Exception as e:
            logger.error("Fallo obteniendo resumen: %s", e)
            return []


def crear_servicio_maestro(settings: Settings) -> MasterDataService:
    """Construye el servicio maestro con sus dependencias reales."""
    return MasterDataService(
        MasterSheetsService(settings.service_account_email, settings.private_key),
        MasterDatabaseService(settings.database_url),
        master_sheet_id=settings.master_sheet_id,
        fallback_mock=settings.fallback_mock,
        auto_sync=settings.auto_sync,
        sync_interval_minutes=settings.sync_interval_minutes,
    )
