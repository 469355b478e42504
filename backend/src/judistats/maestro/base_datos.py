"""judistats.maestro.base_datos

Almacén relacional del pipeline maestro (SQLAlchemy Core).

Tablas
------
- ``master_sheets``: índice de la planilla maestra, único por
  ``(plantilla, numero, anio, mes)``.
- ``dependency_statistics``: cada celda no vacía de cada hoja individual,
  aplanada a ``(sheet_id, field_name) -> field_value / numeric_value``.
- ``aggregated_statistics``: métricas precalculadas por categoría y periodo.
- ``master_sync_log``: auditoría de cada sincronización.

Cada sync hace *delete-then-insert*; no hay merge incremental. Todas las
consultas son ``text()`` parametrizadas para que el mismo SQL corra en SQLite
(por defecto) y en MySQL (``mysql+pymysql://...``).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    func,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from judistats.errores import ErrorMaestro
from judistats.maestro.hojas import DatosDependencia, EntradaMaestra, EstadisticasProcesadas

logger = logging.getLogger(__name__)


SYNC_MASTER_SHEET = "master_sheet"
SYNC_INDIVIDUAL_SHEETS = "individual_sheets"
SYNC_AGGREGATION = "aggregation"

_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


metadata = MetaData()

master_sheets = Table(
    "master_sheets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("plantilla", String(255), nullable=False, index=True),
    Column("numero", Integer, nullable=False),
    Column("anio", Integer, nullable=False),
    Column("mes", Integer, nullable=False),
    Column("id_original", String(255)),
    Column("id_confirmado", String(255), nullable=False),
    Column("estado", String(255)),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
    UniqueConstraint("plantilla", "numero", "anio", "mes", name="unique_entry"),
)

dependency_statistics = Table(
    "dependency_statistics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sheet_id", String(255), nullable=False, index=True),
    Column("plantilla", String(255), nullable=False),
    Column("numero", Integer, nullable=False),
    Column("anio", Integer, nullable=False),
    Column("mes", Integer, nullable=False),
    Column("field_name", String(255), nullable=False),
    Column("field_value", Text),
    Column("numeric_value", Numeric(15, 2)),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
    UniqueConstraint("sheet_id", "field_name", name="unique_field"),
)

aggregated_statistics = Table(
    "aggregated_statistics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("plantilla", String(255), nullable=False, index=True),
    Column("anio", Integer, nullable=False),
    Column("mes", Integer, nullable=False),
    Column("metric_name", String(255), nullable=False),
    Column("metric_value", Numeric(15, 2), nullable=False),
    Column("count_dependencies", Integer, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
    UniqueConstraint("plantilla", "anio", "mes", "metric_name", name="unique_metric"),
)

master_sync_log = Table(
    "master_sync_log",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sync_type", String(32), nullable=False, index=True),
    Column("plantilla", String(255)),
    Column("anio", Integer),
    Column("mes", Integer),
    Column("sync_timestamp", DateTime, server_default=func.current_timestamp()),
    Column("records_processed", Integer, nullable=False),
    Column("status", String(16), nullable=False),
    Column("error_message", Text),
)


@dataclass(frozen=True)
class ResumenEstadistica:
    plantilla: str
    numero: int
    anio: int
    mes: int
    total_records: int
    last_updated: datetime


def parse_numero(value: Any) -> Optional[float]:
    """Parseo float por prefijo (``"12.5 casos"`` -> 12.5); None si no hay número."""
    m = _FLOAT_PREFIX_RE.match(str(value))
    if not m:
        return None
    return float(m.group(1))


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class MasterDatabaseService:
    """Persistencia del pipeline maestro sobre un engine SQLAlchemy."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._engine: Optional[Engine] = None

    # -- conexión ----------------------------------------------------------

    def connect(self) -> None:
        """Crea el engine y las tablas (idempotente)."""
        url = make_url(self.database_url)
        if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        try:
            engine = create_engine(self.database_url)
            metadata.create_all(engine)
        except SQLAlchemyError as e:
            logger.error("No se pudo conectar a la base maestra: %s", e)
            raise ErrorMaestro(f"No se pudo conectar a la base de datos: {e}") from e

        self._engine = engine
        logger.info("Base maestra lista (%s)", url.render_as_string(hide_password=True))

    def disconnect(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Conexión a la base maestra cerrada")

    def is_connected(self) -> bool:
        return self._engine is not None

    def test_connection(self) -> bool:
        try:
            if self._engine is None:
                self.connect()
            with self._require().connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except (ErrorMaestro, SQLAlchemyError) as e:
            logger.error("Prueba de conexión a la base falló: %s", e)
            return False

    def _require(self) -> Engine:
        if self._engine is None:
            raise ErrorMaestro("No hay conexión a la base de datos")
        return self._engine

    # -- escritura ---------------------------------------------------------

    def _log_sync(
        self,
        sync_type: str,
        records_processed: int,
        status: str,
        error_message: Optional[str] = None,
        *,
        plantilla: Optional[str] = None,
        anio: Optional[int] = None,
        mes: Optional[int] = None,
    ) -> None:
        if self._engine is None:
            return
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(
                        "INSERT INTO master_sync_log "
                        "(sync_type, plantilla, anio, mes, records_processed, status, error_message) "
                        "VALUES (:sync_type, :plantilla, :anio, :mes, :records, :status, :error)"
                    ),
                    {
                        "sync_type": sync_type,
                        "plantilla": plantilla,
                        "anio": anio,
                        "mes": mes,
                        "records": records_processed,
                        "status": status,
                        "error": error_message,
                    },
                )
        except SQLAlchemyError as e:
            logger.error("No se pudo registrar el sync %s: %s", sync_type, e)

    def insert_master_sheet_data(self, entries: Sequence[EntradaMaestra]) -> None:
        """Reemplaza el índice maestro completo.

        Entradas repetidas para la misma clave única se resuelven a favor de la
        última.
        """
        engine = self._require()
        unicas: Dict[tuple, EntradaMaestra] = {}
        for e in entries:
            unicas[(e.plantilla, e.numero, e.anio, e.mes)] = e

        try:
            with engine.begin() as conn:
                conn.execute(text("DELETE FROM master_sheets"))
                if unicas:
                    conn.execute(
                        text(
                            "INSERT INTO master_sheets "
                            "(plantilla, numero, anio, mes, id_original, id_confirmado, estado) "
                            "VALUES (:plantilla, :numero, :anio, :mes, :id_original, :id_confirmado, :estado)"
                        ),
                        [
                            {
                                "plantilla": e.plantilla,
                                "numero": e.numero,
                                "anio": e.anio,
                                "mes": e.mes,
                                "id_original": e.id_original or None,
                                "id_confirmado": e.id_confirmado,
                                "estado": e.estado or None,
                            }
                            for e in unicas.values()
                        ],
                    )
        except SQLAlchemyError as e:
            self._log_sync(SYNC_MASTER_SHEET, 0, "error", str(e))
            logger.error("Fallo insertando la planilla maestra: %s", e)
            raise

        self._log_sync(SYNC_MASTER_SHEET, len(unicas), "success")
        logger.info("Insertadas %d entradas en master_sheets", len(unicas))

    def insert_dependency_statistics(self, dep: DatosDependencia) -> int:
        """Reemplaza las estadísticas aplanadas de una hoja; devuelve filas insertadas."""
        engine = self._require()

        campos: Dict[str, str] = {}
        for row in dep.data:
            for name, value in row.items():
                if value is None or value == "":
                    continue
                campos[name] = str(value)

        params = [
            {
                "sheet_id": dep.id,
                "plantilla": dep.plantilla,
                "numero": dep.numero,
                "anio": dep.anio,
                "mes": dep.mes,
                "field_name": name,
                "field_value": value,
                "numeric_value": parse_numero(value),
            }
            for name, value in campos.items()
        ]

        with engine.begin() as conn:
            conn.execute(text("DELETE FROM dependency_statistics WHERE sheet_id = :sheet_id"), {"sheet_id": dep.id})
            if params:
                conn.execute(
                    text(
                        "INSERT INTO dependency_statistics "
                        "(sheet_id, plantilla, numero, anio, mes, field_name, field_value, numeric_value) "
                        "VALUES (:sheet_id, :plantilla, :numero, :anio, :mes, :field_name, :field_value, :numeric_value)"
                    ),
                    params,
                )

        logger.info(
            "Insertadas %d estadísticas para %s #%s (%s/%s)",
            len(params), dep.plantilla, dep.numero, dep.anio, dep.mes,
        )
        return len(params)

    def process_all_statistics(self, processed: EstadisticasProcesadas) -> None:
        """Persiste las tres categorías y regenera los agregados."""
        self._require()
        total = 0
        try:
            for _, deps in processed.categorias():
                for dep in deps:
                    self.insert_dependency_statistics(dep)
                    total += 1
            self._generate_aggregated_statistics(processed)
        except (SQLAlchemyError, ErrorMaestro) as e:
            self._log_sync(SYNC_INDIVIDUAL_SHEETS, 0, "error", str(e))
            logger.error("Fallo procesando estadísticas: %s", e)
            raise

        self._log_sync(SYNC_INDIVIDUAL_SHEETS, total, "success")
        logger.info("Procesadas %d dependencias", total)

    def _generate_aggregated_statistics(self, processed: EstadisticasProcesadas) -> None:
        engine = self._require()
        params: List[Dict[str, Any]] = []
        for category, deps in processed.categorias():
            periods: Dict[tuple, List[DatosDependencia]] = {}
            for dep in deps:
                periods.setdefault((dep.anio, dep.mes), []).append(dep)

            for (anio, mes), period_deps in periods.items():
                n = len(period_deps)
                total_records = sum(len(d.data) for d in period_deps)
                for metric, value in (
                    ("total_dependencies", n),
                    ("avg_records_per_dependency", total_records / n),
                    ("total_records", total_records),
                ):
                    params.append(
                        {
                            "plantilla": category,
                            "anio": anio,
                            "mes": mes,
                            "metric": metric,
                            "value": value,
                            "count": n,
                        }
                    )

        try:
            with engine.begin() as conn:
                conn.execute(text("DELETE FROM aggregated_statistics"))
                if params:
                    conn.execute(
                        text(
                            "INSERT INTO aggregated_statistics "
                            "(plantilla, anio, mes, metric_name, metric_value, count_dependencies) "
                            "VALUES (:plantilla, :anio, :mes, :metric, :value, :count)"
                        ),
                        params,
                    )
        except SQLAlchemyError as e:
            self._log_sync(SYNC_AGGREGATION, 0, "error", str(e))
            raise

        self._log_sync(SYNC_AGGREGATION, 1, "success")
        logger.info("Agregados regenerados (%d métricas)", len(params))

    # -- lectura -----------------------------------------------------------

    def get_statistics_summary(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> List[ResumenEstadistica]:
        """Conteo de estadísticas por entrada del índice maestro.

        El filtro por mes solo se aplica junto con el año.
        """
        engine = self._require()
        sql = (
            "SELECT ms.plantilla, ms.numero, ms.anio, ms.mes, "
            "COUNT(ds.id) AS total_records, MAX(ds.updated_at) AS last_updated "
            "FROM master_sheets ms "
            "LEFT JOIN dependency_statistics ds ON ms.id_confirmado = ds.sheet_id"
        )
        params: Dict[str, Any] = {}
        if year and month:
            sql += " WHERE ms.anio = :anio AND ms.mes = :mes"
            params = {"anio": year, "mes": month}
        elif year:
            sql += " WHERE ms.anio = :anio"
            params = {"anio": year}
        sql += (
            " GROUP BY ms.plantilla, ms.numero, ms.anio, ms.mes"
            " ORDER BY ms.plantilla, ms.numero, ms.anio DESC, ms.mes DESC"
        )

        with engine.connect() as conn:
            rows = conn.execute(text(sql), params).mappings().all()

        now = datetime.now()
        return [
            ResumenEstadistica(
                plantilla=r["plantilla"],
                numero=int(r["numero"]),
                anio=int(r["anio"]),
                mes=int(r["mes"]),
                total_records=int(r["total_records"] or 0),
                last_updated=_as_datetime(r["last_updated"]) or now,
            )
            for r in rows
        ]

    def get_aggregated_data(
        self,
        plantilla: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        engine = self._require()
        conditions: List[str] = []
        params: Dict[str, Any] = {}
        if plantilla:
            conditions.append("plantilla = :plantilla")
            params["plantilla"] = plantilla
        if year:
            conditions.append("anio = :anio")
            params["anio"] = year
        if month:
            conditions.append("mes = :mes")
            params["mes"] = month

        sql = (
            "SELECT plantilla, anio, mes, metric_name, metric_value, count_dependencies "
            "FROM aggregated_statistics"
        )
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY plantilla, anio DESC, mes DESC, metric_name"

        with engine.connect() as conn:
            rows = conn.execute(text(sql), params).mappings().all()
        return [
            {**dict(r), "metric_value": float(r["metric_value"])}
            for r in rows
        ]

    def get_last_sync_time(self, sync_type: str, plantilla: Optional[str] = None) -> Optional[datetime]:
        """Marca del último sync exitoso de un tipo; None si no hay o si falla la consulta."""
        engine = self._require()
        sql = "SELECT sync_timestamp FROM master_sync_log WHERE sync_type = :sync_type AND status = 'success'"
        params: Dict[str, Any] = {"sync_type": sync_type}
        if plantilla:
            sql += " AND plantilla = :plantilla"
            params["plantilla"] = plantilla
        sql += " ORDER BY sync_timestamp DESC, id DESC LIMIT 1"

        try:
            with engine.connect() as conn:
                value = conn.execute(text(sql), params).scalar()
        except SQLAlchemyError as e:
            logger.error("No se pudo obtener el último sync: %s", e)
            return None
        return _as_datetime(value)
