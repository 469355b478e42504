"""judistats.config

Configuración del backend leída desde variables de entorno.

Todas las variables usan el prefijo ``JUDI_``. Para compatibilidad con los
despliegues existentes se aceptan también los nombres heredados
(``GOOGLE_MASTER_SHEET_ID``, ``SYNC_INTERVAL_MINUTES``).

Variables
---------
- ``JUDI_DATA_DIR``: directorio local con los CSV mensuales.
- ``JUDI_DATA_BASE_URL``: si existe, los CSV se descargan por HTTP desde esta URL.
- ``JUDI_HTTP_TIMEOUT``: timeout (segundos) de cada descarga.
- ``JUDI_DATABASE_URL``: URL SQLAlchemy del almacén maestro.
- ``JUDI_MASTER_SHEET_ID``: id de la planilla maestra de Google Sheets.
- ``GOOGLE_SERVICE_ACCOUNT_EMAIL`` / ``GOOGLE_PRIVATE_KEY``: credenciales.
- ``JUDI_SYNC_INTERVAL_MINUTES``: periodo del auto-sync.
- ``JUDI_AUTO_SYNC`` / ``JUDI_FALLBACK_MOCK`` / ``JUDI_ENABLE_MASTER``: flags ``1/0``.
- ``JUDI_ALLOWED_ORIGINS``: orígenes CORS separados por coma.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from judistats.utils.paths import data_dir, default_database_url


_DEFAULT_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "si", "on")


def _env_int(name: str, default: int, *fallbacks: str) -> int:
    for key in (name, *fallbacks):
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            continue
        try:
            return int(raw)
        except ValueError:
            return default
    return default


def _env_str(name: str, *fallbacks: str) -> Optional[str]:
    for key in (name, *fallbacks):
        raw = os.getenv(key)
        if raw and raw.strip():
            return raw.strip()
    return None


@dataclass(frozen=True)
class Settings:
    """Valores de configuración resueltos una sola vez."""

    data_dir: Path
    data_base_url: Optional[str] = None
    http_timeout: float = 30.0

    database_url: str = ""
    master_sheet_id: str = ""
    service_account_email: Optional[str] = None
    private_key: Optional[str] = None

    sync_interval_minutes: int = 5
    auto_sync: bool = True
    fallback_mock: bool = True
    enable_master: bool = False

    allowed_origins: List[str] = field(default_factory=lambda: list(_DEFAULT_ORIGINS))


def load_settings() -> Settings:
    """Construye `Settings` desde el entorno actual."""
    raw_key = os.getenv("GOOGLE_PRIVATE_KEY")
    private_key = raw_key.replace("\\n", "\n") if raw_key else None

    raw_origins = os.getenv("JUDI_ALLOWED_ORIGINS")
    origins = (
        [o.strip() for o in raw_origins.split(",") if o.strip()]
        if raw_origins
        else list(_DEFAULT_ORIGINS)
    )

    try:
        timeout = float(os.getenv("JUDI_HTTP_TIMEOUT", "30"))
    except ValueError:
        timeout = 30.0

    return Settings(
        data_dir=data_dir(),
        data_base_url=_env_str("JUDI_DATA_BASE_URL"),
        http_timeout=timeout,
        database_url=_env_str("JUDI_DATABASE_URL") or default_database_url(),
        master_sheet_id=_env_str("JUDI_MASTER_SHEET_ID", "GOOGLE_MASTER_SHEET_ID") or "",
        service_account_email=_env_str("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
        private_key=private_key,
        sync_interval_minutes=_env_int("JUDI_SYNC_INTERVAL_MINUTES", 5, "SYNC_INTERVAL_MINUTES"),
        auto_sync=_env_flag("JUDI_AUTO_SYNC", True),
        fallback_mock=_env_flag("JUDI_FALLBACK_MOCK", True),
        enable_master=_env_flag("JUDI_ENABLE_MASTER", False),
        allowed_origins=origins,
    )
