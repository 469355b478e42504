# backend/src/judistats/app/jobs/cmd_sync_maestro.py
"""Sync único del pipeline maestro desde la línea de comandos.

    python -m judistats.app.jobs.cmd_sync_maestro --anio 2024 --mes 3

Sin ``--anio``/``--mes`` sincroniza el mes actual. Sale con código 1 si falla.
"""
import argparse
import logging
import sys
import uuid

from judistats.app.logging_config import setup_logging
from judistats.config import load_settings
from judistats.errores import ErrorMaestro
from judistats.maestro.servicio import crear_servicio_maestro
from judistats.observability.destinos.log_handler import wire_logging_destination
from judistats.observability.logging_context import install_logrecord_factory, set_correlation_id

log = logging.getLogger("judistats.jobs.sync_maestro")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Sincroniza la planilla maestra con la base de datos.")
    ap.add_argument("--anio", type=int, default=None, help="Año a sincronizar (por defecto el actual)")
    ap.add_argument("--mes", type=int, default=None, choices=range(1, 13), metavar="1-12",
                    help="Mes a sincronizar (por defecto el actual)")
    args = ap.parse_args(argv)

    setup_logging()
    install_logrecord_factory()
    wire_logging_destination()
    set_correlation_id(uuid.uuid4().hex)

    servicio = crear_servicio_maestro(load_settings())
    if not servicio.database.test_connection():
        log.error("No hay conexión a la base de datos")
        return 1

    try:
        conteos = servicio.perform_full_sync(args.anio, args.mes)
    except ErrorMaestro as e:
        log.error("Sync falló: %s", e)
        return 1
    finally:
        servicio.database.disconnect()

    print(f"[OK] Sync completado: {conteos}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
