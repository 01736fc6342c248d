"""
Command-line interface: keep the Lizto calendar synced into MongoDB.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

from pymongo.errors import PyMongoError

from . import __version__
from .calendar_fetch import CalendarSession, LoginError, create_driver
from .config import ConfigError, load_settings
from .export import export
from .scheduler import SyncScheduler
from .store import MongoAppointmentStore
from .sync import WeekSyncEngine

logger = logging.getLogger("lizto_sync")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Sync appointments from the Lizto web calendar into MongoDB.\n"
            "Settings come from environment variables or a .env file "
            "(MONGO_URI, DB_NAME, APPOINTMENTS_COL, LIZTO_EMAIL, LIZTO_PASSWORD)."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        help="Run a single sync (current week, plus next week on Saturdays) and exit.",
    )
    mode.add_argument(
        "--export",
        metavar="PATH",
        help="Export the stored appointments to PATH and exit. No browser is started.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="json",
        help="(--export) Export format. Default: json",
    )
    parser.add_argument(
        "--interval",
        type=float,
        metavar="MINUTES",
        help="Minutes between syncs. Default: SYNC_INTERVAL_MINUTES or 60.",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the Chrome window instead of running headless.",
    )
    return parser


def _run_export(store: MongoAppointmentStore, path: str, fmt: str) -> int:
    ext = "." + fmt
    out_path = Path(path) if Path(path).suffix else Path(path + ext)
    appointments = store.find_all()
    export(appointments, out_path, fmt)
    print(f"Exported {len(appointments)} appointment(s) to {out_path}")
    return 0


def main() -> int:
    args = _build_parser().parse_args()

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.info("Starting lizto-sync %s", __version__)

    store = None
    try:
        try:
            store = MongoAppointmentStore.connect(
                settings.mongo_uri, settings.db_name, settings.appointments_col
            )
            store.ping()
            store.ensure_indexes()
        except PyMongoError as e:
            logger.error("Could not connect to MongoDB: %s", e)
            return 1
        logger.info("Connected to MongoDB (%s)", settings.db_name)

        if args.export:
            return _run_export(store, args.export, args.format)

        try:
            driver = create_driver(headless=settings.headless and not args.headed)
        except RuntimeError as e:
            logger.error("%s", e)
            return 1
        session = CalendarSession(
            driver,
            settings.lizto_email,
            settings.lizto_password,
            settle_delay=settings.settle_seconds,
        )
        try:
            try:
                session.login()
            except LoginError as e:
                logger.error("%s", e)
                return 1

            engine = WeekSyncEngine(
                session, store, site=settings.default_sede, owner=settings.default_usuario
            )
            if args.once:
                try:
                    engine.sync_once()
                except Exception:
                    logger.exception("Sync failed")
                    return 1
                return 0

            minutes = args.interval if args.interval and args.interval > 0 else settings.interval_minutes
            scheduler = SyncScheduler(engine, timedelta(minutes=minutes))
            scheduler.install_signal_handlers()
            scheduler.run()
            return 0
        finally:
            session.close()
    finally:
        if store is not None:
            store.close()


if __name__ == "__main__":
    sys.exit(main())
