"""Application entry point for the chatsweep retention job."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.local_blobs import LocalBlobStore
from adapters.log_reporter import LogReporter
from adapters.sqlite_store import SQLiteMessageStore
from adapters.telegram_reporter import TelegramBotReporter
from core.config import RetentionPolicy
from core.errors import SweepError
from core.models import SweepOutcome
from core.ports import BlobStorePort, MessageStorePort, SweepReporterPort
from core.sweeper import RetentionSweeper
from log_config import configure_logging
from scheduler import DailyScheduler

NAME = "CHATSWEEP"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    # .env must be loaded first so redact patterns resolve to real values.
    load_dotenv()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)


def _build_stores() -> tuple[MessageStorePort, BlobStorePort]:
    # Select the storage adapters based on configuration to keep the core
    # sweeper independent from Firebase or local files.
    if settings.BACKEND == "sqlite":
        store = SQLiteMessageStore(settings.DB_PATH, page_size=settings.QUERY_PAGE_SIZE)
        store.init_db()
        return store, LocalBlobStore(settings.BLOB_ROOT)
    if settings.BACKEND == "firebase":
        from adapters.firebase_blobs import CloudStorageBlobStore
        from adapters.firebase_store import FirestoreMessageStore
        from client import build_firebase_clients

        db, bucket = build_firebase_clients(settings.FIREBASE_CREDENTIALS, settings.FIREBASE_STORAGE_BUCKET)
        store = FirestoreMessageStore(
            db,
            collection=settings.MESSAGES_COLLECTION,
            timestamp_field=settings.TIMESTAMP_FIELD,
            page_size=settings.QUERY_PAGE_SIZE,
        )
        return store, CloudStorageBlobStore(bucket)
    raise RuntimeError("backend must be 'sqlite' or 'firebase'")


def _build_reporter() -> SweepReporterPort:
    if settings.REPORTING_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when reporting.method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("reporting.bot_chat_id is required for bot reports")
        return TelegramBotReporter(
            bot_token=bot_token,
            chat_id=str(settings.BOT_CHAT_ID),
            report_noop=settings.REPORT_NOOP_RUNS,
        )
    if settings.REPORTING_METHOD == "log":
        return LogReporter()
    raise RuntimeError("reporting.method must be 'log' or 'bot'")


def _build_policy() -> RetentionPolicy:
    return RetentionPolicy(
        retention_days=settings.RETENTION_DAYS,
        max_batch_size=settings.MAX_BATCH_SIZE,
        blob_delete_concurrency=settings.BLOB_DELETE_CONCURRENCY,
    )


async def run_sweep(
    sweeper: RetentionSweeper,
    reporter: SweepReporterPort,
    dry_run: bool = False,
) -> SweepOutcome:
    """Run one sweep and report it; failures are reported and re-raised."""

    logger = logging.getLogger(__name__)
    try:
        outcome = await sweeper.run(dry_run=dry_run)
    except SweepError as error:
        logger.exception("Retention sweep failed")
        try:
            await reporter.report_failure(error)
        except Exception:
            logger.exception("Failed to deliver failure report")
        raise

    try:
        await reporter.report(outcome)
    except Exception:
        # A lost report must not turn a completed sweep into a failed one.
        logger.exception("Failed to deliver sweep report")
    return outcome


def _build_sweeper() -> tuple[RetentionSweeper, SweepReporterPort]:
    logger = logging.getLogger(__name__)
    policy = _build_policy()
    messages, blobs = _build_stores()
    reporter = _build_reporter()
    logger.info(
        "Backend %s, retention %s days, batches of %s",
        settings.BACKEND,
        policy.retention_days,
        policy.max_batch_size,
    )
    return RetentionSweeper(messages, blobs, policy), reporter


def _run_once(dry_run: bool) -> int:
    _print_banner()
    _configure_logging()

    sweeper, reporter = _build_sweeper()
    try:
        asyncio.run(run_sweep(sweeper, reporter, dry_run=dry_run))
    except SweepError:
        # Non-zero exit keeps cron / Cloud Scheduler failure bookkeeping honest.
        return 1
    return 0


def _schedule() -> int:
    _print_banner()
    _configure_logging()

    sweeper, reporter = _build_sweeper()
    scheduler = DailyScheduler(
        settings.SCHEDULE_HOUR,
        settings.SCHEDULE_MINUTE,
        settings.SCHEDULE_TIMEZONE,
    )
    logging.getLogger(__name__).info(
        "Scheduling daily sweep at %02d:%02d %s",
        settings.SCHEDULE_HOUR,
        settings.SCHEDULE_MINUTE,
        settings.SCHEDULE_TIMEZONE,
    )
    try:
        asyncio.run(scheduler.run_forever(lambda: run_sweep(sweeper, reporter)))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Scheduler stopped")
    return 0


def _init_db() -> int:
    _configure_logging()
    if settings.BACKEND != "sqlite":
        raise RuntimeError("init-db only applies to the sqlite backend")
    SQLiteMessageStore(settings.DB_PATH).init_db()
    os.makedirs(settings.BLOB_ROOT, exist_ok=True)
    logging.getLogger(__name__).info("Initialized %s and %s", settings.DB_PATH, settings.BLOB_ROOT)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="chatsweep")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run one retention sweep and exit")
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be deleted.",
    )
    subparsers.add_parser("schedule", help="Run the sweep every day at the configured time")
    subparsers.add_parser("init-db", help="Create the local SQLite schema and blob directory")

    args = parser.parse_args(argv)
    if args.command == "schedule":
        raise SystemExit(_schedule())
    if args.command == "init-db":
        raise SystemExit(_init_db())
    raise SystemExit(_run_once(dry_run=getattr(args, "dry_run", False)))


if __name__ == "__main__":
    main()
