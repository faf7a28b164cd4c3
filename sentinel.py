#!/usr/bin/env python3
"""
Changelog Sentinel

Checks the changelogs of tracked tools and sends a Telegram message for
every source whose latest release changed since the previous run.
"""

import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler

from checker import run_checks
from config import Config
from sources import SourceConfig, get_sources, list_sources
from storage import FileSystemStorage, PreviewStorage, build_storage
from telegram_toolkit.telegram import TelegramNotifier

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def deliver(outcomes: list[tuple[SourceConfig, Optional[str]]], notifier) -> list[str]:
    """
    Send each non-empty message, one at a time.

    A failed send is logged by the notifier and does not stop the others.

    Returns:
        Keys of the sources whose message was delivered
    """
    delivered = []
    for source, message in outcomes:
        if not message:
            continue
        if notifier.send(message):
            delivered.append(source.key)
        else:
            logger.warning(f"Notification for {source.key} was not delivered")
    return delivered


def run_once(config: Config, sources: Optional[list[SourceConfig]] = None, storage=None,
             notifier=None, preview: bool = False) -> list[str]:
    """
    Run every check once and deliver the results.

    Args:
        config: Application configuration
        sources: Sources to check (default: all)
        storage: Fingerprint store (default: built from config)
        notifier: Object with send(message) (default: TelegramNotifier)
        preview: Print messages instead of sending; keep fingerprints unchanged

    Returns:
        Keys of the sources that produced a notification
    """
    if sources is None:
        sources = get_sources()
    if storage is None:
        storage = build_storage(config)
    if preview:
        storage = PreviewStorage(storage)

    outcomes = asyncio.run(run_checks(sources, storage, timeout=config.request_timeout))
    changed = [source.key for source, message in outcomes if message]
    logger.info(f"Checked {len(sources)} sources, {len(changed)} changed")

    if preview:
        for source, message in outcomes:
            if message:
                print(f"--- {source.key} ---")
                print(message)
                print()
        return changed

    if notifier is None:
        notifier = TelegramNotifier.from_config(config)
    return deliver(outcomes, notifier)


def watch(config: Config, sources: Optional[list[SourceConfig]] = None):
    """Run checks every config.check_interval_minutes until interrupted."""
    scheduler = BlockingScheduler()
    scheduler.add_job(
        run_once,
        "interval",
        minutes=config.check_interval_minutes,
        args=[config, sources],
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Checking changelogs every {config.check_interval_minutes} minutes")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")


def print_help():
    print("Changelog Sentinel - release notifications for tracked tools")
    print()
    print("Usage: changelog-sentinel [OPTIONS]")
    print()
    print("Options:")
    print("  --preview        Print messages without sending or saving fingerprints")
    print("  --sources X,Y,Z  Comma-separated list of sources to check")
    print("  --watch          Keep running, checking every CHECK_INTERVAL_MINUTES")
    print("  --list           List available sources")
    print("  --show-state     Show stored fingerprints")
    print("  --reset-state    Delete stored fingerprints (next run reports everything)")
    print("  --help, -h       Show this help message")
    print()
    print("Sources:", ", ".join(list_sources()))


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    argv = sys.argv[1:] if argv is None else argv

    if "--help" in argv or "-h" in argv:
        print_help()
        return 0

    if "--list" in argv:
        print("Available sources:")
        for s in list_sources():
            print(f"  {s}")
        return 0

    try:
        config = Config.from_env()
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 1
    configure_logging(config.log_level)

    if "--show-state" in argv:
        state = build_storage(config).items()
        if not state:
            print("No state yet. Run a check first.")
        else:
            print(json.dumps(state, indent=2))
        return 0

    if "--reset-state" in argv:
        storage = build_storage(config)
        if not isinstance(storage, FileSystemStorage):
            print(f"--reset-state only supports the file backend, not {config.storage_backend}.")
            return 1
        removed = storage.clear()
        print(f"Removed {removed} stored fingerprints. Next run will report all sources.")
        return 0

    keys = None
    if "--sources" in argv:
        idx = argv.index("--sources")
        if idx + 1 < len(argv):
            keys = [key.strip() for key in argv[idx + 1].split(",") if key.strip()]
    try:
        sources = get_sources(keys)
    except KeyError as e:
        print(e.args[0])
        return 1

    preview = "--preview" in argv
    watching = "--watch" in argv
    if watching or not preview:
        missing = config.missing()
        if missing:
            logger.error(f"Missing required environment variables: {', '.join(missing)}")
            return 1

    if watching:
        watch(config, sources)
        return 0

    run_once(config, sources, preview=preview)
    return 0


if __name__ == "__main__":
    sys.exit(main())
