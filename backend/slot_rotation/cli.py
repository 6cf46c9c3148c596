"""Command-line entry point for cron-driven rotation.

Usage:
    slot-rotation rotate     # stats before, rotate, stats after; exit 1 on failure
    slot-rotation stats      # print current rotation stats as JSON
    slot-rotation runs       # print recent rotation runs as JSON
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from slot_rotation.config import Settings, get_settings
from slot_rotation.core.errors import RotationError
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.infrastructure.observability import setup_logging
from slot_rotation.infrastructure.rotation_runs import SqlRotationRunLog
from slot_rotation.services.rotation_factory import (
    build_orchestrator, build_stats_reporter,
)

logger = logging.getLogger("slot_rotation.cli")


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


async def handle_rotate(db: DatabaseSessionManager, settings: Settings) -> int:
    reporter = build_stats_reporter(db, settings)
    logger.info(f"Stats before rotation: {asdict(await reporter.stats())}")
    try:
        result = await build_orchestrator(db, settings).run()
    except RotationError as exc:
        logger.error(f"Rotation failed: {exc.message}", extra={"error_code": exc.code})
        _print_json(exc.to_response())
        return 1
    _print_json(asdict(result))
    logger.info(f"Stats after rotation: {asdict(await reporter.stats())}")
    return 0


async def handle_stats(db: DatabaseSessionManager, settings: Settings) -> int:
    stats = await build_stats_reporter(db, settings).stats()
    _print_json(asdict(stats))
    return 0 if stats.success else 1


async def handle_runs(db: DatabaseSessionManager, limit: int) -> int:
    _print_json(await SqlRotationRunLog(db).latest(limit))
    return 0


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    try:
        if args.command == "rotate":
            return await handle_rotate(db, settings)
        if args.command == "stats":
            return await handle_stats(db, settings)
        return await handle_runs(db, args.limit)
    finally:
        await db.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Slot rotation engine")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("rotate", help="Run one rotation now")
    subparsers.add_parser("stats", help="Print rotation stats")
    runs_parser = subparsers.add_parser("runs", help="Print recent rotation runs")
    runs_parser.add_argument("--limit", type=int, default=20)

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    sys.exit(asyncio.run(_run(args, settings)))


if __name__ == "__main__":
    main()
