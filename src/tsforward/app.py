import argparse
import asyncio
import sys
from typing import List, Optional

import structlog

from tsforward.errors import ConfigError
from tsforward.services.config_loader import load_targets
from tsforward.services.dispatcher import Dispatcher
from tsforward.services.scheduler import Scheduler
from tsforward.services.sink import CloudMonitoringSink, LogSink, Sink
from tsforward.utils.log import configure_logging

logger = structlog.get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tsforward",
        description="Scrape Prometheus text endpoints and forward them to Cloud Monitoring",
    )
    parser.add_argument("--config", default="config.json", help="path to the targets JSON file")
    parser.add_argument("--debug", action="store_true", help="human-readable DEBUG logging")
    parser.add_argument(
        "--dry-run", action="store_true", help="log batches instead of writing them"
    )
    return parser.parse_args(argv)


def build_sink(dry_run: bool) -> Sink:
    if dry_run:
        return LogSink()
    return CloudMonitoringSink()


async def run(args: argparse.Namespace):
    targets = load_targets(args.config)
    sink = build_sink(args.dry_run)
    scheduler = Scheduler(targets, Dispatcher(sink))
    await scheduler.run_forever()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.debug)

    try:
        asyncio.run(run(args))
    except ConfigError as e:
        logger.error("Failed to load config", error=e.message)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
