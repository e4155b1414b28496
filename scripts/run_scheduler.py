import argparse
import logging

from stockledger.config import get_settings
from stockledger.core.logging import setup_logging
from stockledger.scheduler.job_scheduler import ensure_scheduler_schema
from stockledger.scheduler.snapshot_job import build_snapshot_scheduler

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Run the daily stock snapshot scheduler.")
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Attempt today's snapshot once and exit.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    settings = get_settings()

    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled by SCHEDULER_ENABLED.")
        return

    ensure_scheduler_schema()
    scheduler = build_snapshot_scheduler(settings)

    if args.run_once:
        scheduler.run_once()
        return

    scheduler.run_forever()


if __name__ == "__main__":
    main()
