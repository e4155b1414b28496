from typing import Callable, Optional

from sqlalchemy.orm import Session

from stockledger.config import Settings, get_settings
from stockledger.core.constants import SNAPSHOT_JOB_NAME
from stockledger.database import SessionLocal
from stockledger.scheduler.job_scheduler import DailyJobScheduler, SchedulerConfig, parse_time
from stockledger.services.api_config_service import build_catalog_client
from stockledger.services.snapshot_service import save_daily_snapshot


def run_snapshot_job(session_factory: Callable[[], Session] = SessionLocal) -> str:
    db = session_factory()
    try:
        client = build_catalog_client(db)
        result = save_daily_snapshot(db, client=client)
        stats = result["stats"]
        return "date={} products={} stock={} pages={}".format(
            result["snapshot"].date.isoformat(),
            stats["total_products"],
            stats["total_stock"],
            result["pages_fetched"],
        )
    finally:
        db.close()


def build_snapshot_scheduler(
    settings: Optional[Settings] = None,
    session_factory: Optional[Callable[[], Session]] = None,
) -> DailyJobScheduler:
    settings = settings or get_settings()
    session_factory = session_factory or SessionLocal
    config = SchedulerConfig(
        job_name=SNAPSHOT_JOB_NAME,
        run_after_time=parse_time(settings.SCHEDULER_RUN_AFTER),
        poll_seconds=settings.SCHEDULER_POLL_SECONDS,
        heartbeat_seconds=settings.SCHEDULER_HEARTBEAT_SECONDS,
        stale_seconds=settings.SCHEDULER_STALE_SECONDS,
        retry_seconds=settings.SCHEDULER_RETRY_SECONDS,
        max_retries=settings.SCHEDULER_MAX_RETRIES,
        timezone_mode=settings.SCHEDULER_TZ,
    )
    return DailyJobScheduler(
        config=config,
        job_func=lambda: run_snapshot_job(session_factory),
        session_factory=session_factory,
    )


__all__ = ["build_snapshot_scheduler", "run_snapshot_job"]
