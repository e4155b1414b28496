from __future__ import annotations

import logging
import os
import socket
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from stockledger.database import Base, SessionLocal, engine, ensure_sqlite_schema
from stockledger.models import import_all_models
from stockledger.models.job_log import JobLog

logger = logging.getLogger(__name__)

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

_TEXT_LIMIT = 1000


def ensure_scheduler_schema() -> None:
    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()


def parse_time(value: str) -> time:
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError("SCHEDULER_RUN_AFTER must be in HH:MM format")
    hour = int(parts[0])
    minute = int(parts[1])
    second = int(parts[2]) if len(parts) > 2 else 0
    return time(hour=hour, minute=minute, second=second)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _owner_id() -> str:
    return "{}:{}".format(socket.gethostname(), os.getpid())


def _schedule_now(timezone_mode: str) -> datetime:
    if timezone_mode.lower() == "utc":
        return datetime.now(timezone.utc)
    return datetime.now()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _truncate(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)[:_TEXT_LIMIT]


class JobLedger:
    """Run bookkeeping in ``job_logs``: the unique (job, day) row is the lock."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        *,
        stale_seconds: int = 900,
        retry_seconds: int = 300,
        max_retries: int = 3,
    ) -> None:
        self._session_factory = session_factory
        self.stale_seconds = stale_seconds
        self.retry_seconds = retry_seconds
        self.max_retries = max_retries

    def _is_stale(self, last_heartbeat: Optional[datetime], now: datetime) -> bool:
        last_heartbeat = _as_utc(last_heartbeat)
        if last_heartbeat is None:
            return True
        return now - last_heartbeat > timedelta(seconds=self.stale_seconds)

    def _can_take_over(self, existing: JobLog, now: datetime) -> bool:
        if existing.status == STATUS_SUCCESS:
            return False
        if existing.status == STATUS_RUNNING:
            return self._is_stale(existing.last_heartbeat_at, now)
        if existing.attempt >= self.max_retries:
            return False
        next_retry = _as_utc(existing.next_retry_at)
        return next_retry is None or now >= next_retry

    def acquire(self, job_name: str, run_date: date, owner: str) -> Optional[JobLog]:
        """Claim today's run, or return None if another owner has it or it is done."""
        now = utc_now()
        db = self._session_factory()
        try:
            log = JobLog(
                job_name=job_name,
                run_date=run_date,
                status=STATUS_RUNNING,
                attempt=1,
                started_at=now,
                last_heartbeat_at=now,
                locked_by=owner,
            )
            db.add(log)
            db.commit()
            db.refresh(log)
            return log
        except IntegrityError:
            db.rollback()
            existing = db.execute(
                select(JobLog).where(
                    JobLog.job_name == job_name,
                    JobLog.run_date == run_date,
                )
            ).scalar_one()
            if not self._can_take_over(existing, now):
                return None

            # Compare-and-swap on (status, heartbeat) so two takers cannot both win.
            result = db.execute(
                update(JobLog)
                .where(
                    JobLog.id == existing.id,
                    JobLog.status == existing.status,
                    JobLog.last_heartbeat_at == existing.last_heartbeat_at,
                )
                .values(
                    status=STATUS_RUNNING,
                    attempt=existing.attempt + 1,
                    started_at=now,
                    last_heartbeat_at=now,
                    finished_at=None,
                    locked_by=owner,
                    error_message=None,
                    result_summary=None,
                    next_retry_at=None,
                    updated_at=now,
                )
            )
            if result.rowcount != 1:
                db.rollback()
                return None
            db.commit()
            return db.get(JobLog, existing.id, populate_existing=True)
        finally:
            db.close()

    def _update(self, job_id: int, **values) -> None:
        db = self._session_factory()
        try:
            db.execute(update(JobLog).where(JobLog.id == job_id).values(**values))
            db.commit()
        finally:
            db.close()

    def mark_success(self, job_id: int, summary: Optional[str] = None) -> None:
        now = utc_now()
        self._update(
            job_id,
            status=STATUS_SUCCESS,
            finished_at=now,
            last_heartbeat_at=now,
            error_message=None,
            result_summary=_truncate(summary),
            next_retry_at=None,
            updated_at=now,
        )

    def mark_failure(self, job_id: int, attempt: int, error: Exception) -> None:
        now = utc_now()
        next_retry = None
        if attempt < self.max_retries:
            next_retry = now + timedelta(seconds=self.retry_seconds * max(1, attempt))
        self._update(
            job_id,
            status=STATUS_FAILED,
            finished_at=now,
            last_heartbeat_at=now,
            error_message=_truncate("{}: {}".format(type(error).__name__, error)),
            next_retry_at=next_retry,
            updated_at=now,
        )

    def heartbeat(self, job_id: int) -> None:
        now = utc_now()
        self._update(job_id, last_heartbeat_at=now, updated_at=now)


class HeartbeatThread:
    def __init__(self, ledger: JobLedger, job_id: int, interval_seconds: int) -> None:
        self._ledger = ledger
        self._job_id = job_id
        self._interval = max(5, int(interval_seconds))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="job-heartbeat",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        if not self._thread:
            return
        self._stop_event.set()
        self._thread.join(timeout=self._interval + 1)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._ledger.heartbeat(self._job_id)
            except Exception:
                logger.exception("Heartbeat update failed for job %s", self._job_id)


@dataclass
class SchedulerConfig:
    job_name: str
    run_after_time: time
    poll_seconds: int
    heartbeat_seconds: int
    stale_seconds: int
    retry_seconds: int
    max_retries: int
    timezone_mode: str = "utc"


class DailyJobScheduler:
    """Runs ``job_func`` at most once per day after ``run_after_time``.

    A failed run is retried by later polls with linear backoff until
    ``max_retries`` attempts have been made. ``job_func`` may return a short
    summary that is stored on the job log.
    """

    def __init__(
        self,
        *,
        config: SchedulerConfig,
        job_func: Callable[[], Optional[str]],
        session_factory: Optional[sessionmaker] = None,
    ) -> None:
        self._config = config
        self._job_func = job_func
        self._ledger = JobLedger(
            session_factory or SessionLocal,
            stale_seconds=config.stale_seconds,
            retry_seconds=config.retry_seconds,
            max_retries=config.max_retries,
        )
        self._stop_event = threading.Event()

    def run_once(self, now: Optional[datetime] = None) -> bool:
        now = now or _schedule_now(self._config.timezone_mode)
        cutoff = now.replace(
            hour=self._config.run_after_time.hour,
            minute=self._config.run_after_time.minute,
            second=self._config.run_after_time.second,
            microsecond=0,
        )
        if now < cutoff:
            return False

        run_date = now.date()
        job_log = self._ledger.acquire(self._config.job_name, run_date, _owner_id())
        if job_log is None:
            return False

        log_extra = {"job_name": job_log.job_name, "run_date": run_date.isoformat()}
        heartbeat = HeartbeatThread(self._ledger, job_log.id, self._config.heartbeat_seconds)
        heartbeat.start()
        try:
            logger.info(
                "Running job %s for %s (attempt %s)", job_log.job_name, run_date, job_log.attempt,
                extra=log_extra,
            )
            summary = self._job_func()
            self._ledger.mark_success(job_log.id, summary)
            logger.info("Job %s completed for %s", job_log.job_name, run_date, extra=log_extra)
            return True
        except Exception as exc:
            logger.exception("Job %s failed for %s", job_log.job_name, run_date, extra=log_extra)
            self._ledger.mark_failure(job_log.id, job_log.attempt, exc)
            return False
        finally:
            heartbeat.stop()

    def run_forever(self) -> None:
        poll_seconds = max(1, int(self._config.poll_seconds))
        logger.info("Scheduler started for job %s", self._config.job_name)
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("Scheduler loop error.")
            self._stop_event.wait(poll_seconds)

    def stop(self) -> None:
        self._stop_event.set()


__all__ = [
    "DailyJobScheduler",
    "JobLedger",
    "SchedulerConfig",
    "ensure_scheduler_schema",
    "parse_time",
]
