import unittest
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import update

from stockledger.models.job_log import JobLog
from stockledger.scheduler.job_scheduler import DailyJobScheduler, JobLedger, SchedulerConfig, parse_time
from tests.helpers import memory_session_factory

RUN_DATE = date(2024, 5, 15)


class JobLedgerTest(unittest.TestCase):
    def setUp(self):
        self.Session, self.engine = memory_session_factory()
        self.ledger = JobLedger(self.Session, stale_seconds=60, retry_seconds=30, max_retries=2)

    def tearDown(self):
        self.engine.dispose()

    def _set(self, job_id, **values):
        db = self.Session()
        try:
            db.execute(update(JobLog).where(JobLog.id == job_id).values(**values))
            db.commit()
        finally:
            db.close()

    def _get(self, job_id):
        db = self.Session()
        try:
            return db.get(JobLog, job_id)
        finally:
            db.close()

    def test_one_owner_per_day(self):
        first = self.ledger.acquire("snapshot", RUN_DATE, "host-a:1")
        self.assertIsNotNone(first)
        self.assertEqual(first.attempt, 1)
        self.assertIsNone(self.ledger.acquire("snapshot", RUN_DATE, "host-b:2"))
        self.assertIsNotNone(self.ledger.acquire("snapshot", RUN_DATE + timedelta(days=1), "host-b:2"))

    def test_stale_run_is_taken_over(self):
        first = self.ledger.acquire("snapshot", RUN_DATE, "host-a:1")
        self._set(first.id, last_heartbeat_at=datetime.now(timezone.utc) - timedelta(minutes=5))

        second = self.ledger.acquire("snapshot", RUN_DATE, "host-b:2")
        self.assertIsNotNone(second)
        self.assertEqual(second.attempt, 2)
        self.assertEqual(second.locked_by, "host-b:2")

    def test_failure_waits_for_retry_window(self):
        first = self.ledger.acquire("snapshot", RUN_DATE, "host-a:1")
        self.ledger.mark_failure(first.id, first.attempt, RuntimeError("catalog down"))

        failed = self._get(first.id)
        self.assertEqual(failed.status, "failed")
        self.assertIn("catalog down", failed.error_message)
        self.assertIsNone(self.ledger.acquire("snapshot", RUN_DATE, "host-a:1"))

        self._set(first.id, next_retry_at=datetime.now(timezone.utc) - timedelta(seconds=1))
        retry = self.ledger.acquire("snapshot", RUN_DATE, "host-a:1")
        self.assertIsNotNone(retry)
        self.assertEqual(retry.attempt, 2)

        self.ledger.mark_failure(retry.id, retry.attempt, RuntimeError("still down"))
        self.assertIsNone(self._get(retry.id).next_retry_at)
        self.assertIsNone(self.ledger.acquire("snapshot", RUN_DATE, "host-a:1"))

    def test_success_is_final(self):
        first = self.ledger.acquire("snapshot", RUN_DATE, "host-a:1")
        self.ledger.mark_success(first.id, "products=3")

        done = self._get(first.id)
        self.assertEqual(done.status, "success")
        self.assertEqual(done.result_summary, "products=3")
        self.assertIsNone(self.ledger.acquire("snapshot", RUN_DATE, "host-b:2"))


class DailyJobSchedulerTest(unittest.TestCase):
    def setUp(self):
        self.Session, self.engine = memory_session_factory()
        self.config = SchedulerConfig(
            job_name="snapshot",
            run_after_time=time(6, 0),
            poll_seconds=1,
            heartbeat_seconds=5,
            stale_seconds=60,
            retry_seconds=30,
            max_retries=3,
        )

    def tearDown(self):
        self.engine.dispose()

    def test_runs_once_after_cutoff(self):
        hits = {"count": 0}

        def job():
            hits["count"] += 1
            return "ok"

        scheduler = DailyJobScheduler(config=self.config, job_func=job, session_factory=self.Session)

        self.assertFalse(scheduler.run_once(datetime(2024, 5, 15, 5, 59, tzinfo=timezone.utc)))
        self.assertTrue(scheduler.run_once(datetime(2024, 5, 15, 6, 1, tzinfo=timezone.utc)))
        self.assertFalse(scheduler.run_once(datetime(2024, 5, 15, 7, 0, tzinfo=timezone.utc)))
        self.assertEqual(hits["count"], 1)

    def test_failing_job_is_recorded(self):
        def job():
            raise RuntimeError("boom")

        scheduler = DailyJobScheduler(config=self.config, job_func=job, session_factory=self.Session)
        self.assertFalse(scheduler.run_once(datetime(2024, 5, 15, 8, 0, tzinfo=timezone.utc)))

        db = self.Session()
        try:
            log = db.query(JobLog).one()
        finally:
            db.close()
        self.assertEqual(log.status, "failed")
        self.assertIsNotNone(log.next_retry_at)

    def test_parse_time(self):
        self.assertEqual(parse_time("06:30"), time(6, 30))
        self.assertEqual(parse_time("23:59:10"), time(23, 59, 10))
        with self.assertRaises(ValueError):
            parse_time("6")


if __name__ == "__main__":
    unittest.main()
