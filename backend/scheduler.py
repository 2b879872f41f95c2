"""
scheduler.py — Daily reset scheduler
Runs the reset for each pending day on startup, then wakes once a day at the
configured local time to archive the day that just ended. A day whose run
ended failed or partial stays pending and is retried at the next tick while
it is inside the catch-up window.

Single instance per process: the overlap guard is an in-process lock, so
several processes pointed at the same database would race.
"""

import logging
import threading
from datetime import date, datetime, time as dtime, timedelta, timezone
from zoneinfo import ZoneInfo

from config import RESET_TIMEZONE, DAILY_RESET_TIME, RESET_CATCHUP_MAX_DAYS
from database import SessionLocal
from logger import SystemLogger
from models.reset_execution import ResetExecution, STATUS_FAILED
from services.execution_log_service import ExecutionLogService
from services.reset_service import ResetService, ResetEngineError

logger = logging.getLogger(__name__)


def parse_reset_time(value: str) -> dtime:
    hour, minute = value.strip().split(":")
    return dtime(hour=int(hour), minute=int(minute))


def missing_dates(last_success: date | None, today: date, max_days: int = RESET_CATCHUP_MAX_DAYS) -> list[date]:
    """Days after last_success up to yesterday, oldest first.

    With no successful run on record, only the last max_days days are covered.
    """
    yesterday = today - timedelta(days=1)
    if last_success is None:
        start = yesterday - timedelta(days=max(max_days, 0) - 1)
    else:
        start = last_success + timedelta(days=1)

    days = []
    d = start
    while d <= yesterday:
        days.append(d)
        d += timedelta(days=1)
    return days


def next_run_at(now: datetime, reset_time: dtime) -> datetime:
    """First instant strictly after now at reset_time wall-clock in now's zone."""
    candidate = datetime.combine(now.date(), reset_time, tzinfo=now.tzinfo)
    if candidate <= now:
        candidate = datetime.combine(now.date() + timedelta(days=1), reset_time, tzinfo=now.tzinfo)
    return candidate


class DailyResetScheduler:
    def __init__(
        self,
        session_factory=SessionLocal,
        tz_name: str = RESET_TIMEZONE,
        reset_time: str = DAILY_RESET_TIME,
        catchup_max_days: int = RESET_CATCHUP_MAX_DAYS,
    ):
        self.session_factory = session_factory
        self.tz = ZoneInfo(tz_name)
        self.reset_time = parse_reset_time(reset_time)
        self.catchup_max_days = catchup_max_days

        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    def initialize(self):
        """Catch up on missed days, then start the daily loop thread."""
        logger.info("Initializing daily reset scheduler")
        self.run_catchup()
        self.start()

    def start(self):
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="daily-reset", daemon=True)
        self._thread.start()
        logger.info(f"Daily reset scheduled at {self.reset_time.strftime('%H:%M')} ({self.tz.key})")

    def stop(self):
        """Cancel the pending wait. A run already in progress finishes on its own."""
        self._stop_event.set()
        logger.info("Daily reset scheduler stopped")

    # ------------------------------------------------------------------
    def pending_dates(self) -> list[date]:
        """Dates to archive, oldest first.

        The gap after the last successful run, plus any date inside the
        catch-up window whose runs all ended failed or partial.
        """
        today = self.today()
        yesterday = today - timedelta(days=1)
        retry_from = yesterday - timedelta(days=max(self.catchup_max_days, 1) - 1)

        db = self.session_factory()
        try:
            gap = missing_dates(ExecutionLogService.last_success_date(db), today, self.catchup_max_days)
            retries = ExecutionLogService.dates_without_success(db, retry_from, yesterday)
        finally:
            db.close()
        return sorted(set(gap) | set(retries))

    def run_catchup(self) -> list[ResetExecution]:
        """Run every pending date oldest first; only an execution log failure stops the pass."""
        pending = self.pending_dates()
        if pending:
            logger.info(f"Running {len(pending)} pending reset(s): {pending[0]} .. {pending[-1]}")

        results = []
        for reset_date in pending:
            try:
                execution = self.run_for_date(reset_date)
            except ResetEngineError as e:
                logger.error(f"Reset pass aborted at {reset_date}: {e}")
                break
            if execution is None:
                continue
            results.append(execution)
            if execution.status == STATUS_FAILED:
                # left without a success row, so the next pass picks it up again
                logger.error(f"Daily reset for {reset_date} failed: {execution.error_message}")
        return results

    def run_for_date(self, reset_date: date, force: bool = False) -> ResetExecution | None:
        """Run the reset unless another run holds the lock. None means skipped."""
        if not self._run_lock.acquire(blocking=False):
            SystemLogger.log("warn", "Daily reset skipped: a run is already in progress",
                             metadata={"reset_date": reset_date.isoformat()})
            return None
        db = self.session_factory()
        try:
            return ResetService.run(db, reset_date, force=force)
        finally:
            db.close()
            self._run_lock.release()

    def trigger(self) -> list[ResetExecution]:
        """Daily tick: archive yesterday and retry earlier dates still lacking a success."""
        results = self.run_catchup()
        if not results:
            logger.info(f"Nothing to reset for {self.today() - timedelta(days=1)}")
        return results

    # ------------------------------------------------------------------
    def _loop(self):
        while not self._stop_event.is_set():
            now = self.now()
            # compare in UTC so a DST shift between now and the next run is counted
            wait_seconds = (next_run_at(now, self.reset_time).astimezone(timezone.utc)
                            - now.astimezone(timezone.utc)).total_seconds()
            if self._stop_event.wait(timeout=max(wait_seconds, 0)):
                break
            try:
                self.trigger()
            except Exception as e:
                SystemLogger.critical("Daily reset scheduler tick failed", e)
