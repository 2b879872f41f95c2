"""
reset_service.py — Daily rollover into the history archive
Archives every eligible user's ledger state for one calendar day into
HistoryRecord rows and summarizes the run as a single ResetExecution.
The live ledger is only read here, never modified.
"""

import logging
import time
from datetime import date

from sqlalchemy.orm import Session

from logger import SystemLogger
from models.habit_day import HABIT_KEYS
from models.history_record import HistoryRecord
from models.reset_execution import ResetExecution, STATUS_SUCCESS, STATUS_PARTIAL, STATUS_FAILED
from services.execution_log_service import ExecutionLogService
from services.habit_service import HabitService
from services.roster_service import RosterService

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE = 2000


class ResetEngineError(Exception):
    """The run could not be recorded in the execution log."""


def run_status(total_users: int, failed_users: int) -> str:
    if failed_users == 0:
        return STATUS_SUCCESS
    if failed_users >= total_users:
        return STATUS_FAILED
    return STATUS_PARTIAL


class ResetService:
    @staticmethod
    def archive_user(db: Session, user_id: int, reset_date: date) -> dict:
        """Upsert one user's HistoryRecord for reset_date and return what was archived.

        A missing ledger row is archived as an all-false, zero-step day so the
        history has no gaps.
        """
        day = HabitService.get_day(db, user_id, reset_date)
        flags = {key: bool(getattr(day, key)) if day else False for key in HABIT_KEYS}
        steps = (day.steps or 0) if day else 0
        points = sum(1 for v in flags.values() if v)

        note = HabitService.get_note(db, user_id, reset_date)
        notes_content = note.content if note and note.content and note.content.strip() else None

        try:
            record = db.query(HistoryRecord).filter_by(user_id=user_id, date=reset_date).first()
            if not record:
                record = HistoryRecord(user_id=user_id, date=reset_date)
                db.add(record)
            for key, value in flags.items():
                setattr(record, key, value)
            record.steps = steps
            record.points = points
            record.notes_content = notes_content
            db.commit()
        except Exception:
            db.rollback()
            raise

        return {"points": points, "steps": steps, "has_note": notes_content is not None}

    @staticmethod
    def run(db: Session, reset_date: date, force: bool = False) -> ResetExecution | None:
        """Archive reset_date for every eligible user.

        Returns None when reset_date already has a successful run and force is
        False. A forced rerun over an existing success returns an unsaved
        summary instead of recording a second success.
        """
        already_done = ExecutionLogService.has_success(db, reset_date)
        if already_done and not force:
            logger.info(f"Reset for {reset_date} already completed, skipping")
            return None

        started = time.monotonic()
        execution = ResetExecution(
            reset_date=reset_date,
            users_processed=0,
            users_failed=0,
            total_daily_points=0,
            total_steps=0,
            total_notes=0,
        )
        errors = []

        try:
            user_ids = RosterService.get_eligible_user_ids(db)
        except Exception as e:
            db.rollback()
            SystemLogger.critical("Daily reset roster enumeration failed", e,
                                  metadata={"reset_date": reset_date.isoformat()})
            execution.status = STATUS_FAILED
            execution.error_message = f"Roster enumeration failed: {e}"[:MAX_ERROR_MESSAGE]
            execution.execution_time_ms = int((time.monotonic() - started) * 1000)
            return ResetService._record(db, execution)

        logger.info(f"Daily reset for {reset_date}: {len(user_ids)} users")

        for user_id in user_ids:
            try:
                archived = ResetService.archive_user(db, user_id, reset_date)
            except Exception as e:
                db.rollback()
                execution.users_failed += 1
                errors.append(f"user {user_id}: {e}")
                SystemLogger.log("error", "Daily reset failed for user", user_id=user_id,
                                 metadata={"reset_date": reset_date.isoformat()}, error=e)
                continue

            execution.users_processed += 1
            execution.total_daily_points += archived["points"]
            execution.total_steps += archived["steps"]
            if archived["has_note"]:
                execution.total_notes += 1

        execution.status = run_status(len(user_ids), execution.users_failed)
        if errors:
            execution.error_message = "; ".join(errors)[:MAX_ERROR_MESSAGE]
        execution.execution_time_ms = int((time.monotonic() - started) * 1000)

        if already_done:
            if execution.status == STATUS_SUCCESS:
                SystemLogger.log("info", "Forced daily reset rerun", metadata=execution.to_dict())
                return execution
            # a failing forced rerun is still worth recording; it is not a second success
            return ResetService._record(db, execution)

        if execution.status == STATUS_FAILED:
            SystemLogger.log("critical", "Daily reset failed for every user",
                             metadata={"reset_date": reset_date.isoformat(), "users": len(user_ids)})
        return ResetService._record(db, execution)

    @staticmethod
    def _record(db: Session, execution: ResetExecution) -> ResetExecution:
        try:
            saved = ExecutionLogService.record(db, execution)
        except Exception as e:
            SystemLogger.critical("Daily reset execution log write failed", e,
                                  metadata={"reset_date": execution.reset_date.isoformat()})
            raise ResetEngineError(f"Could not record reset for {execution.reset_date}") from e

        logger.info(
            f"Daily reset {saved.reset_date} finished: status={saved.status} "
            f"processed={saved.users_processed} failed={saved.users_failed} "
            f"points={saved.total_daily_points} steps={saved.total_steps} "
            f"notes={saved.total_notes} in {saved.execution_time_ms}ms"
        )
        return saved
