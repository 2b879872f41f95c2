#!/usr/bin/env python3
"""
Daily reset engine tests

Tests for:
- Archiving ledger rows (points, steps, notes)
- Zero-row synthesis for inactive users
- Idempotent reruns and forced reruns
- Partial / failed runs and execution log failures
"""

import unittest
from datetime import date
from unittest import mock

from sqlalchemy.exc import OperationalError

from tests.helpers import DatabaseTestCase

from models.habit_day import HabitDay
from models.history_record import HistoryRecord
from models.reset_execution import ResetExecution
from models.system_log import SystemLog
from services.execution_log_service import ExecutionLogService
from services.reset_service import ResetService, ResetEngineError, run_status
from services.roster_service import RosterService

RESET_DATE = date(2024, 3, 14)


class TestRunStatus(unittest.TestCase):
    def test_statuses(self):
        self.assertEqual(run_status(10, 0), "success")
        self.assertEqual(run_status(0, 0), "success")
        self.assertEqual(run_status(10, 1), "partial")
        self.assertEqual(run_status(10, 10), "failed")


class TestResetService(DatabaseTestCase):
    def history(self, user_id):
        return self.db.query(HistoryRecord).filter_by(user_id=user_id, date=RESET_DATE).all()

    def test_archives_flags_points_steps_and_note(self):
        user = self.add_user()
        self.add_day(user.id, RESET_DATE, training=True, nutrition=True, meditation=True, steps=8200)
        self.add_note(user.id, RESET_DATE, "Felt great after the run")

        execution = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(execution.status, "success")
        self.assertEqual(execution.users_processed, 1)
        self.assertEqual(execution.total_daily_points, 3)
        self.assertEqual(execution.total_steps, 8200)
        self.assertEqual(execution.total_notes, 1)

        records = self.history(user.id)
        self.assertEqual(len(records), 1)
        record = records[0]
        self.assertTrue(record.training)
        self.assertFalse(record.movement)
        self.assertEqual(record.points, 3)
        self.assertEqual(record.steps, 8200)
        self.assertEqual(record.notes_content, "Felt great after the run")

    def test_points_match_true_flags(self):
        users = [self.add_user() for _ in range(5)]
        for i, user in enumerate(users):
            flags = [j < i for j in range(4)]
            self.add_day(user.id, RESET_DATE, *flags)

        ResetService.run(self.db, RESET_DATE)

        for i, user in enumerate(users):
            record = self.history(user.id)[0]
            self.assertEqual(record.points, min(i, 4))
            self.assertTrue(0 <= record.points <= 4)

    def test_missing_ledger_row_is_archived_as_zero_day(self):
        user = self.add_user()
        execution = ResetService.run(self.db, RESET_DATE)

        record = self.history(user.id)[0]
        self.assertEqual(record.points, 0)
        self.assertEqual(record.steps, 0)
        self.assertFalse(any([record.training, record.nutrition, record.movement, record.meditation]))
        self.assertIsNone(record.notes_content)
        self.assertEqual(execution.users_processed, 1)
        # synthesis stays in the archive; the live ledger still has no row
        self.assertEqual(self.db.query(HabitDay).count(), 0)

    def test_blank_note_not_counted(self):
        user = self.add_user()
        self.add_note(user.id, RESET_DATE, "   ")
        execution = ResetService.run(self.db, RESET_DATE)
        self.assertEqual(execution.total_notes, 0)
        self.assertIsNone(self.history(user.id)[0].notes_content)

    def test_ledger_is_not_modified(self):
        user = self.add_user()
        self.add_day(user.id, RESET_DATE, movement=True, steps=1200)
        ResetService.run(self.db, RESET_DATE)

        self.db.expire_all()
        row = self.db.query(HabitDay).filter_by(user_id=user.id, date=RESET_DATE).one()
        self.assertTrue(row.movement)
        self.assertEqual(row.steps, 1200)

    def test_roster_excludes_inactive_and_disabled_users(self):
        active = self.add_user()
        self.add_user(is_active=False)
        self.add_user(features_json='{"habits": false}')

        execution = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(execution.users_processed, 1)
        self.assertEqual(self.db.query(HistoryRecord).count(), 1)
        self.assertEqual(len(self.history(active.id)), 1)

    def test_second_run_is_skipped(self):
        user = self.add_user()
        self.add_day(user.id, RESET_DATE, training=True)

        first = ResetService.run(self.db, RESET_DATE)
        second = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(first.status, "success")
        self.assertIsNone(second)
        self.assertEqual(self.db.query(ResetExecution).count(), 1)

    def test_forced_rerun_is_idempotent(self):
        user = self.add_user()
        self.add_day(user.id, RESET_DATE, training=True, steps=500)
        self.add_note(user.id, RESET_DATE, "note")

        ResetService.run(self.db, RESET_DATE)
        before = [(r.points, r.steps, r.notes_content) for r in self.history(user.id)]

        summary = ResetService.run(self.db, RESET_DATE, force=True)

        self.db.expire_all()
        after = [(r.points, r.steps, r.notes_content) for r in self.history(user.id)]
        self.assertEqual(before, after)
        self.assertEqual(summary.status, "success")
        self.assertIsNone(summary.id)
        self.assertEqual(self.db.query(ResetExecution).filter_by(status="success").count(), 1)

    def test_partial_failure_does_not_abort_batch(self):
        users = [self.add_user() for _ in range(10)]
        for user in users:
            self.add_day(user.id, RESET_DATE, training=True, steps=100)
        bad_user = users[4].id

        real_archive = ResetService.archive_user

        def flaky(db, user_id, reset_date):
            if user_id == bad_user:
                raise RuntimeError("write failed")
            return real_archive(db, user_id, reset_date)

        with mock.patch.object(ResetService, "archive_user", side_effect=flaky):
            execution = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(execution.status, "partial")
        self.assertEqual(execution.users_processed, 9)
        self.assertEqual(execution.users_failed, 1)
        self.assertEqual(execution.total_daily_points, 9)
        self.assertEqual(execution.total_steps, 900)
        self.assertIn("write failed", execution.error_message)
        self.assertEqual(self.db.query(HistoryRecord).count(), 9)
        self.assertEqual(len(self.history(bad_user)), 0)
        self.assertEqual(self.db.query(SystemLog).filter_by(level="error", user_id=bad_user).count(), 1)

    def test_history_write_failure_rolls_back_one_user(self):
        users = [self.add_user() for _ in range(10)]
        for user in users:
            self.add_day(user.id, RESET_DATE, training=True, nutrition=True, steps=250)
        bad_user = users[6].id
        real_commit = self.db.commit

        def commit():
            pending = list(self.db.new) + list(self.db.dirty)
            if any(isinstance(obj, HistoryRecord) and obj.user_id == bad_user for obj in pending):
                raise OperationalError("INSERT INTO history_records", {}, Exception("disk I/O error"))
            real_commit()

        with mock.patch.object(self.db, "commit", side_effect=commit):
            execution = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(execution.status, "partial")
        self.assertEqual(execution.users_processed, 9)
        self.assertEqual(execution.users_failed, 1)
        self.assertEqual(execution.total_daily_points, 18)
        self.assertEqual(execution.total_steps, 2250)
        self.assertIn("disk I/O error", execution.error_message)

        self.db.expire_all()
        archived = {r.user_id for r in self.db.query(HistoryRecord).filter_by(date=RESET_DATE)}
        self.assertEqual(archived, {u.id for u in users} - {bad_user})
        self.assertIsNotNone(execution.id)

    def test_rerun_after_partial_fills_gaps_without_duplicates(self):
        users = [self.add_user() for _ in range(3)]
        real_archive = ResetService.archive_user

        def flaky(db, user_id, reset_date):
            if user_id == users[0].id:
                raise RuntimeError("boom")
            return real_archive(db, user_id, reset_date)

        with mock.patch.object(ResetService, "archive_user", side_effect=flaky):
            first = ResetService.run(self.db, RESET_DATE)
        second = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(first.status, "partial")
        self.assertEqual(second.status, "success")
        self.assertEqual(self.db.query(HistoryRecord).count(), 3)
        for user in users:
            self.assertEqual(len(self.history(user.id)), 1)

    def test_every_user_failing_marks_run_failed(self):
        self.add_user()
        self.add_user()
        with mock.patch.object(ResetService, "archive_user", side_effect=RuntimeError("db down")):
            execution = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(execution.status, "failed")
        self.assertEqual(execution.users_processed, 0)
        self.assertEqual(self.db.query(SystemLog).filter_by(level="critical").count(), 1)

    def test_roster_failure_records_failed_run(self):
        with mock.patch.object(RosterService, "get_eligible_user_ids", side_effect=RuntimeError("no roster")):
            execution = ResetService.run(self.db, RESET_DATE)

        self.assertEqual(execution.status, "failed")
        self.assertIn("no roster", execution.error_message)
        self.assertIsNotNone(execution.id)
        self.assertGreaterEqual(execution.execution_time_ms, 0)
        self.assertFalse(ExecutionLogService.has_success(self.db, RESET_DATE))

    def test_execution_log_write_failure_is_fatal(self):
        self.add_user()
        with mock.patch.object(ExecutionLogService, "record", side_effect=RuntimeError("log table gone")):
            with self.assertRaises(ResetEngineError):
                ResetService.run(self.db, RESET_DATE)

        critical = self.db.query(SystemLog).filter_by(level="critical").all()
        self.assertEqual(len(critical), 1)
        self.assertIn("execution log", critical[0].message)


if __name__ == "__main__":
    unittest.main()
