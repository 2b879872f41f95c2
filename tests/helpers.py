"""Shared fixtures: an isolated in-memory database per test case."""

import os
import unittest
from datetime import date

# Must be set before config/database are imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from sqlalchemy.orm import sessionmaker

from database import init_db, make_engine
from logger import SystemLogger
from models.habit_day import HabitDay
from models.daily_note import DailyNote
from models.user import User


def make_session_factory():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class DatabaseTestCase(unittest.TestCase):
    def setUp(self):
        self.Session = make_session_factory()
        self.db = self.Session()
        self._sink_factory = SystemLogger.session_factory
        SystemLogger.session_factory = self.Session

    def tearDown(self):
        SystemLogger.session_factory = self._sink_factory
        self.db.close()

    # ------------------------------------------------------------------
    def add_user(self, email=None, role="user", is_active=True, features_json=None) -> User:
        n = self.db.query(User).count() + 1
        user = User(
            email=email or f"user{n}@example.com",
            full_name=f"User {n}",
            role=role,
            is_active=is_active,
            features_json=features_json,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def add_day(self, user_id: int, day: date, training=False, nutrition=False,
                movement=False, meditation=False, steps=0) -> HabitDay:
        row = HabitDay(user_id=user_id, date=day, training=training, nutrition=nutrition,
                       movement=movement, meditation=meditation, steps=steps)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def add_note(self, user_id: int, day: date, content: str) -> DailyNote:
        note = DailyNote(user_id=user_id, date=day, content=content)
        self.db.add(note)
        self.db.commit()
        return note
