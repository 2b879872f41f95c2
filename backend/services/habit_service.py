"""
habit_service.py — Live habit ledger
Upserts per-user daily habit flags, step counts and notes keyed by
(user_id, date). Rows are created on first write to a date.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from config import RESET_TIMEZONE
from models.habit_day import HabitDay, HABIT_KEYS
from models.daily_note import DailyNote


def local_now(tz_name: str = RESET_TIMEZONE) -> datetime:
    return datetime.now(ZoneInfo(tz_name))


def local_today(tz_name: str = RESET_TIMEZONE) -> date:
    """Calendar day in the service timezone (not UTC)."""
    return local_now(tz_name).date()


def habit_day_to_dict(row: HabitDay | None, day: date) -> dict:
    """Serialize a ledger row; a missing row renders as an empty day."""
    if row is None:
        data = {key: False for key in HABIT_KEYS}
        data.update({"date": day.isoformat(), "steps": 0, "points": 0})
        return data
    data = {key: bool(getattr(row, key)) for key in HABIT_KEYS}
    data.update({"date": row.date.isoformat(), "steps": row.steps or 0, "points": row.points})
    return data


class HabitService:
    @staticmethod
    def get_day(db: Session, user_id: int, day: date) -> HabitDay | None:
        return db.query(HabitDay).filter_by(user_id=user_id, date=day).first()

    @staticmethod
    def get_range(db: Session, user_id: int, start: date, end: date) -> dict[date, HabitDay]:
        """Ledger rows with start <= date <= end, keyed by date."""
        rows = db.query(HabitDay).filter(
            HabitDay.user_id == user_id,
            HabitDay.date >= start,
            HabitDay.date <= end,
        ).order_by(HabitDay.date.asc()).all()
        return {r.date: r for r in rows}

    @staticmethod
    def upsert_day(db: Session, user_id: int, day: date, data: dict) -> HabitDay:
        """Overwrite only the fields present in data; missing fields keep their value."""
        if "steps" in data and data["steps"] is not None and int(data["steps"]) < 0:
            raise ValueError("steps must be >= 0")
        try:
            row = HabitService.get_day(db, user_id, day)
            if not row:
                row = HabitDay(user_id=user_id, date=day, steps=0,
                               training=False, nutrition=False, movement=False, meditation=False)
                db.add(row)

            for key in HABIT_KEYS:
                if data.get(key) is not None:
                    setattr(row, key, bool(data[key]))
            if data.get("steps") is not None:
                row.steps = int(data["steps"])

            db.commit()
            db.refresh(row)
            return row
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def get_note(db: Session, user_id: int, day: date) -> DailyNote | None:
        return db.query(DailyNote).filter_by(user_id=user_id, date=day).first()

    @staticmethod
    def save_note(db: Session, user_id: int, day: date, content: str) -> DailyNote:
        try:
            note = HabitService.get_note(db, user_id, day)
            if note:
                note.content = content
            else:
                note = DailyNote(user_id=user_id, date=day, content=content)
                db.add(note)
            db.commit()
            db.refresh(note)
            return note
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def calendar(db: Session, user_id: int, today: date, days: int = 90) -> list[dict]:
        """Sparse list of recorded days, newest first."""
        rows = HabitService.get_range(db, user_id, today - timedelta(days=days), today)
        return [{"date": d.isoformat(), "daily_points": r.points} for d, r in sorted(rows.items(), reverse=True)]
