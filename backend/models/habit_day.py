from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from database import Base

HABIT_KEYS = ("training", "nutrition", "movement", "meditation")


class HabitDay(Base):
    """Live habit ledger row: one per user and calendar day."""

    __tablename__ = "habit_days"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    training = Column(Boolean, default=False, nullable=False)
    nutrition = Column(Boolean, default=False, nullable=False)
    movement = Column(Boolean, default=False, nullable=False)
    meditation = Column(Boolean, default=False, nullable=False)
    steps = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_habitday_user_date"),
    )

    @property
    def points(self) -> int:
        return sum(1 for key in HABIT_KEYS if getattr(self, key))
