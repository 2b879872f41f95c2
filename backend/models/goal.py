from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from database import Base
from config import DEFAULT_DAILY_STEPS_GOAL, DEFAULT_WEEKLY_POINTS_GOAL

DAILY_STEPS_BOUNDS = (1000, 50000)
WEEKLY_POINTS_BOUNDS = (7, 100)


class Goal(Base):
    __tablename__ = "user_goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    daily_steps_goal = Column(Integer, default=DEFAULT_DAILY_STEPS_GOAL, nullable=False)  # 1,000-50,000
    weekly_points_goal = Column(Integer, default=DEFAULT_WEEKLY_POINTS_GOAL, nullable=False)  # 7-100
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
