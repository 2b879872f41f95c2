from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Text, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from database import Base


class HistoryRecord(Base):
    """Archived snapshot of a user's day, written by the daily reset."""

    __tablename__ = "history_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    training = Column(Boolean, default=False, nullable=False)
    nutrition = Column(Boolean, default=False, nullable=False)
    movement = Column(Boolean, default=False, nullable=False)
    meditation = Column(Boolean, default=False, nullable=False)
    steps = Column(Integer, default=0, nullable=False)
    points = Column(Integer, default=0, nullable=False)  # 0-4
    notes_content = Column(Text, nullable=True)
    archived_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_history_user_date"),
    )
