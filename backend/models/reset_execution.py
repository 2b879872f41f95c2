from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Index
from database import Base

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


class ResetExecution(Base):
    __tablename__ = "reset_executions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reset_date = Column(Date, nullable=False)
    executed_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    users_processed = Column(Integer, default=0, nullable=False)
    users_failed = Column(Integer, default=0, nullable=False)
    total_daily_points = Column(Integer, default=0, nullable=False)
    total_steps = Column(Integer, default=0, nullable=False)
    total_notes = Column(Integer, default=0, nullable=False)
    status = Column(String(20), nullable=False)  # success/partial/failed
    error_message = Column(Text, nullable=True)
    execution_time_ms = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("ix_reset_executions_date_status", "reset_date", "status"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reset_date": self.reset_date.isoformat() if self.reset_date else None,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
            "users_processed": self.users_processed,
            "users_failed": self.users_failed,
            "total_daily_points": self.total_daily_points,
            "total_steps": self.total_steps,
            "total_notes": self.total_notes,
            "status": self.status,
            "error_message": self.error_message,
            "execution_time_ms": self.execution_time_ms,
        }
