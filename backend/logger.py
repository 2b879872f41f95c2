"""
logger.py — Structured alert sink
Every alert is mirrored to the Python logger and persisted as a SystemLog row
so operators can browse recent failures from the admin diagnostics routes.
"""

import json
import logging
import traceback
from datetime import datetime, timezone, timedelta

from sqlalchemy.orm import Session

from database import SessionLocal
from models.system_log import SystemLog

logger = logging.getLogger(__name__)

LEVELS = ("debug", "info", "warn", "error", "critical")

_PY_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class SystemLogger:
    # Swapped out by tests and scripts that bind to a different engine
    session_factory = SessionLocal

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        user_id: int | None = None,
        metadata: dict | None = None,
        error: Exception | None = None,
    ) -> None:
        """Write an alert. Never raises: a broken sink must not break the caller."""
        if level not in LEVELS:
            level = "info"

        details = dict(metadata or {})
        if error is not None:
            details["error"] = {
                "name": type(error).__name__,
                "message": str(error),
                "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            }

        logger.log(_PY_LEVELS[level], "%s | user=%s | %s", message, user_id, details or "")

        db = cls.session_factory()
        try:
            db.add(SystemLog(
                level=level,
                message=message[:500],
                user_id=user_id,
                metadata_json=json.dumps(details, default=str) if details else None,
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"SystemLogger.log failed: {e}")
        finally:
            db.close()

    @classmethod
    def critical(cls, message: str, error: Exception, user_id: int | None = None, metadata: dict | None = None) -> None:
        cls.log("critical", message, user_id=user_id, metadata=metadata, error=error)

    @staticmethod
    def get_recent(db: Session, level: str | None = None, limit: int = 100) -> list[dict]:
        query = db.query(SystemLog)
        if level:
            query = query.filter(SystemLog.level == level)
        rows = query.order_by(SystemLog.created_at.desc(), SystemLog.id.desc()).limit(limit).all()
        return [
            {
                "id": r.id,
                "level": r.level,
                "message": r.message,
                "user_id": r.user_id,
                "metadata": json.loads(r.metadata_json) if r.metadata_json else None,
                "created_at": r.created_at.isoformat() if r.created_at else None,
            }
            for r in rows
        ]

    @staticmethod
    def purge_old_logs(db: Session, older_than_days: int = 30) -> int:
        """Delete rows older than N days. Returns the number of deleted rows."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
        try:
            deleted = db.query(SystemLog).filter(SystemLog.created_at < cutoff).delete(synchronize_session=False)
            db.commit()
            return int(deleted or 0)
        except Exception:
            db.rollback()
            raise
