from datetime import date

from sqlalchemy.orm import Session

from models.reset_execution import ResetExecution, STATUS_SUCCESS


class ExecutionLogService:
    @staticmethod
    def has_success(db: Session, reset_date: date) -> bool:
        return db.query(ResetExecution).filter_by(reset_date=reset_date, status=STATUS_SUCCESS).first() is not None

    @staticmethod
    def last_success_date(db: Session) -> date | None:
        row = db.query(ResetExecution).filter_by(status=STATUS_SUCCESS)\
                .order_by(ResetExecution.reset_date.desc()).first()
        return row.reset_date if row else None

    @staticmethod
    def dates_without_success(db: Session, start: date, end: date) -> list[date]:
        """Dates in [start, end] that have execution rows but none with status success."""
        in_range = db.query(ResetExecution.reset_date).filter(
            ResetExecution.reset_date >= start,
            ResetExecution.reset_date <= end,
        )
        attempted = {d for (d,) in in_range.distinct().all()}
        succeeded = {d for (d,) in in_range.filter(ResetExecution.status == STATUS_SUCCESS).distinct().all()}
        return sorted(attempted - succeeded)

    @staticmethod
    def record(db: Session, execution: ResetExecution) -> ResetExecution:
        try:
            db.add(execution)
            db.commit()
            db.refresh(execution)
            return execution
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def list_recent(db: Session, limit: int = 50, reset_date: date | None = None) -> list[ResetExecution]:
        query = db.query(ResetExecution)
        if reset_date:
            query = query.filter_by(reset_date=reset_date)
        return query.order_by(ResetExecution.executed_at.desc(), ResetExecution.id.desc()).limit(limit).all()
