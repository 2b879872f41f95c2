from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from typing import Optional
from sqlalchemy.orm import Session

from auth import require_admin
from database import get_db
from logger import SystemLogger, LEVELS
from services.execution_log_service import ExecutionLogService
from services.reset_service import ResetEngineError

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


class ResetRunRequest(BaseModel):
    reset_date: Optional[date] = None  # defaults to yesterday
    force: bool = False


@router.get("/reset-executions")
async def list_reset_executions(
    limit: int = 50,
    reset_date: Optional[date] = None,
    admin_id: int = Depends(require_admin),
    db: Session = Depends(get_db),
):
    rows = ExecutionLogService.list_recent(db, limit=min(max(limit, 1), 500), reset_date=reset_date)
    return [r.to_dict() for r in rows]


@router.post("/reset-executions/run")
def run_reset(body: ResetRunRequest, request: Request, admin_id: int = Depends(require_admin)):
    """Operator-triggered reset, sharing the scheduler's overlap guard."""
    scheduler = request.app.state.reset_scheduler
    reset_date = body.reset_date or (scheduler.today() - timedelta(days=1))
    if reset_date >= scheduler.today():
        raise HTTPException(status_code=400, detail="Only past days can be reset")

    SystemLogger.log("info", "Manual daily reset requested", user_id=admin_id,
                     metadata={"reset_date": reset_date.isoformat(), "force": body.force})
    try:
        execution = scheduler.run_for_date(reset_date, force=body.force)
    except ResetEngineError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if execution is None:
        return {"status": "skipped", "reset_date": reset_date.isoformat()}
    return execution.to_dict()


@router.get("/system-logs")
async def system_logs(
    level: Optional[str] = None,
    limit: int = 100,
    admin_id: int = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if level and level not in LEVELS:
        raise HTTPException(status_code=400, detail=f"level must be one of {', '.join(LEVELS)}")
    return SystemLogger.get_recent(db, level=level, limit=min(max(limit, 1), 500))
