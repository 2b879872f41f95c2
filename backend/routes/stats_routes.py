from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from auth import get_current_user, is_admin
from database import get_db
from logger import SystemLogger
from services.habit_service import local_today
from services.stats_service import StatsService

router = APIRouter(prefix="/api/v1/stats", tags=["Stats"])


@router.get("/my-stats")
async def my_stats(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return StatsService.get_user_stats(db, user_id, local_today())
    except Exception as e:
        SystemLogger.critical("Own statistics fetch error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error fetching your statistics")


def _check_access(db: Session, user_id: int, target_user_id: int):
    """Admins may read anyone's stats; other users only their own."""
    if target_user_id != user_id and not is_admin(db, user_id):
        raise HTTPException(status_code=403, detail="Access denied")


@router.get("/user/{target_user_id}")
async def user_stats(target_user_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    _check_access(db, user_id, target_user_id)
    try:
        return StatsService.get_user_stats(db, target_user_id, local_today())
    except Exception as e:
        SystemLogger.critical("User statistics fetch error", e, user_id=user_id,
                              metadata={"target_user_id": target_user_id})
        raise HTTPException(status_code=500, detail="Error fetching user statistics")


@router.get("/user/{target_user_id}/breakdown")
async def user_breakdown(target_user_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Trailing-week flags and 30-day completion counts."""
    _check_access(db, user_id, target_user_id)
    try:
        return StatsService.get_breakdown(db, target_user_id, local_today())
    except Exception as e:
        SystemLogger.critical("User stats breakdown fetch error", e, user_id=user_id,
                              metadata={"target_user_id": target_user_id})
        raise HTTPException(status_code=500, detail="Error fetching statistics breakdown")
