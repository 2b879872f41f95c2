from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
from sqlalchemy.orm import Session

from auth import get_current_user, require_admin
from database import get_db
from logger import SystemLogger
from models.user import User
from services.goal_service import GoalService

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])


class GoalUpdate(BaseModel):
    daily_steps_goal: Optional[int] = Field(default=None, ge=1000, le=50000)
    weekly_points_goal: Optional[int] = Field(default=None, ge=7, le=100)


@router.get("/my-goals")
async def my_goals(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return GoalService.get(db, user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/my-goals")
async def update_my_goals(goal_data: GoalUpdate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return GoalService.upsert(db, user_id, goal_data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        SystemLogger.critical("Goals update error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error saving goals")


def _require_user(db: Session, target_user_id: int):
    if not db.query(User).filter_by(id=target_user_id).first():
        raise HTTPException(status_code=404, detail="User not found")


@router.get("/user/{target_user_id}")
async def user_goals(target_user_id: int, admin_id: int = Depends(require_admin), db: Session = Depends(get_db)):
    _require_user(db, target_user_id)
    return GoalService.get(db, target_user_id)


@router.put("/user/{target_user_id}")
async def update_user_goals(
    target_user_id: int,
    goal_data: GoalUpdate,
    admin_id: int = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _require_user(db, target_user_id)
    try:
        goals = GoalService.upsert(db, target_user_id, goal_data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        SystemLogger.critical("Admin goals update error", e, user_id=admin_id,
                              metadata={"target_user_id": target_user_id})
        raise HTTPException(status_code=500, detail="Error saving goals")
    SystemLogger.log("info", "Goals updated by admin", user_id=admin_id,
                     metadata={"target_user_id": target_user_id, **goals})
    return goals
