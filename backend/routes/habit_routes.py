from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from logger import SystemLogger
from services.habit_service import HabitService, habit_day_to_dict, local_today
from services.stats_service import StatsService

router = APIRouter(prefix="/api/v1/daily-habits", tags=["Daily Habits"])


class HabitDayUpdate(BaseModel):
    date: date
    training: Optional[bool] = None
    nutrition: Optional[bool] = None
    movement: Optional[bool] = None
    meditation: Optional[bool] = None
    steps: Optional[int] = Field(default=None, ge=0)


@router.get("/today")
async def habits_today(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        today = local_today()
        return habit_day_to_dict(HabitService.get_day(db, user_id, today), today)
    except Exception as e:
        SystemLogger.critical("Today habits fetch error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error fetching today's habits")


@router.put("/update")
async def update_habits(habit_data: HabitDayUpdate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        data = habit_data.model_dump(exclude_unset=True, exclude={"date"})
        row = HabitService.upsert_day(db, user_id, habit_data.date, data)
        return habit_day_to_dict(row, habit_data.date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        SystemLogger.critical("Daily habits update error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error updating daily habits")


@router.get("/weekly-points")
async def weekly_points(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        today = local_today()
        daily_data = StatsService.weekly_window(db, user_id, today, calendar_week=True)
        return {
            "total_points": sum(d["points"] for d in daily_data),
            "daily_data": daily_data,
            "week_start": daily_data[0]["date"],
        }
    except Exception as e:
        SystemLogger.critical("Weekly points fetch error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error fetching weekly points")


@router.get("/calendar")
async def habit_calendar(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return HabitService.calendar(db, user_id, local_today())
    except Exception as e:
        SystemLogger.critical("Calendar data fetch error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error fetching calendar data")
