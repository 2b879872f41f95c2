from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from logger import SystemLogger
from services.habit_service import HabitService

router = APIRouter(prefix="/api/v1/daily-notes", tags=["Daily Notes"])


class NoteSave(BaseModel):
    date: date
    content: str = Field(max_length=5000)


@router.get("/{day}")
async def get_note(day: date, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    note = HabitService.get_note(db, user_id, day)
    return {"date": day.isoformat(), "content": note.content if note else ""}


@router.put("")
async def save_note(note_data: NoteSave, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        note = HabitService.save_note(db, user_id, note_data.date, note_data.content)
        return {"date": note.date.isoformat(), "content": note.content}
    except Exception as e:
        SystemLogger.critical("Daily note save error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error saving note")
