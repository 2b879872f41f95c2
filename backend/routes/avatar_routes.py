from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional, Literal
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from logger import SystemLogger
from services.avatar_service import AvatarService
from services.habit_service import local_today

router = APIRouter(prefix="/api/v1/avatar", tags=["Avatar"])


class AvatarUpdate(BaseModel):
    gender: Optional[Literal["male", "female", "non-binary"]] = None
    skin_tone: Optional[str] = None
    hair_style: Optional[str] = None
    hair_color: Optional[str] = None
    shirt_style: Optional[str] = None
    shirt_color: Optional[str] = None
    pants_style: Optional[str] = None
    pants_color: Optional[str] = None
    accessory: Optional[str] = None


@router.get("")
async def get_avatar(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return AvatarService.get_avatar(db, user_id, local_today()).to_dict()
    except Exception as e:
        SystemLogger.critical("Avatar fetch error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error fetching avatar")


@router.put("")
async def update_avatar(avatar_data: AvatarUpdate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        data = avatar_data.model_dump(exclude_unset=True)
        return AvatarService.update_avatar(db, user_id, data, local_today()).to_dict()
    except Exception as e:
        SystemLogger.critical("Avatar update error", e, user_id=user_id)
        raise HTTPException(status_code=500, detail="Error updating avatar")
