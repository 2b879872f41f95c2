"""
avatar_service.py — Avatar state & vitality level
The vitality level is a cache of a value fully determined by the ledger:
every read derives it from the trailing week's points and reconciles the
stored column when it drifts.
"""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.avatar import Avatar, COSMETIC_FIELDS
from services.stats_service import StatsService

logger = logging.getLogger(__name__)

# (inclusive lower bound on weekly points, level), highest first
VITALITY_THRESHOLDS = (
    (25, 5),
    (20, 4),
    (15, 3),
    (10, 2),
)


def vitality_level_for(weekly_points: int) -> int:
    for threshold, level in VITALITY_THRESHOLDS:
        if weekly_points >= threshold:
            return level
    return 1


class AvatarService:
    @staticmethod
    def get_or_create(db: Session, user_id: int) -> Avatar:
        avatar = db.query(Avatar).filter_by(user_id=user_id).first()
        if avatar:
            return avatar
        try:
            avatar = Avatar(user_id=user_id, vitality_level=1)
            db.add(avatar)
            db.commit()
            db.refresh(avatar)
            return avatar
        except IntegrityError:
            # created by a concurrent request
            db.rollback()
            return db.query(Avatar).filter_by(user_id=user_id).one()

    @staticmethod
    def derive_vitality(db: Session, user_id: int, today: date) -> int:
        return vitality_level_for(StatsService.weekly_points(db, user_id, today))

    @staticmethod
    def reconcile_vitality(db: Session, user_id: int, today: date) -> tuple[Avatar, bool]:
        """Derive the level, persist it only if it changed. Returns (avatar, changed)."""
        avatar = AvatarService.get_or_create(db, user_id)
        level = AvatarService.derive_vitality(db, user_id, today)
        if avatar.vitality_level == level:
            return avatar, False

        try:
            logger.info(f"Vitality for user {user_id}: {avatar.vitality_level} -> {level}")
            avatar.vitality_level = level
            db.commit()
            db.refresh(avatar)
        except Exception:
            db.rollback()
            raise
        return avatar, True

    @staticmethod
    def get_avatar(db: Session, user_id: int, today: date) -> Avatar:
        avatar, _ = AvatarService.reconcile_vitality(db, user_id, today)
        return avatar

    @staticmethod
    def update_avatar(db: Session, user_id: int, data: dict, today: date) -> Avatar:
        """Cosmetic fields only; vitality_level is ignored and re-derived."""
        avatar = AvatarService.get_or_create(db, user_id)
        try:
            for field in COSMETIC_FIELDS:
                if data.get(field) is not None:
                    setattr(avatar, field, data[field])
            db.commit()
        except Exception:
            db.rollback()
            raise
        return AvatarService.get_avatar(db, user_id, today)
