"""
roster_service.py — Users eligible for the daily reset
Parses the loosely-typed users.features_json blob into an explicit record
so the reset job never reads feature flags by dynamic key lookup.
"""

import logging

from pydantic import BaseModel, ConfigDict, ValidationError
from sqlalchemy.orm import Session

from models.user import User

logger = logging.getLogger(__name__)


class UserFeatures(BaseModel):
    model_config = ConfigDict(extra="ignore")

    habits: bool = True
    training: bool = False
    nutrition: bool = False
    meditation: bool = False
    active_breaks: bool = False


def parse_features(features_json: str | None) -> UserFeatures:
    """Unknown keys are dropped; malformed JSON or invalid values fall back to defaults."""
    if not features_json:
        return UserFeatures()
    try:
        return UserFeatures.model_validate_json(features_json)
    except ValidationError as e:
        logger.warning(f"Invalid features_json, using defaults ({e.error_count()} error(s))")
        return UserFeatures()


class RosterService:
    @staticmethod
    def get_eligible_user_ids(db: Session) -> list[int]:
        """Active users with the habits feature enabled, ordered by id."""
        users = db.query(User).filter(User.is_active.is_(True)).order_by(User.id.asc()).all()
        return [u.id for u in users if parse_features(u.features_json).habits]
