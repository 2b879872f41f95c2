"""
goal_service.py — Per-user step & weekly points goals
Used by the stats payload to frame progress; absent rows fall back to defaults.
"""

from sqlalchemy.orm import Session

from config import DEFAULT_DAILY_STEPS_GOAL, DEFAULT_WEEKLY_POINTS_GOAL
from models.goal import Goal, DAILY_STEPS_BOUNDS, WEEKLY_POINTS_BOUNDS


def _check_bounds(name: str, value: int, bounds: tuple[int, int]):
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}")


class GoalService:
    @staticmethod
    def get(db: Session, user_id: int) -> dict:
        goal = db.query(Goal).filter_by(user_id=user_id).first()
        if not goal:
            return {
                "user_id": user_id,
                "daily_steps_goal": DEFAULT_DAILY_STEPS_GOAL,
                "weekly_points_goal": DEFAULT_WEEKLY_POINTS_GOAL,
            }
        return {
            "user_id": user_id,
            "daily_steps_goal": goal.daily_steps_goal,
            "weekly_points_goal": goal.weekly_points_goal,
        }

    @staticmethod
    def upsert(db: Session, user_id: int, data: dict) -> dict:
        if data.get("daily_steps_goal") is not None:
            _check_bounds("daily_steps_goal", data["daily_steps_goal"], DAILY_STEPS_BOUNDS)
        if data.get("weekly_points_goal") is not None:
            _check_bounds("weekly_points_goal", data["weekly_points_goal"], WEEKLY_POINTS_BOUNDS)

        try:
            goal = db.query(Goal).filter_by(user_id=user_id).first()
            if not goal:
                goal = Goal(
                    user_id=user_id,
                    daily_steps_goal=DEFAULT_DAILY_STEPS_GOAL,
                    weekly_points_goal=DEFAULT_WEEKLY_POINTS_GOAL,
                )
                db.add(goal)
            if data.get("daily_steps_goal") is not None:
                goal.daily_steps_goal = data["daily_steps_goal"]
            if data.get("weekly_points_goal") is not None:
                goal.weekly_points_goal = data["weekly_points_goal"]
            db.commit()
        except Exception:
            db.rollback()
            raise
        return GoalService.get(db, user_id)
