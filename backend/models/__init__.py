# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.habit_day import HabitDay
from models.daily_note import DailyNote
from models.history_record import HistoryRecord
from models.reset_execution import ResetExecution
from models.goal import Goal
from models.avatar import Avatar
from models.system_log import SystemLog

__all__ = [
    "User",
    "HabitDay",
    "DailyNote",
    "HistoryRecord",
    "ResetExecution",
    "Goal",
    "Avatar",
    "SystemLog",
]
