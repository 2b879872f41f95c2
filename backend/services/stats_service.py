"""
stats_service.py — Weekly & monthly habit statistics
Turns sparse ledger rows into dense, zero-filled day windows and the
summary payload served by the stats routes. Read-only.

Conventions:
- per-habit completion rates use a fixed 30-day denominator
- the stats payload averages (points, steps) over active days, i.e. days with a ledger row
- the breakdown averages weekly points over all 7 days of a trailing week
"""

from datetime import date, timedelta

from sqlalchemy.orm import Session

from models.habit_day import HabitDay, HABIT_KEYS
from services.goal_service import GoalService
from services.habit_service import HabitService

WEEK_DAYS = 7
MONTH_DAYS = 30

HABIT_LABELS = {
    "training": "Training",
    "nutrition": "Nutrition",
    "movement": "Movement",
    "meditation": "Meditation",
}


def clamp_percentage(value: float) -> int:
    return int(max(0, min(100, round(value))))


def week_start(today: date, calendar_week: bool = False) -> date:
    """Sunday of today's week, or six days ago for a trailing week."""
    if calendar_week:
        # date.weekday(): Monday=0 ... Sunday=6
        return today - timedelta(days=(today.weekday() + 1) % 7)
    return today - timedelta(days=WEEK_DAYS - 1)


def dense_days(start: date, count: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(count)]


def day_entry(d: date, row: HabitDay | None, flags: bool = False) -> dict:
    entry = {
        "date": d.isoformat(),
        "points": row.points if row else 0,
        "steps": (row.steps or 0) if row else 0,
    }
    if flags:
        for key in HABIT_KEYS:
            entry[key] = 1 if row is not None and getattr(row, key) else 0
    return entry


def build_weekly(rows: dict[date, HabitDay], start: date, flags: bool = False) -> list[dict]:
    """Exactly 7 entries, zero for days without a ledger row."""
    return [day_entry(d, rows.get(d), flags) for d in dense_days(start, WEEK_DAYS)]


def build_monthly(rows: dict[date, HabitDay], start: date) -> list[dict]:
    return [day_entry(d, rows.get(d), flags=True) for d in dense_days(start, MONTH_DAYS)]


def completion_counts(rows: dict[date, HabitDay]) -> dict[str, int]:
    return {key: sum(1 for r in rows.values() if getattr(r, key)) for key in HABIT_KEYS}


def summarise_monthly(rows: dict[date, HabitDay]) -> dict:
    active_days = len(rows)
    total_points = sum(r.points for r in rows.values())
    total_steps = sum(max(0, r.steps or 0) for r in rows.values())

    counts = completion_counts(rows)
    habit_completion = {key: clamp_percentage(counts[key] / MONTH_DAYS * 100) for key in HABIT_KEYS}

    return {
        "total_points": total_points,
        "total_steps": total_steps,
        "total_active_days": active_days,
        "average_daily_points": round(total_points / active_days, 1) if active_days else 0,
        "average_steps": round(total_steps / active_days) if active_days else 0,
        "habit_completion": habit_completion,
        "completion_counts": counts,
        "completion_rate": clamp_percentage(sum(habit_completion.values()) / len(HABIT_KEYS)),
    }


class StatsService:
    @staticmethod
    def weekly_window(db: Session, user_id: int, today: date, calendar_week: bool = False) -> list[dict]:
        start = week_start(today, calendar_week)
        rows = HabitService.get_range(db, user_id, start, start + timedelta(days=WEEK_DAYS - 1))
        return build_weekly(rows, start)

    @staticmethod
    def weekly_points(db: Session, user_id: int, today: date, calendar_week: bool = False) -> int:
        return sum(entry["points"] for entry in StatsService.weekly_window(db, user_id, today, calendar_week))

    @staticmethod
    def monthly_window(db: Session, user_id: int, today: date) -> tuple[list[dict], dict]:
        start = today - timedelta(days=MONTH_DAYS - 1)
        rows = HabitService.get_range(db, user_id, start, today)
        return build_monthly(rows, start), summarise_monthly(rows)

    @staticmethod
    def get_user_stats(db: Session, user_id: int, today: date) -> dict:
        """Full stats payload: calendar week (Sunday start) plus trailing 30 days."""
        weekly_data = StatsService.weekly_window(db, user_id, today, calendar_week=True)
        weekly_points = sum(entry["points"] for entry in weekly_data)
        monthly_data, summary = StatsService.monthly_window(db, user_id, today)
        goals = GoalService.get(db, user_id)

        return {
            "weekly_points": weekly_points,
            "average_daily_points": summary["average_daily_points"],
            "total_active_days": summary["total_active_days"],
            "average_steps": summary["average_steps"],
            "completion_rate": summary["completion_rate"],
            "weekly_data": [{"date": e["date"], "points": e["points"]} for e in weekly_data],
            "monthly_data": monthly_data,
            "habit_completion": summary["habit_completion"],
            "total_points": summary["total_points"],
            "total_steps": summary["total_steps"],
            "weekly_points_goal": goals["weekly_points_goal"],
            "daily_steps_goal": goals["daily_steps_goal"],
            "weekly_goal_progress": clamp_percentage(weekly_points / goals["weekly_points_goal"] * 100),
        }

    @staticmethod
    def get_breakdown(db: Session, user_id: int, today: date) -> dict:
        """Trailing 7 and 30 days with per-habit flags and completion counts.

        Weekly average divides by 7 regardless of how many days have a row.
        """
        start = week_start(today)
        daily_data = build_weekly(HabitService.get_range(db, user_id, start, today), start, flags=True)
        weekly_total = sum(entry["points"] for entry in daily_data)

        month_rows = HabitService.get_range(db, user_id, today - timedelta(days=MONTH_DAYS - 1), today)
        summary = summarise_monthly(month_rows)
        counts = summary["completion_counts"]
        rates = summary["habit_completion"]

        return {
            "weekly": {
                "daily_data": daily_data,
                "total_points": weekly_total,
                "total_steps": sum(entry["steps"] for entry in daily_data),
                "average_daily_points": round(weekly_total / WEEK_DAYS, 1),
            },
            "monthly": {
                "habit_completion_rates": rates,
                "completion_counts": counts,
                "habit_completion_data": [
                    {
                        "habit": key,
                        "name": HABIT_LABELS[key],
                        "completed": counts[key],
                        "total": MONTH_DAYS,
                        "percentage": rates[key],
                    }
                    for key in HABIT_KEYS
                ],
                "total_points": summary["total_points"],
                "total_steps": summary["total_steps"],
            },
        }
