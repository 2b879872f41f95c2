"""Run the daily reset once. Usage: python run_reset.py [YYYY-MM-DD] [--force]"""
import sys
from datetime import date, timedelta

from database import SessionLocal, init_db
from services.habit_service import local_today
from services.reset_service import ResetService


def main(argv: list[str]) -> int:
    force = "--force" in argv
    args = [a for a in argv if a != "--force"]
    reset_date = date.fromisoformat(args[0]) if args else local_today() - timedelta(days=1)

    init_db()
    db = SessionLocal()
    try:
        execution = ResetService.run(db, reset_date, force=force)
    finally:
        db.close()

    if execution is None:
        print(f"Reset for {reset_date} already completed (use --force to rerun).")
        return 0
    print(f"Reset {reset_date}: {execution.status} — {execution.users_processed} users, "
          f"{execution.total_daily_points} points, {execution.total_steps} steps, "
          f"{execution.total_notes} notes in {execution.execution_time_ms}ms")
    return 0 if execution.status != "failed" else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
