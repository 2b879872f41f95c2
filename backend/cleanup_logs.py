"""Purge old system_logs rows. Usage: python cleanup_logs.py [days]"""
import sys

from config import LOG_RETENTION_DAYS
from database import SessionLocal
from logger import SystemLogger

if __name__ == "__main__":
    arg = sys.argv[1] if len(sys.argv) > 1 else ""
    days = int(arg) if arg.isdigit() else LOG_RETENTION_DAYS

    db = SessionLocal()
    try:
        deleted = SystemLogger.purge_old_logs(db, days)
        print(f"Cleanup done (older than {days} days). Deleted {deleted} rows.")
    except Exception as e:
        print(f"Cleanup error: {e}")
        sys.exit(1)
    finally:
        db.close()
