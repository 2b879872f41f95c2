import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 720  # 30 days

# --- Database ---
# Default to local SQLite, but prefer environment variable (for hosted Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/outdoor.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Daily reset scheduler ---
ENABLE_SCHEDULERS = os.getenv("ENABLE_SCHEDULERS", "false").lower() == "true"
RESET_TIMEZONE = os.getenv("RESET_TIMEZONE", "UTC")  # IANA name, e.g. "America/Argentina/Buenos_Aires"
DAILY_RESET_TIME = os.getenv("DAILY_RESET_TIME", "00:00")  # local HH:MM
RESET_CATCHUP_MAX_DAYS = int(os.getenv("RESET_CATCHUP_MAX_DAYS", "7"))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "30"))

# --- Goals ---
DEFAULT_DAILY_STEPS_GOAL = 6500
DEFAULT_WEEKLY_POINTS_GOAL = 18
