import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

MAX_DAILY_HOURS = float(os.getenv("MAX_DAILY_HOURS", "12"))
SCHEDULE_TOLERANCE_MINUTES = int(os.getenv("SCHEDULE_TOLERANCE_MINUTES", "15"))
OPEN_ENTRY_GRACE_HOURS = int(os.getenv("OPEN_ENTRY_GRACE_HOURS", "16"))
DASHBOARD_TOP_N = int(os.getenv("DASHBOARD_TOP_N", "5"))
TREND_MONTHS = int(os.getenv("TREND_MONTHS", "6"))
