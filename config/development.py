import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "secureattend"),
}

# Attendance status rules; timezone is the business zone every shift is read in.
ATTENDANCE = {
    "grace_period_minutes": int(os.getenv("GRACE_PERIOD_MINUTES", "30")),
    "timezone": os.getenv("APP_TIMEZONE", "Asia/Manila"),
    "late_tolerance_minutes": int(os.getenv("LATE_TOLERANCE_MINUTES", "0")),
}

SWEEP_INTERVAL_MINUTES = int(os.getenv("SWEEP_INTERVAL_MINUTES", "5"))
AUTO_START_SWEEP = bool(int(os.getenv("AUTO_START_SWEEP", "1")))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
