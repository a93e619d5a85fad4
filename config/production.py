import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "secureattend"),
}

ATTENDANCE = {
    "grace_period_minutes": int(os.getenv("GRACE_PERIOD_MINUTES", "30")),
    "timezone": os.getenv("APP_TIMEZONE", "Asia/Manila"),
    "late_tolerance_minutes": int(os.getenv("LATE_TOLERANCE_MINUTES", "0")),
}

SWEEP_INTERVAL_MINUTES = int(os.getenv("SWEEP_INTERVAL_MINUTES", "5"))
AUTO_START_SWEEP = bool(int(os.getenv("AUTO_START_SWEEP", "1")))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
