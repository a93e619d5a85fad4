import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "secureattend_test"),
}

ATTENDANCE = {
    "grace_period_minutes": 30,
    "timezone": "Asia/Manila",
    "late_tolerance_minutes": 0,
}

SWEEP_INTERVAL_MINUTES = 5
AUTO_START_SWEEP = False

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
