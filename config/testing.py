import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False

AUTO_ATTENDANCE_MODE = "absent"
AUTO_ATTENDANCE_NOTE = "Attendance was not recorded by the teacher"
AUTO_ATTENDANCE_GRACE_MINUTES = 0
AUTO_ATTENDANCE_LOOKBACK_DAYS = 0
AUTO_ATTENDANCE_MAX_WORKERS = 2
AUTO_ATTENDANCE_TIMEOUT_SECONDS = 5.0
