import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

AUTO_ATTENDANCE_MODE = os.getenv("AUTO_ATTENDANCE_MODE", "absent")
AUTO_ATTENDANCE_NOTE = os.getenv("AUTO_ATTENDANCE_NOTE", "Attendance was not recorded by the teacher")
AUTO_ATTENDANCE_GRACE_MINUTES = int(os.getenv("AUTO_ATTENDANCE_GRACE_MINUTES", "15"))
AUTO_ATTENDANCE_LOOKBACK_DAYS = int(os.getenv("AUTO_ATTENDANCE_LOOKBACK_DAYS", "1"))
AUTO_ATTENDANCE_MAX_WORKERS = int(os.getenv("AUTO_ATTENDANCE_MAX_WORKERS", "4"))
AUTO_ATTENDANCE_TIMEOUT_SECONDS = float(os.getenv("AUTO_ATTENDANCE_TIMEOUT_SECONDS", "30"))
