import os

APP_ENV = "production"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
    "time_zone": os.getenv("DB_TIME_ZONE", "+07:00"),
}

PORT = int(os.getenv("PORT", "8080"))
TIME_ZONE = os.getenv("TZ", "Asia/Jakarta")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
