import os

APP_ENV = "development"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
    # Session time zone for TIMESTAMP columns (offset form works without tz tables).
    "time_zone": os.getenv("DB_TIME_ZONE", "+07:00"),
}

PORT = int(os.getenv("PORT", "8080"))
TIME_ZONE = os.getenv("TZ", "Asia/Jakarta")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
