import os
from pathlib import Path

from config import env_flag

BASE_DIR = Path(__file__).resolve().parents[1]

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "chamada_db"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "3")),
}

DEBUG = True

# Local medium for drafts, the pending queue and downloaded rosters
OFFLINE_STORAGE_DIR = os.getenv("OFFLINE_STORAGE_DIR", str(BASE_DIR / "instance" / "offline"))

AUTOSAVE_DELAY_SECONDS = float(os.getenv("AUTOSAVE_DELAY_SECONDS", "1.0"))
SYNC_INTERVAL_SECONDS = float(os.getenv("SYNC_INTERVAL_SECONDS", "3"))
SYNC_SCHEDULER_ENABLED = env_flag("SYNC_SCHEDULER_ENABLED", "1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE") or None

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
