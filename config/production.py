import os

from config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "chamada"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "chamada_db"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "5")),
}

DEBUG = False

OFFLINE_STORAGE_DIR = os.getenv("OFFLINE_STORAGE_DIR", "/var/lib/roll-call/offline")

AUTOSAVE_DELAY_SECONDS = float(os.getenv("AUTOSAVE_DELAY_SECONDS", "1.0"))
SYNC_INTERVAL_SECONDS = float(os.getenv("SYNC_INTERVAL_SECONDS", "3"))
SYNC_SCHEDULER_ENABLED = env_flag("SYNC_SCHEDULER_ENABLED", "1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/roll_call.log")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
