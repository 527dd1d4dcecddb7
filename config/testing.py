import os
import tempfile

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "chamada_test"),
    "connect_timeout": 1,
}

DEBUG = False
TESTING = True

OFFLINE_STORAGE_DIR = os.getenv("OFFLINE_STORAGE_DIR", os.path.join(tempfile.gettempdir(), "roll_call_test"))

AUTOSAVE_DELAY_SECONDS = 0.05
SYNC_INTERVAL_SECONDS = 0.1
SYNC_SCHEDULER_ENABLED = False

LOG_LEVEL = "WARNING"
LOG_FILE = None

AUTO_INIT_DB = False
