import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_roster_test"),
}

DEBUG = True
LOG_LEVEL = "WARNING"
AUTO_INIT_DB = False

IMPORT_PREVIEW_ROWS = 3
IMPORT_CHUNK_SIZE = 16
MAX_UPLOAD_BYTES = 64 * 1024
