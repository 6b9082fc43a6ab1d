import os

from config.config import Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = bool(int(os.getenv("DEBUG", "1")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

IMPORT_PREVIEW_ROWS = Config.IMPORT_PREVIEW_ROWS
IMPORT_CHUNK_SIZE = Config.IMPORT_CHUNK_SIZE
MAX_UPLOAD_BYTES = Config.MAX_UPLOAD_BYTES
