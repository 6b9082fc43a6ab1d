import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

IMPORT_PREVIEW_ROWS = Config.IMPORT_PREVIEW_ROWS
IMPORT_CHUNK_SIZE = Config.IMPORT_CHUNK_SIZE
MAX_UPLOAD_BYTES = Config.MAX_UPLOAD_BYTES
