import os

from .base import *  # noqa: F401,F403
from .base import db_config_from_env, env_flag, logging_config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOGGING = logging_config(LOG_LEVEL)

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed the demo conference on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
