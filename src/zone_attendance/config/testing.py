import os

from .base import *  # noqa: F401,F403
from .base import db_config_from_env, logging_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env()

DEBUG = False
TESTING = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOGGING = logging_config(LOG_LEVEL)

AUTO_INIT_DB = False
AUTO_SEED_DB = False
