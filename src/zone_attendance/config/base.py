import os

from ..core import constants


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config_from_env() -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", "zone_attendance"),
    }


def logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "plain"},
        },
        "loggers": {
            "zone_attendance": {"handlers": ["console"], "level": level, "propagate": False},
            "": {"handlers": ["console"], "level": "WARNING"},
        },
    }


KIOSK_DISPLAY_SECONDS = int(os.getenv("KIOSK_DISPLAY_SECONDS", str(constants.DEFAULT_KIOSK_DISPLAY_SECONDS)))
LIVE_REFRESH_SECONDS = int(os.getenv("LIVE_REFRESH_SECONDS", str(constants.DEFAULT_LIVE_REFRESH_SECONDS)))
DEFAULT_GLOBAL_GOAL_MINUTES = int(os.getenv("DEFAULT_GLOBAL_GOAL_MINUTES", str(constants.DEFAULT_GLOBAL_GOAL_MINUTES)))

# When enabled, check-in outside a zone's operating hours fails with ZoneClosed.
ENFORCE_OPERATING_HOURS = env_flag("ENFORCE_OPERATING_HOURS", "0")
