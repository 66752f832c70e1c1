import os


def get_settings_module() -> str:
    """Settings module for the current ``APP_ENV`` (default: development)."""

    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "zone_attendance.config.production"

    if env in {"test", "testing"}:
        return "zone_attendance.config.testing"

    return "zone_attendance.config.development"
