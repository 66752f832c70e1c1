"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GLOBAL_GOAL_MINUTES = 240
DEFAULT_LIVE_REFRESH_SECONDS = 30
DEFAULT_KIOSK_DISPLAY_SECONDS = 3
DEFAULT_LOG_LIMIT = 200
BADGE_QR_PREFIX = "BADGE-"
PAID = "PAID"
