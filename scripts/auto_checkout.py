"""Close open stays in auto-checkout zones after their operating hours.

Meant for cron, e.g. every 15 minutes:

    python scripts/auto_checkout.py demo_2026spring
"""

from __future__ import annotations

import argparse
import importlib
import logging.config

from dotenv import load_dotenv

from zone_attendance.common.datetime_utils import now_local, parse_iso_date
from zone_attendance.config import get_settings_module
from zone_attendance.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("conference_id")
    parser.add_argument("--date", help="YYYY-MM-DD (default: today)")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.config.dictConfig(settings.LOGGING)

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        enforce_operating_hours=settings.ENFORCE_OPERATING_HOURS,
        default_global_goal=settings.DEFAULT_GLOBAL_GOAL_MINUTES,
    )

    now = now_local()
    day = parse_iso_date(args.date) if args.date else now.date()
    result = container.attendance_service.auto_checkout(args.conference_id, day, now=now)

    print(f"OK: auto checkout {args.conference_id} {day}: processed={result.processed} failed={len(result.failures)}")
    for participant_id, code in sorted(result.failures.items()):
        print(f"  {participant_id}: {code}")


if __name__ == "__main__":
    main()
