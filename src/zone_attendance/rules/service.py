from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..core.constants import DEFAULT_GLOBAL_GOAL_MINUTES
from ..core.exceptions import RuleNotFoundForDate, ValidationError
from .model import DailyRule, ZoneRule
from .repository import RuleRepository

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneChoice:
    """A zone offered on a kiosk together with the day it belongs to."""

    zone: ZoneRule
    rule: DailyRule


class RuleService:
    def __init__(self, rules: RuleRepository, *, default_global_goal: int = DEFAULT_GLOBAL_GOAL_MINUTES):
        self._rules = rules
        self._default_global_goal = int(default_global_goal)

    def find_rule(self, conference_id: str, day: date) -> Optional[DailyRule]:
        return self._rules.get_daily_rule(conference_id, day)

    def get_rule(self, conference_id: str, day: date) -> DailyRule:
        rule = self._rules.get_daily_rule(conference_id, day)
        if rule is None:
            raise RuleNotFoundForDate(f"No attendance rule for {day.isoformat()}")
        return rule

    def list_rules(self, conference_id: str) -> list[DailyRule]:
        return list(self._rules.list_daily_rules(conference_id))

    def kiosk_zones(self, conference_id: str) -> list[ZoneChoice]:
        """All zones of every day, flattened and de-duplicated by zone id.

        A zone id configured on several days keeps its latest day.
        """

        by_id: dict[str, ZoneChoice] = {}
        for rule in self._rules.list_daily_rules(conference_id):
            for zone in rule.zones:
                by_id[zone.id] = ZoneChoice(zone=zone, rule=rule)
        return list(by_id.values())

    def save_rule(self, conference_id: str, payload: dict[str, Any]) -> DailyRule:
        if not payload.get("date"):
            raise ValidationError("date is required")
        try:
            rule = DailyRule.from_dict(payload["date"], payload, default_global_goal=self._default_global_goal)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed attendance rule: {e}")
        self.validate(rule)
        self._rules.save_daily_rule(conference_id, rule)
        log.info("Saved attendance rule conference=%s date=%s zones=%d", conference_id, rule.date, len(rule.zones))
        return rule

    @staticmethod
    def validate(rule: DailyRule) -> None:
        if rule.global_goal_minutes < 0 or rule.cumulative_goal_minutes < 0:
            raise ValidationError("Goal minutes must not be negative")

        seen: set[str] = set()
        for zone in rule.zones:
            if zone.id in seen:
                raise ValidationError(f"Duplicate zone id {zone.id!r}")
            seen.add(zone.id)

            if zone.operating_start >= zone.operating_end:
                raise ValidationError(f"Zone {zone.name!r}: operating start must be before end")
            if zone.goal_minutes < 0:
                raise ValidationError(f"Zone {zone.name!r}: goal minutes must not be negative")

            windows = sorted(zone.breaks, key=lambda b: b.start)
            for brk in windows:
                if brk.start >= brk.end:
                    raise ValidationError(f"Zone {zone.name!r}: break {brk.label!r} must start before it ends")
            # Overlapping breaks would be deducted twice.
            for prev, nxt in zip(windows, windows[1:]):
                if nxt.start < prev.end:
                    raise ValidationError(f"Zone {zone.name!r}: breaks {prev.label!r} and {nxt.label!r} overlap")
