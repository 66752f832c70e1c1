from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyRule


class RuleRepository(Protocol):
    def get_daily_rule(self, conference_id: str, day: date) -> Optional[DailyRule]:
        raise NotImplementedError

    def list_daily_rules(self, conference_id: str) -> Sequence[DailyRule]:
        raise NotImplementedError

    def save_daily_rule(self, conference_id: str, rule: DailyRule) -> None:
        raise NotImplementedError
