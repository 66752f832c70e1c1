from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional

from ..common.datetime_utils import on_day, parse_hhmm, parse_iso_date
from ..core.constants import DEFAULT_GLOBAL_GOAL_MINUTES
from ..core.enums import CompletionMode
from ..core.exceptions import ZoneNotFound


@dataclass(frozen=True)
class BreakWindow:
    """Scheduled break; wall-clock times placed on the owning day's date."""

    label: str
    start: time
    end: time

    def span_on(self, day: date) -> tuple[datetime, datetime]:
        return on_day(day, self.start), on_day(day, self.end)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BreakWindow":
        return cls(
            label=str(data.get("label") or "Break"),
            start=parse_hhmm(data["start"]),
            end=parse_hhmm(data["end"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "start": self.start.strftime("%H:%M"), "end": self.end.strftime("%H:%M")}


@dataclass(frozen=True)
class ZoneRule:
    """Per-day configuration of one physical zone."""

    id: str
    name: str
    operating_start: time
    operating_end: time
    goal_minutes: int = 0  # 0 = inherit the day's global goal
    auto_checkout: bool = False
    breaks: tuple[BreakWindow, ...] = ()
    points: int = 0

    def is_open_at(self, moment: datetime) -> bool:
        return self.operating_start <= moment.time() < self.operating_end

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ZoneRule":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            operating_start=parse_hhmm(data.get("start") or "00:00"),
            operating_end=parse_hhmm(data.get("end") or "23:59"),
            goal_minutes=int(data.get("goalMinutes") or 0),
            auto_checkout=bool(data.get("autoCheckout", False)),
            breaks=tuple(BreakWindow.from_dict(b) for b in data.get("breaks") or ()),
            points=int(data.get("points") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.operating_start.strftime("%H:%M"),
            "end": self.operating_end.strftime("%H:%M"),
            "goalMinutes": self.goal_minutes,
            "autoCheckout": self.auto_checkout,
            "breaks": [b.to_dict() for b in self.breaks],
            "points": self.points,
        }


@dataclass(frozen=True)
class DailyRule:
    """Attendance configuration for one calendar day of a conference."""

    date: date
    global_goal_minutes: int = DEFAULT_GLOBAL_GOAL_MINUTES
    zones: tuple[ZoneRule, ...] = field(default_factory=tuple)
    completion_mode: CompletionMode = CompletionMode.DAILY_SEPARATE
    cumulative_goal_minutes: int = 0

    def find_zone(self, zone_id: Optional[str]) -> Optional[ZoneRule]:
        for zone in self.zones:
            if zone.id == zone_id:
                return zone
        return None

    def zone(self, zone_id: str) -> ZoneRule:
        zone = self.find_zone(zone_id)
        if zone is None:
            raise ZoneNotFound(f"Zone {zone_id!r} is not configured for {self.date.isoformat()}")
        return zone

    def effective_goal(self, zone: ZoneRule) -> int:
        if self.completion_mode == CompletionMode.CUMULATIVE and self.cumulative_goal_minutes > 0:
            return self.cumulative_goal_minutes
        if zone.goal_minutes > 0:
            return zone.goal_minutes
        return self.global_goal_minutes

    @classmethod
    def from_dict(
        cls,
        day: str | date,
        data: dict[str, Any],
        *,
        default_global_goal: int = DEFAULT_GLOBAL_GOAL_MINUTES,
    ) -> "DailyRule":
        if isinstance(day, str):
            day = parse_iso_date(day)
        global_goal = data.get("globalGoalMinutes")
        cumulative_goal = data.get("cumulativeGoalMinutes")
        return cls(
            date=day,
            global_goal_minutes=int(default_global_goal if global_goal is None else global_goal),
            zones=tuple(ZoneRule.from_dict(z) for z in data.get("zones") or ()),
            completion_mode=CompletionMode(data.get("completionMode") or CompletionMode.DAILY_SEPARATE.value),
            cumulative_goal_minutes=int(0 if cumulative_goal is None else cumulative_goal),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "globalGoalMinutes": self.global_goal_minutes,
            "zones": [z.to_dict() for z in self.zones],
            "completionMode": self.completion_mode.value,
            "cumulativeGoalMinutes": self.cumulative_goal_minutes,
        }
