from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceLogEntry, AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.settlement import stay_minutes_from_logs
from ..common.datetime_utils import format_minutes
from ..core.constants import DEFAULT_LOG_LIMIT
from ..core.enums import LogType
from ..rules.model import BreakWindow, DailyRule
from ..rules.repository import RuleRepository

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRowUI:
    log_id: Optional[int]
    timestamp: str
    type: str
    zone_id: str
    method: str
    raw: str
    deduction: str
    recognized: str
    accumulated_total: str
    completed: str
    note: str
    css_class: str


@dataclass(frozen=True)
class Reconciliation:
    participant_id: str
    stored_total: int
    replayed_total: int

    @property
    def matches(self) -> bool:
        return self.stored_total == self.replayed_total


_CSS_CLASS = {
    LogType.ENTER: "log-enter",
    LogType.EXIT: "log-exit",
    LogType.RESET: "log-reset",
}


def _minutes(value: Optional[int]) -> str:
    return "" if value is None else format_minutes(value)


def _completed(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "yes" if value else "no"


class AuditService:
    """Read-only view over the attendance log."""

    def __init__(self, attendance: AttendanceRepository, rules: RuleRepository):
        self._attendance = attendance
        self._rules = rules

    def list_logs(self, conference_id: str, participant_id: str, *, limit: int = DEFAULT_LOG_LIMIT) -> list[AttendanceLogEntry]:
        return list(self._attendance.list_logs(conference_id, participant_id, limit=limit))

    def get_history_ui(self, conference_id: str, participant_id: str, *, limit: int = DEFAULT_LOG_LIMIT) -> list[AuditRowUI]:
        rows: list[AuditRowUI] = []
        for entry in self.list_logs(conference_id, participant_id, limit=limit):
            rows.append(
                AuditRowUI(
                    log_id=entry.log_id,
                    timestamp=entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                    type=entry.type.value,
                    zone_id=entry.zone_id or "",
                    method=entry.method.value,
                    raw=_minutes(entry.raw_duration_minutes),
                    deduction=_minutes(entry.deduction_minutes),
                    recognized=_minutes(entry.recognized_minutes),
                    accumulated_total=_minutes(entry.accumulated_total),
                    completed=_completed(entry.evaluated_completed),
                    note=entry.note or "",
                    css_class=_CSS_CLASS[entry.type],
                )
            )
        return rows

    def reconcile(self, conference_id: str, participant_id: str) -> Reconciliation:
        """Compare the stored total with a replay of the participant's log.

        Open stays are not counted; the stored total does not include them
        either.
        """

        record = self._attendance.get_record(conference_id, participant_id) or AttendanceRecord.initial(
            conference_id, participant_id
        )
        logs = self._attendance.list_logs(conference_id, participant_id, limit=sys.maxsize)

        rules_by_day: dict[date, Optional[DailyRule]] = {}

        def breaks_for(zone_id: Optional[str], day: date) -> tuple[BreakWindow, ...]:
            if day not in rules_by_day:
                rules_by_day[day] = self._rules.get_daily_rule(conference_id, day)
            rule = rules_by_day[day]
            zone = rule.find_zone(zone_id) if rule else None
            return zone.breaks if zone else ()

        result = Reconciliation(
            participant_id=participant_id,
            stored_total=record.total_minutes,
            replayed_total=stay_minutes_from_logs(logs, breaks_for=breaks_for),
        )
        if not result.matches:
            log.warning(
                "Total mismatch conference=%s participant=%s stored=%d replayed=%d",
                conference_id,
                participant_id,
                result.stored_total,
                result.replayed_total,
            )
        return result
