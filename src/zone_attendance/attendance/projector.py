from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import format_minutes, now_local
from ..core.constants import DEFAULT_LIVE_REFRESH_SECONDS
from ..core.enums import PresenceStatus
from ..participants.repository import ParticipantRepository
from ..rules.model import ZoneRule
from ..rules.repository import RuleRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .settlement import settle

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveProjection:
    participant_id: str
    status: PresenceStatus
    zone_id: Optional[str]
    total_minutes: int
    live_minutes: int
    is_completed: bool
    degraded: bool = False


def project(
    record: AttendanceRecord,
    zone_rule: Optional[ZoneRule],
    rule_date: Optional[date],
    now: datetime,
) -> LiveProjection:
    """Minutes a participant would hold if checked out at ``now``.

    Read-only. Without the zone rule of an open stay the stored total is
    returned and the projection is flagged ``degraded``.
    """

    live = record.total_minutes
    degraded = False
    if record.is_inside:
        if zone_rule is None or rule_date is None:
            degraded = True
        else:
            live += settle(record.last_check_in_at, now, zone_rule.breaks, rule_date).recognized_minutes

    return LiveProjection(
        participant_id=record.participant_id,
        status=record.attendance_status,
        zone_id=record.current_zone_id,
        total_minutes=record.total_minutes,
        live_minutes=live,
        is_completed=record.is_completed,
        degraded=degraded,
    )


@dataclass(frozen=True)
class LiveRowUI:
    participant_id: str
    name: str
    email: str
    affiliation: str
    status: str
    zone_id: str
    live_minutes: int
    live_display: str
    is_completed: bool
    degraded: bool


@dataclass(frozen=True)
class LiveTable:
    rows: list[LiveRowUI]
    refresh_seconds: int
    generated_at: datetime


@dataclass(frozen=True)
class ParticipantLiveView:
    projection: LiveProjection
    live_display: str
    refresh_seconds: int
    generated_at: datetime


class LiveProjector:
    """Projected live minutes for the admin table and for a participant's own view."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        rules: RuleRepository,
        participants: ParticipantRepository,
        *,
        refresh_seconds: int = DEFAULT_LIVE_REFRESH_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._rules = rules
        self._participants = participants
        self._refresh_seconds = int(refresh_seconds)
        self._clock = clock or now_local

    def project_record(self, record: AttendanceRecord, *, now: datetime | None = None) -> LiveProjection:
        now = now or self._clock()
        zone_rule = None
        rule_date = None
        if record.is_inside:
            rule_date = record.last_check_in_at.date()
            rule = self._rules.get_daily_rule(record.conference_id, rule_date)
            zone_rule = rule.find_zone(record.current_zone_id) if rule else None
            if zone_rule is None:
                log.warning(
                    "No zone rule for participant=%s zone=%s date=%s; showing stored total",
                    record.participant_id,
                    record.current_zone_id,
                    rule_date,
                )
        return project(record, zone_rule, rule_date, now)

    def project_table(self, conference_id: str, *, search: str = "", now: datetime | None = None) -> LiveTable:
        now = now or self._clock()
        records = {r.participant_id: r for r in self._attendance.list_records(conference_id)}

        rows: list[LiveRowUI] = []
        for p in self._participants.list_badge_holders(conference_id):
            if search and not p.matches(search):
                continue
            record = records.get(p.participant_id) or AttendanceRecord.initial(conference_id, p.participant_id)
            proj = self.project_record(record, now=now)
            rows.append(
                LiveRowUI(
                    participant_id=p.participant_id,
                    name=p.name,
                    email=p.email or "",
                    affiliation=p.affiliation or "",
                    status=proj.status.value,
                    zone_id=proj.zone_id or "",
                    live_minutes=proj.live_minutes,
                    live_display=format_minutes(proj.live_minutes),
                    is_completed=proj.is_completed,
                    degraded=proj.degraded,
                )
            )

        rows.sort(key=lambda r: (r.status != PresenceStatus.INSIDE.value, r.name.lower()))
        return LiveTable(rows=rows, refresh_seconds=self._refresh_seconds, generated_at=now)

    def participant_view(
        self, conference_id: str, participant_id: str, *, now: datetime | None = None
    ) -> ParticipantLiveView:
        """Read-only live minutes for a participant's own badge page."""

        now = now or self._clock()
        record = self._attendance.get_record(conference_id, participant_id) or AttendanceRecord.initial(
            conference_id, participant_id
        )
        projection = self.project_record(record, now=now)
        return ParticipantLiveView(
            projection=projection,
            live_display=format_minutes(projection.live_minutes),
            refresh_seconds=self._refresh_seconds,
            generated_at=now,
        )
