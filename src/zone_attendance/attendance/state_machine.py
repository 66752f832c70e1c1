from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import CheckMethod, LogType, PresenceStatus
from ..core.exceptions import (
    AlreadyInsideSameZone,
    InsideDifferentZone,
    NotInside,
    RuleNotFoundForDate,
    ZoneClosed,
)
from ..rules.model import DailyRule, ZoneRule
from .model import AttendanceLogEntry, AttendanceRecord
from .settlement import Settlement, settle


@dataclass(frozen=True)
class Transition:
    """New record state plus the log entries that must be committed with it."""

    record: AttendanceRecord
    logs: tuple[AttendanceLogEntry, ...]
    settlement: Optional[Settlement] = None
    warnings: tuple[str, ...] = ()


class AttendanceStateMachine:
    """OUTSIDE <-> INSIDE transitions of an attendance record.

    Pure: it never reads or writes storage. Rules are always passed in by the
    caller; ``check_out`` and ``switch_zone`` take the rule of the day the
    open check-in happened (``settle_rule``) because its breaks apply.
    """

    def __init__(self, *, enforce_operating_hours: bool = False):
        self._enforce_operating_hours = bool(enforce_operating_hours)

    def _resolve_zone(self, rule: Optional[DailyRule], zone_id: str, now: datetime) -> ZoneRule:
        if rule is None:
            raise RuleNotFoundForDate(f"No attendance rule for {now.date().isoformat()}")
        zone = rule.zone(zone_id)
        if self._enforce_operating_hours and not zone.is_open_at(now):
            raise ZoneClosed(
                f"{zone.name} is open {zone.operating_start:%H:%M}-{zone.operating_end:%H:%M}"
            )
        return zone

    def check_in(
        self,
        record: AttendanceRecord,
        *,
        rule: Optional[DailyRule],
        zone_id: str,
        now: datetime,
        method: CheckMethod,
    ) -> Transition:
        if record.is_inside:
            if record.current_zone_id == zone_id:
                raise AlreadyInsideSameZone()
            raise InsideDifferentZone()

        zone = self._resolve_zone(rule, zone_id, now)
        new_record = replace(
            record,
            attendance_status=PresenceStatus.INSIDE,
            current_zone_id=zone.id,
            last_check_in_at=now,
        )
        entry = AttendanceLogEntry(
            conference_id=record.conference_id,
            participant_id=record.participant_id,
            type=LogType.ENTER,
            zone_id=zone.id,
            timestamp=now,
            method=method,
        )
        return Transition(record=new_record, logs=(entry,))

    def check_out(
        self,
        record: AttendanceRecord,
        *,
        settle_rule: Optional[DailyRule],
        now: datetime,
        method: CheckMethod,
    ) -> Transition:
        if not record.is_inside:
            raise NotInside()

        check_in_at = record.last_check_in_at
        zone = settle_rule.find_zone(record.current_zone_id) if settle_rule else None
        warnings: tuple[str, ...] = ()

        if zone is not None:
            settlement = settle(check_in_at, now, zone.breaks, settle_rule.date)
        else:
            # Configuration gap: settle without breaks, keep completion as is.
            settlement = settle(check_in_at, now, (), check_in_at.date())
            warnings = (
                f"Zone {record.current_zone_id!r} has no rule for {check_in_at.date().isoformat()}; "
                "settled without break deduction",
            )

        total = record.total_minutes + settlement.recognized_minutes
        completed = record.is_completed
        if zone is not None:
            goal = settle_rule.effective_goal(zone)
            completed = goal > 0 and total >= goal

        new_record = replace(
            record,
            attendance_status=PresenceStatus.OUTSIDE,
            current_zone_id=None,
            last_check_in_at=None,
            last_check_out_at=now,
            total_minutes=total,
            is_completed=completed,
        )
        entry = AttendanceLogEntry(
            conference_id=record.conference_id,
            participant_id=record.participant_id,
            type=LogType.EXIT,
            zone_id=record.current_zone_id,
            timestamp=now,
            method=method,
            raw_duration_minutes=settlement.raw_minutes,
            deduction_minutes=settlement.deduction_minutes,
            recognized_minutes=settlement.recognized_minutes,
            accumulated_total=total,
            evaluated_completed=completed,
        )
        return Transition(record=new_record, logs=(entry,), settlement=settlement, warnings=warnings)

    def switch_zone(
        self,
        record: AttendanceRecord,
        *,
        settle_rule: Optional[DailyRule],
        rule: Optional[DailyRule],
        zone_id: str,
        now: datetime,
        method: CheckMethod,
    ) -> Transition:
        if not record.is_inside:
            return self.check_in(record, rule=rule, zone_id=zone_id, now=now, method=method)
        if record.current_zone_id == zone_id:
            raise AlreadyInsideSameZone()

        # A bad target must not check the participant out of the current zone.
        self._resolve_zone(rule, zone_id, now)

        out = self.check_out(record, settle_rule=settle_rule, now=now, method=method)
        into = self.check_in(out.record, rule=rule, zone_id=zone_id, now=now, method=method)
        return Transition(
            record=into.record,
            logs=out.logs + into.logs,
            settlement=out.settlement,
            warnings=out.warnings,
        )

    def reset_minutes(
        self,
        record: AttendanceRecord,
        *,
        now: datetime,
        actor: str,
        reason: Optional[str] = None,
    ) -> Transition:
        """Administrative reset of accrued minutes; presence is untouched."""

        new_record = replace(record, total_minutes=0, is_completed=False)
        note = f"reset by {actor}: {record.total_minutes} -> 0"
        if reason:
            note = f"{note} ({reason})"
        entry = AttendanceLogEntry(
            conference_id=record.conference_id,
            participant_id=record.participant_id,
            type=LogType.RESET,
            zone_id=record.current_zone_id,
            timestamp=now,
            method=CheckMethod.MANUAL_ADMIN,
            accumulated_total=0,
            evaluated_completed=False,
            note=note,
        )
        return Transition(record=new_record, logs=(entry,))
