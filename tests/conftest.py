from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from zone_attendance.attendance.model import AttendanceLogEntry, AttendanceRecord
from zone_attendance.attendance.service import AttendanceService
from zone_attendance.core.enums import ParticipantSource, PresenceStatus
from zone_attendance.core.exceptions import TransactionConflict
from zone_attendance.membership.model import MemberCode, MemberUsageAudit
from zone_attendance.participants.model import Participant
from zone_attendance.rules.model import BreakWindow, DailyRule, ZoneRule

CONF = "demo_2026spring"
DAY = date(2026, 4, 18)


def at(hour: int, minute: int = 0, second: int = 0, day: date = DAY) -> datetime:
    return datetime.combine(day, time(hour, minute, second))


@dataclass
class InMemoryRules:
    rules: dict[tuple[str, date], DailyRule] = field(default_factory=dict)

    def get_daily_rule(self, conference_id: str, day: date) -> Optional[DailyRule]:
        return self.rules.get((conference_id, day))

    def list_daily_rules(self, conference_id: str):
        return [r for (cid, _), r in sorted(self.rules.items(), key=lambda kv: kv[0][1]) if cid == conference_id]

    def save_daily_rule(self, conference_id: str, rule: DailyRule) -> None:
        self.rules[(conference_id, rule.date)] = rule


class InMemoryAttendance:
    """Versioned store mirroring the MySQL repository contract."""

    def __init__(self):
        self.records: dict[tuple[str, str], AttendanceRecord] = {}
        self.logs: list[AttendanceLogEntry] = []
        self.commits = 0
        self.conflicts_to_raise = 0
        self._log_id = 0

    def get_record(self, conference_id: str, participant_id: str) -> Optional[AttendanceRecord]:
        return self.records.get((conference_id, participant_id))

    def commit_transition(self, *, record: AttendanceRecord, expected_version: int, logs) -> AttendanceRecord:
        if self.conflicts_to_raise > 0:
            self.conflicts_to_raise -= 1
            raise TransactionConflict("simulated concurrent write")

        key = (record.conference_id, record.participant_id)
        stored = self.records.get(key)
        stored_version = stored.version if stored else 0
        if stored_version != expected_version:
            raise TransactionConflict(f"expected v{expected_version}, found v{stored_version}")

        committed = replace(record, version=expected_version + 1)
        self.records[key] = committed
        for entry in logs:
            self._log_id += 1
            self.logs.append(replace(entry, log_id=self._log_id))
        self.commits += 1
        return committed

    def list_logs(self, conference_id: str, participant_id: str, *, limit: int):
        items = [e for e in self.logs if e.conference_id == conference_id and e.participant_id == participant_id]
        items.sort(key=lambda e: (e.timestamp, e.log_id), reverse=True)
        return items[:limit]

    def list_records(self, conference_id: str, *, status: Optional[PresenceStatus] = None, zone_id: Optional[str] = None):
        return [
            r
            for (cid, _), r in sorted(self.records.items())
            if cid == conference_id
            and (status is None or r.attendance_status == status)
            and (zone_id is None or r.current_zone_id == zone_id)
        ]


@dataclass
class InMemoryParticipants:
    participants: list[Participant] = field(default_factory=list)

    def find_by_badge_qr(self, conference_id: str, badge_qr: str) -> Optional[Participant]:
        matches = [p for p in self.participants if p.conference_id == conference_id and p.badge_qr == badge_qr]
        matches.sort(key=lambda p: p.source == ParticipantSource.EXTERNAL)
        return matches[0] if matches else None

    def get_by_id(self, conference_id: str, participant_id: str) -> Optional[Participant]:
        for p in self.participants:
            if p.conference_id == conference_id and p.participant_id == participant_id:
                return p
        return None

    def list_badge_holders(self, conference_id: str):
        return sorted(
            (p for p in self.participants if p.conference_id == conference_id and p.badge_issued),
            key=lambda p: p.name,
        )


@dataclass
class InMemoryMembers:
    members: dict[tuple[str, str], MemberCode] = field(default_factory=dict)
    audits: list[MemberUsageAudit] = field(default_factory=list)

    def get(self, society_id: str, member_id: str) -> Optional[MemberCode]:
        return self.members.get((society_id, member_id))

    def save_reset(self, member: MemberCode, audit: MemberUsageAudit) -> None:
        self.members[(member.society_id, member.member_id)] = member
        self.audits.append(replace(audit, audit_id=len(self.audits) + 1))

    def list_audit(self, society_id: str, member_id: str):
        return [a for a in reversed(self.audits) if a.society_id == society_id and a.member_id == member_id]


def demo_rule(day: date = DAY, **overrides) -> DailyRule:
    main_hall = ZoneRule(
        id="main_hall",
        name="Main Hall",
        operating_start=time(9, 0),
        operating_end=time(18, 0),
        auto_checkout=True,
        breaks=(BreakWindow("Lunch", time(12, 0), time(13, 0)),),
    )
    room_a = ZoneRule(
        id="room_a",
        name="Room A",
        operating_start=time(9, 0),
        operating_end=time(17, 0),
        goal_minutes=120,
    )
    values = {"date": day, "global_goal_minutes": 240, "zones": (main_hall, room_a)}
    values.update(overrides)
    return DailyRule(**values)


@pytest.fixture
def rules_repo() -> InMemoryRules:
    repo = InMemoryRules()
    repo.save_daily_rule(CONF, demo_rule())
    return repo


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def participants_repo() -> InMemoryParticipants:
    return InMemoryParticipants(
        [
            Participant("reg_001", CONF, "Alice Kim", email="alice@example.org", affiliation="Seoul Univ",
                        badge_qr="BADGE-reg_001", badge_issued=True, payment_status="PAID"),
            Participant("reg_002", CONF, "Bob Lee", email="bob@example.org", affiliation="Busan Hospital",
                        badge_qr="BADGE-reg_002", badge_issued=True, payment_status="PAID"),
            Participant("reg_003", CONF, "Carol Park", badge_qr="BADGE-reg_003", badge_issued=False,
                        payment_status="PAID"),
            Participant("reg_004", CONF, "Dan Choi", badge_qr="BADGE-reg_004", badge_issued=True,
                        payment_status="PENDING"),
            Participant("ext_001", CONF, "Eve Guest", source=ParticipantSource.EXTERNAL,
                        badge_qr="BADGE-ext_001", badge_issued=True),
        ]
    )


@pytest.fixture
def service(attendance_repo, rules_repo) -> AttendanceService:
    return AttendanceService(attendance_repo, rules_repo, clock=lambda: at(9))
