from __future__ import annotations

from dataclasses import dataclass

from .attendance.manual import ManualToggle
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.projector import LiveProjector
from .attendance.service import AttendanceService
from .attendance.state_machine import AttendanceStateMachine
from .audit.service import AuditService
from .core.constants import (
    DEFAULT_GLOBAL_GOAL_MINUTES,
    DEFAULT_KIOSK_DISPLAY_SECONDS,
    DEFAULT_LIVE_REFRESH_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .kiosk.policy import ScanPolicyFactory
from .kiosk.service import KioskService
from .membership.mysql_member_repository import MySQLMemberRepository
from .membership.service import MembershipService
from .participants.mysql_participant_repository import MySQLParticipantRepository
from .participants.service import ParticipantService
from .rules.mysql_rule_repository import MySQLRuleRepository
from .rules.service import RuleService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    rules_repo: MySQLRuleRepository
    attendance_repo: MySQLAttendanceRepository
    participants_repo: MySQLParticipantRepository
    members_repo: MySQLMemberRepository

    rule_service: RuleService
    attendance_service: AttendanceService
    live_projector: LiveProjector
    manual_toggle: ManualToggle
    participant_service: ParticipantService
    kiosk_service: KioskService
    audit_service: AuditService
    membership_service: MembershipService


def build_container(
    *,
    db_config: dict,
    enforce_operating_hours: bool = False,
    default_global_goal: int = DEFAULT_GLOBAL_GOAL_MINUTES,
    kiosk_display_seconds: int = DEFAULT_KIOSK_DISPLAY_SECONDS,
    live_refresh_seconds: int = DEFAULT_LIVE_REFRESH_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    rules_repo = MySQLRuleRepository(conn, default_global_goal=default_global_goal)
    attendance_repo = MySQLAttendanceRepository(conn)
    participants_repo = MySQLParticipantRepository(conn)
    members_repo = MySQLMemberRepository(conn)

    rule_service = RuleService(rules_repo, default_global_goal=default_global_goal)
    attendance_service = AttendanceService(
        attendance_repo,
        rules_repo,
        state_machine=AttendanceStateMachine(enforce_operating_hours=enforce_operating_hours),
    )
    live_projector = LiveProjector(
        attendance_repo,
        rules_repo,
        participants_repo,
        refresh_seconds=live_refresh_seconds,
    )
    manual_toggle = ManualToggle(attendance_service)
    participant_service = ParticipantService(participants_repo)
    kiosk_service = KioskService(
        attendance_service,
        participant_service,
        rule_service,
        policy_factory=ScanPolicyFactory(),
        display_seconds=kiosk_display_seconds,
    )
    audit_service = AuditService(attendance_repo, rules_repo)
    membership_service = MembershipService(members_repo)

    return Container(
        conn=conn,
        rules_repo=rules_repo,
        attendance_repo=attendance_repo,
        participants_repo=participants_repo,
        members_repo=members_repo,
        rule_service=rule_service,
        attendance_service=attendance_service,
        live_projector=live_projector,
        manual_toggle=manual_toggle,
        participant_service=participant_service,
        kiosk_service=kiosk_service,
        audit_service=audit_service,
        membership_service=membership_service,
    )
