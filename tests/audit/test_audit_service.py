from zone_attendance.audit.service import AuditService
from zone_attendance.core.enums import CheckMethod, Role

from conftest import CONF, at

M = CheckMethod.MANUAL_ADMIN


def test_history_newest_first_with_settlement_columns(service, attendance_repo, rules_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    service.check_out(CONF, "reg_001", method=M, now=at(14))

    rows = AuditService(attendance_repo, rules_repo).get_history_ui(CONF, "reg_001")

    assert [r.type for r in rows] == ["EXIT", "ENTER"]
    exit_row = rows[0]
    assert (exit_row.raw, exit_row.deduction, exit_row.recognized) == ("05:00", "01:00", "04:00")
    assert exit_row.accumulated_total == "04:00"
    assert exit_row.completed == "yes"
    assert exit_row.css_class == "log-exit"
    assert rows[1].recognized == ""


def test_history_limit(service, attendance_repo, rules_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    service.switch_zone(CONF, "reg_001", "room_a", method=M, now=at(10))

    rows = AuditService(attendance_repo, rules_repo).get_history_ui(CONF, "reg_001", limit=2)

    # Same-instant switch: ENTER was written after EXIT, so it is newer.
    assert [r.type for r in rows] == ["ENTER", "EXIT"]


def test_reconcile_matches_after_switch_and_reset(service, attendance_repo, rules_repo):
    service.check_in(CONF, "reg_001", "room_a", method=M, now=at(11))
    service.switch_zone(CONF, "reg_001", "main_hall", method=M, now=at(12, 30))
    service.check_out(CONF, "reg_001", method=M, now=at(14))
    service.reset_minutes(CONF, "reg_001", current_role=Role.ADMIN.value, actor="admin", now=at(14, 5))
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(15))
    service.check_out(CONF, "reg_001", method=M, now=at(16))

    result = AuditService(attendance_repo, rules_repo).reconcile(CONF, "reg_001")

    assert result.stored_total == 60
    assert result.matches


def test_reconcile_detects_drift(service, attendance_repo, rules_repo):
    from dataclasses import replace

    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    service.check_out(CONF, "reg_001", method=M, now=at(10))
    key = (CONF, "reg_001")
    attendance_repo.records[key] = replace(attendance_repo.records[key], total_minutes=999)

    result = AuditService(attendance_repo, rules_repo).reconcile(CONF, "reg_001")

    assert result.replayed_total == 60
    assert not result.matches
