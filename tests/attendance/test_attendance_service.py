from datetime import timedelta

import pytest

from zone_attendance.attendance.manual import ManualToggle
from zone_attendance.attendance.service import AttendanceService
from zone_attendance.core.enums import CheckMethod, LogType, PresenceStatus, Role
from zone_attendance.core.exceptions import AuthorizationError
from zone_attendance.core.outcome import TRY_AGAIN, retry_once

from conftest import CONF, DAY, at, demo_rule

M = CheckMethod.MANUAL_ADMIN


def test_switch_zone_commits_two_logs_and_accrues(service, attendance_repo):
    assert service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9)).ok

    outcome = service.switch_zone(CONF, "reg_001", "room_a", method=M, now=at(10))

    assert outcome.ok
    rec = attendance_repo.get_record(CONF, "reg_001")
    assert rec.current_zone_id == "room_a"
    assert rec.total_minutes == 60
    assert [e.type for e in attendance_repo.logs] == [LogType.ENTER, LogType.EXIT, LogType.ENTER]
    assert attendance_repo.commits == 2


def test_goal_reached_after_lunch(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    outcome = service.check_out(CONF, "reg_001", method=M, now=at(14))

    assert outcome.ok
    assert outcome.value.settlement.recognized_minutes == 240
    rec = attendance_repo.get_record(CONF, "reg_001")
    assert rec.total_minutes == 240
    assert rec.is_completed is True
    assert rec.version == 2


def test_rejected_check_in_changes_nothing(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    before = attendance_repo.get_record(CONF, "reg_001")

    outcome = service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9, 30))

    assert not outcome.ok
    assert outcome.code == "ALREADY_INSIDE_SAME_ZONE"
    assert attendance_repo.get_record(CONF, "reg_001") == before
    assert len(attendance_repo.logs) == 1


def test_missing_rule_is_reported(service):
    outcome = service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9) + timedelta(days=3))

    assert outcome.code == "RULE_NOT_FOUND_FOR_DATE"


def test_conflict_is_retryable_and_writes_nothing(service, attendance_repo):
    attendance_repo.conflicts_to_raise = 1

    outcome = service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))

    assert outcome.retryable
    assert outcome.code == TRY_AGAIN
    assert attendance_repo.get_record(CONF, "reg_001") is None
    assert attendance_repo.logs == []


def test_retry_once_recovers_from_single_conflict(service, attendance_repo):
    attendance_repo.conflicts_to_raise = 1
    calls = []

    def op():
        calls.append(1)
        return service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))

    outcome = retry_once(op)

    assert outcome.ok
    assert len(calls) == 2


def test_retry_once_gives_up_after_second_conflict(service, attendance_repo):
    attendance_repo.conflicts_to_raise = 2
    calls = []

    def op():
        calls.append(1)
        return service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))

    outcome = retry_once(op)

    assert outcome.code == TRY_AGAIN
    assert len(calls) == 2


def test_check_out_uses_rule_of_check_in_day(attendance_repo, rules_repo):
    svc = AttendanceService(attendance_repo, rules_repo)
    svc.check_in(CONF, "reg_001", "main_hall", method=M, now=at(11))

    outcome = svc.check_out(CONF, "reg_001", method=M, now=at(14))

    assert outcome.value.settlement.deduction_minutes == 60


def test_reset_minutes_requires_admin(service):
    with pytest.raises(AuthorizationError):
        service.reset_minutes(CONF, "reg_001", current_role=Role.STAFF.value, actor="staff1")


def test_reset_minutes(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    service.check_out(CONF, "reg_001", method=M, now=at(14))

    outcome = service.reset_minutes(CONF, "reg_001", current_role=Role.ADMIN.value, actor="admin", now=at(15))

    assert outcome.ok
    rec = attendance_repo.get_record(CONF, "reg_001")
    assert rec.total_minutes == 0
    assert rec.is_completed is False
    assert attendance_repo.logs[-1].type == LogType.RESET


def test_batch_check_out_filters_by_zone(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    service.check_in(CONF, "reg_002", "main_hall", method=M, now=at(9))
    service.check_in(CONF, "ext_001", "room_a", method=M, now=at(9))

    result = service.batch_check_out(CONF, zone_id="main_hall", now=at(10))

    assert result.processed == 2
    assert result.failures == {}
    still_inside = attendance_repo.list_records(CONF, status=PresenceStatus.INSIDE)
    assert [r.participant_id for r in still_inside] == ["ext_001"]
    exits = [e for e in attendance_repo.logs if e.type == LogType.EXIT]
    assert len(exits) == 2
    assert all(e.method == CheckMethod.BATCH for e in exits)


def test_auto_checkout_settles_at_operating_end(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(16))
    service.check_in(CONF, "reg_002", "room_a", method=M, now=at(16))

    result = service.auto_checkout(CONF, DAY, now=at(19))

    assert result.processed == 1
    rec = attendance_repo.get_record(CONF, "reg_001")
    assert rec.attendance_status == PresenceStatus.OUTSIDE
    assert rec.last_check_out_at == at(18)
    assert rec.total_minutes == 120
    # room_a has no auto checkout
    assert attendance_repo.get_record(CONF, "reg_002").is_inside


def test_auto_checkout_waits_for_closing_time(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(16))

    assert service.auto_checkout(CONF, DAY, now=at(17, 59)).processed == 0


def test_manual_toggle(service, attendance_repo):
    toggle = ManualToggle(service)

    assert toggle.apply(CONF, "reg_001", "main_hall", now=at(9)).ok
    assert toggle.apply(CONF, "reg_001", "room_a", now=at(10)).ok
    assert attendance_repo.get_record(CONF, "reg_001").current_zone_id == "room_a"

    outcome = toggle.apply(CONF, "reg_001", None, now=at(11))
    assert outcome.ok
    assert attendance_repo.get_record(CONF, "reg_001").total_minutes == 120

    assert toggle.apply(CONF, "reg_001", None, now=at(12)).code == "NOT_INSIDE"


def test_manual_toggle_retries_once(service, attendance_repo):
    attendance_repo.conflicts_to_raise = 1

    assert ManualToggle(service).apply(CONF, "reg_001", "main_hall", now=at(9)).ok
    assert attendance_repo.commits == 1


def test_completion_survives_later_settlement(service, attendance_repo):
    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9))
    service.check_out(CONF, "reg_001", method=M, now=at(14))
    assert attendance_repo.get_record(CONF, "reg_001").is_completed is True

    service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(15))
    outcome = service.check_out(CONF, "reg_001", method=M, now=at(15, 20))

    rec = attendance_repo.get_record(CONF, "reg_001")
    assert outcome.ok
    assert rec.total_minutes == 260
    assert rec.is_completed is True
    assert attendance_repo.logs[-1].evaluated_completed is True


def test_mixed_sequence_keeps_invariants(service, attendance_repo):
    steps = [
        lambda: service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9)),
        lambda: service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(9, 10)),
        lambda: service.switch_zone(CONF, "reg_001", "room_a", method=M, now=at(10)),
        lambda: service.check_in(CONF, "reg_001", "main_hall", method=M, now=at(10, 30)),
        lambda: service.switch_zone(CONF, "reg_001", "main_hall", method=M, now=at(11, 45)),
        lambda: service.check_out(CONF, "reg_001", method=M, now=at(13, 30)),
        lambda: service.check_out(CONF, "reg_001", method=M, now=at(13, 40)),
        lambda: service.switch_zone(CONF, "reg_001", "nowhere", method=M, now=at(14)),
        lambda: service.switch_zone(CONF, "reg_001", "room_a", method=M, now=at(14)),
        lambda: service.check_out(CONF, "reg_001", method=M, now=at(14, 30)),
    ]

    previous_total = 0
    for step in steps:
        step()
        rec = service.get_record(CONF, "reg_001")

        assert rec.total_minutes >= previous_total
        previous_total = rec.total_minutes
        if rec.attendance_status == PresenceStatus.INSIDE:
            assert rec.current_zone_id is not None
            assert rec.last_check_in_at is not None
        else:
            assert rec.current_zone_id is None
            assert rec.last_check_in_at is None

    # 60 (hall) + 105 (room) + 45 (hall, lunch deducted) + 30 (room)
    assert previous_total == 240
    assert rec.is_completed is True
