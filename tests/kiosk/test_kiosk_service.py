from datetime import timedelta

import pytest

from zone_attendance.core.enums import KioskState, LogType, ScannerMode
from zone_attendance.core.exceptions import ZoneNotFound
from zone_attendance.kiosk.policy import ScanAction
from zone_attendance.kiosk.service import BUSY, KioskService
from zone_attendance.participants.service import ParticipantService
from zone_attendance.rules.service import RuleService

from conftest import CONF, at


@pytest.fixture
def kiosk(service, participants_repo, rules_repo):
    k = KioskService(service, ParticipantService(participants_repo), RuleService(rules_repo), display_seconds=3)
    k.configure("k1", CONF, zone_id="main_hall", mode=ScannerMode.AUTO)
    return k


def test_auto_mode_toggles(kiosk, attendance_repo):
    first = kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))
    second = kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(10))

    assert (first.state, first.action) == (KioskState.SUCCESS, ScanAction.CHECK_IN)
    assert (second.state, second.action) == (KioskState.SUCCESS, ScanAction.CHECK_OUT)
    assert second.total_minutes == 60
    assert second.participant_name == "Alice Kim"
    assert all(e.method.value == "KIOSK" for e in attendance_repo.logs)


def test_enter_only_same_zone_reports_error(kiosk):
    kiosk.configure("k1", CONF, zone_id="main_hall", mode=ScannerMode.ENTER_ONLY)
    kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))

    result = kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9, 5))

    assert result.state == KioskState.ERROR
    assert result.code == "ALREADY_INSIDE_SAME_ZONE"


def test_enter_only_other_zone_switches(kiosk, attendance_repo):
    kiosk.configure("k2", CONF, zone_id="room_a", mode=ScannerMode.ENTER_ONLY)
    kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))

    result = kiosk.scan("k2", CONF, "BADGE-reg_001", now=at(10))

    assert result.action == ScanAction.SWITCH_ZONE
    assert attendance_repo.get_record(CONF, "reg_001").current_zone_id == "room_a"
    assert [e.type for e in attendance_repo.logs] == [LogType.ENTER, LogType.EXIT, LogType.ENTER]


def test_exit_only_outside_reports_not_inside(kiosk):
    kiosk.configure("k1", CONF, zone_id="main_hall", mode=ScannerMode.EXIT_ONLY)

    assert kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9)).code == "NOT_INSIDE"


@pytest.mark.parametrize(
    "code, expected",
    [
        ("BADGE-nobody", "BADGE_NOT_FOUND"),
        ("BADGE-reg_003", "BADGE_NOT_ISSUED"),
        ("BADGE-reg_004", "PAYMENT_INCOMPLETE"),
    ],
)
def test_badge_errors(kiosk, attendance_repo, code, expected):
    result = kiosk.scan("k1", CONF, code, now=at(9))

    assert result.state == KioskState.ERROR
    assert result.code == expected
    assert attendance_repo.logs == []


def test_external_attendee_needs_no_payment(kiosk):
    assert kiosk.scan("k1", CONF, "BADGE-ext_001", now=at(9)).state == KioskState.SUCCESS


def test_scan_without_zone(kiosk):
    kiosk.configure("k1", CONF, zone_id=None, mode=ScannerMode.AUTO)

    assert kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9)).code == "ZONE_NOT_SELECTED"


def test_configure_rejects_unknown_zone(kiosk):
    with pytest.raises(ZoneNotFound):
        kiosk.configure("k1", CONF, zone_id="nowhere", mode=ScannerMode.AUTO)


def test_result_is_displayed_then_idle(kiosk):
    kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))

    assert kiosk.current_state("k1", CONF, now=at(9) + timedelta(seconds=2)).state == KioskState.SUCCESS
    assert kiosk.current_state("k1", CONF, now=at(9) + timedelta(seconds=3)).state == KioskState.IDLE


def test_scan_while_processing_is_busy(kiosk, attendance_repo):
    session = kiosk.configure("k1", CONF, zone_id="main_hall", mode=ScannerMode.AUTO)
    session.lock.acquire()
    try:
        result = kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))
    finally:
        session.lock.release()

    assert result.code == BUSY
    assert attendance_repo.logs == []


def test_state_read_during_scan_leaves_display_window(kiosk):
    session = kiosk.configure("k1", CONF, zone_id="main_hall", mode=ScannerMode.AUTO)
    kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))
    shown_until = session.display_until

    session.lock.acquire()
    try:
        during = kiosk.current_state("k1", CONF, now=at(9, 0, 10))
    finally:
        session.lock.release()

    assert during.state == KioskState.PROCESSING
    assert session.state == KioskState.SUCCESS
    assert session.display_until == shown_until
    assert kiosk.current_state("k1", CONF, now=at(9, 0, 10)).state == KioskState.IDLE
    assert session.display_until is None


def test_conflict_is_retried_once(kiosk, attendance_repo):
    attendance_repo.conflicts_to_raise = 1

    assert kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9)).state == KioskState.SUCCESS


def test_double_conflict_asks_to_try_again(kiosk, attendance_repo):
    attendance_repo.conflicts_to_raise = 2

    result = kiosk.scan("k1", CONF, "BADGE-reg_001", now=at(9))

    assert result.state == KioskState.ERROR
    assert result.code == "TRY_AGAIN"
