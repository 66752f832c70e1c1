from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_KIOSK_DISPLAY_SECONDS
from ..core.enums import CheckMethod, KioskState, ScannerMode
from ..core.exceptions import AttendanceError, ZoneNotFound, ZoneNotSelected
from ..core.outcome import Outcome, retry_once
from ..participants.service import ParticipantService
from ..rules.service import RuleService
from .policy import ScanAction, ScanPolicyFactory

log = logging.getLogger(__name__)

BUSY = "BUSY"


@dataclass(frozen=True)
class ScanResult:
    kiosk_id: str
    state: KioskState
    code: str
    message: str
    action: Optional[ScanAction] = None
    participant_id: Optional[str] = None
    participant_name: Optional[str] = None
    zone_id: Optional[str] = None
    total_minutes: Optional[int] = None
    is_completed: Optional[bool] = None
    display_until: Optional[datetime] = None
    warnings: tuple[str, ...] = ()


@dataclass
class KioskSession:
    kiosk_id: str
    conference_id: str
    zone_id: Optional[str] = None
    mode: ScannerMode = ScannerMode.AUTO
    state: KioskState = KioskState.IDLE
    last_result: Optional[ScanResult] = None
    display_until: Optional[datetime] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


_SUCCESS_MESSAGES = {
    ScanAction.CHECK_IN: "Checked in",
    ScanAction.CHECK_OUT: "Checked out",
    ScanAction.SWITCH_ZONE: "Moved to zone",
}


class KioskService:
    """Unattended scanner sessions, one per kiosk.

    A session handles one scan at a time; a scan arriving while another is
    processing is answered with ``BUSY`` and changes nothing. Each result is
    shown for ``display_seconds`` before the session reads as idle again.
    """

    def __init__(
        self,
        attendance: AttendanceService,
        participants: ParticipantService,
        rules: RuleService,
        *,
        policy_factory: ScanPolicyFactory | None = None,
        display_seconds: int = DEFAULT_KIOSK_DISPLAY_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._participants = participants
        self._rules = rules
        self._factory = policy_factory or ScanPolicyFactory()
        self._display = timedelta(seconds=int(display_seconds))
        self._clock = clock or now_local
        self._sessions: dict[str, KioskSession] = {}
        self._sessions_lock = threading.Lock()

    def _session(self, kiosk_id: str, conference_id: str) -> KioskSession:
        with self._sessions_lock:
            session = self._sessions.get(kiosk_id)
            if session is None or session.conference_id != conference_id:
                session = KioskSession(kiosk_id=kiosk_id, conference_id=conference_id)
                self._sessions[kiosk_id] = session
            return session

    def configure(
        self,
        kiosk_id: str,
        conference_id: str,
        *,
        zone_id: Optional[str],
        mode: ScannerMode,
    ) -> KioskSession:
        """Select the zone and mode a kiosk scans for."""

        if zone_id:
            offered = {choice.zone.id for choice in self._rules.kiosk_zones(conference_id)}
            if zone_id not in offered:
                raise ZoneNotFound(f"Zone {zone_id!r} is not configured for this conference")

        session = self._session(kiosk_id, conference_id)
        with session.lock:
            session.zone_id = zone_id or None
            session.mode = ScannerMode(mode)
            session.state = KioskState.IDLE
            session.last_result = None
            session.display_until = None
        log.info("Kiosk %s configured zone=%s mode=%s", kiosk_id, zone_id, session.mode.value)
        return session

    def current_state(self, kiosk_id: str, conference_id: str, *, now: datetime | None = None) -> ScanResult:
        now = now or self._clock()
        session = self._session(kiosk_id, conference_id)

        # A scan holds the lock until its result and display window are both stored.
        if not session.lock.acquire(blocking=False):
            return ScanResult(
                kiosk_id=kiosk_id,
                state=KioskState.PROCESSING,
                code=KioskState.PROCESSING.value,
                message="",
                zone_id=session.zone_id,
            )
        try:
            if (
                session.state in (KioskState.SUCCESS, KioskState.ERROR)
                and session.display_until
                and now >= session.display_until
            ):
                session.state = KioskState.IDLE
                session.display_until = None

            if session.state == KioskState.IDLE or session.last_result is None:
                return ScanResult(
                    kiosk_id=kiosk_id, state=session.state, code=session.state.value, message="", zone_id=session.zone_id
                )
            return replace(session.last_result, state=session.state)
        finally:
            session.lock.release()

    def _execute(self, session: KioskSession, participant_id: str, action: ScanAction, now: datetime) -> Outcome:
        conference_id = session.conference_id
        if action == ScanAction.CHECK_OUT:
            return retry_once(
                lambda: self._attendance.check_out(conference_id, participant_id, method=CheckMethod.KIOSK, now=now)
            )
        if action == ScanAction.SWITCH_ZONE:
            return retry_once(
                lambda: self._attendance.switch_zone(
                    conference_id, participant_id, session.zone_id, method=CheckMethod.KIOSK, now=now
                )
            )
        return retry_once(
            lambda: self._attendance.check_in(
                conference_id, participant_id, session.zone_id, method=CheckMethod.KIOSK, now=now
            )
        )

    def scan(self, kiosk_id: str, conference_id: str, code: str, *, now: datetime | None = None) -> ScanResult:
        now = now or self._clock()
        session = self._session(kiosk_id, conference_id)

        if not session.lock.acquire(blocking=False):
            log.info("Kiosk %s busy; scan ignored", kiosk_id)
            return ScanResult(
                kiosk_id=kiosk_id,
                state=KioskState.PROCESSING,
                code=BUSY,
                message="Still processing the previous scan",
                zone_id=session.zone_id,
            )

        try:
            session.state = KioskState.PROCESSING
            try:
                result = self._scan_locked(session, code, now)
            except Exception:
                session.state = KioskState.IDLE
                raise
            session.state = result.state
            session.last_result = result
            session.display_until = result.display_until
            return result
        finally:
            session.lock.release()

    def _scan_locked(self, session: KioskSession, code: str, now: datetime) -> ScanResult:
        display_until = now + self._display
        participant = None
        action = None
        try:
            if not session.zone_id:
                raise ZoneNotSelected()
            participant = self._participants.resolve_badge(session.conference_id, code)
            record = self._attendance.get_record(session.conference_id, participant.participant_id)
            action = self._factory.for_mode(session.mode).decide(record, session.zone_id)
            outcome = self._execute(session, participant.participant_id, action, now)
        except AttendanceError as e:
            outcome = Outcome.failure(e)

        if not outcome.ok:
            log.info("Kiosk %s scan rejected: %s", session.kiosk_id, outcome.code)
            return ScanResult(
                kiosk_id=session.kiosk_id,
                state=KioskState.ERROR,
                code=outcome.code,
                message=outcome.message,
                action=action,
                participant_id=participant.participant_id if participant else None,
                participant_name=participant.name if participant else None,
                zone_id=session.zone_id,
                display_until=display_until,
            )

        record = outcome.value.record
        return ScanResult(
            kiosk_id=session.kiosk_id,
            state=KioskState.SUCCESS,
            code="OK",
            message=_SUCCESS_MESSAGES[action],
            action=action,
            participant_id=participant.participant_id,
            participant_name=participant.name,
            zone_id=session.zone_id,
            total_minutes=record.total_minutes,
            is_completed=record.is_completed,
            display_until=display_until,
            warnings=outcome.warnings,
        )
