from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import CheckMethod
from ..core.outcome import Outcome, retry_once
from .service import AttendanceService
from .state_machine import Transition


class ManualToggle:
    """Admin toggle from the attendance table.

    No target zone means check out; a target zone moves the participant there
    (check-in when outside, switch when inside elsewhere).
    """

    def __init__(self, attendance: AttendanceService):
        self._attendance = attendance

    def apply(
        self,
        conference_id: str,
        participant_id: str,
        target_zone_id: Optional[str],
        *,
        now: datetime | None = None,
    ) -> Outcome[Transition]:
        if not target_zone_id:
            return retry_once(
                lambda: self._attendance.check_out(
                    conference_id, participant_id, method=CheckMethod.MANUAL_ADMIN, now=now
                )
            )
        return retry_once(
            lambda: self._attendance.switch_zone(
                conference_id, participant_id, target_zone_id, method=CheckMethod.MANUAL_ADMIN, now=now
            )
        )
