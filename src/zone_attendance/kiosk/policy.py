from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from ..attendance.model import AttendanceRecord
from ..core.enums import ScannerMode


class ScanAction(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    SWITCH_ZONE = "SWITCH_ZONE"


class ScanPolicy(ABC):
    """Strategy Pattern: what a badge scan means for a kiosk mode.

    Policies only choose the transition. Rejections such as scanning into the
    zone one is already in come from the state machine itself.
    """

    @abstractmethod
    def decide(self, record: AttendanceRecord, kiosk_zone_id: str) -> ScanAction:
        raise NotImplementedError


class EnterOnlyPolicy(ScanPolicy):
    def decide(self, record: AttendanceRecord, kiosk_zone_id: str) -> ScanAction:
        if record.is_inside and record.current_zone_id != kiosk_zone_id:
            return ScanAction.SWITCH_ZONE
        return ScanAction.CHECK_IN


class ExitOnlyPolicy(ScanPolicy):
    def decide(self, record: AttendanceRecord, kiosk_zone_id: str) -> ScanAction:
        return ScanAction.CHECK_OUT


class AutoPolicy(ScanPolicy):
    """Toggle: out of the scanned zone, into it, or across from another zone."""

    def decide(self, record: AttendanceRecord, kiosk_zone_id: str) -> ScanAction:
        if not record.is_inside:
            return ScanAction.CHECK_IN
        if record.current_zone_id == kiosk_zone_id:
            return ScanAction.CHECK_OUT
        return ScanAction.SWITCH_ZONE


class ScanPolicyFactory:
    """Factory Pattern: choose the scan policy for a kiosk mode."""

    _POLICIES = {
        ScannerMode.ENTER_ONLY: EnterOnlyPolicy,
        ScannerMode.EXIT_ONLY: ExitOnlyPolicy,
        ScannerMode.AUTO: AutoPolicy,
    }

    def for_mode(self, mode: ScannerMode) -> ScanPolicy:
        return self._POLICIES[ScannerMode(mode)]()
