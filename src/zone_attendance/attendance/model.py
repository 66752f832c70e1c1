from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CheckMethod, LogType, PresenceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: presence and accrued minutes of one participant in one conference."""

    conference_id: str
    participant_id: str
    attendance_status: PresenceStatus = PresenceStatus.OUTSIDE
    current_zone_id: Optional[str] = None
    last_check_in_at: Optional[datetime] = None
    total_minutes: int = 0
    is_completed: bool = False
    last_check_out_at: Optional[datetime] = None
    version: int = 0

    def __post_init__(self) -> None:
        inside = self.attendance_status == PresenceStatus.INSIDE
        if inside != (self.current_zone_id is not None) or inside != (self.last_check_in_at is not None):
            raise ValueError(
                f"Inconsistent attendance record for {self.participant_id}: "
                "INSIDE requires both a current zone and a check-in time"
            )
        if self.total_minutes < 0:
            raise ValueError("total_minutes must not be negative")

    @property
    def is_inside(self) -> bool:
        return self.attendance_status == PresenceStatus.INSIDE

    @classmethod
    def initial(cls, conference_id: str, participant_id: str) -> "AttendanceRecord":
        return cls(conference_id=conference_id, participant_id=participant_id)


@dataclass(frozen=True)
class AttendanceLogEntry:
    """Append-only audit entry written once per transition."""

    conference_id: str
    participant_id: str
    type: LogType
    zone_id: Optional[str]
    timestamp: datetime
    method: CheckMethod
    raw_duration_minutes: Optional[int] = None
    deduction_minutes: Optional[int] = None
    recognized_minutes: Optional[int] = None
    accumulated_total: Optional[int] = None
    evaluated_completed: Optional[bool] = None
    note: Optional[str] = None
    log_id: Optional[int] = None

    def __post_init__(self) -> None:
        settlement = (self.raw_duration_minutes, self.deduction_minutes, self.recognized_minutes)
        if self.type == LogType.EXIT and any(v is None for v in settlement):
            raise ValueError("EXIT entries must carry raw, deduction and recognized minutes")
        if self.type == LogType.ENTER and any(v is not None for v in settlement):
            raise ValueError("ENTER entries never carry settlement minutes")
