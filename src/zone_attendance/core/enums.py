from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Operator role used to guard administrative operations."""

    ADMIN = "admin"
    STAFF = "staff"


class PresenceStatus(str, Enum):
    """Where a participant is, as stored on the attendance record."""

    INSIDE = "INSIDE"
    OUTSIDE = "OUTSIDE"


class LogType(str, Enum):
    ENTER = "ENTER"
    EXIT = "EXIT"
    RESET = "RESET"


class CheckMethod(str, Enum):
    """Which entry point produced a transition."""

    MANUAL_ADMIN = "MANUAL_ADMIN"
    KIOSK = "KIOSK"
    BATCH = "BATCH"
    AUTO_CHECKOUT = "AUTO_CHECKOUT"


class ScannerMode(str, Enum):
    ENTER_ONLY = "ENTER_ONLY"
    EXIT_ONLY = "EXIT_ONLY"
    AUTO = "AUTO"


class KioskState(str, Enum):
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class CompletionMode(str, Enum):
    """How the effective goal of a day is chosen."""

    DAILY_SEPARATE = "DAILY_SEPARATE"
    CUMULATIVE = "CUMULATIVE"


class ParticipantSource(str, Enum):
    REGISTRATION = "REGISTRATION"
    EXTERNAL = "EXTERNAL"
