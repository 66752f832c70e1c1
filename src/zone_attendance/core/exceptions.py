from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when an operator lacks permission for an action."""


class AttendanceError(DomainError):
    """A typed attendance failure reported back to the operator or kiosk.

    ``code`` is stable and meant for clients; the message is for humans.
    """

    code = "ATTENDANCE_ERROR"
    default_message = "Attendance operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AlreadyInsideSameZone(AttendanceError):
    code = "ALREADY_INSIDE_SAME_ZONE"
    default_message = "Participant is already checked in to this zone"


class InsideDifferentZone(AttendanceError):
    code = "INSIDE_DIFFERENT_ZONE"
    default_message = "Participant is inside another zone; switch zones instead"


class NotInside(AttendanceError):
    code = "NOT_INSIDE"
    default_message = "Participant has no open check-in"


class ZoneNotFound(AttendanceError):
    code = "ZONE_NOT_FOUND"
    default_message = "Zone is not configured for this day"


class RuleNotFoundForDate(AttendanceError):
    code = "RULE_NOT_FOUND_FOR_DATE"
    default_message = "No attendance rule is configured for this date"


class ZoneClosed(AttendanceError):
    code = "ZONE_CLOSED"
    default_message = "Zone is outside its operating hours"


class ZoneNotSelected(AttendanceError):
    code = "ZONE_NOT_SELECTED"
    default_message = "No zone selected on this kiosk"


class ParticipantNotFound(AttendanceError):
    code = "PARTICIPANT_NOT_FOUND"
    default_message = "Participant not found"


class BadgeNotFound(AttendanceError):
    code = "BADGE_NOT_FOUND"
    default_message = "Invalid badge QR; the badge has not been issued"


class BadgeNotIssued(AttendanceError):
    code = "BADGE_NOT_ISSUED"
    default_message = "Badge not issued; please visit the info desk"


class PaymentIncomplete(AttendanceError):
    code = "PAYMENT_INCOMPLETE"
    default_message = "Registration payment is not complete"


class TransactionConflict(Exception):
    """The stored record changed between read and write.

    Transient, not a domain error: the caller retries with fresh state.
    """
