from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import PresenceStatus
from .model import AttendanceLogEntry, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_record(self, conference_id: str, participant_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def commit_transition(
        self,
        *,
        record: AttendanceRecord,
        expected_version: int,
        logs: Sequence[AttendanceLogEntry],
    ) -> AttendanceRecord:
        """Write ``record`` and append ``logs`` as one transaction.

        The write only happens if the stored version still equals
        ``expected_version`` (0 means no row exists yet). Otherwise raises
        ``TransactionConflict`` and nothing is written. Returns the record
        carrying its new version.
        """

        raise NotImplementedError

    def list_logs(self, conference_id: str, participant_id: str, *, limit: int) -> Sequence[AttendanceLogEntry]:
        """Newest first."""

        raise NotImplementedError

    def list_records(
        self,
        conference_id: str,
        *,
        status: Optional[PresenceStatus] = None,
        zone_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
