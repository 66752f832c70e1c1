from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Participant


class ParticipantRepository(Protocol):
    def find_by_badge_qr(self, conference_id: str, badge_qr: str) -> Optional[Participant]:
        """Registrations take precedence over external attendees."""

        raise NotImplementedError

    def get_by_id(self, conference_id: str, participant_id: str) -> Optional[Participant]:
        raise NotImplementedError

    def list_badge_holders(self, conference_id: str) -> Sequence[Participant]:
        raise NotImplementedError
