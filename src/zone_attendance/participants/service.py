from __future__ import annotations

from ..core.constants import BADGE_QR_PREFIX
from ..core.exceptions import (
    BadgeNotFound,
    BadgeNotIssued,
    ParticipantNotFound,
    PaymentIncomplete,
)
from .model import Participant
from .repository import ParticipantRepository


def badge_qr_for(participant_id: str) -> str:
    return f"{BADGE_QR_PREFIX}{participant_id}"


class ParticipantService:
    def __init__(self, participants: ParticipantRepository):
        self._participants = participants

    def get(self, conference_id: str, participant_id: str) -> Participant:
        participant = self._participants.get_by_id(conference_id, participant_id)
        if participant is None:
            raise ParticipantNotFound(f"Participant {participant_id!r} not found")
        return participant

    def resolve_badge(self, conference_id: str, code: str) -> Participant:
        """Participant allowed to scan with ``code`` or a typed badge error."""

        code = (code or "").strip()
        participant = self._participants.find_by_badge_qr(conference_id, code) if code else None
        if participant is None:
            raise BadgeNotFound()
        if not participant.badge_issued:
            raise BadgeNotIssued()
        if not participant.is_paid:
            raise PaymentIncomplete()
        return participant

    def badge_holders(self, conference_id: str) -> list[Participant]:
        return list(self._participants.list_badge_holders(conference_id))
