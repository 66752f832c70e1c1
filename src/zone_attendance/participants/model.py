from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import PAID
from ..core.enums import ParticipantSource


@dataclass(frozen=True)
class Participant:
    participant_id: str
    conference_id: str
    name: str
    source: ParticipantSource = ParticipantSource.REGISTRATION
    email: Optional[str] = None
    affiliation: Optional[str] = None
    badge_qr: Optional[str] = None
    badge_issued: bool = False
    payment_status: str = "PENDING"

    @property
    def is_paid(self) -> bool:
        # External attendees are invited, not billed.
        return self.source == ParticipantSource.EXTERNAL or self.payment_status == PAID

    def matches(self, term: str) -> bool:
        needle = term.strip().lower()
        if not needle:
            return True
        return any(needle in (value or "").lower() for value in (self.name, self.email, self.affiliation))
