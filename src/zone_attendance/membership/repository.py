from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MemberCode, MemberUsageAudit


class MemberRepository(Protocol):
    def get(self, society_id: str, member_id: str) -> Optional[MemberCode]:
        raise NotImplementedError

    def save_reset(self, member: MemberCode, audit: MemberUsageAudit) -> None:
        """Persist the cleared code and its audit row together."""

        raise NotImplementedError

    def list_audit(self, society_id: str, member_id: str) -> Sequence[MemberUsageAudit]:
        raise NotImplementedError
