from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class MemberCode:
    """A society member/whitelist code that can be redeemed once."""

    member_id: str
    society_id: str
    code: str
    name: str
    used: bool = False
    used_by: Optional[str] = None
    used_at: Optional[datetime] = None


@dataclass(frozen=True)
class MemberUsageAudit:
    society_id: str
    member_id: str
    previous_used_by: Optional[str]
    previous_used_at: Optional[datetime]
    reset_by: str
    reset_at: datetime
    audit_id: Optional[int] = None
