from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from ..common.datetime_utils import now_local
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import MemberCode, MemberUsageAudit
from .repository import MemberRepository

log = logging.getLogger(__name__)


class MembershipService:
    def __init__(self, members: MemberRepository):
        self._members = members

    def reset_usage(
        self,
        *,
        current_role: str,
        society_id: str,
        member_id: str,
        actor: str,
        now: datetime | None = None,
    ) -> MemberCode:
        """Make a redeemed member code usable again.

        Admin only. Attendance minutes are not touched; the previous holder
        is kept in an audit row.
        """

        if current_role != Role.ADMIN.value:
            raise AuthorizationError("Only administrators can reset member code usage")

        member = self._members.get(society_id, member_id)
        if not member:
            raise ValidationError("Member code not found")

        now = now or now_local()
        cleared = replace(member, used=False, used_by=None, used_at=None)
        audit = MemberUsageAudit(
            society_id=society_id,
            member_id=member_id,
            previous_used_by=member.used_by,
            previous_used_at=member.used_at,
            reset_by=actor,
            reset_at=now,
        )
        self._members.save_reset(cleared, audit)
        log.info("Member code usage reset society=%s member=%s by=%s", society_id, member_id, actor)
        return cleared

    def usage_history(self, society_id: str, member_id: str) -> list[MemberUsageAudit]:
        return list(self._members.list_audit(society_id, member_id))
