from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MemberCode, MemberUsageAudit
from .repository import MemberRepository


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, society_id: str, member_id: str) -> Optional[MemberCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, society_id, code, name, used, used_by, used_at
                FROM member_codes
                WHERE society_id=%s AND member_id=%s
                """,
                (society_id, member_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return MemberCode(
                member_id=r["member_id"],
                society_id=r["society_id"],
                code=r["code"],
                name=r["name"],
                used=bool(r.get("used")),
                used_by=r.get("used_by"),
                used_at=r.get("used_at"),
            )

    def save_reset(self, member: MemberCode, audit: MemberUsageAudit) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE member_codes
                SET used=%s, used_by=%s, used_at=%s
                WHERE society_id=%s AND member_id=%s
                """,
                (int(member.used), member.used_by, member.used_at, member.society_id, member.member_id),
            )
            cur.execute(
                """
                INSERT INTO member_usage_audit(
                    society_id, member_id, previous_used_by, previous_used_at, reset_by, reset_at
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    audit.society_id,
                    audit.member_id,
                    audit.previous_used_by,
                    audit.previous_used_at,
                    audit.reset_by,
                    audit.reset_at,
                ),
            )

    def list_audit(self, society_id: str, member_id: str) -> Sequence[MemberUsageAudit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, society_id, member_id, previous_used_by, previous_used_at, reset_by, reset_at
                FROM member_usage_audit
                WHERE society_id=%s AND member_id=%s
                ORDER BY reset_at DESC, audit_id DESC
                """,
                (society_id, member_id),
            )
            return [
                MemberUsageAudit(
                    audit_id=int(r["audit_id"]),
                    society_id=r["society_id"],
                    member_id=r["member_id"],
                    previous_used_by=r.get("previous_used_by"),
                    previous_used_at=r.get("previous_used_at"),
                    reset_by=r["reset_by"],
                    reset_at=r["reset_at"],
                )
                for r in fetchall(cur)
            ]
