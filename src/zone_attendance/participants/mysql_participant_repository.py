from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ParticipantSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Participant
from .repository import ParticipantRepository

_COLUMNS = """
    participant_id, conference_id, source, name, email, affiliation,
    badge_qr, badge_issued, payment_status
"""


def _to_participant(r: dict) -> Participant:
    return Participant(
        participant_id=r["participant_id"],
        conference_id=r["conference_id"],
        name=r["name"],
        source=ParticipantSource(r["source"]),
        email=r.get("email"),
        affiliation=r.get("affiliation"),
        badge_qr=r.get("badge_qr"),
        badge_issued=bool(r.get("badge_issued")),
        payment_status=r.get("payment_status") or "PENDING",
    )


class MySQLParticipantRepository(ParticipantRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_badge_qr(self, conference_id: str, badge_qr: str) -> Optional[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM participants
                WHERE conference_id=%s AND badge_qr=%s
                ORDER BY source = 'EXTERNAL'
                LIMIT 1
                """,
                (conference_id, badge_qr),
            )
            r = fetchone(cur)
            return _to_participant(r) if r else None

    def get_by_id(self, conference_id: str, participant_id: str) -> Optional[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM participants WHERE conference_id=%s AND participant_id=%s",
                (conference_id, participant_id),
            )
            r = fetchone(cur)
            return _to_participant(r) if r else None

    def list_badge_holders(self, conference_id: str) -> Sequence[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM participants
                WHERE conference_id=%s AND badge_issued=1
                ORDER BY name
                """,
                (conference_id,),
            )
            return [_to_participant(r) for r in fetchall(cur)]
