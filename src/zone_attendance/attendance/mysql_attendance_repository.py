from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import CheckMethod, LogType, PresenceStatus
from ..core.exceptions import TransactionConflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceLogEntry, AttendanceRecord
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    conference_id, participant_id, attendance_status, current_zone_id, last_check_in_at,
    total_minutes, is_completed, last_check_out_at, version
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        conference_id=r["conference_id"],
        participant_id=r["participant_id"],
        attendance_status=PresenceStatus(r["attendance_status"]),
        current_zone_id=r.get("current_zone_id"),
        last_check_in_at=r.get("last_check_in_at"),
        total_minutes=int(r.get("total_minutes") or 0),
        is_completed=bool(r.get("is_completed")),
        last_check_out_at=r.get("last_check_out_at"),
        version=int(r["version"]),
    )


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def _to_log(r: dict) -> AttendanceLogEntry:
    completed = r.get("evaluated_completed")
    return AttendanceLogEntry(
        log_id=int(r["log_id"]),
        conference_id=r["conference_id"],
        participant_id=r["participant_id"],
        type=LogType(r["type"]),
        zone_id=r.get("zone_id"),
        timestamp=r["occurred_at"],
        method=CheckMethod(r["method"]),
        raw_duration_minutes=_optional_int(r.get("raw_duration_minutes")),
        deduction_minutes=_optional_int(r.get("deduction_minutes")),
        recognized_minutes=_optional_int(r.get("recognized_minutes")),
        accumulated_total=_optional_int(r.get("accumulated_total")),
        evaluated_completed=None if completed is None else bool(completed),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_record(self, conference_id: str, participant_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE conference_id=%s AND participant_id=%s
                """,
                (conference_id, participant_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def commit_transition(
        self,
        *,
        record: AttendanceRecord,
        expected_version: int,
        logs: Sequence[AttendanceLogEntry],
    ) -> AttendanceRecord:
        values = (
            record.attendance_status.value,
            record.current_zone_id,
            record.last_check_in_at,
            int(record.total_minutes),
            int(record.is_completed),
            record.last_check_out_at,
        )

        with db_cursor(self._conn_factory) as (_, cur):
            if expected_version == 0:
                try:
                    cur.execute(
                        """
                        INSERT INTO attendance_records(
                            attendance_status, current_zone_id, last_check_in_at, total_minutes,
                            is_completed, last_check_out_at, conference_id, participant_id, version
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                        """,
                        values + (record.conference_id, record.participant_id),
                    )
                except mysql.connector.IntegrityError:
                    raise TransactionConflict(f"record {record.participant_id} was created concurrently")
            else:
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET attendance_status=%s, current_zone_id=%s, last_check_in_at=%s, total_minutes=%s,
                        is_completed=%s, last_check_out_at=%s, version=version+1
                    WHERE conference_id=%s AND participant_id=%s AND version=%s
                    """,
                    values + (record.conference_id, record.participant_id, int(expected_version)),
                )
                if cur.rowcount == 0:
                    raise TransactionConflict(f"record {record.participant_id} changed since version {expected_version}")

            for entry in logs:
                cur.execute(
                    """
                    INSERT INTO attendance_logs(
                        conference_id, participant_id, type, zone_id, occurred_at, method,
                        raw_duration_minutes, deduction_minutes, recognized_minutes,
                        accumulated_total, evaluated_completed, note
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        entry.conference_id,
                        entry.participant_id,
                        entry.type.value,
                        entry.zone_id,
                        entry.timestamp,
                        entry.method.value,
                        entry.raw_duration_minutes,
                        entry.deduction_minutes,
                        entry.recognized_minutes,
                        entry.accumulated_total,
                        None if entry.evaluated_completed is None else int(entry.evaluated_completed),
                        entry.note,
                    ),
                )

        return replace(record, version=expected_version + 1)

    def list_logs(self, conference_id: str, participant_id: str, *, limit: int) -> Sequence[AttendanceLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, conference_id, participant_id, type, zone_id, occurred_at, method,
                       raw_duration_minutes, deduction_minutes, recognized_minutes,
                       accumulated_total, evaluated_completed, note
                FROM attendance_logs
                WHERE conference_id=%s AND participant_id=%s
                ORDER BY occurred_at DESC, log_id DESC
                LIMIT %s
                """,
                (conference_id, participant_id, int(limit)),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def list_records(
        self,
        conference_id: str,
        *,
        status: Optional[PresenceStatus] = None,
        zone_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["conference_id=%s"]
        params: list[object] = [conference_id]

        if status is not None:
            clauses.append("attendance_status=%s")
            params.append(status.value)
        if zone_id is not None:
            clauses.append("current_zone_id=%s")
            params.append(zone_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY participant_id
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
