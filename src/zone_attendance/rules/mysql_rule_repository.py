from __future__ import annotations

import json
from datetime import date
from typing import Optional, Sequence

from ..core.constants import DEFAULT_GLOBAL_GOAL_MINUTES
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DailyRule
from .repository import RuleRepository


class MySQLRuleRepository(RuleRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, default_global_goal: int = DEFAULT_GLOBAL_GOAL_MINUTES):
        self._conn_factory = conn_factory
        self._default_global_goal = int(default_global_goal)

    def _to_rule(self, r: dict) -> DailyRule:
        body = r["body"]
        if isinstance(body, (bytes, str)):
            body = json.loads(body)
        return DailyRule.from_dict(r["rule_date"], body, default_global_goal=self._default_global_goal)

    def get_daily_rule(self, conference_id: str, day: date) -> Optional[DailyRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_date, body
                FROM attendance_rules
                WHERE conference_id=%s AND rule_date=%s
                """,
                (conference_id, day),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._to_rule(r)

    def list_daily_rules(self, conference_id: str) -> Sequence[DailyRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_date, body
                FROM attendance_rules
                WHERE conference_id=%s
                ORDER BY rule_date
                """,
                (conference_id,),
            )
            return [self._to_rule(r) for r in fetchall(cur)]

    def save_daily_rule(self, conference_id: str, rule: DailyRule) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_rules(conference_id, rule_date, body)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE body=VALUES(body)
                """,
                (conference_id, rule.date, json.dumps(rule.to_dict())),
            )
