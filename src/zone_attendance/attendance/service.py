from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local, on_day
from ..core.enums import CheckMethod, PresenceStatus, Role
from ..core.exceptions import AttendanceError, AuthorizationError, TransactionConflict
from ..core.outcome import Outcome, retry_once
from ..rules.model import DailyRule
from ..rules.repository import RuleRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .state_machine import AttendanceStateMachine, Transition

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    processed: int = 0
    failures: dict[str, str] = field(default_factory=dict)


class AttendanceService:
    """Runs one read-decide-write cycle per call.

    Each public operation loads the participant record, resolves the rules the
    transition needs, lets the state machine decide and commits the result
    with the matching log entries in one versioned write. Typed failures come
    back as ``Outcome.failure``; a concurrent write comes back as a retryable
    ``Outcome`` and nothing is persisted.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        rules: RuleRepository,
        *,
        state_machine: AttendanceStateMachine | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._rules = rules
        self._machine = state_machine or AttendanceStateMachine()
        self._clock = clock or now_local

    def get_record(self, conference_id: str, participant_id: str) -> AttendanceRecord:
        record = self._attendance.get_record(conference_id, participant_id)
        return record or AttendanceRecord.initial(conference_id, participant_id)

    def _rule_for(self, conference_id: str, day: date) -> Optional[DailyRule]:
        return self._rules.get_daily_rule(conference_id, day)

    def _settle_rule(self, record: AttendanceRecord, today_rule: Optional[DailyRule]) -> Optional[DailyRule]:
        if not record.is_inside:
            return None
        check_in_day = record.last_check_in_at.date()
        if today_rule is not None and today_rule.date == check_in_day:
            return today_rule
        return self._rule_for(record.conference_id, check_in_day)

    def _commit(self, before: AttendanceRecord, transition: Transition) -> Transition:
        committed = self._attendance.commit_transition(
            record=transition.record,
            expected_version=before.version,
            logs=transition.logs,
        )
        for warning in transition.warnings:
            log.warning("conference=%s participant=%s: %s", before.conference_id, before.participant_id, warning)
        for entry in transition.logs:
            log.info(
                "%s participant=%s zone=%s method=%s total=%s",
                entry.type.value,
                entry.participant_id,
                entry.zone_id,
                entry.method.value,
                committed.total_minutes,
            )
        return replace(transition, record=committed)

    def _run(self, action: str, conference_id: str, participant_id: str, decide) -> Outcome[Transition]:
        record = self.get_record(conference_id, participant_id)
        try:
            transition = self._commit(record, decide(record))
        except AttendanceError as e:
            log.info("%s rejected participant=%s: %s", action, participant_id, e.code)
            return Outcome.failure(e)
        except TransactionConflict as e:
            log.warning("%s conflict participant=%s: %s", action, participant_id, e)
            return Outcome.conflict()
        return Outcome.success(transition, warnings=transition.warnings)

    def check_in(
        self,
        conference_id: str,
        participant_id: str,
        zone_id: str,
        *,
        method: CheckMethod,
        now: datetime | None = None,
    ) -> Outcome[Transition]:
        now = now or self._clock()

        def decide(record: AttendanceRecord) -> Transition:
            rule = self._rule_for(conference_id, now.date())
            return self._machine.check_in(record, rule=rule, zone_id=zone_id, now=now, method=method)

        return self._run("check_in", conference_id, participant_id, decide)

    def check_out(
        self,
        conference_id: str,
        participant_id: str,
        *,
        method: CheckMethod,
        now: datetime | None = None,
    ) -> Outcome[Transition]:
        now = now or self._clock()

        def decide(record: AttendanceRecord) -> Transition:
            settle_rule = self._settle_rule(record, None)
            return self._machine.check_out(record, settle_rule=settle_rule, now=now, method=method)

        return self._run("check_out", conference_id, participant_id, decide)

    def switch_zone(
        self,
        conference_id: str,
        participant_id: str,
        zone_id: str,
        *,
        method: CheckMethod,
        now: datetime | None = None,
    ) -> Outcome[Transition]:
        now = now or self._clock()

        def decide(record: AttendanceRecord) -> Transition:
            rule = self._rule_for(conference_id, now.date())
            return self._machine.switch_zone(
                record,
                settle_rule=self._settle_rule(record, rule),
                rule=rule,
                zone_id=zone_id,
                now=now,
                method=method,
            )

        return self._run("switch_zone", conference_id, participant_id, decide)

    def reset_minutes(
        self,
        conference_id: str,
        participant_id: str,
        *,
        current_role: str,
        actor: str,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Outcome[Transition]:
        if current_role != Role.ADMIN.value:
            raise AuthorizationError("Only administrators can reset attendance minutes")

        now = now or self._clock()

        def decide(record: AttendanceRecord) -> Transition:
            return self._machine.reset_minutes(record, now=now, actor=actor, reason=reason)

        return self._run("reset_minutes", conference_id, participant_id, decide)

    def batch_check_out(
        self,
        conference_id: str,
        *,
        zone_id: str | None = None,
        method: CheckMethod = CheckMethod.BATCH,
        now: datetime | None = None,
    ) -> BatchResult:
        now = now or self._clock()
        inside = self._attendance.list_records(conference_id, status=PresenceStatus.INSIDE, zone_id=zone_id)

        processed = 0
        failures: dict[str, str] = {}
        for record in inside:
            outcome = retry_once(
                lambda: self.check_out(conference_id, record.participant_id, method=method, now=now)
            )
            if outcome.ok:
                processed += 1
            else:
                failures[record.participant_id] = outcome.code

        log.info(
            "Batch check-out conference=%s zone=%s processed=%d failed=%d",
            conference_id,
            zone_id or "*",
            processed,
            len(failures),
        )
        return BatchResult(processed=processed, failures=failures)

    def auto_checkout(self, conference_id: str, day: date, *, now: datetime | None = None) -> BatchResult:
        """Close open stays in auto-checkout zones whose operating hours ended.

        Each stay is settled at the zone's operating end rather than at ``now``.
        """

        now = now or self._clock()
        rule = self._rule_for(conference_id, day)
        if rule is None:
            log.warning("Auto checkout skipped: no rule for conference=%s date=%s", conference_id, day)
            return BatchResult()

        processed = 0
        failures: dict[str, str] = {}
        for zone in rule.zones:
            closes_at = on_day(day, zone.operating_end)
            if not zone.auto_checkout or closes_at > now:
                continue

            for record in self._attendance.list_records(
                conference_id, status=PresenceStatus.INSIDE, zone_id=zone.id
            ):
                if record.last_check_in_at.date() > day:
                    continue
                settle_at = max(closes_at, record.last_check_in_at)
                outcome = retry_once(
                    lambda: self.check_out(
                        conference_id,
                        record.participant_id,
                        method=CheckMethod.AUTO_CHECKOUT,
                        now=settle_at,
                    )
                )
                if outcome.ok:
                    processed += 1
                else:
                    failures[record.participant_id] = outcome.code

        log.info("Auto checkout conference=%s date=%s processed=%d failed=%d", conference_id, day, processed, len(failures))
        return BatchResult(processed=processed, failures=failures)
