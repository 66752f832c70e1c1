"""Settlement arithmetic shared by check-out and live projection.

Both call sites must go through :func:`settle`; the break-overlap math lives
nowhere else.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..core.enums import LogType
from ..rules.model import BreakWindow


@dataclass(frozen=True)
class Settlement:
    raw_minutes: int
    deduction_minutes: int
    recognized_minutes: int


def _floor_minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def settle(check_in_at: datetime, now: datetime, breaks: Iterable[BreakWindow], day_date: date) -> Settlement:
    """Recognized minutes for the presence interval ``[check_in_at, now]``.

    Break windows are placed on ``day_date`` and every positive overlap is
    deducted (minute-floored). Windows are not merged with each other.
    """

    raw = max(0, _floor_minutes(check_in_at, now))

    deduction = 0
    for brk in breaks:
        break_start, break_end = brk.span_on(day_date)
        overlap_start = max(check_in_at, break_start)
        overlap_end = min(now, break_end)
        if overlap_end > overlap_start:
            deduction += _floor_minutes(overlap_start, overlap_end)

    return Settlement(
        raw_minutes=raw,
        deduction_minutes=deduction,
        recognized_minutes=max(0, raw - deduction),
    )


def stay_minutes_from_logs(
    logs: Sequence,
    breaks: Sequence[BreakWindow] = (),
    session_end: Optional[datetime] = None,
    *,
    breaks_for: Optional[Callable[[Optional[str], date], Sequence[BreakWindow]]] = None,
) -> int:
    """Replay ENTER/EXIT entries and sum recognized minutes.

    A second ENTER while already entered is ignored, as is an EXIT with no
    open ENTER. A trailing ENTER is settled against ``session_end`` if given.
    A RESET entry zeroes the running total. When ``breaks_for`` is given,
    each stay uses ``breaks_for(zone_id, day)`` of the zone and day it began.
    """

    total = 0
    entered: Optional[tuple[datetime, Optional[str]]] = None

    def _breaks(zone_id: Optional[str], start: datetime) -> Sequence[BreakWindow]:
        if breaks_for is None:
            return breaks
        return breaks_for(zone_id, start.date())

    # Switch-zone EXIT/ENTER pairs share a timestamp; insertion order breaks the tie.
    for entry in sorted(logs, key=lambda e: (e.timestamp, getattr(e, "log_id", None) or 0)):
        if entry.type == LogType.ENTER:
            if entered is None:
                entered = (entry.timestamp, getattr(entry, "zone_id", None))
        elif entry.type == LogType.EXIT:
            if entered is not None:
                start, zone_id = entered
                total += settle(start, entry.timestamp, _breaks(zone_id, start), start.date()).recognized_minutes
                entered = None
        elif entry.type == LogType.RESET:
            total = 0

    if entered is not None and session_end is not None:
        start, zone_id = entered
        total += settle(start, session_end, _breaks(zone_id, start), start.date()).recognized_minutes

    return total
