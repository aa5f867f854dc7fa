# multipath/services/stats.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable

from multipath.schemas import Log, LogOutcome, StudioData
from multipath.services.coverage import weekly_coverage
from multipath.services.utils_weekly import parse_iso, week_start_date

ALL = "all"


@dataclass
class LogSummary:
    total: int
    completed_pct: int
    missing: list[str]  # names of active paths still owed this week
    full_coverage_weeks: int


def filter_logs(logs: Iterable[Log], path_id: str = ALL, outcome: str = ALL) -> list[Log]:
    return [
        l for l in logs
        if (path_id == ALL or l.path_id == path_id)
        and (outcome == ALL or l.outcome.value == outcome)
    ]


def full_coverage_weeks(data: StudioData, tz: tzinfo | None = None) -> int:
    """Weeks (by local week start) in which every active path was logged at least once."""
    active = data.active_paths()
    if not active:
        return 0
    weeks: dict[date, set[str]] = {}
    for log in data.logs:
        key = week_start_date(parse_iso(log.date_start, tz).date(), data.settings.week_starts_on)
        weeks.setdefault(key, set()).add(log.path_id)
    return sum(1 for ids in weeks.values() if all(p.id in ids for p in active))


def summarize_logs(data: StudioData, now: datetime, tz: tzinfo | None = None) -> LogSummary:
    total = len(data.logs)
    completed = sum(1 for l in data.logs if l.outcome == LogOutcome.completed)
    # round half up, like Math.round for positive values
    pct = int(completed * 100 / total + 0.5) if total else 0
    coverage = weekly_coverage(data.active_paths(), data.logs, data.settings, now, tz)
    return LogSummary(
        total=total,
        completed_pct=pct,
        missing=[p.name for p in coverage.missing],
        full_coverage_weeks=full_coverage_weeks(data, tz),
    )
