# multipath/services/coverage.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Iterable, Sequence

from multipath.schemas import Log, Path, StudioSettings
from multipath.services.utils_weekly import get_week_interval, in_interval, is_same_local_day


@dataclass
class WeeklyCoverage:
    missing: list[Path]
    per_path_count: dict[str, int] = field(default_factory=dict)
    interval: tuple[datetime, datetime] | None = None

    @property
    def missing_ids(self) -> list[str]:
        return [p.id for p in self.missing]


def paths_used_today(logs: Iterable[Log], reference: datetime, tz: tzinfo | None = None) -> list[str]:
    """Distinct path ids (first-seen order) with a log started on the local day of ``reference``."""
    seen: dict[str, None] = {}
    for log in logs:
        if is_same_local_day(log.date_start, reference, tz):
            seen.setdefault(log.path_id, None)
    return list(seen)


def weekly_coverage(
    paths: Sequence[Path],
    logs: Iterable[Log],
    settings: StudioSettings,
    reference: datetime,
    tz: tzinfo | None = None,
) -> WeeklyCoverage:
    """
    Count logs per path inside the closed week interval around ``reference``.

    A path is missing when it is active, its effective weekly target is
    positive, and it has fewer logs than that target this week.
    """
    start, end = get_week_interval(reference, settings.week_starts_on, tz)

    counts: dict[str, int] = {}
    for log in logs:
        if in_interval(log.date_start, start, end, tz):
            counts[log.path_id] = counts.get(log.path_id, 0) + 1

    missing = [
        p for p in paths
        if p.is_active
        and p.effective_weekly_target > 0
        and counts.get(p.id, 0) < p.effective_weekly_target
    ]
    return WeeklyCoverage(missing=missing, per_path_count=counts, interval=(start, end))
