from datetime import datetime

from multipath.schemas import Path, StudioSettings
from multipath.services.coverage import paths_used_today, weekly_coverage
from conftest import make_log


def test_paths_used_today_counts_distinct_paths(utc):
    now = datetime(2025, 1, 1, 18, tzinfo=utc)
    logs = [
        make_log("l1", "p-a", "2025-01-01T08:00:00.000Z"),
        make_log("l2", "p-a", "2025-01-01T09:00:00.000Z"),
        make_log("l3", "p-b", "2025-01-01T10:00:00.000Z"),
        make_log("l4", "p-c", "2024-12-31T10:00:00.000Z"),
    ]
    assert paths_used_today(logs, now, utc) == ["p-a", "p-b"]


def test_late_log_is_not_counted_after_local_midnight(new_york):
    logs = [make_log("l1", "p-a", "2025-03-10T23:59:00-04:00")]
    just_after_midnight = datetime(2025, 3, 11, 0, 1, tzinfo=new_york)
    assert paths_used_today(logs, just_after_midnight, new_york) == []


def test_weekly_coverage_reports_missing_in_catalog_order(utc):
    settings = StudioSettings(week_starts_on=1)
    paths = [
        Path(id="p-a", name="A"),
        Path(id="p-b", name="B", weekly_target=2),
        Path(id="p-c", name="C"),
    ]
    logs = [
        make_log("l1", "p-a", "2025-01-02T08:00:00.000Z"),
        make_log("l2", "p-b", "2025-01-02T09:00:00.000Z"),
        # previous week does not count
        make_log("l3", "p-c", "2024-12-29T09:00:00.000Z"),
    ]
    cov = weekly_coverage(paths, logs, settings, datetime(2025, 1, 3, 12, tzinfo=utc), utc)
    assert cov.missing_ids == ["p-b", "p-c"]
    assert cov.per_path_count == {"p-a": 1, "p-b": 1}
    assert cov.interval[0].isoformat() == "2024-12-30T00:00:00+00:00"


def test_week_start_setting_moves_the_boundary(utc):
    paths = [Path(id="p-c", name="C")]
    logs = [make_log("l1", "p-c", "2024-12-29T09:00:00.000Z")]  # a Sunday
    now = datetime(2025, 1, 3, 12, tzinfo=utc)
    monday = weekly_coverage(paths, logs, StudioSettings(week_starts_on=1), now, utc)
    sunday = weekly_coverage(paths, logs, StudioSettings(week_starts_on=0), now, utc)
    assert monday.missing_ids == ["p-c"]
    assert sunday.missing_ids == []


def test_inactive_and_zero_target_paths_are_never_missing(utc):
    paths = [
        Path(id="p-off", name="Off", is_active=False),
        Path(id="p-zero", name="Zero", weekly_target=0),
        Path(id="p-default", name="Default", weekly_target=None),
    ]
    cov = weekly_coverage(paths, [], StudioSettings(), datetime(2025, 1, 3, tzinfo=utc), utc)
    assert cov.missing_ids == ["p-default"]
