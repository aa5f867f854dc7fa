"""
Shared pytest fixtures for the multipath test suite.

Provides:
    - utc / new_york: explicit zones so local-day math never depends on the host
    - make_state: two-path catalog used by the engine tests
    - ScriptedRng: draw source with a fixed list of values
"""
from datetime import timezone
from zoneinfo import ZoneInfo

import pytest

from multipath.schemas import Container, ConstraintState, Log, Path, StudioSettings


class ScriptedRng:
    """Returns the given draws in order and records how many were consumed."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = 0

    def draw(self) -> float:
        if self.calls >= len(self.draws):
            raise AssertionError(f"unexpected draw #{self.calls + 1}")
        value = self.draws[self.calls]
        self.calls += 1
        return value


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def new_york():
    return ZoneInfo("America/New_York")


@pytest.fixture
def base_settings():
    return StudioSettings(
        daily_max_paths=2,
        require_weekly_coverage=True,
        week_starts_on=1,
        default_limits_per_prompt=(1, 2),
    )


@pytest.fixture
def make_state(base_settings):
    def _make(**overrides) -> ConstraintState:
        fields = dict(
            paths=[
                Path(id="p-a", name="A", is_active=True, weekly_target=1),
                Path(id="p-b", name="B", is_active=True, weekly_target=1),
            ],
            containers=[
                Container(id="c-a", name="Container A", path_id="p-a"),
                Container(id="c-b", name="Container B", path_id="p-b"),
            ],
            entry_points=[],
            limits=[],
            logs=[],
            settings=base_settings,
        )
        fields.update(overrides)
        return ConstraintState(**fields)
    return _make


def make_log(log_id: str, path_id: str, when: str, **extra) -> Log:
    return Log(id=log_id, prompt_id=f"pr-{log_id}", path_id=path_id, date_start=when, **extra)
