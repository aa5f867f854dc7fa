from datetime import datetime, timedelta

import pytest

from multipath.schemas import (
    Container, DailyCap, EntryPoint, GlobalScope, Limit, NeedsData, NoActivePaths,
    NoContainers, Path, PathScope, Prompt, StudioSettings, is_blocked,
)
from multipath.services.assignment import generate, render_prompt
from multipath.services.examples import example_studio
from conftest import ScriptedRng, make_log


def scripted(draws):
    rng = ScriptedRng(draws)
    return rng, (lambda seed: rng)


def test_blocks_when_daily_cap_reached(make_state, utc):
    today = datetime(2025, 1, 1, 12, tzinfo=utc)
    state = make_state(logs=[
        make_log("l1", "p-a", "2025-01-01T12:00:00.000Z"),
        make_log("l2", "p-b", "2025-01-01T12:00:00.000Z"),
        make_log("l3", "p-b", "2025-01-01T13:00:00.000Z"),
    ])
    result = generate(state, today, utc)
    assert isinstance(result, DailyCap)
    assert result.type == "DAILY_CAP"
    assert sorted(result.paths_used_today) == ["p-a", "p-b"]


def test_biases_toward_missing_weekly_coverage(make_state, utc):
    now = datetime(2025, 1, 3, 12, tzinfo=utc)
    state = make_state(logs=[make_log("l1", "p-a", "2025-01-03T12:00:00.000Z")])
    for offset in range(10):
        result = generate(state, now + timedelta(minutes=offset), utc)
        assert isinstance(result, Prompt)
        assert result.path_id == "p-b"
        assert result.constraints_applied.weekly_coverage_required == ["p-b"]
        assert result.constraints_applied.paths_used_today == ["p-a"]


def test_free_choice_when_coverage_not_required(make_state, base_settings, utc):
    settings = base_settings.model_copy(update={"require_weekly_coverage": False})
    state = make_state(
        settings=settings,
        logs=[make_log("l1", "p-a", "2025-01-02T12:00:00.000Z")],
    )
    seen = set()
    for offset in range(40):
        result = generate(state, datetime(2025, 1, 3, 12, tzinfo=utc) + timedelta(seconds=offset), utc)
        seen.add(result.path_id)
        assert result.constraints_applied.weekly_coverage_required == []
    assert seen == {"p-a", "p-b"}


def test_chosen_path_without_containers_degrades(make_state, base_settings, utc):
    state = make_state(
        paths=[
            Path(id="p-a", name="A", weekly_target=1),
            Path(id="p-b", name="B", weekly_target=1),
            Path(id="p-empty", name="Empty", weekly_target=1),
        ],
        settings=base_settings.model_copy(update={"require_weekly_coverage": False}),
    )
    _, factory = scripted([0.99])
    result = generate(state, datetime(2025, 1, 5, 10, tzinfo=utc), utc, rng_factory=factory)
    assert result == NoContainers(path_id="p-empty")


def test_empty_catalog_needs_data(make_state, utc):
    result = generate(make_state(paths=[], containers=[]), datetime(2025, 1, 1, tzinfo=utc), utc)
    assert isinstance(result, NeedsData)
    assert set(result.missing) == {"paths", "containers"}


def test_no_active_paths(make_state, utc):
    state = make_state(paths=[Path(id="p-a", name="A", is_active=False)])
    assert generate(state, datetime(2025, 1, 1, tzinfo=utc), utc) == NoActivePaths()


def test_zero_daily_cap_blocks_before_anything_is_logged(make_state, base_settings, utc):
    state = make_state(settings=base_settings.model_copy(update={"daily_max_paths": 0}))
    result = generate(state, datetime(2025, 1, 1, tzinfo=utc), utc)
    assert result == DailyCap(paths_used_today=[])


def test_same_state_and_instant_give_identical_prompts(utc):
    state = example_studio(StudioSettings(seed="studio")).constraint_state()
    now = datetime(2025, 2, 11, 9, 30, tzinfo=utc)
    first = generate(state, now, utc)
    second = generate(state, now, utc)
    assert isinstance(first, Prompt)
    assert first.model_dump(exclude={"id"}) == second.model_dump(exclude={"id"})
    assert first.seed == "studio-2025-02-11T09:30:00.000Z"


def test_pinned_seed_still_varies_with_the_instant(utc):
    # current behavior: the instant is part of the seed even when one is pinned
    state = example_studio(StudioSettings(seed="studio")).constraint_state()
    base = datetime(2025, 2, 11, 9, 30, tzinfo=utc)
    seeds = {generate(state, base + timedelta(seconds=s), utc).seed for s in range(3)}
    assert len(seeds) == 3


def test_seed_is_the_instant_when_none_is_pinned(make_state, utc):
    result = generate(make_state(), datetime(2025, 1, 1, 12, tzinfo=utc), utc)
    assert result.seed == "2025-01-01T12:00:00.000Z"
    assert result.date == "2025-01-01T12:00:00.000Z"


@pytest.mark.parametrize("limits_range", [(0, 0), (1, 2), (2, 5), (3, 3), (0, 9)])
@pytest.mark.parametrize("pool_size", [0, 1, 2, 4])
def test_limit_count_stays_within_bounds(make_state, base_settings, utc, limits_range, pool_size):
    limits = [Limit(id=f"g{i}", name=f"G{i}") for i in range(pool_size // 2)]
    limits += [
        Limit(id=f"a{i}", name=f"A{i}", scope=PathScope(path_id="p-a"))
        for i in range(pool_size - pool_size // 2)
    ]
    # limits of another path never enter the pool
    limits.append(Limit(id="b-only", name="B only", scope=PathScope(path_id="p-b")))
    settings = base_settings.model_copy(update={
        "default_limits_per_prompt": limits_range,
        "daily_max_paths": 5,
    })
    state = make_state(
        paths=[Path(id="p-a", name="A"), Path(id="p-b", name="B", is_active=False)],
        limits=limits,
        settings=settings,
    )
    lo, hi = limits_range
    for minute in range(15):
        result = generate(state, datetime(2025, 1, 1, 8, minute, tzinfo=utc), utc)
        assert min(lo, pool_size) <= len(result.limit_ids) <= min(hi, pool_size)
        assert len(set(result.limit_ids)) == len(result.limit_ids)
        assert "b-only" not in result.limit_ids


def test_draw_order_and_rendered_text(make_state, base_settings, utc):
    state = make_state(
        paths=[Path(id="p-w", name="Writing")],
        containers=[Container(id="c-w", path_id="p-w", name="Tile", description="Write a page")],
        entry_points=[EntryPoint(id="e-w", path_id="p-w", name="Sweep", description="Free-write.")],
        limits=[
            Limit(id="l-own", name="No adverbs", scope=PathScope(path_id="p-w")),
            Limit(id="l-glob", name="Delete last 10%", scope=GlobalScope()),
        ],
        settings=base_settings.model_copy(update={"default_limits_per_prompt": (2, 2)}),
    )
    # path, container, coin, entry, count, sample, sample
    rng, factory = scripted([0.0, 0.0, 0.1, 0.0, 0.0, 0.0, 0.0])
    result = generate(state, datetime(2025, 1, 1, 12, tzinfo=utc), utc, rng_factory=factory)
    assert rng.calls == 7
    assert result.entry_point_id == "e-w"
    # globals come first in the pool
    assert result.limit_ids == ["l-glob", "l-own"]
    assert result.text == (
        "Path: Writing\n"
        "Container: Tile\n"
        "Entry: Sweep\n"
        "Limits: Delete last 10% · No adverbs\n"
        "\n"
        "Creative Prompt:\n"
        "- Start with: Free-write.\n"
        "- Deliver a Write a page.\n"
        "- Obey strictly: Delete last 10%; No adverbs"
    )


def test_failed_coin_leaves_entry_unset(make_state, utc):
    state = make_state(entry_points=[EntryPoint(id="e-a", path_id="p-a", name="Warmup")])
    # pool is [A, B]: 0.0 picks A; coin 0.5 fails; count 0.0 -> 1; empty limits pool
    rng, factory = scripted([0.0, 0.0, 0.5, 0.0])
    result = generate(state, datetime(2025, 1, 1, tzinfo=utc), utc, rng_factory=factory)
    assert result.entry_point_id is None
    assert rng.calls == 4
    assert "Entry: —" in result.text
    assert "- Start with: Use your usual entry." in result.text
    assert result.text.endswith("- Obey strictly: —")


def test_no_entry_points_consumes_no_coin_draw(make_state, utc):
    rng, factory = scripted([0.9, 0.0, 0.0])
    result = generate(make_state(), datetime(2025, 1, 1, tzinfo=utc), utc, rng_factory=factory)
    assert result.path_id == "p-b"
    assert rng.calls == 3


def test_render_uses_container_name_without_description():
    text = render_prompt(
        Path(id="p", name="Music"),
        Container(id="c", path_id="p", name="Songlet"),
        None,
        [],
    )
    assert "- Deliver a Songlet." in text
    assert "Limits: —" in text


def test_generate_does_not_mutate_its_input(make_state, utc):
    state = make_state()
    before = state.model_dump()
    generate(state, datetime(2025, 1, 1, tzinfo=utc), utc)
    assert state.model_dump() == before


def test_is_blocked_distinguishes_results(make_state, utc):
    assert is_blocked(NoActivePaths())
    assert not is_blocked(generate(make_state(), datetime(2025, 1, 1, tzinfo=utc), utc))


@pytest.mark.parametrize("description", [None, ""])
def test_entry_without_description_uses_default_start(description):
    text = render_prompt(
        Path(id="p", name="Tech"),
        Container(id="c", path_id="p", name="Demo"),
        EntryPoint(id="e", path_id="p", name="Open repo", description=description),
        [],
    )
    assert "Entry: Open repo" in text
    assert "- Start with: Use your usual entry." in text
