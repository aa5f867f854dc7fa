# services/assignment.py
from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Callable, Optional, Sequence, Union

from multipath.schemas import (
    ConstraintSnapshot, ConstraintState, Container, DailyCap, EntryPoint, Limit,
    NeedsData, NoActivePaths, NoContainers, Path, Prompt,
)
from multipath.services.coverage import paths_used_today, weekly_coverage
from multipath.services.seeded import (
    Rng, SeededRng, build_seed, chance, pick_uniform, rand_int, sample_without_replacement,
)
from multipath.services.utils_weekly import default_tz, to_iso
from multipath.utils import new_id, utcnow

logger = logging.getLogger(__name__)

ENTRY_POINT_CHANCE = 0.5
DEFAULT_ENTRY_TEXT = "Use your usual entry."
EMPTY = "—"

GenerateResult = Union[Prompt, NeedsData, NoActivePaths, DailyCap, NoContainers]


# ---------------------------------------------
# Rendering
# ---------------------------------------------
def render_prompt(
    path: Path,
    container: Container,
    entry: Optional[EntryPoint],
    limits: Sequence[Limit],
) -> str:
    names = [l.name for l in limits]
    entry_start = (entry.description if entry else None) or DEFAULT_ENTRY_TEXT
    return "\n".join([
        f"Path: {path.name}",
        f"Container: {container.name}",
        f"Entry: {entry.name if entry else EMPTY}",
        f"Limits: {' · '.join(names) or EMPTY}",
        "",
        "Creative Prompt:",
        f"- Start with: {entry_start}",
        f"- Deliver a {container.description or container.name}.",
        f"- Obey strictly: {'; '.join(names) or EMPTY}",
    ])


# ---------------------------------------------
# Prompt selection
# ---------------------------------------------
def generate(
    state: ConstraintState,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    rng_factory: Callable[[str], Rng] = SeededRng,
) -> GenerateResult:
    """
    Pick path -> container -> optional entry point -> limits for one prompt.

    Returns a Prompt, or one of the blocked outcomes when the catalog, the
    daily cap or the chosen path cannot yield one. Pass ``now`` explicitly
    for reproducible output: the seed is derived from it.
    """
    now = now or utcnow()
    tz = tz if tz is not None else default_tz()
    settings = state.settings

    # 0) nothing to choose from yet
    if not state.paths:
        logger.debug("generate blocked: empty catalog")
        return NeedsData(missing=["paths", "containers"])

    # 1) one generator per call; every draw below comes from it, in order
    seed = build_seed(settings.seed, now)
    rng = rng_factory(seed)

    active = state.active_paths()
    if not active:
        logger.debug("generate blocked: no active paths")
        return NoActivePaths()

    # 2) daily cap counts distinct paths, not sessions
    used_today = paths_used_today(state.logs, now, tz)
    if len(used_today) >= settings.daily_max_paths:
        logger.debug("generate blocked: daily cap %s reached by %s", settings.daily_max_paths, used_today)
        return DailyCap(paths_used_today=used_today)

    # 3) weekly coverage narrows the pool when required
    coverage = weekly_coverage(active, state.logs, settings, now, tz)
    restricted = settings.require_weekly_coverage and bool(coverage.missing)
    pool = coverage.missing if restricted else active
    if not pool:
        return NoActivePaths()

    path = pick_uniform(pool, rng)

    containers = state.containers_of(path.id)
    if not containers:
        logger.debug("generate blocked: path %s has no containers", path.id)
        return NoContainers(path_id=path.id)
    container = pick_uniform(containers, rng)

    # no draw is consumed when the path has no entry points
    entries = state.entry_points_of(path.id)
    entry = None
    if entries and chance(ENTRY_POINT_CHANCE, rng):
        entry = pick_uniform(entries, rng)

    # 4) globals first, then the path's own limits
    limits_pool = state.global_limits() + state.limits_of(path.id)
    lo, hi = settings.default_limits_per_prompt
    desired = rand_int(lo, hi, rng)
    chosen = sample_without_replacement(limits_pool, desired, rng)

    prompt = Prompt(
        id=new_id(),
        date=to_iso(now),
        seed=seed,
        path_id=path.id,
        container_id=container.id,
        entry_point_id=entry.id if entry else None,
        limit_ids=[l.id for l in chosen],
        text=render_prompt(path, container, entry, chosen),
        constraints_applied=ConstraintSnapshot(
            max_paths_per_day=settings.daily_max_paths,
            paths_used_today=used_today,
            weekly_coverage_required=coverage.missing_ids if restricted else [],
        ),
    )
    logger.debug(
        "generated prompt %s seed=%r path=%s container=%s entry=%s limits=%s",
        prompt.id, seed, path.id, container.id, prompt.entry_point_id, prompt.limit_ids,
    )
    return prompt
