# multipath/services/interchange.py
"""
JSON import/export in the persisted snapshot layout, plus CSV of logs.

The persisted layout uses camelCase keys, a "GLOBAL" path id for global
limits, and per-path id lists of children. Inside this package the child's
own path reference is authoritative, so the lists are rebuilt on export and
ignored on import.
"""
import csv
import io
import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from multipath.schemas import (
    ConstraintSnapshot, Container, EntryPoint, GlobalScope, Limit, Log, LogOutcome, Path,
    PathScope, Prompt, StudioData, StudioSettings,
)

logger = logging.getLogger(__name__)

GLOBAL_PATH_ID = "GLOBAL"
CSV_HEADER = ["date", "path", "container", "limits", "outcome", "duration", "exportUri"]


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class WirePath(_Wire):
    id: str
    name: str
    color: Optional[str] = None
    is_active: bool = True
    containers: list[str] = []
    entry_points: list[str] = []
    limits: list[str] = []
    weekly_target: Optional[int] = None


class WireChild(_Wire):
    id: str
    path_id: str
    name: str
    description: Optional[str] = None


class WireLimit(_Wire):
    id: str
    path_id: str
    name: str
    formula: Optional[str] = None


class WireSnapshot(_Wire):
    max_paths_per_day: int
    paths_used_today: list[str] = []
    weekly_coverage_required: list[str] = []


class WirePrompt(_Wire):
    id: str
    date: str = Field(alias="dateISO")
    seed: str
    path_id: str
    container_id: str
    entry_point_id: Optional[str] = None
    limit_ids: list[str] = []
    text: str
    constraints_applied: WireSnapshot


class WireLog(_Wire):
    id: str
    prompt_id: str
    date_start: str = Field(alias="dateStartISO")
    date_end: Optional[str] = Field(default=None, alias="dateEndISO")
    duration_min: Optional[int] = None
    outcome: LogOutcome = LogOutcome.completed
    export_uri: Optional[str] = None
    notes: Optional[str] = None
    path_id: str


class WireSettings(_Wire):
    seed: Optional[str] = None
    daily_max_paths: int = 2
    require_weekly_coverage: bool = True
    week_starts_on: Literal[0, 1] = 1
    default_limits_per_prompt: tuple[int, int] = (2, 3)
    dark_mode: Optional[Literal["light", "dark"]] = None


class WireData(_Wire):
    paths: list[WirePath] = []
    containers: list[WireChild] = []
    entry_points: list[WireChild] = []
    limits: list[WireLimit] = []
    prompts: Optional[list[WirePrompt]] = None
    logs: list[WireLog] = []
    settings: WireSettings = Field(default_factory=WireSettings)


# ---------------------------------------------
# Export
# ---------------------------------------------
def to_wire(data: StudioData) -> WireData:
    return WireData(
        paths=[
            WirePath(
                id=p.id,
                name=p.name,
                color=p.color,
                is_active=p.is_active,
                containers=[c.id for c in data.containers_of(p.id)],
                entry_points=[e.id for e in data.entry_points_of(p.id)],
                limits=[l.id for l in data.limits_of(p.id)],
                weekly_target=p.weekly_target,
            )
            for p in data.paths
        ],
        containers=[WireChild(**c.model_dump()) for c in data.containers],
        entry_points=[WireChild(**e.model_dump()) for e in data.entry_points],
        limits=[
            WireLimit(id=l.id, path_id=l.owner_path_id or GLOBAL_PATH_ID, name=l.name, formula=l.formula)
            for l in data.limits
        ],
        prompts=[
            WirePrompt(
                id=p.id,
                date=p.date,
                seed=p.seed,
                path_id=p.path_id,
                container_id=p.container_id,
                entry_point_id=p.entry_point_id,
                limit_ids=list(p.limit_ids),
                text=p.text,
                constraints_applied=WireSnapshot(**p.constraints_applied.model_dump()),
            )
            for p in data.prompts
        ],
        logs=[WireLog(**l.model_dump()) for l in data.logs],
        settings=WireSettings(**data.settings.model_dump()),
    )


def export_json(data: StudioData) -> str:
    payload = to_wire(data).model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ---------------------------------------------
# Import
# ---------------------------------------------
def from_wire(wire: WireData) -> StudioData:
    given = wire.settings.model_dump(include=wire.settings.model_fields_set)
    return StudioData(
        paths=[
            Path(id=p.id, name=p.name, color=p.color, is_active=p.is_active, weekly_target=p.weekly_target)
            for p in wire.paths
        ],
        containers=[Container(**c.model_dump()) for c in wire.containers],
        entry_points=[EntryPoint(**e.model_dump()) for e in wire.entry_points],
        limits=[
            Limit(
                id=l.id,
                name=l.name,
                formula=l.formula,
                scope=GlobalScope() if l.path_id == GLOBAL_PATH_ID else PathScope(path_id=l.path_id),
            )
            for l in wire.limits
        ],
        prompts=[
            Prompt(
                **p.model_dump(exclude={"constraints_applied"}),
                constraints_applied=ConstraintSnapshot(**p.constraints_applied.model_dump()),
            )
            for p in (wire.prompts or [])
        ],
        logs=[Log(**l.model_dump()) for l in wire.logs],
        # only keys present in the file; the studio merges them over its defaults
        settings=StudioSettings(**given),
    )


def import_json(text: str) -> StudioData:
    """Parse an exported snapshot. Raises pydantic.ValidationError on bad input."""
    wire = WireData.model_validate_json(text)
    data = from_wire(wire)
    logger.info("Parsed import: %d paths, %d logs", len(data.paths), len(data.logs))
    return data


# ---------------------------------------------
# CSV
# ---------------------------------------------
def logs_to_csv(data: StudioData) -> str:
    prompts = {p.id: p for p in data.prompts}
    paths = {p.id: p for p in data.paths}
    containers = {c.id: c for c in data.containers}
    limits = {l.id: l for l in data.limits}

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for log in data.logs:
        prompt = prompts.get(log.prompt_id)
        path = paths.get(log.path_id)
        container = containers.get(prompt.container_id) if prompt else None
        limit_names = []
        if prompt:
            limit_names = [limits[lid].name for lid in prompt.limit_ids if lid in limits]
        writer.writerow([
            log.date_start,
            path.name if path else "",
            container.name if container else "",
            " | ".join(limit_names),
            log.outcome.value,
            "" if log.duration_min is None else log.duration_min,
            log.export_uri or "",
        ])
    return buf.getvalue()
