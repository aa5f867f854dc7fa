import enum
from typing import Annotated, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# =========================
# CATALOG SCHEMAS
# =========================
class Path(_Record):
    id: str
    name: str
    color: Optional[str] = None
    is_active: bool = True
    # None = default of 1; 0 switches the weekly requirement off
    weekly_target: Optional[int] = Field(default=None, ge=0)

    @property
    def effective_weekly_target(self) -> int:
        return 1 if self.weekly_target is None else self.weekly_target


class Container(_Record):
    id: str
    path_id: str
    name: str
    description: Optional[str] = None


class EntryPoint(_Record):
    id: str
    path_id: str
    name: str
    description: Optional[str] = None


class GlobalScope(_Record):
    kind: Literal["global"] = "global"


class PathScope(_Record):
    kind: Literal["path"] = "path"
    path_id: str


LimitScope = Annotated[Union[GlobalScope, PathScope], Field(discriminator="kind")]


class Limit(_Record):
    id: str
    name: str
    scope: LimitScope = Field(default_factory=GlobalScope)
    formula: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return isinstance(self.scope, GlobalScope)

    @property
    def owner_path_id(self) -> Optional[str]:
        return None if self.is_global else self.scope.path_id


# =========================
# HISTORY SCHEMAS
# =========================
class LogOutcome(str, enum.Enum):
    completed = "completed"
    aborted = "aborted"
    skipped = "skipped"


class Log(_Record):
    id: str
    prompt_id: str
    path_id: str
    date_start: str  # ISO-8601
    date_end: Optional[str] = None
    duration_min: Optional[int] = Field(default=None, ge=0)
    outcome: LogOutcome = LogOutcome.completed
    export_uri: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date_start", "date_end")
    @classmethod
    def _check_timestamp(cls, v: Optional[str]) -> Optional[str]:
        if v:
            from multipath.services.utils_weekly import parse_iso
            parse_iso(v)  # ValueError becomes a ValidationError
        return v


class ConstraintSnapshot(_Record):
    max_paths_per_day: int
    paths_used_today: list[str] = []
    weekly_coverage_required: list[str] = []


class Prompt(_Record):
    id: str
    date: str  # ISO-8601 generation instant
    seed: str
    path_id: str
    container_id: str
    entry_point_id: Optional[str] = None
    limit_ids: list[str] = []
    text: str
    constraints_applied: ConstraintSnapshot


# =========================
# SETTINGS
# =========================
class StudioSettings(_Record):
    seed: Optional[str] = None
    daily_max_paths: int = Field(default=2, ge=0)
    require_weekly_coverage: bool = True
    week_starts_on: Literal[0, 1] = 1  # 0 = Sunday, 1 = Monday
    default_limits_per_prompt: tuple[int, int] = (2, 3)
    dark_mode: Optional[Literal["light", "dark"]] = None

    @model_validator(mode="after")
    def _check_limits_range(self):
        lo, hi = self.default_limits_per_prompt
        if lo < 0 or hi < 0 or lo > hi:
            raise ValueError(f"default_limits_per_prompt must satisfy 0 <= min <= max, got ({lo}, {hi})")
        return self


# =========================
# BLOCKED OUTCOMES
# =========================
class NeedsData(_Record):
    type: Literal["NEEDS_DATA"] = "NEEDS_DATA"
    missing: list[Literal["paths", "containers"]] = ["paths", "containers"]

    def message(self, paths: Sequence[Path] = ()) -> str:
        return "Add at least one path and container to generate prompts."


class NoActivePaths(_Record):
    type: Literal["NO_ACTIVE_PATHS"] = "NO_ACTIVE_PATHS"

    def message(self, paths: Sequence[Path] = ()) -> str:
        return "No active paths. Activate or create a path first."


class DailyCap(_Record):
    type: Literal["DAILY_CAP"] = "DAILY_CAP"
    paths_used_today: list[str]

    def message(self, paths: Sequence[Path] = ()) -> str:
        names = {p.id: p.name for p in paths}
        used = ", ".join(names.get(pid, pid) for pid in self.paths_used_today)
        return f"Daily cap hit. Paths already used today: {used}."


class NoContainers(_Record):
    type: Literal["NO_CONTAINERS"] = "NO_CONTAINERS"
    path_id: str

    def message(self, paths: Sequence[Path] = ()) -> str:
        return "Selected path has no containers. Add a container for this path and try again."


BlockedReason = Annotated[
    Union[NeedsData, NoActivePaths, DailyCap, NoContainers],
    Field(discriminator="type"),
]

BLOCKED_TYPES = (NeedsData, NoActivePaths, DailyCap, NoContainers)


def is_blocked(result) -> bool:
    return isinstance(result, BLOCKED_TYPES)


# =========================
# STATE BUNDLES
# =========================
class ConstraintState(_Record):
    """Everything the prompt engine reads: catalog, history and settings."""
    paths: list[Path] = []
    containers: list[Container] = []
    entry_points: list[EntryPoint] = []
    limits: list[Limit] = []
    logs: list[Log] = []
    settings: StudioSettings = Field(default_factory=StudioSettings)

    def active_paths(self) -> list[Path]:
        return [p for p in self.paths if p.is_active]

    def containers_of(self, path_id: str) -> list[Container]:
        return [c for c in self.containers if c.path_id == path_id]

    def entry_points_of(self, path_id: str) -> list[EntryPoint]:
        return [e for e in self.entry_points if e.path_id == path_id]

    def limits_of(self, path_id: str) -> list[Limit]:
        """Limits scoped to this path only (globals excluded)."""
        return [l for l in self.limits if l.owner_path_id == path_id]

    def global_limits(self) -> list[Limit]:
        return [l for l in self.limits if l.is_global]


class StudioData(ConstraintState):
    """The persisted studio snapshot: engine inputs plus prompt history."""
    prompts: list[Prompt] = []

    @model_validator(mode="after")
    def _check_owners(self):
        known = {p.id for p in self.paths}
        orphans = [
            r.id for r in (*self.containers, *self.entry_points)
            if r.path_id not in known
        ] + [l.id for l in self.limits if not l.is_global and l.owner_path_id not in known]
        if orphans:
            raise ValueError(f"records reference unknown paths: {orphans}")
        return self

    def constraint_state(self) -> ConstraintState:
        return ConstraintState(
            paths=self.paths,
            containers=self.containers,
            entry_points=self.entry_points,
            limits=self.limits,
            logs=self.logs,
            settings=self.settings,
        )
