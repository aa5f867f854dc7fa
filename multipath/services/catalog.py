# multipath/services/catalog.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional, Union

from multipath.schemas import (
    Container, EntryPoint, GlobalScope, Limit, Log, LogOutcome, Path, PathScope, Prompt,
    StudioData, StudioSettings, is_blocked,
)
from multipath.services.assignment import GenerateResult, generate
from multipath.services.examples import example_studio
from multipath.services import interchange
from multipath.services.stats import LogSummary, summarize_logs
from multipath.services.utils_weekly import default_tz, parse_iso, to_iso
from multipath.settings.config import settings as app_settings
from multipath.utils import new_id, normalize_name, utcnow

logger = logging.getLogger(__name__)

PATH_FIELDS = {"name", "color", "is_active", "weekly_target"}


@dataclass
class MutationResult:
    ok: bool
    message: Optional[str] = None
    id: Optional[str] = None


def _name_exists(paths: list[Path], name: str, exclude_id: Optional[str] = None) -> bool:
    wanted = normalize_name(name)
    return any(p.id != exclude_id and normalize_name(p.name) == wanted for p in paths)


class Studio:
    """
    Caller-side owner of the studio snapshot.

    The prompt engine never mutates anything; this object applies the
    results (prompt history, logs) and guards catalog edits.
    """

    def __init__(
        self,
        data: Optional[StudioData] = None,
        defaults: Optional[StudioSettings] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.defaults = defaults or app_settings.studio_defaults()
        self.data = data if data is not None else example_studio(self.defaults)
        self.tz = tz if tz is not None else default_tz()
        self.last_prompt: Optional[Prompt] = None
        self.last_blocked = None

    def _update(self, **changes) -> None:
        self.data = self.data.model_copy(update=changes)

    def _active_path(self, path_id: str) -> Optional[Path]:
        return next((p for p in self.data.paths if p.id == path_id and p.is_active), None)

    # ---------------------------
    # Settings
    # ---------------------------
    def set_settings(self, **changes) -> StudioSettings:
        merged = StudioSettings.model_validate({**self.data.settings.model_dump(), **changes})
        self._update(settings=merged)
        logger.info("Settings updated: %s", sorted(changes))
        return merged

    # ---------------------------
    # Paths
    # ---------------------------
    def add_path(self, name: str, color: Optional[str] = None, weekly_target: Optional[int] = 1) -> MutationResult:
        if _name_exists(self.data.paths, name):
            logger.warning("Refused duplicate path name %r", name)
            return MutationResult(False, "Path name must be unique.")
        path = Path(
            id=new_id(),
            name=name.strip(),
            color=color,
            is_active=True,
            weekly_target=1 if weekly_target is None else weekly_target,
        )
        self._update(paths=[*self.data.paths, path])
        logger.info("Path %s added (%s)", path.id, path.name)
        return MutationResult(True, id=path.id)

    def update_path(self, path_id: str, **changes) -> MutationResult:
        target = next((p for p in self.data.paths if p.id == path_id), None)
        if not target:
            return MutationResult(False, "Path not found.")
        unknown = set(changes) - PATH_FIELDS
        if unknown:
            raise TypeError(f"update_path got unexpected fields: {sorted(unknown)}")
        if changes.get("name") and _name_exists(self.data.paths, changes["name"], path_id):
            logger.warning("Refused rename of %s to duplicate %r", path_id, changes["name"])
            return MutationResult(False, "Path name must be unique.")
        if changes.get("name"):
            changes["name"] = changes["name"].strip()
        updated = Path.model_validate({**target.model_dump(), **changes})
        self._update(paths=[updated if p.id == path_id else p for p in self.data.paths])
        logger.info("Path %s updated: %s", path_id, sorted(changes))
        return MutationResult(True, id=path_id)

    def archive_path(self, path_id: str) -> None:
        self._update(paths=[
            p.model_copy(update={"is_active": False}) if p.id == path_id else p
            for p in self.data.paths
        ])
        logger.info("Path %s archived", path_id)

    def remove_path(self, path_id: str) -> MutationResult:
        # history must keep resolving, so logged paths are only archived
        if any(l.path_id == path_id for l in self.data.logs):
            self.archive_path(path_id)
            logger.warning("Path %s has logs; archived instead of removed", path_id)
            return MutationResult(False, "Path has logs; archived instead.", id=path_id)
        self._update(
            paths=[p for p in self.data.paths if p.id != path_id],
            containers=[c for c in self.data.containers if c.path_id != path_id],
            entry_points=[e for e in self.data.entry_points if e.path_id != path_id],
            limits=[l for l in self.data.limits if l.owner_path_id != path_id],
        )
        logger.info("Path %s removed with its containers, entry points and limits", path_id)
        return MutationResult(True, id=path_id)

    # ---------------------------
    # Children
    # ---------------------------
    def add_container(self, path_id: str, name: str, description: Optional[str] = None) -> MutationResult:
        if not self._active_path(path_id):
            return MutationResult(False, "Path inactive or missing.")
        record = Container(id=new_id(), path_id=path_id, name=name, description=description)
        self._update(containers=[*self.data.containers, record])
        logger.info("Container %s added to path %s", record.id, path_id)
        return MutationResult(True, id=record.id)

    def add_entry_point(self, path_id: str, name: str, description: Optional[str] = None) -> MutationResult:
        if not self._active_path(path_id):
            return MutationResult(False, "Path inactive or missing.")
        record = EntryPoint(id=new_id(), path_id=path_id, name=name, description=description)
        self._update(entry_points=[*self.data.entry_points, record])
        logger.info("Entry point %s added to path %s", record.id, path_id)
        return MutationResult(True, id=record.id)

    def add_limit(
        self,
        scope: Union[str, GlobalScope, PathScope, None],
        name: str,
        formula: Optional[str] = None,
    ) -> MutationResult:
        """``scope`` may be a scope object, a path id, or None for a global limit."""
        if scope is None:
            scope = GlobalScope()
        elif isinstance(scope, str):
            scope = PathScope(path_id=scope)
        if isinstance(scope, PathScope) and not self._active_path(scope.path_id):
            return MutationResult(False, "Path inactive or missing.")
        record = Limit(id=new_id(), scope=scope, name=name, formula=formula)
        self._update(limits=[*self.data.limits, record])
        logger.info("Limit %s added (%s)", record.id, record.owner_path_id or "global")
        return MutationResult(True, id=record.id)

    def remove_container(self, container_id: str) -> None:
        self._update(containers=[c for c in self.data.containers if c.id != container_id])

    def remove_entry_point(self, entry_point_id: str) -> None:
        self._update(entry_points=[e for e in self.data.entry_points if e.id != entry_point_id])

    def remove_limit(self, limit_id: str) -> None:
        self._update(limits=[l for l in self.data.limits if l.id != limit_id])

    # ---------------------------
    # Generation & history
    # ---------------------------
    def constraint_state(self):
        return self.data.constraint_state()

    def generate(self, now: Optional[datetime] = None) -> GenerateResult:
        result = generate(self.constraint_state(), now or utcnow(), self.tz)
        if is_blocked(result):
            self.last_blocked, self.last_prompt = result, None
            logger.info("Generation blocked: %s", result.type)
        else:
            self.last_prompt, self.last_blocked = result, None
            self._update(prompts=[result, *self.data.prompts])
            logger.info("Prompt %s generated for path %s", result.id, result.path_id)
        return result

    def build_empty_log(self, prompt: Optional[Prompt] = None, now: Optional[datetime] = None) -> dict:
        """Draft fields for ``save_log``; a prompt id is synthesized when there is no prompt."""
        return {
            "prompt_id": prompt.id if prompt else new_id(),
            "path_id": prompt.path_id if prompt else "",
            "date_start": to_iso(now or utcnow()),
            "outcome": LogOutcome.completed,
        }

    def save_log(self, **fields) -> Log:
        log = Log(id=new_id(), **fields)
        logs = sorted(
            [log, *self.data.logs],
            key=lambda l: parse_iso(l.date_start, self.tz),
            reverse=True,
        )
        self._update(logs=logs)
        logger.info("Log %s saved for path %s (%s)", log.id, log.path_id, log.outcome.value)
        return log

    def delete_log(self, log_id: str) -> None:
        self._update(logs=[l for l in self.data.logs if l.id != log_id])
        logger.info("Log %s deleted", log_id)

    def clear_prompt(self) -> None:
        self.last_prompt = None
        self.last_blocked = None

    # ---------------------------
    # Whole-snapshot operations
    # ---------------------------
    def import_data(self, data: StudioData) -> None:
        # settings keys missing from the import fall back to defaults
        given = data.settings.model_dump(include=data.settings.model_fields_set)
        merged = StudioSettings.model_validate({**self.defaults.model_dump(), **given})
        self.data = data.model_copy(update={"settings": merged})
        self.clear_prompt()
        logger.info(
            "Imported %d paths, %d prompts, %d logs",
            len(data.paths), len(data.prompts), len(data.logs),
        )

    def export_json(self) -> str:
        return interchange.export_json(self.data)

    def import_json(self, text: str) -> None:
        """Replace the snapshot from exported JSON. Raises pydantic.ValidationError on bad input."""
        self.import_data(interchange.import_json(text))

    def logs_csv(self) -> str:
        return interchange.logs_to_csv(self.data)

    def summary(self, now: Optional[datetime] = None) -> LogSummary:
        return summarize_logs(self.data, now or utcnow(), self.tz)

    def reset_all(self) -> None:
        self.data = example_studio(self.defaults)
        self.clear_prompt()
        logger.info("Studio reset to example catalog")
