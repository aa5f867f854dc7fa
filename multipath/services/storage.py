# multipath/services/storage.py
import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from multipath import models
from multipath.schemas import (
    ConstraintSnapshot, Container, EntryPoint, GlobalScope, Limit, Log, Path, PathScope,
    Prompt, StudioData, StudioSettings,
)

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1


async def _ordered(db: AsyncSession, model) -> list:
    return (await db.execute(select(model).order_by(model.position))).scalars().all()


def _settings_from_row(row: models.StudioSettingsRow) -> StudioSettings:
    return StudioSettings(
        seed=row.seed,
        daily_max_paths=row.daily_max_paths,
        require_weekly_coverage=row.require_weekly_coverage,
        week_starts_on=row.week_starts_on,
        default_limits_per_prompt=(row.limits_min, row.limits_max),
        dark_mode=row.dark_mode,
    )


async def load_studio(db: AsyncSession) -> Optional[StudioData]:
    """Read the whole snapshot; None when nothing has been saved yet."""
    settings_row = await db.get(models.StudioSettingsRow, SETTINGS_ROW_ID)
    if settings_row is None:
        return None

    paths = [
        Path(id=r.id, name=r.name, color=r.color, is_active=r.is_active, weekly_target=r.weekly_target)
        for r in await _ordered(db, models.Path)
    ]
    containers = [
        Container(id=r.id, path_id=r.path_id, name=r.name, description=r.description)
        for r in await _ordered(db, models.Container)
    ]
    entry_points = [
        EntryPoint(id=r.id, path_id=r.path_id, name=r.name, description=r.description)
        for r in await _ordered(db, models.EntryPoint)
    ]
    limits = [
        Limit(
            id=r.id,
            name=r.name,
            formula=r.formula,
            scope=GlobalScope() if r.path_id is None else PathScope(path_id=r.path_id),
        )
        for r in await _ordered(db, models.LimitRule)
    ]
    prompts = [
        Prompt(
            id=r.id,
            date=r.date,
            seed=r.seed,
            path_id=r.path_id,
            container_id=r.container_id,
            entry_point_id=r.entry_point_id,
            limit_ids=list(r.limit_ids or []),
            text=r.text,
            constraints_applied=ConstraintSnapshot.model_validate(r.constraints_applied),
        )
        for r in await _ordered(db, models.PromptRecord)
    ]
    logs = [
        Log(
            id=r.id,
            prompt_id=r.prompt_id,
            path_id=r.path_id,
            date_start=r.date_start,
            date_end=r.date_end,
            duration_min=r.duration_min,
            outcome=r.outcome,
            export_uri=r.export_uri,
            notes=r.notes,
        )
        for r in await _ordered(db, models.SessionLog)
    ]
    data = StudioData(
        paths=paths,
        containers=containers,
        entry_points=entry_points,
        limits=limits,
        prompts=prompts,
        logs=logs,
        settings=_settings_from_row(settings_row),
    )
    logger.info(
        "Loaded studio: %d paths, %d containers, %d limits, %d prompts, %d logs",
        len(paths), len(containers), len(limits), len(prompts), len(logs),
    )
    return data


async def save_studio(db: AsyncSession, data: StudioData) -> None:
    """Replace every stored row with ``data`` in one transaction."""
    # children before parents
    for model in (
        models.SessionLog, models.PromptRecord, models.LimitRule,
        models.EntryPoint, models.Container, models.Path, models.StudioSettingsRow,
    ):
        await db.execute(delete(model))

    s = data.settings
    lo, hi = s.default_limits_per_prompt
    db.add(models.StudioSettingsRow(
        id=SETTINGS_ROW_ID,
        seed=s.seed,
        daily_max_paths=s.daily_max_paths,
        require_weekly_coverage=s.require_weekly_coverage,
        week_starts_on=s.week_starts_on,
        limits_min=lo,
        limits_max=hi,
        dark_mode=s.dark_mode,
    ))
    db.add_all([
        models.Path(id=p.id, position=i, name=p.name, color=p.color,
                    is_active=p.is_active, weekly_target=p.weekly_target)
        for i, p in enumerate(data.paths)
    ])
    await db.flush()
    db.add_all([
        models.Container(id=c.id, position=i, path_id=c.path_id, name=c.name, description=c.description)
        for i, c in enumerate(data.containers)
    ])
    db.add_all([
        models.EntryPoint(id=e.id, position=i, path_id=e.path_id, name=e.name, description=e.description)
        for i, e in enumerate(data.entry_points)
    ])
    db.add_all([
        models.LimitRule(id=l.id, position=i, path_id=l.owner_path_id, name=l.name, formula=l.formula)
        for i, l in enumerate(data.limits)
    ])
    db.add_all([
        models.PromptRecord(
            id=p.id,
            position=i,
            date=p.date,
            seed=p.seed,
            path_id=p.path_id,
            container_id=p.container_id,
            entry_point_id=p.entry_point_id,
            limit_ids=list(p.limit_ids),
            text=p.text,
            constraints_applied=p.constraints_applied.model_dump(),
        )
        for i, p in enumerate(data.prompts)
    ])
    db.add_all([
        models.SessionLog(
            id=l.id,
            position=i,
            prompt_id=l.prompt_id,
            path_id=l.path_id,
            date_start=l.date_start,
            date_end=l.date_end,
            duration_min=l.duration_min,
            outcome=l.outcome,
            export_uri=l.export_uri,
            notes=l.notes,
        )
        for i, l in enumerate(data.logs)
    ])
    await db.commit()
    logger.info(
        "Saved studio: %d paths, %d prompts, %d logs",
        len(data.paths), len(data.prompts), len(data.logs),
    )
