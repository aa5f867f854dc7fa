from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, JSON, Enum as SAEnum,
)
from .database import Base
from .schemas import LogOutcome

# Every table carries ``position``: pick order depends on catalog order,
# so rows are reloaded exactly as they were saved.

# ---------------------------
# CATALOG
# ---------------------------
class Path(Base):
    __tablename__ = "path"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String, nullable=False)
    color = Column(String(32), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    weekly_target = Column(Integer, nullable=True)  # NULL = default of 1


class Container(Base):
    __tablename__ = "container"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    path_id = Column(String(64), ForeignKey("path.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)


class EntryPoint(Base):
    __tablename__ = "entry_point"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    path_id = Column(String(64), ForeignKey("path.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)


class LimitRule(Base):
    __tablename__ = "limit_rule"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    # NULL path = global limit
    path_id = Column(String(64), ForeignKey("path.id", ondelete="CASCADE"), index=True, nullable=True)
    name = Column(String, nullable=False)
    formula = Column(Text, nullable=True)


# ---------------------------
# HISTORY
# ---------------------------
class PromptRecord(Base):
    __tablename__ = "prompt"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    date = Column(String(40), nullable=False)
    seed = Column(String, nullable=False)
    path_id = Column(String(64), index=True, nullable=False)
    container_id = Column(String(64), nullable=False)
    entry_point_id = Column(String(64), nullable=True)
    limit_ids = Column(JSON, nullable=False, default=list)            # list[str]
    text = Column(Text, nullable=False)
    constraints_applied = Column(JSON, nullable=False, default=dict)  # ConstraintSnapshot dump


class SessionLog(Base):
    __tablename__ = "session_log"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    prompt_id = Column(String(64), index=True, nullable=False)
    path_id = Column(String(64), index=True, nullable=False)
    date_start = Column(String(40), nullable=False)
    date_end = Column(String(40), nullable=True)
    duration_min = Column(Integer, nullable=True)
    outcome = Column(SAEnum(LogOutcome), default=LogOutcome.completed, nullable=False)
    export_uri = Column(String, nullable=True)
    notes = Column(Text, nullable=True)


# ---------------------------
# SETTINGS (single row)
# ---------------------------
class StudioSettingsRow(Base):
    __tablename__ = "studio_settings"

    id = Column(Integer, primary_key=True, default=1)
    seed = Column(String, nullable=True)
    daily_max_paths = Column(Integer, nullable=False, default=2)
    require_weekly_coverage = Column(Boolean, nullable=False, default=True)
    week_starts_on = Column(Integer, nullable=False, default=1)
    limits_min = Column(Integer, nullable=False, default=2)
    limits_max = Column(Integer, nullable=False, default=3)
    dark_mode = Column(String(8), nullable=True)
