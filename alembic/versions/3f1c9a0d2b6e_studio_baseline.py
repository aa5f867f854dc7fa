"""studio baseline

Revision ID: 3f1c9a0d2b6e
Revises: 
Create Date: 2025-01-06 09:12:44.512031

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1c9a0d2b6e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OUTCOMES = sa.Enum("completed", "aborted", "skipped", name="logoutcome")


def upgrade() -> None:
    op.create_table(
        "path",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("color", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("weekly_target", sa.Integer(), nullable=True),
    )
    for table in ("container", "entry_point"):
        op.create_table(
            table,
            sa.Column("id", sa.String(64), primary_key=True),
            sa.Column("position", sa.Integer(), nullable=False),
            sa.Column("path_id", sa.String(64), sa.ForeignKey("path.id", ondelete="CASCADE"), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
        )
        op.create_index(f"ix_{table}_path_id", table, ["path_id"])
    op.create_table(
        "limit_rule",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("path_id", sa.String(64), sa.ForeignKey("path.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("formula", sa.Text(), nullable=True),
    )
    op.create_index("ix_limit_rule_path_id", "limit_rule", ["path_id"])
    op.create_table(
        "prompt",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(40), nullable=False),
        sa.Column("seed", sa.String(), nullable=False),
        sa.Column("path_id", sa.String(64), nullable=False),
        sa.Column("container_id", sa.String(64), nullable=False),
        sa.Column("entry_point_id", sa.String(64), nullable=True),
        sa.Column("limit_ids", sa.JSON(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("constraints_applied", sa.JSON(), nullable=False),
    )
    op.create_index("ix_prompt_path_id", "prompt", ["path_id"])
    op.create_table(
        "session_log",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("prompt_id", sa.String(64), nullable=False),
        sa.Column("path_id", sa.String(64), nullable=False),
        sa.Column("date_start", sa.String(40), nullable=False),
        sa.Column("date_end", sa.String(40), nullable=True),
        sa.Column("duration_min", sa.Integer(), nullable=True),
        sa.Column("outcome", OUTCOMES, nullable=False),
        sa.Column("export_uri", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_session_log_prompt_id", "session_log", ["prompt_id"])
    op.create_index("ix_session_log_path_id", "session_log", ["path_id"])
    op.create_table(
        "studio_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seed", sa.String(), nullable=True),
        sa.Column("daily_max_paths", sa.Integer(), nullable=False),
        sa.Column("require_weekly_coverage", sa.Boolean(), nullable=False),
        sa.Column("week_starts_on", sa.Integer(), nullable=False),
        sa.Column("limits_min", sa.Integer(), nullable=False),
        sa.Column("limits_max", sa.Integer(), nullable=False),
        sa.Column("dark_mode", sa.String(8), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("studio_settings")
    op.drop_index("ix_session_log_path_id", table_name="session_log")
    op.drop_index("ix_session_log_prompt_id", table_name="session_log")
    op.drop_table("session_log")
    op.drop_index("ix_prompt_path_id", table_name="prompt")
    op.drop_table("prompt")
    op.drop_index("ix_limit_rule_path_id", table_name="limit_rule")
    op.drop_table("limit_rule")
    for table in ("entry_point", "container"):
        op.drop_index(f"ix_{table}_path_id", table_name=table)
        op.drop_table(table)
    OUTCOMES.drop(op.get_bind(), checkfirst=True)
