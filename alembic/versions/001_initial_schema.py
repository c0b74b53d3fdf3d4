"""Initial schema — projects, project_permissions, ratings, flags.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer, nullable=True),
        sa.Column("owner_name", sa.String(100), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("xsize", sa.Integer, nullable=False, server_default="20"),
        sa.Column("ysize", sa.Integer, nullable=False, server_default="20"),
        sa.Column("grid", sa.Text, nullable=False, server_default=""),
        sa.Column("is_finished", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("timer", sa.String(20), nullable=False, server_default="unlimited"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_projects_is_finished", "projects", ["is_finished"])

    op.create_table(
        "project_permissions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column(
            "project_id", sa.Integer,
            sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.UniqueConstraint("user_id", "project_id", name="uq_permission_user_project"),
    )
    op.create_index(
        "ix_project_permissions_user_id", "project_permissions", ["user_id"],
    )

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "project_id", sa.Integer,
            sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "user_id", name="uq_rating_project_user"),
    )

    op.create_table(
        "flags",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "project_id", sa.Integer,
            sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "user_id", name="uq_flag_project_user"),
    )


def downgrade() -> None:
    op.drop_table("flags")
    op.drop_table("ratings")
    op.drop_index("ix_project_permissions_user_id", table_name="project_permissions")
    op.drop_table("project_permissions")
    op.drop_index("ix_projects_is_finished", table_name="projects")
    op.drop_table("projects")
