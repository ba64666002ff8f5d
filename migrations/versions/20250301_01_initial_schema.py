"""Initial Sync schema: health record tables and generated plan log."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20250301_01"
down_revision = None
branch_labels = None
depends_on = None


RECORD_TABLES = ("health_data", "new_health_data")


def _create_record_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("period_level", sa.Float(), nullable=False),
        sa.Column("readiness_score", sa.Integer(), nullable=False),
        sa.Column("sleep_score", sa.Integer(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("condition", sa.String(length=200), nullable=True),
        sa.Column("athlete_type", sa.String(length=100), nullable=True),
        sa.Column("symptoms", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index(f"ix_{name}_date", name, ["date"], unique=False)


def upgrade() -> None:
    for name in RECORD_TABLES:
        _create_record_table(name)

    op.create_table(
        "gemini_output",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("generated_at", sa.DateTime(), nullable=False),
        sa.Column("workout_plan", sa.JSON(), nullable=False),
    )
    op.create_index(
        "ix_gemini_output_generated_at",
        "gemini_output",
        ["generated_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_gemini_output_generated_at", table_name="gemini_output")
    op.drop_table("gemini_output")
    for name in reversed(RECORD_TABLES):
        op.drop_index(f"ix_{name}_date", table_name=name)
        op.drop_table(name)
