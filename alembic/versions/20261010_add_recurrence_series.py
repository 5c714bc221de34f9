"""Add recurrence rule, series columns and task attachments

Revision ID: 20261010_add_recurrence_series
Revises: 20261001_initial_schema
Create Date: 2026-10-10 18:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261010_add_recurrence_series"
down_revision: Union[str, None] = "20261001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Extend tasks with the full recurrence rule and add task_attachments."""
    with op.batch_alter_table("tasks", schema=None) as batch_op:
        batch_op.add_column(sa.Column("recurring_interval", sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column("recurring_unit", sa.String(length=16), nullable=True))
        batch_op.add_column(sa.Column("recurring_days", sa.Text(), nullable=True))
        batch_op.add_column(sa.Column("recurring_from", sa.String(length=16), nullable=True))
        batch_op.add_column(sa.Column("recurring_end_date", sa.DateTime(), nullable=True))
        batch_op.add_column(sa.Column("recurring_end_count", sa.Integer(), nullable=True))
        batch_op.add_column(
            sa.Column(
                "recurring_copy_attachments",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            )
        )
        batch_op.add_column(
            sa.Column("recurring_occurrence", sa.Integer(), nullable=False, server_default="1")
        )
        batch_op.add_column(sa.Column("recurring_group_id", sa.String(length=36), nullable=True))
        batch_op.add_column(sa.Column("parent_task_id", sa.Integer(), nullable=True))
        batch_op.add_column(
            sa.Column(
                "recurrence_finalized",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            )
        )
        batch_op.create_index(
            batch_op.f("ix_tasks_recurring_group_id"), ["recurring_group_id"], unique=False
        )
        batch_op.create_index(batch_op.f("ix_tasks_parent_task_id"), ["parent_task_id"], unique=False)

    # Completed or removed recurring rows already spawned their successor
    op.execute(
        "UPDATE tasks SET recurrence_finalized = 1 "
        "WHERE recurring_pattern IS NOT NULL AND (completed = 1 OR deleted = 1)"
    )

    op.create_table(
        "task_attachments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=True),
        sa.Column("url", sa.String(length=512), nullable=False),
        sa.Column("type", sa.String(length=128), nullable=True),
        sa.Column("size", sa.BigInteger(), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["uploaded_by"], ["people.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_task_attachments_id"), "task_attachments", ["id"], unique=False)
    op.create_index(
        op.f("ix_task_attachments_task_id"), "task_attachments", ["task_id"], unique=False
    )


def downgrade() -> None:
    """Remove attachments and the extended recurrence columns."""
    op.drop_index(op.f("ix_task_attachments_task_id"), table_name="task_attachments")
    op.drop_index(op.f("ix_task_attachments_id"), table_name="task_attachments")
    op.drop_table("task_attachments")

    with op.batch_alter_table("tasks", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_tasks_parent_task_id"))
        batch_op.drop_index(batch_op.f("ix_tasks_recurring_group_id"))
        for column in (
            "recurrence_finalized",
            "parent_task_id",
            "recurring_group_id",
            "recurring_occurrence",
            "recurring_copy_attachments",
            "recurring_end_count",
            "recurring_end_date",
            "recurring_from",
            "recurring_days",
            "recurring_unit",
            "recurring_interval",
        ):
            batch_op.drop_column(column)
