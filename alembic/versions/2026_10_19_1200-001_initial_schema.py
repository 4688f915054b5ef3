"""Initial schema with journals and function_logs tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create journals and function_logs tables."""
    # Journal article metadata, keyed by DOI
    op.create_table(
        "journals",
        sa.Column("doi", sa.String(length=255), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("authors", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("doi"),
    )

    # One row per search call
    op.create_table(
        "function_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("called_at", sa.BigInteger(), nullable=False),
        sa.Column("function_name", sa.String(length=100), nullable=False),
        sa.Column("top_k", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_function_logs_id"), "function_logs", ["id"], unique=False)
    op.create_index(op.f("ix_function_logs_email"), "function_logs", ["email"], unique=False)
    op.create_index(
        op.f("ix_function_logs_function_name"), "function_logs", ["function_name"], unique=False
    )


def downgrade() -> None:
    """Drop journals and function_logs tables."""
    op.drop_index(op.f("ix_function_logs_function_name"), table_name="function_logs")
    op.drop_index(op.f("ix_function_logs_email"), table_name="function_logs")
    op.drop_index(op.f("ix_function_logs_id"), table_name="function_logs")
    op.drop_table("function_logs")
    op.drop_table("journals")
