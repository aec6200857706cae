"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- user (unique email)
- document (owner-scoped upload metadata)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "user",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    op.create_table(
        "document",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("storage_key", sa.Text(), nullable=False),
        sa.Column("original_name", sa.Text(), nullable=False),
        sa.Column("content_type", sa.Text(), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["user.user_id"]),
        sa.UniqueConstraint("document_id", name="uq_document_document_id"),
        sa.UniqueConstraint("storage_key", name="uq_document_storage_key"),
    )
    op.create_index("idx_document_owner_uploaded", "document", ["owner_id", "uploaded_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_document_owner_uploaded", table_name="document")
    op.drop_table("document")
    op.drop_table("user")
