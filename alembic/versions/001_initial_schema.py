"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

import sqlalchemy as sa

from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Books
    op.create_table(
        "books",
        sa.Column("isbn", sa.String(20), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False, index=True),
        sa.Column("author", sa.String(300), nullable=False, index=True),
        sa.Column("publisher", sa.String(300), nullable=True),
        sa.Column("genre", sa.String(4000), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("inventory", sa.Integer, nullable=False, server_default="0"),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.CheckConstraint("inventory >= 0", name="ck_books_inventory_non_negative"),
    )

    # Orders
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(100), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Order lines: book snapshots, no FK to books
    op.create_table(
        "order_lines",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "order_id",
            sa.Integer,
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("isbn", sa.String(20), nullable=False, index=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("image_url", sa.String(1000), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("order_lines")
    op.drop_table("orders")
    op.drop_table("books")
