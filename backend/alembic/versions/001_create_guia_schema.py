"""Create users, listing and comment tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: users, the eight listing tables, comments.
How:   Listing tables share one column layout (listing_columns); every table
       but movie_theaters adds a TEXT[] `categories` column. comments holds
       one nullable foreign key per listing table with ON DELETE SET NULL.

Rollback: downgrade() drops everything (destructive).
"""

from typing import List, Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (table, has categories)
LISTING_TABLES = (
    ("restaurants", True),
    ("hotels", True),
    ("taxis", True),
    ("gyms", True),
    ("supermarkets", True),
    ("tourisms", True),
    ("movie_theaters", False),
    ("emergencies", True),
)

# comments column → referenced table
COMMENT_FKS = (
    ("restaurant_id", "restaurants"),
    ("hotel_id", "hotels"),
    ("taxi_id", "taxis"),
    ("gym_id", "gyms"),
    ("supermarket_id", "supermarkets"),
    ("tourism_id", "tourisms"),
    ("movie_theater_id", "movie_theaters"),
    ("emergency_id", "emergencies"),
)


def timestamps() -> List[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def listing_columns(with_categories: bool) -> List[sa.Column]:
    columns = [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.JSON(), nullable=True, comment='{"latitude", "longitude"}'),
        sa.Column("images", postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column("offers", postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column("cod_area", sa.String(20), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("country", sa.String(120), nullable=True),
        sa.Column(
            "web",
            sa.String(255),
            nullable=True,
            server_default=sa.text("'No hay dirección web'"),
        ),
        sa.Column("time", sa.JSON(), nullable=True, comment='{"weekdays", "weekends"}'),
        sa.Column("zone", sa.String(20), nullable=False, server_default=sa.text("'Central'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
    ]
    if with_categories:
        columns.append(sa.Column("categories", postgresql.ARRAY(sa.Text()), nullable=True))
    return columns + timestamps()


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "password",
            sa.String(255),
            nullable=True,
            comment="bcrypt hash; NULL for accounts created through Google sign-in",
        ),
        sa.Column("cod_area", sa.String(20), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("country", sa.String(120), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    for table, with_categories in LISTING_TABLES:
        op.create_table(
            table,
            *listing_columns(with_categories),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        # Serves the name search: WHERE is_active AND name ILIKE ...
        op.create_index(f"idx_{table}_active_name", table, ["is_active", "name"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=False),
        sa.Column("stars", sa.Float(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        *[
            sa.Column(column, sa.Uuid(), sa.ForeignKey(f"{table}.id", ondelete="SET NULL"), nullable=True)
            for column, table in COMMENT_FKS
        ],
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    for column, _ in COMMENT_FKS:
        op.create_index(f"ix_comments_{column}", "comments", [column])


def downgrade() -> None:
    for column, _ in COMMENT_FKS:
        op.drop_index(f"ix_comments_{column}", table_name="comments")
    op.drop_index("ix_comments_user_id", table_name="comments")
    op.drop_table("comments")

    for table, _ in reversed(LISTING_TABLES):
        op.drop_index(f"idx_{table}_active_name", table_name=table)
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_table(table)

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
