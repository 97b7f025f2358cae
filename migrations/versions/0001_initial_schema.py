"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 12:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name, **kw):
    return sa.Column(name, sa.DateTime(timezone=True), **kw)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(50), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("refresh_token", sa.String(), nullable=True),
        _timestamp("created_at", server_default=sa.func.now()),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("uuid", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        _timestamp("created_at", server_default=sa.func.now()),
        _timestamp("updated_at", nullable=True),
    )
    op.create_index("ix_groups_id", "groups", ["id"])
    op.create_index("ix_groups_uuid", "groups", ["uuid"], unique=True)
    op.create_index("ix_groups_name", "groups", ["name"])
    op.create_index("ix_groups_created_by", "groups", ["created_by"])

    op.create_table(
        "group_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        _timestamp("joined_at", server_default=sa.func.now()),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_member"),
    )
    op.create_index("ix_group_members_id", "group_members", ["id"])
    op.create_index("ix_group_members_group_id", "group_members", ["group_id"])
    op.create_index("ix_group_members_user_id", "group_members", ["user_id"])

    op.create_table(
        "group_invitations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("invited_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("invited_by_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("created_at", server_default=sa.func.now()),
        _timestamp("expires_at", nullable=True),
        _timestamp("responded_at", nullable=True),
    )
    op.create_index("ix_group_invitations_id", "group_invitations", ["id"])
    op.create_index("ix_group_invitations_group_id", "group_invitations", ["group_id"])
    op.create_index("ix_group_invitations_invited_user_id", "group_invitations", ["invited_user_id"])

    op.create_table(
        "friendships",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("friend_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("created_at", server_default=sa.func.now()),
    )
    op.create_index("ix_friendships_id", "friendships", ["id"])
    op.create_index("ix_friendships_friend_id", "friendships", ["friend_id"])
    op.create_index("user_friend_idx", "friendships", ["user_id", "friend_id"])
    op.create_index("user_status_idx", "friendships", ["user_id", "status"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=True),
        sa.Column("split_mode", sa.String(20), nullable=False, server_default="equal"),
        sa.Column("payment_mode", sa.String(20), nullable=False, server_default="single"),
        _timestamp("created_at", server_default=sa.func.now()),
        _timestamp("updated_at", nullable=True),
    )
    op.create_index("ix_expenses_id", "expenses", ["id"])
    op.create_index("ix_expenses_category", "expenses", ["category"])
    op.create_index("ix_expenses_date", "expenses", ["date"])
    op.create_index("ix_expenses_created_by", "expenses", ["created_by"])
    op.create_index("ix_expenses_group_id", "expenses", ["group_id"])

    for table, constraint in (("expense_splits", "uq_split_user"), ("expense_payments", "uq_payment_user")):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("amount", sa.Numeric(10, 2), nullable=False),
            sa.Column("percentage", sa.Numeric(5, 2), nullable=True),
            sa.UniqueConstraint("expense_id", "user_id", name=constraint),
        )
        op.create_index(f"ix_{table}_id", table, ["id"])
        op.create_index(f"ix_{table}_expense_id", table, ["expense_id"])
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])

    op.create_table(
        "expense_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("change_type", sa.String(20), nullable=False),
        sa.Column("changed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=False),
        _timestamp("created_at", server_default=sa.func.now()),
    )
    op.create_index("ix_expense_history_id", "expense_history", ["id"])
    op.create_index("ix_expense_history_expense_id", "expense_history", ["expense_id"])

    op.create_table(
        "expense_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        _timestamp("created_at", server_default=sa.func.now()),
    )
    op.create_index("ix_expense_comments_id", "expense_comments", ["id"])
    op.create_index("ix_expense_comments_expense_id", "expense_comments", ["expense_id"])


def downgrade():
    for table in (
        "expense_comments",
        "expense_history",
        "expense_payments",
        "expense_splits",
        "expenses",
        "friendships",
        "group_invitations",
        "group_members",
        "groups",
        "users",
    ):
        op.drop_table(table)
