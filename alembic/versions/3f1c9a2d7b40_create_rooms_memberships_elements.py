"""Create rooms, memberships and elements tables

Revision ID: 3f1c9a2d7b40
Revises:
Create Date: 2026-10-18 10:12:44.118203

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2d7b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the room, membership and canvas element tables."""

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Room ID（UUID）"),
        sa.Column("code", sa.String(length=32), nullable=False, comment="邀请码"),
        sa.Column("owner_id", sa.String(length=255), nullable=False, comment="创建者身份 ID"),
        sa.Column("created_at", sa.DateTime(), nullable=False, comment="创建时间"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_rooms_code", "rooms", ["code"], unique=True)
    op.create_index("idx_rooms_owner_id", "rooms", ["owner_id"], unique=False)

    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False, comment="房间 ID"),
        sa.Column("user_id", sa.String(length=255), nullable=False, comment="成员身份 ID"),
        sa.Column("slot", sa.Integer(), nullable=False, comment="成员席位"),
        sa.Column("joined_at", sa.DateTime(), nullable=False, comment="加入时间"),
        sa.CheckConstraint("slot >= 1", name="ck_memberships_slot_positive"),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "user_id", name="uq_memberships_room_user"),
        sa.UniqueConstraint("room_id", "slot", name="uq_memberships_room_slot"),
    )
    op.create_index("idx_memberships_user_id", "memberships", ["user_id"], unique=False)

    op.create_table(
        "elements",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("element_id", sa.String(length=64), nullable=False, comment="元素 ID"),
        sa.Column("room_id", sa.String(length=36), nullable=False, comment="房间 ID"),
        sa.Column("author_id", sa.String(length=255), nullable=False, comment="作者身份 ID"),
        sa.Column("kind", sa.String(length=16), nullable=False, comment="元素类型"),
        sa.Column("payload", sa.JSON(), nullable=False, comment="元素数据"),
        sa.Column("created_at", sa.DateTime(), nullable=False, comment="创建时间"),
        sa.Column(
            "sent",
            sa.Boolean(),
            nullable=False,
            server_default=sa.sql.expression.false(),
            comment="是否已发送",
        ),
        sa.Column("sent_at", sa.DateTime(), nullable=True, comment="发送时间"),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("room_id", "element_id", name="uq_elements_room_element"),
    )
    op.create_index(
        "idx_elements_room_sent_created",
        "elements",
        ["room_id", "sent", "created_at"],
        unique=False,
    )
    op.create_index(
        "idx_elements_room_author", "elements", ["room_id", "author_id"], unique=False
    )


def downgrade() -> None:
    """Drop the canvas tables."""

    op.drop_index("idx_elements_room_author", table_name="elements")
    op.drop_index("idx_elements_room_sent_created", table_name="elements")
    op.drop_table("elements")
    op.drop_index("idx_memberships_user_id", table_name="memberships")
    op.drop_table("memberships")
    op.drop_index("idx_rooms_owner_id", table_name="rooms")
    op.drop_index("idx_rooms_code", table_name="rooms")
    op.drop_table("rooms")
