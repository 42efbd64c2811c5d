"""Trade schema: users, listings, offers, matches, conversations, messages, meetups, moderation.

Revision ID: 001_trade_schema
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_trade_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _in(column: str, values: tuple[str, ...]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("expo_push_token", sa.String(255), nullable=True),
        sa.Column("total_trades", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_trades >= 0", name="ck_users_total_trades_nonneg"),
    )

    op.create_table(
        "listings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("tcg", sa.String(20), nullable=False, server_default="pokemon"),
        sa.Column("cash_amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(_in("status", ("active", "matched", "completed", "expired")), name="ck_listings_status"),
        sa.CheckConstraint(_in("tcg", ("pokemon", "mtg", "yugioh")), name="ck_listings_tcg"),
    )
    op.create_index("ix_listings_user_id", "listings", ["user_id"])

    op.create_table(
        "offers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("listing_id", UUID(as_uuid=True), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("offerer_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("cash_amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("parent_offer_id", UUID(as_uuid=True), sa.ForeignKey("offers.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            _in("status", ("pending", "accepted", "declined", "countered", "withdrawn")),
            name="ck_offers_status",
        ),
        sa.CheckConstraint("cash_amount >= 0", name="ck_offers_cash_nonneg"),
    )
    op.create_index("ix_offers_listing_id", "offers", ["listing_id"])

    op.create_table(
        "offer_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("offer_id", UUID(as_uuid=True), sa.ForeignKey("offers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("card_name", sa.String(200), nullable=False),
        sa.Column("card_image_url", sa.Text, nullable=False),
        sa.Column("card_external_id", sa.String(100), nullable=False),
        sa.Column("tcg", sa.String(20), nullable=False),
        sa.Column("card_set", sa.String(200), nullable=True),
        sa.Column("card_number", sa.String(50), nullable=True),
        sa.Column("condition", sa.String(10), nullable=False),
        sa.Column("market_price", sa.Float, nullable=True),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(_in("tcg", ("pokemon", "mtg", "yugioh")), name="ck_offer_items_tcg"),
        sa.CheckConstraint(_in("condition", ("nm", "lp", "mp", "hp", "dmg")), name="ck_offer_items_condition"),
        sa.CheckConstraint("quantity > 0", name="ck_offer_items_quantity_pos"),
    )
    op.create_index("ix_offer_items_offer_id", "offer_items", ["offer_id"])

    op.create_table(
        "matches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_a_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("user_b_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("listing_id", UUID(as_uuid=True), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("offer_id", UUID(as_uuid=True), sa.ForeignKey("offers.id"), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(_in("status", ("active", "completed", "cancelled")), name="ck_matches_status"),
    )

    op.create_table(
        "conversations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("match_id", UUID(as_uuid=True), sa.ForeignKey("matches.id"), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "messages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("conversation_id", UUID(as_uuid=True), sa.ForeignKey("conversations.id"), nullable=False),
        sa.Column("sender_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("body", sa.Text, nullable=True),
        sa.Column("payload", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            _in("type", (
                "text", "image", "card_offer", "card_offer_response",
                "meetup_proposal", "meetup_response", "system",
            )),
            name="ck_messages_type",
        ),
    )
    op.create_index("ix_messages_conversation_id", "messages", ["conversation_id"])

    op.create_table(
        "meetups",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("match_id", UUID(as_uuid=True), sa.ForeignKey("matches.id"), nullable=False),
        sa.Column("location_name", sa.String(200), nullable=True),
        sa.Column("proposed_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="proposed"),
        sa.Column("user_a_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("user_b_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            _in("status", ("proposed", "confirmed", "completed", "cancelled")),
            name="ck_meetups_status",
        ),
    )
    op.create_index("ix_meetups_match_id", "meetups", ["match_id"])

    op.create_table(
        "reports",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("reporter_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reported_user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("category", sa.String(40), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(_in("status", ("pending", "reviewed", "resolved")), name="ck_reports_status"),
    )

    op.create_table(
        "shop_events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            _in("status", ("draft", "published", "cancelled", "completed")),
            name="ck_shop_events_status",
        ),
    )


def downgrade() -> None:
    op.drop_table("shop_events")
    op.drop_table("reports")
    op.drop_index("ix_meetups_match_id", table_name="meetups")
    op.drop_table("meetups")
    op.drop_index("ix_messages_conversation_id", table_name="messages")
    op.drop_table("messages")
    op.drop_table("conversations")
    op.drop_table("matches")
    op.drop_index("ix_offer_items_offer_id", table_name="offer_items")
    op.drop_table("offer_items")
    op.drop_index("ix_offers_listing_id", table_name="offers")
    op.drop_table("offers")
    op.drop_index("ix_listings_user_id", table_name="listings")
    op.drop_table("listings")
    op.drop_table("users")
