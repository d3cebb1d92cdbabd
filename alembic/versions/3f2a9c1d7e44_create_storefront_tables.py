"""create storefront tables

Revision ID: 3f2a9c1d7e44
Revises:
Create Date: 2026-10-19 15:02:11.480213

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e44'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

discount_code_type = sa.Enum("PERCENTAGE", "FIXED", name="discountcodetype")


def upgrade():
    op.create_table(
        "product",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("price_in_cents", sa.Integer(), nullable=False),
        sa.Column("file_path", sa.String(), nullable=False),
        sa.Column("image_path", sa.String(), nullable=False),
        sa.Column("is_available_for_purchase", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "discountcode",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("discount_amount", sa.Integer(), nullable=False),
        sa.Column("discount_type", discount_code_type, nullable=False),
        sa.Column("all_products", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("limit", sa.Integer(), nullable=True),
        sa.Column("uses", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_discountcode_code", "discountcode", ["code"], unique=True)

    op.create_table(
        "discountcodeproductlink",
        sa.Column("discount_code_id", sa.String(), sa.ForeignKey("discountcode.id"), primary_key=True),
        sa.Column("product_id", sa.String(), sa.ForeignKey("product.id"), primary_key=True),
    )

    op.create_table(
        "order",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("price_paid_in_cents", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("product_id", sa.String(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("discount_code_id", sa.String(), sa.ForeignKey("discountcode.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_order_user_id", "order", ["user_id"])
    op.create_index("ix_order_product_id", "order", ["product_id"])

    op.create_table(
        "downloadverification",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("product_id", sa.String(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("expire_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_downloadverification_product_id", "downloadverification", ["product_id"])


def downgrade():
    op.drop_index("ix_downloadverification_product_id", table_name="downloadverification")
    op.drop_table("downloadverification")
    op.drop_index("ix_order_product_id", table_name="order")
    op.drop_index("ix_order_user_id", table_name="order")
    op.drop_table("order")
    op.drop_table("discountcodeproductlink")
    op.drop_index("ix_discountcode_code", table_name="discountcode")
    op.drop_table("discountcode")
    discount_code_type.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
    op.drop_table("product")
