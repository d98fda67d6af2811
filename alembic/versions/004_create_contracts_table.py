"""create contracts table

Revision ID: 004
Revises: 003
Create Date: 2026-09-29 11:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _acceptance_columns(party: str) -> list[sa.Column]:
    return [
        sa.Column(f"{party}_accepted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(f"{party}_accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(f"{party}_signature_name", sa.String(255), nullable=True),
        sa.Column(f"{party}_signature_ip", sa.String(64), nullable=True),
        sa.Column(f"{party}_signature_user_agent", sa.String(512), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("renter_id", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("security_deposit", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        *_acceptance_columns("owner"),
        *_acceptance_columns("renter"),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["renter_id"], ["users.id"]),
        sa.CheckConstraint(
            "status IN ('draft', 'pending', 'active', 'cancelled', 'completed')",
            name="ck_contracts_status",
        ),
        sa.CheckConstraint(
            "rent_amount IS NULL OR rent_amount >= 0",
            name="ck_contracts_rent_amount_non_negative",
        ),
        sa.CheckConstraint(
            "security_deposit IS NULL OR security_deposit >= 0",
            name="ck_contracts_security_deposit_non_negative",
        ),
        sa.CheckConstraint(
            "total_amount IS NULL OR total_amount >= 0",
            name="ck_contracts_total_amount_non_negative",
        ),
        sa.CheckConstraint(
            "start_date IS NULL OR end_date IS NULL OR end_date >= start_date",
            name="ck_contracts_end_not_before_start",
        ),
    )
    op.create_index("ix_contracts_id", "contracts", ["id"], unique=False)
    op.create_index("ix_contracts_property_id", "contracts", ["property_id"], unique=False)
    op.create_index("ix_contracts_owner_id", "contracts", ["owner_id"], unique=False)
    op.create_index("ix_contracts_renter_id", "contracts", ["renter_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_contracts_renter_id", table_name="contracts")
    op.drop_index("ix_contracts_owner_id", table_name="contracts")
    op.drop_index("ix_contracts_property_id", table_name="contracts")
    op.drop_index("ix_contracts_id", table_name="contracts")
    op.drop_table("contracts")
