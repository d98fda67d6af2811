"""create contract documents, history and installments tables

Revision ID: 005
Revises: 004
Create Date: 2026-09-30 14:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "contract_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("url", sa.String(1024), nullable=False),
        sa.Column("storage_key", sa.String(1024), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_contract_documents_id", "contract_documents", ["id"], unique=False)
    op.create_index(
        "ix_contract_documents_contract_id", "contract_documents", ["contract_id"], unique=False
    )

    op.create_table(
        "contract_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("by_id", sa.Integer(), nullable=True),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), server_default="", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["by_id"], ["users.id"]),
    )
    op.create_index("ix_contract_history_id", "contract_history", ["id"], unique=False)
    op.create_index(
        "ix_contract_history_contract_id", "contract_history", ["contract_id"], unique=False
    )

    op.create_table(
        "contract_installments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(16), server_default="due", nullable=False),
        sa.Column("payment_ref", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.CheckConstraint("amount >= 0", name="ck_contract_installments_amount_non_negative"),
        sa.CheckConstraint(
            "status IN ('due', 'paid', 'overdue')",
            name="ck_contract_installments_status",
        ),
    )
    op.create_index("ix_contract_installments_id", "contract_installments", ["id"], unique=False)
    op.create_index(
        "ix_contract_installments_contract_id",
        "contract_installments",
        ["contract_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_contract_installments_contract_id", table_name="contract_installments")
    op.drop_index("ix_contract_installments_id", table_name="contract_installments")
    op.drop_table("contract_installments")
    op.drop_index("ix_contract_history_contract_id", table_name="contract_history")
    op.drop_index("ix_contract_history_id", table_name="contract_history")
    op.drop_table("contract_history")
    op.drop_index("ix_contract_documents_contract_id", table_name="contract_documents")
    op.drop_index("ix_contract_documents_id", table_name="contract_documents")
    op.drop_table("contract_documents")
