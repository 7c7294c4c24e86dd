"""Create copy trading tables.

Tables:
- subscriber_wallets: exchange accounts, credentials as AES-GCM ciphertext
- copy_settings: one row per (wallet, provider)
- copy_executions: ledger, one row per (copy settings, provider trade)

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(precision=28, scale=10)


def upgrade() -> None:
    """Upgrade database schema.

    Changes:
    1. Create subscriber_wallets
    2. Create copy_settings with unique (wallet_id, provider_id)
    3. Create copy_executions with unique (copy_settings_id, provider_trade_id)
    4. Add indexes for the close fan-out and the daily loss query
    """
    # ====================================
    # SUBSCRIBER_WALLETS
    # ====================================
    op.create_table(
        "subscriber_wallets",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("exchange", sa.String(20), nullable=False),
        sa.Column("label", sa.String(100), nullable=True),
        sa.Column("api_key_encrypted", sa.Text(), nullable=False),
        sa.Column("api_secret_encrypted", sa.Text(), nullable=False),
        sa.Column("api_passphrase_encrypted", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_subscriber_wallets_user_id", "subscriber_wallets", ["user_id"])

    # ====================================
    # COPY_SETTINGS
    # ====================================
    op.create_table(
        "copy_settings",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "wallet_id",
            sa.BigInteger(),
            sa.ForeignKey("subscriber_wallets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider_id", sa.String(64), nullable=False),
        sa.Column("copy_mode", sa.String(20), nullable=False),
        sa.Column("size_value", MONEY, nullable=False),
        sa.Column("max_position_usd", MONEY, nullable=False),
        sa.Column("max_daily_loss_usd", MONEY, nullable=False),
        sa.Column("allowed_pairs", sa.JSON(), nullable=True),
        sa.Column("copy_stop_loss", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("copy_take_profit", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_paused", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("wallet_id", "provider_id", name="uq_copy_settings_wallet_provider"),
    )
    op.create_index(
        "ix_copy_settings_provider_active",
        "copy_settings",
        ["provider_id", "is_active"],
    )

    # ====================================
    # COPY_EXECUTIONS
    # ====================================
    op.create_table(
        "copy_executions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "copy_settings_id",
            sa.BigInteger(),
            sa.ForeignKey("copy_settings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "wallet_id",
            sa.BigInteger(),
            sa.ForeignKey("subscriber_wallets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider_trade_id", sa.String(64), nullable=False),
        sa.Column("pair", sa.String(32), nullable=False),
        sa.Column("direction", sa.String(10), nullable=False),
        sa.Column("leverage", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("size", MONEY, nullable=True),
        sa.Column("entry_price", MONEY, nullable=True),
        sa.Column("exit_price", MONEY, nullable=True),
        sa.Column("order_id", sa.String(64), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("block_reason", sa.String(100), nullable=True),
        sa.Column("realized_pnl", MONEY, nullable=True),
        sa.Column("pnl_percent", MONEY, nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "copy_settings_id",
            "provider_trade_id",
            name="uq_copy_executions_settings_trade",
        ),
    )

    # Close fan-out: open executions of a provider trade
    op.create_index(
        "ix_copy_executions_trade_status",
        "copy_executions",
        ["provider_trade_id", "status"],
    )

    # Daily loss breaker: realized P&L per settings since UTC midnight
    op.create_index(
        "ix_copy_executions_settings_executed",
        "copy_executions",
        ["copy_settings_id", "executed_at"],
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("ix_copy_executions_settings_executed", table_name="copy_executions")
    op.drop_index("ix_copy_executions_trade_status", table_name="copy_executions")
    op.drop_table("copy_executions")

    op.drop_index("ix_copy_settings_provider_active", table_name="copy_settings")
    op.drop_table("copy_settings")

    op.drop_index("ix_subscriber_wallets_user_id", table_name="subscriber_wallets")
    op.drop_table("subscriber_wallets")
