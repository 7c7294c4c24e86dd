"""SQLAlchemy model для copy executions ledger."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK, Money


class CopyExecutionModel(Base):
    """ORM model для copy_executions table.

    Це ТІЛЬКИ для персистенції, business logic в
    domain.copy_trading.entities.CopyExecution.
    """

    __tablename__ = "copy_executions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    copy_settings_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("copy_settings.id", ondelete="CASCADE"), nullable=False
    )
    wallet_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("subscriber_wallets.id", ondelete="CASCADE"), nullable=False
    )
    provider_trade_id: Mapped[str] = mapped_column(String(64), nullable=False)

    pair: Mapped[str] = mapped_column(String(32), nullable=False)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)  # "long" / "short"
    leverage: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # "pending", "open", "closed", "blocked", "failed"

    size: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    entry_price: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    exit_price: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    block_reason: Mapped[str | None] = mapped_column(String(100), nullable=True)

    realized_pnl: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    pnl_percent: Mapped[Decimal | None] = mapped_column(Money, nullable=True)

    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # One execution per (settings, trade), backstop for duplicate dispatch
        UniqueConstraint(
            "copy_settings_id", "provider_trade_id", name="uq_copy_executions_settings_trade"
        ),
        # Query: open executions of a provider trade (close fan-out)
        Index("ix_copy_executions_trade_status", "provider_trade_id", "status"),
        # Query: today's realized P&L per settings (daily loss breaker)
        Index("ix_copy_executions_settings_executed", "copy_settings_id", "executed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<CopyExecutionModel(id={self.id}, settings={self.copy_settings_id}, "
            f"trade={self.provider_trade_id}, status={self.status})>"
        )
