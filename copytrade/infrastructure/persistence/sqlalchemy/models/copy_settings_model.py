"""SQLAlchemy model для copy settings."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK, Money


class CopySettingsModel(Base):
    """ORM model для copy_settings table.

    Один рядок на (wallet_id, provider_id).
    """

    __tablename__ = "copy_settings"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    wallet_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("subscriber_wallets.id", ondelete="CASCADE"), nullable=False
    )
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)

    copy_mode: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # "proportional", "fixed_percent", "fixed_size"
    size_value: Mapped[Decimal] = mapped_column(Money, nullable=False)
    max_position_usd: Mapped[Decimal] = mapped_column(Money, nullable=False)
    max_daily_loss_usd: Mapped[Decimal] = mapped_column(Money, nullable=False)
    allowed_pairs: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    copy_stop_loss: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    copy_take_profit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("wallet_id", "provider_id", name="uq_copy_settings_wallet_provider"),
        # Query: active followers of a provider
        Index("ix_copy_settings_provider_active", "provider_id", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<CopySettingsModel(id={self.id}, wallet_id={self.wallet_id}, "
            f"provider_id={self.provider_id}, mode={self.copy_mode})>"
        )
