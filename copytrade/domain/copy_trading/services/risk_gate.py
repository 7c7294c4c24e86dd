"""Risk Gate - чи дозволено копіювати trade для follower'а.

Перевірки (в порядку):
1. Settings активні і не на паузі → "settings inactive"
2. Pair в allow-list (якщо він не порожній) → "pair not allowed"
3. Денний realized loss не перевищив ліміт → "daily loss limit reached"

Gate сам I/O не робить: денний P&L читає orchestrator з ledger
безпосередньо перед check_daily_loss (не кешується).
Відмова - це не помилка: execution стає BLOCKED, не FAILED.
"""

from decimal import Decimal

from ..value_objects import CopySettings, ProviderTrade, RiskDecision

SETTINGS_INACTIVE = "settings inactive"
PAIR_NOT_ALLOWED = "pair not allowed"
DAILY_LOSS_LIMIT_REACHED = "daily loss limit reached"


class RiskGate:
    """Per-follower risk checks."""

    def check_static(self, settings: CopySettings, trade: ProviderTrade) -> RiskDecision:
        """Правила, що не потребують ledger.

        Args:
            settings: Follower copy settings.
            trade: Provider trade.

        Returns:
            RiskDecision.
        """
        if not settings.is_active or settings.is_paused:
            return RiskDecision.block(SETTINGS_INACTIVE)

        if settings.allowed_pairs and trade.pair.upper() not in settings.allowed_pairs:
            return RiskDecision.block(PAIR_NOT_ALLOWED)

        return RiskDecision.allow()

    def check_daily_loss(
        self, settings: CopySettings, realized_pnl_today: Decimal
    ) -> RiskDecision:
        """Daily loss circuit breaker.

        Блокує тільки коли P&L строго нижче -max_daily_loss_usd.

        Args:
            settings: Follower copy settings.
            realized_pnl_today: Сума realized P&L executions цих settings
                за поточну UTC добу.

        Returns:
            RiskDecision.
        """
        if realized_pnl_today < -settings.max_daily_loss_usd:
            return RiskDecision.block(DAILY_LOSS_LIMIT_REACHED)
        return RiskDecision.allow()

    def evaluate(
        self,
        settings: CopySettings,
        trade: ProviderTrade,
        realized_pnl_today: Decimal,
    ) -> RiskDecision:
        """Всі правила разом (для callers, що вже мають денний P&L)."""
        decision = self.check_static(settings, trade)
        if not decision.allowed:
            return decision
        return self.check_daily_loss(settings, realized_pnl_today)
