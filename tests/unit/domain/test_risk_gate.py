"""Unit tests для RiskGate."""

from dataclasses import replace
from decimal import Decimal

import pytest

from copytrade.domain.copy_trading.services import (
    DAILY_LOSS_LIMIT_REACHED,
    PAIR_NOT_ALLOWED,
    SETTINGS_INACTIVE,
    RiskGate,
)


@pytest.fixture
def gate():
    return RiskGate()


class TestStaticRules:
    def test_active_settings_allowed(self, gate, copy_settings, btc_trade):
        decision = gate.check_static(copy_settings, btc_trade)

        assert decision.allowed is True
        assert decision.reason is None

    @pytest.mark.parametrize("overrides", [{"is_active": False}, {"is_paused": True}])
    def test_inactive_or_paused_settings_blocked(self, gate, copy_settings, btc_trade, overrides):
        decision = gate.check_static(replace(copy_settings, **overrides), btc_trade)

        assert decision.allowed is False
        assert decision.reason == SETTINGS_INACTIVE

    def test_pair_outside_allow_list_blocked(self, gate, copy_settings, btc_trade):
        """Test: pair не з allow-list → "pair not allowed"."""
        settings = replace(copy_settings, allowed_pairs=("ETH/USDT", "SOL/USDT"))

        decision = gate.check_static(settings, btc_trade)

        assert decision.allowed is False
        assert decision.reason == PAIR_NOT_ALLOWED

    def test_pair_in_allow_list_allowed_case_insensitive(self, gate, copy_settings, btc_trade):
        settings = replace(copy_settings, allowed_pairs=("btc/usdt",))

        assert gate.check_static(settings, btc_trade).allowed is True

    @pytest.mark.parametrize("allowed_pairs", [(), None])
    def test_empty_allow_list_accepts_all_pairs(
        self, gate, copy_settings, btc_trade, allowed_pairs
    ):
        settings = replace(copy_settings, allowed_pairs=allowed_pairs)

        assert gate.check_static(settings, btc_trade).allowed is True


class TestDailyLossBreaker:
    """Tests для daily loss circuit breaker."""

    def test_loss_beyond_limit_blocks(self, gate, copy_settings):
        """Test: -600 сьогодні при ліміті 500 → blocked."""
        decision = gate.check_daily_loss(copy_settings, Decimal("-600"))

        assert decision.allowed is False
        assert decision.reason == DAILY_LOSS_LIMIT_REACHED

    def test_raising_limit_unblocks(self, gate, copy_settings):
        """Test: той самий -600 при ліміті 700 → allowed."""
        settings = replace(copy_settings, max_daily_loss_usd=Decimal("700"))

        assert gate.check_daily_loss(settings, Decimal("-600")).allowed is True

    def test_loss_exactly_at_limit_allowed(self, gate, copy_settings):
        """Test: блокує тільки строго нижче -limit."""
        assert gate.check_daily_loss(copy_settings, Decimal("-500")).allowed is True

    def test_profit_allowed(self, gate, copy_settings):
        assert gate.check_daily_loss(copy_settings, Decimal("250")).allowed is True


class TestEvaluate:
    def test_static_rule_wins_over_daily_loss(self, gate, copy_settings, btc_trade):
        settings = replace(copy_settings, is_active=False)

        decision = gate.evaluate(settings, btc_trade, Decimal("-600"))

        assert decision.reason == SETTINGS_INACTIVE

    def test_all_rules_pass(self, gate, copy_settings, btc_trade):
        assert gate.evaluate(copy_settings, btc_trade, Decimal("0")).allowed is True
