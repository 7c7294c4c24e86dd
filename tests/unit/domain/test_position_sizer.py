"""Unit tests для PositionSizer.

PURE unit tests: тільки Decimal арифметика, без DB і без exchange.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from copytrade.domain.copy_trading.services import PositionSizer
from copytrade.domain.copy_trading.value_objects import CopyMode


@pytest.fixture
def sizer():
    return PositionSizer()


class TestSizingModes:
    """Tests для трьох copy modes."""

    def test_fixed_percent_end_to_end_example(self, sizer, copy_settings, btc_trade):
        """Test: 5% від 10000 при entry 42000 → 0.0119 BTC."""
        size = sizer.calculate(copy_settings, btc_trade, Decimal("10000"))

        assert size == Decimal("0.0119")

    def test_fixed_size_is_notional_over_price(self, sizer, copy_settings, btc_trade):
        """Test: fixed_size 420 USDT при 42000 → 0.01."""
        settings = replace(copy_settings, copy_mode=CopyMode.FIXED_SIZE, size_value=Decimal("420"))

        assert sizer.calculate(settings, btc_trade, Decimal("10000")) == Decimal("0.01")

    def test_proportional_mirrors_provider_quantity(self, sizer, copy_settings, btc_trade):
        """Test: proportional 0.5 від quantity 0.1 → 0.05 (balance не впливає)."""
        settings = replace(
            copy_settings,
            copy_mode=CopyMode.PROPORTIONAL,
            size_value=Decimal("0.5"),
            max_position_usd=Decimal("10000"),
        )

        assert sizer.calculate(settings, btc_trade, Decimal("1")) == Decimal("0.05")

    def test_size_is_rounded_down_to_step(self, copy_settings, btc_trade):
        """Test: size округлюється ВНИЗ до step."""
        sizer = PositionSizer(size_step=Decimal("0.001"))

        assert sizer.calculate(copy_settings, btc_trade, Decimal("10000")) == Decimal("0.011")


class TestClipping:
    """Tests для max_position_usd clip."""

    @pytest.mark.parametrize(
        "mode,size_value",
        [
            (CopyMode.PROPORTIONAL, Decimal("10")),
            (CopyMode.FIXED_PERCENT, Decimal("100")),
            (CopyMode.FIXED_SIZE, Decimal("1000000")),
        ],
    )
    def test_notional_never_exceeds_max_position(
        self, sizer, copy_settings, btc_trade, mode, size_value
    ):
        """Test: size * entry_price <= max_position_usd для всіх modes."""
        settings = replace(copy_settings, copy_mode=mode, size_value=size_value)

        size = sizer.calculate(settings, btc_trade, Decimal("1000000"))

        assert size > 0
        assert size * btc_trade.entry_price <= settings.max_position_usd
        # 2000 / 42000 = 0.04761... → 0.0476
        assert size == Decimal("0.0476")

    def test_clip_applies_below_raw_size(self, sizer, copy_settings, btc_trade):
        """Test: clip спрацьовує тільки коли raw size більший за ліміт."""
        settings = replace(copy_settings, max_position_usd=Decimal("100"))

        size = sizer.calculate(settings, btc_trade, Decimal("10000"))

        assert size == Decimal("0.0023")
        assert size * btc_trade.entry_price <= Decimal("100")


class TestLinearity:
    """Tests для linear scaling."""

    @pytest.mark.parametrize("mode", [CopyMode.FIXED_PERCENT, CopyMode.FIXED_SIZE])
    def test_size_scales_with_size_value(self, sizer, copy_settings, btc_trade, mode):
        """Test: подвоєння size_value подвоює size."""
        settings = replace(
            copy_settings,
            copy_mode=mode,
            size_value=Decimal("420"),
            max_position_usd=Decimal("1000000"),
        )
        doubled = replace(settings, size_value=Decimal("840"))

        single = sizer.calculate(settings, btc_trade, Decimal("100000"))
        double = sizer.calculate(doubled, btc_trade, Decimal("100000"))

        assert double == single * 2

    def test_proportional_scales_with_provider_quantity(self, sizer, copy_settings, btc_trade):
        """Test: proportional size лінійний по quantity провайдера."""
        settings = replace(
            copy_settings,
            copy_mode=CopyMode.PROPORTIONAL,
            size_value=Decimal("1"),
            max_position_usd=Decimal("1000000"),
        )
        bigger_trade = replace(btc_trade, quantity=Decimal("0.3"))

        assert sizer.calculate(settings, btc_trade, Decimal("1")) == Decimal("0.1")
        assert sizer.calculate(settings, bigger_trade, Decimal("1")) == Decimal("0.3")


class TestInvalidInputs:
    """Tests: невалідні inputs дають 0, а не exception."""

    @pytest.mark.parametrize("balance", [Decimal("0"), Decimal("-5"), Decimal("NaN")])
    def test_bad_balance_yields_zero(self, sizer, copy_settings, btc_trade, balance):
        assert sizer.calculate(copy_settings, btc_trade, balance) == Decimal("0")

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-1"), Decimal("Infinity")])
    def test_bad_entry_price_yields_zero(self, sizer, copy_settings, btc_trade, price):
        trade = replace(btc_trade, entry_price=price)

        assert sizer.calculate(copy_settings, trade, Decimal("10000")) == Decimal("0")

    def test_zero_max_position_yields_zero(self, sizer, copy_settings, btc_trade):
        settings = replace(copy_settings, max_position_usd=Decimal("0"))

        assert sizer.calculate(settings, btc_trade, Decimal("10000")) == Decimal("0")

    def test_tiny_size_below_step_yields_zero(self, sizer, copy_settings, btc_trade):
        """Test: size менший за step округлюється до 0."""
        assert sizer.calculate(copy_settings, btc_trade, Decimal("1")) == Decimal("0")

    def test_non_positive_step_rejected(self):
        with pytest.raises(ValueError):
            PositionSizer(size_step=Decimal("0"))
