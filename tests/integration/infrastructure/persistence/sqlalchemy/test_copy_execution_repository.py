"""Integration tests for SQLAlchemyCopyExecutionRepository."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from copytrade.domain.copy_trading.entities import CopyExecution
from copytrade.domain.copy_trading.exceptions import DuplicateExecutionError
from copytrade.domain.copy_trading.value_objects import ExecutionStatus
from copytrade.domain.exchanges.value_objects import Direction


def closed_execution(binding, trade_id: str, pnl: str, executed_at: datetime | None = None):
    return CopyExecution(
        copy_settings_id=binding.settings.id,
        provider_trade_id=trade_id,
        wallet_id=binding.wallet.id,
        pair="BTC/USDT",
        direction=Direction.LONG,
        status=ExecutionStatus.CLOSED,
        size=Decimal("0.01"),
        entry_price=Decimal("42000"),
        exit_price=Decimal("41000"),
        realized_pnl=Decimal(pnl),
        executed_at=executed_at,
    )


class TestCopyExecutionRepository:
    """Integration tests для copy executions ledger."""

    async def test_save_and_reload(self, sql_uow_factory, persist_follower, btc_trade):
        binding = await persist_follower("key-a")
        execution = CopyExecution.reserve(binding, btc_trade)

        async with sql_uow_factory() as uow:
            await uow.executions.save(execution)
            await uow.commit()

        assert execution.id is not None

        execution.mark_open(order_id="abc", size=Decimal("0.0119"), entry_price=Decimal("42000"))
        async with sql_uow_factory() as uow:
            await uow.executions.save(execution)
            await uow.commit()

        async with sql_uow_factory() as uow:
            loaded = await uow.executions.get_by_id(execution.id)

        assert loaded.status == ExecutionStatus.OPEN
        assert loaded.order_id == "abc"
        assert loaded.size == Decimal("0.0119")
        assert loaded.entry_price == Decimal("42000")
        assert loaded.direction == Direction.LONG
        assert loaded.leverage == 5
        assert loaded.executed_at.tzinfo is not None

    async def test_unique_settings_trade(self, sql_uow_factory, persist_follower, btc_trade):
        """Test: друга execution на (settings, trade) → DuplicateExecutionError."""
        binding = await persist_follower("key-a")

        async with sql_uow_factory() as uow:
            await uow.executions.save(CopyExecution.reserve(binding, btc_trade))
            await uow.commit()

        with pytest.raises(DuplicateExecutionError):
            async with sql_uow_factory() as uow:
                await uow.executions.save(CopyExecution.reserve(binding, btc_trade))
                await uow.commit()

        async with sql_uow_factory() as uow:
            existing = await uow.executions.get_for(binding.settings.id, btc_trade.id)
            assert existing is not None
            assert await uow.executions.get_for(binding.settings.id, "other") is None

    async def test_realized_pnl_since(self, sql_uow_factory, persist_follower):
        binding = await persist_follower("key-a")
        other = await persist_follower("key-b")
        now = datetime.now(timezone.utc)

        async with sql_uow_factory() as uow:
            await uow.executions.save(closed_execution(binding, "t-1", "-350"))
            await uow.executions.save(closed_execution(binding, "t-2", "-250"))
            await uow.executions.save(
                closed_execution(binding, "t-0", "-1000", executed_at=now - timedelta(days=2))
            )
            await uow.executions.save(closed_execution(other, "t-1", "-900"))
            await uow.commit()

        since = now - timedelta(hours=1)
        async with sql_uow_factory() as uow:
            total = await uow.executions.get_realized_pnl_since(binding.settings.id, since)
            empty = await uow.executions.get_realized_pnl_since(999, since)

        assert total == Decimal("-600")
        assert empty == Decimal("0")

    async def test_open_for_trade_and_stuck(self, sql_uow_factory, persist_follower, btc_trade):
        a = await persist_follower("key-a")
        b = await persist_follower("key-b")
        c = await persist_follower("key-c")

        opened = CopyExecution.reserve(a, btc_trade)
        stuck = CopyExecution.reserve(b, btc_trade)
        blocked = CopyExecution.reserve(c, btc_trade)
        for execution in (opened, stuck):
            execution.mark_open(order_id="abc", size=Decimal("0.01"), entry_price=Decimal("42000"))
        stuck.record_close_failure("position not found")
        blocked.block("pair not allowed")

        async with sql_uow_factory() as uow:
            for execution in (opened, stuck, blocked):
                await uow.executions.save(execution)
            await uow.commit()

        async with sql_uow_factory() as uow:
            open_ids = [e.id for e in await uow.executions.get_open_for_trade(btc_trade.id)]
            stuck_ids = [e.id for e in await uow.executions.list_stuck()]
            none_open = await uow.executions.get_open_for_trade("t-unknown")

        assert open_ids == [opened.id, stuck.id]
        assert stuck_ids == [stuck.id]
        assert none_open == []

    async def test_list_stuck_includes_stale_pending(self, sql_uow_factory, persist_follower, btc_trade):
        now = datetime.now(timezone.utc)
        stale = CopyExecution.reserve(await persist_follower("key-a"), btc_trade)
        fresh = CopyExecution.reserve(await persist_follower("key-b"), btc_trade)
        stale.executed_at = now - timedelta(minutes=10)
        fresh.executed_at = now - timedelta(minutes=1)

        async with sql_uow_factory() as uow:
            await uow.executions.save(stale)
            await uow.executions.save(fresh)
            await uow.commit()

        async with sql_uow_factory() as uow:
            default_ids = [e.id for e in await uow.executions.list_stuck()]
            stuck_ids = [
                e.id
                for e in await uow.executions.list_stuck(pending_before=now - timedelta(minutes=5))
            ]

        assert default_ids == []
        assert stuck_ids == [stale.id]
