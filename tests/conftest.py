"""Pytest configuration and fixtures.

In-memory fakes для application tests: FakeExchange (ExchangePort),
FakeExchangeFactory і in-memory UnitOfWork з тими ж контрактами, що
SQLAlchemy implementation (включно з unique (settings, trade)).
"""

import asyncio
import copy
import dataclasses
from datetime import datetime
from decimal import Decimal
from itertools import count
from typing import Any, Callable

import pytest

from copytrade.application.shared import UnitOfWork
from copytrade.domain.copy_trading.entities import CopyExecution
from copytrade.domain.copy_trading.exceptions import (
    DuplicateCopySettingsError,
    DuplicateExecutionError,
)
from copytrade.domain.copy_trading.repositories import (
    CopyExecutionRepository,
    FollowerRepository,
)
from copytrade.domain.copy_trading.value_objects import (
    CopyMode,
    CopySettings,
    ExecutionStatus,
    FollowerBinding,
    FollowerWallet,
    ProviderTrade,
)
from copytrade.domain.exchanges.exceptions import UnsupportedExchangeError
from copytrade.domain.exchanges.ports import ExchangePort
from copytrade.domain.exchanges.value_objects import (
    Direction,
    ExchangeCredentials,
    OrderResult,
)
from copytrade.infrastructure.encryption import CredentialVault

TEST_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


# ============================================================================
# EXCHANGE FAKES
# ============================================================================


class FakeExchange(ExchangePort):
    """ExchangePort fake: фіксований баланс/ціна, configurable failures.

    ``failures`` мапить назву методу на exception, який він кидає.
    ``delays`` мапить назву методу на sleep в секундах (для timeout tests).
    """

    def __init__(
        self,
        balance: Decimal = Decimal("10000"),
        price: Decimal = Decimal("42000"),
        order_id: str = "abc",
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.balance = balance
        self.price = price
        self.order_id = order_id
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.closed = False

    async def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((method, args, kwargs))
        if method in self.delays:
            await asyncio.sleep(self.delays[method])
        if method in self.failures:
            raise self.failures[method]

    def called(self, method: str) -> list[tuple[tuple[Any, ...], dict[str, Any]]]:
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]

    async def close(self) -> None:
        self.closed = True

    async def get_balance(self, asset: str) -> Decimal:
        await self._record("get_balance", asset)
        return self.balance

    async def get_price(self, pair: str) -> Decimal:
        await self._record("get_price", pair)
        return self.price

    async def open_position(
        self,
        pair: str,
        direction: Direction,
        size: Decimal,
        leverage: int | None = None,
        stop_loss: Decimal | None = None,
        take_profit: Decimal | None = None,
    ) -> OrderResult:
        await self._record(
            "open_position",
            pair,
            direction,
            size,
            leverage=leverage,
            stop_loss=stop_loss,
            take_profit=take_profit,
        )
        return OrderResult(
            order_id=self.order_id,
            pair=pair,
            side=direction.opening_side,
            size=size,
        )

    async def close_position(self, pair: str, direction: Direction, size: Decimal) -> OrderResult:
        await self._record("close_position", pair, direction, size)
        return OrderResult(
            order_id=f"{self.order_id}-close",
            pair=pair,
            side=direction.closing_side,
            size=size,
        )

    async def cancel_order(self, pair: str, order_id: str) -> None:
        await self._record("cancel_order", pair, order_id)

    async def validate_credentials(self) -> bool:
        try:
            await self._record("validate_credentials")
        except Exception:
            return False
        return True


class FakeExchangeFactory:
    """ExchangeFactory fake: exchange per api_key."""

    def __init__(self) -> None:
        self.exchanges: dict[str, FakeExchange] = {}
        self.created: list[str] = []

    def register(self, api_key: str, exchange: FakeExchange) -> FakeExchange:
        self.exchanges[api_key] = exchange
        return exchange

    def create_exchange(self, exchange_name: str, credentials: ExchangeCredentials) -> ExchangePort:
        if not self.is_supported(exchange_name):
            raise UnsupportedExchangeError(f"Unsupported exchange: {exchange_name}")
        self.created.append(credentials.api_key)
        return self.exchanges.setdefault(credentials.api_key, FakeExchange())

    def is_supported(self, exchange_name: str) -> bool:
        return (exchange_name or "").lower() == "bitget"

    def get_supported_exchanges(self) -> list[str]:
        return ["bitget"]


# ============================================================================
# IN-MEMORY PERSISTENCE
# ============================================================================


class InMemoryStore:
    """Shared "database" для in-memory repositories."""

    def __init__(self) -> None:
        self.wallets: dict[int, FollowerWallet] = {}
        self.settings: dict[int, CopySettings] = {}
        self.executions: dict[int, CopyExecution] = {}
        self._ids = count(1)

    def next_id(self) -> int:
        return next(self._ids)


def _snapshot(execution: CopyExecution) -> CopyExecution:
    stored = copy.deepcopy(execution)
    stored.clear_domain_events()
    return stored


class InMemoryCopyExecutionRepository(CopyExecutionRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def save(self, execution: CopyExecution) -> None:
        if execution.id is None:
            for existing in self._store.executions.values():
                if (
                    existing.copy_settings_id == execution.copy_settings_id
                    and existing.provider_trade_id == execution.provider_trade_id
                ):
                    raise DuplicateExecutionError("Copy execution already exists")
            execution.id = self._store.next_id()
        self._store.executions[execution.id] = _snapshot(execution)

    async def get_by_id(self, execution_id: int) -> CopyExecution | None:
        stored = self._store.executions.get(execution_id)
        return copy.deepcopy(stored) if stored else None

    async def get_for(self, copy_settings_id: int, provider_trade_id: str) -> CopyExecution | None:
        for stored in self._store.executions.values():
            if (
                stored.copy_settings_id == copy_settings_id
                and stored.provider_trade_id == provider_trade_id
            ):
                return copy.deepcopy(stored)
        return None

    async def get_open_for_trade(self, provider_trade_id: str) -> list[CopyExecution]:
        return [
            copy.deepcopy(e)
            for e in self._store.executions.values()
            if e.provider_trade_id == provider_trade_id and e.status == ExecutionStatus.OPEN
        ]

    async def get_realized_pnl_since(self, copy_settings_id: int, since: datetime) -> Decimal:
        return sum(
            (
                e.realized_pnl
                for e in self._store.executions.values()
                if e.copy_settings_id == copy_settings_id
                and e.executed_at >= since
                and e.realized_pnl is not None
            ),
            Decimal("0"),
        )

    async def list_stuck(
        self, limit: int = 100, pending_before: datetime | None = None
    ) -> list[CopyExecution]:
        def is_stuck(e: CopyExecution) -> bool:
            if e.status == ExecutionStatus.OPEN:
                return bool(e.error_message)
            return (
                e.status == ExecutionStatus.PENDING
                and pending_before is not None
                and e.executed_at < pending_before
            )

        stuck = [copy.deepcopy(e) for e in self._store.executions.values() if is_stuck(e)]
        stuck.sort(key=lambda e: e.executed_at)
        return stuck[:limit]


class InMemoryFollowerRepository(FollowerRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_active_bindings_for_provider(self, provider_id: str) -> list[FollowerBinding]:
        return [
            FollowerBinding(settings=s, wallet=self._store.wallets[s.wallet_id])
            for s in self._store.settings.values()
            if s.provider_id == provider_id and s.is_active
        ]

    async def get_wallet(self, wallet_id: int) -> FollowerWallet | None:
        return self._store.wallets.get(wallet_id)

    async def save_wallet(self, wallet: FollowerWallet) -> FollowerWallet:
        saved = dataclasses.replace(wallet, id=self._store.next_id())
        self._store.wallets[saved.id] = saved
        return saved

    async def get_settings_for(self, wallet_id: int, provider_id: str) -> CopySettings | None:
        for settings in self._store.settings.values():
            if settings.wallet_id == wallet_id and settings.provider_id == provider_id:
                return settings
        return None

    async def save_settings(self, settings: CopySettings) -> CopySettings:
        if await self.get_settings_for(settings.wallet_id, settings.provider_id):
            raise DuplicateCopySettingsError("Wallet already copies this provider")
        saved = dataclasses.replace(settings, id=self._store.next_id())
        self._store.settings[saved.id] = saved
        return saved


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._executions = InMemoryCopyExecutionRepository(store)
        self._followers = InMemoryFollowerRepository(store)
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            await self.rollback()

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    @property
    def executions(self) -> InMemoryCopyExecutionRepository:
        return self._executions

    @property
    def followers(self) -> InMemoryFollowerRepository:
        return self._followers


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def vault() -> CredentialVault:
    """CredentialVault з фіксованим test key."""
    return CredentialVault(TEST_ENCRYPTION_KEY)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store) -> Callable[[], InMemoryUnitOfWork]:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def exchange_factory() -> FakeExchangeFactory:
    return FakeExchangeFactory()


@pytest.fixture
def make_exchange() -> Callable[..., FakeExchange]:
    """Factory для FakeExchange з custom behaviour."""
    return FakeExchange


@pytest.fixture
def add_follower(store, vault):
    """Додати wallet + copy settings в in-memory store.

    Returns:
        Callable(api_key, **settings_overrides) -> FollowerBinding.
    """

    def _add(
        api_key: str,
        provider_id: str = "p-1",
        wallet_active: bool = True,
        **overrides: Any,
    ) -> FollowerBinding:
        wallet = FollowerWallet(
            id=store.next_id(),
            user_id=1,
            exchange="bitget",
            api_key_encrypted=vault.encrypt(api_key),
            api_secret_encrypted=vault.encrypt(f"{api_key}-secret"),
            api_passphrase_encrypted=vault.encrypt(f"{api_key}-pass"),
            label=api_key,
            is_active=wallet_active,
        )
        store.wallets[wallet.id] = wallet

        values: dict[str, Any] = {
            "copy_mode": CopyMode.FIXED_PERCENT,
            "size_value": Decimal("5"),
            "max_position_usd": Decimal("2000"),
            "max_daily_loss_usd": Decimal("500"),
        }
        values.update(overrides)
        settings = CopySettings(
            id=store.next_id(),
            wallet_id=wallet.id,
            provider_id=provider_id,
            **values,
        )
        store.settings[settings.id] = settings
        return FollowerBinding(settings=settings, wallet=wallet)

    return _add


@pytest.fixture
def trade_payload() -> dict[str, Any]:
    """BTC/USDT long, entry 42000, quantity 0.1, leverage 5."""
    return {
        "id": "t-1",
        "provider_id": "p-1",
        "pair": "BTC/USDT",
        "direction": "long",
        "entry_price": "42000",
        "quantity": "0.1",
        "leverage": 5,
    }


@pytest.fixture
def btc_trade(trade_payload) -> ProviderTrade:
    return ProviderTrade.from_payload(trade_payload)


@pytest.fixture
def copy_settings() -> CopySettings:
    """fixed_percent 5%, max position 2000, max daily loss 500."""
    return CopySettings(
        id=10,
        wallet_id=20,
        provider_id="p-1",
        copy_mode=CopyMode.FIXED_PERCENT,
        size_value=Decimal("5"),
        max_position_usd=Decimal("2000"),
        max_daily_loss_usd=Decimal("500"),
    )
