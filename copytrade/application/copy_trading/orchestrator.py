"""CopyTrade Orchestrator - fan-out провайдерського trade на всіх followers.

Це CORE use case всієї системи.

On trade opened, для кожного follower'а (concurrently, bounded semaphore):
1. **Dedupe**: execution для (settings, trade) вже є → "already processed"
2. **RESERVE**: PENDING execution, commit (unique constraint спрацьовує тут)
3. **Risk**: wallet inactive → FAILED; Risk Gate → BLOCKED
4. **Exchange**: decrypt → balance → size → open_position → get_price
5. **CONFIRM**: OPEN / FAILED, commit, events повертаються caller'у

On trade closed: кожна OPEN execution закривається на біржі, P&L
фіксується. Невдале закриття лишає execution OPEN з error_message.

Помилка одного follower'а ніколи не зупиняє інших (allSettled join).
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Awaitable, TypeVar

from copytrade.application.copy_trading.dtos import CopyOutcome
from copytrade.application.shared import UnitOfWorkFactory
from copytrade.domain.copy_trading.entities import CopyExecution
from copytrade.domain.copy_trading.exceptions import (
    DuplicateExecutionError,
    WalletNotFoundError,
)
from copytrade.domain.copy_trading.services import PositionSizer, RiskGate
from copytrade.domain.copy_trading.value_objects import (
    ExecutionStatus,
    FollowerBinding,
    ProviderTrade,
)
from copytrade.domain.exchanges.ports import ExchangePort
from copytrade.domain.exchanges.value_objects import OrderResult
from copytrade.domain.shared import ConfigurationError
from copytrade.infrastructure.encryption import CredentialVault
from copytrade.infrastructure.exchanges.factories import ExchangeFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALREADY_PROCESSED = "already processed"
WALLET_INACTIVE = "wallet inactive"
ZERO_SIZE = "zero size"


def start_of_utc_day(now: datetime | None = None) -> datetime:
    """Початок поточної UTC доби (межа daily loss вікна)."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def describe_error(error: BaseException, call_timeout: float | None = None) -> str:
    """Повідомлення для error_message / outcome.error."""
    if isinstance(error, asyncio.TimeoutError):
        if call_timeout is not None:
            return f"exchange call timed out after {call_timeout:g}s"
        return "exchange call timed out"
    return str(error) or type(error).__name__


class CopyTradeOrchestrator:
    """Orchestrator для provider trade lifecycle events.

    Example:
        >>> orchestrator = CopyTradeOrchestrator(
        ...     uow_factory=lambda: SQLAlchemyUnitOfWork(session_factory),
        ...     exchange_factory=ExchangeFactory(),
        ...     vault=get_credential_vault(),
        ... )
        >>> outcomes = await orchestrator.on_trade_opened(trade)
        >>> [o.status for o in outcomes]
        [<ExecutionStatus.OPEN: 'open'>, <ExecutionStatus.BLOCKED: 'blocked'>]
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        exchange_factory: ExchangeFactory,
        vault: CredentialVault,
        sizer: PositionSizer | None = None,
        risk_gate: RiskGate | None = None,
        call_timeout: float = 10.0,
        max_concurrency: int = 20,
        quote_asset: str = "USDT",
    ) -> None:
        """Initialize orchestrator.

        Args:
            uow_factory: Створює новий UnitOfWork; кожен follower task
                відкриває власні.
            exchange_factory: Factory для exchange adapters.
            vault: Credential vault для розшифровки wallets.
            sizer: Position sizer (default step 0.0001).
            risk_gate: Risk gate.
            call_timeout: Timeout в секундах на кожен exchange call.
            max_concurrency: Максимум одночасних follower tasks.
            quote_asset: Asset балансу для sizing.
        """
        if call_timeout <= 0:
            raise ConfigurationError("Exchange call timeout must be positive")
        if max_concurrency < 1:
            raise ConfigurationError("Max concurrency must be at least 1")

        self._uow_factory = uow_factory
        self._exchange_factory = exchange_factory
        self._vault = vault
        self._sizer = sizer or PositionSizer()
        self._risk_gate = risk_gate or RiskGate()
        self._call_timeout = call_timeout
        self._max_concurrency = max_concurrency
        self._quote_asset = quote_asset

        # Serializes check-then-act per CopySettings inside this process
        self._settings_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    # --- TRADE OPENED ---

    async def on_trade_opened(self, trade: ProviderTrade) -> list[CopyOutcome]:
        """Скопіювати відкриту позицію провайдера на всіх його followers.

        Returns:
            Один CopyOutcome на кожен active CopySettings провайдера.

        Raises:
            ConfigurationError: Process misconfigured (після завершення всіх tasks).
        """
        async with self._uow_factory() as uow:
            bindings = await uow.followers.get_active_bindings_for_provider(trade.provider_id)

        logger.info(
            "copy_trade.open.start",
            extra={
                "provider_trade_id": trade.id,
                "provider_id": trade.provider_id,
                "pair": trade.pair,
                "direction": trade.direction.value,
                "followers_count": len(bindings),
            },
        )

        if not bindings:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)
        results = await asyncio.gather(
            *(self._bounded(semaphore, self._open_for_follower(b, trade)) for b in bindings),
            return_exceptions=True,
        )

        outcomes = [
            self._settle(result, binding, trade)
            for binding, result in zip(bindings, results)
        ]
        self._raise_configuration_error(results)

        self._log_summary("copy_trade.open.completed", trade, outcomes)
        return outcomes

    async def _open_for_follower(
        self, binding: FollowerBinding, trade: ProviderTrade
    ) -> CopyOutcome:
        settings = binding.settings

        async with self._settings_locks[settings.id or 0]:
            execution = await self._reserve(binding, trade)
            if execution is None:
                return CopyOutcome.not_persisted(
                    binding, ExecutionStatus.BLOCKED, block_reason=ALREADY_PROCESSED
                )

            error: Exception | None = None
            try:
                await self._execute_open(execution, binding, trade)
            except Exception as e:
                error = e
                self._record_open_error(execution, e)

            try:
                outcome = await self._persist(execution)
            except Exception as e:
                outcome = self._unsaved_outcome(execution, e)

        if isinstance(error, ConfigurationError):
            raise error
        return outcome

    async def _reserve(
        self, binding: FollowerBinding, trade: ProviderTrade
    ) -> CopyExecution | None:
        """PENDING reservation. None якщо (settings, trade) вже оброблено."""
        try:
            async with self._uow_factory() as uow:
                existing = await uow.executions.get_for(binding.settings.id, trade.id)
                if existing is not None:
                    logger.info(
                        "copy_trade.open.already_processed",
                        extra={
                            "copy_settings_id": binding.settings.id,
                            "provider_trade_id": trade.id,
                            "execution_id": existing.id,
                            "status": existing.status.value,
                        },
                    )
                    return None

                execution = CopyExecution.reserve(binding, trade)
                await uow.executions.save(execution)
                await uow.commit()

        except DuplicateExecutionError:
            # Concurrent dispatch won the unique constraint
            logger.info(
                "copy_trade.open.duplicate_reservation",
                extra={"copy_settings_id": binding.settings.id, "provider_trade_id": trade.id},
            )
            return None

        return execution

    async def _execute_open(
        self,
        execution: CopyExecution,
        binding: FollowerBinding,
        trade: ProviderTrade,
    ) -> None:
        """Risk → size → order. Мутує execution, нічого не persist'ить."""
        settings, wallet = binding.settings, binding.wallet

        if not wallet.is_active:
            execution.fail(WALLET_INACTIVE)
            return

        decision = self._risk_gate.check_static(settings, trade)
        if not decision.allowed:
            execution.block(decision.reason)
            return

        # Ledger read immediately before execution, never cached
        async with self._uow_factory() as uow:
            pnl_today = await uow.executions.get_realized_pnl_since(
                settings.id, start_of_utc_day()
            )

        decision = self._risk_gate.check_daily_loss(settings, pnl_today)
        if not decision.allowed:
            logger.info(
                "copy_trade.open.daily_loss_blocked",
                extra={
                    "copy_settings_id": settings.id,
                    "realized_pnl_today": str(pnl_today),
                    "max_daily_loss_usd": str(settings.max_daily_loss_usd),
                },
            )
            execution.block(decision.reason)
            return

        credentials = self._vault.open_wallet(wallet)

        async with self._exchange_factory.create_exchange(wallet.exchange, credentials) as exchange:
            balance = await self._call(exchange.get_balance(self._quote_asset))

            size = self._sizer.calculate(settings, trade, balance)
            if size <= 0:
                logger.info(
                    "copy_trade.open.zero_size",
                    extra={"copy_settings_id": settings.id, "balance": str(balance)},
                )
                execution.fail(ZERO_SIZE, size=size)
                return

            order = await self._call(
                exchange.open_position(
                    trade.pair,
                    trade.direction,
                    size,
                    leverage=trade.leverage,
                    stop_loss=trade.stop_loss if settings.copy_stop_loss else None,
                    take_profit=trade.take_profit if settings.copy_take_profit else None,
                )
            )
            # Order is live from here on
            execution.order_id = order.order_id
            execution.size = size

            entry_price = await self._fill_price(exchange, trade.pair, order)

            execution.mark_open(
                order_id=order.order_id,
                size=size,
                entry_price=entry_price,
                leverage=trade.leverage,
            )

    def _record_open_error(self, execution: CopyExecution, error: Exception) -> None:
        message = describe_error(error, self._call_timeout)

        logger.warning(
            "copy_trade.open.follower_failed",
            extra={
                "copy_settings_id": execution.copy_settings_id,
                "wallet_id": execution.wallet_id,
                "error_type": type(error).__name__,
                "error": message,
            },
        )

        if execution.status == ExecutionStatus.PENDING:
            execution.fail(message)
        # Error after mark_open (closing the client): position is open, keep it

    # --- TRADE CLOSED ---

    async def on_trade_closed(self, trade: ProviderTrade) -> list[CopyOutcome]:
        """Закрити всі OPEN копії trade провайдера.

        Returns:
            Один CopyOutcome на кожну OPEN execution.
        """
        async with self._uow_factory() as uow:
            executions = await uow.executions.get_open_for_trade(trade.id)

        logger.info(
            "copy_trade.close.start",
            extra={"provider_trade_id": trade.id, "open_executions": len(executions)},
        )

        if not executions:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)
        results = await asyncio.gather(
            *(self._bounded(semaphore, self._close_execution(e, trade)) for e in executions),
            return_exceptions=True,
        )

        outcomes = [
            self._settle_close(result, execution)
            for execution, result in zip(executions, results)
        ]
        self._raise_configuration_error(results)

        self._log_summary("copy_trade.close.completed", trade, outcomes)
        return outcomes

    async def _close_execution(
        self, execution: CopyExecution, trade: ProviderTrade
    ) -> CopyOutcome:
        async with self._settings_locks[execution.copy_settings_id]:
            error: Exception | None = None
            try:
                await self._execute_close(execution, trade)
            except Exception as e:
                error = e
                message = describe_error(e, self._call_timeout)
                logger.error(
                    "copy_trade.close.follower_failed",
                    extra={
                        "execution_id": execution.id,
                        "wallet_id": execution.wallet_id,
                        "error_type": type(e).__name__,
                        "error": message,
                    },
                )
                if execution.is_open:
                    execution.record_close_failure(message)

            outcome = await self._persist(execution)

        if error is not None:
            outcome.status = ExecutionStatus.FAILED
            outcome.error = execution.error_message or describe_error(error, self._call_timeout)
            if isinstance(error, ConfigurationError):
                raise error
        return outcome

    async def _execute_close(self, execution: CopyExecution, trade: ProviderTrade) -> None:
        async with self._uow_factory() as uow:
            wallet = await uow.followers.get_wallet(execution.wallet_id)

        if wallet is None:
            raise WalletNotFoundError("Wallet not found", wallet_id=execution.wallet_id)

        credentials = self._vault.open_wallet(wallet)

        async with self._exchange_factory.create_exchange(wallet.exchange, credentials) as exchange:
            order = await self._call(
                exchange.close_position(execution.pair, execution.direction, execution.size)
            )
            exit_price = await self._fill_price(
                exchange, execution.pair, order, fallback=trade.exit_price
            )

        execution.close(exit_price)

    # --- SHARED HELPERS ---

    async def _persist(self, execution: CopyExecution) -> CopyOutcome:
        """Save execution і повернути outcome з його events."""
        async with self._uow_factory() as uow:
            await uow.executions.save(execution)
            await uow.commit()

        events = execution.get_domain_events()
        execution.clear_domain_events()

        logger.info(
            "copy_trade.execution.saved",
            extra={
                "execution_id": execution.id,
                "copy_settings_id": execution.copy_settings_id,
                "status": execution.status.value,
                "order_id": execution.order_id,
            },
        )

        return CopyOutcome.from_execution(execution, events)

    def _unsaved_outcome(self, execution: CopyExecution, error: Exception) -> CopyOutcome:
        """Confirm write failed: ledger row stays PENDING, order may be live.

        Outcome несе order_id і size з пам'яті, щоб оператор міг знайти
        позицію; сам рядок піде в stuck report після grace period.
        """
        logger.error(
            "copy_trade.execution.save_failed",
            extra={
                "execution_id": execution.id,
                "copy_settings_id": execution.copy_settings_id,
                "wallet_id": execution.wallet_id,
                "status": execution.status.value,
                "order_id": execution.order_id,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=error,
        )
        return CopyOutcome(
            copy_settings_id=execution.copy_settings_id,
            wallet_id=execution.wallet_id,
            execution_id=execution.id,
            status=ExecutionStatus.FAILED,
            order_id=execution.order_id,
            size=execution.size,
            price=execution.entry_price,
            error=describe_error(error, self._call_timeout),
            persisted=False,
        )

    async def _call(self, awaitable: Awaitable[T]) -> T:
        """Exchange call з timeout. Timeout → asyncio.TimeoutError."""
        return await asyncio.wait_for(awaitable, timeout=self._call_timeout)

    async def _fill_price(
        self,
        exchange: ExchangePort,
        pair: str,
        order: OrderResult,
        fallback: Decimal | None = None,
    ) -> Decimal:
        """Поточна ціна після ордеру; average з ордеру, якщо ticker недоступний."""
        try:
            return await self._call(exchange.get_price(pair))
        except Exception as e:
            price = order.price or fallback
            if price is None:
                raise
            logger.warning(
                "copy_trade.price_fallback",
                extra={
                    "pair": pair,
                    "order_id": order.order_id,
                    "price": str(price),
                    "error": describe_error(e, self._call_timeout),
                },
            )
            return price

    @staticmethod
    async def _bounded(semaphore: asyncio.Semaphore, coro: Awaitable[T]) -> T:
        async with semaphore:
            return await coro

    def _settle(
        self,
        result: CopyOutcome | BaseException,
        binding: FollowerBinding,
        trade: ProviderTrade,
    ) -> CopyOutcome:
        """Exception, що пройшла повз task boundary → FAILED outcome."""
        if isinstance(result, CopyOutcome):
            return result
        if not isinstance(result, Exception):
            raise result

        logger.error(
            "copy_trade.open.task_crashed",
            extra={
                "copy_settings_id": binding.settings.id,
                "provider_trade_id": trade.id,
                "error_type": type(result).__name__,
                "error": str(result),
            },
            exc_info=result,
        )
        return CopyOutcome.not_persisted(
            binding, ExecutionStatus.FAILED, error=describe_error(result, self._call_timeout)
        )

    def _settle_close(
        self, result: CopyOutcome | BaseException, execution: CopyExecution
    ) -> CopyOutcome:
        if isinstance(result, CopyOutcome):
            return result
        if not isinstance(result, Exception):
            raise result

        logger.error(
            "copy_trade.close.task_crashed",
            extra={
                "execution_id": execution.id,
                "error_type": type(result).__name__,
                "error": str(result),
            },
            exc_info=result,
        )
        return CopyOutcome(
            copy_settings_id=execution.copy_settings_id,
            wallet_id=execution.wallet_id,
            execution_id=execution.id,
            status=ExecutionStatus.FAILED,
            order_id=execution.order_id,
            size=execution.size,
            price=execution.entry_price,
            error=describe_error(result, self._call_timeout),
            persisted=False,
        )

    @staticmethod
    def _raise_configuration_error(results: list[CopyOutcome | BaseException]) -> None:
        for result in results:
            if isinstance(result, ConfigurationError):
                raise result

    @staticmethod
    def _log_summary(event: str, trade: ProviderTrade, outcomes: list[CopyOutcome]) -> None:
        counts: dict[str, int] = defaultdict(int)
        for outcome in outcomes:
            counts[outcome.status.value] += 1

        logger.info(
            event,
            extra={
                "provider_trade_id": trade.id,
                "total": len(outcomes),
                "successful": sum(1 for o in outcomes if o.success),
                "by_status": dict(counts),
            },
        )
