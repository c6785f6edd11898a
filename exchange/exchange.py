"""Exchange service: the public operation surface of the pool.

The Exchange owns the singleton Pool record and the ledgers, and runs every
operation inside a guard that:
- refuses to run while the pool is halted or another operation is active
- absorbs funds sent straight to custody into the reserves, and halts if
  custody holds less than the pool record
- credits base funds attached to the call into custody before the body runs
- on failure, restores the pool record and undoes committed ledger effects

If an effect cannot be undone, internal and external state have diverged
and the pool halts until an operator reconciles it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from exchange.config import DEFAULT_CONFIG, ExchangeConfig
from exchange.errors import InvalidAmount, PoolHalted, ReentrantCall
from exchange.journal import Journal
from exchange.ledgers.base import AssetLedger, NativeCustody, ShareLedger
from exchange.ledgers.memory import InMemoryAssetLedger, InMemoryNativeCustody, InMemoryShareLedger
from exchange.liquidity import LiquidityAccounting
from exchange.pool import Pool, PoolSnapshot
from exchange.pricing import SwapPricer
from exchange.reserves import ReserveTracker
from exchange.swaps import SwapExecutor

logger = structlog.get_logger()


@dataclass(frozen=True)
class CallContext:
    """Caller identity and the base amount attached to the invocation."""

    sender: str
    value: int = 0


class Exchange:
    """Two-asset constant-product exchange.

    Args:
        shares: Ledger of pool shares
        asset: Ledger of the traded asset
        native: Custody of the base asset
        config: Fee rate and custody account (default: DEFAULT_CONFIG)
    """

    def __init__(
        self,
        shares: ShareLedger,
        asset: AssetLedger,
        native: NativeCustody,
        config: ExchangeConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self.pool = Pool()
        self.shares = shares
        self.asset = asset
        self.native = native
        self.pricer = SwapPricer(config.fee_bps)
        self.tracker = ReserveTracker(native, asset, config.custody)
        self.liquidity = LiquidityAccounting(self.tracker, shares, asset, native)
        self.swaps = SwapExecutor(self.tracker, self.pricer, asset, native)
        self._active: str | None = None
        self._halt_reason: str | None = None

    @classmethod
    def in_memory(cls, config: ExchangeConfig = DEFAULT_CONFIG) -> Exchange:
        """Create an exchange backed by fresh in-memory ledgers."""
        return cls(
            shares=InMemoryShareLedger(),
            asset=InMemoryAssetLedger(config.custody),
            native=InMemoryNativeCustody(config.custody),
            config=config,
        )

    @property
    def custody(self) -> str:
        return self.config.custody

    @property
    def halted(self) -> bool:
        return self._halt_reason is not None

    @property
    def halt_reason(self) -> str | None:
        return self._halt_reason

    # --- Liquidity ---

    def add_liquidity(self, ctx: CallContext, traded_amount: int, min_shares: int = 0) -> int:
        """Deposit ctx.value base plus traded_amount; returns shares minted."""
        with self._operation("add_liquidity", ctx, payable=True) as journal:
            return self.liquidity.add_liquidity(
                self.pool,
                journal,
                ctx.sender,
                traded_amount_requested=traded_amount,
                base_amount_sent=ctx.value,
                min_shares=min_shares,
            )

    def remove_liquidity(
        self,
        ctx: CallContext,
        shares: int,
        min_base: int = 0,
        min_traded: int = 0,
    ) -> tuple[int, int]:
        """Burn shares; returns (base_out, traded_out)."""
        with self._operation("remove_liquidity", ctx, payable=False) as journal:
            return self.liquidity.remove_liquidity(
                self.pool,
                journal,
                ctx.sender,
                shares_to_burn=shares,
                min_base=min_base,
                min_traded=min_traded,
            )

    # --- Swaps ---

    def swap_base_for_traded(self, ctx: CallContext, min_traded_out: int = 0) -> int:
        """Sell the attached base amount; returns traded output."""
        with self._operation("swap_base_for_traded", ctx, payable=True) as journal:
            return self.swaps.swap_base_for_traded(
                self.pool,
                journal,
                ctx.sender,
                base_amount_in=ctx.value,
                min_traded_out=min_traded_out,
            )

    def swap_traded_for_base(
        self,
        ctx: CallContext,
        traded_amount_in: int,
        min_base_out: int = 0,
    ) -> int:
        """Sell traded_amount_in of the traded asset; returns base output."""
        with self._operation("swap_traded_for_base", ctx, payable=False) as journal:
            return self.swaps.swap_traded_for_base(
                self.pool,
                journal,
                ctx.sender,
                traded_amount_in=traded_amount_in,
                min_base_out=min_base_out,
            )

    # --- Queries ---

    def base_reserve(self) -> int:
        return self.tracker.base_reserve()

    def traded_reserve(self) -> int:
        return self.tracker.traded_reserve()

    def compute_output(self, input_amount: int, input_reserve: int, output_reserve: int) -> int:
        return self.pricer.compute_output(input_amount, input_reserve, output_reserve)

    def quote_base_for_traded(self, base_amount_in: int) -> int:
        return self.swaps.quote_base_for_traded(base_amount_in)

    def quote_traded_for_base(self, traded_amount_in: int) -> int:
        return self.swaps.quote_traded_for_base(traded_amount_in)

    def share_balance(self, holder: str) -> int:
        return self.shares.balance_of(holder)

    def snapshot(self) -> PoolSnapshot:
        return self.pool.snapshot()

    def reconcile(self) -> list[str]:
        """Compare the pool record with what the ledgers report.

        Returns:
            Human-readable descriptions of each divergence (empty if consistent)
        """
        return [
            f"{name}: pool={recorded} ledger={reported}"
            for name, recorded, reported in self._readings()
            if recorded != reported
        ]

    def resume(self) -> None:
        """Clear a halt once the ledgers cover the pool record again.

        Custody holding more than the record is fine: the surplus is absorbed
        by the next operation.

        Raises:
            PoolHalted: If a shortfall remains
        """
        if not self.halted:
            return
        shortfalls = self._shortfalls()
        if shortfalls:
            raise PoolHalted(f"Cannot resume, pool diverges from ledgers: {'; '.join(shortfalls)}")
        logger.warning("pool_resumed", previous_reason=self._halt_reason)
        self._halt_reason = None

    def _readings(self) -> list[tuple[str, int, int]]:
        return [
            ("reserve_base", self.pool.reserve_base, self.tracker.base_reserve()),
            ("reserve_traded", self.pool.reserve_traded, self.tracker.traded_reserve()),
            ("total_shares", self.pool.total_shares, self.shares.total_issued()),
        ]

    def _shortfalls(self) -> list[str]:
        """Divergences the pool cannot absorb on its own.

        A reserve is short when custody holds less than the record. Shares
        must match the share ledger exactly.
        """
        return [
            f"{name}: pool={recorded} ledger={reported}"
            for name, recorded, reported in self._readings()
            if reported < recorded or (name == "total_shares" and reported != recorded)
        ]

    def _absorb_surplus(self) -> None:
        """Add funds sent straight to custody to the reserves.

        The surplus accrues to the current shareholders. An empty pool keeps
        its record at zero; the first depositor's shares are minted against
        the deposit alone and the surplus is absorbed on the next operation.
        """
        if self.pool.is_empty:
            return
        base_surplus = self.tracker.base_reserve() - self.pool.reserve_base
        traded_surplus = self.tracker.traded_reserve() - self.pool.reserve_traded
        if base_surplus == 0 and traded_surplus == 0:
            return
        self.pool.apply(base_delta=base_surplus, traded_delta=traded_surplus)
        logger.warning(
            "surplus_absorbed",
            base_surplus=base_surplus,
            traded_surplus=traded_surplus,
            pool=self.pool.snapshot(),
        )

    # --- Operation guard ---

    @contextmanager
    def _operation(self, name: str, ctx: CallContext, payable: bool) -> Iterator[Journal]:
        if self.halted:
            raise PoolHalted(f"Pool is halted: {self._halt_reason}")
        if self._active is not None:
            raise ReentrantCall(f"{name} entered while {self._active} is in progress")
        if ctx.value < 0 or (ctx.value and not payable):
            raise InvalidAmount(f"{name} cannot carry attached value {ctx.value}")

        # Price against custody balances only once the record agrees with them.
        shortfalls = self._shortfalls()
        if shortfalls:
            self._halt(name, shortfalls)
            raise PoolHalted(f"{name} found the pool short of its record: {'; '.join(shortfalls)}")
        self._absorb_surplus()

        self._active = name
        journal = Journal(name)
        before = self.pool.snapshot()
        try:
            if ctx.value:
                journal.run(
                    f"attach {ctx.value} base from {ctx.sender}",
                    lambda: self.native.attach(ctx.sender, ctx.value),
                    lambda: self.native.send(ctx.sender, ctx.value),
                )
            yield journal
        except Exception as exc:
            self.pool.restore(before)
            failed = journal.rollback()
            if failed:
                self._halt(name, failed)
                raise PoolHalted(
                    f"{name} failed and could not be undone: {', '.join(failed)}"
                ) from exc
            logger.warning(
                "operation_rejected",
                operation=name,
                sender=ctx.sender,
                error=getattr(exc, "code", type(exc).__name__),
                detail=str(exc),
            )
            raise
        finally:
            self._active = None

    def _halt(self, operation: str, issues: list[str]) -> None:
        self._halt_reason = f"{operation}: {'; '.join(issues)}"
        logger.error(
            "pool_halted",
            operation=operation,
            issues=issues,
            pool=self.pool.snapshot(),
        )


_default_exchange: Exchange | None = None


def _create_default_exchange() -> Exchange:
    """Create the default in-memory exchange configured from the environment."""
    config = ExchangeConfig.from_env()
    logger.info("exchange_created", fee_bps=config.fee_bps, custody=config.custody)
    return Exchange.in_memory(config)


def get_default_exchange() -> Exchange:
    """Return the process-wide exchange instance, creating it on first use."""
    global _default_exchange
    if _default_exchange is None:
        _default_exchange = _create_default_exchange()
    return _default_exchange
