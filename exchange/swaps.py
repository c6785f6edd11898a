"""Swap execution in both directions.

Both directions price against the input-side reserve as it stood before the
input arrived. For base-for-traded the input is attached to the call; for
traded-for-base it is pulled explicitly. Either way the input is already in
custody when reserves are read, so the same subtraction is applied to both.
"""

from __future__ import annotations

import structlog

from exchange.errors import EmptyPool, InvalidAmount, SlippageViolation
from exchange.journal import Journal
from exchange.ledgers.base import AssetLedger, NativeCustody
from exchange.pool import Pool
from exchange.pricing import SwapPricer
from exchange.reserves import ReserveTracker

logger = structlog.get_logger()


class SwapExecutor:
    """Executes swaps between the base and traded assets."""

    def __init__(
        self,
        tracker: ReserveTracker,
        pricer: SwapPricer,
        asset: AssetLedger,
        native: NativeCustody,
    ) -> None:
        self.tracker = tracker
        self.pricer = pricer
        self.asset = asset
        self.native = native

    @property
    def custody(self) -> str:
        return self.tracker.custody

    def swap_base_for_traded(
        self,
        pool: Pool,
        journal: Journal,
        sender: str,
        base_amount_in: int,
        min_traded_out: int = 0,
    ) -> int:
        """Sell attached base for traded asset.

        base_amount_in has already been credited to custody by the call,
        so there is no pull step.

        Returns:
            Traded amount sent to sender

        Raises:
            InvalidAmount: If base_amount_in is not positive
            EmptyPool: If the pool is not seeded
            SlippageViolation: If the output is below min_traded_out
        """
        _check_swap(pool, base_amount_in)

        traded_reserve = self.tracker.traded_reserve()
        base_reserve_before = self.tracker.base_reserve_before(base_amount_in)
        traded_out = self.pricer.compute_output(base_amount_in, base_reserve_before, traded_reserve)
        _check_minimum(traded_out, min_traded_out)

        pool.apply(base_delta=base_amount_in, traded_delta=-traded_out)
        journal.run(
            f"transfer {traded_out} traded to {sender}",
            lambda: self.asset.transfer(sender, traded_out),
            lambda: self.asset.transfer_from(sender, self.custody, traded_out),
        )

        logger.info(
            "swap_base_for_traded",
            sender=sender,
            base_in=base_amount_in,
            traded_out=traded_out,
            reserve_base=pool.reserve_base,
            reserve_traded=pool.reserve_traded,
        )
        return traded_out

    def swap_traded_for_base(
        self,
        pool: Pool,
        journal: Journal,
        sender: str,
        traded_amount_in: int,
        min_base_out: int = 0,
    ) -> int:
        """Sell traded asset for base.

        The traded input is pulled from sender first; reserves are read
        after the pull and the input is subtracted back out for pricing.

        Returns:
            Base amount sent to sender

        Raises:
            InvalidAmount: If traded_amount_in is not positive
            EmptyPool: If the pool is not seeded
            SlippageViolation: If the output is below min_base_out
            ExternalTransferFailure: If the pull is rejected
        """
        _check_swap(pool, traded_amount_in)

        journal.run(
            f"pull {traded_amount_in} traded from {sender}",
            lambda: self.asset.transfer_from(sender, self.custody, traded_amount_in),
            lambda: self.asset.transfer(sender, traded_amount_in),
        )
        traded_reserve_before = self.tracker.traded_reserve_before(traded_amount_in)
        base_reserve = self.tracker.base_reserve()
        base_out = self.pricer.compute_output(traded_amount_in, traded_reserve_before, base_reserve)
        _check_minimum(base_out, min_base_out)

        pool.apply(base_delta=-base_out, traded_delta=traded_amount_in)
        journal.run(
            f"send {base_out} base to {sender}",
            lambda: self.native.send(sender, base_out),
            lambda: self.native.attach(sender, base_out),
        )

        logger.info(
            "swap_traded_for_base",
            sender=sender,
            traded_in=traded_amount_in,
            base_out=base_out,
            reserve_base=pool.reserve_base,
            reserve_traded=pool.reserve_traded,
        )
        return base_out

    def quote_base_for_traded(self, base_amount_in: int) -> int:
        """Traded output for selling base_amount_in at current reserves."""
        return self.pricer.compute_output(
            base_amount_in, self.tracker.base_reserve(), self.tracker.traded_reserve()
        )

    def quote_traded_for_base(self, traded_amount_in: int) -> int:
        """Base output for selling traded_amount_in at current reserves."""
        return self.pricer.compute_output(
            traded_amount_in, self.tracker.traded_reserve(), self.tracker.base_reserve()
        )


def _check_swap(pool: Pool, amount_in: int) -> None:
    if amount_in <= 0:
        raise InvalidAmount(f"Swap input must be positive: {amount_in}")
    if pool.is_empty:
        raise EmptyPool("Cannot swap against an empty pool")


def _check_minimum(amount_out: int, minimum: int) -> None:
    if amount_out < minimum:
        raise SlippageViolation(f"Output {amount_out} below minimum {minimum}")
