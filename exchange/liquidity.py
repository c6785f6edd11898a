"""Add/remove-liquidity accounting.

Share issuance and withdrawal both use integer floor division, so rounding
always favors the liquidity that stays in the pool:

    shares_minted = total_shares * base_sent // base_reserve_before
    base_out      = reserve_base * shares // total_shares
    traded_out    = reserve_traded * shares // total_shares

The first deposit into an empty pool mints one share per base unit and so
sets the initial price.
"""

from __future__ import annotations

import structlog

from exchange.errors import EmptyPool, InvalidAmount, InvalidDeposit, SlippageViolation
from exchange.journal import Journal
from exchange.ledgers.base import AssetLedger, NativeCustody, ShareLedger
from exchange.pool import Pool
from exchange.reserves import ReserveTracker
from exchange.safe_int import S

logger = structlog.get_logger()


class LiquidityAccounting:
    """Issues and redeems pool shares against the two reserves.

    Every operation validates first, then pulls inbound funds, then updates
    the pool record, and pushes outbound funds last. Ledger effects go
    through the caller's journal so a late failure can be undone.
    """

    def __init__(
        self,
        tracker: ReserveTracker,
        shares: ShareLedger,
        asset: AssetLedger,
        native: NativeCustody,
    ) -> None:
        self.tracker = tracker
        self.shares = shares
        self.asset = asset
        self.native = native

    @property
    def custody(self) -> str:
        return self.tracker.custody

    def add_liquidity(
        self,
        pool: Pool,
        journal: Journal,
        sender: str,
        traded_amount_requested: int,
        base_amount_sent: int,
        min_shares: int = 0,
    ) -> int:
        """Deposit both assets and mint shares to sender.

        base_amount_sent has already been credited to custody by the call.

        Args:
            pool: Pool record to update
            journal: Journal of the enclosing operation
            sender: Depositor
            traded_amount_requested: Traded asset to pull from sender. Any
                amount above the pool ratio is pulled in full but earns no
                extra shares.
            base_amount_sent: Base asset attached to the call
            min_shares: Minimum shares the depositor accepts

        Returns:
            Number of shares minted

        Raises:
            InvalidDeposit: If either amount is not positive
            SlippageViolation: If the traded amount is below the pool ratio
                or fewer than min_shares would be minted
        """
        if base_amount_sent <= 0 or traded_amount_requested <= 0:
            raise InvalidDeposit(
                f"Deposit amounts must be positive: base={base_amount_sent}, "
                f"traded={traded_amount_requested}"
            )

        if pool.is_empty:
            shares_minted = base_amount_sent
        else:
            base_reserve_before = self.tracker.base_reserve_before(base_amount_sent)
            traded_reserve_before = self.tracker.traded_reserve()
            traded_minimum = (
                S(base_amount_sent) * S(traded_reserve_before) // S(base_reserve_before)
            ).value
            if traded_amount_requested < traded_minimum:
                raise SlippageViolation(
                    f"Traded amount {traded_amount_requested} below pool ratio minimum {traded_minimum}"
                )
            shares_minted = (
                S(pool.total_shares) * S(base_amount_sent) // S(base_reserve_before)
            ).value

        if shares_minted < min_shares:
            raise SlippageViolation(f"Would mint {shares_minted} shares, below minimum {min_shares}")

        journal.run(
            f"pull {traded_amount_requested} traded from {sender}",
            lambda: self.asset.transfer_from(sender, self.custody, traded_amount_requested),
            lambda: self.asset.transfer(sender, traded_amount_requested),
        )
        pool.apply(
            base_delta=base_amount_sent,
            traded_delta=traded_amount_requested,
            shares_delta=shares_minted,
        )
        journal.run(
            f"mint {shares_minted} shares to {sender}",
            lambda: self.shares.mint(sender, shares_minted),
            lambda: self.shares.burn(sender, shares_minted),
        )

        logger.info(
            "liquidity_added",
            sender=sender,
            base_amount=base_amount_sent,
            traded_amount=traded_amount_requested,
            shares_minted=shares_minted,
            reserve_base=pool.reserve_base,
            reserve_traded=pool.reserve_traded,
            total_shares=pool.total_shares,
        )
        return shares_minted

    def remove_liquidity(
        self,
        pool: Pool,
        journal: Journal,
        sender: str,
        shares_to_burn: int,
        min_base: int = 0,
        min_traded: int = 0,
    ) -> tuple[int, int]:
        """Burn sender's shares and pay out the proportional reserves.

        Burning and both payouts form one unit: if any of them fails the
        enclosing operation undoes the others.

        Returns:
            Tuple of (base_amount_out, traded_amount_out)

        Raises:
            InvalidAmount: If shares_to_burn is not positive
            EmptyPool: If the pool has no shares outstanding
            SlippageViolation: If either payout is below its minimum
            ExternalTransferFailure: If sender holds fewer shares than requested
        """
        if shares_to_burn <= 0:
            raise InvalidAmount(f"Shares to burn must be positive: {shares_to_burn}")
        if pool.is_empty:
            raise EmptyPool("Cannot remove liquidity from an empty pool")

        total = S(pool.total_shares)
        base_out = (S(pool.reserve_base) * S(shares_to_burn) // total).value
        traded_out = (S(pool.reserve_traded) * S(shares_to_burn) // total).value

        if base_out < min_base or traded_out < min_traded:
            raise SlippageViolation(
                f"Payout ({base_out}, {traded_out}) below minimum ({min_base}, {min_traded})"
            )
        # The share ledger enforces the holder's balance, so burn before
        # touching the pool record.
        journal.run(
            f"burn {shares_to_burn} shares from {sender}",
            lambda: self.shares.burn(sender, shares_to_burn),
            lambda: self.shares.mint(sender, shares_to_burn),
        )
        pool.apply(
            base_delta=-base_out,
            traded_delta=-traded_out,
            shares_delta=-shares_to_burn,
        )
        journal.run(
            f"send {base_out} base to {sender}",
            lambda: self.native.send(sender, base_out),
            lambda: self.native.attach(sender, base_out),
        )
        journal.run(
            f"transfer {traded_out} traded to {sender}",
            lambda: self.asset.transfer(sender, traded_out),
            lambda: self.asset.transfer_from(sender, self.custody, traded_out),
        )

        logger.info(
            "liquidity_removed",
            sender=sender,
            shares_burned=shares_to_burn,
            base_out=base_out,
            traded_out=traded_out,
            reserve_base=pool.reserve_base,
            reserve_traded=pool.reserve_traded,
            total_shares=pool.total_shares,
        )
        return base_out, traded_out
