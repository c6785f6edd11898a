"""Tests for add/remove-liquidity accounting."""

import pytest

from exchange import CallContext, PoolSnapshot
from exchange.errors import (
    EmptyPool,
    ExternalTransferFailure,
    InvalidAmount,
    InvalidDeposit,
    SlippageViolation,
)
from tests.helpers import ALICE, LP, LP2, fund, make_exchange, seed_pool


def assert_no_change(exchange, snapshot, holder, base, traded, shares=0):
    """Pool, custody and holder balances are exactly as before."""
    assert exchange.snapshot() == snapshot
    assert exchange.reconcile() == []
    assert exchange.native.balance_of(holder) == base
    assert exchange.asset.balance_of(holder) == traded
    assert exchange.share_balance(holder) == shares


class TestAddLiquidityEmptyPool:
    """First deposit into an empty pool."""

    def test_bootstrap_deposit(self, exchange):
        """100 base + 100_000 traded mints 100 shares."""
        fund(exchange, LP)
        minted = exchange.add_liquidity(CallContext(LP, value=100), traded_amount=100_000)

        assert minted == 100
        assert exchange.snapshot() == PoolSnapshot(100, 100_000, 100)
        assert exchange.share_balance(LP) == 100
        assert exchange.base_reserve() == 100
        assert exchange.traded_reserve() == 100_000

    def test_first_depositor_sets_price(self, exchange):
        """Any ratio is accepted on an empty pool."""
        fund(exchange, LP)
        minted = exchange.add_liquidity(CallContext(LP, value=7), traded_amount=3)
        assert minted == 7
        assert exchange.snapshot() == PoolSnapshot(7, 3, 7)


class TestAddLiquiditySeededPool:
    """Deposits into a pool seeded at (100, 100_000, 100)."""

    def test_exact_ratio_deposit(self, seeded_exchange):
        minted = seeded_exchange.add_liquidity(CallContext(ALICE, value=10), traded_amount=10_000)

        assert minted == 10
        assert seeded_exchange.snapshot() == PoolSnapshot(110, 110_000, 110)
        assert seeded_exchange.share_balance(ALICE) == 10

    def test_surplus_traded_is_pulled_without_credit(self, seeded_exchange):
        """Sending more traded than the ratio requires still mints by base."""
        minted = seeded_exchange.add_liquidity(CallContext(ALICE, value=10), traded_amount=15_000)

        assert minted == 10
        assert seeded_exchange.snapshot() == PoolSnapshot(110, 115_000, 110)

    def test_below_ratio_rejected_without_change(self, seeded_exchange):
        before = seeded_exchange.snapshot()
        base = seeded_exchange.native.balance_of(ALICE)
        traded = seeded_exchange.asset.balance_of(ALICE)

        with pytest.raises(SlippageViolation):
            seeded_exchange.add_liquidity(CallContext(ALICE, value=10), traded_amount=9_999)

        assert_no_change(seeded_exchange, before, ALICE, base, traded)

    def test_ratio_minimum_uses_floor_division(self):
        """Minimum traded is floor(base * traded_reserve / base_reserve)."""
        exchange = make_exchange()
        seed_pool(exchange, base=300, traded=1_000)
        fund(exchange, ALICE)

        # 7 * 1000 / 300 = 23.33 -> 23 is enough
        minted = exchange.add_liquidity(CallContext(ALICE, value=7), traded_amount=23)
        assert minted == 7

    def test_share_issuance_rounds_down(self):
        exchange = make_exchange()
        seed_pool(exchange, base=3, traded=3)
        fund(exchange, ALICE)

        # total 3 shares, base reserve 3 -> 2 base mints 2 shares
        minted = exchange.add_liquidity(CallContext(ALICE, value=2), traded_amount=2)
        assert minted == 2

        # A deposit too small to earn a whole share is accepted and mints none
        fund(exchange, LP2)
        exchange.swap_base_for_traded(CallContext(LP2, value=5))
        # pool now (10, 3, 5): 1 base mints floor(5 * 1 / 10) = 0 shares
        assert exchange.add_liquidity(CallContext(LP2, value=1), traded_amount=1) == 0

    def test_min_shares_enforced(self, seeded_exchange):
        before = seeded_exchange.snapshot()
        with pytest.raises(SlippageViolation):
            seeded_exchange.add_liquidity(
                CallContext(ALICE, value=10), traded_amount=10_000, min_shares=11
            )
        assert seeded_exchange.snapshot() == before


class TestAddLiquidityPreconditions:
    @pytest.mark.parametrize("base,traded", [(0, 100), (100, 0), (0, 0)])
    def test_zero_amounts_rejected(self, exchange, base, traded):
        before = exchange.snapshot()
        base_balance = exchange.native.balance_of(ALICE)
        traded_balance = exchange.asset.balance_of(ALICE)

        with pytest.raises(InvalidDeposit):
            exchange.add_liquidity(CallContext(ALICE, value=base), traded_amount=traded)

        assert_no_change(exchange, before, ALICE, base_balance, traded_balance)

    def test_negative_traded_rejected(self, exchange):
        with pytest.raises(InvalidDeposit):
            exchange.add_liquidity(CallContext(ALICE, value=10), traded_amount=-5)

    def test_unapproved_traded_pull_fails_and_refunds_base(self, exchange):
        exchange.native.credit(LP2, 1_000)
        exchange.asset.credit(LP2, 1_000)  # no allowance

        with pytest.raises(ExternalTransferFailure):
            exchange.add_liquidity(CallContext(LP2, value=100), traded_amount=100)

        assert_no_change(exchange, PoolSnapshot(0, 0, 0), LP2, 1_000, 1_000)

    def test_unfunded_attachment_fails(self, exchange):
        with pytest.raises(ExternalTransferFailure):
            exchange.add_liquidity(CallContext("nobody", value=100), traded_amount=100)
        assert exchange.snapshot() == PoolSnapshot(0, 0, 0)


class TestRemoveLiquidity:
    """Withdrawals."""

    def test_full_withdrawal_empties_pool(self, seeded_exchange):
        seeded_exchange.add_liquidity(CallContext(LP, value=10), traded_amount=10_000)
        assert seeded_exchange.snapshot() == PoolSnapshot(110, 110_000, 110)

        base_before = seeded_exchange.native.balance_of(LP)
        traded_before = seeded_exchange.asset.balance_of(LP)
        base_out, traded_out = seeded_exchange.remove_liquidity(CallContext(LP), shares=110)

        assert (base_out, traded_out) == (110, 110_000)
        assert seeded_exchange.snapshot() == PoolSnapshot(0, 0, 0)
        assert seeded_exchange.native.balance_of(LP) == base_before + 110
        assert seeded_exchange.asset.balance_of(LP) == traded_before + 110_000
        assert seeded_exchange.share_balance(LP) == 0
        assert seeded_exchange.reconcile() == []

    def test_partial_withdrawal_is_proportional(self, seeded_exchange):
        base_out, traded_out = seeded_exchange.remove_liquidity(CallContext(LP), shares=25)
        assert (base_out, traded_out) == (25, 25_000)
        assert seeded_exchange.snapshot() == PoolSnapshot(75, 75_000, 75)

    def test_withdrawal_rounds_down_leaving_dust(self):
        exchange = make_exchange()
        seed_pool(exchange, base=3, traded=10)
        # 10 * 1 / 3 = 3.33 -> 3; the remainder stays in the pool
        base_out, traded_out = exchange.remove_liquidity(CallContext(LP), shares=1)
        assert (base_out, traded_out) == (1, 3)
        assert exchange.snapshot() == PoolSnapshot(2, 7, 2)

    def test_zero_shares_rejected(self, seeded_exchange):
        before = seeded_exchange.snapshot()
        with pytest.raises(InvalidAmount):
            seeded_exchange.remove_liquidity(CallContext(LP), shares=0)
        assert seeded_exchange.snapshot() == before

    def test_empty_pool_rejected(self, exchange):
        with pytest.raises(EmptyPool):
            exchange.remove_liquidity(CallContext(ALICE), shares=1)
        assert exchange.snapshot() == PoolSnapshot(0, 0, 0)

    def test_burning_more_than_held_fails(self, seeded_exchange):
        seeded_exchange.add_liquidity(CallContext(ALICE, value=10), traded_amount=10_000)
        before = seeded_exchange.snapshot()
        base = seeded_exchange.native.balance_of(ALICE)
        traded = seeded_exchange.asset.balance_of(ALICE)

        with pytest.raises(ExternalTransferFailure):
            seeded_exchange.remove_liquidity(CallContext(ALICE), shares=11)

        assert_no_change(seeded_exchange, before, ALICE, base, traded, shares=10)

    def test_burning_more_than_total_fails(self, seeded_exchange):
        before = seeded_exchange.snapshot()
        with pytest.raises(ExternalTransferFailure):
            seeded_exchange.remove_liquidity(CallContext(LP), shares=101)
        assert seeded_exchange.snapshot() == before
        assert seeded_exchange.share_balance(LP) == 100

    def test_minimum_payouts_enforced(self, seeded_exchange):
        before = seeded_exchange.snapshot()
        with pytest.raises(SlippageViolation):
            seeded_exchange.remove_liquidity(CallContext(LP), shares=10, min_traded=10_001)
        with pytest.raises(SlippageViolation):
            seeded_exchange.remove_liquidity(CallContext(LP), shares=10, min_base=11)
        assert seeded_exchange.snapshot() == before

    def test_attached_value_rejected(self, seeded_exchange):
        with pytest.raises(InvalidAmount):
            seeded_exchange.remove_liquidity(CallContext(LP, value=1), shares=1)


class TestRoundTrip:
    """Deposit then withdraw with no swaps in between."""

    @pytest.mark.parametrize(
        "base,traded",
        [(100, 100_000), (1, 1), (7, 3), (10**18, 3 * 10**21)],
    )
    def test_lone_depositor_recovers_deposit(self, exchange, base, traded):
        fund(exchange, LP)
        minted = exchange.add_liquidity(CallContext(LP, value=base), traded_amount=traded)
        assert exchange.remove_liquidity(CallContext(LP), shares=minted) == (base, traded)
        assert exchange.snapshot() == PoolSnapshot(0, 0, 0)

    def test_second_depositor_loses_at_most_one_unit(self):
        exchange = make_exchange()
        seed_pool(exchange, base=300, traded=1_000)
        fund(exchange, LP2)

        # Minimum is floor(7 * 1000 / 300) = 23; send one more
        minted = exchange.add_liquidity(CallContext(LP2, value=7), traded_amount=24)
        base_out, traded_out = exchange.remove_liquidity(CallContext(LP2), shares=minted)

        assert 7 - base_out <= 1
        assert 24 - traded_out <= 1
        assert (base_out, traded_out) == (7, 23)
