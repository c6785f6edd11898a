"""Tests for ReserveTracker."""

import pytest

from exchange.ledgers import InMemoryAssetLedger, InMemoryNativeCustody
from exchange.reserves import ReserveTracker
from exchange.safe_int import Underflow
from tests.helpers import CUSTODY


@pytest.fixture
def tracker() -> ReserveTracker:
    native = InMemoryNativeCustody(CUSTODY)
    asset = InMemoryAssetLedger(CUSTODY)
    native.credit(CUSTODY, 110)
    asset.credit(CUSTODY, 100_000)
    return ReserveTracker(native, asset, CUSTODY)


class TestReserveTracker:
    def test_reads_custody_balances(self, tracker):
        assert tracker.base_reserve() == 110
        assert tracker.traded_reserve() == 100_000

    def test_reading_includes_attached_funds(self, tracker):
        tracker.native.credit("alice", 5)
        tracker.native.attach("alice", 5)
        assert tracker.base_reserve() == 115

    def test_before_subtracts_inbound(self, tracker):
        assert tracker.base_reserve_before(10) == 100
        assert tracker.traded_reserve_before(0) == 100_000

    def test_inbound_larger_than_reading_underflows(self, tracker):
        with pytest.raises(Underflow):
            tracker.base_reserve_before(111)

    def test_reads_have_no_side_effects(self, tracker):
        tracker.base_reserve()
        tracker.traded_reserve_before(1)
        assert tracker.base_reserve() == 110
        assert tracker.traded_reserve() == 100_000
