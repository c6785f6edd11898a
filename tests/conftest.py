"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest

from exchange import Exchange
from exchange.errors import ExternalTransferFailure
from exchange.ledgers import InMemoryAssetLedger, InMemoryNativeCustody
from tests.helpers import ALICE, CUSTODY, fund, make_exchange, seed_pool


@pytest.fixture
def exchange() -> Exchange:
    """Empty zero-fee exchange with a funded trader (ALICE)."""
    ex = make_exchange()
    fund(ex, ALICE)
    return ex


@pytest.fixture
def seeded_exchange(exchange: Exchange) -> Exchange:
    """Exchange seeded at (100 base, 100_000 traded, 100 shares)."""
    seed_pool(exchange, base=100, traded=100_000)
    return exchange


# =============================================================================
# Ledger doubles for failure injection
# =============================================================================


class FlakyAssetLedger(InMemoryAssetLedger):
    """Asset ledger that can be told to reject transfers.

    Usage:
        asset = FlakyAssetLedger(CUSTODY)
        asset.fail_transfer = True  # next transfer() raises
    """

    def __init__(self, custody: str = CUSTODY) -> None:
        super().__init__(custody)
        self.fail_transfer = False
        self.fail_transfer_from = False
        self.on_transfer_from: Callable[[], None] | None = None

    def transfer(self, to: str, amount: int) -> None:
        if self.fail_transfer:
            raise ExternalTransferFailure(f"transfer to {to} rejected")
        super().transfer(to, amount)

    def transfer_from(self, source: str, to: str, amount: int) -> None:
        if self.fail_transfer_from:
            raise ExternalTransferFailure(f"transfer_from {source} rejected")
        if self.on_transfer_from is not None:
            self.on_transfer_from()
        super().transfer_from(source, to, amount)


class FlakyNativeCustody(InMemoryNativeCustody):
    """Native custody that can be told to reject attach() or send()."""

    def __init__(self, custody: str = CUSTODY) -> None:
        super().__init__(custody)
        self.fail_attach = False
        self.fail_send = False

    def attach(self, sender: str, amount: int) -> None:
        if self.fail_attach:
            raise ExternalTransferFailure(f"attach from {sender} rejected")
        super().attach(sender, amount)

    def send(self, to: str, amount: int) -> None:
        if self.fail_send:
            raise ExternalTransferFailure(f"send to {to} rejected")
        super().send(to, amount)


@pytest.fixture
def flaky_asset() -> FlakyAssetLedger:
    return FlakyAssetLedger()


@pytest.fixture
def flaky_native() -> FlakyNativeCustody:
    return FlakyNativeCustody()


@pytest.fixture
def flaky_exchange(flaky_asset: FlakyAssetLedger, flaky_native: FlakyNativeCustody) -> Exchange:
    """Seeded exchange on failure-injecting ledgers, with ALICE funded."""
    ex = make_exchange(asset=flaky_asset, native=flaky_native)
    seed_pool(ex, base=1_000, traded=1_000_000)
    fund(ex, ALICE)
    return ex
