"""External ledger contracts and in-memory implementations."""

from exchange.ledgers.base import AssetLedger, NativeCustody, ShareLedger
from exchange.ledgers.memory import (
    BalanceTable,
    InMemoryAssetLedger,
    InMemoryNativeCustody,
    InMemoryShareLedger,
)

__all__ = [
    # Contracts
    "ShareLedger",
    "AssetLedger",
    "NativeCustody",
    # In-memory implementations
    "BalanceTable",
    "InMemoryShareLedger",
    "InMemoryAssetLedger",
    "InMemoryNativeCustody",
]
