"""Read-only view of the exchange's custody balances."""

from __future__ import annotations

from exchange.ledgers.base import AssetLedger, NativeCustody
from exchange.safe_int import S


class ReserveTracker:
    """Reports the reserves the external ledgers hold for the exchange.

    Readings are taken live. Base funds attached to the current call have
    already been credited to custody when the operation body runs, so
    base_reserve() includes them; likewise traded_reserve() includes any
    amount already pulled earlier in the same operation. Use the *_before
    helpers with the known inbound amount to recover the pre-operation
    reserve.
    """

    def __init__(self, native: NativeCustody, asset: AssetLedger, custody: str) -> None:
        self.native = native
        self.asset = asset
        self.custody = custody

    def base_reserve(self) -> int:
        return self.native.balance_of(self.custody)

    def traded_reserve(self) -> int:
        return self.asset.balance_of(self.custody)

    def base_reserve_before(self, inbound: int) -> int:
        """Base reserve excluding inbound funds already credited this call.

        Raises:
            Underflow: If custody reports less than the inbound amount
        """
        return (S(self.base_reserve()) - S(inbound)).value

    def traded_reserve_before(self, inbound: int) -> int:
        """Traded reserve excluding inbound funds already pulled this call.

        Raises:
            Underflow: If custody reports less than the inbound amount
        """
        return (S(self.traded_reserve()) - S(inbound)).value
