"""Capability contracts for the external ledgers the exchange depends on.

The exchange never stores per-holder balances itself. It only asks these
collaborators to move funds and report balances. Implementations signal any
rejected movement by raising ExternalTransferFailure.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ShareLedger(Protocol):
    """Fungible ledger recording who owns how many pool shares."""

    def mint(self, holder: str, amount: int) -> None:
        """Issue new shares to holder."""
        ...

    def burn(self, holder: str, amount: int) -> None:
        """Destroy shares held by holder.

        Raises:
            ExternalTransferFailure: If holder owns fewer than amount shares
        """
        ...

    def balance_of(self, holder: str) -> int:
        """Shares currently owned by holder."""
        ...

    def total_issued(self) -> int:
        """Total shares outstanding."""
        ...


@runtime_checkable
class AssetLedger(Protocol):
    """Fungible ledger for the traded asset.

    Calls are made by the exchange, so transfer() moves funds out of the
    exchange's own custody account.
    """

    def transfer(self, to: str, amount: int) -> None:
        """Send amount from custody to the recipient."""
        ...

    def transfer_from(self, source: str, to: str, amount: int) -> None:
        """Move amount from source to the recipient using custody's allowance.

        Raises:
            ExternalTransferFailure: If allowance or balance is insufficient
        """
        ...

    def balance_of(self, holder: str) -> int:
        """Traded-asset balance of holder."""
        ...


@runtime_checkable
class NativeCustody(Protocol):
    """Native-currency custody for the base asset.

    Base funds cannot be pulled by a separate call: they arrive attached to
    the invocation itself. attach() is performed by the calling environment
    before the operation body runs.
    """

    def attach(self, sender: str, amount: int) -> None:
        """Credit custody with amount carried by sender's invocation.

        Raises:
            ExternalTransferFailure: If sender cannot fund the amount
        """
        ...

    def send(self, to: str, amount: int) -> None:
        """Pay amount out of custody to the recipient."""
        ...

    def balance_of(self, holder: str) -> int:
        """Base-asset balance of holder."""
        ...
