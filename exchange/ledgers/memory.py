"""In-memory ledger implementations.

These back the exchange in tests and in the bundled API server. Balances
are kept in a sparse dict; zero balances are dropped.
"""

from __future__ import annotations

import structlog

from exchange.errors import ExternalTransferFailure

logger = structlog.get_logger()


class BalanceTable:
    """Sparse mapping holder -> non-negative amount."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def get(self, holder: str) -> int:
        """Balance for holder. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def add(self, holder: str, amount: int) -> None:
        _check_amount(amount)
        self._set(holder, self.get(holder) + amount)

    def subtract(self, holder: str, amount: int) -> None:
        """Remove amount from holder.

        Raises:
            ExternalTransferFailure: If holder's balance is insufficient
        """
        _check_amount(amount)
        current = self.get(holder)
        if current < amount:
            raise ExternalTransferFailure(
                f"Insufficient balance for {holder}: {current} < {amount}"
            )
        self._set(holder, current - amount)

    def move(self, source: str, to: str, amount: int) -> None:
        self.subtract(source, amount)
        self.add(to, amount)

    def total(self) -> int:
        return sum(self._balances.values())

    def items(self) -> dict[str, int]:
        return dict(self._balances)

    def _set(self, holder: str, amount: int) -> None:
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or amount < 0:
        raise ExternalTransferFailure(f"Amount must be a non-negative integer: {amount!r}")


class InMemoryShareLedger:
    """ShareLedger backed by a BalanceTable."""

    def __init__(self) -> None:
        self.balances = BalanceTable()

    def mint(self, holder: str, amount: int) -> None:
        self.balances.add(holder, amount)
        logger.debug("shares_minted", holder=holder, amount=amount)

    def burn(self, holder: str, amount: int) -> None:
        self.balances.subtract(holder, amount)
        logger.debug("shares_burned", holder=holder, amount=amount)

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder)

    def total_issued(self) -> int:
        return self.balances.total()


class InMemoryAssetLedger:
    """AssetLedger with allowances, acting on behalf of a custody account.

    Args:
        custody: Account that transfer() debits and whose allowances
            transfer_from() consumes
    """

    def __init__(self, custody: str) -> None:
        self.custody = custody
        self.balances = BalanceTable()
        self._allowances: dict[tuple[str, str], int] = {}

    def credit(self, holder: str, amount: int) -> None:
        """Create amount out of thin air for holder (seeding helper)."""
        self.balances.add(holder, amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Set the amount spender may move out of owner's balance."""
        _check_amount(amount)
        self._allowances[(owner, spender)] = amount

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def transfer(self, to: str, amount: int) -> None:
        self.balances.move(self.custody, to, amount)

    def transfer_from(self, source: str, to: str, amount: int) -> None:
        allowed = self.allowance(source, self.custody)
        if allowed < amount:
            raise ExternalTransferFailure(
                f"Insufficient allowance from {source}: {allowed} < {amount}"
            )
        self.balances.move(source, to, amount)
        self._allowances[(source, self.custody)] = allowed - amount

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder)


class InMemoryNativeCustody:
    """NativeCustody for the base asset held under a custody account."""

    def __init__(self, custody: str) -> None:
        self.custody = custody
        self.balances = BalanceTable()

    def credit(self, holder: str, amount: int) -> None:
        """Create amount out of thin air for holder (seeding helper)."""
        self.balances.add(holder, amount)

    def attach(self, sender: str, amount: int) -> None:
        self.balances.move(sender, self.custody, amount)

    def send(self, to: str, amount: int) -> None:
        self.balances.move(self.custody, to, amount)

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder)
