"""Pool record for the two-asset exchange."""

from __future__ import annotations

from dataclasses import dataclass

from exchange.errors import InvalidReserves


@dataclass(frozen=True)
class PoolSnapshot:
    """Immutable copy of the pool fields."""

    reserve_base: int
    reserve_traded: int
    total_shares: int

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0


@dataclass
class Pool:
    """Reserve and share bookkeeping for a two-asset constant-product pool.

    A pool is either fully empty (no reserves, no shares) or fully seeded
    (both reserves and shares positive). Reserves change only through
    liquidity and swap operations; total_shares only through liquidity
    operations.

    Attributes:
        reserve_base: Custody holdings of the base (native) asset
        reserve_traded: Custody holdings of the traded asset
        total_shares: Outstanding ownership shares
    """

    reserve_base: int = 0
    reserve_traded: int = 0
    total_shares: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(self.reserve_base, self.reserve_traded, self.total_shares)

    def restore(self, snapshot: PoolSnapshot) -> None:
        """Reset all fields to a previously taken snapshot."""
        self.reserve_base = snapshot.reserve_base
        self.reserve_traded = snapshot.reserve_traded
        self.total_shares = snapshot.total_shares

    def apply(self, base_delta: int = 0, traded_delta: int = 0, shares_delta: int = 0) -> None:
        """Apply signed deltas to the pool and verify the resulting state.

        The update is all-or-nothing: if the new state would violate an
        invariant, the pool is left unchanged and InvalidReserves is raised.
        """
        before = self.snapshot()
        self.reserve_base += base_delta
        self.reserve_traded += traded_delta
        self.total_shares += shares_delta
        try:
            self.check_invariants()
        except InvalidReserves:
            self.restore(before)
            raise

    def check_invariants(self) -> None:
        """Raise InvalidReserves if the pool is in an inconsistent state."""
        if self.reserve_base < 0 or self.reserve_traded < 0 or self.total_shares < 0:
            raise InvalidReserves(f"Pool fields must be non-negative: {self.snapshot()}")
        reserves_empty = self.reserve_base == 0 and self.reserve_traded == 0
        if (self.total_shares == 0) != reserves_empty:
            raise InvalidReserves(f"Pool must be either fully empty or fully seeded: {self.snapshot()}")
