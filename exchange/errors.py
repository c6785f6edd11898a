"""Exchange error classes.

Each error carries a stable ``code`` used in API responses and logs.
"""


class ExchangeError(Exception):
    """Base error for exchange operations."""

    code = "exchange_error"


class InvalidDeposit(ExchangeError):
    """Add-liquidity amounts are zero or otherwise invalid."""

    code = "invalid_deposit"


class SlippageViolation(ExchangeError):
    """Supplied amounts fall short of the pool ratio or a caller minimum."""

    code = "slippage_violation"


class InvalidAmount(ExchangeError):
    """Zero or negative burn/swap amount, or value attached to a non-payable call."""

    code = "invalid_amount"


class EmptyPool(ExchangeError):
    """Operation requires a seeded pool."""

    code = "empty_pool"


class InvalidReserves(ExchangeError):
    """Pricing called with a zero reserve, or a pool record update that breaks its invariants."""

    code = "invalid_reserves"


class ExternalTransferFailure(ExchangeError):
    """A ledger rejected a pull, push, mint or burn."""

    code = "external_transfer_failure"


class PoolHalted(ExchangeError):
    """Internal and external state diverged; the pool refuses further operations."""

    code = "pool_halted"


class ReentrantCall(ExchangeError):
    """An exchange operation was entered while another one is in progress."""

    code = "reentrant_call"
