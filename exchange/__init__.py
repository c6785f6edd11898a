"""Two-asset constant-product exchange."""

from exchange.config import ExchangeConfig
from exchange.exchange import CallContext, Exchange, get_default_exchange
from exchange.pool import Pool, PoolSnapshot
from exchange.pricing import SwapPricer, compute_output

__version__ = "0.1.0"
__all__ = [
    "CallContext",
    "Exchange",
    "ExchangeConfig",
    "Pool",
    "PoolSnapshot",
    "SwapPricer",
    "compute_output",
    "get_default_exchange",
    "__version__",
]
