"""Exchange configuration."""

import os
from dataclasses import dataclass

from exchange.constants import DEFAULT_CUSTODY, DEFAULT_FEE_BPS, FEE_DENOMINATOR


@dataclass(frozen=True)
class ExchangeConfig:
    """Configuration for an exchange instance.

    Attributes:
        fee_bps: Swap fee in basis points taken from the input amount
            (default: 0, no fee). Must satisfy 0 <= fee_bps < 10000.
        custody: Account name under which the exchange holds both reserves
            on the external ledgers (default: "exchange").
    """

    fee_bps: int = DEFAULT_FEE_BPS
    custody: str = DEFAULT_CUSTODY

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}): {self.fee_bps}")
        if not self.custody:
            raise ValueError("custody account name must not be empty")

    @classmethod
    def from_env(cls) -> "ExchangeConfig":
        """Build a configuration from environment variables.

        - EXCHANGE_FEE_BPS: Swap fee in basis points (default: 0)
        - EXCHANGE_CUSTODY: Custody account name (default: exchange)
        """
        return cls(
            fee_bps=int(os.environ.get("EXCHANGE_FEE_BPS", str(DEFAULT_FEE_BPS))),
            custody=os.environ.get("EXCHANGE_CUSTODY", DEFAULT_CUSTODY),
        )


# Default configuration instance
DEFAULT_CONFIG = ExchangeConfig()
