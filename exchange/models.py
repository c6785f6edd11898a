"""Pydantic models for the exchange HTTP API.

Amounts travel as decimal strings so that values beyond 2^53 survive JSON
clients intact.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from exchange.pool import PoolSnapshot

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Account identifier on the ledgers
Account = Annotated[str, Field(min_length=1, max_length=128)]


class _ApiModel(BaseModel):
    model_config = {"populate_by_name": True}


class AddLiquidityRequest(_ApiModel):
    """Deposit base (attached to the call) and traded asset."""

    sender: Account
    base_amount: Uint256 = Field(alias="baseAmount", description="Base amount attached to the call.")
    traded_amount: Uint256 = Field(alias="tradedAmount", description="Traded amount to pull.")
    min_shares: Uint256 = Field(default="0", alias="minShares")


class RemoveLiquidityRequest(_ApiModel):
    """Burn shares for a proportional share of both reserves."""

    sender: Account
    shares: Uint256
    min_base: Uint256 = Field(default="0", alias="minBase")
    min_traded: Uint256 = Field(default="0", alias="minTraded")


class SwapBaseForTradedRequest(_ApiModel):
    sender: Account
    base_amount: Uint256 = Field(alias="baseAmount", description="Base amount attached to the call.")
    min_traded_out: Uint256 = Field(default="0", alias="minTradedOut")


class SwapTradedForBaseRequest(_ApiModel):
    sender: Account
    traded_amount: Uint256 = Field(alias="tradedAmount")
    min_base_out: Uint256 = Field(default="0", alias="minBaseOut")


class QuoteRequest(_ApiModel):
    """Price a hypothetical swap against explicit reserves."""

    input_amount: Uint256 = Field(alias="inputAmount")
    input_reserve: Uint256 = Field(alias="inputReserve")
    output_reserve: Uint256 = Field(alias="outputReserve")


class PoolState(_ApiModel):
    reserve_base: Uint256 = Field(alias="reserveBase")
    reserve_traded: Uint256 = Field(alias="reserveTraded")
    total_shares: Uint256 = Field(alias="totalShares")

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> "PoolState":
        return cls(
            reserve_base=str(snapshot.reserve_base),
            reserve_traded=str(snapshot.reserve_traded),
            total_shares=str(snapshot.total_shares),
        )


class ReservesResponse(_ApiModel):
    """Custody balances as reported by the ledgers."""

    base: Uint256
    traded: Uint256


class AddLiquidityResponse(_ApiModel):
    shares_minted: Uint256 = Field(alias="sharesMinted")
    pool: PoolState


class RemoveLiquidityResponse(_ApiModel):
    base_out: Uint256 = Field(alias="baseOut")
    traded_out: Uint256 = Field(alias="tradedOut")
    pool: PoolState


class SwapResponse(_ApiModel):
    amount_out: Uint256 = Field(alias="amountOut")
    pool: PoolState


class QuoteResponse(_ApiModel):
    output_amount: Uint256 = Field(alias="outputAmount")


class ErrorResponse(_ApiModel):
    error: str
    detail: str
