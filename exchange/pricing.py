"""Constant-product swap pricing.

The pool treats the product of its two reserves as invariant across a swap,
up to the fee and integer rounding: x * y = k.
"""

from __future__ import annotations

from fractions import Fraction

from exchange.constants import DEFAULT_FEE_BPS, FEE_DENOMINATOR
from exchange.errors import InvalidAmount, InvalidReserves
from exchange.safe_int import S


class SwapPricer:
    """Constant-product pricing with an optional input fee.

    Formula:
        input_after_fee = input * (10000 - fee_bps) // 10000
        output = input_after_fee * reserve_out // (reserve_in + input_after_fee)

    The denominator grows strictly with the input, so a single swap can never
    drain the output reserve.
    """

    def __init__(self, fee_bps: int = DEFAULT_FEE_BPS) -> None:
        if not 0 <= fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}): {fee_bps}")
        self.fee_bps = fee_bps

    def __repr__(self) -> str:
        return f"SwapPricer(fee_bps={self.fee_bps})"

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier (10000 - fee_bps).

        For 0 bps this returns 10000; for 30 bps (0.3%) it returns 9970.
        """
        return FEE_DENOMINATOR - self.fee_bps

    def input_after_fee(self, input_amount: int) -> int:
        """Portion of the input that is priced, floored."""
        return (S(input_amount) * S(self.fee_multiplier) // S(FEE_DENOMINATOR)).value

    def compute_output(
        self,
        input_amount: int,
        input_reserve_before: int,
        output_reserve_before: int,
    ) -> int:
        """Calculate swap output from the reserves before the swap.

        Args:
            input_amount: Amount of the input asset being sold
            input_reserve_before: Input-side reserve, excluding input_amount
            output_reserve_before: Output-side reserve

        Returns:
            Output amount, always strictly below output_reserve_before

        Raises:
            InvalidReserves: If either reserve is not positive
            InvalidAmount: If input_amount is negative
        """
        _check_reserves(input_reserve_before, output_reserve_before)
        if input_amount < 0:
            raise InvalidAmount(f"Input amount cannot be negative: {input_amount}")

        after_fee = S(self.input_after_fee(input_amount))
        numerator = after_fee * S(output_reserve_before)
        denominator = S(input_reserve_before) + after_fee
        return (numerator // denominator).value

    def compute_input(
        self,
        output_amount: int,
        input_reserve_before: int,
        output_reserve_before: int,
    ) -> int:
        """Calculate the smallest input whose output is at least output_amount.

        Inverse of compute_output, rounded up at both the pricing and the fee
        step so that compute_output(result) >= output_amount.

        Raises:
            InvalidReserves: If either reserve is not positive
            InvalidAmount: If output_amount is negative or would drain the reserve
        """
        _check_reserves(input_reserve_before, output_reserve_before)
        if output_amount < 0:
            raise InvalidAmount(f"Output amount cannot be negative: {output_amount}")
        if output_amount >= output_reserve_before:
            raise InvalidAmount(
                f"Output {output_amount} must be below reserve {output_reserve_before}"
            )
        if output_amount == 0:
            return 0

        numerator = S(input_reserve_before) * S(output_amount)
        denominator = S(output_reserve_before) - S(output_amount)
        needed_after_fee = numerator.ceiling_div(denominator)
        return (needed_after_fee * S(FEE_DENOMINATOR)).ceiling_div(self.fee_multiplier).value

    def spot_price(self, input_reserve: int, output_reserve: int) -> Fraction:
        """Marginal output per unit of input before fees, as an exact fraction."""
        _check_reserves(input_reserve, output_reserve)
        return Fraction(output_reserve, input_reserve)


def _check_reserves(input_reserve: int, output_reserve: int) -> None:
    if input_reserve <= 0 or output_reserve <= 0:
        raise InvalidReserves(
            f"Reserves must be positive: input={input_reserve}, output={output_reserve}"
        )


# Zero-fee pricer used when no configuration is supplied
default_pricer = SwapPricer()


def compute_output(
    input_amount: int,
    input_reserve_before: int,
    output_reserve_before: int,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> int:
    """Functional form of SwapPricer.compute_output."""
    pricer = default_pricer if fee_bps == DEFAULT_FEE_BPS else SwapPricer(fee_bps)
    return pricer.compute_output(input_amount, input_reserve_before, output_reserve_before)


__all__ = [
    "SwapPricer",
    "compute_output",
    "default_pricer",
]
