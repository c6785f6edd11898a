"""Exchange constants.

Centralizes pricing parameters and well-known account names.
"""

# Basis-point denominator for the swap fee (10000 bps = 100%)
FEE_DENOMINATOR = 10_000

# Baseline pricing takes no fee
DEFAULT_FEE_BPS = 0

# Account name the exchange holds both reserves under
DEFAULT_CUSTODY = "exchange"
