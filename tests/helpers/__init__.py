"""Test helpers module for shared test utilities.

- constants: Account names and starting balances
- factories: Exchange construction, funding and seeding
"""

from tests.helpers.constants import ALICE, BOB, CUSTODY, LP, LP2, STARTING_BASE, STARTING_TRADED
from tests.helpers.factories import fund, make_exchange, seed_pool

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CUSTODY",
    "LP",
    "LP2",
    "STARTING_BASE",
    "STARTING_TRADED",
    # Factories
    "make_exchange",
    "fund",
    "seed_pool",
]
