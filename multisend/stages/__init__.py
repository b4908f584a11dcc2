"""
Stages module - The four forward-only steps of a settlement.

1. validation  - conservation and solvency checks
2. aggregation - non-issuer fee base per denom
3. fees        - burn and commission pools, apportioned per sender
4. assembly    - consolidated per-address deltas

Each stage takes immutable inputs and returns new values, so every stage
can be exercised on its own.
"""

from .validation import (
    check_known_denoms,
    check_conservation,
    check_solvency,
    check_deltas_affordable,
    validate_transfer,
)

from .aggregation import (
    FeeBase,
    aggregate_fee_base,
)

from .fees import (
    FeePool,
    FeeShare,
    calculate_fee_pool,
    calculate_fee_pools,
    calculate_share,
    collected_totals,
    distribute_fees,
)

from .assembly import (
    assemble_deltas,
)

__all__ = [
    'check_known_denoms', 'check_conservation', 'check_solvency',
    'check_deltas_affordable', 'validate_transfer',
    'FeeBase', 'aggregate_fee_base',
    'FeePool', 'FeeShare', 'calculate_fee_pool', 'calculate_fee_pools',
    'calculate_share', 'collected_totals', 'distribute_fees',
    'assemble_deltas',
]
