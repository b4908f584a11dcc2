"""
fees.py - Proportional Burn and Commission Distribution

Third stage of settlement. Turns the per-denom fee base into a burn pool and
a commission pool, then splits both pools across the non-issuer senders in
proportion to what each one sent.

Key Formulas (S = non_issuer_input_sum, a = amount sent on the leg):
    burn_pool        = ceil(total_fee_base * burn_rate)
    commission_pool  = ceil(total_fee_base * commission_rate)
    burn_share       = ceil(burn_pool * a / S)
    commission_share = ceil(commission_pool * a / S)

Both stages round up independently. The shares can therefore sum to more
than the pool; the senders pay the difference. Issuer legs are never
charged.

All arithmetic is exact integer arithmetic via ceil_div().
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Dict, List, Mapping, Tuple

from ..core import DefinitionMap, TokenDefinition, TransferRequest, apply_rate, ceil_div
from .aggregation import FeeBase

logger = logging.getLogger(__name__)


# ============================================================================
# FROZEN DATACLASSES
# ============================================================================

@dataclass(frozen=True, slots=True)
class FeePool:
    """Token-level burn and commission owed by all non-issuer senders together."""
    denom: str
    fee_base: int
    non_issuer_input_sum: int
    burn_pool: int
    commission_pool: int


@dataclass(frozen=True, slots=True)
class FeeShare:
    """
    Fee apportioned to one input coin.

    One FeeShare exists for every coin of every input leg, in request order,
    including issuer legs (which carry zero burn and commission).
    """
    address: str
    denom: str
    amount: int
    burn: int
    commission: int
    is_issuer: bool = False

    @property
    def total_debit(self) -> int:
        """Amount sent plus fees, as a positive number."""
        return self.amount + self.burn + self.commission


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_fee_pool(denom: str, fee_base: FeeBase, definition: TokenDefinition) -> FeePool:
    """
    Round the token-level burn and commission up to whole units.

    A fee base of 0 gives empty pools.
    """
    total = fee_base.total_fee_base(denom)
    return FeePool(
        denom=denom,
        fee_base=total,
        non_issuer_input_sum=fee_base.non_issuer_input_sum.get(denom, 0),
        burn_pool=apply_rate(total, definition.burn_rate),
        commission_pool=apply_rate(total, definition.commission_rate),
    )


def calculate_share(pool_amount: int, amount: int, non_issuer_input_sum: int) -> int:
    """
    Apportion pool_amount to a leg of the given amount, rounding up.

    Returns 0 when there is nothing to split or no non-issuer input.
    """
    if pool_amount == 0 or non_issuer_input_sum == 0:
        return 0
    return ceil_div(pool_amount * amount, non_issuer_input_sum)


def calculate_fee_pools(
    fee_base: FeeBase,
    definitions: DefinitionMap,
) -> Dict[str, FeePool]:
    pools = {
        denom: calculate_fee_pool(denom, fee_base, definitions[denom])
        for denom in fee_base.denoms()
    }
    for pool in pools.values():
        logger.debug(
            "%s: fee base %d, burn pool %d, commission pool %d",
            pool.denom, pool.fee_base, pool.burn_pool, pool.commission_pool,
        )
    return pools


def distribute_fees(
    request: TransferRequest,
    definitions: DefinitionMap,
    pools: Mapping[str, FeePool],
) -> Tuple[FeeShare, ...]:
    """
    Charge each input coin its proportional share of the burn and commission pools.

    Args:
        request: A validated transfer request
        definitions: Token definitions indexed by denom
        pools: Output of calculate_fee_pools() for the same request

    Returns:
        One FeeShare per input coin, in request order.
    """
    shares: List[FeeShare] = []
    for leg in request.inputs:
        for coin in leg.coins:
            if definitions[coin.denom].is_issuer(leg.address):
                shares.append(FeeShare(leg.address, coin.denom, coin.amount, 0, 0, is_issuer=True))
                continue
            pool = pools[coin.denom]
            shares.append(FeeShare(
                address=leg.address,
                denom=coin.denom,
                amount=coin.amount,
                burn=calculate_share(pool.burn_pool, coin.amount, pool.non_issuer_input_sum),
                commission=calculate_share(pool.commission_pool, coin.amount, pool.non_issuer_input_sum),
            ))
    return tuple(shares)


def collected_totals(shares: Tuple[FeeShare, ...]) -> Tuple[Dict[str, int], Dict[str, int]]:
    """
    Sum the shares actually charged.

    Returns:
        (burned, commission) mappings from denom to the total collected,
        in first-seen denom order.
    """
    burned: Dict[str, int] = {}
    commission: Dict[str, int] = {}
    for share in shares:
        burned[share.denom] = burned.get(share.denom, 0) + share.burn
        commission[share.denom] = commission.get(share.denom, 0) + share.commission
    return burned, commission
