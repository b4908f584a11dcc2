"""
assembly.py - Balance Delta Assembly

Final stage of settlement. Merges recipient credits, sender debits and
issuer commission credits into one list of Balance deltas, one record per
address and one coin per denom.

Pattern:
    outputs          -> +amount to each recipient (never charged)
    non-issuer input -> -(amount + burn_share + commission_share)
    issuer input     -> -amount
    commission       -> +sum(commission shares) to the denom's issuer

Burnt amounts are credited to nobody.

Record order is first-seen: output addresses, then input addresses, then
issuers that appear only through commission. Coin order inside a record is
first-seen as well.
"""

from __future__ import annotations
from typing import Dict, List, Tuple

from ..core import Balance, Coin, DefinitionMap, TransferRequest
from .fees import FeeShare, collected_totals


class _DeltaAccumulator:
    """Insertion-ordered address -> denom -> amount sums."""

    def __init__(self):
        self._deltas: Dict[str, Dict[str, int]] = {}

    def add(self, address: str, denom: str, amount: int) -> None:
        coins = self._deltas.setdefault(address, {})
        coins[denom] = coins.get(denom, 0) + amount

    def touch(self, address: str) -> None:
        self._deltas.setdefault(address, {})

    def to_balances(self) -> List[Balance]:
        return [
            Balance(address, tuple(Coin(denom, amount) for denom, amount in coins.items()))
            for address, coins in self._deltas.items()
        ]


def assemble_deltas(
    request: TransferRequest,
    shares: Tuple[FeeShare, ...],
    definitions: DefinitionMap,
) -> List[Balance]:
    """
    Build the consolidated balance changes for a settled request.

    Args:
        request: The validated transfer request
        shares: Output of distribute_fees() for the same request
        definitions: Token definitions indexed by denom

    Returns:
        New Balance records with signed amounts (negative = debit).
    """
    acc = _DeltaAccumulator()

    for leg in request.outputs:
        acc.touch(leg.address)
        for coin in leg.coins:
            acc.add(leg.address, coin.denom, coin.amount)

    for share in shares:
        acc.add(share.address, share.denom, -share.total_debit)

    _, commission = collected_totals(shares)
    for denom, collected in commission.items():
        if collected > 0:
            acc.add(definitions[denom].issuer, denom, collected)

    return acc.to_balances()
