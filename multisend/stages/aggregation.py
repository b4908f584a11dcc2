"""
aggregation.py - Fee Base Aggregation

Second stage of settlement. Sums, per denom, what flows out of and into
addresses that are not the denom's issuer. Issuers are fee-exempt, so their
legs do not count toward the base fees are charged on.

    total_fee_base = min(non_issuer_input_sum, non_issuer_output_sum)

Example (burn_rate 10%):
    inputs:  60, 90, 25 (issuer)
    outputs: 50, 100 (issuer), 25
    non_issuer_input_sum  = 150
    non_issuer_output_sum = 75
    total_fee_base        = 75
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

from ..core import Balance, DefinitionMap, DenomTotals, TransferRequest


@dataclass(frozen=True, slots=True)
class FeeBase:
    """
    Per-denom non-issuer flows for one request.

    Every denom referenced by the request has an entry in both mappings,
    possibly 0 (e.g. when the issuer is the only sender).
    """
    non_issuer_input_sum: Mapping[str, int]
    non_issuer_output_sum: Mapping[str, int]

    def total_fee_base(self, denom: str) -> int:
        return min(
            self.non_issuer_input_sum.get(denom, 0),
            self.non_issuer_output_sum.get(denom, 0),
        )

    def denoms(self):
        return list(self.non_issuer_input_sum.keys())


def _non_issuer_sums(
    legs: Iterable[Balance],
    definitions: DefinitionMap,
    denoms: Iterable[str],
) -> DenomTotals:
    sums: Dict[str, int] = {denom: 0 for denom in denoms}
    for leg in legs:
        for coin in leg.coins:
            if definitions[coin.denom].is_issuer(leg.address):
                continue
            sums[coin.denom] += coin.amount
    return sums


def aggregate_fee_base(
    request: TransferRequest,
    definitions: DefinitionMap,
) -> FeeBase:
    """
    Compute non-issuer input and output sums for every denom in the request.

    Args:
        request: A request that has passed check_known_denoms()
        definitions: Token definitions indexed by denom

    Returns:
        A FeeBase holding two new denom -> amount mappings.
    """
    denoms = request.denoms()
    return FeeBase(
        non_issuer_input_sum=_non_issuer_sums(request.inputs, definitions, denoms),
        non_issuer_output_sum=_non_issuer_sums(request.outputs, definitions, denoms),
    )
