"""
settlement.py - Multi-Send Settlement Calculator

Entry point of the package. Given a ledger snapshot, the token definitions and
a transfer request, compute the signed balance changes to apply, or reject the
request with a TransferError.

ARCHITECTURE:
=============

1. FROZEN INPUTS: Balance, TokenDefinition, TransferRequest (see core.py)
2. STAGES (see stages/), run strictly forward:
   validate_transfer -> aggregate_fee_base -> calculate_fee_pools
   -> distribute_fees -> assemble_deltas
3. RE-VALIDATION: the assembled net deltas are checked against the snapshot
   so an approved request can never overdraw a sender
4. RESULT: a frozen Settlement, or an exception and no deltas at all

The calculator owns no state and performs no I/O. The caller applies the
deltas to its store atomically; apply_deltas() does so for an in-memory
snapshot.

Example:
    deltas = compute_transfer_deltas(
        [balance("account1", {"denom1": 1_000_000})],
        [token("denom1", "issuer_A", burn_rate="0.08", commission_rate="0.12")],
        TransferRequest(
            inputs=[balance("account1", {"denom1": 1000})],
            outputs=[balance("account_recipient", {"denom1": 1000})],
        ),
    )
    # [Balance(account_recipient: 1000 denom1),
    #  Balance(account1: -1200 denom1),
    #  Balance(issuer_A: 120 denom1)]
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Mapping, Tuple, Union

from .core import (
    Balance, Coin, TokenDefinition, TransferRequest,
    TransferError, InsufficientBalance,
)
from .snapshot import BalanceView, SnapshotView, index_definitions
from .stages import (
    FeeBase, FeePool, FeeShare,
    aggregate_fee_base, assemble_deltas, calculate_fee_pools,
    check_deltas_affordable, collected_totals, distribute_fees,
    validate_transfer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Settlement:
    """
    Outcome of a successful settlement calculation.

    Attributes:
        request_id: Content hash of the settled request
        deltas: Consolidated balance changes, one record per address
        fee_base: Non-issuer input/output sums per denom
        pools: Burn and commission pools per denom
        shares: Fee charged to each input coin, in request order
        burned: Total removed from circulation per denom
        commission: Total credited to issuers per denom
    """
    request_id: str
    deltas: Tuple[Balance, ...]
    fee_base: FeeBase
    pools: Mapping[str, FeePool]
    shares: Tuple[FeeShare, ...]
    burned: Mapping[str, int]
    commission: Mapping[str, int]

    def delta_for(self, address: str) -> Balance:
        """Return the delta record for address, or an empty Balance."""
        for record in self.deltas:
            if record.address == address:
                return record
        return Balance(address)


def _as_view(balances: Union[BalanceView, Iterable[Balance]]) -> BalanceView:
    if isinstance(balances, BalanceView):
        return balances
    return SnapshotView(balances)


def compute_settlement(
    balances: Union[BalanceView, Iterable[Balance]],
    definitions: Iterable[TokenDefinition],
    request: TransferRequest,
    revalidate: bool = True,
) -> Settlement:
    """
    Run all settlement stages and return the full breakdown.

    Args:
        balances: Current ledger snapshot (list of Balance or a BalanceView)
        definitions: One TokenDefinition per referenced denom
        request: The transfer to settle
        revalidate: Check the final net deltas against the snapshot
                    (default: True)

    Returns:
        A Settlement holding the deltas and every intermediate result.

    Raises:
        UnknownToken: A denom has no definition.
        UnbalancedTransfer: Inputs and outputs differ for a denom.
        InsufficientBalance: A sender cannot cover amount plus fees.
        ValueError: Malformed snapshot or duplicate definitions.
    """
    view = _as_view(balances)
    indexed = index_definitions(definitions)

    try:
        validate_transfer(view, indexed, request)
        fee_base = aggregate_fee_base(request, indexed)
        pools = calculate_fee_pools(fee_base, indexed)
        shares = distribute_fees(request, indexed, pools)
        deltas = assemble_deltas(request, shares, indexed)
        if revalidate:
            check_deltas_affordable(view, deltas)
    except TransferError as exc:
        logger.warning("Request %s rejected: %s", request.request_id, exc)
        raise

    burned, commission = collected_totals(shares)
    logger.info(
        "Request %s settled: %d deltas, burned %s, commission %s",
        request.request_id, len(deltas), burned, commission,
    )
    return Settlement(
        request_id=request.request_id,
        deltas=tuple(deltas),
        fee_base=fee_base,
        pools=pools,
        shares=shares,
        burned=burned,
        commission=commission,
    )


def compute_transfer_deltas(
    balances: Union[BalanceView, Iterable[Balance]],
    definitions: Iterable[TokenDefinition],
    request: TransferRequest,
    revalidate: bool = True,
) -> List[Balance]:
    """
    Compute the balance changes for a multi-send, or raise a TransferError.

    Negative amounts are deductions, positive amounts are additions. On
    failure nothing is returned and the caller must apply nothing.
    """
    settlement = compute_settlement(balances, definitions, request, revalidate=revalidate)
    return list(settlement.deltas)


def apply_deltas(balances: Iterable[Balance], deltas: Iterable[Balance]) -> List[Balance]:
    """
    Apply deltas to a snapshot and return the resulting snapshot.

    Neither argument is modified. Existing records keep their order and new
    addresses are appended in delta order.

    Raises:
        InsufficientBalance: If any resulting amount would be negative.
            No partial result is returned.
    """
    updated: Dict[str, Dict[str, int]] = {}
    for record in balances:
        if record.address in updated:
            raise ValueError(f"Duplicate address {record.address} in balance snapshot")
        updated[record.address] = record.as_dict()

    for record in deltas:
        coins = updated.setdefault(record.address, {})
        for coin in record.coins:
            current = coins.get(coin.denom, 0)
            if current + coin.amount < 0:
                raise InsufficientBalance(record.address, coin.denom, -coin.amount, current)
            coins[coin.denom] = current + coin.amount

    return [
        Balance(address, tuple(Coin(denom, amount) for denom, amount in coins.items()))
        for address, coins in updated.items()
    ]
