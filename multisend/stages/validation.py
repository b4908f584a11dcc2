"""
validation.py - Conservation and Solvency Checks

First stage of settlement. Rejects a transfer before any fee is computed:
1. check_known_denoms() - every denom must have a TokenDefinition
2. check_conservation() - per denom, inputs must sum to outputs exactly
3. check_solvency() - every sender must cover amount + leg-local fees
4. validate_transfer() - the three checks above, in that order

The solvency check uses leg-local fees:
    required = amount + ceil(amount * burn_rate) + ceil(amount * commission_rate)

This is a per-leg estimate, not the pool-apportioned fee charged later.
Apportionment can round a share above the estimate, and one address may send
the same denom on several legs, so check_deltas_affordable() re-checks the
final net deltas against the snapshot once they are assembled.
"""

from __future__ import annotations
import logging
from typing import Iterable

from ..core import (
    Balance, DefinitionMap, DenomTotals, TransferRequest,
    InsufficientBalance, UnbalancedTransfer, UnknownToken,
)
from ..snapshot import BalanceView

logger = logging.getLogger(__name__)


def check_known_denoms(
    definitions: DefinitionMap,
    request: TransferRequest,
) -> None:
    """
    Raises:
        UnknownToken: For the first referenced denom with no definition.
    """
    for denom in request.denoms():
        if denom not in definitions:
            raise UnknownToken(denom)


def check_conservation(request: TransferRequest) -> DenomTotals:
    """
    Verify that every denom is neither created nor destroyed by the legs.

    Returns:
        Per-denom transferred totals (equal on both sides).

    Raises:
        UnbalancedTransfer: For the first denom whose totals differ.
    """
    input_totals = request.input_totals()
    output_totals = request.output_totals()
    for denom in request.denoms():
        total_in = input_totals.get(denom, 0)
        total_out = output_totals.get(denom, 0)
        if total_in != total_out:
            raise UnbalancedTransfer(denom, total_in, total_out)
    return input_totals


def check_solvency(
    view: BalanceView,
    definitions: DefinitionMap,
    request: TransferRequest,
) -> None:
    """
    Verify each input leg is affordable on its own.

    An address or denom missing from the snapshot has a balance of 0.
    Issuers pay no fees, so only the amount itself is required of them.

    Raises:
        InsufficientBalance: For the first leg the sender cannot cover.
    """
    for leg in request.inputs:
        for coin in leg.coins:
            burn, commission = definitions[coin.denom].leg_fees(leg.address, coin.amount)
            required = coin.amount + burn + commission
            available = view.get_balance(leg.address, coin.denom)
            if required > available:
                raise InsufficientBalance(leg.address, coin.denom, required, available)


def validate_transfer(
    view: BalanceView,
    definitions: DefinitionMap,
    request: TransferRequest,
) -> None:
    """
    Run all pre-calculation checks on a transfer request.

    Args:
        view: Read-only snapshot of current balances
        definitions: Token definitions indexed by denom
        request: The transfer to check

    Raises:
        UnknownToken: A denom has no definition.
        UnbalancedTransfer: Input and output totals differ for a denom.
        InsufficientBalance: A sender cannot cover amount plus leg-local fees.
    """
    check_known_denoms(definitions, request)
    totals = check_conservation(request)
    check_solvency(view, definitions, request)
    logger.debug("Request %s passed validation: %s", request.request_id, totals)


def check_deltas_affordable(view: BalanceView, deltas: Iterable[Balance]) -> None:
    """
    Verify no address would be overdrawn by applying the net deltas.

    Raises:
        InsufficientBalance: For the first (address, denom) whose balance
                             would go negative.
    """
    for record in deltas:
        for coin in record.coins:
            if coin.amount >= 0:
                continue
            available = view.get_balance(record.address, coin.denom)
            if available + coin.amount < 0:
                raise InsufficientBalance(record.address, coin.denom, -coin.amount, available)
