"""
snapshot.py - Read-only access to ledger balances and token definitions

The settlement stages never see the caller's raw lists. They read balances
through the BalanceView protocol and definitions through an indexed mapping,
both built once per call.
"""

from __future__ import annotations
from typing import Dict, Iterable, Protocol, Set, runtime_checkable

from .core import Balance, DefinitionMap, TokenDefinition


@runtime_checkable
class BalanceView(Protocol):
    """
    Read-only interface to a ledger snapshot.

    Functions accepting a BalanceView declare that they only read balances.
    An address or denom the snapshot does not know has a balance of 0.
    """

    def get_balance(self, address: str, denom: str) -> int:
        """Return the amount of denom held by address, 0 if absent."""
        ...

    def list_addresses(self) -> Set[str]:
        """Return every address present in the snapshot."""
        ...


class SnapshotView:
    """
    BalanceView over a list of Balance records.

    The records are copied into a private index on construction, so later
    changes to the caller's list are not observed.

    Example:
        view = SnapshotView([balance("account1", {"denom1": 1_000_000})])
        view.get_balance("account1", "denom1")   # 1000000
        view.get_balance("nobody", "denom1")     # 0
    """

    def __init__(self, balances: Iterable[Balance]):
        self._balances: Dict[str, Dict[str, int]] = {}
        for record in balances:
            if record.address in self._balances:
                raise ValueError(f"Duplicate address {record.address} in balance snapshot")
            for coin in record.coins:
                if coin.amount < 0:
                    raise ValueError(
                        f"Snapshot balance must be non-negative, got {coin.amount} {coin.denom} for {record.address}"
                    )
            self._balances[record.address] = record.as_dict()

    def get_balance(self, address: str, denom: str) -> int:
        return self._balances.get(address, {}).get(denom, 0)

    def list_addresses(self) -> Set[str]:
        return set(self._balances.keys())

    def __repr__(self) -> str:
        return f"SnapshotView({len(self._balances)} addresses)"


def index_definitions(definitions: Iterable[TokenDefinition]) -> DefinitionMap:
    """
    Index definitions by denom.

    Raises:
        ValueError: If two definitions share a denom.
    """
    indexed: Dict[str, TokenDefinition] = {}
    for definition in definitions:
        if definition.denom in indexed:
            raise ValueError(f"Duplicate definition for denom {definition.denom}")
        indexed[definition.denom] = definition
    return indexed
