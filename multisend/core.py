"""
Core types and pure helpers for the multi-send settlement calculator.

This module provides the foundational data structures used by every stage:
1. Immutable data structures: Coin, Balance, TokenDefinition, TransferRequest
2. Exceptions: TransferError and the three rejection reasons
3. Integer arithmetic primitives: ceil_div, apply_rate, to_rate
4. Factories: balance(), token()

All amounts are Python ints (arbitrary precision) and all rates are exact
Fractions. Nothing on the settlement path touches floating point.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
import hashlib
from typing import (
    Dict, Iterable, List, Mapping, Optional, Tuple, Union
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Rates are fractions of the transferred amount, inclusive on both ends.
# A burn_rate of 1 burns an amount equal to the fee base.
MIN_RATE = Fraction(0)
MAX_RATE = Fraction(1)

# Number of hex characters kept from the SHA-256 request digest.
REQUEST_ID_LENGTH = 16


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Accepted inputs for a burn or commission rate before normalisation.
RateLike = Union[Fraction, Decimal, int, str, float]

# Mapping from denom to a summed amount.
DenomTotals = Dict[str, int]

# Mapping from denom to its definition.
DefinitionMap = Mapping[str, 'TokenDefinition']


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TransferError(Exception):
    """Base exception for every reason a transfer request is rejected."""
    pass


class UnbalancedTransfer(TransferError):
    """Raised when the inputs and outputs of a denom do not sum to the same amount."""

    def __init__(self, denom: str, input_total: int, output_total: int):
        self.denom = denom
        self.input_total = input_total
        self.output_total = output_total
        super().__init__(
            f"Inputs do not match outputs for {denom}: "
            f"{input_total} in, {output_total} out"
        )


class InsufficientBalance(TransferError):
    """Raised when a sender cannot cover the amount sent plus burn and commission."""

    def __init__(self, address: str, denom: str, required: int, available: int):
        self.address = address
        self.denom = denom
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient {denom} balance in {address}: "
            f"requires {required}, has {available}"
        )


class UnknownToken(TransferError):
    """Raised when a transfer references a denom with no definition."""

    def __init__(self, denom: str):
        self.denom = denom
        super().__init__(f"No definition for denom {denom}")


# ============================================================================
# ARITHMETIC
# ============================================================================

def ceil_div(numerator: int, denominator: int) -> int:
    """
    Integer division rounded toward positive infinity.

    Works for arbitrarily large ints. The denominator must be positive.
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    return -(-numerator // denominator)


def apply_rate(amount: int, rate: Fraction) -> int:
    """Return ceil(amount * rate) computed exactly in the integer domain."""
    return ceil_div(amount * rate.numerator, rate.denominator)


def to_rate(value: RateLike) -> Fraction:
    """
    Convert a rate input to an exact Fraction in [MIN_RATE, MAX_RATE].

    Floats go through their shortest string form, so 0.08 becomes exactly
    8/100 rather than the nearest binary double.
    """
    if isinstance(value, bool):
        raise ValueError("rate cannot be a bool")
    if isinstance(value, Fraction):
        rate = value
    elif isinstance(value, float):
        if value != value or value in (float('inf'), float('-inf')):
            raise ValueError(f"rate must be finite, got {value}")
        rate = Fraction(Decimal(str(value)))
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"rate must be finite, got {value}")
        rate = Fraction(value)
    elif isinstance(value, (int, str)):
        rate = Fraction(value)
    else:
        raise ValueError(f"unsupported rate type {type(value).__name__}")

    if rate < MIN_RATE or rate > MAX_RATE:
        raise ValueError(f"rate must be between {MIN_RATE} and {MAX_RATE}, got {rate}")
    return rate


def _check_amount(amount: int, what: str) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"{what} amount must be int, got {type(amount).__name__}")


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Coin:
    """
    An amount of a single denom.

    In a ledger snapshot or a transfer leg the amount is non-negative. In a
    computed delta it may be negative (debit) or positive (credit).
    """
    denom: str
    amount: int

    def __post_init__(self):
        if not self.denom or not self.denom.strip():
            raise ValueError("Coin denom cannot be empty")
        _check_amount(self.amount, "Coin")

    def __repr__(self) -> str:
        return f"Coin({self.amount} {self.denom})"


@dataclass(frozen=True, slots=True)
class Balance:
    """
    Per-denom amounts held by, sent from, or credited to one address.

    The same record type is used for snapshot entries, transfer legs and
    computed deltas. Coins are stored as a tuple with at most one entry per
    denom; a list passed in is frozen on construction.

    Attributes:
        address: Opaque account identifier.
        coins: Tuple of Coin, unique by denom.
    """
    address: str
    coins: Tuple[Coin, ...] = ()

    def __post_init__(self):
        if not self.address or not self.address.strip():
            raise ValueError("Balance address cannot be empty")
        if not isinstance(self.coins, tuple):
            object.__setattr__(self, 'coins', tuple(self.coins))
        seen = set()
        for coin in self.coins:
            if not isinstance(coin, Coin):
                raise ValueError(f"Balance coins must be Coin, got {type(coin).__name__}")
            if coin.denom in seen:
                raise ValueError(f"Duplicate denom {coin.denom} in balance of {self.address}")
            seen.add(coin.denom)

    def amount_of(self, denom: str) -> int:
        """Return the amount held for denom, or 0 if there is no entry."""
        for coin in self.coins:
            if coin.denom == denom:
                return coin.amount
        return 0

    def denoms(self) -> List[str]:
        return [coin.denom for coin in self.coins]

    def as_dict(self) -> Dict[str, int]:
        return {coin.denom: coin.amount for coin in self.coins}

    def __repr__(self) -> str:
        coins = ", ".join(f"{c.amount} {c.denom}" for c in self.coins)
        return f"Balance({self.address}: {coins})"


@dataclass(frozen=True, slots=True)
class TokenDefinition:
    """
    Fee policy for a denom.

    Attributes:
        denom: The denom this definition governs (e.g. "core", "usdt").
        issuer: Address that created the denom. It pays no fees on its own
                transfers and receives the commission.
        burn_rate: Fraction of the fee base destroyed on every transfer.
        commission_rate: Fraction of the fee base redirected to the issuer.

    Rates are normalised to exact Fractions in __post_init__.
    """
    denom: str
    issuer: str
    burn_rate: Fraction = Fraction(0)
    commission_rate: Fraction = Fraction(0)

    def __post_init__(self):
        if not self.denom or not self.denom.strip():
            raise ValueError("TokenDefinition denom cannot be empty")
        if not self.issuer or not self.issuer.strip():
            raise ValueError("TokenDefinition issuer cannot be empty")
        object.__setattr__(self, 'burn_rate', to_rate(self.burn_rate))
        object.__setattr__(self, 'commission_rate', to_rate(self.commission_rate))

    def is_issuer(self, address: str) -> bool:
        return address == self.issuer

    def leg_fees(self, address: str, amount: int) -> Tuple[int, int]:
        """
        Burn and commission charged on a single leg taken in isolation.

        This ignores the pool apportionment and is used only as the
        conservative solvency estimate. Issuer legs are fee-exempt.
        """
        if self.is_issuer(address):
            return 0, 0
        return apply_rate(amount, self.burn_rate), apply_rate(amount, self.commission_rate)

    def __repr__(self) -> str:
        return (
            f"TokenDefinition({self.denom}, issuer={self.issuer}, "
            f"burn={self.burn_rate}, commission={self.commission_rate})"
        )


def _canonicalize_legs(kind: str, legs: Iterable[Balance]) -> List[str]:
    parts = []
    for index, leg in enumerate(legs):
        coins = ",".join(f"{c.denom}={c.amount}" for c in leg.coins)
        parts.append(f"{kind}[{index}]:{leg.address}|{coins}")
    return parts


def _compute_request_id(inputs: Tuple[Balance, ...], outputs: Tuple[Balance, ...]) -> str:
    """
    Deterministic content hash of a transfer request.

    Leg order is part of the identity because it fixes the order of the
    resulting deltas.
    """
    content = "|".join(
        _canonicalize_legs("in", inputs) + _canonicalize_legs("out", outputs)
    )
    return hashlib.sha256(content.encode()).hexdigest()[:REQUEST_ID_LENGTH]


@dataclass(frozen=True, slots=True)
class TransferRequest:
    """
    One atomic multi-send instruction.

    Moves several denoms from several input addresses to several output
    addresses. For every denom the input total must equal the output total;
    that is checked by the validator, not here.

    Attributes:
        inputs: Ordered legs to debit.
        outputs: Ordered legs to credit.
        request_id: Content hash of the legs (auto-computed).
    """
    inputs: Tuple[Balance, ...]
    outputs: Tuple[Balance, ...]
    request_id: str = field(default="")

    def __post_init__(self):
        if not isinstance(self.inputs, tuple):
            object.__setattr__(self, 'inputs', tuple(self.inputs))
        if not isinstance(self.outputs, tuple):
            object.__setattr__(self, 'outputs', tuple(self.outputs))
        for leg in self.inputs + self.outputs:
            if not isinstance(leg, Balance):
                raise ValueError(f"TransferRequest legs must be Balance, got {type(leg).__name__}")
            for coin in leg.coins:
                if coin.amount < 0:
                    raise ValueError(
                        f"Leg amount must be non-negative, got {coin.amount} {coin.denom} for {leg.address}"
                    )
        if not self.request_id:
            object.__setattr__(self, 'request_id', _compute_request_id(self.inputs, self.outputs))

    def denoms(self) -> List[str]:
        """Every denom referenced by the request, in first-seen order."""
        seen: Dict[str, None] = {}
        for leg in self.inputs + self.outputs:
            for coin in leg.coins:
                seen.setdefault(coin.denom, None)
        return list(seen)

    def input_totals(self) -> DenomTotals:
        return _sum_legs(self.inputs)

    def output_totals(self) -> DenomTotals:
        return _sum_legs(self.outputs)

    def __repr__(self) -> str:
        return f"TransferRequest({len(self.inputs)} inputs, {len(self.outputs)} outputs, id={self.request_id})"


# Name used by the Cosmos SDK bank module for the same instruction.
MultiSend = TransferRequest


def _sum_legs(legs: Iterable[Balance]) -> DenomTotals:
    totals: DenomTotals = {}
    for leg in legs:
        for coin in leg.coins:
            totals[coin.denom] = totals.get(coin.denom, 0) + coin.amount
    return totals


# ============================================================================
# FACTORIES
# ============================================================================

def balance(address: str, coins: Optional[Mapping[str, int]] = None) -> Balance:
    """
    Build a Balance from a {denom: amount} mapping.

    Example:
        balance("account1", {"denom1": 1000, "denom2": 5})
    """
    return Balance(
        address=address,
        coins=tuple(Coin(denom, amount) for denom, amount in (coins or {}).items()),
    )


def token(
    denom: str,
    issuer: str,
    burn_rate: RateLike = 0,
    commission_rate: RateLike = 0,
) -> TokenDefinition:
    """
    Create a TokenDefinition, accepting any supported rate representation.

    Example:
        token("denom1", "issuer_account_A", burn_rate="0.08", commission_rate="0.12")
    """
    return TokenDefinition(
        denom=denom,
        issuer=issuer,
        burn_rate=to_rate(burn_rate),
        commission_rate=to_rate(commission_rate),
    )
