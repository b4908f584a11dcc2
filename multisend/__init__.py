"""
multisend - Multi-Send Settlement Calculator

Computes the balance changes of a Cosmos-style bank MultiSend where every
denom may carry a burn rate and a commission rate, paid by non-issuer senders
and apportioned across them in proportion to what they send.

Usage:
    from multisend import (
        TransferRequest, balance, token, compute_transfer_deltas, apply_deltas,
    )

    snapshot = [balance("account1", {"denom1": 1_000_000})]
    definitions = [token("denom1", "issuer_A", burn_rate="0.08", commission_rate="0.12")]
    request = TransferRequest(
        inputs=[balance("account1", {"denom1": 1000})],
        outputs=[balance("account_recipient", {"denom1": 1000})],
    )

    deltas = compute_transfer_deltas(snapshot, definitions, request)
    snapshot = apply_deltas(snapshot, deltas)
"""

import logging

# Core types
from .core import (
    Coin,
    Balance,
    TokenDefinition,
    TransferRequest,
    MultiSend,
    TransferError,
    UnbalancedTransfer,
    InsufficientBalance,
    UnknownToken,
    balance,
    token,
    ceil_div,
    apply_rate,
    to_rate,
    MIN_RATE,
    MAX_RATE,
)

# Snapshot access
from .snapshot import (
    BalanceView,
    SnapshotView,
    index_definitions,
)

# Stages
from .stages import (
    FeeBase,
    FeePool,
    FeeShare,
    validate_transfer,
    aggregate_fee_base,
    distribute_fees,
    assemble_deltas,
)

# Settlement
from .settlement import (
    Settlement,
    compute_settlement,
    compute_transfer_deltas,
    apply_deltas,
)

__all__ = [
    # Core
    'Coin', 'Balance', 'TokenDefinition', 'TransferRequest', 'MultiSend',
    'TransferError', 'UnbalancedTransfer', 'InsufficientBalance', 'UnknownToken',
    'balance', 'token', 'ceil_div', 'apply_rate', 'to_rate',
    'MIN_RATE', 'MAX_RATE',
    # Snapshot
    'BalanceView', 'SnapshotView', 'index_definitions',
    # Stages
    'FeeBase', 'FeePool', 'FeeShare',
    'validate_transfer', 'aggregate_fee_base', 'distribute_fees', 'assemble_deltas',
    # Settlement
    'Settlement', 'compute_settlement', 'compute_transfer_deltas', 'apply_deltas',
]

__version__ = '1.0.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())
