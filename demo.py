#!/usr/bin/env python3
"""
demo.py - Walkthrough: Settling a Multi-Send Step by Step

Builds the sample ledger, runs it through the settlement calculator and
prints what happens at each stage. Press Enter to advance.

WHAT YOU'LL SEE:
  1: The snapshot and the token definitions
  2: A two-denom multi-send and its balance changes
  3: The fee breakdown behind those changes
  4: Applying the deltas and checking conservation
  5: Rejected requests (unbalanced, insufficient balance, unknown denom)
  6: Issuers as recipients, and rounding on tiny amounts

Run:
    python demo.py             # Interactive mode (press Enter for each step)
    python demo.py --quick     # Run all steps without pausing
    python demo.py --verbose   # Also show the calculator's log output
"""

from dataclasses import dataclass, field
import logging
import sys
from typing import Dict, List

from multisend import (
    Balance, TokenDefinition, TransferRequest, TransferError,
    balance, token,
    compute_settlement, compute_transfer_deltas, apply_deltas,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Sample data for the walkthrough. Modify these to experiment."""
    account1_denom1: int = 1_000_000
    account2_denom2: int = 1_000_000

    denom1_burn_rate: str = "0.08"
    denom1_commission_rate: str = "0.12"
    denom2_burn_rate: str = "1"
    denom2_commission_rate: str = "0"

    transfer_amount: int = 1000

    issuers: Dict[str, str] = field(default_factory=lambda: {
        "denom1": "issuer_account_A",
        "denom2": "issuer_account_B",
    })


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv
VERBOSE = "--verbose" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with its objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def print_balances(records: List[Balance]):
    for record in records:
        coins = ", ".join(f"{c.amount:+d} {c.denom}" for c in record.coins) or "(none)"
        print(f"  {record.address:<20} {coins}")


# ============================================================================
# STEPS
# ============================================================================

def step_01_sample_data():
    """Build the ledger snapshot and token definitions."""
    step_header(1, "Snapshot and Definitions",
        "The calculator reads a snapshot and definitions; it never modifies them.")

    snapshot = [
        balance("account1", {"denom1": CONFIG.account1_denom1}),
        balance("account2", {"denom2": CONFIG.account2_denom2}),
    ]
    definitions = [
        token("denom1", CONFIG.issuers["denom1"],
              burn_rate=CONFIG.denom1_burn_rate,
              commission_rate=CONFIG.denom1_commission_rate),
        token("denom2", CONFIG.issuers["denom2"],
              burn_rate=CONFIG.denom2_burn_rate,
              commission_rate=CONFIG.denom2_commission_rate),
    ]

    section_header("Snapshot")
    print_balances(snapshot)

    section_header("Definitions")
    for definition in definitions:
        print(f"  {definition.denom}: issuer={definition.issuer}, "
              f"burn={definition.burn_rate}, commission={definition.commission_rate}")

    print("""
    Rates are exact fractions. "0.08" is stored as 2/25, so no float rounding
    can leak into the settlement amounts.
    """)
    return snapshot, definitions


def step_02_multi_send(snapshot, definitions):
    """Settle the sample two-denom multi-send."""
    step_header(2, "A Multi-Send",
        "Inputs and outputs balance per denom; senders pay the fees on top.")

    amount = CONFIG.transfer_amount
    request = TransferRequest(
        inputs=[
            balance("account1", {"denom1": amount}),
            balance("account2", {"denom2": amount}),
        ],
        outputs=[
            balance("account_recipient", {"denom1": amount, "denom2": amount}),
        ],
    )
    print(f">>> request = {request!r}")

    deltas = compute_transfer_deltas(snapshot, definitions, request)

    section_header("Balance Changes")
    print_balances(deltas)

    print("""
    account1 pays 1000 + 80 burnt + 120 commission.
    account2 pays 1000 + 1000 burnt (burn rate 1).
    The recipient receives exactly what the outputs say.
    """)
    return request, deltas


def step_03_breakdown(snapshot, definitions, request):
    """Show the intermediate results of every stage."""
    step_header(3, "Fee Breakdown",
        "Fees are charged on a pooled base and apportioned to senders.")

    settlement = compute_settlement(snapshot, definitions, request)

    section_header("Fee Pools")
    for denom, pool in settlement.pools.items():
        print(f"  {denom}: base={pool.fee_base}, burn pool={pool.burn_pool}, "
              f"commission pool={pool.commission_pool}")

    section_header("Per-Sender Shares")
    for share in settlement.shares:
        print(f"  {share.address:<12} {share.denom}: sent {share.amount}, "
              f"burn {share.burn}, commission {share.commission}")

    section_header("Totals")
    print(f"  Burned:     {dict(settlement.burned)}")
    print(f"  Commission: {dict(settlement.commission)}")
    print(f"  Request id: {settlement.request_id}")
    return settlement


def step_04_apply(snapshot, deltas, settlement):
    """Apply the deltas and verify nothing was created."""
    step_header(4, "Applying the Deltas",
        "Supply only shrinks by the burnt amount; commission moves to issuers.")

    after = apply_deltas(snapshot, deltas)
    print_balances(after)

    section_header("Conservation Check")
    for denom, burned in settlement.burned.items():
        before_total = sum(r.amount_of(denom) for r in snapshot)
        after_total = sum(r.amount_of(denom) for r in after)
        status = "OK" if before_total - after_total == burned else "MISMATCH"
        print(f"  {denom}: {before_total} -> {after_total} (burned {burned}) [{status}]")
    return after


def step_05_rejections(snapshot, definitions):
    """Show the three rejection reasons."""
    step_header(5, "Rejected Requests",
        "Any failed check rejects the whole request. No partial deltas.")

    cases = [
        ("Unbalanced", TransferRequest(
            inputs=[balance("account1", {"denom1": 350})],
            outputs=[balance("account_recipient", {"denom1": 450})],
        )),
        ("Insufficient", TransferRequest(
            inputs=[balance("account_without_funds", {"denom1": 350})],
            outputs=[balance("account_recipient", {"denom1": 350})],
        )),
        ("Unknown denom", TransferRequest(
            inputs=[balance("account1", {"denom9": 1})],
            outputs=[balance("account_recipient", {"denom9": 1})],
        )),
    ]
    for label, request in cases:
        try:
            compute_transfer_deltas(snapshot, definitions, request)
            print(f"  {label:<15} accepted (unexpected)")
        except TransferError as exc:
            print(f"  {label:<15} {type(exc).__name__}: {exc}")


def step_06_edge_cases():
    """Issuer as recipient, and ceiling rounding on one-unit legs."""
    step_header(6, "Issuers and Rounding",
        "Issuer legs are fee-exempt; sub-unit fees always round up.")

    snapshot = [
        balance("account1", {"denom1": 1_000_000}),
        balance("account2", {"denom1": 1_000_000}),
    ]
    definitions = [TokenDefinition("denom1", "issuer_account_A", "0.08", "0.12")]
    request = TransferRequest(
        inputs=[
            balance("account1", {"denom1": 650}),
            balance("account2", {"denom1": 350}),
        ],
        outputs=[
            balance("account_recipient", {"denom1": 500}),
            balance("issuer_account_A", {"denom1": 500}),
        ],
    )
    section_header("Issuer Receives Half")
    print_balances(compute_transfer_deltas(snapshot, definitions, request))
    print("""
    Fee base = min(1000 non-issuer in, 500 non-issuer out) = 500.
    Burn pool 40 and commission pool 60 are split 65/35 between the senders.
    """)

    snapshot = [balance("a", {"tiny": 10}), balance("b", {"tiny": 10})]
    definitions = [token("tiny", "mint", burn_rate="0.01", commission_rate="0.01")]
    request = TransferRequest(
        inputs=[balance("a", {"tiny": 1}), balance("b", {"tiny": 1})],
        outputs=[balance("c", {"tiny": 2})],
    )
    section_header("One-Unit Legs at 1%")
    print_balances(compute_transfer_deltas(snapshot, definitions, request))


def main():
    """Run the complete walkthrough."""
    if VERBOSE:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stdout)],
        )

    print("=" * 70)
    print("       MULTI-SEND SETTLEMENT - WALKTHROUGH")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")
    wait_for_enter()

    snapshot, definitions = step_01_sample_data()
    wait_for_enter()

    request, deltas = step_02_multi_send(snapshot, definitions)
    wait_for_enter()

    settlement = step_03_breakdown(snapshot, definitions, request)
    wait_for_enter()

    step_04_apply(snapshot, deltas, settlement)
    wait_for_enter()

    step_05_rejections(snapshot, definitions)
    wait_for_enter()

    step_06_edge_cases()

    print(f"\n{'='*70}")
    print("Done. Run tests with: pytest tests/")


if __name__ == "__main__":
    main()
