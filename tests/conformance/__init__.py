"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the settlement calculator.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_conservation.py - nothing is created; only the burn leaves circulation
2. test_atomicity.py - a rejected request produces no deltas at all
3. test_determinism.py - identical inputs give identical outputs
4. test_issuer_exemption.py - issuers never pay burn or commission
5. test_monotonic_rejection.py - topping up a sender clears its rejection

These tests use hypothesis for property-based testing.
"""
