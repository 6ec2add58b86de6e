"""
Test suite for the IOU ledger flows

Contains:
- tests/unit/          : Unit tests for the contract, flows and in-memory ledger
"""
