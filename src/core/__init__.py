"""
Core domain models and payload contracts.

This module contains the foundational building blocks that are independent
of external systems (vault, notary, network transport).
"""
