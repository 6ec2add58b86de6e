"""
Domain models and value objects.

Contains the IOU obligation state, parties, amounts and the transaction
value types that carry state versions between parties.
"""

from src.core.domain.amount import Amount
from src.core.domain.iou_state import IOU_CONTRACT_ID, IOUState
from src.core.domain.party import Party
from src.core.domain.transaction import (
    Command,
    CommandKind,
    SignedTransaction,
    StateAndRef,
    StateRef,
    TransactionSignature,
    TransactionState,
    WireTransaction,
)

__all__ = [
    # Parties and amounts
    "Party",
    "Amount",
    # IOU state
    "IOUState",
    "IOU_CONTRACT_ID",
    # Transactions
    "Command",
    "CommandKind",
    "StateRef",
    "StateAndRef",
    "TransactionState",
    "WireTransaction",
    "TransactionSignature",
    "SignedTransaction",
]
