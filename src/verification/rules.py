"""Правила IOU контракта.

Каждое правило имеет машиночитаемый код (value) и человекочитаемое
сообщение. Порядок в IOUContract фиксирован: отклонение всегда указывает
первое нарушенное правило.
"""

from enum import Enum
from typing import Dict


class ContractRule(str, Enum):
    """Именованные правила верификации."""

    # Структурное предусловие (до ветвления по команде)
    SINGLE_COMMAND = "single_command"

    # Issue
    ISSUE_NO_INPUTS = "issue_no_inputs"
    ISSUE_SINGLE_OUTPUT = "issue_single_output"
    ISSUE_POSITIVE_AMOUNT = "issue_positive_amount"
    ISSUE_DISTINCT_PARTIES = "issue_distinct_parties"
    ISSUE_SIGNERS = "issue_signers"

    # Transfer
    TRANSFER_SINGLE_INPUT = "transfer_single_input"
    TRANSFER_SINGLE_OUTPUT = "transfer_single_output"
    TRANSFER_BORROWER_UNCHANGED = "transfer_borrower_unchanged"
    TRANSFER_AMOUNT_UNCHANGED = "transfer_amount_unchanged"
    TRANSFER_IDENTIFIER_UNCHANGED = "transfer_identifier_unchanged"
    TRANSFER_ONLY_LENDER_CHANGES = "transfer_only_lender_changes"
    TRANSFER_LENDER_MUST_CHANGE = "transfer_lender_must_change"
    TRANSFER_SIGNERS = "transfer_signers"

    @property
    def message(self) -> str:
        return RULE_MESSAGES[self]


RULE_MESSAGES: Dict[ContractRule, str] = {
    ContractRule.SINGLE_COMMAND: "Exactly one IOU command (Issue or Transfer) must be present.",
    ContractRule.ISSUE_NO_INPUTS: "No inputs should be consumed when issuing an IOU.",
    ContractRule.ISSUE_SINGLE_OUTPUT: "Only one output state should be created when issuing an IOU.",
    ContractRule.ISSUE_POSITIVE_AMOUNT: "A newly issued IOU must have a positive amount.",
    ContractRule.ISSUE_DISTINCT_PARTIES: "The lender and borrower cannot have the same identity.",
    ContractRule.ISSUE_SIGNERS: "Both lender and borrower together only may sign IOU issue transaction.",
    ContractRule.TRANSFER_SINGLE_INPUT: "An IOU transfer transaction should only consume one input state.",
    ContractRule.TRANSFER_SINGLE_OUTPUT: "An IOU transfer transaction should only create one output state.",
    ContractRule.TRANSFER_BORROWER_UNCHANGED: "Only the lender property may change: borrower differs.",
    ContractRule.TRANSFER_AMOUNT_UNCHANGED: "Only the lender property may change: amount differs.",
    ContractRule.TRANSFER_IDENTIFIER_UNCHANGED: "Only the lender property may change: linear_id differs.",
    ContractRule.TRANSFER_ONLY_LENDER_CHANGES: "Only the lender property may change.",
    ContractRule.TRANSFER_LENDER_MUST_CHANGE: "The lender property must change in a transfer.",
    ContractRule.TRANSFER_SIGNERS: (
        "The borrower, old lender and new lender only must sign an IOU transfer transaction."
    ),
}
