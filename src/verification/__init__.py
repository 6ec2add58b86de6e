"""Verification — правила IOU контракта.

- Структурное предусловие: ровно одна распознанная команда
- Issue: выпуск обязательства
- Transfer: передача позиции кредитора
"""

from .iou_contract import (
    IOUContract,
    VerificationResult,
    require_verified,
    verify_transaction,
)
from .rules import ContractRule, RULE_MESSAGES

__all__ = [
    "IOUContract",
    "VerificationResult",
    "ContractRule",
    "RULE_MESSAGES",
    "verify_transaction",
    "require_verified",
]
