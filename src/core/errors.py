"""
Errors — Таксономия ошибок передачи и выпуска IOU

Все ошибки ограничены одной попыткой операции и не фатальны для процесса.
Автоматических повторов нет: вызывающая сторона решает, инициировать ли
операцию заново против обновлённого текущего состояния.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from src.verification.iou_contract import VerificationResult


class FlowError(Exception):
    """Base error for IOU flow operations."""
    pass


class ValidationRejected(FlowError):
    """Транзакция отклонена контрактом; rule — первое нарушенное правило."""

    def __init__(self, result: "VerificationResult"):
        self.result = result
        self.rule = result.rule
        super().__init__(
            f"Contract verification failed [{result.rule.value if result.rule else 'unknown'}]: "
            f"{result.reason}"
        )


class StateNotFound(FlowError):
    """Нет текущей (непотреблённой) версии обязательства."""

    def __init__(self, linear_id):
        self.linear_id = linear_id
        super().__init__(f"No current IOU state found for linear_id {linear_id}.")


class AmbiguousState(FlowError):
    """Идентификатор разрешается более чем в одну текущую версию."""

    def __init__(self, linear_id, count: int):
        self.linear_id = linear_id
        self.count = count
        super().__init__(
            f"Expected exactly one current IOU state for linear_id {linear_id}, found {count}."
        )


class Unauthorized(FlowError):
    """Вызывающий не является текущим lender (или participant при выпуске)."""

    def __init__(self, message: str):
        super().__init__(message)


class SignatureRefused(FlowError):
    """Обязательный подписант отказался подписывать после перепроверки."""

    def __init__(self, party: str, reason: str):
        self.party = party
        self.reason = reason
        super().__init__(f"Party {party} refused to sign: {reason}")


class SessionFailure(FlowError):
    """Таймаут, разрыв сессии, сбой контрагента или негодный ответ."""

    def __init__(self, party: Optional[str], reason: str):
        self.party = party
        self.reason = reason
        target = party if party is not None else "counterparties"
        super().__init__(f"Session with {target} failed: {reason}")


class CommitConflict(FlowError):
    """Вход уже потреблён другой транзакцией (проигрыш гонки)."""

    def __init__(self, tx_id: str, reason: str):
        self.tx_id = tx_id
        self.reason = reason
        super().__init__(f"Transaction {tx_id} lost commit race: {reason}")


class CommitRejected(FlowError):
    """Нотариус отклонил транзакцию по иной причине."""

    def __init__(self, tx_id: str, reason: str):
        self.tx_id = tx_id
        self.reason = reason
        super().__init__(f"Transaction {tx_id} rejected by notary: {reason}")


class FlowCancelled(FlowError):
    """Вызывающий отменил операцию до финализации."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Flow cancelled during {stage}; collected signatures discarded.")
