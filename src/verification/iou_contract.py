"""IOU Contract — верификация переходов состояния обязательства.

Чистая функция над предлагаемой транзакцией: inputs, outputs, команды
(с набором подписантов). Без побочных эффектов, поэтому её независимо
повторяют инициатор и каждый контрагент перед подписью.

Порядок проверок:
1. Структурное предусловие: ровно одна распознанная команда
2. Issue: inputs пусты, один output, amount > 0, lender != borrower,
   подписанты == {lender, borrower}
3. Transfer: один input и один output, borrower/amount/linear_id не меняются,
   lender меняется, подписанты == participants(input) ∪ participants(output)

Транзакция либо принимается целиком, либо отклоняется с первым
нарушенным правилом.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from src.core.domain.iou_state import IOUState
from src.core.domain.transaction import Command, CommandKind, WireTransaction
from src.core.errors import ValidationRejected
from src.verification.rules import ContractRule

logger = logging.getLogger("iou.verification")


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class VerificationResult:
    """Результат верификации транзакции."""

    accepted: bool
    rule: Optional[ContractRule]
    reason: str

    # Распознанная команда (None если структурное предусловие не выполнено)
    command: Optional[CommandKind]

    # Детали
    details: str

    def raise_if_rejected(self) -> None:
        if not self.accepted:
            raise ValidationRejected(self)


class _RuleViolation(Exception):
    """Внутренний сигнал: первое нарушенное правило."""

    def __init__(self, rule: ContractRule, details: str):
        self.rule = rule
        self.details = details
        super().__init__(rule.message)


def _require(rule: ContractRule, condition: bool, details: str = "") -> None:
    if not condition:
        raise _RuleViolation(rule, details)


# =============================================================================
# CONTRACT
# =============================================================================


class IOUContract:
    """IOU Contract: правила Issue и Transfer.

    Stateless; экземпляр можно разделять между потоками.
    """

    def verify(self, tx: WireTransaction) -> VerificationResult:
        """Верификация WireTransaction."""
        return self.evaluate(tx.input_states, tx.output_states, tx.commands)

    def evaluate(
        self,
        inputs: Sequence[IOUState],
        outputs: Sequence[IOUState],
        commands: Sequence[Command],
    ) -> VerificationResult:
        """Оценка предлагаемого перехода.

        Args:
            inputs: потребляемые версии обязательства
            outputs: создаваемые версии обязательства
            commands: команды транзакции вместе с подписантами

        Returns:
            VerificationResult: accepted либо первое нарушенное правило
        """
        kind: Optional[CommandKind] = None
        try:
            command = self._require_single_command(commands)
            kind = command.command_kind
            if kind == CommandKind.ISSUE:
                details = self._verify_issue(inputs, outputs, command)
            elif kind == CommandKind.TRANSFER:
                details = self._verify_transfer(inputs, outputs, command)
            else:  # pragma: no cover - _require_single_command гарантирует распознанную команду
                raise _RuleViolation(ContractRule.SINGLE_COMMAND, f"unexpected command {command.kind}")
        except _RuleViolation as violation:
            logger.debug(
                f"IOU contract rejected {kind.value if kind else 'transaction'}: "
                f"{violation.rule.value} ({violation.details})"
            )
            return VerificationResult(
                accepted=False,
                rule=violation.rule,
                reason=violation.rule.message,
                command=kind,
                details=violation.details,
            )

        return VerificationResult(
            accepted=True,
            rule=None,
            reason="",
            command=kind,
            details=details,
        )

    # -------------------------------------------------------------------------
    # Structural precondition
    # -------------------------------------------------------------------------

    def _require_single_command(self, commands: Sequence[Command]) -> Command:
        """Ровно одна команда, и она распознана (Issue или Transfer)."""
        unrecognized = [c.kind for c in commands if c.command_kind is None]
        _require(
            ContractRule.SINGLE_COMMAND,
            not unrecognized,
            f"unrecognized commands: {unrecognized}",
        )
        _require(
            ContractRule.SINGLE_COMMAND,
            len(commands) == 1,
            f"expected 1 command, got {len(commands)}",
        )
        return commands[0]

    # -------------------------------------------------------------------------
    # Issue
    # -------------------------------------------------------------------------

    def _verify_issue(
        self,
        inputs: Sequence[IOUState],
        outputs: Sequence[IOUState],
        command: Command,
    ) -> str:
        _require(ContractRule.ISSUE_NO_INPUTS, len(inputs) == 0, f"inputs={len(inputs)}")
        _require(ContractRule.ISSUE_SINGLE_OUTPUT, len(outputs) == 1, f"outputs={len(outputs)}")

        iou = outputs[0]
        _require(
            ContractRule.ISSUE_POSITIVE_AMOUNT,
            iou.amount.is_positive(),
            f"amount={iou.amount}",
        )
        _require(
            ContractRule.ISSUE_DISTINCT_PARTIES,
            iou.lender != iou.borrower,
            f"lender=borrower={iou.lender}",
        )

        expected = iou.participant_keys
        _require(
            ContractRule.ISSUE_SIGNERS,
            command.signer_set == expected,
            f"signers={sorted(command.signer_set)} expected={sorted(expected)}",
        )
        return f"PASS: issue {iou.amount} lender={iou.lender} borrower={iou.borrower}"

    # -------------------------------------------------------------------------
    # Transfer
    # -------------------------------------------------------------------------

    def _verify_transfer(
        self,
        inputs: Sequence[IOUState],
        outputs: Sequence[IOUState],
        command: Command,
    ) -> str:
        _require(ContractRule.TRANSFER_SINGLE_INPUT, len(inputs) == 1, f"inputs={len(inputs)}")
        _require(ContractRule.TRANSFER_SINGLE_OUTPUT, len(outputs) == 1, f"outputs={len(outputs)}")

        input_iou = inputs[0]
        output_iou = outputs[0]

        _require(
            ContractRule.TRANSFER_BORROWER_UNCHANGED,
            output_iou.borrower == input_iou.borrower,
            f"{input_iou.borrower} -> {output_iou.borrower}",
        )
        _require(
            ContractRule.TRANSFER_AMOUNT_UNCHANGED,
            output_iou.amount == input_iou.amount,
            f"{input_iou.amount} -> {output_iou.amount}",
        )
        _require(
            ContractRule.TRANSFER_IDENTIFIER_UNCHANGED,
            output_iou.linear_id == input_iou.linear_id,
            f"{input_iou.linear_id} -> {output_iou.linear_id}",
        )
        # Подстановка кредитора во вход должна дать ровно выход. Для четырёх
        # полей IOUState это уже следует из проверок выше; правило ловит поля
        # подклассов и поля, добавленные в состояние позже.
        _require(
            ContractRule.TRANSFER_ONLY_LENDER_CHANGES,
            input_iou.with_new_lender(output_iou.lender) == output_iou,
        )
        _require(
            ContractRule.TRANSFER_LENDER_MUST_CHANGE,
            output_iou.lender != input_iou.lender,
            f"lender={input_iou.lender}",
        )

        expected = input_iou.participant_keys | output_iou.participant_keys
        _require(
            ContractRule.TRANSFER_SIGNERS,
            command.signer_set == expected,
            f"signers={sorted(command.signer_set)} expected={sorted(expected)}",
        )
        return f"PASS: transfer {input_iou.linear_id} {input_iou.lender} -> {output_iou.lender}"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


_CONTRACT = IOUContract()


def verify_transaction(tx: WireTransaction) -> VerificationResult:
    """Верификация транзакции общим экземпляром контракта."""
    return _CONTRACT.verify(tx)


def require_verified(tx: WireTransaction) -> VerificationResult:
    """
    Верификация с исключением.

    Raises:
        ValidationRejected: Если нарушено хотя бы одно правило
    """
    result = _CONTRACT.verify(tx)
    result.raise_if_rejected()
    return result
