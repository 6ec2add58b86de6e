"""
Transaction — Модели транзакций реестра

Immutable Pydantic модели:
- StateRef / StateAndRef — ссылка на конкретную зафиксированную версию состояния
- TransactionState — выходное состояние вместе с идентификатором контракта
- Command — команда (Issue/Transfer) и набор требуемых подписантов
- WireTransaction — предлагаемая транзакция (inputs, outputs, commands)
- SignedTransaction — транзакция с собранными подписями

Идентификатор транзакции — SHA-256 канонического JSON представления,
поэтому любая сторона вычисляет его одинаково.
"""

import hashlib
import json
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, Field

from .iou_state import IOU_CONTRACT_ID, IOUState
from .party import Party


# =============================================================================
# ENUMS
# =============================================================================


class CommandKind(str, Enum):
    """Распознаваемые команды IOU контракта"""

    ISSUE = "Issue"
    TRANSFER = "Transfer"

    @classmethod
    def parse(cls, kind: str) -> Optional["CommandKind"]:
        """Tagged variant: None для нераспознанной команды."""
        try:
            return cls(kind)
        except ValueError:
            return None


# =============================================================================
# STATE REFERENCES
# =============================================================================


class StateRef(BaseModel):
    """Ссылка на выход транзакции: (tx_id, index)."""

    tx_id: str = Field(..., min_length=1, description="Идентификатор транзакции, создавшей состояние")
    index: int = Field(..., ge=0, description="Индекс выхода в транзакции")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.tx_id[:12]}({self.index})"


class TransactionState(BaseModel):
    """Состояние в составе транзакции вместе с управляющим контрактом."""

    data: IOUState
    contract: str = Field(default=IOU_CONTRACT_ID, min_length=1)

    model_config = {"frozen": True}


class StateAndRef(BaseModel):
    """Зафиксированная версия состояния и ссылка на неё."""

    state: TransactionState
    ref: StateRef

    model_config = {"frozen": True}


# =============================================================================
# COMMANDS
# =============================================================================


class Command(BaseModel):
    """
    Команда транзакции.

    kind хранится строкой: нераспознанные команды должны доходить до
    контракта и отклоняться им, а не ломать десериализацию.
    """

    kind: str = Field(..., min_length=1, description="Тип команды ('Issue', 'Transfer', ...)")
    signers: Tuple[str, ...] = Field(..., description="Ключи обязательных подписантов")

    model_config = {"frozen": True}

    @classmethod
    def issue(cls, signers) -> "Command":
        return cls(kind=CommandKind.ISSUE.value, signers=tuple(sorted(signers)))

    @classmethod
    def transfer(cls, signers) -> "Command":
        return cls(kind=CommandKind.TRANSFER.value, signers=tuple(sorted(signers)))

    @property
    def command_kind(self) -> Optional[CommandKind]:
        return CommandKind.parse(self.kind)

    @property
    def signer_set(self) -> FrozenSet[str]:
        return frozenset(self.signers)


# =============================================================================
# TRANSACTIONS
# =============================================================================


class WireTransaction(BaseModel):
    """
    Предлагаемая транзакция.

    Не содержит подписей; id однозначно определяется содержимым.
    """

    inputs: Tuple[StateAndRef, ...] = Field(default=(), description="Потребляемые версии состояний")
    outputs: Tuple[TransactionState, ...] = Field(default=(), description="Создаваемые версии состояний")
    commands: Tuple[Command, ...] = Field(default=(), description="Команды транзакции")
    notary: Party = Field(..., description="Нотариус, упорядочивающий потребление inputs")

    model_config = {"frozen": True}

    @property
    def id(self) -> str:
        canonical = json.dumps(
            self.model_dump(mode="json"), sort_keys=True, separators=(",", ":")
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    @property
    def input_states(self) -> Tuple[IOUState, ...]:
        return tuple(sar.state.data for sar in self.inputs)

    @property
    def output_states(self) -> Tuple[IOUState, ...]:
        return tuple(ts.data for ts in self.outputs)

    @property
    def required_signers(self) -> FrozenSet[str]:
        """Объединение подписантов всех команд."""
        keys: set = set()
        for command in self.commands:
            keys.update(command.signers)
        return frozenset(keys)

    def out_ref(self, index: int) -> StateAndRef:
        """StateAndRef для выхода этой транзакции после её фиксации."""
        return StateAndRef(state=self.outputs[index], ref=StateRef(tx_id=self.id, index=index))


class TransactionSignature(BaseModel):
    """Подпись ключа `by` над идентификатором транзакции."""

    by: str = Field(..., min_length=1, description="Ключ подписанта")
    signature: str = Field(..., min_length=1, description="Подпись (hex)")

    model_config = {"frozen": True}


class SignedTransaction(BaseModel):
    """Транзакция вместе с подписями."""

    tx: WireTransaction
    sigs: Tuple[TransactionSignature, ...] = Field(default=())

    model_config = {"frozen": True}

    @property
    def id(self) -> str:
        return self.tx.id

    @property
    def signed_keys(self) -> FrozenSet[str]:
        return frozenset(sig.by for sig in self.sigs)

    @property
    def required_signers(self) -> FrozenSet[str]:
        return self.tx.required_signers

    @property
    def missing_signers(self) -> FrozenSet[str]:
        return self.required_signers - self.signed_keys

    def with_added_signatures(self, *signatures: TransactionSignature) -> "SignedTransaction":
        """
        Новая SignedTransaction с добавленными подписями.

        Повторная подпись тем же ключом заменяет предыдущую.
        """
        by_key: Dict[str, TransactionSignature] = {sig.by: sig for sig in self.sigs}
        for sig in signatures:
            by_key[sig.by] = sig
        return SignedTransaction(tx=self.tx, sigs=tuple(by_key[k] for k in sorted(by_key)))
