"""
Flow Services — контракты внешних коллабораторов

Ядро (контракт и flows) не владеет изменяемым состоянием реестра: оно
получает снапшоты через VaultService и меняет реестр только через
NotaryService. Реализации внедряются через FlowServices.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Protocol
from uuid import UUID

from src.core.domain.party import Party
from src.core.domain.transaction import SignedTransaction, StateAndRef, TransactionSignature
from src.flows.config import FlowConfig


# =============================================================================
# COMMIT RESULT
# =============================================================================


class CommitStatus(str, Enum):
    """Исход фиксации транзакции нотариусом."""

    COMMITTED = "COMMITTED"
    CONFLICT = "CONFLICT"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CommitResult:
    """Результат NotaryService.commit."""

    status: CommitStatus
    tx_id: str
    reason: str = ""

    @property
    def committed(self) -> bool:
        return self.status == CommitStatus.COMMITTED


# =============================================================================
# COLLABORATOR PROTOCOLS
# =============================================================================


class VaultService(Protocol):
    """Поиск текущих версий обязательств."""

    def find_current(self, linear_id: UUID) -> StateAndRef:
        """
        Единственная текущая (непотреблённая) версия.

        Raises:
            StateNotFound: версий нет
            AmbiguousState: версий больше одной
        """
        ...


class SigningService(Protocol):
    """Подпись и проверка подписей над идентификатором транзакции."""

    def sign(self, tx_id: str, party: Party) -> TransactionSignature:
        ...

    def verify(self, tx_id: str, signature: TransactionSignature) -> bool:
        ...


class FlowSession(Protocol):
    """Канал к одному контрагенту."""

    counterparty: Party

    def send_and_receive(self, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        """
        Отправка сообщения и ожидание ответа.

        Raises:
            SessionFailure: таймаут или разрыв
        """
        ...

    def close(self) -> None:
        ...


class SessionTransport(Protocol):
    """Открытие сессий с контрагентами."""

    def open_session(self, party: Party) -> FlowSession:
        """
        Raises:
            SessionFailure: контрагент недоступен
        """
        ...


class NotaryService(Protocol):
    """Упорядочивание и фиксация полностью подписанных транзакций."""

    identity: Party

    def commit(self, stx: SignedTransaction) -> CommitResult:
        ...


# =============================================================================
# SERVICE HUB
# =============================================================================


@dataclass
class FlowServices:
    """Коллабораторы, доступные flow на одном узле."""

    our_identity: Party
    vault: VaultService
    signing: SigningService
    transport: SessionTransport
    notary: NotaryService
    config: FlowConfig = field(default_factory=FlowConfig)
