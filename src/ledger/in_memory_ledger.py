"""
InMemoryLedger — потокобезопасный реестр версий и нотариус

Единственный владелец авторитетного статуса current/consumed. Фиксация
атомарна: при гонке двух транзакций за один и тот же вход побеждает первая,
вторая получает CONFLICT (single-writer-wins на версию).

Нотариус не валидирующий: проверяет подписи и уникальность потребления,
но не правила контракта (их проверяют стороны до подписи).
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Tuple
from uuid import UUID

from src.core.domain.party import Party
from src.core.domain.transaction import SignedTransaction, StateAndRef, StateRef
from src.core.errors import AmbiguousState, StateNotFound
from src.flows.services import CommitResult, CommitStatus, SigningService

logger = logging.getLogger("iou.ledger")


class InMemoryLedger:
    """
    Реестр + нотариус в памяти.

    Реализует VaultService (find_current) и NotaryService (commit).
    История обязательства — append-only цепочка версий по linear_id.
    """

    def __init__(self, notary: Party, signing: SigningService):
        self.identity = notary
        self._signing = signing
        self._lock = threading.Lock()

        self._unconsumed: Dict[StateRef, StateAndRef] = {}
        # ref -> id потребившей транзакции
        self._consumed: Dict[StateRef, str] = {}
        self._versions: Dict[UUID, List[StateAndRef]] = {}
        self._transactions: Dict[str, SignedTransaction] = {}

    # -------------------------------------------------------------------------
    # Vault
    # -------------------------------------------------------------------------

    def find_current(self, linear_id: UUID) -> StateAndRef:
        """
        Raises:
            StateNotFound: текущих версий нет
            AmbiguousState: текущих версий больше одной
        """
        with self._lock:
            matches = [
                sar for sar in self._unconsumed.values()
                if sar.state.data.linear_id == linear_id
            ]
        if not matches:
            raise StateNotFound(linear_id)
        if len(matches) > 1:
            raise AmbiguousState(linear_id, len(matches))
        return matches[0]

    def history(self, linear_id: UUID) -> Tuple[StateAndRef, ...]:
        """Все версии обязательства в порядке фиксации."""
        with self._lock:
            return tuple(self._versions.get(linear_id, ()))

    def is_consumed(self, ref: StateRef) -> bool:
        with self._lock:
            return ref in self._consumed

    def consumed_by(self, ref: StateRef) -> str | None:
        with self._lock:
            return self._consumed.get(ref)

    def transactions(self) -> Tuple[SignedTransaction, ...]:
        with self._lock:
            return tuple(self._transactions.values())

    # -------------------------------------------------------------------------
    # Notary
    # -------------------------------------------------------------------------

    def commit(self, stx: SignedTransaction) -> CommitResult:
        """Атомарная фиксация полностью подписанной транзакции."""
        tx = stx.tx
        tx_id = stx.id

        rejection = self._check_signatures(stx)
        if rejection:
            return self._rejected(tx_id, rejection)
        if tx.notary != self.identity:
            return self._rejected(tx_id, f"transaction names notary {tx.notary.name}, not {self.identity.name}")

        with self._lock:
            for sar in tx.inputs:
                consumer = self._consumed.get(sar.ref)
                if consumer is not None:
                    result = CommitResult(
                        status=CommitStatus.CONFLICT,
                        tx_id=tx_id,
                        reason=f"input {sar.ref} already consumed by {consumer[:12]}",
                    )
                    logger.warning(f"Notary conflict on {tx_id[:12]}: {result.reason}")
                    return result
                current = self._unconsumed.get(sar.ref)
                if current is None:
                    return self._rejected(tx_id, f"input {sar.ref} is not a known state")
                if current != sar:
                    return self._rejected(tx_id, f"input {sar.ref} does not match the recorded state")

            if not tx.inputs:
                for ts in tx.outputs:
                    if ts.data.linear_id in self._versions:
                        return self._rejected(
                            tx_id, f"linear_id {ts.data.linear_id} has already been issued"
                        )

            for sar in tx.inputs:
                del self._unconsumed[sar.ref]
                self._consumed[sar.ref] = tx_id
            for index in range(len(tx.outputs)):
                out = tx.out_ref(index)
                self._unconsumed[out.ref] = out
                self._versions.setdefault(out.state.data.linear_id, []).append(out)
            self._transactions[tx_id] = stx

        logger.info(
            f"Committed {tx_id[:12]}: consumed={len(tx.inputs)} produced={len(tx.outputs)}"
        )
        return CommitResult(status=CommitStatus.COMMITTED, tx_id=tx_id)

    def _check_signatures(self, stx: SignedTransaction) -> str:
        missing = stx.missing_signers
        if missing:
            return f"missing signatures from {sorted(missing)}"
        invalid = [sig.by for sig in stx.sigs if not self._signing.verify(stx.id, sig)]
        if invalid:
            return f"invalid signatures from {sorted(invalid)}"
        return ""

    def _rejected(self, tx_id: str, reason: str) -> CommitResult:
        logger.warning(f"Notary rejected {tx_id[:12]}: {reason}")
        return CommitResult(status=CommitStatus.REJECTED, tx_id=tx_id, reason=reason)
