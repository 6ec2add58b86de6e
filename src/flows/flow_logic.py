"""Flow Logic — общая машина состояний инициатора.

Состояния: START → QUERIED → BUILT → LOCALLY_SIGNED → COLLECTING_SIGNATURES
→ FINALIZING → COMMITTED, плюс поглощающее FAILED из любого шага.

Общие шаги:
- self-validation предлагаемой транзакции до обращения к контрагентам
- параллельный сбор контр-подписей с ожиданием полного кворума
- однократная фиксация у нотариуса (без автоматических повторов)
- отмена до финализации: собранные подписи не фиксируются
"""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from enum import Enum
from typing import Dict, List, Optional, Sequence

from jsonschema import ValidationError as SchemaValidationError

from src.core.contracts import validate_signature_response
from src.core.domain.party import Party
from src.core.domain.transaction import SignedTransaction, TransactionSignature, WireTransaction
from src.core.errors import (
    CommitConflict,
    CommitRejected,
    FlowCancelled,
    FlowError,
    SessionFailure,
    SignatureRefused,
)
from src.flows.messages import STATUS_REFUSED, signature_request
from src.flows.services import CommitStatus, FlowServices
from src.verification.iou_contract import IOUContract, VerificationResult

logger = logging.getLogger("iou.flows")


def _describe(error: Exception) -> str:
    return f"{type(error).__name__}: {error}" if str(error) else type(error).__name__


class FlowState(str, Enum):
    """Состояние flow инициатора."""

    START = "START"
    QUERIED = "QUERIED"
    BUILT = "BUILT"
    LOCALLY_SIGNED = "LOCALLY_SIGNED"
    COLLECTING_SIGNATURES = "COLLECTING_SIGNATURES"
    FINALIZING = "FINALIZING"
    COMMITTED = "COMMITTED"
    FAILED = "FAILED"


class FlowLogic:
    """Базовый класс flow инициатора.

    Подклассы реализуют _run(); call() ведёт историю состояний и переводит
    flow в FAILED при любой ошибке.
    """

    def __init__(self, services: FlowServices, contract: Optional[IOUContract] = None):
        self.services = services
        self.contract = contract or IOUContract()

        self.state = FlowState.START
        self.history: List[FlowState] = [FlowState.START]
        self.failure: Optional[Exception] = None

        self._cancelled = threading.Event()

    @property
    def our_identity(self) -> Party:
        return self.services.our_identity

    def call(self) -> SignedTransaction:
        """Выполнение flow.

        Returns:
            Зафиксированная SignedTransaction

        Raises:
            FlowError: терминальный результат неуспешной попытки

        Непредвиденное исключение тоже переводит flow в FAILED и
        пробрасывается без изменений.
        """
        if self.state != FlowState.START:
            raise RuntimeError(f"{type(self).__name__} already ran (state={self.state.value})")
        try:
            return self._run()
        except Exception as e:
            self._fail(e)
            raise

    def cancel(self) -> None:
        """Отмена до финализации. После начала FINALIZING не действует."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _run(self) -> SignedTransaction:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # State tracking
    # -------------------------------------------------------------------------

    def _advance(self, new_state: FlowState) -> None:
        logger.debug(f"{type(self).__name__}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _fail(self, error: Exception) -> None:
        logger.warning(
            f"{type(self).__name__} failed in {self.state.value}: {type(error).__name__}: {error}"
        )
        self.failure = error
        self.state = FlowState.FAILED
        self.history.append(FlowState.FAILED)

    def _check_cancelled(self, stage: str) -> None:
        if self._cancelled.is_set():
            raise FlowCancelled(stage)

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------

    def _self_validate(self, tx: WireTransaction) -> VerificationResult:
        """Прогон контракта локально; при отклонении flow не выходит за пределы узла."""
        result = self.contract.verify(tx)
        result.raise_if_rejected()
        return result

    def _sign_locally(self, tx: WireTransaction) -> SignedTransaction:
        signature = self.services.signing.sign(tx.id, self.our_identity)
        return SignedTransaction(tx=tx).with_added_signatures(signature)

    def _counterparties(self, parties: Sequence[Party]) -> List[Party]:
        """Уникальные участники (по ключу) без нас, в исходном порядке."""
        seen = {self.our_identity.owning_key}
        result = []
        for party in parties:
            if party.owning_key not in seen:
                seen.add(party.owning_key)
                result.append(party)
        return result

    def _collect_signatures(
        self, stx: SignedTransaction, counterparties: Sequence[Party]
    ) -> SignedTransaction:
        """Сбор контр-подписей от всех контрагентов.

        Ждёт полный кворум; первый отказ, таймаут или разрыв прерывает всю
        операцию, уже полученные подписи отбрасываются.

        При досрочном выходе пул закрывается без ожидания: запросы, уже
        переданные контрагентам, дорабатывают в рабочих потоках, их ответы
        игнорируются. Поток-инициатор не блокируется на медленном
        контрагенте, а поздняя подпись ничего не фиксирует, так как
        finalize выполняет только сам flow.
        """
        if not counterparties:
            return stx

        config = self.services.config
        request = signature_request(stx)
        workers = config.max_workers or len(counterparties)
        deadline = time.monotonic() + config.signature_timeout_sec

        logger.info(
            f"Collecting signatures for {stx.id[:12]} from "
            f"{[p.name for p in counterparties]} (workers={workers})"
        )

        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="collect-sigs")
        futures: Dict[Future, Party] = {}
        try:
            futures = {
                pool.submit(self._request_signature, party, stx.id, request): party
                for party in counterparties
            }
            pending = set(futures)
            collected: List[TransactionSignature] = []

            while pending:
                self._check_cancelled(FlowState.COLLECTING_SIGNATURES.value)
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    waiting_on = ", ".join(sorted(futures[f].name for f in pending))
                    raise SessionFailure(
                        waiting_on,
                        f"timed out after {config.signature_timeout_sec}s awaiting signature",
                    )
                done, pending = wait(
                    pending,
                    timeout=min(config.cancel_poll_interval_sec, remaining),
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    collected.append(future.result())
        finally:
            for future in futures:
                future.cancel()
            pool.shutdown(wait=False, cancel_futures=True)

        return stx.with_added_signatures(*collected)

    def _request_signature(
        self, party: Party, tx_id: str, request: dict
    ) -> TransactionSignature:
        """Одна сессия: запрос подписи и проверка ответа.

        Любая ошибка транспорта или контрагента, не являющаяся FlowError,
        становится SessionFailure. SignatureRefused означает только явный
        отказ контрагента; негодная подпись в ответе считается сбоем сессии.
        """
        timeout = self.services.config.signature_timeout_sec
        try:
            session = self.services.transport.open_session(party)
        except FlowError:
            raise
        except Exception as e:
            raise SessionFailure(party.name, _describe(e))
        try:
            logger.debug(f"Requesting signature on {tx_id[:12]} from {party.name}")
            response = session.send_and_receive(request, timeout)
        except FlowError:
            raise
        except Exception as e:
            raise SessionFailure(party.name, _describe(e))
        finally:
            session.close()

        try:
            validate_signature_response(response)
        except SchemaValidationError as e:
            raise SessionFailure(party.name, f"malformed response: {e.message}")

        if response["status"] == STATUS_REFUSED:
            raise SignatureRefused(party.name, response["reason"])

        signature = TransactionSignature.model_validate(response["signature"])
        if signature.by != party.owning_key:
            raise SessionFailure(party.name, f"signature made by unexpected key {signature.by}")
        if not self.services.signing.verify(tx_id, signature):
            raise SessionFailure(party.name, "invalid signature")
        return signature

    def _finalize(self, stx: SignedTransaction) -> SignedTransaction:
        """Однократная попытка фиксации у нотариуса."""
        self._check_cancelled(FlowState.FINALIZING.value)
        self._advance(FlowState.FINALIZING)

        result = self.services.notary.commit(stx)
        if result.status == CommitStatus.CONFLICT:
            raise CommitConflict(stx.id, result.reason)
        if result.status == CommitStatus.REJECTED:
            raise CommitRejected(stx.id, result.reason)

        self._advance(FlowState.COMMITTED)
        logger.info(f"{type(self).__name__} committed {stx.id[:12]}")
        return stx
