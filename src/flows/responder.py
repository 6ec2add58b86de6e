"""IOU Transfer Responder — контр-подпись предложенной транзакции.

Вызывается один раз на входящую сессию. Не доверяет self-validation
инициатора:
1. Проверка сообщения по JSON Schema контракту
2. Проверка приложенных подписей
3. Наш ключ должен быть среди обязательных подписантов
4. IOUContract над транзакцией в полученном виде
5. Единственный выход — IOU обязательство

Отказ — это ответ {"status": "refused"}; responder никогда не инициирует
финализацию.
"""

import logging
from typing import Any, Dict, Optional

from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError as ModelValidationError

from src.core.contracts import validate_signature_request
from src.core.domain.iou_state import IOU_CONTRACT_ID
from src.core.domain.transaction import SignedTransaction
from src.core.errors import SignatureRefused
from src.flows.messages import refused_reply, signed_reply
from src.flows.services import FlowServices
from src.verification.iou_contract import IOUContract

logger = logging.getLogger("iou.flows")


class IOUTransferResponder:
    """Flow контрагента: перепроверка и контр-подпись."""

    def __init__(self, services: FlowServices, contract: Optional[IOUContract] = None):
        self.services = services
        self.contract = contract or IOUContract()

    def handle(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Обработка запроса подписи.

        Returns:
            signed_reply с нашей подписью либо refused_reply с причиной
        """
        us = self.services.our_identity
        try:
            stx = self.check_transaction(payload)
        except SignatureRefused as e:
            logger.warning(f"{us.name} refused to sign: {e.reason}")
            return refused_reply(e.reason)

        signature = self.services.signing.sign(stx.id, us)
        logger.info(f"{us.name} counter-signed {stx.id[:12]}")
        return signed_reply(signature)

    def check_transaction(self, payload: Dict[str, Any]) -> SignedTransaction:
        """Все проверки перед подписью.

        Raises:
            SignatureRefused: транзакция не должна быть подписана
        """
        us = self.services.our_identity

        try:
            validate_signature_request(payload)
            stx = SignedTransaction.model_validate(payload["transaction"])
        except SchemaValidationError as e:
            raise SignatureRefused(us.name, f"malformed request: {e.message}")
        except ModelValidationError as e:
            raise SignatureRefused(us.name, f"malformed transaction: {e.error_count()} errors")

        if not stx.sigs:
            raise SignatureRefused(us.name, "transaction carries no initiator signature")
        for sig in stx.sigs:
            if not self.services.signing.verify(stx.id, sig):
                raise SignatureRefused(us.name, f"invalid signature by {sig.by}")

        if us.owning_key not in stx.required_signers:
            raise SignatureRefused(us.name, "we are not a required signer")

        result = self.contract.verify(stx.tx)
        if not result.accepted:
            raise SignatureRefused(us.name, f"{result.rule.value}: {result.reason}")

        outputs = stx.tx.outputs
        if len(outputs) != 1 or outputs[0].contract != IOU_CONTRACT_ID:
            raise SignatureRefused(us.name, "This must be an IOU transaction.")

        return stx
