"""Сообщения flow-сессии: запрос контр-подписи и ответы."""

from typing import Any, Dict

from src.core.domain.transaction import SignedTransaction, TransactionSignature

SIGNATURE_REQUEST = "signature_request"
STATUS_SIGNED = "signed"
STATUS_REFUSED = "refused"


def signature_request(stx: SignedTransaction) -> Dict[str, Any]:
    return {"type": SIGNATURE_REQUEST, "transaction": stx.model_dump(mode="json")}


def signed_reply(signature: TransactionSignature) -> Dict[str, Any]:
    return {"status": STATUS_SIGNED, "signature": signature.model_dump(mode="json")}


def refused_reply(reason: str) -> Dict[str, Any]:
    return {"status": STATUS_REFUSED, "reason": reason}
