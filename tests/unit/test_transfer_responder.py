"""Тесты для IOUTransferResponder.

Responder не доверяет инициатору и перепроверяет транзакцию в
полученном виде. Проверяет:
1. Подпись валидной передачи
2. Отказ при нарушении контракта (с указанием правила)
3. Отказ при чужом контракте выхода
4. Отказ при отсутствующих/невалидных подписях и чужих транзакциях
5. Отказ при некорректном сообщении
"""

import pytest

from src.core.domain import (
    Command,
    SignedTransaction,
    TransactionSignature,
    TransactionState,
    WireTransaction,
)
from src.core.errors import SignatureRefused
from src.flows import IOUTransferResponder
from src.flows.messages import STATUS_REFUSED, STATUS_SIGNED, signature_request


@pytest.fixture
def build_transfer(network, issued):
    """Фабрика транзакции передачи текущей версии issued."""

    def _build(new_lender, signers=None, contract=None) -> WireTransaction:
        current = network.ledger.find_current(issued.linear_id)
        old = current.state.data
        new = old.with_new_lender(new_lender)
        if signers is None:
            signers = old.participant_keys | new.participant_keys
        return WireTransaction(
            inputs=(current,),
            outputs=(TransactionState(data=new, contract=contract or current.state.contract),),
            commands=(Command.transfer(signers),),
            notary=network.notary,
        )

    return _build


def signed_by(network, tx: WireTransaction, *parties) -> SignedTransaction:
    return SignedTransaction(tx=tx).with_added_signatures(
        *(network.signing.sign(tx.id, p) for p in parties)
    )


class TestResponderSigns:
    """Валидная транзакция подписывается."""

    def test_borrower_countersigns(self, network, node_a, node_b, node_c, build_transfer):
        tx = build_transfer(node_c.party)
        reply = IOUTransferResponder(node_b.services).handle(
            signature_request(signed_by(network, tx, node_a.party))
        )

        assert reply["status"] == STATUS_SIGNED
        signature = TransactionSignature.model_validate(reply["signature"])
        assert signature.by == node_b.party.owning_key
        assert network.signing.verify(tx.id, signature)

    def test_check_transaction_returns_parsed(self, network, node_a, node_c, build_transfer):
        tx = build_transfer(node_c.party)
        stx = IOUTransferResponder(node_c.services).check_transaction(
            signature_request(signed_by(network, tx, node_a.party))
        )
        assert stx.id == tx.id


class TestResponderRefuses:
    """Отказы responder'а."""

    def test_contract_violation_cites_rule(self, network, node_a, node_b, node_c, build_transfer):
        """Набор подписантов без borrower'а — отказ с правилом transfer_signers."""
        tx = build_transfer(
            node_c.party, signers={node_a.party.owning_key, node_c.party.owning_key}
        )
        reply = IOUTransferResponder(node_c.services).handle(
            signature_request(signed_by(network, tx, node_a.party))
        )
        assert reply["status"] == STATUS_REFUSED
        assert reply["reason"].startswith("transfer_signers")

    def test_not_a_required_signer(self, network, node_a, node_b, node_c, build_transfer):
        outsider = network.create_node("PartyD")
        tx = build_transfer(node_c.party)
        with pytest.raises(SignatureRefused) as exc_info:
            IOUTransferResponder(outsider.services).check_transaction(
                signature_request(signed_by(network, tx, node_a.party))
            )
        assert "not a required signer" in exc_info.value.reason

    def test_foreign_contract_output(self, network, node_a, node_b, node_c, build_transfer):
        tx = build_transfer(node_c.party, contract="cash.contract.CashContract")
        reply = IOUTransferResponder(node_b.services).handle(
            signature_request(signed_by(network, tx, node_a.party))
        )
        assert reply == {"status": STATUS_REFUSED, "reason": "This must be an IOU transaction."}

    def test_unsigned_proposal(self, network, node_b, node_c, build_transfer):
        tx = build_transfer(node_c.party)
        reply = IOUTransferResponder(node_b.services).handle(
            signature_request(SignedTransaction(tx=tx))
        )
        assert reply["status"] == STATUS_REFUSED
        assert "no initiator signature" in reply["reason"]

    def test_invalid_attached_signature(self, network, node_a, node_b, node_c, build_transfer):
        tx = build_transfer(node_c.party)
        forged = SignedTransaction(tx=tx).with_added_signatures(
            TransactionSignature(by=node_a.party.owning_key, signature="00" * 32)
        )
        reply = IOUTransferResponder(node_b.services).handle(signature_request(forged))
        assert reply["status"] == STATUS_REFUSED
        assert "invalid signature" in reply["reason"]

    def test_malformed_request(self, node_b):
        reply = IOUTransferResponder(node_b.services).handle({"type": "signature_request"})
        assert reply["status"] == STATUS_REFUSED
        assert reply["reason"].startswith("malformed request")

    def test_tampered_after_signing(self, network, node_a, node_b, node_c, build_transfer):
        """Изменённая после подписи транзакция: подпись инициатора не сходится."""
        tx = build_transfer(node_c.party)
        message = signature_request(signed_by(network, tx, node_a.party))
        message["transaction"]["tx"]["outputs"][0]["data"]["amount"]["quantity"] = 1
        reply = IOUTransferResponder(node_b.services).handle(message)
        assert reply["status"] == STATUS_REFUSED
        assert "invalid signature" in reply["reason"]
