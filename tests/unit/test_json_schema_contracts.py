"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов сообщений сессии:
- Валидность самих схем
- Валидация правильных данных, полученных из Pydantic моделей
- Детекция нарушений required полей и типов
- Детекция нарушений constraints (pattern/minimum/const)
"""

import json

import pytest
from jsonschema import ValidationError

from src.core.contracts import (
    SchemaLoader,
    SignatureResponseValidator,
    SignedTransactionValidator,
    validate_signature_request,
    validate_signature_response,
    validate_signed_transaction,
)
from src.core.domain import (
    Command,
    Party,
    SignedTransaction,
    StateAndRef,
    StateRef,
    TransactionSignature,
    TransactionState,
    WireTransaction,
)
from src.flows.messages import refused_reply, signature_request, signed_reply


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def signed_transfer(iou, party_c) -> SignedTransaction:
    out = iou.with_new_lender(party_c)
    tx = WireTransaction(
        inputs=(StateAndRef(state=TransactionState(data=iou), ref=StateRef(tx_id="ab" * 32, index=0)),),
        outputs=(TransactionState(data=out),),
        commands=(Command.transfer(iou.participant_keys | out.participant_keys),),
        notary=Party(name="Notary", owning_key="key-n"),
    )
    return SignedTransaction(tx=tx).with_added_signatures(
        TransactionSignature(by="key-a", signature="0f" * 32)
    )


@pytest.fixture
def payload(signed_transfer) -> dict:
    return signed_transfer.model_dump(mode="json")


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class TestSchemaLoader:
    """Загрузка и meta-валидация схем."""

    @pytest.mark.parametrize(
        "schema_name", ["signed_transaction", "signature_request", "signature_response"]
    )
    def test_schemas_load(self, schema_name):
        schema = SchemaLoader().load_schema(schema_name)
        assert schema["$schema"].startswith("https://json-schema.org/draft/2020-12")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does_not_exist")

    def test_cache(self):
        loader = SchemaLoader()
        assert loader.load_schema("signed_transaction") is loader.load_schema("signed_transaction")


# =============================================================================
# SIGNED TRANSACTION
# =============================================================================


class TestSignedTransactionContract:
    """Контракт signed_transaction."""

    def test_model_dump_is_valid(self, payload):
        validate_signed_transaction(payload)

    def test_survives_json_transport(self, payload, signed_transfer):
        wire = json.loads(json.dumps(payload))
        validate_signed_transaction(wire)
        assert SignedTransaction.model_validate(wire).id == signed_transfer.id

    def test_missing_notary(self, payload):
        del payload["tx"]["notary"]
        with pytest.raises(ValidationError):
            validate_signed_transaction(payload)

    def test_negative_quantity(self, payload):
        payload["tx"]["outputs"][0]["data"]["amount"]["quantity"] = -5
        with pytest.raises(ValidationError):
            validate_signed_transaction(payload)

    def test_bad_state_ref(self, payload):
        payload["tx"]["inputs"][0]["ref"]["tx_id"] = "not-a-hash"
        with pytest.raises(ValidationError):
            validate_signed_transaction(payload)

    def test_extra_property(self, payload):
        payload["tx"]["outputs"][0]["data"]["paid"] = 10
        with pytest.raises(ValidationError):
            SignedTransactionValidator().validate(payload)

    def test_unrecognized_command_kind_passes_schema(self, payload):
        """Команды проверяет контракт, а не схема."""
        payload["tx"]["commands"][0]["kind"] = "Settle"
        validate_signed_transaction(payload)


# =============================================================================
# SESSION MESSAGES
# =============================================================================


class TestSessionMessages:
    """Контракты signature_request / signature_response."""

    def test_request_valid(self, signed_transfer):
        validate_signature_request(signature_request(signed_transfer))

    def test_request_wrong_type(self, signed_transfer):
        message = signature_request(signed_transfer)
        message["type"] = "finality"
        with pytest.raises(ValidationError):
            validate_signature_request(message)

    def test_request_invalid_transaction(self, signed_transfer):
        message = signature_request(signed_transfer)
        del message["transaction"]["sigs"]
        with pytest.raises(ValidationError):
            validate_signature_request(message)

    def test_signed_reply_valid(self):
        validate_signature_response(
            signed_reply(TransactionSignature(by="key-b", signature="aa" * 32))
        )

    def test_refused_reply_valid(self):
        validate_signature_response(refused_reply("transfer_signers: missing borrower"))

    def test_signed_reply_without_signature(self):
        with pytest.raises(ValidationError):
            validate_signature_response({"status": "signed"})

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            SignatureResponseValidator().validate({"status": "maybe"})
