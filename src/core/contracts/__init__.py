"""
Contract Validation Module

Модуль для валидации JSON сообщений, которыми обмениваются стороны flow.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    SignatureRequestValidator,
    SignatureResponseValidator,
    SignedTransactionValidator,
    validate_signature_request,
    validate_signature_response,
    validate_signed_transaction,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "SignedTransactionValidator",
    "SignatureRequestValidator",
    "SignatureResponseValidator",
    # Functions
    "validate_signed_transaction",
    "validate_signature_request",
    "validate_signature_response",
]
