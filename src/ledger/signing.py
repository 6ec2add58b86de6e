"""
Signing — упрощённый сервис подписей для локальной сети

HMAC-SHA256 над идентификатором транзакции с секретом, закреплённым за
owning_key участника. Один экземпляр разделяется узлами LocalNetwork:
секреты нужны и для подписи, и для проверки.
"""

import hashlib
import hmac
import secrets
import threading
from typing import Dict

from src.core.domain.party import Party
from src.core.domain.transaction import TransactionSignature


class HmacSigningService:
    """Реестр ключей участников и HMAC подписи."""

    def __init__(self):
        self._lock = threading.Lock()
        self._secrets: Dict[str, bytes] = {}

    def generate_party(self, name: str) -> Party:
        """Новый участник со свежим ключом."""
        secret = secrets.token_bytes(32)
        owning_key = hashlib.sha256(secret).hexdigest()[:16]
        with self._lock:
            self._secrets[owning_key] = secret
        return Party(name=name, owning_key=owning_key)

    def has_key(self, owning_key: str) -> bool:
        with self._lock:
            return owning_key in self._secrets

    def sign(self, tx_id: str, party: Party) -> TransactionSignature:
        """
        Raises:
            KeyError: Если ключ участника неизвестен
        """
        with self._lock:
            secret = self._secrets.get(party.owning_key)
        if secret is None:
            raise KeyError(f"No signing key held for {party.name} ({party.owning_key})")
        digest = hmac.new(secret, tx_id.encode("utf-8"), hashlib.sha256).hexdigest()
        return TransactionSignature(by=party.owning_key, signature=digest)

    def verify(self, tx_id: str, signature: TransactionSignature) -> bool:
        with self._lock:
            secret = self._secrets.get(signature.by)
        if secret is None:
            return False
        expected = hmac.new(secret, tx_id.encode("utf-8"), hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature.signature)
