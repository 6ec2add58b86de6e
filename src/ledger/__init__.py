"""Ledger — in-memory реализации внешних коллабораторов.

- InMemoryLedger: текущие/потреблённые версии и нотариус
- HmacSigningService: ключи участников и подписи
- LocalNetwork: узлы и сессии внутри процесса
"""

from .in_memory_ledger import InMemoryLedger
from .network import LocalFlowSession, LocalNetwork, LocalNode, LocalSessionTransport
from .signing import HmacSigningService

__all__ = [
    "InMemoryLedger",
    "HmacSigningService",
    "LocalNetwork",
    "LocalNode",
    "LocalFlowSession",
    "LocalSessionTransport",
]
