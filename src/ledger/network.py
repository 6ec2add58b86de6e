"""
LocalNetwork — узлы и сессии внутри одного процесса

Каждый узел — участник со своими FlowServices; сессии маршрутизируются к
responder узла-контрагента. Сообщения проходят через JSON, как по сети.
Отключённый или неизвестный участник даёт SessionFailure.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from src.core.domain.amount import Amount
from src.core.domain.iou_state import IOUState
from src.core.domain.party import Party
from src.core.domain.transaction import SignedTransaction
from src.core.errors import FlowError, SessionFailure
from src.flows.config import FlowConfig
from src.flows.issue_flow import IOUIssueFlow
from src.flows.responder import IOUTransferResponder
from src.flows.services import FlowServices
from src.flows.transfer_flow import IOUTransferFlow
from src.ledger.in_memory_ledger import InMemoryLedger
from src.ledger.signing import HmacSigningService

logger = logging.getLogger("iou.ledger")

ResponderFactory = Callable[[FlowServices], Any]


# =============================================================================
# SESSIONS
# =============================================================================


class LocalFlowSession:
    """Сессия с одним контрагентом; на каждую сессию — новый responder."""

    def __init__(self, network: "LocalNetwork", initiator: Party, counterparty: Party):
        self.network = network
        self.initiator = initiator
        self.counterparty = counterparty
        self._closed = False

    def send_and_receive(self, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        """
        Доставка запроса и синхронный ответ responder'а.

        timeout не применяется локально: дедлайн держит инициатор.
        """
        if self._closed:
            raise SessionFailure(self.counterparty.name, "session closed")
        node = self.network.reachable_node(self.counterparty)
        wire_payload = json.loads(json.dumps(payload))
        logger.debug(f"Session {self.initiator.name} -> {self.counterparty.name}: {wire_payload.get('type')}")
        responder = node.responder_factory(node.services)
        try:
            reply = responder.handle(wire_payload)
        except FlowError:
            raise
        except Exception as e:
            # Сбой на стороне контрагента доходит до инициатора как обрыв сессии
            logger.warning(f"Responder {self.counterparty.name} crashed: {type(e).__name__}: {e}")
            raise SessionFailure(self.counterparty.name, f"counterparty error: {type(e).__name__}")
        # Разрыв во время обработки: ответ не доходит
        self.network.reachable_node(self.counterparty)
        return json.loads(json.dumps(reply))

    def close(self) -> None:
        self._closed = True


class LocalSessionTransport:
    """SessionTransport узла: открывает сессии от имени our_identity."""

    def __init__(self, network: "LocalNetwork", our_identity: Party):
        self.network = network
        self.our_identity = our_identity

    def open_session(self, party: Party) -> LocalFlowSession:
        self.network.reachable_node(party)
        return LocalFlowSession(self.network, self.our_identity, party)


# =============================================================================
# NODES
# =============================================================================


@dataclass
class LocalNode:
    """Участник сети со своими сервисами."""

    party: Party
    services: FlowServices
    responder_factory: ResponderFactory = field(default=IOUTransferResponder)

    def issue(self, amount: Amount, borrower: Party, linear_id: Optional[UUID] = None) -> SignedTransaction:
        """Выпуск IOU, где этот узел — lender."""
        state_kwargs: Dict[str, Any] = {"amount": amount, "lender": self.party, "borrower": borrower}
        if linear_id is not None:
            state_kwargs["linear_id"] = linear_id
        return IOUIssueFlow(self.services, IOUState(**state_kwargs)).call()

    def transfer(self, linear_id: UUID, new_lender: Party) -> SignedTransaction:
        return IOUTransferFlow(self.services, linear_id, new_lender).call()

    def transfer_flow(self, linear_id: UUID, new_lender: Party) -> IOUTransferFlow:
        """Flow без запуска (для отмены или инспекции состояний)."""
        return IOUTransferFlow(self.services, linear_id, new_lender)


class LocalNetwork:
    """Набор узлов, общий реестр и нотариус."""

    def __init__(self, notary_name: str = "Notary", config: Optional[FlowConfig] = None):
        self.config = config or FlowConfig()
        self.signing = HmacSigningService()
        self.ledger = InMemoryLedger(self.signing.generate_party(notary_name), self.signing)

        self._lock = threading.Lock()
        self._nodes: Dict[str, LocalNode] = {}
        self._disconnected: set = set()

    @property
    def notary(self) -> Party:
        return self.ledger.identity

    def create_node(
        self,
        name: str,
        responder_factory: ResponderFactory = IOUTransferResponder,
    ) -> LocalNode:
        party = self.signing.generate_party(name)
        services = FlowServices(
            our_identity=party,
            vault=self.ledger,
            signing=self.signing,
            transport=LocalSessionTransport(self, party),
            notary=self.ledger,
            config=self.config,
        )
        node = LocalNode(party=party, services=services, responder_factory=responder_factory)
        with self._lock:
            self._nodes[party.owning_key] = node
        logger.debug(f"Node {name} joined the network ({party.owning_key})")
        return node

    def disconnect(self, party: Party) -> None:
        with self._lock:
            self._disconnected.add(party.owning_key)

    def reconnect(self, party: Party) -> None:
        with self._lock:
            self._disconnected.discard(party.owning_key)

    def reachable_node(self, party: Party) -> LocalNode:
        """
        Raises:
            SessionFailure: участник неизвестен или отключён
        """
        with self._lock:
            node = self._nodes.get(party.owning_key)
            disconnected = party.owning_key in self._disconnected
        if node is None:
            raise SessionFailure(party.name, "unknown peer")
        if disconnected:
            raise SessionFailure(party.name, "peer disconnected")
        return node
