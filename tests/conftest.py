"""Общие фикстуры: локальная сеть с тремя участниками и выпущенный IOU."""

import pytest

from src.core.domain import Amount, IOUState, Party
from src.flows import FlowConfig
from src.ledger import LocalNetwork


@pytest.fixture
def party_a() -> Party:
    return Party(name="PartyA", owning_key="key-a")


@pytest.fixture
def party_b() -> Party:
    return Party(name="PartyB", owning_key="key-b")


@pytest.fixture
def party_c() -> Party:
    return Party(name="PartyC", owning_key="key-c")


@pytest.fixture
def usd_100() -> Amount:
    return Amount(quantity=100, token="USD")


@pytest.fixture
def iou(party_a, party_b, usd_100) -> IOUState:
    """S1: A — lender, B — borrower, 100 USD."""
    return IOUState(amount=usd_100, lender=party_a, borrower=party_b)


@pytest.fixture
def network() -> LocalNetwork:
    return LocalNetwork(config=FlowConfig(signature_timeout_sec=2.0, cancel_poll_interval_sec=0.01))


@pytest.fixture
def node_a(network):
    return network.create_node("PartyA")


@pytest.fixture
def node_b(network):
    return network.create_node("PartyB")


@pytest.fixture
def node_c(network):
    return network.create_node("PartyC")


@pytest.fixture
def issued(network, node_a, node_b, usd_100):
    """IOU, выпущенный A на B и зафиксированный в реестре."""
    stx = node_a.issue(usd_100, node_b.party)
    return stx.tx.outputs[0].data
