"""Flows — многосторонние протоколы выпуска и передачи IOU.

- IOUIssueFlow: выпуск обязательства lender'ом
- IOUTransferFlow: передача позиции кредитора (инициатор)
- IOUTransferResponder: перепроверка и контр-подпись (контрагент)
"""

from .config import FlowConfig
from .flow_logic import FlowLogic, FlowState
from .issue_flow import IOUIssueFlow, issue_iou
from .responder import IOUTransferResponder
from .services import (
    CommitResult,
    CommitStatus,
    FlowServices,
    FlowSession,
    NotaryService,
    SessionTransport,
    SigningService,
    VaultService,
)
from .transfer_flow import IOUTransferFlow, initiate_transfer

__all__ = [
    "FlowConfig",
    "FlowLogic",
    "FlowState",
    "IOUIssueFlow",
    "issue_iou",
    "IOUTransferFlow",
    "initiate_transfer",
    "IOUTransferResponder",
    "CommitResult",
    "CommitStatus",
    "FlowServices",
    "FlowSession",
    "NotaryService",
    "SessionTransport",
    "SigningService",
    "VaultService",
]
