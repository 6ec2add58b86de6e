"""IOU Issue Flow — выпуск нового обязательства.

Инициирует lender: транзакция без inputs с одним выходом, подписанты —
lender и borrower. Borrower перепроверяет её тем же responder, что и
при передаче.
"""

import logging
from typing import Optional

from src.core.domain.iou_state import IOU_CONTRACT_ID, IOUState
from src.core.domain.transaction import Command, SignedTransaction, TransactionState, WireTransaction
from src.core.errors import Unauthorized
from src.flows.flow_logic import FlowLogic, FlowState
from src.flows.services import FlowServices
from src.verification.iou_contract import IOUContract

logger = logging.getLogger("iou.flows")


class IOUIssueFlow(FlowLogic):
    """Flow выпуска IOU. Шаг QUERIED пропускается: входов нет."""

    def __init__(
        self,
        services: FlowServices,
        state: IOUState,
        contract: Optional[IOUContract] = None,
    ):
        super().__init__(services, contract)
        self.iou = state

    def _run(self) -> SignedTransaction:
        logger.info(f"Issue of {self.iou} initiated by {self.our_identity.name}")

        if self.iou.lender != self.our_identity:
            raise Unauthorized("IOU issuance can only be initiated by the IOU lender.")

        tx = WireTransaction(
            outputs=(TransactionState(data=self.iou, contract=IOU_CONTRACT_ID),),
            commands=(Command.issue(self.iou.participant_keys),),
            notary=self.services.notary.identity,
        )
        self._advance(FlowState.BUILT)

        self._self_validate(tx)

        stx = self._sign_locally(tx)
        self._advance(FlowState.LOCALLY_SIGNED)

        self._check_cancelled(FlowState.LOCALLY_SIGNED.value)
        self._advance(FlowState.COLLECTING_SIGNATURES)
        stx = self._collect_signatures(stx, self._counterparties(self.iou.participants))

        return self._finalize(stx)


def issue_iou(services: FlowServices, state: IOUState) -> SignedTransaction:
    """Выпуск IOU: запуск IOUIssueFlow на узле services.our_identity."""
    return IOUIssueFlow(services, state).call()
