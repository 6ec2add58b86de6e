"""IOU Transfer Flow — передача позиции кредитора новому участнику.

Шаги инициатора:
1. Query: единственная текущая версия по linear_id
2. Authorization: инициатор — текущий lender
3. Build: выход = вход с подставленным кредитором, подписанты = old ∪ new participants
4. Self-validate: IOUContract до обращения к контрагентам
5. Local sign
6. Collect: контр-подписи всех остальных подписантов (полный кворум)
7. Finalize: однократная фиксация у нотариуса
"""

import logging
from typing import Optional
from uuid import UUID

from src.core.domain.party import Party
from src.core.domain.transaction import Command, SignedTransaction, TransactionState, WireTransaction
from src.core.errors import Unauthorized
from src.flows.flow_logic import FlowLogic, FlowState
from src.flows.services import FlowServices
from src.verification.iou_contract import IOUContract

logger = logging.getLogger("iou.flows")


class IOUTransferFlow(FlowLogic):
    """Flow инициатора передачи IOU."""

    def __init__(
        self,
        services: FlowServices,
        linear_id: UUID,
        new_lender: Party,
        contract: Optional[IOUContract] = None,
    ):
        super().__init__(services, contract)
        self.linear_id = linear_id
        self.new_lender = new_lender

    def _run(self) -> SignedTransaction:
        logger.info(
            f"Transfer of {self.linear_id} to {self.new_lender.name} "
            f"initiated by {self.our_identity.name}"
        )

        # 1. Query
        self._check_cancelled(FlowState.START.value)
        input_ref = self.services.vault.find_current(self.linear_id)
        input_iou = input_ref.state.data
        self._advance(FlowState.QUERIED)

        # 2. Authorization
        if input_iou.lender != self.our_identity:
            raise Unauthorized("IOU transfer can only be initiated by the IOU lender.")

        # 3. Build
        output_iou = input_iou.with_new_lender(self.new_lender)
        signers = input_iou.participant_keys | output_iou.participant_keys
        tx = WireTransaction(
            inputs=(input_ref,),
            outputs=(TransactionState(data=output_iou, contract=input_ref.state.contract),),
            commands=(Command.transfer(signers),),
            notary=self.services.notary.identity,
        )
        self._advance(FlowState.BUILT)

        # 4. Self-validate
        self._self_validate(tx)

        # 5. Local sign
        stx = self._sign_locally(tx)
        self._advance(FlowState.LOCALLY_SIGNED)

        # 6. Collect
        self._check_cancelled(FlowState.LOCALLY_SIGNED.value)
        self._advance(FlowState.COLLECTING_SIGNATURES)
        counterparties = self._counterparties(input_iou.participants + output_iou.participants)
        stx = self._collect_signatures(stx, counterparties)

        # 7. Finalize
        return self._finalize(stx)


def initiate_transfer(
    services: FlowServices, linear_id: UUID, new_lender: Party
) -> SignedTransaction:
    """Передача IOU: запуск IOUTransferFlow на узле services.our_identity."""
    return IOUTransferFlow(services, linear_id, new_lender).call()
