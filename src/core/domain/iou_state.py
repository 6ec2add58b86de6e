"""
IOUState — Версия двустороннего долгового обязательства

Immutable Pydantic модель. Каждая версия обязательства — отдельное значение:
transfer не изменяет состояние, а порождает новую версию с тем же linear_id.

Инварианты валидного состояния (проверяются IOUContract, не конструктором):
- amount > 0
- lender != borrower
"""

from typing import Final, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .amount import Amount
from .party import Party


# Идентификатор контракта, которым управляются IOU состояния
IOU_CONTRACT_ID: Final[str] = "iou.contract.IOUContract"


class IOUState(BaseModel):
    """
    Долговое обязательство между lender и borrower.

    linear_id стабилен для всех версий одного обязательства и никогда
    не переиспользуется.
    """

    linear_id: UUID = Field(default_factory=uuid4, description="Стабильный идентификатор обязательства")
    amount: Amount = Field(..., description="Сумма долга")
    lender: Party = Field(..., description="Текущий кредитор")
    borrower: Party = Field(..., description="Должник")

    model_config = {"frozen": True}

    @property
    def participants(self) -> Tuple[Party, Party]:
        """Участники, которые должны быть уведомлены и дать согласие."""
        return (self.lender, self.borrower)

    @property
    def participant_keys(self) -> frozenset:
        return frozenset(party.owning_key for party in self.participants)

    def with_new_lender(self, new_lender: Party) -> "IOUState":
        """
        Подстановка кредитора: копия состояния, в которой изменён только lender.

        Не проверяет, что кредитор действительно изменился — это правило
        контракта (transfer_lender_must_change).
        """
        return self.model_copy(update={"lender": new_lender})

    def __str__(self) -> str:
        return f"IOU({self.linear_id}: {self.borrower} owes {self.lender} {self.amount})"
