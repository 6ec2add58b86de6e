"""
Party — Идентичность участника реестра

Immutable Pydantic модель: имя участника и ключ, которым он подписывает
транзакции. Сравнение и хеширование — по значению.
"""

from pydantic import BaseModel, Field


class Party(BaseModel):
    """
    Участник реестра (lender, borrower, notary).

    owning_key — идентификатор подписывающего ключа; именно ключи
    фигурируют в наборе подписантов команды.
    """

    name: str = Field(..., min_length=1, description="Имя участника (например, 'PartyA')")
    owning_key: str = Field(..., min_length=1, description="Идентификатор ключа подписи")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return self.name
