"""
Amount — Сумма в конкретной валюте/токене

Immutable Pydantic модель. Количество хранится в минимальных единицах
(целое число), токен всегда путешествует вместе с количеством.
"""

from pydantic import BaseModel, Field, field_validator


class Amount(BaseModel):
    """
    Сумма обязательства.

    quantity может быть 0: нулевая сумма представима, но не проходит
    проверку выпуска в IOUContract.
    """

    quantity: int = Field(..., ge=0, description="Количество в минимальных единицах")
    token: str = Field(..., min_length=1, description="Валюта/токен (например, 'USD')")

    model_config = {"frozen": True}

    @field_validator("token")
    @classmethod
    def normalize_token(cls, v: str) -> str:
        """Код токена хранится в верхнем регистре."""
        return v.strip().upper()

    def is_positive(self) -> bool:
        return self.quantity > 0

    def same_token(self, other: "Amount") -> bool:
        return self.token == other.token

    def __str__(self) -> str:
        return f"{self.quantity} {self.token}"
