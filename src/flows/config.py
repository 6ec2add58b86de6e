"""Конфигурация flow."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FlowConfig:
    """Конфигурация сбора подписей.

    - signature_timeout_sec: общий дедлайн ожидания всех контр-подписей
    - cancel_poll_interval_sec: период проверки отмены во время ожидания
    - max_workers: число параллельных запросов подписи (None = по числу контрагентов)
    """

    signature_timeout_sec: float = 30.0
    cancel_poll_interval_sec: float = 0.05
    max_workers: Optional[int] = None

    def __post_init__(self):
        if self.signature_timeout_sec <= 0:
            raise ValueError(f"signature_timeout_sec must be positive: {self.signature_timeout_sec}")
        if self.cancel_poll_interval_sec <= 0:
            raise ValueError(
                f"cancel_poll_interval_sec must be positive: {self.cancel_poll_interval_sec}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1: {self.max_workers}")
