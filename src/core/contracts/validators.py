"""
JSON Schema Contract Validators

Модуль для валидации сообщений flow-сессий согласно формальным JSON Schema
контрактам. Использует библиотеку jsonschema для проверки соответствия
данных схемам до десериализации в Pydantic модели.

Схемы:
- signed_transaction.json (транзакция с подписями)
- signature_request.json (запрос контр-подписи)
- signature_response.json (подпись или отказ)
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Автоматически находит схемы в contracts/schema/ относительно корня проекта.
    """

    def __init__(self):
        # Определяем корень проекта (4 уровня вверх от этого файла)
        self._schema_dir = Path(__file__).parent.parent.parent.parent / "contracts" / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'signed_transaction')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            json.JSONDecodeError: Если файл не является валидным JSON
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)


class SignedTransactionValidator(ContractValidator):
    """Валидатор для signed_transaction контракта."""

    def __init__(self):
        super().__init__("signed_transaction")


class SignatureRequestValidator(ContractValidator):
    """Валидатор для signature_request контракта."""

    def __init__(self):
        super().__init__("signature_request")


class SignatureResponseValidator(ContractValidator):
    """Валидатор для signature_response контракта."""

    def __init__(self):
        super().__init__("signature_response")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_signed_transaction(data: Dict[str, Any]) -> None:
    """
    Валидация signed_transaction данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    SignedTransactionValidator().validate(data)


def validate_signature_request(data: Dict[str, Any]) -> None:
    """
    Валидация запроса контр-подписи, включая вложенную транзакцию.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    SignatureRequestValidator().validate(data)
    SignedTransactionValidator().validate(data["transaction"])


def validate_signature_response(data: Dict[str, Any]) -> None:
    """
    Валидация ответа контрагента.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    SignatureResponseValidator().validate(data)
