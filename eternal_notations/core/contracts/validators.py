"""
JSON Schema Contract Validators

Проверка словарей конфигурации нотаций (например, загруженных из JSON)
JSON Schema контрактами (Draft 2020-12) до построения pydantic моделей.

Контракт на каждую конфигурацию (contracts/schema/<имя>.json):
- scientific_config → ScientificConfig
- hyperscientific_config → HyperscientificConfig
- hypersplit_config → HypersplitConfig
- fraction_config → FractionConfig

Числовые поля принимают JSON числа или числовые строки ("1e400", "ee20")
для значений за пределами double. Схема проверяет форму словаря; доменные
правила (основание выше 1, сходимость, ненулевые множители) остаются за
моделями.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping

import jsonschema
from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).parent / "schema"


class SchemaLoader:
    """
    Загрузка и кэш контрактов.

    Каждая схема читается и проходит meta-validation один раз; валидатор
    строится по ней и переиспользуется всеми вызовами.
    """

    def __init__(self, schema_dir: Path = SCHEMA_DIR):
        self._schema_dir = Path(schema_dir)
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._validators: Dict[str, Draft202012Validator] = {}
        self._lock = threading.Lock()

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Схема по имени без расширения ('scientific_config').

        Raises:
            FileNotFoundError: Нет файла схемы
            ValueError: Схема не проходит meta-validation
        """
        return self.validator_for(schema_name).schema

    def validator_for(self, schema_name: str) -> Draft202012Validator:
        with self._lock:
            cached = self._validators.get(schema_name)
        if cached is not None:
            return cached

        path = self._schema_dir / f"{schema_name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"Schema not found: {path}")
        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e

        with self._lock:
            return self._validators.setdefault(schema_name, Draft202012Validator(schema))


_SCHEMA_LOADER = SchemaLoader()


class ContractValidator:
    """Проверка словаря одним контрактом."""

    def __init__(self, schema_name: str, loader: SchemaLoader = _SCHEMA_LOADER):
        self.schema_name = schema_name
        self._validator = loader.validator_for(schema_name)

    def validate(self, data: Mapping[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Первое нарушение контракта
        """
        self._validator.validate(data)

    def error_messages(self, data: Mapping[str, Any]) -> List[str]:
        """
        Все нарушения за один проход, "путь: сообщение", по порядку путей.

        Пустой список, если словарь проходит контракт.
        """
        errors = sorted(self._validator.iter_errors(data), key=lambda e: list(map(str, e.path)))
        return [f"{'/'.join(map(str, e.path)) or '<root>'}: {e.message}" for e in errors]


def _check(schema_name: str, data: Mapping[str, Any]) -> None:
    ContractValidator(schema_name).validate(data)


# =============================================================================
# ПРОВЕРКИ ПО КОНФИГУРАЦИЯМ (используются from_mapping моделей)
# =============================================================================


def validate_scientific_config(data: Mapping[str, Any]) -> None:
    """Raises jsonschema.ValidationError для словаря параметров scientifify."""
    _check("scientific_config", data)


def validate_hyperscientific_config(data: Mapping[str, Any]) -> None:
    """Raises jsonschema.ValidationError для словаря параметров hyperscientifify."""
    _check("hyperscientific_config", data)


def validate_hypersplit_config(data: Mapping[str, Any]) -> None:
    """Raises jsonschema.ValidationError для словаря параметров hypersplit."""
    _check("hypersplit_config", data)


def validate_fraction_config(data: Mapping[str, Any]) -> None:
    """Raises jsonschema.ValidationError для словаря параметров дробного приближения."""
    _check("fraction_config", data)
