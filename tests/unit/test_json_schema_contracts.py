"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов конфигураций нотаций:
- Валидность самих схем
- Валидация правильных данных
- Детекция неизвестных полей (additionalProperties)
- Детекция нарушений типов
- Детекция нарушений constraints (min/maxItems/enum/pattern)
- Интеграция с Pydantic моделями
"""

import json

import pytest
from jsonschema import ValidationError

from eternal_notations.core.contracts import (
    ContractValidator,
    SchemaLoader,
    validate_fraction_config,
    validate_hyperscientific_config,
    validate_hypersplit_config,
    validate_scientific_config,
)
from eternal_notations.core.domain.config import FractionConfig, HypersplitConfig, ScientificConfig
from eternal_notations.core.math.extended_real import INF

SCHEMA_NAMES = [
    "scientific_config",
    "hyperscientific_config",
    "hypersplit_config",
    "fraction_config",
]


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def valid_scientific_config():
    """Валидный scientific_config для тестирования."""
    return {
        "base": 10,
        "rounding": 0.01,
        "significant_digits": None,
        "grid": [3],
        "mantissa_power": 0,
        "exp_multiplier": 1,
    }


@pytest.fixture
def valid_hyperscientific_config():
    """Валидный hyperscientific_config для тестирования."""
    return {
        "base": "10",
        "rounding": 0,
        "grid": 1,
        "hypermantissa_power": 1,
        "exp_multiplier": 1,
        "hyperexp_multiplier": 2,
    }


@pytest.fixture
def valid_hypersplit_config():
    """Валидный hypersplit_config для тестирования."""
    return {
        "base": 10,
        "maximums": [10, "1e10", 10],
        "original_maximums": None,
        "minnum": 1,
        "grid": [1],
        "hypergrid": [1],
        "pentagrid": 1,
        "exp_multiplier": 1,
        "hyperexp_multiplier": 1,
        "pentaexp_multiplier": 1,
    }


@pytest.fixture
def valid_fraction_config():
    """Валидный fraction_config для тестирования."""
    return {
        "precision": -1000,
        "form": "mixed",
        "max_iterations": 20,
        "max_denominator": "1e400",
        "strict_max_denominator": True,
        "max_numerator": "inf",
        "strict_max_numerator": False,
    }


# =============================================================================
# TESTS: SCHEMA LOADER
# =============================================================================


def test_schema_loader_loads_all_schemas():
    """Тест загрузки всех обязательных схем."""
    loader = SchemaLoader()

    for name in SCHEMA_NAMES:
        schema = loader.load_schema(name)
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False


def test_schema_loader_caches_schemas():
    """Тест кэширования загруженных схем."""
    loader = SchemaLoader()

    first = loader.load_schema("scientific_config")
    second = loader.load_schema("scientific_config")

    assert first is second


def test_schema_loader_raises_on_missing_schema():
    """Тест ошибки при отсутствии схемы."""
    loader = SchemaLoader()

    with pytest.raises(FileNotFoundError):
        loader.load_schema("nonexistent_schema")


def test_schema_loader_raises_on_missing_directory(tmp_path):
    """Тест ошибки при отсутствии директории схем."""
    with pytest.raises(RuntimeError, match="Schema directory not found"):
        SchemaLoader(tmp_path / "missing")


def test_schema_loader_rejects_invalid_schema(tmp_path):
    """Тест meta-validation: невалидная схема отклоняется."""
    (tmp_path / "broken.json").write_text(json.dumps({"type": 42}), encoding="utf-8")
    loader = SchemaLoader(tmp_path)

    with pytest.raises(ValueError, match="Invalid JSON Schema"):
        loader.load_schema("broken")


def test_contract_validator_with_custom_loader(tmp_path):
    """Тест ContractValidator с собственным загрузчиком."""
    schema = {"type": "object", "properties": {"base": {"type": "number"}}, "required": ["base"]}
    (tmp_path / "custom.json").write_text(json.dumps(schema), encoding="utf-8")

    validator = ContractValidator("custom", loader=SchemaLoader(tmp_path))

    assert validator.error_messages({"base": 10}) == []
    assert validator.error_messages({}) == ["<root>: 'base' is a required property"]


def test_schema_loader_reuses_validator():
    """Тест: один валидатор на схему для всех вызовов."""
    loader = SchemaLoader()

    assert loader.validator_for("fraction_config") is loader.validator_for("fraction_config")


# =============================================================================
# TESTS: SCIENTIFIC CONFIG
# =============================================================================


def test_scientific_config_validator_accepts_valid_data(valid_scientific_config):
    """Тест валидации корректного scientific_config."""
    validator = ContractValidator("scientific_config")

    validator.validate(valid_scientific_config)
    assert validator.error_messages(valid_scientific_config) == []


def test_scientific_config_validate_function(valid_scientific_config):
    """Тест convenience функции validate_scientific_config."""
    validate_scientific_config(valid_scientific_config)


def test_scientific_config_accepts_empty_mapping():
    """Тест: все поля необязательны."""
    validate_scientific_config({})


def test_scientific_config_rejects_unknown_field(valid_scientific_config):
    """Тест детекции неизвестного поля."""
    invalid_data = valid_scientific_config.copy()
    invalid_data["mantisa_power"] = 1

    with pytest.raises(ValidationError) as exc_info:
        validate_scientific_config(invalid_data)

    assert "mantisa_power" in str(exc_info.value)


@pytest.mark.parametrize("raw", ["1e400", "ee20", "-inf", "Infinity", "+.5", "e-1e20", "1.5E+3"])
def test_scientific_config_accepts_numeric_strings(raw):
    """Тест pattern числовых строк за пределами double."""
    validate_scientific_config({"base": raw})


@pytest.mark.parametrize("raw", ["ten", "1e", "", "1,5", "e"])
def test_scientific_config_rejects_non_numeric_strings(raw):
    """Тест детекции строк, не являющихся числом."""
    with pytest.raises(ValidationError):
        validate_scientific_config({"base": raw})


def test_scientific_config_rejects_wrong_type():
    """Тест детекции неправильного типа."""
    with pytest.raises(ValidationError):
        validate_scientific_config({"base": [10]})

    with pytest.raises(ValidationError):
        validate_scientific_config({"significant_digits": 2.5})


def test_scientific_config_rejects_zero_significant_digits():
    """Тест constraint significant_digits >= 1."""
    with pytest.raises(ValidationError):
        validate_scientific_config({"significant_digits": 0})


def test_scientific_config_rejects_nested_grid():
    """Тест детекции вложенных сеток."""
    with pytest.raises(ValidationError):
        validate_scientific_config({"grid": [[3]]})


# =============================================================================
# TESTS: HYPERSCIENTIFIC CONFIG
# =============================================================================


def test_hyperscientific_config_validator_accepts_valid_data(valid_hyperscientific_config):
    """Тест валидации корректного hyperscientific_config."""
    validator = ContractValidator("hyperscientific_config")

    assert validator.error_messages(valid_hyperscientific_config) == []
    validate_hyperscientific_config(valid_hyperscientific_config)


def test_hyperscientific_config_rejects_scientific_only_field(valid_hyperscientific_config):
    """Тест: mantissa_power принадлежит только scientific контракту."""
    invalid_data = valid_hyperscientific_config.copy()
    invalid_data["mantissa_power"] = 1

    with pytest.raises(ValidationError):
        validate_hyperscientific_config(invalid_data)


def test_hyperscientific_config_error_messages_reports_all():
    """Тест error_messages: все нарушения за один проход, с путями."""
    validator = ContractValidator("hyperscientific_config")

    messages = validator.error_messages({"base": "ten", "unknown": 1})

    assert len(messages) == 2
    assert messages[0].startswith("<root>: ")
    assert "unknown" in messages[0]
    assert messages[1].startswith("base: ")


# =============================================================================
# TESTS: HYPERSPLIT CONFIG
# =============================================================================


def test_hypersplit_config_validator_accepts_valid_data(valid_hypersplit_config):
    """Тест валидации корректного hypersplit_config."""
    validator = ContractValidator("hypersplit_config")

    assert validator.error_messages(valid_hypersplit_config) == []
    validate_hypersplit_config(valid_hypersplit_config)


def test_hypersplit_config_accepts_original_maximums_list(valid_hypersplit_config):
    """Тест original_maximums как списка."""
    data = valid_hypersplit_config.copy()
    data["original_maximums"] = [100, 10, 10]

    validate_hypersplit_config(data)


def test_hypersplit_config_rejects_too_many_maximums(valid_hypersplit_config):
    """Тест constraint maxItems = 3."""
    invalid_data = valid_hypersplit_config.copy()
    invalid_data["maximums"] = [10, 10, 10, 10]

    with pytest.raises(ValidationError):
        validate_hypersplit_config(invalid_data)


def test_hypersplit_config_rejects_scalar_maximums(valid_hypersplit_config):
    """Тест: maximums — только список."""
    invalid_data = valid_hypersplit_config.copy()
    invalid_data["maximums"] = 10

    with pytest.raises(ValidationError):
        validate_hypersplit_config(invalid_data)


# =============================================================================
# TESTS: FRACTION CONFIG
# =============================================================================


def test_fraction_config_validator_accepts_valid_data(valid_fraction_config):
    """Тест валидации корректного fraction_config."""
    validator = ContractValidator("fraction_config")

    assert validator.error_messages(valid_fraction_config) == []
    validate_fraction_config(valid_fraction_config)


@pytest.mark.parametrize("form", ["continued", "pair", "mixed", "mixed_conventional"])
def test_fraction_config_accepts_all_forms(form):
    """Тест enum формы результата."""
    validate_fraction_config({"form": form})


def test_fraction_config_rejects_invalid_enum(valid_fraction_config):
    """Тест детекции неизвестной формы."""
    invalid_data = valid_fraction_config.copy()
    invalid_data["form"] = "decimal"

    with pytest.raises(ValidationError):
        validate_fraction_config(invalid_data)


def test_fraction_config_rejects_non_boolean_strict_flag(valid_fraction_config):
    """Тест детекции неправильного типа флага."""
    invalid_data = valid_fraction_config.copy()
    invalid_data["strict_max_denominator"] = "yes"

    with pytest.raises(ValidationError):
        validate_fraction_config(invalid_data)


def test_fraction_config_rejects_zero_iterations(valid_fraction_config):
    """Тест constraint max_iterations >= 1."""
    invalid_data = valid_fraction_config.copy()
    invalid_data["max_iterations"] = 0

    with pytest.raises(ValidationError):
        validate_fraction_config(invalid_data)


# =============================================================================
# TESTS: INTEGRATION WITH PYDANTIC MODELS
# =============================================================================


def test_valid_scientific_mapping_builds_model(valid_scientific_config):
    """Тест: валидный словарь строит модель."""
    config = ScientificConfig.from_mapping(valid_scientific_config)

    mantissa, exponent = config.decompose(123456)
    assert float(mantissa) == pytest.approx(123.46)
    assert exponent == 3


def test_valid_hypersplit_mapping_builds_model(valid_hypersplit_config):
    """Тест: строковые максимумы приводятся к ExtendedReal."""
    config = HypersplitConfig.from_mapping(valid_hypersplit_config)

    assert config.maximums[1] == 1e10


def test_valid_fraction_mapping_builds_model(valid_fraction_config):
    """Тест: fraction_config с бесконечным max_numerator."""
    config = FractionConfig.from_mapping(valid_fraction_config)

    assert config.max_numerator == INF
    assert config.approximate(-1.25) == (-2, 3, 4)
