"""
Notation Configs — неизменяемые конфигурации декомпозиций

Immutable Pydantic модели параметров, которые форматирующий код держит по
одной на нотацию и передаёт в ядро:
- ScientificConfig → scientifify
- HyperscientificConfig → hyperscientifify
- HypersplitConfig → hypersplit
- FractionConfig → approximate_fraction / prime_factorize_fraction

Числовые поля принимают числа, строки (включая "e1e20" для значений за
пределами double) и ExtendedReal; хранятся как ExtendedReal.

Словари (например, из JSON) проверяются JSON Schema контрактами через
from_mapping до построения модели (contracts/schema/*.json).
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from eternal_notations.core.contracts.validators import (
    validate_fraction_config,
    validate_hyperscientific_config,
    validate_hypersplit_config,
    validate_scientific_config,
)
from eternal_notations.core.domain.grid import QuantizationGrid
from eternal_notations.core.domain.results import HyperTuple, HypersplitTuple, ScientificTuple
from eternal_notations.core.domain.rounding import NO_ROUNDING, Rounding, as_rounding, significant_figures
from eternal_notations.core.math.continued_fractions import FractionForm, FractionResult, approximate_fraction
from eternal_notations.core.math.extended_real import INF, ONE, TEN, ZERO, ExtendedReal, ExtendedSource, to_extended
from eternal_notations.core.math.hypersplit import hypersplit
from eternal_notations.core.math.numerical_safeguards import validate_convergent_base
from eternal_notations.core.math.primes import Factorization, PrimeSource, PrimeTable, prime_factorize_fraction
from eternal_notations.core.math.scientific import hyperscientifify, scientifify


def _coerce(value: Any) -> Any:
    if isinstance(value, (int, float, str, ExtendedReal)) and not isinstance(value, bool):
        return to_extended(value)
    return value


def _coerce_levels(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(_coerce(v) for v in value)
    return (_coerce(value),)


# =============================================================================
# BASE
# =============================================================================


class _NotationConfig(BaseModel):
    """
    Общие поля: основание, округление мантиссы, сетка.

    rounding — квант округления (0 = без округления); significant_digits
    заменяет его округлением до значащих цифр по основанию base.
    """

    base: ExtendedReal = Field(default=TEN, description="Основание (> 1)")
    rounding: ExtendedReal = Field(default=ZERO, description="Квант округления мантиссы, 0 = выкл")
    significant_digits: Optional[int] = Field(
        default=None, ge=1, description="Округление до значащих цифр вместо кванта"
    )
    grid: tuple[ExtendedReal, ...] = Field(default=(ONE,), description="Сетка допустимых экспонент")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("base", "rounding", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        return _coerce(v)

    @field_validator("grid", mode="before")
    @classmethod
    def coerce_grid(cls, v: Any) -> Any:
        return _coerce_levels(v)

    @field_validator("base")
    @classmethod
    def validate_base_above_one(cls, v: ExtendedReal) -> ExtendedReal:
        if not v.is_finite() or v <= ONE:
            raise ValueError(f"base must be a finite value greater than 1, got {v}")
        return v

    @field_validator("rounding")
    @classmethod
    def validate_rounding_non_negative(cls, v: ExtendedReal) -> ExtendedReal:
        if v.is_nan() or v < ZERO:
            raise ValueError(f"rounding quantum must be non-negative, got {v}")
        return v

    @field_validator("grid")
    @classmethod
    def validate_grid(cls, v: tuple[ExtendedReal, ...]) -> tuple[ExtendedReal, ...]:
        return QuantizationGrid.of(v).steps

    def rounding_rule(self) -> Rounding:
        """Правило округления мантиссы для этой конфигурации."""
        if self.significant_digits is not None:
            return significant_figures(self.significant_digits, self.base)
        if self.rounding.is_zero():
            return NO_ROUNDING
        return as_rounding(self.rounding)

    @property
    def quantization_grid(self) -> QuantizationGrid:
        return QuantizationGrid(self.grid)


def _non_zero(name: str, v: ExtendedReal) -> ExtendedReal:
    if v.is_zero() or v.is_nan():
        raise ValueError(f"{name} must be non-zero, got {v}")
    return v


# =============================================================================
# SCIENTIFIC
# =============================================================================


class ScientificConfig(_NotationConfig):
    """
    Параметры scientifify.

    Examples:
        >>> ScientificConfig(grid=[3]).decompose(2357)
        ScientificTuple(mantissa=ExtendedReal('2.357'), exponent=ExtendedReal('3.0'))
    """

    mantissa_power: ExtendedReal = Field(default=ZERO, description="Сдвиг диапазона мантиссы")
    exp_multiplier: ExtendedReal = Field(default=ONE, description="Множитель экспоненты в результате")

    @field_validator("mantissa_power", "exp_multiplier", mode="before")
    @classmethod
    def coerce_scientific(cls, v: Any) -> Any:
        return _coerce(v)

    @field_validator("exp_multiplier")
    @classmethod
    def validate_exp_multiplier(cls, v: ExtendedReal) -> ExtendedReal:
        return _non_zero("exp_multiplier", v)

    @model_validator(mode="after")
    def validate_convergence(self) -> "ScientificConfig":
        """base^(1/exp_multiplier) должно быть выше e^(1/e)."""
        validate_convergent_base(self.base, self.exp_multiplier, "scientifify")
        return self

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ScientificConfig":
        """Построение из словаря после проверки контрактом scientific_config."""
        validate_scientific_config(data)
        return cls.model_validate(data)

    def decompose(self, value: ExtendedSource) -> ScientificTuple:
        return scientifify(
            value,
            base=self.base,
            rounding=self.rounding_rule(),
            mantissa_power=self.mantissa_power,
            grid=self.quantization_grid,
            exp_multiplier=self.exp_multiplier,
        )


# =============================================================================
# HYPERSCIENTIFIC
# =============================================================================


class HyperscientificConfig(_NotationConfig):
    """Параметры hyperscientifify."""

    hypermantissa_power: ExtendedReal = Field(default=ZERO)
    exp_multiplier: ExtendedReal = Field(default=ONE)
    hyperexp_multiplier: ExtendedReal = Field(default=ONE)

    @field_validator("hypermantissa_power", "exp_multiplier", "hyperexp_multiplier", mode="before")
    @classmethod
    def coerce_hyper(cls, v: Any) -> Any:
        return _coerce(v)

    @field_validator("exp_multiplier", "hyperexp_multiplier")
    @classmethod
    def validate_multipliers(cls, v: ExtendedReal, info) -> ExtendedReal:
        return _non_zero(info.field_name, v)

    @model_validator(mode="after")
    def validate_convergence(self) -> "HyperscientificConfig":
        """Эффективное основание должно быть выше e^(1/e)."""
        validate_convergent_base(self.base, self.exp_multiplier, "hyperscientifify")
        return self

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "HyperscientificConfig":
        validate_hyperscientific_config(data)
        return cls.model_validate(data)

    def decompose(self, value: ExtendedSource) -> HyperTuple:
        return hyperscientifify(
            value,
            base=self.base,
            rounding=self.rounding_rule(),
            hypermantissa_power=self.hypermantissa_power,
            grid=self.quantization_grid,
            exp_multiplier=self.exp_multiplier,
            hyperexp_multiplier=self.hyperexp_multiplier,
        )


# =============================================================================
# HYPERSPLIT
# =============================================================================


class HypersplitConfig(_NotationConfig):
    """
    Параметры hypersplit.

    grid — сетка экспоненты; hypergrid и pentagrid — сетки тетрации и
    пентации.
    """

    maximums: tuple[ExtendedReal, ...] = Field(default=(TEN, TEN, TEN), max_length=3)
    original_maximums: Optional[tuple[ExtendedReal, ...]] = Field(default=None, max_length=3)
    minnum: ExtendedReal = Field(default=ONE)
    hypergrid: tuple[ExtendedReal, ...] = Field(default=(ONE,))
    pentagrid: tuple[ExtendedReal, ...] = Field(default=(ONE,))
    exp_multiplier: ExtendedReal = Field(default=ONE)
    hyperexp_multiplier: ExtendedReal = Field(default=ONE)
    pentaexp_multiplier: ExtendedReal = Field(default=ONE)

    @field_validator("minnum", "exp_multiplier", "hyperexp_multiplier", "pentaexp_multiplier", mode="before")
    @classmethod
    def coerce_split(cls, v: Any) -> Any:
        return _coerce(v)

    @field_validator("maximums", "original_maximums", "hypergrid", "pentagrid", mode="before")
    @classmethod
    def coerce_split_levels(cls, v: Any) -> Any:
        return _coerce_levels(v)

    @field_validator("hypergrid", "pentagrid")
    @classmethod
    def validate_hypergrids(cls, v: tuple[ExtendedReal, ...]) -> tuple[ExtendedReal, ...]:
        return QuantizationGrid.of(v).steps

    @field_validator("exp_multiplier", "hyperexp_multiplier", "pentaexp_multiplier")
    @classmethod
    def validate_multipliers(cls, v: ExtendedReal, info) -> ExtendedReal:
        return _non_zero(info.field_name, v)

    @model_validator(mode="after")
    def validate_convergence(self) -> "HypersplitConfig":
        validate_convergent_base(self.base, self.exp_multiplier, "hypersplit")
        return self

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "HypersplitConfig":
        validate_hypersplit_config(data)
        return cls.model_validate(data)

    def decompose(self, value: ExtendedSource) -> HypersplitTuple:
        return hypersplit(
            value,
            base=self.base,
            maximums=list(self.maximums),
            original_maximums=None if self.original_maximums is None else list(self.original_maximums),
            minnum=self.minnum,
            mantissa_rounding=self.rounding_rule(),
            grid=self.quantization_grid,
            hypergrid=QuantizationGrid(self.hypergrid),
            pentagrid=QuantizationGrid(self.pentagrid),
            exp_multiplier=self.exp_multiplier,
            hyperexp_multiplier=self.hyperexp_multiplier,
            pentaexp_multiplier=self.pentaexp_multiplier,
        )


# =============================================================================
# FRACTIONS
# =============================================================================


class FractionConfig(BaseModel):
    """
    Параметры approximate_fraction и prime_factorize_fraction.

    precision > 0 — абсолютная точность, < 0 — пропорциональная, 0 — точная.
    """

    precision: ExtendedReal = Field(default=ZERO)
    form: FractionForm = Field(default=FractionForm.PAIR)
    max_iterations: Optional[int] = Field(default=None, ge=1)
    max_denominator: ExtendedReal = Field(default=INF)
    strict_max_denominator: bool = False
    max_numerator: ExtendedReal = Field(default=INF)
    strict_max_numerator: bool = False

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("precision", "max_denominator", "max_numerator", mode="before")
    @classmethod
    def coerce_fraction(cls, v: Any) -> Any:
        return _coerce(v)

    @field_validator("max_denominator", "max_numerator")
    @classmethod
    def validate_bounds(cls, v: ExtendedReal, info) -> ExtendedReal:
        if v.is_nan() or v <= ZERO:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "FractionConfig":
        validate_fraction_config(data)
        return cls.model_validate(data)

    def bounds(self) -> Dict[str, Any]:
        return {
            "max_iterations": self.max_iterations,
            "max_denominator": self.max_denominator,
            "strict_max_denominator": self.strict_max_denominator,
            "max_numerator": self.max_numerator,
            "strict_max_numerator": self.strict_max_numerator,
        }

    def approximate(self, value: ExtendedSource) -> FractionResult:
        return approximate_fraction(value, self.precision, self.form, **self.bounds())

    def factorize(
        self,
        value: ExtendedSource,
        primes: PrimeSource,
        table: Optional[PrimeTable] = None,
    ) -> Factorization:
        return prime_factorize_fraction(value, primes, self.precision, table=table, **self.bounds())
