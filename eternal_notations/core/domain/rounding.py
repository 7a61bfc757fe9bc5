"""
Rounding — правила округления мантиссы

Правило округления задаётся одним из трёх вариантов:
- NoRounding: тождество
- FixedRounding(quantum): округление до ближайшего кратного quantum
- DynamicRounding(quantum_for): квант вычисляется из неокруглённой мантиссы
  (например, значащие цифры)

Варианты диспетчеризуются явно через метод apply, без инспекции типов
на стороне вызывающего кода. Квант 0 всегда означает "без округления".
"""

from dataclasses import dataclass
from typing import Callable, Union

from eternal_notations.core.math.extended_real import (
    ZERO,
    ExtendedReal,
    ExtendedSource,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import round_to_quantum


@dataclass(frozen=True)
class NoRounding:
    """Мантисса не округляется."""

    def apply(self, value: ExtendedSource) -> ExtendedReal:
        return to_extended(value)


@dataclass(frozen=True)
class FixedRounding:
    """Округление до ближайшего кратного фиксированного кванта."""

    quantum: ExtendedReal

    def __post_init__(self):
        object.__setattr__(self, "quantum", to_extended(self.quantum))

    def apply(self, value: ExtendedSource) -> ExtendedReal:
        return round_to_quantum(value, self.quantum)


@dataclass(frozen=True)
class DynamicRounding:
    """
    Квант как функция от неокруглённой мантиссы.

    Examples:
        >>> DynamicRounding(lambda v: 0.1 if v < 5 else 1).apply(7.4)
        ExtendedReal('7.0')
    """

    quantum_for: Callable[[ExtendedReal], ExtendedSource]

    def apply(self, value: ExtendedSource) -> ExtendedReal:
        value = to_extended(value)
        return round_to_quantum(value, self.quantum_for(value))


Rounding = Union[NoRounding, FixedRounding, DynamicRounding]
RoundingSource = Union[Rounding, ExtendedSource, Callable[[ExtendedReal], ExtendedSource], None]

NO_ROUNDING = NoRounding()


def as_rounding(source: RoundingSource) -> Rounding:
    """
    Приведение к правилу округления.

    None и 0 дают NoRounding, число — FixedRounding, callable — DynamicRounding.
    """
    if source is None:
        return NO_ROUNDING
    if isinstance(source, (NoRounding, FixedRounding, DynamicRounding)):
        return source
    if callable(source):
        return DynamicRounding(source)
    quantum = to_extended(source)
    if quantum.is_zero():
        return NO_ROUNDING
    return FixedRounding(quantum)


def significant_figures(digits: int, base: ExtendedSource = 10) -> DynamicRounding:
    """
    Округление до digits значащих цифр в системе счисления base.

    Квант = base^(floor(log_base|v|) - digits + 1); для нуля квант 0.
    """
    base = to_extended(base)

    def quantum_for(value: ExtendedReal) -> ExtendedReal:
        if value.is_zero() or not value.is_finite():
            return ZERO
        magnitude = abs(value).log(base).floor()
        return base ** (magnitude - (digits - 1))

    return DynamicRounding(quantum_for)
