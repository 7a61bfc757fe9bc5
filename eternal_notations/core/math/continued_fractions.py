"""
Continued Fractions — рациональные приближения

Разложение в цепную дробь с накоплением подходящих дробей по стандартной
рекуррентности:

    h_n = a_n * h_(n-1) + h_(n-2)
    k_n = a_n * k_(n-1) + k_(n-2)

Остановка (проверяется после каждого члена):
1. Точность: |value - h_n/k_n| <= tolerance
   precision > 0 — абсолютная, precision < 0 — пропорциональная,
   precision == 0 — точное совпадение
2. Число членов >= max_iterations
3. k_n > max_denominator или h_n > max_numerator; в strict-режиме
   возвращается предыдущая подходящая дробь

Формы результата (FractionForm):
- CONTINUED: список членов цепной дроби
- PAIR: (numerator, denominator)
- MIXED: (whole, numerator, denominator), whole = floor
- MIXED_CONVENTIONAL: смешанная дробь как её пишут: знак у целой части,
  числитель неотрицателен
"""

import logging
from enum import Enum
from typing import NamedTuple, Optional, Union

from eternal_notations.core.math.extended_real import (
    INF,
    ONE,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import ITERATION_BAIL_LIMIT

logger = logging.getLogger(__name__)


class FractionForm(str, Enum):
    """Форма результата approximate_fraction."""

    CONTINUED = "continued"
    PAIR = "pair"
    MIXED = "mixed"
    MIXED_CONVENTIONAL = "mixed_conventional"


class SimpleFraction(NamedTuple):
    numerator: ExtendedReal
    denominator: ExtendedReal


class MixedFraction(NamedTuple):
    whole: ExtendedReal
    numerator: ExtendedReal
    denominator: ExtendedReal


FractionResult = Union[list[ExtendedReal], SimpleFraction, MixedFraction]


def precision_tolerance(value: ExtendedReal, precision: ExtendedReal) -> ExtendedReal:
    """
    Допустимое отклонение приближения.

    Отрицательная precision пропорциональна: |value| / |precision|, так что
    -1000 означает "одна тысячная от value". Результат не больше 1.

    Examples:
        >>> precision_tolerance(ExtendedReal(100), ExtendedReal(-1000))
        ExtendedReal('0.1')
    """
    if precision < ZERO:
        precision = abs(value) / abs(precision)
    return precision.min(ONE)


def _empty_result(form: FractionForm) -> FractionResult:
    if form == FractionForm.CONTINUED:
        return [ZERO]
    if form == FractionForm.PAIR:
        return SimpleFraction(ZERO, ONE)
    return MixedFraction(ZERO, ZERO, ONE)


def approximate_fraction(
    value: ExtendedSource,
    precision: ExtendedSource = 0,
    form: Union[FractionForm, str] = FractionForm.PAIR,
    max_iterations: Optional[int] = None,
    max_denominator: ExtendedSource = INF,
    strict_max_denominator: bool = False,
    max_numerator: ExtendedSource = INF,
    strict_max_numerator: bool = False,
) -> FractionResult:
    """
    Приближение value рациональной дробью через цепную дробь.

    Args:
        value: Приближаемое значение
        precision: > 0 абсолютная точность, < 0 пропорциональная, 0 точная
        form: Форма результата (FractionForm или её строковое значение)
        max_iterations: Максимум членов цепной дроби (None: без ограничения)
        max_denominator: Порог знаменателя
        strict_max_denominator: Остановиться на последней дроби до превышения
        max_numerator: Порог числителя
        strict_max_numerator: То же для числителя (кроме случая одного члена)

    Returns:
        list членов, SimpleFraction или MixedFraction в зависимости от form

    Examples:
        >>> approximate_fraction(0.75, 1e-9)
        SimpleFraction(numerator=ExtendedReal('3.0'), denominator=ExtendedReal('4.0'))
        >>> approximate_fraction(3.14159, -1000, FractionForm.CONTINUED)
        [ExtendedReal('3.0'), ExtendedReal('7.0')]
    """
    value = to_extended(value)
    precision = to_extended(precision)
    form = FractionForm(form)
    max_denominator = to_extended(max_denominator)
    max_numerator = to_extended(max_numerator)

    if form == FractionForm.MIXED_CONVENTIONAL:
        whole, numerator, denominator = approximate_fraction(
            abs(value), precision, FractionForm.MIXED, max_iterations,
            max_denominator, strict_max_denominator, max_numerator, strict_max_numerator,
        )
        if value < ZERO:
            if whole.is_zero():
                numerator = -numerator
            else:
                whole = -whole
        return MixedFraction(whole, numerator, denominator)

    if value.is_zero():
        return _empty_result(form)
    if not value.is_finite():
        if form == FractionForm.CONTINUED:
            return [value]
        if form == FractionForm.PAIR:
            return SimpleFraction(value, ONE)
        return MixedFraction(value, ZERO, ONE)
    if abs(value) < ONE and value.layer > 1 and precision < ZERO:
        # пропорциональная точность теряет смысл, когда деление неточно
        denominator = value.recip().round()
        if form == FractionForm.CONTINUED:
            return [ZERO, denominator]
        if form == FractionForm.PAIR:
            return SimpleFraction(ONE, denominator)
        return MixedFraction(ZERO, ONE, denominator)

    tolerance = precision_tolerance(value, precision)
    iteration_cap = ITERATION_BAIL_LIMIT if max_iterations is None else min(max_iterations, ITERATION_BAIL_LIMIT)
    mixed = form == FractionForm.MIXED

    terms: list[ExtendedReal] = []
    whole, numerator, denominator = ZERO, ZERO, ONE
    previous = (whole, numerator, denominator)
    h1, h2 = ONE, ZERO
    k1, k2 = ZERO, ONE
    approximation = ZERO
    current = value

    while (
        abs(value - approximation) > tolerance
        and denominator <= max_denominator
        and numerator <= max_numerator
        and len(terms) < iteration_cap
    ):
        term = current.floor()
        terms.append(term)
        previous = (whole, numerator, denominator)

        h1, h2 = term * h1 + h2, h1
        k1, k2 = term * k1 + k2, k1
        numerator, denominator = h1, k1
        if mixed:
            numerator = numerator - denominator * terms[0]
            whole = terms[0]
        approximation = whole + numerator / denominator

        current = current.mod1()
        if current.is_zero():
            break
        current = current.recip()
    else:
        if len(terms) >= ITERATION_BAIL_LIMIT:
            logger.debug("approximate_fraction: stopped after %d terms", len(terms))

    if (denominator > max_denominator and strict_max_denominator) or (
        numerator > max_numerator and strict_max_numerator and len(terms) > 1
    ):
        terms.pop()
        whole, numerator, denominator = previous

    if mixed:
        # 1/1 не должна оставаться в дробной части
        carry = (numerator / denominator).floor()
        if not carry.is_zero():
            whole = whole + carry
            numerator = numerator - denominator * carry

    if not terms:
        return _empty_result(form)
    if form == FractionForm.CONTINUED:
        return terms
    if form == FractionForm.PAIR:
        return SimpleFraction(numerator, denominator)
    return MixedFraction(whole, numerator, denominator)


# =============================================================================
# ОБЁРТКИ
# =============================================================================


def continued_fraction(value: ExtendedSource, precision: ExtendedSource = 0, **bounds) -> list[ExtendedReal]:
    """Члены цепной дроби value."""
    return approximate_fraction(value, precision, FractionForm.CONTINUED, **bounds)


def fraction_pair(value: ExtendedSource, precision: ExtendedSource = 0, **bounds) -> SimpleFraction:
    """(numerator, denominator), denominator > 0."""
    return approximate_fraction(value, precision, FractionForm.PAIR, **bounds)


def mixed_fraction(
    value: ExtendedSource,
    precision: ExtendedSource = 0,
    conventional: bool = True,
    **bounds,
) -> MixedFraction:
    """
    Смешанная дробь. conventional=True: -1 1/4 вместо floor-формы -2 3/4.
    """
    form = FractionForm.MIXED_CONVENTIONAL if conventional else FractionForm.MIXED
    return approximate_fraction(value, precision, form, **bounds)
