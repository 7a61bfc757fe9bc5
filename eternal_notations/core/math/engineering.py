"""
Engineering Grid Stepper — шаги по сетке допустимых значений

Для сетки QuantizationGrid вычисляет ближайшие допустимые значения:
- current_step(v): наибольшее допустимое <= v
- next_step(v): наименьшее допустимое > v
- previous_step(v): наибольшее допустимое < current_step(v)
- upper_current_step(v): наименьшее допустимое >= v

Допустимые значения — жадные суммы кратных шагов сетки (от большего к
меньшему), поэтому любое значение представимо вектором коэффициентов по
шагам; *_engineering функции работают с этими векторами.

Отрицательные значения отражаются: current_step(-v) = -upper_current_step(v).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. previous_step(v) < current_step(v) <= v < next_step(v)
2. Повторные next_step / previous_step строго монотонны
3. В нуле: next_step = наименьший шаг, previous_step = -наименьший шаг
"""

import logging

from eternal_notations.core.domain.grid import GridSource, QuantizationGrid
from eternal_notations.core.math.extended_real import (
    INF,
    NEG_INF,
    ONE,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import NotationDomainError

logger = logging.getLogger(__name__)


# =============================================================================
# ВЕКТОРЫ КОЭФФИЦИЕНТОВ
# =============================================================================


def current_engineering(value: ExtendedSource, grid: GridSource = None) -> list[ExtendedReal]:
    """
    Жадное разложение value по шагам сетки.

    Args:
        value: Неотрицательное значение
        grid: Сетка шагов

    Returns:
        Коэффициенты при шагах (в порядке убывания шагов)

    Raises:
        NotationDomainError: Для отрицательных значений

    Examples:
        >>> current_engineering(13, [5, 2])
        [ExtendedReal('2.0'), ExtendedReal('1.0')]
    """
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    if value < ZERO:
        raise NotationDomainError(f"current_engineering requires a non-negative value, got {value}")
    if value.is_zero():
        return [ZERO] * len(grid)

    coefficients = []
    remaining = value
    for step in grid.steps:
        portion = (remaining / step).floor().max(ZERO)
        remaining = remaining - portion * step
        coefficients.append(portion)
    return coefficients


def engineering_value(coefficients: list[ExtendedSource], grid: GridSource = None) -> ExtendedReal:
    """Сумма coefficients[i] * steps[i]."""
    grid = QuantizationGrid.of(grid)
    result = ZERO
    for coefficient, step in zip(coefficients, grid.steps):
        result = result + to_extended(coefficient) * step
    return result


def next_engineering(value: ExtendedSource, grid: GridSource = None) -> list[ExtendedReal]:
    """
    Коэффициенты наименьшего допустимого значения > value.

    Перебирает увеличение каждого коэффициента на 1 с обнулением более
    мелких и выбирает наименьший результат выше value.
    """
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    current = current_engineering(value, grid)
    best_value = INF
    best = list(current)
    for s in range(len(grid) - 1, -1, -1):
        candidate = list(current)
        candidate[s] = candidate[s] + ONE
        for t in range(s + 1, len(grid)):
            candidate[t] = ZERO
        candidate_value = engineering_value(candidate, grid)
        if value < candidate_value < best_value:
            best_value = candidate_value
            best = candidate
    return best


def previous_engineering(value: ExtendedSource, grid: GridSource = None) -> list[ExtendedReal]:
    """
    Коэффициенты наибольшего допустимого значения < current_step(value).

    Уменьшает каждый ненулевой коэффициент на 1 и жадно добирает более
    мелкие шаги так, чтобы остаться строго ниже освобождённого шага.
    """
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    current = current_engineering(value, grid)
    current_value = engineering_value(current, grid)
    best_value = NEG_INF
    best = list(current)
    for s in range(len(grid) - 1, -1, -1):
        if current[s] <= ZERO:
            continue
        candidate = current[:s] + [current[s] - ONE]
        candidate_value = engineering_value(candidate, grid)
        difference = grid.steps[s]
        for t in range(s + 1, len(grid)):
            coefficient = (difference / grid.steps[t]).floor().max(ZERO)
            portion = coefficient * grid.steps[t]
            if portion == difference:
                coefficient = coefficient - ONE
                portion = portion - grid.steps[t]
            difference = difference - portion
            candidate_value = candidate_value + portion
            candidate.append(coefficient)
        if best_value < candidate_value < current_value:
            best_value = candidate_value
            best = candidate
    return best


# =============================================================================
# ДОПУСТИМЫЕ ЗНАЧЕНИЯ
# =============================================================================


def current_step(value: ExtendedSource, grid: GridSource = None) -> ExtendedReal:
    """
    Наибольшее допустимое значение <= value.

    Examples:
        >>> current_step(13, [5, 2])
        ExtendedReal('12.0')
        >>> current_step(-13, [5, 2])
        ExtendedReal('-14.0')
    """
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    if not value.is_finite() or value.is_zero():
        return value
    if value < ZERO:
        return -upper_current_step(-value, grid)
    return engineering_value(current_engineering(value, grid), grid)


def next_step(value: ExtendedSource, grid: GridSource = None) -> ExtendedReal:
    """
    Наименьшее допустимое значение > value.

    Examples:
        >>> next_step(12, [5, 2])
        ExtendedReal('14.0')
        >>> next_step(0, [5, 2])
        ExtendedReal('2.0')
    """
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    if not value.is_finite():
        return value
    if value.is_zero():
        return grid.finest
    if value < ZERO:
        return -_lower_strict(-value, grid)
    return engineering_value(next_engineering(value, grid), grid)


def previous_step(value: ExtendedSource, grid: GridSource = None) -> ExtendedReal:
    """
    Наибольшее допустимое значение < current_step(value).

    Для допустимых value это просто предыдущий шаг сетки.

    Examples:
        >>> previous_step(12, [5, 2])
        ExtendedReal('10.0')
        >>> previous_step(0, [5, 2])
        ExtendedReal('-2.0')
    """
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    if not value.is_finite():
        return value
    current = current_step(value, grid)
    if current.is_zero():
        return -grid.finest
    if current < ZERO:
        return -next_step(-current, grid)
    return engineering_value(previous_engineering(current, grid), grid)


def upper_current_step(value: ExtendedSource, grid: GridSource = None) -> ExtendedReal:
    """Наименьшее допустимое значение >= value."""
    grid = QuantizationGrid.of(grid)
    value = to_extended(value)
    current = current_step(value, grid)
    if current == value:
        return current
    return next_step(value, grid)


def _lower_strict(value: ExtendedReal, grid: QuantizationGrid) -> ExtendedReal:
    """Наибольшее допустимое значение строго < value (value > 0)."""
    current = current_step(value, grid)
    if current < value:
        return current
    return previous_step(value, grid)
