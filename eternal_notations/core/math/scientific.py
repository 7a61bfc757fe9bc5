"""
Scientific / Hyperscientific Decomposers

scientifify: value = mantissa * base^exponent
hyperscientifify: value = base^base^...^mantissa (hyperexponent возведений)

Оба разложения:
- Ограничивают экспоненту сеткой допустимых значений (engineering grid)
- Округляют мантиссу правилом округления
- После округления перенормируют мантиссу: если она вышла за границу
  [base^p, base^(p+gap)), экспонента сдвигается на соседний шаг сетки

Перенормировка может зациклиться на границе (вверх-вниз-вверх), поэтому
после смены направления мантисса фиксируется на нижней границе.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. 0, ±inf и NaN обрабатываются до любого логарифма
2. Экспонента всегда на сетке
3. Для |exponent| > MAX_SAFE_INTEGER мантисса не несёт информации и
   заменяется нижней границей
"""

import logging

from eternal_notations.core.domain.grid import GridSource, QuantizationGrid
from eternal_notations.core.domain.results import HyperTuple, ScientificTuple
from eternal_notations.core.domain.rounding import RoundingSource, as_rounding
from eternal_notations.core.math.engineering import (
    current_step,
    next_step,
    previous_step,
)
from eternal_notations.core.math.extended_real import (
    INF,
    NAN,
    NEG_INF,
    ONE,
    ZERO,
    ExtendedSource,
    iterated_exp_mult,
    iterated_mult_log,
    mult_slog,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import (
    MAX_SAFE_INTEGER,
    RENORMALIZATION_LIMIT,
    validate_base,
    validate_convergent_base,
    validate_nonzero,
)

logger = logging.getLogger(__name__)

# Ниже base^^(10 * наименьший шаг) slog не вызывается: цикл перенормировки
# доходит до нужной гиперэкспоненты сам
SMALL_VALUE_HEIGHT_FACTOR = 10


# =============================================================================
# SCIENTIFIFY
# =============================================================================


def scientifify(
    value: ExtendedSource,
    base: ExtendedSource = 10,
    rounding: RoundingSource = None,
    mantissa_power: ExtendedSource = 0,
    grid: GridSource = None,
    exp_multiplier: ExtendedSource = 1,
) -> ScientificTuple:
    """
    Разложение value = mantissa * base^exponent.

    Args:
        value: Раскладываемое значение
        base: Основание (> 1, default: 10)
        rounding: Правило округления мантиссы (default: без округления)
        mantissa_power: p, мантисса лежит в [base^p, base^(p+1))
        grid: Сетка допустимых экспонент (default: [1])
        exp_multiplier: Экспонента в результате умножается на это значение

    Returns:
        ScientificTuple(mantissa, exponent)
        0 → (0, -inf); +inf → (inf, inf); -inf → (-inf, inf); NaN → (NaN, NaN)

    Raises:
        NotationDomainError: base <= 1, base^(1/exp_multiplier) <= e^(1/e),
            нулевой exp_multiplier, плохая сетка

    Examples:
        >>> scientifify(2357)
        ScientificTuple(mantissa=ExtendedReal('2.357'), exponent=ExtendedReal('3.0'))
        >>> scientifify(2.357e224, mantissa_power=1)
        ScientificTuple(mantissa=ExtendedReal('23.57'), exponent=ExtendedReal('223.0'))
    """
    validate_convergent_base(base, exp_multiplier, "scientifify")
    return decompose_scientific(value, base, rounding, mantissa_power, grid, exp_multiplier)


def decompose_scientific(
    value: ExtendedSource,
    base: ExtendedSource = 10,
    rounding: RoundingSource = None,
    mantissa_power: ExtendedSource = 0,
    grid: GridSource = None,
    exp_multiplier: ExtendedSource = 1,
) -> ScientificTuple:
    """
    scientifify без проверки порога сходимости основания.

    Для вызывающего кода, который уже проверил своё эффективное основание
    (hypersplit раскладывает гипермантиссу с exp_multiplier = 1).
    """
    value = to_extended(value)
    base = validate_base(base)
    exp_multiplier = validate_nonzero(exp_multiplier, "exp_multiplier")
    mantissa_power = to_extended(mantissa_power)
    rounding = as_rounding(rounding)
    grid = QuantizationGrid.of(grid)

    if value.is_nan():
        return ScientificTuple(NAN, NAN)
    if value.is_zero():
        return ScientificTuple(ZERO, NEG_INF)
    if value == INF:
        return ScientificTuple(INF, INF)
    if value == NEG_INF:
        return ScientificTuple(NEG_INF, INF)
    if value < ZERO:
        mantissa, exponent = decompose_scientific(-value, base, rounding, mantissa_power, grid, exp_multiplier)
        return ScientificTuple(-mantissa, exponent)

    exponent = current_step(value.log(base) - mantissa_power, grid)
    unrounded = value / base ** exponent
    mantissa = rounding.apply(unrounded)

    if abs(exponent) > MAX_SAFE_INTEGER:
        logger.debug("scientifify: exponent %s beyond safe range, mantissa set to lower bound", exponent)
        mantissa = base ** mantissa_power
    else:
        exponent, mantissa = _renormalize_scientific(
            value, base, rounding, mantissa_power, grid, exponent, unrounded, mantissa
        )

    return ScientificTuple(mantissa, exponent * exp_multiplier)


def _renormalize_scientific(value, base, rounding, mantissa_power, grid, exponent, unrounded, mantissa):
    lower = base ** mantissa_power
    loop_watch = False
    for _ in range(RENORMALIZATION_LIMIT):
        previous_unrounded = unrounded
        upper = base ** (next_step(exponent, grid) - current_step(exponent, grid) + mantissa_power)
        if mantissa >= upper:
            exponent = next_step(exponent, grid)
            unrounded = value / base ** exponent
            if loop_watch:
                # мантисса слишком близко к границе: фиксируем нижнюю границу
                logger.debug("scientifify: mantissa snapped to lower bound at exponent %s", exponent)
                mantissa = rounding.apply(lower)
                break
            mantissa = rounding.apply(unrounded)
        elif mantissa < lower:
            exponent = previous_step(exponent, grid)
            unrounded = value / base ** exponent
            mantissa = rounding.apply(unrounded)
            loop_watch = True
        else:
            break
        if unrounded == previous_unrounded:
            break
    else:
        logger.debug("scientifify: renormalization stopped after %d steps", RENORMALIZATION_LIMIT)
    return exponent, mantissa


# =============================================================================
# HYPERSCIENTIFIFY
# =============================================================================


def hyperscientifify(
    value: ExtendedSource,
    base: ExtendedSource = 10,
    rounding: RoundingSource = None,
    hypermantissa_power: ExtendedSource = 0,
    grid: GridSource = None,
    exp_multiplier: ExtendedSource = 1,
    hyperexp_multiplier: ExtendedSource = 1,
) -> HyperTuple:
    """
    Разложение value = iterated_exp_mult(base, mantissa, hyperexponent, exp_multiplier).

    Мантисса лежит между base^^p и base^^(p + шаг сетки), где
    p = hypermantissa_power. Нецелые гиперэкспоненты — через линейное
    приближение тетрации.

    Args:
        value: Раскладываемое значение
        base: Основание (эффективное основание выше порога сходимости)
        rounding: Правило округления мантиссы
        hypermantissa_power: p
        grid: Сетка допустимых гиперэкспонент
        exp_multiplier: Каждое возведение — base^(x / exp_multiplier)
        hyperexp_multiplier: Гиперэкспонента в результате умножается на это

    Returns:
        HyperTuple(mantissa, hyperexponent)
        +inf → (inf, inf); -inf → (-inf, -2); NaN → (NaN, NaN)

    Raises:
        NotationDomainError: Сходящееся основание, нулевые множители

    Examples:
        >>> hyperscientifify(1e100)
        HyperTuple(mantissa=ExtendedReal('2.0'), hyperexponent=ExtendedReal('2.0'))
        >>> hyperscientifify(1e100, hypermantissa_power=1)
        HyperTuple(mantissa=ExtendedReal('100.0'), hyperexponent=ExtendedReal('1.0'))
    """
    value = to_extended(value)
    base = to_extended(base)
    validate_convergent_base(base, exp_multiplier, "hyperscientifify")
    exp_multiplier = to_extended(exp_multiplier)
    hyperexp_multiplier = validate_nonzero(hyperexp_multiplier, "hyperexp_multiplier")
    power = to_extended(hypermantissa_power)
    rounding = as_rounding(rounding)
    grid = QuantizationGrid.of(grid)

    if value.is_nan():
        return HyperTuple(NAN, NAN)
    if value == INF:
        return HyperTuple(INF, INF)
    if value == NEG_INF:
        return HyperTuple(NEG_INF, to_extended(-2))

    small_limit = iterated_exp_mult(base, ONE, grid.finest * SMALL_VALUE_HEIGHT_FACTOR, exp_multiplier)
    if value < small_limit:
        exponent = ZERO
        mantissa = value
    else:
        target = mult_slog(value, base, exp_multiplier) - power
        exponent = current_step(target, grid)
        mantissa = iterated_mult_log(value, base, exponent, exp_multiplier)

    unrounded = mantissa
    mantissa = rounding.apply(mantissa)

    if abs(exponent) > MAX_SAFE_INTEGER:
        logger.debug("hyperscientifify: hyperexponent %s beyond safe range", exponent)
        mantissa = iterated_exp_mult(base, ONE, power, exp_multiplier)
    else:
        exponent, mantissa = _renormalize_hyper(
            base, rounding, power, grid, exp_multiplier, exponent, unrounded, mantissa
        )

    return HyperTuple(mantissa, exponent * hyperexp_multiplier)


def _renormalize_hyper(base, rounding, power, grid, exp_multiplier, exponent, unrounded, mantissa):
    lower = iterated_exp_mult(base, ONE, power, exp_multiplier)
    loop_watch = False
    for _ in range(RENORMALIZATION_LIMIT):
        previous_unrounded = unrounded
        gap = next_step(exponent, grid) - current_step(exponent, grid)
        upper = iterated_exp_mult(base, ONE, gap + power, exp_multiplier)
        if mantissa >= upper:
            following = next_step(exponent, grid)
            unrounded = iterated_mult_log(unrounded, base, following - exponent, exp_multiplier)
            exponent = following
            if loop_watch:
                logger.debug("hyperscientifify: mantissa snapped to lower bound at %s", exponent)
                mantissa = rounding.apply(lower)
                break
            mantissa = rounding.apply(unrounded)
        elif mantissa < lower:
            preceding = previous_step(exponent, grid)
            unrounded = iterated_exp_mult(base, unrounded, exponent - preceding, exp_multiplier)
            exponent = preceding
            mantissa = rounding.apply(unrounded)
            loop_watch = True
        else:
            break
        if unrounded == previous_unrounded:
            break
    else:
        logger.debug("hyperscientifify: renormalization stopped after %d steps", RENORMALIZATION_LIMIT)
    return exponent, mantissa