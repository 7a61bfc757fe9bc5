"""
Extended Factorial Family — итерированный факториал и его обратные

Операции:
- factorial(n): точный целый факториал, (-k)! = 1/k!
- iterated_factorial(x, k): факториал, взятый k раз; дробное k через
  интерполяцию payload = x * (x!/x)^frac
- inverse_factorial(x, k): y такое, что iterated_factorial(y, k) = x
- factorial_slog(x, base): сколько раз нужно взять факториал от base, чтобы
  получить x (аналог slog для факториала)
- factorial_scientifify / factorial_hyperscientifify: разложения b * e! и
  b!!!... (e факториалов)

1 и 2 — неподвижные точки факториала, поэтому итерации от них не меняют
значение. Ниже локального минимума x! (~0.4616) обратный факториал не
определён однозначно и не поддерживается.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. iterated_factorial(inverse_factorial(v, k), k) ≈ v для целых k >= 1
2. Все поиски (бисекция, удвоение) ограничены SEARCH_ITERATION_LIMIT
3. Выше base^^MAGNITUDE_GUARD factorial_slog совпадает с обычным slog
"""

import logging
from fractions import Fraction
from typing import Union

import mpmath
from mpmath import mpf

from eternal_notations.core.domain.grid import GridSource, QuantizationGrid
from eternal_notations.core.domain.results import HyperTuple, ScientificTuple
from eternal_notations.core.domain.rounding import RoundingSource, as_rounding
from eternal_notations.core.math.engineering import current_step, next_step, previous_step
from eternal_notations.core.math.extended_real import (
    INF,
    NAN,
    NEG_INF,
    ONE,
    TWO,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    slog,
    tetrate,
    iterated_log,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import (
    FACTORIAL_LOCAL_MINIMUM,
    ITERATION_BAIL_LIMIT,
    MAGNITUDE_GUARD,
    MAX_SAFE_INTEGER,
    RENORMALIZATION_LIMIT,
    SEARCH_ITERATION_LIMIT,
    NotationDomainError,
)

logger = logging.getLogger(__name__)

# Выше 10^MAX_SAFE_INTEGER факториал неотличим от возведения 10 в степень
_FACTORIAL_SHORTCUT = ExtendedReal(MAX_SAFE_INTEGER).pow10()

# Пороги, за которыми мантисса factorial_scientifify не несёт информации
_TINY_LIMIT = ExtendedReal("e-9e15")
_HUGE_LIMIT = ExtendedReal("e9e15")

# Начальный шаг поиска в factorial_slog
_SLOG_SEARCH_START = mpf("1e-18")

# Допуск проверки найденного обратного факториала
INVERSE_TOLERANCE = 1e-9

LOCAL_MINIMUM = ExtendedReal(FACTORIAL_LOCAL_MINIMUM)


def _count(iterations) -> mpf:
    if isinstance(iterations, ExtendedReal):
        return iterations.to_mpf()
    return mpf(iterations)


# =============================================================================
# ТОЧНЫЙ ФАКТОРИАЛ
# =============================================================================


def factorial(value: Union[int, ExtendedSource]) -> Union[int, Fraction]:
    """
    Точный факториал целого числа.

    Для отрицательных: (-k)! = 1/k! (удобно для факториальной системы
    счисления).

    Raises:
        NotationDomainError: Для нецелых значений

    Examples:
        >>> factorial(5)
        120
        >>> factorial(-3)
        Fraction(1, 6)
    """
    extended = to_extended(value)
    if not extended.is_finite() or not extended.is_integer():
        raise NotationDomainError(f"factorial is only defined for whole numbers here, got {extended}")
    n = int(extended)
    result = 1
    for i in range(2, abs(n) + 1):
        result *= i
    if n < 0:
        return Fraction(1, result)
    return result


# =============================================================================
# ИТЕРИРОВАННЫЙ ФАКТОРИАЛ
# =============================================================================


def iterated_factorial(value: ExtendedSource, iterations=1) -> ExtendedReal:
    """
    Факториал, взятый iterations раз.

    Args:
        value: Исходное значение
        iterations: Число итераций; дробное через интерполяцию,
            отрицательное через inverse_factorial

    Returns:
        Результат; NaN для дробных итераций ниже локального минимума

    Examples:
        >>> iterated_factorial(3, 2)
        ExtendedReal('720.0')
        >>> iterated_factorial(2, 100)
        ExtendedReal('2.0')
    """
    value = to_extended(value)
    k = _count(iterations)

    if k == 0:
        return value
    if k == 1:
        return value.factorial()
    fractional = k != mpmath.floor(k)
    if value < LOCAL_MINIMUM and fractional:
        return NAN
    if k < 0:
        return inverse_factorial(value, -k)

    whole = int(mpmath.floor(k))
    fraction = k - whole
    payload = value
    if fraction != 0:
        payload = payload * (value.factorial() / value) ** ExtendedReal(fraction)

    for f in range(whole):
        if payload == ONE or payload == TWO:
            return payload
        if payload > _FACTORIAL_SHORTCUT:
            return tetrate(10, whole - f, payload)
        payload = payload.factorial()
        if f > ITERATION_BAIL_LIMIT:
            logger.debug("iterated_factorial: bailing out after %d iterations", f)
            return payload
    return payload


def inverse_factorial(value: ExtendedSource, iterations=1) -> ExtendedReal:
    """
    Обратный факториал: y такое, что iterated_factorial(y, iterations) = value.

    Верхняя граница строится из x! >= 2^(x - 1), затем бисекция идёт в
    пространстве iterated_log(·, 10, layer), чтобы работать на любых
    порядках.

    Returns:
        y; NaN, если найденное значение не воспроизводит value с допуском 1e-9

    Raises:
        NotationDomainError: value ниже iterated_factorial(локального минимума)

    Examples:
        >>> inverse_factorial(120).eq_tolerance(5)
        True
    """
    value = to_extended(value)
    k = _count(iterations)

    if value == ONE or value == TWO:
        return value
    if k == 0:
        return value
    if k < 0:
        return iterated_factorial(value, -k)
    if value.is_nan():
        return NAN
    if value == INF:
        return INF
    if value < iterated_factorial(LOCAL_MINIMUM, k):
        raise NotationDomainError(
            f"inverse_factorial is not supported below the factorial local minimum, got {value}"
        )

    upper_bound = TWO
    if value > TWO:
        upper_bound = value
        for _ in range(int(mpmath.floor(k))):
            upper_bound = (upper_bound.log(2) + TWO).max(TWO)

    layer = upper_bound.layer
    lower = LOCAL_MINIMUM if layer == 0 else ZERO
    upper = iterated_log(upper_bound, 10, layer)
    previous = upper
    guess = upper / TWO
    for _ in range(SEARCH_ITERATION_LIMIT):
        guess = (lower + upper) / TWO
        if iterated_factorial(tetrate(10, layer, guess), k) > value:
            upper = guess
        else:
            lower = guess
        if guess == previous:
            break
        previous = guess
    else:
        logger.debug("inverse_factorial: bisection stopped after %d steps", SEARCH_ITERATION_LIMIT)

    candidate = tetrate(10, layer, guess)
    if iterated_factorial(candidate, k).eq_tolerance(value, INVERSE_TOLERANCE):
        return candidate
    return NAN


def factorial_slog(value: ExtendedSource, base: ExtendedSource = 3) -> ExtendedReal:
    """
    Сколько раз нужно взять факториал от base, чтобы получить value.

    Args:
        value: Целевое значение
        base: Основание (> 2, иначе iterated_factorial не возрастает)

    Returns:
        Число итераций; -inf для 2, NaN ниже 2

    Raises:
        NotationDomainError: base <= 2

    Examples:
        >>> factorial_slog(720)
        ExtendedReal('2.0')
    """
    value = to_extended(value)
    base = to_extended(base)
    if not base > TWO:
        raise NotationDomainError(
            f"factorial_slog requires base > 2 since iterated factorials do not grow otherwise, got {base}"
        )
    if value.is_nan():
        return NAN
    if value == TWO:
        return NEG_INF
    if value < TWO:
        return NAN
    if value == base:
        return ZERO
    if value >= tetrate(base, MAGNITUDE_GUARD):
        # на этом масштабе разница с обычным slog теряется в точности
        return slog(value, base)

    growing = value > base

    def overshoots(count: mpf) -> bool:
        result = iterated_factorial(base, count)
        return result < value if growing else result > value

    direction = 1 if growing else -1
    lower = _SLOG_SEARCH_START * direction
    upper = 2 * lower
    for _ in range(SEARCH_ITERATION_LIMIT):
        if not overshoots(upper):
            break
        lower *= 2
        upper *= 2
    else:
        logger.debug("factorial_slog: doubling stopped at %s", upper)

    guess = mpf(0)
    previous = mpf(-1)
    for _ in range(SEARCH_ITERATION_LIMIT):
        if previous == guess:
            break
        previous = guess
        guess = (lower + upper) / 2
        if overshoots(guess):
            lower = guess
        else:
            upper = guess
    else:
        logger.debug("factorial_slog: bisection stopped after %d steps", SEARCH_ITERATION_LIMIT)
    return ExtendedReal(guess)


# =============================================================================
# ФАКТОРИАЛЬНЫЕ РАЗЛОЖЕНИЯ
# =============================================================================


def factorial_scientifify(
    value: ExtendedSource,
    rounding: RoundingSource = None,
    mantissa_power: ExtendedSource = 0,
    grid: GridSource = None,
) -> ScientificTuple:
    """
    Разложение value = b * e! ("факториальная научная запись").

    При mantissa_power = 0 мантисса лежит в [1, e + 1); при 1 — в
    [e + 1, (e + 1)(e + 2)) и т.д. Для value < 1 экспонента отрицательна:
    value = b / |e|!.

    Returns:
        ScientificTuple(b, e); 0 → (0, 0), 1 → (1, 1)

    Examples:
        >>> factorial_scientifify(720)
        ScientificTuple(mantissa=ExtendedReal('1.0'), exponent=ExtendedReal('6.0'))
    """
    value = to_extended(value)
    power = to_extended(mantissa_power)
    rounding = as_rounding(rounding)
    grid = QuantizationGrid.of(grid)

    if value.is_zero():
        return ScientificTuple(ZERO, ZERO)
    if value == ONE:
        return ScientificTuple(ONE, ONE)
    if value == INF:
        return ScientificTuple(INF, INF)
    if value == NEG_INF:
        return ScientificTuple(NEG_INF, INF)
    if not value.is_finite():
        return ScientificTuple(NAN, NAN)
    if value < ZERO:
        mantissa, exponent = factorial_scientifify(-value, rounding, power, grid)
        return ScientificTuple(-mantissa, exponent)

    if value < ONE:
        return _factorial_scientifify_small(value, rounding, power, grid)

    exponent = current_step(inverse_factorial(value) - power, grid)
    unrounded = value / exponent.factorial()
    mantissa = rounding.apply(unrounded)
    if value >= _HUGE_LIMIT:
        logger.debug("factorial_scientifify: mantissa replaced by its lower bound at %s", exponent)
        return ScientificTuple(exponent.factorial() / (exponent - power).factorial(), exponent)

    for _ in range(RENORMALIZATION_LIMIT):
        previous_unrounded = unrounded
        following = next_step(exponent, grid)
        scaled = mantissa * exponent.factorial()
        if scaled >= (following + power).factorial():
            unrounded = unrounded * exponent.factorial() / following.factorial()
            exponent = following
            mantissa = rounding.apply(unrounded)
        elif exponent > ZERO and scaled < (current_step(exponent, grid) + power).factorial():
            preceding = previous_step(exponent, grid)
            unrounded = unrounded * exponent.factorial() / preceding.factorial()
            exponent = preceding
            mantissa = rounding.apply(unrounded)
        else:
            break
        if unrounded == previous_unrounded:
            break
    else:
        logger.debug("factorial_scientifify: renormalization stopped after %d steps", RENORMALIZATION_LIMIT)
    return ScientificTuple(mantissa, exponent)


def _factorial_scientifify_small(value, rounding, power, grid) -> ScientificTuple:
    exponent = current_step(inverse_factorial(value.recip()) + power, grid)
    unrounded = value * exponent.factorial()
    mantissa = rounding.apply(unrounded)
    if value <= _TINY_LIMIT:
        logger.debug("factorial_scientifify: mantissa replaced by its bound at %s", exponent)
        return ScientificTuple(exponent.factorial() / (exponent - power).factorial(), -exponent)

    for _ in range(RENORMALIZATION_LIMIT):
        previous_unrounded = unrounded
        scaled = mantissa / exponent.factorial()
        upper_limit = (previous_step(exponent, grid) - power).factorial().recip()
        lower_limit = (current_step(exponent, grid) - power).factorial().recip()
        if exponent > ZERO and scaled >= upper_limit:
            exponent = previous_step(exponent, grid)
        elif scaled < lower_limit:
            exponent = next_step(exponent, grid)
        else:
            break
        unrounded = value * exponent.factorial()
        mantissa = rounding.apply(unrounded)
        if unrounded == previous_unrounded:
            break
    else:
        logger.debug("factorial_scientifify: renormalization stopped after %d steps", RENORMALIZATION_LIMIT)
    return ScientificTuple(mantissa, -exponent)


def factorial_hyperscientifify(
    value: ExtendedSource,
    limit: ExtendedSource = 3,
    rounding: RoundingSource = None,
    grid: GridSource = None,
) -> HyperTuple:
    """
    Разложение value = b!!!... (e факториалов), b >= limit.

    Args:
        value: Раскладываемое значение
        limit: Нижняя граница мантиссы (default: 3); при b < limit
            число факториалов уменьшается
        rounding: Правило округления мантиссы
        grid: Сетка допустимых чисел факториалов

    Returns:
        HyperTuple(b, e); value <= 2 или limit <= 2 → (value, 0)

    Examples:
        >>> factorial_hyperscientifify(720)
        HyperTuple(mantissa=ExtendedReal('3.0'), hyperexponent=ExtendedReal('2.0'))
    """
    value = to_extended(value)
    limit = to_extended(limit)
    rounding = as_rounding(rounding)
    grid = QuantizationGrid.of(grid)

    if value == INF:
        return HyperTuple(INF, INF)
    if value <= TWO or limit <= TWO:
        return HyperTuple(value, ZERO)
    if not value.is_finite():
        return HyperTuple(NAN, NAN)

    exponent = current_step(factorial_slog(value, limit), grid)
    unrounded = inverse_factorial(value, exponent)
    mantissa = rounding.apply(unrounded)

    if abs(exponent) > MAX_SAFE_INTEGER:
        logger.debug("factorial_hyperscientifify: count %s beyond safe range", exponent)
        return HyperTuple(limit, exponent)
    if exponent < ZERO:
        return HyperTuple(mantissa, exponent)

    loop_watch = False
    for _ in range(RENORMALIZATION_LIMIT):
        previous_unrounded = unrounded
        gap = next_step(exponent, grid) - current_step(exponent, grid)
        if mantissa >= iterated_factorial(limit, gap):
            exponent = next_step(exponent, grid)
            if loop_watch:
                # вверх после вниз: мантисса у самой границы
                mantissa = rounding.apply(limit)
                break
            unrounded = inverse_factorial(value, exponent)
            mantissa = rounding.apply(unrounded)
        elif mantissa < limit:
            exponent = previous_step(exponent, grid)
            unrounded = inverse_factorial(value, exponent)
            mantissa = rounding.apply(unrounded)
            loop_watch = True
        else:
            break
        if unrounded == previous_unrounded:
            break
    else:
        logger.debug("factorial_hyperscientifify: renormalization stopped after %d steps", RENORMALIZATION_LIMIT)
    return HyperTuple(mantissa, exponent)
