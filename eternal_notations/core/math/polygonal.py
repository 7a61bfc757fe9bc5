"""
Polygonal Number Family — многоугольные числа и их итерации

Базовая функция:
    polygon(n, s) = ((s - 2) * n^2 - (s - 4) * n) / 2
s = 3 — треугольные числа, s = 4 — квадраты.

Уровни:
- polygon / polygon_root / polygon_log — квадратичный рост и два обратных
- bi_polygon(n, s, p) — polygon, применённый n раз к p (двойная
  экспонента); iterated_polygon_root и bi_polygon_root — обратные
- tri_polygon(n, s, b, p) — bi_polygon, применённый n раз (тетрационный
  рост); iterated_bi_polygon_root и tri_polygon_root — обратные

Нецелые итерации:
- bi_polygon при p > 1: вложенный polygon быстро сходится к A * B^(2^n) + C,
  где A = 2/(s - 2), C = (s - 4)/(2(s - 2)), а B подбирается по последней
  точной итерации. Между целыми итерациями интерполируется n этой формулы,
  за таблицей формула используется напрямую.
- bi_polygon при p < 1: геометрическое среднее соседних итераций (3 <= s < 6)
  или только целые итерации (s >= 6, поведение хаотично).
- tri_polygon: линейная интерполяция по slog.
Интерполяции приблизительные; их форма сохраняется как есть.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. s = 2 — тождество; s < 2 и отрицательный payload — NotationDomainError
2. Отрицательные итерации эквивалентны соответствующему обратному
3. Каждый поиск (таблица итераций, бисекция, guess-and-check) ограничен
"""

import logging
import math

from eternal_notations.core.math.extended_real import (
    NAN,
    NEG_INF,
    ONE,
    TWO,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    iterated_log,
    slog,
    tetrate,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import (
    ITERATION_BAIL_LIMIT,
    MAX_SAFE_INTEGER,
    SEARCH_ITERATION_LIMIT,
    NotationDomainError,
)

logger = logging.getLogger(__name__)

FOUR = ExtendedReal(4)

# Относительная точность guess-and-check поисков
SEARCH_TOLERANCE = 1e-15

# Выше этого payload "достаточно велик", чтобы пропустить детали
_SAFE_ROOT_FLOOR = ExtendedReal("1e100")

# Выше 10^MAX_SAFE_INTEGER итерации bi_polygon сводятся к двум слоям экспоненты
_TRI_SHORTCUT = ExtendedReal(MAX_SAFE_INTEGER).pow10()

# 10^10^10^MAX_SAFE_INTEGER: граница пропуска итераций у обратных tri-функций
_TRI_SAFE_LIMIT = tetrate(10, 3, MAX_SAFE_INTEGER)


def _check_sides(sides: ExtendedReal) -> None:
    if sides < TWO:
        raise NotationDomainError(f"repeated polygonal functions do not support sides < 2, got {sides}")


def _check_payload(payload: ExtendedReal) -> None:
    if payload < ZERO:
        raise NotationDomainError(f"repeated polygonal functions do not support negative payloads, got {payload}")


# =============================================================================
# POLYGON
# =============================================================================


def polygon(value: ExtendedSource, sides: ExtendedSource) -> ExtendedReal:
    """
    n-е s-угольное число.

    Examples:
        >>> polygon(4, 4)
        ExtendedReal('16.0')
        >>> polygon(4, 3)
        ExtendedReal('10.0')
    """
    value = to_extended(value)
    sides = to_extended(sides)
    return ((value - ONE) * (sides - TWO) + TWO) * value / TWO


def polygon_root(value: ExtendedSource, sides: ExtendedSource) -> ExtendedReal:
    """
    n такое, что polygon(n, sides) = value (положительный корень квадратного
    уравнения). Для s = 4 это квадратный корень.
    """
    value = to_extended(value)
    sides = to_extended(sides)
    if sides == TWO:
        return value
    discriminant = (sides - TWO) * 8 * value + sides.sqr() - sides * 8 + 16
    return (discriminant.sqrt() + sides - FOUR) / (sides * 2 - FOUR)


def polygon_log(value: ExtendedSource, base: ExtendedSource) -> ExtendedReal:
    """s такое, что polygon(base, s) = value."""
    value = to_extended(value)
    base = to_extended(base)
    return (value + base * (base - TWO)) / ((base.sqr() - base) / TWO)


# =============================================================================
# BI-POLYGON
# =============================================================================


class _DoubleExponentFit:
    """
    Таблица точных итераций polygon от payload и константы A, B, C формулы
    A * B^(2^n) + C.
    """

    def __init__(self, payload: ExtendedReal, sides: ExtendedReal):
        step = (FOUR - sides).max(ONE)
        table = [payload]
        for _ in range(SEARCH_ITERATION_LIMIT):
            last = table[-1]
            if last + step == last or not last.is_finite():
                break
            table.append(polygon(last, sides))
        else:
            logger.debug("bi_polygon: iteration table capped at %d entries", len(table))
        final = polygon(table[-1], sides)

        self.a = ((sides - TWO) / TWO).recip()
        self.c = (sides - FOUR) / ((sides - TWO) * 2)
        self.b = ((final - self.c) / self.a).root(TWO ** len(table))
        table.append(final)
        self.table = table

    def value_at(self, height: ExtendedReal) -> ExtendedReal:
        return self.b ** (TWO ** height) * self.a + self.c

    def height_of(self, value: ExtendedReal) -> ExtendedReal:
        return ((value - self.c) / self.a).log(self.b).log(2)


def _exact_entry(table, height: float):
    if 0 <= height < len(table) and height % 1 == 0:
        return table[int(height)]
    return None


def bi_polygon(value: ExtendedSource, sides: ExtendedSource, payload: ExtendedSource = 2) -> ExtendedReal:
    """
    polygon(·, sides), применённый value раз к payload.

    Args:
        value: Число применений (дробное — интерполяция, отрицательное —
            iterated_polygon_root)
        sides: Число сторон (>= 2)
        payload: Начальное значение (default: 2)

    Returns:
        Результат; NaN там, где результат был бы комплексным или
        интерполяция не определена

    Raises:
        NotationDomainError: sides < 2 или payload < 0

    Examples:
        >>> bi_polygon(2, 3)
        ExtendedReal('6.0')
        >>> bi_polygon(3, 4)
        ExtendedReal('256.0')
    """
    value = to_extended(value)
    sides = to_extended(sides)
    payload = to_extended(payload)

    if sides == TWO:
        return payload
    _check_sides(sides)
    if payload == ONE:
        return ONE
    if payload.is_zero():
        return ZERO
    _check_payload(payload)
    if value.is_nan():
        return NAN
    if value < ZERO:
        return iterated_polygon_root(payload, -value, sides)

    if payload > ONE:
        return _bi_polygon_growing(value, sides, payload)
    if sides == FOUR:
        return payload ** (TWO ** value)
    if sides < ExtendedReal(6):
        return _bi_polygon_shrinking(value, sides, payload)
    return _bi_polygon_whole(value, sides, payload)


def _bi_polygon_growing(value, sides, payload) -> ExtendedReal:
    fit = _DoubleExponentFit(payload, sides)
    table = fit.table
    height = value.to_number()

    exact = _exact_entry(table, height)
    if exact is not None:
        return exact
    if height >= len(table) - 1:
        return fit.value_at(value)
    lower = math.floor(height)
    fraction = height - lower

    lower_height = fit.height_of(table[lower]).to_number()
    upper_height = fit.height_of(table[lower + 1]).to_number()
    if not math.isfinite(lower_height) or not math.isfinite(upper_height):
        # для малых значений двойная экспонента не работает: интерполируем корни
        lower_root = table[lower].sqrt()
        upper_root = table[lower + 1].sqrt()
        return (upper_root * fraction + lower_root * (1 - fraction)).sqr()
    interpolated = upper_height * fraction + lower_height * (1 - fraction)
    return fit.value_at(ExtendedReal(interpolated))


def _bi_polygon_shrinking(value, sides, payload) -> ExtendedReal:
    added = FOUR - sides
    table = [payload]
    for _ in range(SEARCH_ITERATION_LIMIT):
        if table[-1] + added == added:
            break
        table.append(polygon(table[-1], sides))
    else:
        logger.debug("bi_polygon: shrinking table capped at %d entries", len(table))
    table.append(polygon(table[-1], sides))

    height = value.to_number()
    exact = _exact_entry(table, height)
    if exact is not None:
        return exact
    if height < len(table) - 1:
        lower = math.floor(height)
        fraction = height - lower
        lower_value = table[lower]
        upper_value = table[lower + 1]
        if lower_value < ZERO or upper_value < ZERO:
            return NAN
        # итерации стремятся к делению, поэтому геометрическое среднее
        return upper_value ** ExtendedReal(fraction) * lower_value ** ExtendedReal(1 - fraction)
    # для отрицательного множителя и нецелого value это NaN: результат комплексный
    return table[-1] * (added / TWO) ** (value - len(table))


def _bi_polygon_whole(value, sides, payload) -> ExtendedReal:
    if not value.is_integer():
        return NAN
    done = ZERO
    for _ in range(ITERATION_BAIL_LIMIT):
        if done >= value:
            return payload
        done = done + ONE
        previous = payload
        payload = polygon(payload, sides)
        if payload.is_zero():
            return ZERO
        if payload == previous.sqr():
            # при больших s итерации сводятся к возведению в квадрат
            return payload ** (TWO ** (value - done))
    logger.debug("bi_polygon: whole-iteration loop stopped after %d steps", ITERATION_BAIL_LIMIT)
    return payload


def _guess_and_check(evaluate, target: ExtendedReal, lower: ExtendedReal, upper: ExtendedReal,
                     grow_upper: bool, name: str, fallback: ExtendedReal = NAN):
    """
    Поиск аргумента с расширением границы, пока направление не сменится.

    evaluate(guess) -> (кандидат, значение функции); функция возрастает по
    guess. grow_upper: расширять верхнюю (True) или нижнюю (False) границу.
    """
    candidate = fallback
    changed_direction = False
    for _ in range(SEARCH_ITERATION_LIMIT):
        if lower.eq_tolerance(upper, SEARCH_TOLERANCE):
            break
        guess = (lower + upper) / TWO
        candidate, result = evaluate(guess)
        if result == target:
            return candidate
        if result < target:
            if grow_upper and not changed_direction:
                upper = upper * TWO
            else:
                lower = guess
                if not grow_upper:
                    changed_direction = True
        else:
            if not grow_upper and not changed_direction:
                lower = lower * TWO
            else:
                upper = guess
                if grow_upper:
                    changed_direction = True
    else:
        logger.debug("%s: search stopped after %d steps", name, SEARCH_ITERATION_LIMIT)
    return candidate


def iterated_polygon_root(payload: ExtendedSource, iterations: ExtendedSource, sides: ExtendedSource) -> ExtendedReal:
    """
    polygon_root, применённый iterations раз к payload (bi_polygon с
    отрицательным числом итераций).

    Результат сначала оценивается прямыми итерациями, затем уточняется
    guess-and-check по slog, так чтобы bi_polygon(iterations, sides, result)
    возвращал payload.

    Raises:
        NotationDomainError: sides < 2 или payload < 0

    Examples:
        >>> iterated_polygon_root(256, 3, 4).eq_tolerance(2)
        True
    """
    payload = to_extended(payload)
    original = payload
    iterations = to_extended(iterations)
    sides = to_extended(sides)

    if sides == TWO:
        return payload
    _check_sides(sides)
    if payload == ONE:
        return ONE
    if payload.is_zero():
        return ZERO
    _check_payload(payload)
    if iterations < ZERO:
        return bi_polygon(-iterations, sides, payload)

    a = ((sides - TWO) / TWO).recip()

    if payload > ONE:
        done = ZERO
        floor_value = _SAFE_ROOT_FLOOR.max(sides.sqr())
        if payload > floor_value:
            safe = (payload.root(floor_value).log(2) - ONE).floor().max(ZERO).min(iterations.ceil())
            if safe > ZERO:
                payload = payload.root(TWO ** safe) * a ** (ONE - TWO ** -safe)
                done = safe
        payload = _root_steps(payload, iterations, sides, done)
        if payload == ONE or not payload.is_finite():
            return payload

        def evaluate(guess):
            candidate = tetrate(10, guess)
            return candidate, bi_polygon(iterations, sides, candidate)

        return _guess_and_check(evaluate, original, ZERO, slog(payload * TWO), True, "iterated_polygon_root", payload)

    if sides == FOUR:
        return payload.root(TWO ** iterations)
    if sides < FOUR or payload >= (sides - FOUR) / (sides - TWO):
        done = ZERO
        multiplier = (FOUR - sides) / TWO
        threshold = multiplier / ExtendedReal("1e16")
        if abs(payload) < threshold:
            safe = abs(abs(payload).root(threshold.log(multiplier)).log(multiplier)).floor()
            if safe > ZERO:
                payload = payload.root(TWO ** safe) * a ** (ONE - TWO ** -safe)
                done = safe
        payload = _root_steps(payload, iterations, sides, done)
        if payload == ONE:
            return ONE

        def evaluate(guess):
            candidate = tetrate(10, guess).recip()
            return candidate, bi_polygon(iterations, sides, candidate)

        return _guess_and_check(
            evaluate, original, slog(payload.recip() / TWO), ZERO, False, "iterated_polygon_root", payload
        )

    # хаотичная область: только целые итерации
    if not iterations.is_integer():
        return NAN
    done = ZERO
    for _ in range(ITERATION_BAIL_LIMIT):
        if done >= iterations:
            break
        done = done + ONE
        payload = polygon_root(payload, sides)
        if payload.is_zero():
            return ZERO
    return payload


def _root_steps(payload, iterations, sides, done) -> ExtendedReal:
    """Целые шаги polygon_root до ceil(iterations) и откат лишней доли через bi_polygon."""
    for _ in range(ITERATION_BAIL_LIMIT):
        if not iterations > done:
            break
        payload = polygon_root(payload, sides)
        done = done + ONE
        if payload == ONE:
            return ONE
    else:
        logger.debug("iterated_polygon_root: root loop stopped after %d steps", ITERATION_BAIL_LIMIT)
    if done != iterations:
        payload = bi_polygon(done - iterations, sides, payload)
    return payload


def bi_polygon_root(value: ExtendedSource, sides: ExtendedSource, zero_value: ExtendedSource = 2) -> ExtendedReal:
    """
    n такое, что bi_polygon(n, sides, zero_value) = value.

    Выше последней точной итерации формула A * B^(2^n) + C обращается в
    замкнутом виде, ниже — бисекция.

    Returns:
        n; -inf для value = 1; NaN для value < 1, sides = 2 или zero_value = 1

    Examples:
        >>> bi_polygon_root(6, 3)
        ExtendedReal('2.0')
    """
    value = to_extended(value)
    sides = to_extended(sides)
    zero_value = to_extended(zero_value)

    if sides == TWO:
        return NAN
    _check_sides(sides)
    if zero_value == ONE:
        return NAN
    if value == ONE:
        return NEG_INF
    if value < ONE:
        return NAN

    fit = _DoubleExponentFit(zero_value, sides)
    if value == zero_value:
        return ZERO
    if value >= fit.table[-1]:
        return fit.height_of(value)

    def evaluate(guess):
        return guess, bi_polygon(guess, sides, zero_value)

    if value > zero_value:
        return _guess_and_check(evaluate, value, ZERO, ExtendedReal(len(fit.table) - 1), True, "bi_polygon_root")
    return _guess_and_check(evaluate, value, ExtendedReal(-1), ZERO, False, "bi_polygon_root")


# =============================================================================
# TRI-POLYGON
# =============================================================================


def tri_polygon(
    value: ExtendedSource,
    sides: ExtendedSource,
    base: ExtendedSource = 2,
    payload: ExtendedSource = 2,
) -> ExtendedReal:
    """
    bi_polygon(·, sides, base), применённый value раз к payload.

    Каждая итерация увеличивает slog результата примерно на 2. Дробная
    часть value интерполируется линейно по slog между payload и
    bi_polygon(payload, sides, base).

    Examples:
        >>> tri_polygon(1, 3)
        ExtendedReal('6.0')
    """
    value = to_extended(value)
    sides = to_extended(sides)
    base = to_extended(base)
    payload = to_extended(payload)

    if sides == TWO:
        return payload
    _check_sides(sides)
    if value < ZERO:
        return iterated_bi_polygon_root(payload, -value, sides, base)

    whole = value.floor()
    fraction = (value - whole).to_mpf()
    if fraction != 0:
        floor_height = slog(payload).to_mpf()
        ceiling_height = slog(bi_polygon(payload, sides, base)).to_mpf()
        payload = tetrate(10, ceiling_height * fraction + floor_height * (1 - fraction))

    done = ZERO
    for _ in range(ITERATION_BAIL_LIMIT):
        if not done < whole:
            break
        done = done + ONE
        payload = bi_polygon(payload, sides, base)
        if payload > _TRI_SHORTCUT:
            payload = tetrate(10, (whole - done) * TWO, payload)
            break
    else:
        logger.debug("tri_polygon: iteration loop stopped after %d steps", ITERATION_BAIL_LIMIT)
    return payload


def _tri_safe_iterations(value: ExtendedReal) -> ExtendedReal:
    """Сколько итераций можно снять двумя логарифмами каждая."""
    if value > _TRI_SAFE_LIMIT:
        return ((slog(value) - slog(_TRI_SAFE_LIMIT)) / TWO + ONE).floor()
    return ZERO


def iterated_bi_polygon_root(
    payload: ExtendedSource,
    iterations: ExtendedSource,
    sides: ExtendedSource,
    zero_value: ExtendedSource = 2,
) -> ExtendedReal:
    """
    bi_polygon_root, применённый iterations раз (tri_polygon с отрицательным
    числом итераций). Уточняется guess-and-check по slog.

    Returns:
        Результат; NaN для payload < 1
    """
    payload = to_extended(payload)
    original = payload
    iterations = to_extended(iterations)
    sides = to_extended(sides)
    zero_value = to_extended(zero_value)

    if sides == TWO:
        return payload
    _check_sides(sides)
    if payload < ONE:
        return NAN
    if iterations < ZERO:
        return tri_polygon(-iterations, sides, zero_value, payload)

    done = ZERO
    safe = _tri_safe_iterations(payload)
    if safe > ZERO:
        payload = iterated_log(payload, 10, safe * TWO)
        done = safe

    for _ in range(ITERATION_BAIL_LIMIT):
        if not iterations > done:
            break
        if payload < ONE:
            return NAN
        payload = bi_polygon_root(payload, sides, zero_value)
        done = done + ONE
    if not payload.is_finite():
        return NAN
    if done != iterations:
        payload = tri_polygon(done - iterations, sides, zero_value, payload)

    def evaluate(guess):
        candidate = tetrate(10, guess)
        return candidate, tri_polygon(iterations, sides, zero_value, candidate)

    upper = (slog(payload) * TWO).max(ExtendedReal(5))
    return _guess_and_check(evaluate, original, ExtendedReal(-1), upper, True, "iterated_bi_polygon_root", payload)


def tri_polygon_root(
    value: ExtendedSource,
    sides: ExtendedSource,
    base: ExtendedSource = 2,
    zero_value: ExtendedSource = 2,
) -> ExtendedReal:
    """
    n такое, что tri_polygon(n, sides, base, zero_value) = value.

    Грубая оценка — число шагов bi_polygon_root до zero_value, затем бисекция
    на [0, 2 * оценка].

    Returns:
        n; NaN, если bi_polygon_root перестаёт убывать
    """
    value = to_extended(value)
    original = value
    sides = to_extended(sides)
    base = to_extended(base)
    zero_value = to_extended(zero_value)

    if sides == TWO:
        return NAN
    _check_sides(sides)

    steps = ZERO
    safe = _tri_safe_iterations(value)
    if safe > ZERO:
        value = iterated_log(value, 10, safe * TWO)
        steps = safe

    for _ in range(ITERATION_BAIL_LIMIT):
        if not value > zero_value:
            break
        steps = steps + ONE
        reduced = bi_polygon_root(value, sides, base)
        if reduced > value or reduced == value:
            return NAN
        value = reduced
    else:
        logger.debug("tri_polygon_root: reduction stopped after %d steps", ITERATION_BAIL_LIMIT)

    lower = ZERO
    upper = steps * TWO
    result = steps
    changed_direction = False
    for _ in range(SEARCH_ITERATION_LIMIT):
        widest = lower.max(upper)
        if widest.is_zero() or abs(lower - upper) / widest <= SEARCH_TOLERANCE:
            break
        result = (lower + upper) / TWO
        reached = tri_polygon(result, sides, base, zero_value)
        if reached == original:
            return result
        if reached < original:
            if changed_direction:
                lower = result
            else:
                upper = upper * TWO
        else:
            upper = result
            changed_direction = True
    else:
        logger.debug("tri_polygon_root: search stopped after %d steps", SEARCH_ITERATION_LIMIT)
    return result
