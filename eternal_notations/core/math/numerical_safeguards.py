"""
Numerical Safeguards — доменные ограничения и защитные константы

Модуль собирает всё, что защищает алгоритмы декомпозиции от некорректных
параметров и от потери точности на экстремальных порядках:
- Магнитудные пороги (MAX_SAFE_INTEGER, MAGNITUDE_GUARD), за которыми
  остаток мантиссы больше не несёт информации
- Лимиты итераций для всех поисковых циклов
- Валидация параметров (база, множители, сетка) с NotationDomainError
- Квантование мантиссы (round_to_quantum) с правилом "квант 0 = без округления"

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Доменные ошибки поднимаются синхронно, до любых вычислений
2. Квант округления 0 означает тождество, деления на ноль нет
3. Каждый поисковый цикл имеет явный лимит итераций
"""

from typing import Final

from mpmath import mpf

from eternal_notations.core.math.extended_real import (
    ITERATION_BAIL_LIMIT,  # noqa: F401  (реэкспорт)
    ONE,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    to_extended,
)

# =============================================================================
# МАГНИТУДНЫЕ ПОРОГИ
# =============================================================================

# Наибольшее целое, точно представимое в double (2^53 - 1)
# Экспоненты выше этого: мантисса заменяется граничным значением
MAX_SAFE_INTEGER: Final[int] = 9007199254740991

# e^(1/e): основания не выше этого дают сходящуюся бесконечную тетрацию
TETRATION_CONVERGENCE_THRESHOLD: Final = mpf("1.44466786100976613366")

# Локальный минимум x! на положительной полуоси
FACTORIAL_LOCAL_MINIMUM: Final = mpf("0.461632144968362341262659542325")

# Граница, после которой factorial_slog переходит на прямую оценку
MAGNITUDE_GUARD: Final = mpf("9e15")

# =============================================================================
# ЛИМИТЫ ИТЕРАЦИЙ
# =============================================================================

# Бисекция и guess-and-check поиски (обратный факториал, корни многоугольников)
SEARCH_ITERATION_LIMIT: Final[int] = 200

# Каскады перенормировки мантиссы после округления
RENORMALIZATION_LIMIT: Final[int] = 1000

# Повторные применения операции (итерированный факториал, многоугольники)
# берут ITERATION_BAIL_LIMIT из extended_real, общий с циклами exp/log

# =============================================================================
# ТОЛЕРАНТНОСТИ
# =============================================================================

# Относительная толерантность для проверок сходимости
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9

# Абсолютная толерантность около нуля
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12


# =============================================================================
# ИСКЛЮЧЕНИЯ
# =============================================================================


class NotationDomainError(ValueError):
    """
    Параметр вне области определения операции.

    Поднимается для: базы <= 1, базы не выше порога сходимости тетрации в
    итерированных операциях, неположительных шагов сетки, нулевых
    множителей, значений ниже локального минимума факториала.
    """

    pass


# =============================================================================
# СРАВНЕНИЯ
# =============================================================================


def is_close(
    a: ExtendedSource,
    b: ExtendedSource,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение с учётом точности.

    Алгоритм:
        abs(a - b) <= abs_tol, либо относительное совпадение (eq_tolerance)

    Examples:
        >>> is_close(1.0, 1.0 + 1e-10)
        True
        >>> is_close(0.0, 1e-13)
        True
        >>> is_close("1e1000", "1.0000000001e1000")
        True
    """
    a = to_extended(a)
    b = to_extended(b)
    if a.is_nan() or b.is_nan():
        return False
    if abs(a - b) <= abs_tol:
        return True
    return a.eq_tolerance(b, rel_tol)


# =============================================================================
# КВАНТОВАНИЕ
# =============================================================================


def round_to_quantum(value: ExtendedSource, quantum: ExtendedSource) -> ExtendedReal:
    """
    Округление до ближайшего кратного quantum (половины вверх).

    Квант 0 означает "без округления": значение возвращается как есть.

    Examples:
        >>> round_to_quantum(2.357, 0.01)
        ExtendedReal('2.36')
        >>> round_to_quantum(2.357, 0)
        ExtendedReal('2.357')
    """
    value = to_extended(value)
    quantum = to_extended(quantum)
    if quantum.is_zero():
        return value
    return (value / quantum).round() * quantum


def multabs(value: ExtendedSource) -> ExtendedReal:
    """
    Мультипликативный модуль: 1/x при |x| < 1, иначе x. Ноль остаётся нулём.
    """
    value = to_extended(value)
    if value.is_zero():
        return ZERO
    if abs(value) < ONE:
        return value.recip()
    return value


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_base(base: ExtendedSource, name: str = "base") -> ExtendedReal:
    """
    Валидация основания: конечное и строго больше 1.

    Raises:
        NotationDomainError: Если base <= 1, NaN или бесконечность
    """
    base = to_extended(base)
    if not base.is_finite() or base <= ONE:
        raise NotationDomainError(f"{name} must be a finite value greater than 1, got {base}")
    return base


def validate_nonzero(value: ExtendedSource, name: str) -> ExtendedReal:
    """
    Валидация ненулевого множителя.

    Raises:
        NotationDomainError: Если value == 0 или NaN
    """
    value = to_extended(value)
    if value.is_zero() or value.is_nan():
        raise NotationDomainError(f"{name} must be non-zero, got {value}")
    return value


def validate_positive(value: ExtendedSource, name: str) -> ExtendedReal:
    """
    Валидация строго положительного конечного значения.

    Raises:
        NotationDomainError: Если value <= 0, NaN или бесконечность
    """
    value = to_extended(value)
    if not value.is_finite() or value <= ZERO:
        raise NotationDomainError(f"{name} must be positive and finite, got {value}")
    return value


def validate_convergent_base(
    base: ExtendedSource,
    exp_multiplier: ExtendedSource = 1,
    operation: str = "operation",
) -> ExtendedReal:
    """
    Валидация основания для итерированных операций.

    Эффективное основание base^(1/exp_multiplier) должно превышать порог
    сходимости тетрации e^(1/e), иначе итерированная экспонента ограничена
    и разложение не определено.

    Returns:
        Эффективное основание

    Raises:
        NotationDomainError: Если основание не проходит проверку
    """
    base = validate_base(base)
    exp_multiplier = validate_nonzero(exp_multiplier, "exp_multiplier")
    effective_base = base ** exp_multiplier.recip()
    if effective_base <= TETRATION_CONVERGENCE_THRESHOLD:
        raise NotationDomainError(
            f"{operation} does not support convergent tetrations: "
            f"effective base {effective_base} <= {TETRATION_CONVERGENCE_THRESHOLD}"
        )
    return effective_base
