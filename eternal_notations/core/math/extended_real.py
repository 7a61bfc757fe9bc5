"""
ExtendedReal — слоистое вещественное число для экстремальных порядков

Числовой фундамент всех алгоритмов декомпозиции. Значение хранится как
тройка (sign, layer, mag):

    value = sign * 10^10^...^mag      (layer десяток)

- layer 0: обычное число, |value| в [1/EXP_LIMIT, EXP_LIMIT)
- layer >= 1, mag > 0: огромные значения (10^mag, 10^10^mag, ...)
- layer >= 1, mag < 0: исчезающе малые значения, обратные к положительному mag

Магнитуды — mpmath.mpf, поэтому слой 0 точен для целых до 2^53 и не
переполняется на промежуточных шагах.

Тетрационное семейство (tetrate / iterated_log / slog) использует
линейное приближение для нецелых высот: slog(x) = n + x_n - 1, где x_n —
результат n логарифмов, впервые попавший в (0, 1].

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Экземпляры неизменяемы и нормализованы (одна тройка на значение)
2. NaN не равен ничему, включая себя
3. log от значения <= 0 возвращает NaN (0 → -inf), исключений нет
4. Все циклы ограничены (ITERATION_BAIL_LIMIT, SLOG_LOOP_LIMIT)
"""

from __future__ import annotations

import logging
import numbers
from fractions import Fraction
from typing import Final, Union

import mpmath
from mpmath import mpf

logger = logging.getLogger(__name__)

# =============================================================================
# КОНСТАНТЫ НОРМАЛИЗАЦИИ
# =============================================================================

# Граница слоя: значения >= EXP_LIMIT переходят на следующий слой
EXP_LIMIT: Final = mpf("9e15")

# log10(EXP_LIMIT): магнитуды ниже этого значения спускаются на слой ниже
LAYER_DOWN: Final = mpmath.log10(EXP_LIMIT)

# Значения слоя 0 ниже этого порога кодируются отрицательной магнитудой слоя 1
FIRST_NEG_LAYER: Final = 1 / EXP_LIMIT

# Разница слоёв, после которой iterated exp/log просто сдвигают layer
LAYER_SHORTCUT: Final[int] = 3

# Бросаем итерации exp/log, если за столько шагов ничего не произошло.
# Тот же лимит у итерированных факториалов и многоугольников
ITERATION_BAIL_LIMIT: Final[int] = 10000

# Максимум логарифмов при вычислении slog
SLOG_LOOP_LIMIT: Final[int] = 100

LN10: Final = mpmath.log(10)

_INF = mpf("inf")
_NAN = mpf("nan")


ExtendedSource = Union["ExtendedReal", int, float, str, Fraction, mpf]


def _sgn(x) -> int:
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0


def _normalize(sign: int, layer: int, mag) -> tuple[int, int, mpf]:
    """Приводит тройку к канонической форме."""
    mag = mpf(mag)

    if mpmath.isnan(mag):
        return 1, 0, _NAN

    if mpmath.isinf(mag):
        if layer == 0:
            return (sign or 1) * _sgn(mag), 0, _INF
        if mag > 0:
            return sign or 1, 0, _INF
        # 10^-inf
        return 0, 0, mpf(0)

    if sign == 0 or (layer == 0 and mag == 0):
        return 0, 0, mpf(0)

    if layer == 0 and mag < 0:
        sign, mag = -sign, -mag

    if layer == 0 and mag < FIRST_NEG_LAYER:
        layer, mag = 1, mpmath.log10(mag)

    while abs(mag) >= EXP_LIMIT:
        layer += 1
        mag = _sgn(mag) * mpmath.log10(abs(mag))

    # спуск без повторного подъёма: на границе округление не должно зацикливать
    while layer > 0 and abs(mag) < LAYER_DOWN:
        layer -= 1
        if layer == 0:
            mag = mpmath.power(10, mag)
        else:
            mag = _sgn(mag) * mpmath.power(10, abs(mag))

    return sign, layer, mag


def _parse(text: str) -> tuple[int, int, mpf]:
    """
    Разбор строки: "2.5e300", "-1e-5000", "ee100" (префиксы e — слои),
    "inf", "-infinity", "nan".
    """
    s = text.strip().lower().replace("_", "")
    if s in ("nan", "+nan", "-nan"):
        return 1, 0, _NAN
    if s in ("inf", "+inf", "infinity", "+infinity"):
        return 1, 0, _INF
    if s in ("-inf", "-infinity"):
        return -1, 0, _INF

    sign = 1
    if s.startswith("-"):
        sign, s = -1, s[1:]
    elif s.startswith("+"):
        s = s[1:]

    layers = 0
    while s.startswith("e"):
        layers += 1
        s = s[1:]
    if not s:
        raise ValueError(f"Cannot parse ExtendedReal from {text!r}")

    result = ExtendedReal(mpf(s))
    for _ in range(layers):
        result = result.pow10()
    if result._sign == 0:
        return 0, 0, mpf(0)
    return _normalize(sign * result._sign, result._layer, result._mag)


def _components_from(value) -> tuple[int, int, mpf]:
    if isinstance(value, ExtendedReal):
        return value._sign, value._layer, value._mag
    if isinstance(value, str):
        return _parse(value)
    if isinstance(value, Fraction):
        return _normalize(1, 0, mpf(value.numerator) / mpf(value.denominator))
    if isinstance(value, (int, float, mpf)):
        return _normalize(1, 0, mpf(value))
    if isinstance(value, numbers.Real):
        return _normalize(1, 0, mpf(float(value)))
    raise TypeError(f"Cannot convert {type(value).__name__} to ExtendedReal")


# =============================================================================
# EXTENDED REAL
# =============================================================================


class ExtendedReal:
    """
    Неизменяемое слоистое вещественное число.

    Examples:
        >>> ExtendedReal(2357) / 1000
        ExtendedReal('2.357')
        >>> ExtendedReal("1e1000").log10()
        ExtendedReal('1000.0')
        >>> tetrate(10, 3).layer
        2
    """

    __slots__ = ("_sign", "_layer", "_mag")

    def __init__(self, value: ExtendedSource = 0):
        sign, layer, mag = _components_from(value)
        object.__setattr__(self, "_sign", sign)
        object.__setattr__(self, "_layer", layer)
        object.__setattr__(self, "_mag", mag)

    def __setattr__(self, name, value):
        raise AttributeError("ExtendedReal is immutable")

    def __reduce__(self):
        return (ExtendedReal.from_components, (self._sign, self._layer, self._mag))

    @classmethod
    def from_components(cls, sign: int, layer: int, mag) -> "ExtendedReal":
        """Создание из (sign, layer, mag) с нормализацией."""
        return cls._raw(*_normalize(sign, layer, mag))

    @classmethod
    def _raw(cls, sign: int, layer: int, mag) -> "ExtendedReal":
        obj = cls.__new__(cls)
        object.__setattr__(obj, "_sign", sign)
        object.__setattr__(obj, "_layer", layer)
        object.__setattr__(obj, "_mag", mpf(mag))
        return obj

    # -------------------------------------------------------------------------
    # Компоненты и предикаты
    # -------------------------------------------------------------------------

    @property
    def sign(self) -> int:
        return 0 if self.is_nan() else self._sign

    @property
    def layer(self) -> int:
        return self._layer

    @property
    def mag(self) -> mpf:
        return self._mag

    def is_nan(self) -> bool:
        return bool(mpmath.isnan(self._mag))

    def is_finite(self) -> bool:
        return not (mpmath.isnan(self._mag) or mpmath.isinf(self._mag))

    def is_zero(self) -> bool:
        return self._sign == 0

    def is_integer(self) -> bool:
        """Целое ли значение (огромные значения слоёв >= 1 считаются целыми)."""
        if not self.is_finite():
            return False
        if self._layer == 0:
            return self._mag == mpmath.floor(self._mag)
        return self._mag > 0

    # -------------------------------------------------------------------------
    # Конверсия
    # -------------------------------------------------------------------------

    def to_mpf(self) -> mpf:
        """Значение как mpf; слои >= 2 дают inf (или 0 для малых)."""
        if mpmath.isnan(self._mag):
            return _NAN
        if mpmath.isinf(self._mag):
            return self._sign * _INF
        if self._layer == 0:
            return self._sign * self._mag
        if self._layer == 1:
            return self._sign * mpmath.power(10, self._mag)
        if self._mag > 0:
            return self._sign * _INF
        return mpf(0)

    def to_number(self) -> float:
        return float(self.to_mpf())

    def __float__(self) -> float:
        return self.to_number()

    def __int__(self) -> int:
        if not self.is_finite():
            raise OverflowError(f"Cannot convert {self!r} to int")
        if self._layer == 0 or self._mag < 0:
            return int(self.trunc().to_mpf())
        if self._layer == 1 and self._mag < 10000:
            return int(self.to_mpf())
        raise OverflowError(f"{self!r} is too large to convert to int")

    def __bool__(self) -> bool:
        return self._sign != 0 or self.is_nan()

    # -------------------------------------------------------------------------
    # Унарные операции
    # -------------------------------------------------------------------------

    def __neg__(self) -> "ExtendedReal":
        if self.is_nan():
            return self
        return ExtendedReal._raw(-self._sign, self._layer, self._mag)

    def __pos__(self) -> "ExtendedReal":
        return self

    def __abs__(self) -> "ExtendedReal":
        if self.is_nan():
            return self
        return ExtendedReal._raw(abs(self._sign), self._layer, self._mag)

    def recip(self) -> "ExtendedReal":
        """1 / value. Для нуля возвращает NaN."""
        if self.is_nan() or self._sign == 0:
            return NAN
        if mpmath.isinf(self._mag):
            return ZERO
        if self._layer == 0:
            return ExtendedReal.from_components(self._sign, 0, 1 / self._mag)
        return ExtendedReal.from_components(self._sign, self._layer, -self._mag)

    def log10abs(self) -> "ExtendedReal":
        if self.is_nan():
            return NAN
        if self._sign == 0:
            return NEG_INF
        if mpmath.isinf(self._mag):
            return INF
        if self._layer == 0:
            return ExtendedReal(mpmath.log10(self._mag))
        if self._layer == 1:
            return ExtendedReal(self._mag)
        return ExtendedReal.from_components(_sgn(self._mag), self._layer - 1, abs(self._mag))

    def log10(self) -> "ExtendedReal":
        """Десятичный логарифм; NaN для отрицательных, -inf для нуля."""
        if self._sign < 0:
            return NAN
        return self.log10abs()

    def log(self, base: ExtendedSource = 10) -> "ExtendedReal":
        """Логарифм по произвольному основанию."""
        base = to_extended(base)
        if self._sign < 0 or base._sign <= 0 or base == ONE:
            return NAN
        if base == TEN:
            return self.log10()
        return self.log10() / base.log10()

    def ln(self) -> "ExtendedReal":
        return self.log10() * LN10

    def pow10(self) -> "ExtendedReal":
        """10^value."""
        if self.is_nan():
            return NAN
        if mpmath.isinf(self._mag):
            return INF if self._sign > 0 else ZERO
        if self._layer == 0:
            return ExtendedReal.from_components(1, 1, self._sign * self._mag)
        if self._mag < 0:
            if self._layer == 1:
                return ExtendedReal(mpmath.power(10, self.to_mpf()))
            return ONE
        return ExtendedReal.from_components(1, self._layer + 1, self._sign * self._mag)

    def exp(self) -> "ExtendedReal":
        return (self / LN10).pow10()

    def sqrt(self) -> "ExtendedReal":
        return self ** HALF

    def sqr(self) -> "ExtendedReal":
        return self * self

    def root(self, degree: ExtendedSource) -> "ExtendedReal":
        return self ** to_extended(degree).recip()

    # -------------------------------------------------------------------------
    # Округление
    # -------------------------------------------------------------------------

    def floor(self) -> "ExtendedReal":
        if not self.is_finite():
            return self
        if self._layer == 0:
            return ExtendedReal(mpmath.floor(self._sign * self._mag))
        if self._mag > 0:
            return self
        return ZERO if self._sign > 0 else NEG_ONE

    def ceil(self) -> "ExtendedReal":
        if not self.is_finite():
            return self
        if self._layer == 0:
            return ExtendedReal(mpmath.ceil(self._sign * self._mag))
        if self._mag > 0:
            return self
        return ONE if self._sign > 0 else ZERO

    def round(self) -> "ExtendedReal":
        """Округление к ближайшему целому, половины вверх."""
        if not self.is_finite() or (self._layer > 0 and self._mag > 0):
            return self
        return (self + HALF).floor()

    def __round__(self, ndigits=None):
        if ndigits is None:
            return int(self.round())
        scale = mpf(10) ** ndigits
        return ExtendedReal(mpmath.floor(self.to_mpf() * scale + mpf("0.5")) / scale)

    def trunc(self) -> "ExtendedReal":
        return self.floor() if self._sign >= 0 else self.ceil()

    def mod1(self) -> "ExtendedReal":
        """Дробная часть x - floor(x), всегда в [0, 1)."""
        return self - self.floor()

    # -------------------------------------------------------------------------
    # Факториал
    # -------------------------------------------------------------------------

    def factorial(self) -> "ExtendedReal":
        """
        x! = Gamma(x + 1).

        На слое 0 считается через mpmath.gamma; выше — формула Стирлинга
        ln(x!) = x(ln x - 1) + ln(2 pi x) / 2. Для отрицательных целых NaN.
        """
        if self.is_nan():
            return NAN
        if mpmath.isinf(self._mag):
            return INF if self._sign > 0 else NAN
        if self._layer == 0 or self._mag < 0:
            x = self.to_mpf()
            if x < 0 and x == mpmath.floor(x):
                return NAN
            return ExtendedReal(mpmath.gamma(x + 1))
        if self._sign < 0:
            return NAN
        ln_x = self.ln()
        ln_factorial = self * (ln_x - ONE) + (ln_x + _LN_TWO_PI) / TWO
        return ln_factorial.exp()

    # -------------------------------------------------------------------------
    # Арифметика
    # -------------------------------------------------------------------------

    def __add__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _add(self, other)

    __radd__ = __add__

    def __sub__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _add(self, -other)

    def __rsub__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _add(other, -self)

    def __mul__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _mul(self, other)

    __rmul__ = __mul__

    def __truediv__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _mul(self, other.recip())

    def __rtruediv__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _mul(other, self.recip())

    def __pow__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _pow(self, other)

    def __rpow__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _pow(other, self)

    # -------------------------------------------------------------------------
    # Сравнения
    # -------------------------------------------------------------------------

    def __eq__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _cmp(self, other) == 0

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _cmp(self, other) == -1

    def __le__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _cmp(self, other) in (-1, 0)

    def __gt__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _cmp(self, other) == 1

    def __ge__(self, other):
        try:
            other = to_extended(other)
        except TypeError:
            return NotImplemented
        return _cmp(self, other) in (1, 0)

    def __hash__(self):
        if self._layer == 0:
            return hash(self.to_mpf())
        return hash((self._sign, self._layer, self._mag))

    def eq_tolerance(self, other: ExtendedSource, tolerance: float = 1e-7) -> bool:
        """
        Равенство с относительной толерантностью:
        |a - b| <= tolerance * max(|a|, |b|).

        Для слоёв >= 2 сравниваются магнитуды одного слоя.
        """
        other = to_extended(other)
        if self.is_nan() or other.is_nan():
            return False
        if self == other:
            return True
        if self._sign != other._sign:
            return False
        if self._layer <= 1 and other._layer <= 1:
            a, b = self.to_mpf(), other.to_mpf()
            return abs(a - b) <= tolerance * max(abs(a), abs(b))
        if self._layer == other._layer:
            return abs(self._mag - other._mag) <= tolerance * max(abs(self._mag), abs(other._mag))
        return False

    def max(self, other: ExtendedSource) -> "ExtendedReal":
        other = to_extended(other)
        return other if self < other else self

    def min(self, other: ExtendedSource) -> "ExtendedReal":
        other = to_extended(other)
        return other if self > other else self

    # -------------------------------------------------------------------------
    # Представление
    # -------------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"ExtendedReal({str(self)!r})"

    def __str__(self) -> str:
        if self.is_nan():
            return "nan"
        if mpmath.isinf(self._mag):
            return "-inf" if self._sign < 0 else "inf"
        prefix = "-" if self._sign < 0 else ""
        if self._layer == 0:
            return prefix + mpmath.nstr(self._mag, 15)
        if self._layer == 1:
            exponent = mpmath.floor(self._mag)
            mantissa = mpmath.power(10, self._mag - exponent)
            return f"{prefix}{mpmath.nstr(mantissa, 15)}e{int(exponent)}"
        return prefix + "e" * (self._layer - 1) + str(ExtendedReal._raw(1, 1, self._mag))


# =============================================================================
# ВНУТРЕННЯЯ АРИФМЕТИКА
# =============================================================================


def _tier(x: ExtendedReal) -> int:
    """-1: исчезающе малые, 0: слой 0, 1: огромные."""
    if x._layer == 0:
        return 0
    return 1 if x._mag > 0 else -1


def _cmp_plain(a, b) -> int:
    return (a > b) - (a < b)


def _cmpabs(a: ExtendedReal, b: ExtendedReal) -> int:
    if a._sign == 0 or b._sign == 0:
        return _cmp_plain(abs(a._sign), abs(b._sign))
    a_inf, b_inf = bool(mpmath.isinf(a._mag)), bool(mpmath.isinf(b._mag))
    if a_inf or b_inf:
        return _cmp_plain(a_inf, b_inf)
    ta, tb = _tier(a), _tier(b)
    if ta != tb:
        return _cmp_plain(ta, tb)
    if ta == 0:
        return _cmp_plain(a._mag, b._mag)
    if a._layer != b._layer:
        # для огромных значений больший слой означает большее значение, для малых наоборот
        return ta * _cmp_plain(a._layer, b._layer)
    return _cmp_plain(a._mag, b._mag)


def _cmp(a: ExtendedReal, b: ExtendedReal):
    """-1 / 0 / 1, либо None если есть NaN."""
    if a.is_nan() or b.is_nan():
        return None
    if a._sign != b._sign:
        return _cmp_plain(a._sign, b._sign)
    return a._sign * _cmpabs(a, b)


def _add(a: ExtendedReal, b: ExtendedReal) -> ExtendedReal:
    if a.is_nan() or b.is_nan():
        return NAN
    if mpmath.isinf(a._mag):
        if mpmath.isinf(b._mag) and a._sign != b._sign:
            return NAN
        return a
    if mpmath.isinf(b._mag):
        return b
    if a._sign == 0:
        return b
    if b._sign == 0:
        return a
    if a._layer <= 1 and b._layer <= 1:
        return ExtendedReal(a.to_mpf() + b.to_mpf())
    order = _cmpabs(a, b)
    if order == 0:
        return a if a._sign == b._sign else ZERO
    # на слоях >= 2 меньшее слагаемое теряется в точности
    return a if order > 0 else b


def _mul(a: ExtendedReal, b: ExtendedReal) -> ExtendedReal:
    if a.is_nan() or b.is_nan():
        return NAN
    if a._sign == 0 or b._sign == 0:
        if mpmath.isinf(a._mag) or mpmath.isinf(b._mag):
            return NAN
        return ZERO
    sign = a._sign * b._sign
    if mpmath.isinf(a._mag) or mpmath.isinf(b._mag):
        return ExtendedReal._raw(sign, 0, _INF)
    if a._layer <= 1 and b._layer <= 1:
        return ExtendedReal(a.to_mpf() * b.to_mpf())
    magnitude = _add(a.log10abs(), b.log10abs()).pow10()
    return -magnitude if sign < 0 else magnitude


def _pow(a: ExtendedReal, b: ExtendedReal) -> ExtendedReal:
    if a.is_nan() or b.is_nan():
        return NAN
    if b._sign == 0 or a == ONE:
        return ONE
    if a._sign == 0:
        return ZERO if b._sign > 0 else INF
    if mpmath.isinf(a._mag):
        if b._sign < 0:
            return ZERO
        if a._sign < 0 and b.is_integer() and b._layer == 0 and int(b.to_mpf()) % 2 == 1:
            return NEG_INF
        return INF
    if mpmath.isinf(b._mag):
        above_one = _cmpabs(a, ONE) > 0
        return INF if above_one == (b._sign > 0) else ZERO

    negate = False
    if a._sign < 0:
        if not b.is_integer():
            return NAN
        negate = b._layer == 0 and int(b.to_mpf()) % 2 == 1

    if a._layer == 0 and b._layer == 0:
        result = ExtendedReal(mpmath.power(a._mag, b.to_mpf()))
    else:
        result = (b * a.log10abs()).pow10()
    return -result if negate else result


def to_extended(value: ExtendedSource) -> ExtendedReal:
    """Приведение произвольного числового источника к ExtendedReal."""
    if isinstance(value, ExtendedReal):
        return value
    return ExtendedReal(value)


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

ZERO: Final = ExtendedReal(0)
HALF: Final = ExtendedReal(mpf("0.5"))
ONE: Final = ExtendedReal(1)
NEG_ONE: Final = ExtendedReal(-1)
TWO: Final = ExtendedReal(2)
TEN: Final = ExtendedReal(10)
INF: Final = ExtendedReal(_INF)
NEG_INF: Final = ExtendedReal(-_INF)
NAN: Final = ExtendedReal(_NAN)

_LN_TWO_PI = ExtendedReal(mpmath.log(2 * mpmath.pi))


# =============================================================================
# ТЕТРАЦИОННОЕ СЕМЕЙСТВО (линейное приближение)
# =============================================================================


def _height(value) -> mpf:
    if isinstance(value, ExtendedReal):
        return value.to_mpf()
    return mpf(value)


def _shift_layers(value: ExtendedReal, amount: int) -> ExtendedReal:
    return ExtendedReal._raw(value._sign, value._layer + amount, value._mag)


def tetrate(base: ExtendedSource, height=2, payload: ExtendedSource = 1) -> ExtendedReal:
    """
    Итерированная экспонента: base^base^...^payload (height раз).

    Нецелая высота раскладывается через линейный slog: при payload == 1
    дробная часть даёт payload = base^frac, иначе payload сдвигается по
    оси slog на frac. Отрицательная высота эквивалентна iterated_log.

    Examples:
        >>> tetrate(10, 2)
        ExtendedReal('10000000000.0')
        >>> tetrate(2, 0.5)
        ExtendedReal('1.4142135623730951')
    """
    base = to_extended(base)
    payload = to_extended(payload)
    h = _height(height)

    if mpmath.isnan(h) or base <= ONE or base.is_nan():
        return NAN
    if mpmath.isinf(h):
        return INF if h > 0 else NAN
    if h < 0:
        return iterated_log(payload, base, -h)

    whole = int(mpmath.floor(h))
    fraction = h - whole
    if fraction != 0:
        if payload == ONE:
            payload = base ** ExtendedReal(fraction)
        else:
            payload = _layer_add(payload, fraction, base)

    for i in range(whole):
        payload = base ** payload
        if not payload.is_finite():
            return payload
        if payload._layer - base._layer > LAYER_SHORTCUT and payload._mag > 0:
            return _shift_layers(payload, whole - i - 1)
        if i > ITERATION_BAIL_LIMIT:
            logger.debug("tetrate: bailing out after %d iterations", i)
            return payload
    return payload


def iterated_log(value: ExtendedSource, base: ExtendedSource = 10, times=1) -> ExtendedReal:
    """
    Логарифм по base, взятый times раз; дробная часть — через линейный slog.
    """
    value = to_extended(value)
    base = to_extended(base)
    t = _height(times)

    if mpmath.isnan(t) or base <= ONE:
        return NAN
    if t < 0:
        return tetrate(base, -t, value)

    whole = int(mpmath.floor(t))
    fraction = t - whole
    result = value

    if result._layer - base._layer > LAYER_SHORTCUT and result._mag > 0:
        loss = min(whole, result._layer - base._layer - LAYER_SHORTCUT)
        whole -= loss
        result = _shift_layers(result, -loss)

    for i in range(whole):
        result = result.log(base)
        if not result.is_finite():
            return result
        if i > ITERATION_BAIL_LIMIT:
            logger.debug("iterated_log: bailing out after %d iterations", i)
            return result

    if 0 < fraction < 1:
        result = _layer_add(result, -fraction, base)
    return result


def _slog(value: ExtendedReal, base: ExtendedReal) -> mpf:
    if base.is_nan() or value.is_nan() or base <= ONE:
        return _NAN
    if mpmath.isinf(value._mag):
        return _INF if value._sign > 0 else _NAN

    result = mpf(0)
    copy = value
    if copy._layer - base._layer > LAYER_SHORTCUT and copy._mag > 0:
        loss = copy._layer - base._layer - LAYER_SHORTCUT
        result += loss
        copy = _shift_layers(copy, -loss)

    for _ in range(SLOG_LOOP_LIMIT):
        if copy < ZERO:
            copy = base ** copy
            result -= 1
        elif copy <= ONE:
            return result + copy.to_mpf() - 1
        else:
            result += 1
            copy = copy.log(base)
    return result


def slog(value: ExtendedSource, base: ExtendedSource = 10) -> ExtendedReal:
    """
    Суперлогарифм (обратная к тетрации) в линейном приближении.

    Examples:
        >>> slog(tetrate(10, 4))
        ExtendedReal('4.0')
        >>> slog(1)
        ExtendedReal('0.0')
    """
    return ExtendedReal(_slog(to_extended(value), to_extended(base)))


def _layer_add(value: ExtendedReal, diff, base: ExtendedReal) -> ExtendedReal:
    """Сдвиг значения на diff по оси slog."""
    destination = _slog(value, base) + diff
    if destination >= 0:
        return tetrate(base, destination, ONE)
    if not mpmath.isfinite(destination):
        return NAN
    if destination >= -1:
        return tetrate(base, destination + 1, ONE).log(base)
    return tetrate(base, destination + 2, ONE).log(base).log(base)


def iterated_exp_mult(base: ExtendedSource, payload: ExtendedSource, height, mult: ExtendedSource) -> ExtendedReal:
    """
    tetrate, где каждое возведение — base^(x / mult), так что обратный шаг
    (логарифм) домножается на mult.
    """
    effective_base = to_extended(base) ** to_extended(mult).recip()
    return tetrate(effective_base, height, payload)


def iterated_mult_log(value: ExtendedSource, base: ExtendedSource, times, mult: ExtendedSource) -> ExtendedReal:
    """iterated_log, где после каждого логарифма результат домножается на mult."""
    effective_base = to_extended(base) ** to_extended(mult).recip()
    return iterated_log(value, effective_base, times)


def mult_slog(value: ExtendedSource, base: ExtendedSource, mult: ExtendedSource) -> ExtendedReal:
    """slog, согласованный с iterated_exp_mult / iterated_mult_log."""
    effective_base = to_extended(base) ** to_extended(mult).recip()
    return slog(value, effective_base)
