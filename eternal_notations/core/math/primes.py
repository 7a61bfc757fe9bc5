"""
Prime Factorization — разложение целых и дробей на простые множители

Целые числа раскладываются пробным делением на список простых (или на все
простые до границы, полученные решетом). Нецелые значения сначала
приближаются дробью (continued_fractions), затем числитель и знаменатель
раскладываются отдельно и сливаются со знаковыми показателями.

Результат — список пар (prime, exponent) по возрастанию prime:
- 0 → [(0, 1)]
- отрицательные значения начинаются с (-1, 1)
- остаток, не разложившийся на переданные простые, добавляется как
  (остаток, 1)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Произведение prime^exponent восстанавливает (приближённое) значение
2. Простые в списке уникальны
3. Кэш простых — явный объект PrimeTable, а не глобальное состояние
"""

import logging
import math
import threading
from typing import Optional, Sequence, Union

from eternal_notations.core.math.continued_fractions import FractionForm, approximate_fraction
from eternal_notations.core.math.extended_real import ZERO, ExtendedReal, ExtendedSource, to_extended
from eternal_notations.core.math.numerical_safeguards import NotationDomainError

logger = logging.getLogger(__name__)

Factorization = list[tuple[int, int]]
PrimeSource = Union[int, Sequence[int]]


# =============================================================================
# РЕШЕТО
# =============================================================================


def primes_array(maximum: int) -> list[int]:
    """
    Все простые <= maximum (решето Эратосфена).

    Examples:
        >>> primes_array(10)
        [2, 3, 5, 7]
        >>> primes_array(1)
        []
    """
    maximum = int(maximum)
    if maximum < 2:
        return []
    sieve = bytearray([1]) * (maximum + 1)
    sieve[0] = sieve[1] = 0
    for p in range(2, math.isqrt(maximum) + 1):
        if sieve[p]:
            sieve[p * p :: p] = bytearray(len(range(p * p, maximum + 1, p)))
    return [n for n, flag in enumerate(sieve) if flag]


class PrimeTable:
    """
    Потокобезопасный кэш простых.

    Хранит простые до наибольшей запрошенной границы и расширяет таблицу
    по мере надобности. Передаётся в prime_factorize явно.
    """

    def __init__(self, initial: int = 0):
        self._lock = threading.Lock()
        self._limit = int(initial)
        self._primes: tuple[int, ...] = tuple(primes_array(self._limit))

    @property
    def limit(self) -> int:
        return self._limit

    def up_to(self, maximum: int) -> list[int]:
        """Простые <= maximum."""
        maximum = int(maximum)
        with self._lock:
            if maximum > self._limit:
                logger.debug("PrimeTable: extending from %d to %d", self._limit, maximum)
                self._primes = tuple(primes_array(maximum))
                self._limit = maximum
            primes = self._primes
        return [p for p in primes if p <= maximum]


def _resolve_primes(primes: PrimeSource, table: Optional[PrimeTable]) -> Sequence[int]:
    if isinstance(primes, (int, float, ExtendedReal)):
        bound = int(primes)
        return table.up_to(bound) if table is not None else primes_array(bound)
    return [int(p) for p in primes]


# =============================================================================
# ЦЕЛЫЕ
# =============================================================================


def prime_factorize(value: ExtendedSource, primes: PrimeSource, table: Optional[PrimeTable] = None) -> Factorization:
    """
    Разложение целого числа на простые множители.

    Args:
        value: Целое значение
        primes: Список простых для проверки или граница (все простые <= границы)
        table: Кэш простых для числовой границы

    Returns:
        [(prime, exponent), ...]

    Raises:
        NotationDomainError: Если value не целое

    Examples:
        >>> prime_factorize(60, 10)
        [(2, 2), (3, 1), (5, 1)]
        >>> prime_factorize(-22, [2, 3])
        [(-1, 1), (2, 1), (11, 1)]
    """
    value = to_extended(value)
    if not value.is_finite() or not value.is_integer():
        raise NotationDomainError(f"prime_factorize requires an integer, got {value}")
    remaining = int(value)
    if remaining == 0:
        return [(0, 1)]

    result: Factorization = []
    if remaining < 0:
        result.append((-1, 1))
        remaining = -remaining

    for prime in _resolve_primes(primes, table):
        if remaining == 1:
            break
        if prime <= 1:
            continue
        exponent = 0
        while remaining % prime == 0:
            remaining //= prime
            exponent += 1
        if exponent > 0:
            result.append((prime, exponent))

    if remaining > 1:
        result.append((remaining, 1))
    return result


# =============================================================================
# ДРОБИ
# =============================================================================


def prime_factorize_fraction(
    value: ExtendedSource,
    primes: PrimeSource,
    precision: ExtendedSource = 0,
    table: Optional[PrimeTable] = None,
    **bounds,
) -> Factorization:
    """
    Разложение приближения value дробью со знаковыми показателями.

    Args:
        value: Раскладываемое значение
        primes: Список простых или граница
        precision: Точность приближения (см. approximate_fraction)
        table: Кэш простых
        **bounds: max_iterations, max_denominator, strict_max_denominator,
            max_numerator, strict_max_numerator

    Returns:
        [(prime, exponent), ...], отрицательный показатель — множитель знаменателя

    Examples:
        >>> prime_factorize_fraction(40 / 63, 10, 1e-12)
        [(2, 3), (3, -2), (5, 1), (7, -1)]
    """
    value = to_extended(value)
    if value.is_zero():
        return [(0, 1)]

    result: Factorization = []
    if value < ZERO:
        result.append((-1, 1))
        value = -value

    prime_list = _resolve_primes(primes, table)
    numerator, denominator = approximate_fraction(value, precision, FractionForm.PAIR, **bounds)
    numerator_primes = prime_factorize(numerator, prime_list)
    denominator_primes = prime_factorize(denominator, prime_list)

    # неразложенные остатки числителя и знаменателя могут иметь общий делитель
    if numerator_primes and denominator_primes:
        shared = math.gcd(numerator_primes[-1][0], denominator_primes[-1][0])
        if shared > 1:
            numerator_primes[-1] = (numerator_primes[-1][0] // shared, numerator_primes[-1][1])
            denominator_primes[-1] = (denominator_primes[-1][0] // shared, denominator_primes[-1][1])
            if numerator_primes[-1][0] == 1:
                numerator_primes.pop()
            if denominator_primes[-1][0] == 1:
                denominator_primes.pop()

    return result + _merge(numerator_primes, denominator_primes)


def _merge(numerator_primes: Factorization, denominator_primes: Factorization) -> Factorization:
    merged: dict[int, int] = {}
    for prime, exponent in numerator_primes:
        merged[prime] = merged.get(prime, 0) + exponent
    for prime, exponent in denominator_primes:
        merged[prime] = merged.get(prime, 0) - exponent
    return [(prime, exponent) for prime, exponent in sorted(merged.items()) if exponent != 0]
