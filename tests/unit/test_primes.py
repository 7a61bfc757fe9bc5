"""
Тесты для разложения на простые (core/math/primes.py)

Проверяет:
1. Решето primes_array и кэш PrimeTable
2. prime_factorize: целые, ноль, отрицательные, неразложенный остаток
3. prime_factorize_fraction: знаковые показатели, ограничения дроби
"""

import math
import threading

import pytest

from eternal_notations.core.math.numerical_safeguards import NotationDomainError
from eternal_notations.core.math.primes import (
    PrimeTable,
    prime_factorize,
    prime_factorize_fraction,
    primes_array,
)

# =============================================================================
# ТЕСТЫ РЕШЕТА
# =============================================================================


class TestPrimesArray:
    """Тесты для primes_array"""

    def test_small_bounds(self) -> None:
        """Границы ниже 2 дают пустой список"""
        assert primes_array(0) == []
        assert primes_array(1) == []
        assert primes_array(2) == [2]

    def test_primes_up_to_thirty(self) -> None:
        """Простые до 30 включительно"""
        assert primes_array(30) == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]

    def test_count_below_thousand(self) -> None:
        """168 простых меньше 1000"""
        assert len(primes_array(1000)) == 168


class TestPrimeTable:
    """Тесты для PrimeTable"""

    def test_extends_on_demand(self) -> None:
        """Таблица расширяется до наибольшей запрошенной границы"""
        table = PrimeTable()
        assert table.limit == 0
        assert table.up_to(30)[-1] == 29
        assert table.limit == 30

    def test_smaller_request_uses_cache(self) -> None:
        """Меньшая граница не сужает таблицу"""
        table = PrimeTable(100)
        assert table.up_to(10) == [2, 3, 5, 7]
        assert table.limit == 100

    def test_concurrent_access(self) -> None:
        """Параллельные запросы получают согласованные списки"""
        table = PrimeTable()
        results = []

        def worker(bound: int) -> None:
            results.append(table.up_to(bound))

        threads = [threading.Thread(target=worker, args=(bound,)) for bound in (50, 500, 5000, 50)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert table.limit == 5000
        for primes in results:
            assert primes == primes_array(primes[-1])


# =============================================================================
# ТЕСТЫ ЦЕЛЫХ
# =============================================================================


class TestPrimeFactorize:
    """Тесты для prime_factorize"""

    def test_sixty(self) -> None:
        """60 = 2^2 * 3 * 5"""
        assert prime_factorize(60, 10) == [(2, 2), (3, 1), (5, 1)]

    def test_explicit_prime_list(self) -> None:
        """Остаток 11 добавляется как есть"""
        assert prime_factorize(-22, [2, 3]) == [(-1, 1), (2, 1), (11, 1)]

    def test_composite_leftover(self) -> None:
        """Неразложенный составной остаток"""
        assert prime_factorize(858, [2, 3]) == [(2, 1), (3, 1), (143, 1)]

    def test_zero_and_one(self) -> None:
        """0 → [(0, 1)], 1 → []"""
        assert prime_factorize(0, 10) == [(0, 1)]
        assert prime_factorize(1, 10) == []

    def test_non_primes_in_list_skipped(self) -> None:
        """0 и 1 в списке простых пропускаются"""
        assert prime_factorize(12, [0, 1, 2, 3]) == [(2, 2), (3, 1)]

    def test_large_power(self) -> None:
        """2^40"""
        assert prime_factorize(2 ** 40, 2) == [(2, 40)]

    def test_with_table(self) -> None:
        """Граница через PrimeTable"""
        table = PrimeTable()
        assert prime_factorize(360, 10, table=table) == [(2, 3), (3, 2), (5, 1)]
        assert table.limit == 10

    @pytest.mark.parametrize("value", [2.5, float("inf"), float("nan")])
    def test_non_integer_rejected(self, value) -> None:
        """Нецелые значения не раскладываются"""
        with pytest.raises(NotationDomainError, match="requires an integer"):
            prime_factorize(value, 10)

    def test_product_restores_value(self) -> None:
        """Произведение множителей восстанавливает значение"""
        value = 2 ** 5 * 3 ** 3 * 7 * 13
        factors = prime_factorize(value, 20)
        assert math.prod(prime ** exponent for prime, exponent in factors) == value


# =============================================================================
# ТЕСТЫ ДРОБЕЙ
# =============================================================================


class TestPrimeFactorizeFraction:
    """Тесты для prime_factorize_fraction"""

    def test_forty_over_sixty_three(self) -> None:
        """40/63 = 2^3 * 3^-2 * 5 * 7^-1"""
        assert prime_factorize_fraction(40 / 63, 10, 1e-12) == [(2, 3), (3, -2), (5, 1), (7, -1)]

    def test_three_quarters(self) -> None:
        """0.75 = 2^-2 * 3"""
        assert prime_factorize_fraction(0.75, 10, 1e-9) == [(2, -2), (3, 1)]

    def test_negative_fraction(self) -> None:
        """Знак — ведущий (-1, 1)"""
        assert prime_factorize_fraction(-0.75, 10, 1e-9) == [(-1, 1), (2, -2), (3, 1)]

    def test_zero(self) -> None:
        """Ноль"""
        assert prime_factorize_fraction(0, 10) == [(0, 1)]

    def test_integer_value(self) -> None:
        """Целое — только положительные показатели"""
        assert prime_factorize_fraction(12, 10) == [(2, 2), (3, 1)]

    def test_bounds_forwarded(self) -> None:
        """Ограничения знаменателя передаются в приближение: pi ≈ 22/7"""
        factors = prime_factorize_fraction(math.pi, 10, max_denominator=100, strict_max_denominator=True)
        assert factors == [(2, 1), (7, -1), (11, 1)]
