"""
Тесты для рациональных приближений (core/math/continued_fractions.py)

Проверяет:
1. Точность: абсолютную, пропорциональную, точную
2. Формы результата: CONTINUED, PAIR, MIXED, MIXED_CONVENTIONAL
3. Ограничения знаменателя, числителя и числа членов
4. Вырожденные входы: 0, inf, NaN, исчезающе малые значения
"""

import math

import pytest

from eternal_notations.core.math.continued_fractions import (
    FractionForm,
    MixedFraction,
    SimpleFraction,
    approximate_fraction,
    continued_fraction,
    fraction_pair,
    mixed_fraction,
    precision_tolerance,
)
from eternal_notations.core.math.extended_real import INF, ExtendedReal

# =============================================================================
# ТЕСТЫ ТОЧНОСТИ
# =============================================================================


class TestPrecisionTolerance:
    """Тесты для precision_tolerance"""

    def test_absolute_precision(self) -> None:
        """Положительная точность — абсолютная"""
        assert float(precision_tolerance(ExtendedReal(100), ExtendedReal(0.01))) == pytest.approx(0.01)

    def test_proportional_precision(self) -> None:
        """-1000: допуск |value| / 1000"""
        value = ExtendedReal(100)
        assert float(precision_tolerance(value, ExtendedReal(-1000))) == pytest.approx(0.1)

    def test_proportional_precision_below_one(self) -> None:
        """|precision| < 1 тоже делит: 0.4 / 0.5 = 0.8"""
        assert float(precision_tolerance(ExtendedReal(0.4), ExtendedReal(-0.5))) == pytest.approx(0.8)
        assert precision_tolerance(ExtendedReal(100), ExtendedReal(-0.001)) == 1

    def test_tolerance_capped_at_one(self) -> None:
        """Допуск не больше 1"""
        assert precision_tolerance(ExtendedReal(100), ExtendedReal(5)) == 1

    def test_exact(self) -> None:
        """0 — точное совпадение"""
        assert precision_tolerance(ExtendedReal(3), ExtendedReal(0)) == 0


# =============================================================================
# ТЕСТЫ ПРИБЛИЖЕНИЯ
# =============================================================================


class TestApproximateFraction:
    """Тесты для approximate_fraction"""

    def test_three_quarters(self) -> None:
        """0.75 = 3/4"""
        result = approximate_fraction(0.75, 1e-9)
        assert isinstance(result, SimpleFraction)
        assert result == (3, 4)

    def test_exact_half(self) -> None:
        """Точная precision = 0"""
        assert approximate_fraction(0.5) == (1, 2)

    def test_negative_value(self) -> None:
        """Знак у числителя, знаменатель положителен"""
        assert approximate_fraction(-0.75, 1e-9) == (-3, 4)

    def test_integer_value(self) -> None:
        """Целые значения — знаменатель 1"""
        assert approximate_fraction(12) == (12, 1)

    def test_proportional_precision(self) -> None:
        """pi с точностью 1/1000 — 22/7"""
        assert approximate_fraction(3.14159, -1000) == (22, 7)
        assert approximate_fraction(3.14159, -1000, FractionForm.CONTINUED) == [3, 7]

    def test_continued_form(self) -> None:
        """Члены цепной дроби 0.75 = [0; 1, 3]"""
        assert approximate_fraction(0.75, 1e-9, "continued") == [0, 1, 3]

    def test_mixed_form_uses_floor(self) -> None:
        """MIXED: целая часть — floor"""
        result = approximate_fraction(-1.25, 0, FractionForm.MIXED)
        assert isinstance(result, MixedFraction)
        assert result == (-2, 3, 4)

    def test_mixed_conventional_form(self) -> None:
        """MIXED_CONVENTIONAL: знак у целой части"""
        assert approximate_fraction(-1.25, 0, FractionForm.MIXED_CONVENTIONAL) == (-1, 1, 4)
        assert approximate_fraction(1.25, 0, FractionForm.MIXED_CONVENTIONAL) == (1, 1, 4)

    def test_mixed_conventional_without_whole_part(self) -> None:
        """Без целой части знак уходит в числитель"""
        assert approximate_fraction(-0.5, 0, FractionForm.MIXED_CONVENTIONAL) == (0, -1, 2)

    def test_unknown_form_rejected(self) -> None:
        """Неизвестная форма — ValueError"""
        with pytest.raises(ValueError):
            approximate_fraction(0.5, 0, "decimal")


# =============================================================================
# ТЕСТЫ ОГРАНИЧЕНИЙ
# =============================================================================


class TestBounds:
    """Тесты max_denominator / max_numerator / max_iterations"""

    def test_max_denominator_non_strict(self) -> None:
        """Нестрогий режим возвращает первую дробь за порогом"""
        assert approximate_fraction(math.pi, max_denominator=100) == (333, 106)

    def test_max_denominator_strict(self) -> None:
        """Строгий режим откатывается к 22/7"""
        assert approximate_fraction(math.pi, max_denominator=100, strict_max_denominator=True) == (22, 7)

    def test_max_numerator_strict(self) -> None:
        """Строгий порог числителя"""
        assert approximate_fraction(math.pi, max_numerator=100, strict_max_numerator=True) == (22, 7)

    def test_max_iterations(self) -> None:
        """Не больше двух членов"""
        assert approximate_fraction(math.pi, form=FractionForm.CONTINUED, max_iterations=2) == [3, 7]
        assert approximate_fraction(math.pi, max_iterations=1) == (3, 1)


# =============================================================================
# ТЕСТЫ ВЫРОЖДЕННЫХ ВХОДОВ
# =============================================================================


class TestDegenerateInputs:
    """Тесты для 0, inf, NaN и исчезающе малых значений"""

    def test_zero(self) -> None:
        """Ноль во всех формах"""
        assert approximate_fraction(0) == (0, 1)
        assert approximate_fraction(0, form="continued") == [0]
        assert approximate_fraction(0, form="mixed") == (0, 0, 1)

    def test_infinity(self) -> None:
        """inf остаётся в числителе / целой части"""
        assert approximate_fraction(INF) == (INF, 1)
        assert approximate_fraction(INF, form="continued") == [INF]
        assert approximate_fraction(INF, form="mixed") == (INF, 0, 1)

    def test_nan(self) -> None:
        """NaN проходит насквозь"""
        numerator, denominator = approximate_fraction(float("nan"))
        assert numerator.is_nan()
        assert denominator == 1

    def test_tiny_value_with_proportional_precision(self) -> None:
        """10^-10^20 приближается как 1 / 10^10^20"""
        numerator, denominator = approximate_fraction("e-1e20", -1e6)
        assert numerator == 1
        assert denominator == ExtendedReal("e1e20")


# =============================================================================
# ТЕСТЫ ОБЁРТОК
# =============================================================================


class TestWrappers:
    """Тесты continued_fraction / fraction_pair / mixed_fraction"""

    def test_continued_fraction(self) -> None:
        """Обёртка над формой CONTINUED"""
        assert continued_fraction(0.75, 1e-9) == [0, 1, 3]

    def test_fraction_pair(self) -> None:
        """Обёртка над формой PAIR"""
        assert fraction_pair(0.75, 1e-9) == (3, 4)

    def test_mixed_fraction_conventional_by_default(self) -> None:
        """Смешанная дробь как её пишут"""
        assert mixed_fraction(-1.25) == (-1, 1, 4)
        assert mixed_fraction(-1.25, conventional=False) == (-2, 3, 4)

    def test_convergent_reproduces_value(self) -> None:
        """Найденная дробь укладывается в допуск"""
        numerator, denominator = fraction_pair(math.e, 1e-6)
        assert abs(float(numerator / denominator) - math.e) <= 1e-6
