"""
Тесты для ExtendedReal (core/math/extended_real.py)

Проверяет:
1. Нормализацию тройки (sign, layer, mag) и разбор строк
2. Арифметику на слоях 0, 1 и выше
3. Сравнения, включая NaN и бесконечности
4. Тетрационное семейство: tetrate / iterated_log / slog
5. Факториал через Gamma и Стирлинга
"""

import pickle
from fractions import Fraction

import pytest

from eternal_notations.core.math.extended_real import (
    INF,
    NAN,
    NEG_INF,
    ONE,
    ZERO,
    ExtendedReal,
    iterated_exp_mult,
    iterated_log,
    mult_slog,
    slog,
    tetrate,
    to_extended,
)

# =============================================================================
# ТЕСТЫ НОРМАЛИЗАЦИИ
# =============================================================================


class TestNormalization:
    """Тесты канонической формы"""

    def test_small_integer_stays_on_layer_zero(self) -> None:
        """Обычные числа живут на слое 0"""
        x = ExtendedReal(5)
        assert x.sign == 1
        assert x.layer == 0
        assert float(x.mag) == 5.0

    def test_negative_number_sign(self) -> None:
        """Знак отделён от магнитуды"""
        x = ExtendedReal(-7.5)
        assert x.sign == -1
        assert float(x.mag) == 7.5

    def test_huge_value_moves_to_layer_one(self) -> None:
        """1e100 хранится как 10^100"""
        x = ExtendedReal("1e100")
        assert x.layer == 1
        assert float(x.mag) == pytest.approx(100.0)

    def test_tiny_value_uses_negative_magnitude(self) -> None:
        """1e-100 хранится как 10^-100"""
        x = ExtendedReal("1e-100")
        assert x.layer == 1
        assert float(x.mag) == pytest.approx(-100.0)

    def test_layer_prefix_parsing(self) -> None:
        """Префиксы 'e' в строке добавляют слои"""
        x = ExtendedReal("ee100")
        assert x.layer == 2
        assert float(x.mag) == pytest.approx(100.0)

    def test_zero_is_canonical(self) -> None:
        """Ноль всегда (0, 0, 0)"""
        assert ExtendedReal(0).sign == 0
        assert ExtendedReal("-0").is_zero()
        assert ExtendedReal(0) == ZERO

    def test_special_strings(self) -> None:
        """inf, -infinity, nan"""
        assert ExtendedReal("inf") == INF
        assert ExtendedReal("-infinity") == NEG_INF
        assert ExtendedReal("nan").is_nan()

    def test_fraction_source(self) -> None:
        """Fraction конвертируется через mpf"""
        assert float(ExtendedReal(Fraction(3, 4))) == 0.75

    def test_unparseable_string_raises(self) -> None:
        """Мусорная строка — ValueError"""
        with pytest.raises(ValueError):
            ExtendedReal("eee")

    def test_unsupported_type_raises(self) -> None:
        """Нечисловой тип — TypeError"""
        with pytest.raises(TypeError, match="Cannot convert"):
            ExtendedReal([1, 2])

    def test_immutable(self) -> None:
        """Экземпляры неизменяемы"""
        x = ExtendedReal(1)
        with pytest.raises(AttributeError):
            x._mag = 2

    def test_pickle_roundtrip(self) -> None:
        """Значение переживает pickle"""
        x = ExtendedReal("1e500")
        assert pickle.loads(pickle.dumps(x)) == x

    def test_to_extended_passthrough(self) -> None:
        """to_extended не копирует ExtendedReal"""
        x = ExtendedReal(3)
        assert to_extended(x) is x


# =============================================================================
# ТЕСТЫ АРИФМЕТИКИ
# =============================================================================


class TestArithmetic:
    """Тесты арифметических операций"""

    def test_plain_arithmetic(self) -> None:
        """Слой 0 ведёт себя как обычные числа"""
        a = ExtendedReal(6)
        assert a + 3 == 9
        assert a - 8 == -2
        assert a * 7 == 42
        assert a / 4 == 1.5
        assert a ** 2 == 36

    def test_reflected_operations(self) -> None:
        """Числа слева от ExtendedReal"""
        assert 10 - ExtendedReal(4) == 6
        assert 1 / ExtendedReal(4) == 0.25
        assert 2 ** ExtendedReal(10) == 1024

    def test_huge_multiplication(self) -> None:
        """1e1000 * 1e1000 = 1e2000"""
        result = ExtendedReal("1e1000") * ExtendedReal("1e1000")
        assert result.eq_tolerance("1e2000")

    def test_huge_power(self) -> None:
        """10^(10^20) попадает на слой 2"""
        result = ExtendedReal(10) ** ExtendedReal("1e20")
        assert result.layer == 2
        assert float(result.mag) == pytest.approx(20.0)

    def test_smaller_addend_lost_on_high_layers(self) -> None:
        """На слоях >= 2 меньшее слагаемое теряется"""
        big = ExtendedReal("ee100")
        assert big + 1 == big

    def test_recip(self) -> None:
        """1/x, включая ноль и огромные значения"""
        assert ExtendedReal(4).recip() == 0.25
        assert ExtendedReal("1e500").recip().eq_tolerance("1e-500")
        assert ExtendedReal(0).recip().is_nan()
        assert INF.recip() == ZERO

    def test_log_family(self) -> None:
        """log10, log по базе, отрицательные и ноль"""
        assert ExtendedReal(1000).log10().eq_tolerance(3)
        assert ExtendedReal(8).log(2).eq_tolerance(3)
        assert ExtendedReal("1e500").log10().eq_tolerance(500)
        assert ExtendedReal(-1).log10().is_nan()
        assert ExtendedReal(0).log10() == NEG_INF

    def test_infinities(self) -> None:
        """inf - inf и 0 * inf дают NaN"""
        assert (INF - INF).is_nan()
        assert (ZERO * INF).is_nan()
        assert INF + 1 == INF

    def test_nan_propagates(self) -> None:
        """NaN заражает результат"""
        assert (NAN + 1).is_nan()
        assert (NAN * 0).is_nan()

    def test_negative_base_fractional_power(self) -> None:
        """(-8)^0.5 не определено"""
        assert (ExtendedReal(-8) ** 0.5).is_nan()
        assert ExtendedReal(-2) ** 3 == -8


# =============================================================================
# ТЕСТЫ ОКРУГЛЕНИЯ И СРАВНЕНИЙ
# =============================================================================


class TestRoundingAndComparison:
    """Тесты floor/ceil/round и упорядочивания"""

    def test_floor_ceil_round(self) -> None:
        """Базовые округления"""
        x = ExtendedReal(2.5)
        assert x.floor() == 2
        assert x.ceil() == 3
        assert x.round() == 3
        assert ExtendedReal(-2.5).floor() == -3

    def test_mod1_is_true_remainder(self) -> None:
        """Дробная часть отрицательных в [0, 1)"""
        assert float(ExtendedReal(-1.25).mod1()) == pytest.approx(0.75)

    def test_huge_values_are_integers(self) -> None:
        """Огромные значения считаются целыми"""
        x = ExtendedReal("1e500")
        assert x.is_integer()
        assert x.floor() == x

    def test_tiny_floor(self) -> None:
        """floor исчезающе малых"""
        assert ExtendedReal("1e-500").floor() == 0
        assert ExtendedReal("-1e-500").floor() == -1

    def test_ordering_across_layers(self) -> None:
        """Больше слой — больше значение"""
        assert ExtendedReal("1e-500") < ExtendedReal(1) < ExtendedReal("1e500") < ExtendedReal("ee500")
        assert ExtendedReal("-1e500") < ExtendedReal(-1)
        assert NEG_INF < ExtendedReal("-ee100") < ZERO < INF

    def test_nan_is_not_equal_to_itself(self) -> None:
        """NaN не равен ничему"""
        assert NAN != NAN
        assert not NAN < ONE
        assert not NAN >= ONE

    def test_eq_tolerance(self) -> None:
        """Относительная толерантность"""
        assert ExtendedReal(1).eq_tolerance(1 + 1e-9)
        assert not ExtendedReal(1).eq_tolerance(1.1)
        assert not ExtendedReal(1).eq_tolerance(-1)

    def test_hash_consistent_with_equality(self) -> None:
        """Равные значения имеют одинаковый hash"""
        assert hash(ExtendedReal(5)) == hash(ExtendedReal("5"))

    def test_int_conversion(self) -> None:
        """int() для конечных и ошибка для огромных"""
        assert int(ExtendedReal(7.9)) == 7
        with pytest.raises(OverflowError):
            int(ExtendedReal("ee100"))


# =============================================================================
# ТЕСТЫ ТЕТРАЦИИ
# =============================================================================


class TestTetration:
    """Тесты tetrate / iterated_log / slog"""

    def test_integer_heights(self) -> None:
        """2^^3 = 16, 10^^2 = 1e10"""
        assert tetrate(2, 3) == 16
        assert tetrate(10, 2).eq_tolerance(1e10)

    def test_payload(self) -> None:
        """Высота 1 с payload — простое возведение"""
        assert tetrate(2, 1, 5) == 32

    def test_fractional_height(self) -> None:
        """Линейное приближение: 2^^0.5 = sqrt(2)"""
        assert float(tetrate(2, 0.5)) == pytest.approx(2 ** 0.5)

    def test_invalid_base(self) -> None:
        """base <= 1 даёт NaN"""
        assert tetrate(1, 3).is_nan()

    def test_deep_tower_shortcut(self) -> None:
        """Глубокая башня уходит в сдвиг слоёв без переполнения"""
        result = tetrate(10, 1000)
        assert result.is_finite()
        assert result.layer > 900

    def test_iterated_log_inverts_tetrate(self) -> None:
        """iterated_log(10^^3, 10, 2) = 10"""
        assert iterated_log(tetrate(10, 3), 10, 2).eq_tolerance(10)

    def test_negative_height_is_log(self) -> None:
        """tetrate с отрицательной высотой = iterated_log"""
        assert tetrate(10, -1, 1000).eq_tolerance(3)

    def test_slog(self) -> None:
        """slog обратен tetrate"""
        assert slog(tetrate(10, 4)).eq_tolerance(4)
        assert slog(1) == 0
        assert float(slog(2, 2)) == pytest.approx(1.0)

    def test_slog_infinity(self) -> None:
        """slog(inf) = inf"""
        assert slog(INF) == INF

    def test_mult_variants_consistent(self) -> None:
        """mult_slog обратен iterated_exp_mult"""
        value = iterated_exp_mult(10, 1, 3, 2)
        assert mult_slog(value, 10, 2).eq_tolerance(3)


# =============================================================================
# ТЕСТЫ ФАКТОРИАЛА
# =============================================================================


class TestFactorial:
    """Тесты ExtendedReal.factorial"""

    def test_small_factorials(self) -> None:
        """5! = 120, 0.5! = sqrt(pi)/2"""
        assert ExtendedReal(5).factorial().eq_tolerance(120)
        assert float(ExtendedReal(0.5).factorial()) == pytest.approx(0.886226925452758)

    def test_negative_integer_is_nan(self) -> None:
        """(-3)! не определён"""
        assert ExtendedReal(-3).factorial().is_nan()

    def test_stirling_for_huge(self) -> None:
        """(1e20)! через Стирлинга: log10 около 1.956e21"""
        result = ExtendedReal("1e20").factorial()
        assert result.layer == 2
        assert result.log10().eq_tolerance("1.9565705518096748e21", 1e-6)
