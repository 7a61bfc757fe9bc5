"""
Hypersplit — четырёхуровневая гипероператорная декомпозиция

value = b^^b^^...^^(b^b^...^(M * b^E)), где T возведений b^ и P тетраций b^^.
Результат — HypersplitTuple(M, E, T, P).

Каждый уровень ограничен своим максимумом (maximums): значение, достигшее
максимума, переходит на следующий уровень. original_maximums действуют,
пока следующий уровень равен нулю (например, мантисса до 100 без
экспоненты, но до 10 как только экспонента появилась).

Композиция: scientifify для (M, E), hyperscientifify для T, повторный slog
для P. Каждый перенос пересчитывает нижние уровни из остатка.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Сходящиеся основания (base^(1/exp_multiplier) <= e^(1/e)) отклоняются
2. minnum <= |value| < original_maximums[0] возвращается без разложения
3. maximums[0] == 0 отключает мантиссу; maximums[1] <= exp_multiplier
   отключает экспоненту; затем maximums[2] <= hyperexp_multiplier
   отключает тетрацию
"""

import functools
import logging
from typing import Optional, Sequence

from eternal_notations.core.domain.grid import GridSource, QuantizationGrid
from eternal_notations.core.domain.results import HypersplitTuple
from eternal_notations.core.domain.rounding import Rounding, RoundingSource, as_rounding
from eternal_notations.core.math.engineering import (
    next_step,
    previous_step,
)
from eternal_notations.core.math.extended_real import (
    INF,
    NAN,
    ONE,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    iterated_exp_mult,
    iterated_mult_log,
    mult_slog,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import (
    RENORMALIZATION_LIMIT,
    validate_convergent_base,
    validate_nonzero,
)
from eternal_notations.core.math.scientific import decompose_scientific, hyperscientifify

logger = logging.getLogger(__name__)

DEFAULT_MAXIMUMS: tuple[int, int, int] = (10, 10, 10)


def _pad_levels(values: Sequence[ExtendedSource], fallback: ExtendedReal) -> list[ExtendedReal]:
    levels = [to_extended(v) for v in values]
    if not levels:
        levels.append(fallback)
    while len(levels) < 3:
        levels.append(levels[-1])
    return levels[:3]


def _repeat_count(amount: ExtendedReal) -> int:
    return int(amount.ceil().to_mpf())


# =============================================================================
# HYPERSPLIT
# =============================================================================


def hypersplit(
    value: ExtendedSource,
    base: ExtendedSource = 10,
    maximums: Optional[Sequence[ExtendedSource]] = None,
    original_maximums: Optional[Sequence[ExtendedSource]] = None,
    minnum: ExtendedSource = 1,
    mantissa_rounding: RoundingSource = None,
    grid: GridSource = None,
    hypergrid: GridSource = None,
    pentagrid: GridSource = None,
    exp_multiplier: ExtendedSource = 1,
    hyperexp_multiplier: ExtendedSource = 1,
    pentaexp_multiplier: ExtendedSource = 1,
) -> HypersplitTuple:
    """
    Разложение value на (mantissa, exponent, tetration, pentation).

    Args:
        value: Раскладываемое значение
        base: Основание всех трёх операций (default: 10)
        maximums: Пороги переноса [мантисса, экспонента, тетрация] (default: [10, 10, 10])
        original_maximums: Пороги, пока следующий уровень равен 0 (default: maximums)
        minnum: Значения в [minnum, original_maximums[0]) возвращаются как есть;
            отрицательное значение отключает это поведение
        mantissa_rounding: Правило округления мантиссы
        grid: Сетка экспоненты
        hypergrid: Сетка тетрации
        pentagrid: Сетка пентации
        exp_multiplier: Множитель каждого возведения
        hyperexp_multiplier: Множитель каждой тетрации
        pentaexp_multiplier: Множитель пентации в результате

    Returns:
        HypersplitTuple(mantissa, exponent, tetration, pentation)

    Raises:
        NotationDomainError: Сходящееся основание или нулевые множители

    Examples:
        >>> hypersplit(2357)
        HypersplitTuple(mantissa=ExtendedReal('2.357'), exponent=ExtendedReal('3.0'), tetration=ExtendedReal('0.0'), pentation=ExtendedReal('0.0'))
        >>> hypersplit(1e100).tetration
        ExtendedReal('1.0')
    """
    raw_maximums = DEFAULT_MAXIMUMS if maximums is None else maximums
    raw_original = raw_maximums if original_maximums is None else original_maximums

    base = to_extended(base)
    validate_convergent_base(base, exp_multiplier, "hypersplit")
    rounding = as_rounding(mantissa_rounding)
    split = _Hypersplit(
        base=base,
        maximums=_pad_levels(raw_maximums, base),
        original_maximums=_pad_levels(raw_original or raw_maximums, base),
        minnum=to_extended(minnum),
        rounding=rounding,
        grid=QuantizationGrid.of(grid),
        hypergrid=QuantizationGrid.of(hypergrid),
        pentagrid=QuantizationGrid.of(pentagrid),
        exp_multiplier=to_extended(exp_multiplier),
        hyperexp_multiplier=validate_nonzero(hyperexp_multiplier, "hyperexp_multiplier"),
        pentaexp_multiplier=validate_nonzero(pentaexp_multiplier, "pentaexp_multiplier"),
        recurse=functools.partial(
            hypersplit,
            base=base,
            maximums=raw_maximums,
            original_maximums=raw_original,
            minnum=minnum,
            mantissa_rounding=rounding,
            grid=grid,
            hypergrid=hypergrid,
            pentagrid=pentagrid,
            exp_multiplier=exp_multiplier,
            hyperexp_multiplier=hyperexp_multiplier,
        ),
    )
    return split.run(to_extended(value))


class _Hypersplit:
    """Одно разложение: подготовленные пороги и шаги алгоритма."""

    def __init__(self, *, base, maximums, original_maximums, minnum, rounding: Rounding,
                 grid, hypergrid, pentagrid, exp_multiplier, hyperexp_multiplier,
                 pentaexp_multiplier, recurse):
        self.base = base
        self.maximums = maximums
        self.original = original_maximums
        self.minnum = minnum
        self.rounding = rounding
        self.grid = grid
        self.hypergrid = hypergrid
        self.pentagrid = pentagrid
        self.exp_mult = exp_multiplier
        self.hyperexp_mult = hyperexp_multiplier
        self.pentaexp_mult = pentaexp_multiplier
        self._recurse = recurse

        self.mantissa_removed = maximums[0].is_zero()
        self.amount_removed = 0
        if maximums[1] <= exp_multiplier:
            self.amount_removed = 1
            maximums[1] = ONE
            if maximums[2] <= hyperexp_multiplier:
                self.amount_removed = 2
                maximums[2] = ONE

        self.limits = self._level_limits(maximums)
        self.original_limits = self._level_limits(original_maximums, anchor=self.limits[1])

    # -------------------------------------------------------------------------
    # Пороги
    # -------------------------------------------------------------------------

    def _iem(self, payload, height) -> ExtendedReal:
        return iterated_exp_mult(self.base, payload, height, self.exp_mult)

    def _slog_step(self, value: ExtendedReal) -> ExtendedReal:
        return mult_slog(value, self.base, self.exp_mult) * self.hyperexp_mult

    def _level_limits(self, maximums: list[ExtendedReal], anchor: Optional[ExtendedReal] = None) -> list[ExtendedReal]:
        """
        Значения, при которых уровни 0/1/2 переполняются.

        Пороги тетрации строятся от limits[1] основных maximums, как и
        для original_maximums.
        """
        limits = [maximums[0]]
        if self.mantissa_removed:
            limits.append(self._iem(maximums[1], 1))
        else:
            exponent_cap = previous_step(maximums[1], self.grid)
            limits.append((self._iem(exponent_cap, 1) * self.maximums[0]).max(limits[0]))
        tetration_anchor = limits[1] if anchor is None else anchor
        tetration_cap = previous_step(maximums[2] / self.hyperexp_mult, self.hypergrid)
        limits.append(self._iem(tetration_anchor, tetration_cap).max(limits[1]))
        return limits

    # -------------------------------------------------------------------------
    # Алгоритм
    # -------------------------------------------------------------------------

    def run(self, value: ExtendedReal) -> HypersplitTuple:
        if value.is_nan():
            return HypersplitTuple(NAN, NAN, NAN, NAN)
        if not value.is_finite():
            return HypersplitTuple(value, ZERO, ZERO, INF)
        if value.is_zero() and self.amount_removed == 0:
            return HypersplitTuple(ZERO, ZERO, ZERO, ZERO)
        if (
            not self.mantissa_removed
            and self.minnum >= ZERO
            and self.minnum <= abs(value) < self.original[0]
        ):
            return HypersplitTuple(value, ZERO, ZERO, ZERO)

        if value < ONE and self.amount_removed == 1:
            return self._small_without_exponent(value)
        if value < ONE and self.amount_removed == 2:
            return self._small_without_tetration(value)

        original_value = value
        negative = value < ZERO
        if negative:
            value = -value

        negative_exponent = False
        if value < ONE and value.recip() >= self.original_limits[1] and self.amount_removed < 1:
            negative_exponent = True
            value = value.recip()

        if self.mantissa_removed and self.amount_removed > 1:
            return self._pentation_only(value)

        pentation_count = ZERO
        if value >= self.original_limits[2]:
            for _ in range(RENORMALIZATION_LIMIT):
                if value < self.limits[2]:
                    break
                increase = next_step(pentation_count, self.pentagrid) - pentation_count
                for _ in range(_repeat_count(increase)):
                    value = self._slog_step(value)
                pentation_count = pentation_count + increase
        pentation = pentation_count * self.pentaexp_mult

        hypermantissa, tetration = value, ZERO
        if self.mantissa_removed and self.amount_removed > 0:
            tetration = self.rounding.apply(self._slog_step(value))
            if tetration >= self.maximums[2]:
                return self._roll_into_pentation(original_value, pentation_count)
            return HypersplitTuple(ZERO, ZERO, tetration, pentation)

        if self.amount_removed > 1:
            hypermantissa = self.rounding.apply(hypermantissa)
        elif (pentation.is_zero() and value >= self.original_limits[1]) or (
            pentation > ZERO and value >= self.limits[1]
        ):
            hypermantissa, tetration = self._split_tetration(value)

        mantissa, exponent, hypermantissa, tetration = self._split_exponent(hypermantissa, tetration)

        tetration = tetration * self.hyperexp_mult
        tetration_cap = self.original[2] if pentation.is_zero() else self.maximums[2]
        if tetration >= tetration_cap:
            return self._roll_into_pentation(original_value, pentation_count)

        exponent = exponent * self.exp_mult
        if negative_exponent:
            exponent = -exponent
        if negative:
            mantissa = -mantissa
        if self.amount_removed > 0:
            exponent = ZERO
        if self.amount_removed > 1:
            tetration = ZERO
        return HypersplitTuple(mantissa, exponent, tetration, pentation)

    def _small_without_exponent(self, value: ExtendedReal) -> HypersplitTuple:
        if self.mantissa_removed:
            tetration = self.rounding.apply(self._slog_step(value))
            return HypersplitTuple(ZERO, ZERO, tetration, ZERO)
        tetration = previous_step(ZERO, self.hypergrid)
        for _ in range(RENORMALIZATION_LIMIT):
            if not (value < ZERO and tetration > -2):
                break
            tetration = previous_step(tetration, self.hypergrid)
        mantissa = iterated_mult_log(value, self.base, tetration, self.exp_mult)
        return HypersplitTuple(mantissa, ZERO, tetration * self.hyperexp_mult, ZERO)

    def _small_without_tetration(self, value: ExtendedReal) -> HypersplitTuple:
        if self.mantissa_removed:
            # та же схема, что и для тетрации
            pentation = self.rounding.apply(self._slog_step(value))
            return HypersplitTuple(ZERO, ZERO, ZERO, pentation)
        pentation = next_step(ZERO, self.pentagrid)
        for _ in range(_repeat_count(pentation)):
            value = self._slog_step(value)
        return HypersplitTuple(value, ZERO, ZERO, pentation * self.pentaexp_mult)

    def _pentation_only(self, value: ExtendedReal) -> HypersplitTuple:
        pentation = ZERO
        for _ in range(RENORMALIZATION_LIMIT):
            if value < self.base:
                break
            value = self._slog_step(value)
            pentation = pentation + ONE
        pentation = (pentation + value.log(self.base)) * self.hyperexp_mult
        return HypersplitTuple(ZERO, ZERO, ZERO, self.rounding.apply(pentation))

    def _split_tetration(self, value: ExtendedReal) -> tuple[ExtendedReal, ExtendedReal]:
        """Гипермантисса ниже limits[1] и счётчик тетрации."""
        power = mult_slog(self.limits[1], self.base, self.exp_mult)
        hypermantissa, tetration = hyperscientifify(
            value, self.base, None, power, self.hypergrid, self.exp_mult
        )
        for _ in range(RENORMALIZATION_LIMIT):
            previous_hypermantissa = hypermantissa
            if hypermantissa >= self.limits[1]:
                following = next_step(tetration, self.hypergrid)
                hypermantissa = iterated_mult_log(
                    hypermantissa, self.base, following - tetration, self.exp_mult
                )
                tetration = following
            else:
                preceding = previous_step(tetration, self.hypergrid)
                candidate = self._iem(hypermantissa, tetration - preceding)
                if not candidate < self.limits[1]:
                    break
                hypermantissa, tetration = candidate, preceding
            if hypermantissa == previous_hypermantissa:
                break
        return hypermantissa, tetration

    def _split_exponent(self, hypermantissa: ExtendedReal, tetration: ExtendedReal):
        """
        (M, E) из гипермантиссы. Если округление выталкивает экспоненту за
        максимум, гипермантисса переносится на следующий шаг тетрации.
        """
        mantissa, exponent = hypermantissa, ZERO
        for _ in range(RENORMALIZATION_LIMIT):
            mantissa, exponent = hypermantissa, ZERO
            if self.mantissa_removed:
                mantissa, exponent = ZERO, self.rounding.apply(hypermantissa.log(self.base))
            elif self.amount_removed < 1 and mantissa >= self.original[0]:
                # приближение, остальное исправит перенормировка ниже
                mantissa_power = self.limits[0].log(self.base) - self.grid.finest
                mantissa, exponent = decompose_scientific(
                    hypermantissa, self.base, None, mantissa_power, self.grid
                )

            unrounded = mantissa
            mantissa = self.rounding.apply(mantissa)
            if self.amount_removed < 1 and not self.mantissa_removed:
                mantissa, exponent = self._renormalize(mantissa, unrounded, exponent)

            exponent_cap = self.original[1] if tetration.is_zero() else self.maximums[1]
            if exponent < exponent_cap:
                break
            following = next_step(tetration, self.hypergrid)
            hypermantissa = iterated_mult_log(hypermantissa, self.base, following - tetration, self.exp_mult)
            tetration = following
        else:
            logger.debug("hypersplit: exponent split stopped after %d steps", RENORMALIZATION_LIMIT)
        return mantissa, exponent, hypermantissa, tetration

    def _renormalize(self, mantissa, unrounded, exponent):
        loop_watch = False
        for _ in range(RENORMALIZATION_LIMIT):
            previous_unrounded = unrounded
            upper = self.original_limits[0] if exponent.is_zero() else self.limits[0]
            lower = upper / self.base ** (exponent - previous_step(exponent, self.grid))
            if mantissa >= upper:
                following = next_step(exponent, self.grid)
                unrounded = unrounded * self.base ** (exponent - following)
                exponent = following
                mantissa = self.rounding.apply(unrounded)
                if loop_watch:
                    logger.debug("hypersplit: mantissa renormalization oscillated at exponent %s", exponent)
                    break
            elif mantissa < lower:
                preceding = previous_step(exponent, self.grid)
                unrounded = unrounded * self.base ** (exponent - preceding)
                exponent = preceding
                mantissa = self.rounding.apply(unrounded)
                loop_watch = True
            else:
                break
            if unrounded == previous_unrounded:
                break
        return mantissa, exponent

    def _roll_into_pentation(self, original_value: ExtendedReal, pentation_count: ExtendedReal) -> HypersplitTuple:
        """Перенос тетрации в пентацию: повторное разложение slog-остатка."""
        value = abs(original_value)
        increase = next_step(pentation_count, self.pentagrid) - pentation_count
        for _ in range(_repeat_count(increase)):
            value = self._slog_step(value)
        mantissa, exponent, tetration, pentation = self._recurse(value)
        # знак у мантиссы, как и без переноса (см. run)
        if original_value < ZERO:
            mantissa = -mantissa
        return HypersplitTuple(mantissa, exponent, tetration, (pentation + increase) * self.pentaexp_mult)
