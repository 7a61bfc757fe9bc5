"""
Результаты декомпозиций — неизменяемые кортежи.

Все компоненты — ExtendedReal. Кортежи канонические: форматирующий код
не должен повторно выводить из них числовую семантику.
"""

from typing import NamedTuple

from eternal_notations.core.math.extended_real import ExtendedReal


class ScientificTuple(NamedTuple):
    """mantissa * base^exponent (или mantissa * exponent! для факториальной формы)."""

    mantissa: ExtendedReal
    exponent: ExtendedReal


class HyperTuple(NamedTuple):
    """Итерированная экспонента base^base^...^mantissa (hyperexponent раз)."""

    mantissa: ExtendedReal
    hyperexponent: ExtendedReal


class HypersplitTuple(NamedTuple):
    """
    (M, E, T, P): b^^b^^...^^(b^b^...^(M * b^E)), где T возведений b^ и P
    тетраций b^^.
    """

    mantissa: ExtendedReal
    exponent: ExtendedReal
    tetration: ExtendedReal
    pentation: ExtendedReal
