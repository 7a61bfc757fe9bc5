"""
QuantizationGrid — сетка допустимых шагов ("engineering")

Допустимые значения — суммы кратных шагов сетки, набираемые жадно от
большего шага к меньшему. Сетка [5, 2] допускает 0, 2, 4, 5, 7, 9, 10, ...
Сетка [1] — любые целые (обычная научная нотация), [3] — инженерная.

Шаги хранятся по убыванию. Пустая сетка заменяется на [1].
"""

from dataclasses import dataclass
from typing import Iterable, Union

from eternal_notations.core.math.extended_real import (
    ONE,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    to_extended,
)
from eternal_notations.core.math.numerical_safeguards import NotationDomainError


@dataclass(frozen=True)
class QuantizationGrid:
    """
    Неизменяемая сетка шагов, отсортированная по убыванию.

    Raises:
        NotationDomainError: Если хотя бы один шаг не положителен или не конечен
    """

    steps: tuple[ExtendedReal, ...] = (ONE,)

    def __post_init__(self):
        steps = tuple(to_extended(step) for step in self.steps)
        if not steps:
            steps = (ONE,)
        for step in steps:
            if not step.is_finite() or step <= ZERO:
                raise NotationDomainError(f"Grid steps must be positive and finite, got {step}")
        object.__setattr__(self, "steps", tuple(sorted(steps, reverse=True)))

    @classmethod
    def of(cls, source: "GridSource" = None) -> "QuantizationGrid":
        """Сетка из одиночного шага, последовательности шагов или None."""
        if source is None:
            return DEFAULT_GRID
        if isinstance(source, QuantizationGrid):
            return source
        if isinstance(source, (list, tuple)):
            return cls(tuple(source))
        return cls((to_extended(source),))

    @property
    def finest(self) -> ExtendedReal:
        """Наименьший шаг сетки."""
        return self.steps[-1]

    def __len__(self) -> int:
        return len(self.steps)


GridSource = Union[QuantizationGrid, ExtendedSource, Iterable[ExtendedSource], None]

DEFAULT_GRID = QuantizationGrid()
