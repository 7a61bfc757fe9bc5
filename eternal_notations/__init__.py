"""
eternal_notations — numeric decomposition and approximation engine.

Turns arbitrary-magnitude values into canonical structured breakdowns:
mantissa/exponent pairs, hyperoperator tuples, rational approximations and
prime factorizations. Formatting of these results is up to the caller.
"""

import logging

from eternal_notations.core.math import (
    ExtendedReal,
    FractionForm,
    NotationDomainError,
    PrimeTable,
    approximate_fraction,
    bi_polygon,
    bi_polygon_root,
    current_step,
    factorial_hyperscientifify,
    factorial_scientifify,
    factorial_slog,
    hyperscientifify,
    hypersplit,
    inverse_factorial,
    iterated_bi_polygon_root,
    iterated_factorial,
    iterated_polygon_root,
    next_step,
    polygon,
    polygon_log,
    polygon_root,
    prime_factorize,
    prime_factorize_fraction,
    previous_step,
    scientifify,
    slog,
    tetrate,
    tri_polygon,
    tri_polygon_root,
)
from eternal_notations.core.domain import (
    HyperTuple,
    HypersplitTuple,
    QuantizationGrid,
    ScientificTuple,
    significant_figures,
)
from eternal_notations.core.domain.config import (
    FractionConfig,
    HyperscientificConfig,
    HypersplitConfig,
    ScientificConfig,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Numbers & errors
    "ExtendedReal",
    "NotationDomainError",
    "tetrate",
    "slog",
    # Grid stepper
    "QuantizationGrid",
    "current_step",
    "next_step",
    "previous_step",
    # Decomposers
    "ScientificTuple",
    "HyperTuple",
    "HypersplitTuple",
    "scientifify",
    "hyperscientifify",
    "hypersplit",
    "significant_figures",
    # Fractions & primes
    "FractionForm",
    "approximate_fraction",
    "PrimeTable",
    "prime_factorize",
    "prime_factorize_fraction",
    # Factorial family
    "iterated_factorial",
    "inverse_factorial",
    "factorial_slog",
    "factorial_scientifify",
    "factorial_hyperscientifify",
    # Polygonal family
    "polygon",
    "polygon_root",
    "polygon_log",
    "bi_polygon",
    "iterated_polygon_root",
    "bi_polygon_root",
    "tri_polygon",
    "iterated_bi_polygon_root",
    "tri_polygon_root",
    # Config models
    "ScientificConfig",
    "HyperscientificConfig",
    "HypersplitConfig",
    "FractionConfig",
]
