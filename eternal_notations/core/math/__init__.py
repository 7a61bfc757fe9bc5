"""
Core math modules для eternal_notations

Числовое ядро: ExtendedReal, шаги по сетке, научные и гипероператорные
декомпозиции, цепные дроби, разложение на простые, факториальное и
многоугольное семейства.
"""

# ExtendedReal
from eternal_notations.core.math.extended_real import (
    EXP_LIMIT,
    FIRST_NEG_LAYER,
    INF,
    LAYER_DOWN,
    NAN,
    NEG_INF,
    ONE,
    ZERO,
    ExtendedReal,
    ExtendedSource,
    iterated_exp_mult,
    iterated_log,
    iterated_mult_log,
    mult_slog,
    slog,
    tetrate,
    to_extended,
)

# Numerical Safeguards
from eternal_notations.core.math.numerical_safeguards import (
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    FACTORIAL_LOCAL_MINIMUM,
    ITERATION_BAIL_LIMIT,
    MAGNITUDE_GUARD,
    MAX_SAFE_INTEGER,
    RENORMALIZATION_LIMIT,
    SEARCH_ITERATION_LIMIT,
    TETRATION_CONVERGENCE_THRESHOLD,
    NotationDomainError,
    is_close,
    multabs,
    round_to_quantum,
    validate_base,
    validate_convergent_base,
    validate_nonzero,
    validate_positive,
)

# Engineering grid
from eternal_notations.core.math.engineering import (
    current_engineering,
    current_step,
    engineering_value,
    next_engineering,
    next_step,
    previous_engineering,
    previous_step,
    upper_current_step,
)

# Decomposers
from eternal_notations.core.math.scientific import hyperscientifify, scientifify
from eternal_notations.core.math.hypersplit import DEFAULT_MAXIMUMS, hypersplit

# Rational approximation & factorization
from eternal_notations.core.math.continued_fractions import (
    FractionForm,
    MixedFraction,
    SimpleFraction,
    approximate_fraction,
    continued_fraction,
    fraction_pair,
    mixed_fraction,
)
from eternal_notations.core.math.primes import (
    PrimeTable,
    prime_factorize,
    prime_factorize_fraction,
    primes_array,
)

# Factorial family
from eternal_notations.core.math.factorial import (
    factorial,
    factorial_hyperscientifify,
    factorial_scientifify,
    factorial_slog,
    inverse_factorial,
    iterated_factorial,
)

# Polygonal family
from eternal_notations.core.math.polygonal import (
    bi_polygon,
    bi_polygon_root,
    iterated_bi_polygon_root,
    iterated_polygon_root,
    polygon,
    polygon_log,
    polygon_root,
    tri_polygon,
    tri_polygon_root,
)

__all__ = [
    # ExtendedReal — Constants
    "EXP_LIMIT",
    "FIRST_NEG_LAYER",
    "LAYER_DOWN",
    "INF",
    "NAN",
    "NEG_INF",
    "ONE",
    "ZERO",
    # ExtendedReal — Types
    "ExtendedReal",
    "ExtendedSource",
    "to_extended",
    # ExtendedReal — Tetration family
    "tetrate",
    "iterated_log",
    "slog",
    "iterated_exp_mult",
    "iterated_mult_log",
    "mult_slog",
    # Numerical Safeguards — Constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "FACTORIAL_LOCAL_MINIMUM",
    "ITERATION_BAIL_LIMIT",
    "MAGNITUDE_GUARD",
    "MAX_SAFE_INTEGER",
    "RENORMALIZATION_LIMIT",
    "SEARCH_ITERATION_LIMIT",
    "TETRATION_CONVERGENCE_THRESHOLD",
    # Numerical Safeguards — Exceptions
    "NotationDomainError",
    # Numerical Safeguards — Functions
    "is_close",
    "multabs",
    "round_to_quantum",
    "validate_base",
    "validate_convergent_base",
    "validate_nonzero",
    "validate_positive",
    # Engineering grid
    "current_engineering",
    "current_step",
    "engineering_value",
    "next_engineering",
    "next_step",
    "previous_engineering",
    "previous_step",
    "upper_current_step",
    # Decomposers
    "scientifify",
    "hyperscientifify",
    "hypersplit",
    "DEFAULT_MAXIMUMS",
    # Continued fractions
    "FractionForm",
    "SimpleFraction",
    "MixedFraction",
    "approximate_fraction",
    "continued_fraction",
    "fraction_pair",
    "mixed_fraction",
    # Primes
    "PrimeTable",
    "primes_array",
    "prime_factorize",
    "prime_factorize_fraction",
    # Factorial family
    "factorial",
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
]
