"""
Domain value types.

Rounding rules, quantization grids and decomposition result tuples.
Configuration models live in eternal_notations.core.domain.config.
"""

from eternal_notations.core.domain.grid import DEFAULT_GRID, GridSource, QuantizationGrid
from eternal_notations.core.domain.results import HyperTuple, HypersplitTuple, ScientificTuple
from eternal_notations.core.domain.rounding import (
    NO_ROUNDING,
    DynamicRounding,
    FixedRounding,
    NoRounding,
    Rounding,
    RoundingSource,
    as_rounding,
    significant_figures,
)

__all__ = [
    # Grid
    "QuantizationGrid",
    "GridSource",
    "DEFAULT_GRID",
    # Results
    "ScientificTuple",
    "HyperTuple",
    "HypersplitTuple",
    # Rounding
    "NoRounding",
    "FixedRounding",
    "DynamicRounding",
    "Rounding",
    "RoundingSource",
    "NO_ROUNDING",
    "as_rounding",
    "significant_figures",
]
