"""
Contract Validation Module

JSON Schema контракты для словарей конфигурации нотаций.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    validate_fraction_config,
    validate_hyperscientific_config,
    validate_hypersplit_config,
    validate_scientific_config,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    # Functions
    "validate_scientific_config",
    "validate_hyperscientific_config",
    "validate_hypersplit_config",
    "validate_fraction_config",
]
