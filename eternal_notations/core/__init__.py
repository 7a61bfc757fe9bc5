"""
Core numeric engine: ExtendedReal, decomposition algorithms, value types,
and configuration contracts.

Everything here is pure and stateless; rendering of the structured results
is left to the calling code.
"""
