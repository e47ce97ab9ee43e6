"""
Engine Errors

Configuration and sizing failures raised at the boundary of the engine.
Operators and expression never raise these for degenerate runtime inputs.

Author: EGP Team
License: MIT
"""

from __future__ import annotations


class EngineError(ValueError):
    """Base class for unrecoverable engine setup failures."""


class CatalogError(EngineError):
    """Raised when blueprint groups do not form a well-formed catalog."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__(f"Invalid catalog: {'; '.join(self.problems)}")


class SizingError(EngineError):
    """Raised when an ab-initio chromosome is requested below the minimum size."""

    def __init__(self, size: int, minimum: int):
        self.size = size
        self.minimum = minimum
        super().__init__(f"Chromosome size {size} too small: need size > {minimum}")


__all__ = ["EngineError", "CatalogError", "SizingError"]
