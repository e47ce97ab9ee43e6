"""
Randomness Source

All sampling in the engine goes through an explicitly passed source so that
draw order is reproducible and concurrent evaluations never share state.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Uniform real and integer sampling capability.

    ``random.Random`` satisfies this protocol structurally.
    """

    def random(self) -> float:
        """Uniform sample in [0, 1)."""
        ...

    def randrange(self, start: int, stop: int | None = None) -> int:
        """Uniform integer in [0, start) or [start, stop)."""
        ...


def make_rng(seed: int | None = None) -> random.Random:
    """Create an independent source, seeded when ``seed`` is given."""
    return random.Random(seed)


__all__ = ["RandomSource", "make_rng"]
