"""
Pytest configuration and shared fixtures for the EGP engine tests.

This module provides reusable test fixtures for:
- Seeded and scripted randomness sources
- Blueprint catalogs of increasing richness
- Hand-built chromosomes with controlled binding geometry
"""

from collections import deque
from typing import Iterable

import pytest
from loguru import logger

from egp import (
    Blueprint,
    Chromosome,
    Component,
    build_catalog,
    make_rng,
    new_chromosome,
)


# ============================================================================
# Randomness Fixtures
# ============================================================================

class ScriptedRandom:
    """
    Random source replaying queued results.

    ``random()`` pops from ``randoms`` and ``randrange()`` pops from
    ``randranges``. Running out of values, or a queued integer falling
    outside the requested range, fails the test.
    """

    def __init__(self, randoms: Iterable[float] = (), randranges: Iterable[int] = ()):
        self.randoms = deque(randoms)
        self.randranges = deque(randranges)
        self.calls: list[tuple] = []

    def random(self) -> float:
        if not self.randoms:
            raise AssertionError("random() called more often than scripted")
        value = self.randoms.popleft()
        self.calls.append(("random", value))
        return value

    def randrange(self, start: int, stop: int | None = None) -> int:
        if stop is None:
            start, stop = 0, start
        if not self.randranges:
            raise AssertionError(f"randrange({start}, {stop}) called more often than scripted")
        value = self.randranges.popleft()
        assert start <= value < stop, f"scripted {value} outside [{start}, {stop})"
        self.calls.append(("randrange", (start, stop), value))
        return value

    @property
    def exhausted(self) -> bool:
        return not self.randoms and not self.randranges


@pytest.fixture
def rng():
    """Seeded random source."""
    return make_rng(1234)


@pytest.fixture
def scripted():
    """Factory for scripted random sources."""
    return ScriptedRandom


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru output out of the test report and reset sinks afterwards."""
    logger.remove()
    yield
    logger.remove()


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest.fixture
def simple_blueprints():
    """One group: output binds once into group 0, regular R, terminal T."""
    output = Blueprint.single_main("O")
    regular = [[Blueprint(label="R")]]
    terminal = [Blueprint.terminals(["T"])]
    return output, regular, terminal


@pytest.fixture
def simple_catalog(simple_blueprints, rng):
    """Catalog with activities R=0, T=1 (total 2)."""
    output, regular, terminal = simple_blueprints
    return build_catalog(output, regular, terminal, {}, rng)


@pytest.fixture
def double_catalog(rng):
    """Like ``simple_catalog`` but the output declares two strong sites."""
    return build_catalog(
        Blueprint.double_main("O"),
        [[Blueprint(label="R")]],
        [Blueprint.terminals(["T"])],
        {},
        rng,
    )


@pytest.fixture
def rich_blueprints():
    """
    Two groups with weak bindings.

    Activities: A=0, B=1 (group 0 regulars), C=2 (group 1 regular),
    T0=3, T1=4 (terminals). A looks weakly for C.
    """
    output = Blueprint.double_main("O")
    regular = [
        [Blueprint(label="A", strong_groups=(1,), weak_groups=(1,)), Blueprint(label="B")],
        [Blueprint(label="C")],
    ]
    terminal = [Blueprint.terminals(["T0"]), Blueprint.terminals(["T1"])]
    return output, regular, terminal


@pytest.fixture
def rich_catalog(rich_blueprints, rng):
    output, regular, terminal = rich_blueprints
    return build_catalog(output, regular, terminal, {"A": "C"}, rng)


# ============================================================================
# Chromosome Fixtures
# ============================================================================

def make_component(label, activity, strong=(), strong_groups=(), weak=(), weak_groups=()):
    """Build a component with explicit binding vectors."""
    return Component(
        activity=activity,
        label=label,
        strong_sites=[list(v) for v in strong],
        strong_groups=list(strong_groups),
        weak_sites=[list(v) for v in weak],
        weak_groups=list(weak_groups),
    )


@pytest.fixture
def component_factory():
    return make_component


@pytest.fixture
def rich_chromosome():
    """
    Output -> A (site 0) and T0 (site 1, A already consumed);
    A -> C strongly and C weakly.
    """
    toward_a = [0.5, 0.0, 0.5, 0.0, 0.0]
    toward_c = [0.0, 0.0, 1.0, 0.0, 0.0]
    output = make_component("O", 0, strong=[toward_a, toward_a], strong_groups=[0, 0])
    a = make_component(
        "A", 0, strong=[toward_c], strong_groups=[1], weak=[toward_c], weak_groups=[1]
    )
    c = make_component("C", 2)
    return Chromosome(output=output, regular=[[a], [c]])


@pytest.fixture
def random_chromosome(rich_catalog, rng):
    """Ab-initio chromosome of size 20 over the rich catalog."""
    return new_chromosome(rich_catalog, 20, rng)
