"""
Expression Engine

Develops a chromosome into a phenotype graph in two passes:

1. Strong resolution, breadth-first from the output node. Each strong site
   binds the nearest (by profile distance) unconsumed regular of its target
   group, or the nearest terminal of that group when the terminal is strictly
   closer or no regular is left. A bound regular is consumed for the rest of
   the run; terminals are reusable. The result is a tree.
2. Weak resolution. Every weak site of a weak-looking node binds the nearest
   weak-offering node. Offering nodes are reusable; when there are none the
   site stays unresolved.

Nearest-neighbour ties go to the later candidate (``<=`` comparison).

Expression is a pure function of (catalog, chromosome): it draws no random
numbers and never mutates its inputs.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator

import networkx as nx
from loguru import logger

from . import vectors
from .blueprints import Catalog
from .chromosome import Chromosome
from .component import PROFILE_BIAS, Component
from .logging_config import LogContext


# =============================================================================
# Phenotype elements
# =============================================================================


class Origin(str, Enum):
    """Where an expressed node's component lives."""

    OUTPUT = "output"
    REGULAR = "regular"     # chromosome.regular[group][index]
    TERMINAL = "terminal"   # catalog.terminal[group][index]


@dataclass(frozen=True)
class ComponentRef:
    """Tagged index into the chromosome or the catalog's terminal pool."""

    origin: Origin
    group: int | None = None
    index: int | None = None

    @classmethod
    def output(cls) -> ComponentRef:
        return cls(Origin.OUTPUT)

    @classmethod
    def regular(cls, group: int, index: int) -> ComponentRef:
        return cls(Origin.REGULAR, group, index)

    @classmethod
    def terminal(cls, group: int, index: int) -> ComponentRef:
        return cls(Origin.TERMINAL, group, index)


@dataclass(frozen=True)
class Expressed:
    """Phenotype node payload."""

    label: str
    activity: int
    ref: ComponentRef

    @classmethod
    def from_component(cls, component: Component, ref: ComponentRef) -> Expressed:
        return cls(label=component.label, activity=component.activity, ref=ref)

    def __repr__(self) -> str:
        return self.label


class BindingKind(str, Enum):
    STRONG = "strong"
    WEAK = "weak"


@dataclass(frozen=True)
class Binding:
    """Phenotype edge payload: which site of the source node the edge resolves."""

    kind: BindingKind
    ordinal: int

    @classmethod
    def strong(cls, ordinal: int) -> Binding:
        return cls(BindingKind.STRONG, ordinal)

    @classmethod
    def weak(cls, ordinal: int) -> Binding:
        return cls(BindingKind.WEAK, ordinal)

    @property
    def is_strong(self) -> bool:
        return self.kind is BindingKind.STRONG

    def decrement_strong(self) -> Binding:
        if self.is_strong:
            return Binding.strong(self.ordinal - 1)
        return self

    def __repr__(self) -> str:
        if self.is_strong:
            return f"{self.ordinal}"
        return f"{self.ordinal} (weak)"


class Phenotype(nx.MultiDiGraph):
    """
    Directed multigraph of expressed nodes and binding edges.

    Node ids are consecutive integers in creation order. Each node carries an
    ``expressed`` attribute and each edge a ``binding`` attribute.
    """

    def add_expressed(self, expressed: Expressed) -> int:
        node = self.number_of_nodes()
        self.add_node(node, expressed=expressed)
        return node

    def add_binding(self, source: int, target: int, binding: Binding) -> None:
        self.add_edge(source, target, binding=binding)

    def expressed(self, node: int) -> Expressed:
        return self.nodes[node]["expressed"]

    def bindings(self, kind: BindingKind | None = None) -> Iterator[tuple[int, int, Binding]]:
        for source, target, binding in self.edges(data="binding"):
            if kind is None or binding.kind is kind:
                yield source, target, binding

    def component(self, catalog: Catalog, chromosome: Chromosome, node: int) -> Component:
        """Resolve a node back to the component it was expressed from."""
        return resolve(catalog, chromosome, self.expressed(node).ref)

    def summary(self) -> dict[str, int]:
        origins = [self.expressed(node).ref.origin for node in self.nodes]
        return {
            "nodes": self.number_of_nodes(),
            "edges": self.number_of_edges(),
            "strong_edges": sum(1 for _ in self.bindings(BindingKind.STRONG)),
            "weak_edges": sum(1 for _ in self.bindings(BindingKind.WEAK)),
            "regular_nodes": origins.count(Origin.REGULAR),
            "terminal_nodes": origins.count(Origin.TERMINAL),
        }


def resolve(catalog: Catalog, chromosome: Chromosome, ref: ComponentRef) -> Component:
    match ref.origin:
        case Origin.OUTPUT:
            return chromosome.output
        case Origin.REGULAR:
            return chromosome.regular[ref.group][ref.index]
        case Origin.TERMINAL:
            return catalog.terminal[ref.group][ref.index]
    raise ValueError(f"Unknown origin: {ref.origin}")


# =============================================================================
# Nearest-neighbour search
# =============================================================================


def find_min_satisfying_distance(
    site: vectors.VectorLike,
    profiles: Iterable[vectors.VectorLike],
    criteria: Callable[[int], bool] = lambda index: True,
) -> tuple[int, float] | None:
    """
    Index and distance of the profile closest to ``site``.

    Only indices accepted by ``criteria`` are considered. Candidates are
    scanned in order and a candidate replaces the current best when its
    distance is <= the current minimum, so on a tie the later index wins.

    Returns:
        (index, distance), or None when no candidate is eligible
    """
    best: int | None = None
    min_distance = math.inf

    for index, profile in enumerate(profiles):
        if not criteria(index):
            continue
        distance = vectors.distance(site, profile)
        if distance <= min_distance:
            min_distance = distance
            best = index

    if best is None:
        return None
    return best, min_distance


# =============================================================================
# Expression
# =============================================================================


class _Expression:
    """Working state of a single expression run."""

    def __init__(self, catalog: Catalog, chromosome: Chromosome, bias: float):
        self.catalog = catalog
        self.chromosome = chromosome
        self.bias = bias

        self.phenotype = Phenotype()
        self.queue: deque[int] = deque()
        self.weak_looking: set[int] = set()
        self.weak_offering: set[int] = set()
        self.consumed: set[tuple[int, int]] = set()
        self._profiles: dict[ComponentRef, vectors.Vector] = {}

    def profile(self, ref: ComponentRef) -> vectors.Vector:
        if ref.origin is Origin.TERMINAL:
            return self.catalog.terminal_profiles[ref.group][ref.index]
        if ref not in self._profiles:
            component = resolve(self.catalog, self.chromosome, ref)
            self._profiles[ref] = component.profile(self.catalog.total_activities, self.bias)
        return self._profiles[ref]

    def regular_profiles(self, group: int) -> Iterator[vectors.Vector]:
        for index in range(len(self.chromosome.regular[group])):
            yield self.profile(ComponentRef.regular(group, index))

    def add_node(self, ref: ComponentRef) -> int:
        component = resolve(self.catalog, self.chromosome, ref)
        return self.phenotype.add_expressed(Expressed.from_component(component, ref))

    def satisfy(self, node: int) -> None:
        """Resolve every strong site of a freshly expressed node."""
        component = self.phenotype.component(self.catalog, self.chromosome, node)

        if component.label in self.catalog.weak_map:
            self.weak_looking.add(node)
        if component.label in self.catalog.weak_offering_labels:
            self.weak_offering.add(node)

        for ordinal, (site, group) in enumerate(zip(component.strong_sites, component.strong_groups)):
            regular_find = find_min_satisfying_distance(
                site,
                self.regular_profiles(group),
                lambda index: (group, index) not in self.consumed,
            )
            terminal_find = find_min_satisfying_distance(site, self.catalog.terminal_profiles[group])
            # well-formed catalogs always hold a terminal for every target group
            assert terminal_find is not None, f"group {group} has no terminals"
            terminal_index, terminal_distance = terminal_find

            if regular_find is not None and regular_find[1] <= terminal_distance:
                regular_index = regular_find[0]
                child = self.add_node(ComponentRef.regular(group, regular_index))
                self.consumed.add((group, regular_index))
            else:
                child = self.add_node(ComponentRef.terminal(group, terminal_index))

            self.phenotype.add_binding(node, child, Binding.strong(ordinal))
            self.queue.append(child)

    def satisfy_weak(self, node: int, offering: list[int]) -> None:
        component = self.phenotype.component(self.catalog, self.chromosome, node)
        offering_profiles = [self.profile(self.phenotype.expressed(n).ref) for n in offering]

        for ordinal, site in enumerate(component.weak_sites):
            found = find_min_satisfying_distance(site, offering_profiles)
            if found is not None:
                self.phenotype.add_binding(node, offering[found[0]], Binding.weak(ordinal))

        # TODO: pair looking nodes with offering nodes by weak_map label once
        # catalogs declare more than one offering label

    def run(self) -> Phenotype:
        output_node = self.add_node(ComponentRef.output())
        self.queue.append(output_node)

        while self.queue:
            self.satisfy(self.queue.popleft())

        # node id order
        offering = sorted(self.weak_offering)
        for node in sorted(self.weak_looking):
            self.satisfy_weak(node, offering)

        return self.phenotype


def express(catalog: Catalog, chromosome: Chromosome, bias: float = PROFILE_BIAS) -> Phenotype:
    """
    Construct the phenotype of ``chromosome``.

    Args:
        catalog: Well-formed catalog the chromosome was built against
        chromosome: Genome to develop (not modified)
        bias: Profile blend weight; the engine uses the fixed PROFILE_BIAS

    Returns:
        Phenotype graph
    """
    with LogContext(phase="expression"):
        phenotype = _Expression(catalog, chromosome, bias).run()
        logger.opt(lazy=True).debug("Phenotype expressed", summary=phenotype.summary)
    return phenotype


__all__ = [
    "Origin",
    "ComponentRef",
    "Expressed",
    "BindingKind",
    "Binding",
    "Phenotype",
    "resolve",
    "find_min_satisfying_distance",
    "express",
]
