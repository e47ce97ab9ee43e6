"""
Blueprint Catalog

Blueprints are immutable templates partitioned into groups. Building a catalog:
- numbers every regular, then every terminal blueprint with a unique activity
  (group-major, position-major); the output blueprint keeps its own activity
- pre-instantiates each terminal blueprint exactly once into a shared pool
- records the derived counts used by chromosome construction and operators

A catalog is read-only for the lifetime of a run and can be shared freely
between concurrent expressions.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Sequence, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .component import PROFILE_BIAS, Component
from .errors import CatalogError
from .rng import RandomSource
from .vectors import Vector

T = TypeVar("T")


# =============================================================================
# Blueprint
# =============================================================================


class Blueprint(BaseModel):
    """
    Immutable component template.

    Group membership is positional (the index of the group list the blueprint
    sits in). Blueprints without any binding sites are terminals: they are not
    recorded in chromosomes and can be expressed any number of times.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    activity: int = Field(default=0, ge=0)
    strong_groups: tuple[int, ...] = ()
    weak_groups: tuple[int, ...] = ()

    @property
    def has_binding_sites(self) -> bool:
        return bool(self.strong_groups or self.weak_groups)

    @classmethod
    def terminal(cls, label: str) -> Blueprint:
        return cls(label=label)

    @classmethod
    def single_main(cls, label: str) -> Blueprint:
        """One strong site into group 0."""
        return cls(label=label, strong_groups=(0,))

    @classmethod
    def double_main(cls, label: str) -> Blueprint:
        """Two strong sites into group 0."""
        return cls(label=label, strong_groups=(0, 0))

    @classmethod
    def terminals(cls, labels: Sequence[str]) -> list[Blueprint]:
        return [cls.terminal(label) for label in labels]


# =============================================================================
# Catalog
# =============================================================================


@dataclass(frozen=True, eq=False)
class Catalog:
    """Finalized blueprint set plus derived numbering and counts."""

    output: Blueprint
    regular: tuple[tuple[Blueprint, ...], ...]
    terminal: tuple[tuple[Component, ...], ...]
    activities_by_group: tuple[int, ...]   # regular + terminal per group, output not counted
    total_activities: int
    weak_map: Mapping[str, str]
    number_of_regulars: int
    number_of_terminals: int

    terminal_profiles: tuple[tuple[Vector, ...], ...] = field(repr=False)
    nonempty_groups: tuple[int, ...] = ()

    @property
    def n_groups(self) -> int:
        return len(self.regular)

    @property
    def weak_looking_labels(self) -> frozenset[str]:
        return frozenset(self.weak_map.keys())

    @property
    def weak_offering_labels(self) -> frozenset[str]:
        return frozenset(self.weak_map.values())

    def regular_slots(self) -> Iterator[tuple[int, int, Blueprint]]:
        """Flattened (group, position, blueprint) over all regular blueprints."""
        for group_index, group in enumerate(self.regular):
            for position, blueprint in enumerate(group):
                yield group_index, position, blueprint


def sum_group_lens(groups: Sequence[Sequence[T]]) -> int:
    return sum(len(group) for group in groups)


def validate_blueprints(
    output: Blueprint,
    regular: Sequence[Sequence[Blueprint]],
    terminal: Sequence[Sequence[Blueprint]],
) -> list[str]:
    """
    Check catalog well-formedness.

    Returns:
        List of problems (empty when the groups form a valid catalog)
    """
    problems: list[str] = []

    if len(regular) != len(terminal):
        problems.append(
            f"regular and terminal group counts differ ({len(regular)} != {len(terminal)})"
        )

    n_groups = min(len(regular), len(terminal))

    reported: set[int] = set()
    owners = [output] + [bp for group in regular for bp in group]
    for blueprint in owners:
        for target in blueprint.strong_groups + blueprint.weak_groups:
            if not 0 <= target < n_groups:
                problems.append(f"'{blueprint.label}' targets group {target} which does not exist")
            elif not terminal[target] and target not in reported:
                reported.add(target)
                problems.append(f"group {target} is a binding target but has no terminal blueprints")

    for group_index, group in enumerate(terminal):
        for blueprint in group:
            if blueprint.has_binding_sites:
                problems.append(
                    f"terminal '{blueprint.label}' in group {group_index} declares binding sites"
                )

    if not any(regular):
        problems.append("catalog has no nonempty regular group")

    total_activities = sum_group_lens(regular) + sum_group_lens(terminal)
    if total_activities and not 0 <= output.activity < total_activities:
        problems.append(
            f"output activity {output.activity} outside [0, {total_activities})"
        )

    return problems


def _number(groups: Sequence[Sequence[Blueprint]], start: int) -> tuple[list[list[Blueprint]], int]:
    counter = start
    numbered: list[list[Blueprint]] = []
    for group in groups:
        numbered_group = []
        for blueprint in group:
            numbered_group.append(blueprint.model_copy(update={"activity": counter}))
            counter += 1
        numbered.append(numbered_group)
    return numbered, counter


def recompute_activities(
    regular: Sequence[Sequence[Blueprint]],
    terminal: Sequence[Sequence[Blueprint]],
) -> tuple[list[list[Blueprint]], list[list[Blueprint]]]:
    """Number regulars then terminals, group-major then position-major."""
    numbered_regular, counter = _number(regular, 0)
    numbered_terminal, _ = _number(terminal, counter)
    return numbered_regular, numbered_terminal


def build_catalog(
    output: Blueprint,
    regular: Sequence[Sequence[Blueprint]],
    terminal: Sequence[Sequence[Blueprint]],
    weak_map: Mapping[str, str] | None,
    rng: RandomSource,
) -> Catalog:
    """
    Finalize blueprint groups into a catalog.

    Args:
        output: Output blueprint (not numbered, keeps its declared activity)
        regular: Regular blueprints per group
        terminal: Terminal blueprints per group
        weak_map: Label of a weak-looking component -> label it looks for
        rng: Source used to instantiate the terminal pool

    Returns:
        Catalog instance

    Raises:
        CatalogError: if the groups are structurally malformed
    """
    # chromosome imports this module
    from .chromosome import Chromosome

    problems = validate_blueprints(output, regular, terminal)
    if problems:
        logger.error("Catalog validation failed", problems=problems)
        raise CatalogError(problems)

    activities_by_group = tuple(len(r) + len(t) for r, t in zip(regular, terminal))
    total_activities = sum(activities_by_group)

    numbered_regular, numbered_terminal = recompute_activities(regular, terminal)

    terminal_pool = tuple(
        tuple(Chromosome.make_group(group, [1] * len(group), total_activities, rng))
        for group in numbered_terminal
    )
    terminal_profiles = tuple(
        tuple(component.profile(total_activities, PROFILE_BIAS) for component in group)
        for group in terminal_pool
    )

    catalog = Catalog(
        output=output,
        regular=tuple(tuple(group) for group in numbered_regular),
        terminal=terminal_pool,
        activities_by_group=activities_by_group,
        total_activities=total_activities,
        weak_map=MappingProxyType(dict(weak_map or {})),
        number_of_regulars=sum_group_lens(numbered_regular),
        number_of_terminals=sum_group_lens(terminal_pool),
        terminal_profiles=terminal_profiles,
        nonempty_groups=tuple(i for i, group in enumerate(numbered_regular) if group),
    )

    logger.info(
        "Catalog built",
        groups=catalog.n_groups,
        total_activities=total_activities,
        regulars=catalog.number_of_regulars,
        terminals=catalog.number_of_terminals,
    )

    return catalog


__all__ = [
    "Blueprint",
    "Catalog",
    "build_catalog",
    "validate_blueprints",
    "recompute_activities",
    "sum_group_lens",
]
