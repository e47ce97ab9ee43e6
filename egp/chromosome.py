"""
Chromosome

The evolvable genome: one output component plus, per catalog group, an
ordered sequence of regular components. Terminals are never stored here;
they live in the catalog's shared pool.

Chromosomes are owned by the caller. Operators mutate them in place or clone
them; expression only reads them.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .blueprints import Blueprint, Catalog
from .component import Component
from .errors import SizingError
from .rng import RandomSource


class Chromosome(BaseModel):
    """Output component plus per-group regular component sequences."""

    model_config = ConfigDict(validate_assignment=True)

    output: Component
    regular: list[list[Component]] = Field(default_factory=list)

    # -------------------------------------------------------------------------
    # Instantiation helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def make_many(
        blueprint: Blueprint, n: int, total_activities: int, rng: RandomSource
    ) -> list[Component]:
        """Instantiate ``n`` independently sampled components of ``blueprint``."""
        return [Component.from_blueprint(blueprint, total_activities, rng) for _ in range(n)]

    @staticmethod
    def make_group(
        blueprints: Sequence[Blueprint],
        distribution: Sequence[int],
        total_activities: int,
        rng: RandomSource,
    ) -> list[Component]:
        """Instantiate ``distribution[i]`` components of ``blueprints[i]``, in order."""
        group: list[Component] = []
        for blueprint, n in zip(blueprints, distribution):
            group.extend(Chromosome.make_many(blueprint, n, total_activities, rng))
        return group

    @staticmethod
    def distribution(slots: int, size: int, rng: RandomSource) -> list[int]:
        """
        Split ``size`` across ``slots`` at random.

        Samples one uniform weight per slot, normalizes, truncates each share,
        then repairs the truncation shortfall one random slot at a time.
        """
        weights = [rng.random() for _ in range(slots)]
        total = sum(weights)
        if total <= 0.0:
            weights = [1.0] * slots
            total = float(slots)

        counts = [int(size * (weight / total)) for weight in weights]
        missing = size - sum(counts)

        for _ in range(missing):
            counts[rng.randrange(slots)] += 1

        assert sum(counts) == size
        return counts

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def n_regulars(self) -> int:
        return sum(len(group) for group in self.regular)

    @property
    def group_sizes(self) -> list[int]:
        return [len(group) for group in self.regular]

    def size(self, catalog: Catalog) -> int:
        """Genome size as counted at creation: regulars + terminals + output."""
        return self.n_regulars + catalog.number_of_terminals + 1

    # -------------------------------------------------------------------------
    # Copy & persistence
    # -------------------------------------------------------------------------

    def clone(self) -> Chromosome:
        return self.model_copy(deep=True)

    def to_dict(self) -> dict[str, Any]:
        """Field-for-field mirror suitable for checkpointing."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chromosome:
        return cls.model_validate(data)

    def to_json(self, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), indent=2 if pretty else None)

    @classmethod
    def from_json(cls, json_str: str) -> Chromosome:
        return cls.from_dict(json.loads(json_str))


def new_chromosome(catalog: Catalog, size: int, rng: RandomSource) -> Chromosome:
    """
    Create an ab-initio chromosome of exactly ``size``.

    ``size`` counts the output component, one of each terminal and the
    regular components; the regular budget is spread over every regular
    blueprint slot of the catalog.

    Raises:
        SizingError: if size <= number_of_terminals + 1
    """
    minimum = catalog.number_of_terminals + 1
    if size <= minimum:
        raise SizingError(size, minimum)

    budget = size - 1 - catalog.number_of_terminals
    counts = Chromosome.distribution(catalog.number_of_regulars, budget, rng)

    regular: list[list[Component]] = [[] for _ in range(catalog.n_groups)]
    for (group_index, _position, blueprint), n in zip(catalog.regular_slots(), counts):
        regular[group_index].extend(
            Chromosome.make_many(blueprint, n, catalog.total_activities, rng)
        )

    output = Component.from_blueprint(catalog.output, catalog.total_activities, rng)
    chromosome = Chromosome(output=output, regular=regular)

    logger.debug("Chromosome created", size=size, group_sizes=chromosome.group_sizes)
    return chromosome


__all__ = ["Chromosome", "new_chromosome"]
