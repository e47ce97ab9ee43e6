"""
Genetic Operators - Mutation & Recombination

Catalog-aware operators over chromosomes:
- Mutation (in place): activity relabelling, or a single-scalar rewrite of a
  strong binding vector of the output or of a regular component
- Recombination (new child): contiguous removal from a clone of the parent,
  or contiguous transfer of components from a donor

Degenerate inputs (an empty group, a component without strong sites) make
the operation a no-op instead of failing.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from loguru import logger

from .blueprints import Catalog
from .chromosome import Chromosome
from .component import Component
from .rng import RandomSource

if TYPE_CHECKING:
    from .config import EngineConfig


# =============================================================================
# Enums & Configuration
# =============================================================================


class MutationType(Enum):
    """Mutations that can be applied to a chromosome."""

    ACTIVITY = auto()            # Relabel a component with a re-drawn template activity
    OUTPUT_BINDING = auto()      # Rewrite one scalar of an output strong site
    REGULAR_BINDING = auto()     # Rewrite one scalar of a regular strong site


class RecombinationType(Enum):
    """Recombinations producing a child chromosome."""

    REMOVE = auto()              # Drop a contiguous run from the parent
    TRANSFER = auto()            # Append a contiguous run from the donor


@dataclass
class OperatorConfig:
    """Branch probabilities of the operators."""

    activity_rate: float = 0.5   # P(activity mutation); otherwise a binding mutation
    remove_rate: float = 0.5     # P(remove); otherwise transfer

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration."""
        errors = []

        if not (0.0 <= self.activity_rate <= 1.0):
            errors.append("activity_rate must be in [0, 1]")

        if not (0.0 <= self.remove_rate <= 1.0):
            errors.append("remove_rate must be in [0, 1]")

        return (len(errors) == 0, errors)


def nonempty_group(catalog: Catalog, rng: RandomSource) -> int:
    """Uniformly drawn group with at least one regular blueprint."""
    groups = catalog.nonempty_groups
    return groups[rng.randrange(len(groups))]


def sample_transfer_count(config: EngineConfig, rng: RandomSource) -> int:
    """Draw a recombination count in [1, max(2, transfer_range * chromosome_size))."""
    upper = max(2, int(config.transfer_range * config.chromosome_size))
    return rng.randrange(1, upper)


class _Operator:
    def __init__(self, rng: RandomSource, config: OperatorConfig | None = None):
        self.rng = rng
        self.config = config or OperatorConfig()

        is_valid, errors = self.config.validate()
        if not is_valid:
            raise ValueError(f"Invalid operator config: {', '.join(errors)}")


# =============================================================================
# Mutation
# =============================================================================


class MutationOperator(_Operator):
    """Mutates chromosomes in place."""

    def mutate(self, catalog: Catalog, chromosome: Chromosome) -> MutationType:
        """
        Apply one mutation to ``chromosome``.

        Args:
            catalog: Catalog the chromosome was built against
            chromosome: Chromosome to modify in place

        Returns:
            The mutation type that was selected (it may have been a no-op)
        """
        mutation_type = self._select_mutation_type(chromosome)

        match mutation_type:
            case MutationType.ACTIVITY:
                applied = self._mutate_activity(catalog, chromosome)
            case MutationType.OUTPUT_BINDING:
                applied = self._mutate_binding_site(catalog, chromosome.output)
            case MutationType.REGULAR_BINDING:
                applied = self._mutate_regular_binding(catalog, chromosome)

        logger.debug("Chromosome mutated", mutation=mutation_type.name, applied=applied)
        return mutation_type

    def _select_mutation_type(self, chromosome: Chromosome) -> MutationType:
        if self.rng.random() < self.config.activity_rate:
            return MutationType.ACTIVITY

        # the output is picked as often as a single regular would be
        n_regulars = chromosome.n_regulars
        if n_regulars == 0 or self.rng.random() < 1.0 / n_regulars:
            return MutationType.OUTPUT_BINDING
        return MutationType.REGULAR_BINDING

    def _mutate_activity(self, catalog: Catalog, chromosome: Chromosome) -> bool:
        """Relabel one chromosome component sharing a re-drawn template's activity."""
        group = nonempty_group(catalog, self.rng)
        member = self.rng.randrange(len(catalog.regular[group]))

        new_component = Component.from_blueprint(
            catalog.regular[group][member], catalog.total_activities, self.rng
        )

        compatible = [
            component
            for component in chromosome.regular[group]
            if component.activity == new_component.activity
        ]
        if not compatible:
            return False

        target = compatible[self.rng.randrange(len(compatible))]
        target.activity = new_component.activity
        target.label = new_component.label
        return True

    def _mutate_regular_binding(self, catalog: Catalog, chromosome: Chromosome) -> bool:
        group = nonempty_group(catalog, self.rng)
        members = chromosome.regular[group]

        if not members:
            logger.debug("Cannot mutate binding: empty group", group=group)
            return False

        component = members[self.rng.randrange(len(members))]
        return self._mutate_binding_site(catalog, component)

    def _mutate_binding_site(self, catalog: Catalog, component: Component) -> bool:
        """Overwrite one dimension of one strong site; weak sites are never touched."""
        if not component.strong_sites:
            return False

        site = self.rng.randrange(len(component.strong_sites))
        dimension = self.rng.randrange(catalog.total_activities)
        component.strong_sites[site][dimension] = self.rng.random()
        return True


# =============================================================================
# Recombination
# =============================================================================


class RecombinationOperator(_Operator):
    """Produces child chromosomes from a parent and a donor."""

    def recombine(
        self,
        catalog: Catalog,
        n_transfer: int,
        parent: Chromosome,
        donor: Chromosome,
    ) -> Chromosome:
        """
        Create a child from ``parent`` (and possibly ``donor``).

        Args:
            catalog: Catalog both chromosomes were built against
            n_transfer: Number of components to remove or transfer
            parent: Chromosome the child is cloned from (not modified)
            donor: Chromosome components are transferred from (not modified)

        Returns:
            Child chromosome
        """
        if n_transfer < 0:
            raise ValueError(f"n_transfer must be >= 0 (got {n_transfer})")

        child = parent.clone()

        if self.rng.random() < self.config.remove_rate:
            recombination_type = RecombinationType.REMOVE
            changed = self._recombine_remove(catalog, n_transfer, child)
        else:
            recombination_type = RecombinationType.TRANSFER
            changed = self._recombine_transfer(catalog, n_transfer, child, donor)

        logger.debug(
            "Chromosome recombined",
            recombination=recombination_type.name,
            n_transfer=n_transfer,
            changed=changed,
            group_sizes=child.group_sizes,
        )
        return child

    def _recombine_remove(self, catalog: Catalog, n_remove: int, child: Chromosome) -> int:
        """Remove up to ``n_remove`` consecutive components from a random offset."""
        group = nonempty_group(catalog, self.rng)
        members = child.regular[group]

        if not members:
            return 0

        n_remove = min(n_remove, len(members))
        skip = self.rng.randrange(len(members))

        removed = len(members[skip:skip + n_remove])
        del members[skip:skip + n_remove]
        return removed

    def _recombine_transfer(
        self, catalog: Catalog, n_transfer: int, child: Chromosome, donor: Chromosome
    ) -> int:
        """Append up to ``n_transfer`` donor components starting at a random offset."""
        group = nonempty_group(catalog, self.rng)
        donor_members = donor.regular[group]

        if not donor_members:
            return 0

        n_transfer = min(n_transfer, len(donor_members))
        skip = self.rng.randrange(len(donor_members))

        transferred = [c.model_copy(deep=True) for c in donor_members[skip:skip + n_transfer]]
        child.regular[group].extend(transferred)
        return len(transferred)


# =============================================================================
# Functional API
# =============================================================================


def mutate(catalog: Catalog, chromosome: Chromosome, rng: RandomSource) -> MutationType:
    """Mutate ``chromosome`` in place (see MutationOperator.mutate)."""
    return MutationOperator(rng).mutate(catalog, chromosome)


def recombine(
    catalog: Catalog,
    n_transfer: int,
    parent: Chromosome,
    donor: Chromosome,
    rng: RandomSource,
) -> Chromosome:
    """Create a child chromosome (see RecombinationOperator.recombine)."""
    return RecombinationOperator(rng).recombine(catalog, n_transfer, parent, donor)


__all__ = [
    "MutationType",
    "RecombinationType",
    "OperatorConfig",
    "MutationOperator",
    "RecombinationOperator",
    "nonempty_group",
    "sample_transfer_count",
    "mutate",
    "recombine",
]
