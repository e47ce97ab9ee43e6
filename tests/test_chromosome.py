"""
Unit tests for chromosome construction and persistence.

Tests cover:
- Budget distribution across regular slots
- Ab-initio sizing and the SizingError boundary
- Cloning and dict/JSON persistence
"""

import pytest

from egp import Chromosome, EngineError, SizingError, make_rng, new_chromosome


# ============================================================================
# Distribution Tests
# ============================================================================

class TestDistribution:
    """Test Chromosome.distribution."""

    def test_sums_to_size(self, rng):
        for slots in (1, 2, 5):
            for size in (0, 1, 7, 100):
                assert sum(Chromosome.distribution(slots, size, rng)) == size

    def test_truncation_repaired_by_random_slots(self, scripted):
        """Test the shortfall after truncation goes to randomly drawn slots."""
        source = scripted(randoms=[0.5, 0.5], randranges=[1])
        assert Chromosome.distribution(2, 5, source) == [2, 3]
        assert source.exhausted

    def test_proportional_shares(self, scripted):
        source = scripted(randoms=[0.75, 0.25])
        assert Chromosome.distribution(2, 8, source) == [6, 2]


# ============================================================================
# Ab-initio Tests
# ============================================================================

class TestNewChromosome:
    """Test new_chromosome sizing."""

    @pytest.mark.parametrize("size", [4, 5, 10, 37, 200])
    def test_exact_size(self, rich_catalog, rng, size):
        """Test regulars + terminals + output == requested size."""
        chromosome = new_chromosome(rich_catalog, size, rng)
        assert sum(chromosome.group_sizes) + rich_catalog.number_of_terminals + 1 == size
        assert chromosome.size(rich_catalog) == size

    def test_minimum_size_rejected(self, rich_catalog, rng):
        """Test size <= number_of_terminals + 1 is a sizing error."""
        with pytest.raises(SizingError) as exc_info:
            new_chromosome(rich_catalog, 3, rng)
        assert exc_info.value.minimum == 3
        assert isinstance(exc_info.value, EngineError)

        assert new_chromosome(rich_catalog, 4, rng).n_regulars == 1

    def test_one_list_per_group(self, rich_catalog, rng):
        chromosome = new_chromosome(rich_catalog, 30, rng)
        assert len(chromosome.regular) == rich_catalog.n_groups
        assert {c.label for c in chromosome.regular[0]} <= {"A", "B"}
        assert {c.label for c in chromosome.regular[1]} <= {"C"}

    def test_output_instantiated_last(self, simple_catalog, scripted):
        """Test draw order: slot weights, then components, output last."""
        # one regular slot (R, no sites), budget 2; output has one 2-d strong site
        source = scripted(randoms=[0.4, 0.9, 0.1])
        chromosome = new_chromosome(simple_catalog, 4, source)

        assert chromosome.group_sizes == [2]
        assert chromosome.output.strong_sites == [[0.9, 0.1]]
        assert source.exhausted

    def test_seeded_reproducible(self, rich_catalog):
        a = new_chromosome(rich_catalog, 25, make_rng(7))
        b = new_chromosome(rich_catalog, 25, make_rng(7))
        assert a == b


# ============================================================================
# Persistence Tests
# ============================================================================

class TestPersistence:
    """Test clone and dict/JSON mirrors."""

    def test_clone_is_deep(self, random_chromosome):
        clone = random_chromosome.clone()
        assert clone == random_chromosome

        sizes = random_chromosome.group_sizes
        clone.output.strong_sites[0][0] = 2.0
        clone.regular[1].append(clone.output)
        assert random_chromosome.output.strong_sites[0][0] != 2.0
        assert random_chromosome.group_sizes == sizes

    def test_dict_mirrors_fields(self, random_chromosome):
        data = random_chromosome.to_dict()
        assert set(data) == {"output", "regular"}
        assert set(data["output"]) == {
            "activity",
            "label",
            "strong_sites",
            "strong_groups",
            "weak_sites",
            "weak_groups",
        }
        assert Chromosome.from_dict(data) == random_chromosome

    def test_json_round_trip(self, random_chromosome):
        restored = Chromosome.from_json(random_chromosome.to_json(pretty=True))
        assert restored == random_chromosome
