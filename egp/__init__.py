"""
EGP - Genotype-to-Phenotype Development Engine

Develops compact genomes (chromosomes) into phenotype graphs by matching
declared binding sites against a catalog of reusable blueprints with
vector-affinity search, and evolves chromosomes with catalog-aware
mutation and recombination.

Components:
- Blueprint catalog with activity numbering and a shared terminal pool
- Component instantiation and profile matching
- Chromosome construction and persistence
- Two-pass expression into a networkx phenotype graph
- Mutation and recombination operators

Author: EGP Team
License: MIT
Version: 0.1.0
"""

__version__ = "0.1.0"

# Vector math
from . import vectors

# Randomness & errors
from .rng import RandomSource, make_rng
from .errors import EngineError, CatalogError, SizingError

# Data model
from .component import Component, PROFILE_BIAS
from .blueprints import (
    Blueprint,
    Catalog,
    build_catalog,
    validate_blueprints,
)
from .chromosome import Chromosome, new_chromosome

# Expression
from .expression import (
    Phenotype,
    Expressed,
    ComponentRef,
    Origin,
    Binding,
    BindingKind,
    express,
    find_min_satisfying_distance,
)

# Evolution operators
from .operators import (
    MutationOperator,
    RecombinationOperator,
    OperatorConfig,
    MutationType,
    RecombinationType,
    mutate,
    recombine,
    sample_transfer_count,
)

# Configuration & logging
from .config import EngineConfig, load_config
from .logging_config import configure_logging, LogContext

__all__ = [
    "__version__",
    "vectors",
    # Randomness & errors
    "RandomSource",
    "make_rng",
    "EngineError",
    "CatalogError",
    "SizingError",
    # Data model
    "Component",
    "PROFILE_BIAS",
    "Blueprint",
    "Catalog",
    "build_catalog",
    "validate_blueprints",
    "Chromosome",
    "new_chromosome",
    # Expression
    "Phenotype",
    "Expressed",
    "ComponentRef",
    "Origin",
    "Binding",
    "BindingKind",
    "express",
    "find_min_satisfying_distance",
    # Operators
    "MutationOperator",
    "RecombinationOperator",
    "OperatorConfig",
    "MutationType",
    "RecombinationType",
    "mutate",
    "recombine",
    "sample_transfer_count",
    # Configuration & logging
    "EngineConfig",
    "load_config",
    "configure_logging",
    "LogContext",
]
