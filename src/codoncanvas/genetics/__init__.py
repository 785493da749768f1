"""Mutation operators on genomes."""
from .mutations import (
    MUTATION_TYPES,
    MutationError,
    MutationResult,
    MutationType,
    apply_deletion,
    apply_frameshift_mutation,
    apply_insertion,
    apply_missense_mutation,
    apply_nonsense_mutation,
    apply_point_mutation,
    apply_silent_mutation,
    compare_genomes,
    get_mutation_by_type,
)

__all__ = [
    "MUTATION_TYPES",
    "MutationError",
    "MutationResult",
    "MutationType",
    "apply_deletion",
    "apply_frameshift_mutation",
    "apply_insertion",
    "apply_missense_mutation",
    "apply_nonsense_mutation",
    "apply_point_mutation",
    "apply_silent_mutation",
    "compare_genomes",
    "get_mutation_by_type",
]
