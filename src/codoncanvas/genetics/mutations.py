"""Mutation operators on genome text.

Codon-level operators (silent, missense, nonsense) take a codon index;
base-level operators (point, insertion, deletion, frameshift) take an index
into the cleaned base sequence. Every operator returns a
:class:`MutationResult` whose ``mutated`` text is re-chunked into
space-separated codons, and raises :class:`MutationError` when the request
cannot be satisfied.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Sequence

import numpy as np

from codoncanvas.core.codons import (
    BASES,
    CANONICAL_STOP,
    START_CODON,
    STOP_CODONS,
    literal_positions,
    missense_codons,
    opcode_of,
    synonymous_codons,
)
from codoncanvas.core.lexer import clean_genome, format_as_codons, split_codons
from codoncanvas.core.rng import ensure_rng

logger = logging.getLogger(__name__)


class MutationType(str, Enum):
    SILENT = "silent"
    MISSENSE = "missense"
    NONSENSE = "nonsense"
    POINT = "point"
    INSERTION = "insertion"
    DELETION = "deletion"
    FRAMESHIFT = "frameshift"


class MutationError(ValueError):
    """The requested mutation cannot be applied to this genome."""


@dataclass
class MutationResult:
    original: str
    mutated: str
    type: MutationType
    position: int
    description: str

    def as_dict(self) -> dict:
        return {
            "original": self.original,
            "mutated": self.mutated,
            "type": self.type.value,
            "position": self.position,
            "description": self.description,
        }


@dataclass(frozen=True)
class CodonDifference:
    position: int
    original: str
    mutated: str


@dataclass(frozen=True)
class GenomeComparison:
    original_codons: List[str]
    mutated_codons: List[str]
    differences: List[CodonDifference]

    @property
    def max_length(self) -> int:
        return max(len(self.original_codons), len(self.mutated_codons))


def _choice(rng: np.random.Generator, items: Sequence):
    return items[int(rng.integers(len(items)))]


def _opcode_name(codon: str) -> str:
    op = opcode_of(codon)
    return op.value if op is not None else "UNKNOWN"


def _pick_codon_position(
    codons: list[str], literals: set[int], position: int | None, candidates: list[int], empty_message: str, rng
) -> int:
    if position is None:
        if not candidates:
            raise MutationError(empty_message)
        return _choice(rng, candidates)
    if not 0 <= position < len(codons):
        raise MutationError(f"Position {position} out of range (genome has {len(codons)} codons)")
    if position in literals:
        raise MutationError(f"Position {position} is a PUSH operand, not an instruction")
    return position


def apply_silent_mutation(genome: str, position: int | None = None, *, rng: np.random.Generator | None = None) -> MutationResult:
    """Swap a codon for a synonym; the decoded opcode does not change."""
    rng = ensure_rng(rng)
    codons = split_codons(genome)
    literals = literal_positions(codons)
    candidates = [i for i, c in enumerate(codons) if i not in literals and synonymous_codons(c)]
    target = _pick_codon_position(codons, literals, position, candidates, "No synonymous mutations available in this genome", rng)

    original_codon = codons[target]
    synonyms = synonymous_codons(original_codon)
    if not synonyms:
        raise MutationError(f"No synonymous codons for {original_codon} at position {target}")
    new_codon = _choice(rng, synonyms)
    codons[target] = new_codon
    logger.debug("silent mutation at codon %d: %s -> %s", target, original_codon, new_codon)
    return MutationResult(
        original=genome,
        mutated=" ".join(codons),
        type=MutationType.SILENT,
        position=target,
        description=f"Silent mutation: {original_codon} → {new_codon} (same opcode: {_opcode_name(original_codon)})",
    )


def apply_missense_mutation(genome: str, position: int | None = None, *, rng: np.random.Generator | None = None) -> MutationResult:
    """Swap a codon for one that decodes to a different, non-STOP opcode."""
    rng = ensure_rng(rng)
    codons = split_codons(genome)
    literals = literal_positions(codons)
    candidates = [i for i, c in enumerate(codons) if i not in literals and missense_codons(c)]
    target = _pick_codon_position(codons, literals, position, candidates, "No missense mutations available in this genome", rng)

    original_codon = codons[target]
    options = missense_codons(original_codon)
    if not options:
        raise MutationError(f"No missense codons for {original_codon} at position {target}")
    new_codon = _choice(rng, options)
    codons[target] = new_codon
    logger.debug("missense mutation at codon %d: %s -> %s", target, original_codon, new_codon)
    return MutationResult(
        original=genome,
        mutated=" ".join(codons),
        type=MutationType.MISSENSE,
        position=target,
        description=(
            f"Missense mutation: {original_codon} → {new_codon} "
            f"({_opcode_name(original_codon)} → {_opcode_name(new_codon)})"
        ),
    )


def apply_nonsense_mutation(genome: str, position: int | None = None, *, rng: np.random.Generator | None = None) -> MutationResult:
    """Replace a codon with the canonical STOP codon, truncating execution there."""
    rng = ensure_rng(rng)
    codons = split_codons(genome)
    literals = literal_positions(codons)
    candidates = [
        i
        for i, c in enumerate(codons)
        if i > 0 and i not in literals and c != START_CODON and c not in STOP_CODONS and len(c) == 3
    ]
    target = _pick_codon_position(codons, literals, position, candidates, "No nonsense mutation positions available", rng)

    original_codon = codons[target]
    codons[target] = CANONICAL_STOP
    logger.debug("nonsense mutation at codon %d: %s -> %s", target, original_codon, CANONICAL_STOP)
    return MutationResult(
        original=genome,
        mutated=" ".join(codons),
        type=MutationType.NONSENSE,
        position=target,
        description=f"Nonsense mutation: {original_codon} → {CANONICAL_STOP} (early termination)",
    )


def apply_point_mutation(genome: str, position: int | None = None, *, rng: np.random.Generator | None = None) -> MutationResult:
    """Substitute one base; the effect (silent/missense/nonsense) depends on where it lands."""
    rng = ensure_rng(rng)
    cleaned = clean_genome(genome)
    if not cleaned:
        raise MutationError("Cannot apply a point mutation to an empty genome")
    target = int(rng.integers(len(cleaned))) if position is None else position
    if not 0 <= target < len(cleaned):
        raise MutationError(f"Position {target} out of range")

    original_base = cleaned[target]
    new_base = _choice(rng, [b for b in BASES if b != original_base])
    mutated = cleaned[:target] + new_base + cleaned[target + 1 :]
    return MutationResult(
        original=genome,
        mutated=format_as_codons(mutated),
        type=MutationType.POINT,
        position=target,
        description=f"Point mutation at base {target}: {original_base} → {new_base}",
    )


def _plural(length: int) -> str:
    return "base" if length == 1 else "bases"


def apply_insertion(
    genome: str, position: int | None = None, length: int = 1, *, rng: np.random.Generator | None = None
) -> MutationResult:
    rng = ensure_rng(rng)
    if length < 1:
        raise MutationError(f"Insertion length must be positive, got {length}")
    cleaned = clean_genome(genome)
    target = int(rng.integers(len(cleaned) + 1)) if position is None else position
    if not 0 <= target <= len(cleaned):
        raise MutationError(f"Position {target} out of range")

    inserted = "".join(_choice(rng, BASES) for _ in range(length))
    mutated = cleaned[:target] + inserted + cleaned[target:]
    return MutationResult(
        original=genome,
        mutated=format_as_codons(mutated),
        type=MutationType.INSERTION,
        position=target,
        description=f"Insertion at base {target}: +{inserted} ({length} {_plural(length)})",
    )


def apply_deletion(
    genome: str, position: int | None = None, length: int = 1, *, rng: np.random.Generator | None = None
) -> MutationResult:
    rng = ensure_rng(rng)
    if length < 1:
        raise MutationError(f"Deletion length must be positive, got {length}")
    cleaned = clean_genome(genome)
    if position is None:
        if length > len(cleaned):
            raise MutationError(f"Deletion of {length} {_plural(length)} exceeds genome length {len(cleaned)}")
        target = int(rng.integers(len(cleaned) - length + 1))
    else:
        target = position
    if target < 0 or target + length > len(cleaned):
        raise MutationError(f"Deletion at position {target} with length {length} exceeds genome length")

    deleted = cleaned[target : target + length]
    mutated = cleaned[:target] + cleaned[target + length :]
    return MutationResult(
        original=genome,
        mutated=format_as_codons(mutated),
        type=MutationType.DELETION,
        position=target,
        description=f"Deletion at base {target}: -{deleted} ({length} {_plural(length)})",
    )


def apply_frameshift_mutation(genome: str, position: int | None = None, *, rng: np.random.Generator | None = None) -> MutationResult:
    """Insert or delete 1 or 2 bases, never 3, so the reading frame always shifts."""
    rng = ensure_rng(rng)
    length = int(rng.integers(1, 3))
    insertion = bool(rng.random() < 0.5)
    available = len(clean_genome(genome))
    if not insertion and (length > available or (position is not None and position + length > available)):
        insertion = True

    if insertion:
        result = apply_insertion(genome, position, length, rng=rng)
        label = "insertion"
    else:
        result = apply_deletion(genome, position, length, rng=rng)
        label = "deletion"
    result.type = MutationType.FRAMESHIFT
    result.description = f"Frameshift ({label}): {result.description}"
    return result


MUTATION_FUNCTIONS: Dict[MutationType, Callable[..., MutationResult]] = {
    MutationType.SILENT: apply_silent_mutation,
    MutationType.MISSENSE: apply_missense_mutation,
    MutationType.NONSENSE: apply_nonsense_mutation,
    MutationType.POINT: apply_point_mutation,
    MutationType.INSERTION: apply_insertion,
    MutationType.DELETION: apply_deletion,
    MutationType.FRAMESHIFT: apply_frameshift_mutation,
}

MUTATION_TYPES: tuple[str, ...] = tuple(t.value for t in MutationType)


def get_mutation_by_type(
    mutation_type: MutationType | str, genome: str, *, rng: np.random.Generator | None = None
) -> MutationResult:
    try:
        key = MutationType(mutation_type)
    except ValueError as exc:
        raise MutationError(f"Unknown mutation type: {mutation_type}") from exc
    return MUTATION_FUNCTIONS[key](genome, rng=rng)


def compare_genomes(original: str, mutated: str) -> GenomeComparison:
    """Align both genomes codon by codon and list the positions that differ."""
    original_codons = split_codons(original)
    mutated_codons = split_codons(mutated)
    longest = max(len(original_codons), len(mutated_codons))
    differences = []
    for idx in range(longest):
        a = original_codons[idx] if idx < len(original_codons) else ""
        b = mutated_codons[idx] if idx < len(mutated_codons) else ""
        if a != b:
            differences.append(CodonDifference(position=idx, original=a, mutated=b))
    return GenomeComparison(original_codons=original_codons, mutated_codons=mutated_codons, differences=differences)
