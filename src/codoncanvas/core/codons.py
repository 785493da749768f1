"""Codon table: the static codon -> opcode mapping and literal decoding."""
from __future__ import annotations

from enum import Enum
from itertools import product
from typing import Iterable


class Opcode(Enum):
    START = "START"
    STOP = "STOP"
    NOP = "NOP"
    PUSH = "PUSH"
    DUP = "DUP"
    POP = "POP"
    SWAP = "SWAP"
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    EQ = "EQ"
    LT = "LT"
    LOOP = "LOOP"
    SAVE_STATE = "SAVE_STATE"
    RESTORE_STATE = "RESTORE_STATE"
    TRANSLATE = "TRANSLATE"
    ROTATE = "ROTATE"
    SCALE = "SCALE"
    COLOR = "COLOR"
    CIRCLE = "CIRCLE"
    RECT = "RECT"
    LINE = "LINE"
    TRIANGLE = "TRIANGLE"
    ELLIPSE = "ELLIPSE"


BASES: tuple[str, ...] = ("A", "C", "G", "T")
BASE_DIGITS: dict[str, int] = {base: idx for idx, base in enumerate(BASES)}
ALL_CODONS: tuple[str, ...] = tuple("".join(p) for p in product(BASES, repeat=3))

START_CODON = "ATG"
STOP_CODONS: frozenset[str] = frozenset({"TAA", "TAG", "TGA"})
CANONICAL_STOP = "TAA"

# Two-letter prefixes whose third (wobble) base does not change the opcode.
CODON_FAMILIES: dict[str, Opcode] = {
    "GG": Opcode.CIRCLE,
    "CC": Opcode.RECT,
    "AA": Opcode.LINE,
    "GC": Opcode.TRIANGLE,
    "GT": Opcode.ELLIPSE,
    "AC": Opcode.TRANSLATE,
    "AG": Opcode.ROTATE,
    "CG": Opcode.SCALE,
    "TT": Opcode.COLOR,
    "GA": Opcode.PUSH,
}

SPECIAL_CODONS: dict[str, Opcode] = {
    "ATG": Opcode.START,
    "TAA": Opcode.STOP,
    "TAG": Opcode.STOP,
    "TGA": Opcode.STOP,
    "ATA": Opcode.DUP,
    "ATC": Opcode.DUP,
    "ATT": Opcode.DUP,
    "CAC": Opcode.NOP,
    "TAC": Opcode.POP,
    "TAT": Opcode.POP,
    "TGC": Opcode.POP,
    "TGG": Opcode.SWAP,
    "TGT": Opcode.SWAP,
    "TCA": Opcode.SAVE_STATE,
    "TCC": Opcode.SAVE_STATE,
    "TCG": Opcode.RESTORE_STATE,
    "TCT": Opcode.RESTORE_STATE,
    "CTG": Opcode.ADD,
    "CAG": Opcode.SUB,
    "CTT": Opcode.MUL,
    "CAT": Opcode.DIV,
    "CTA": Opcode.EQ,
    "CTC": Opcode.LT,
    "CAA": Opcode.LOOP,
}


def _build_codon_map() -> dict[str, Opcode]:
    table: dict[str, Opcode] = {}
    for prefix, opcode in CODON_FAMILIES.items():
        for base in BASES:
            table[prefix + base] = opcode
    table.update(SPECIAL_CODONS)
    missing = [c for c in ALL_CODONS if c not in table]
    if missing:
        raise RuntimeError(f"Codon table is incomplete, missing: {', '.join(missing)}")
    return table


CODON_MAP: dict[str, Opcode] = _build_codon_map()


def _build_inverse(table: dict[str, Opcode]) -> dict[Opcode, tuple[str, ...]]:
    inverse: dict[Opcode, list[str]] = {op: [] for op in Opcode}
    for codon in ALL_CODONS:
        inverse[table[codon]].append(codon)
    return {op: tuple(codons) for op, codons in inverse.items()}


OPCODE_CODONS: dict[Opcode, tuple[str, ...]] = _build_inverse(CODON_MAP)


def normalize_codon(codon: str) -> str:
    return codon.upper().replace("U", "T")


def opcode_of(codon: str) -> Opcode | None:
    return CODON_MAP.get(normalize_codon(codon))


def literal_value_of(codon: str) -> int:
    """Decode the base-4 numeric value (0..63) of a codon used as a PUSH operand."""
    c = normalize_codon(codon)
    return BASE_DIGITS[c[0]] * 16 + BASE_DIGITS[c[1]] * 4 + BASE_DIGITS[c[2]]


def codons_for_opcode(opcode: Opcode) -> tuple[str, ...]:
    return OPCODE_CODONS[opcode]


def is_stop_codon(codon: str) -> bool:
    return normalize_codon(codon) in STOP_CODONS


def is_valid_codon(codon: str) -> bool:
    return normalize_codon(codon) in CODON_MAP


def synonymous_codons(codon: str) -> list[str]:
    """Codons with the same opcode but a different triplet."""
    c = normalize_codon(codon)
    opcode = CODON_MAP.get(c)
    if opcode is None:
        return []
    return [other for other in OPCODE_CODONS[opcode] if other != c]


def missense_codons(codon: str) -> list[str]:
    """Codons that decode to a different opcode which is not STOP."""
    c = normalize_codon(codon)
    opcode = CODON_MAP.get(c)
    if opcode is None:
        return []
    return [other for other in ALL_CODONS if CODON_MAP[other] not in (opcode, Opcode.STOP)]


def literal_positions(codons: Iterable[str]) -> set[int]:
    """Indices of codons that are consumed as PUSH operands rather than executed."""
    positions: set[int] = set()
    expect_literal = False
    for idx, codon in enumerate(codons):
        if expect_literal:
            positions.add(idx)
            expect_literal = False
            continue
        expect_literal = opcode_of(codon) is Opcode.PUSH
    return positions
