"""Codon usage statistics: frequencies, GC content, opcode family shares."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import pandas as pd

from codoncanvas.core.codons import Opcode, normalize_codon, opcode_of
from codoncanvas.core.lexer import Token

OPCODE_FAMILIES: Dict[str, tuple[Opcode, ...]] = {
    "control": (Opcode.START, Opcode.STOP),
    "drawing": (Opcode.CIRCLE, Opcode.RECT, Opcode.LINE, Opcode.TRIANGLE, Opcode.ELLIPSE),
    "transform": (Opcode.TRANSLATE, Opcode.ROTATE, Opcode.SCALE, Opcode.COLOR),
    "stack": (Opcode.PUSH, Opcode.DUP, Opcode.POP, Opcode.SWAP),
    "utility": (Opcode.NOP, Opcode.SAVE_STATE, Opcode.RESTORE_STATE),
    "arithmetic": (Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV),
    "comparison": (Opcode.EQ, Opcode.LT),
    "iteration": (Opcode.LOOP,),
}

_FAMILY_OF = {op: family for family, ops in OPCODE_FAMILIES.items() for op in ops}

TOP_N = 5


@dataclass
class CodonAnalysis:
    total_codons: int
    codon_frequency: Dict[str, int]
    gc_content: float
    at_content: float
    opcode_distribution: Dict[str, int]
    opcode_families: Dict[str, float]
    top_codons: List[dict] = field(default_factory=list)
    top_opcodes: List[dict] = field(default_factory=list)
    codon_family_usage: Dict[str, int] = field(default_factory=dict)
    signature: Dict[str, float] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            "total_codons": self.total_codons,
            "codon_frequency": dict(self.codon_frequency),
            "gc_content": self.gc_content,
            "at_content": self.at_content,
            "opcode_distribution": dict(self.opcode_distribution),
            "opcode_families": dict(self.opcode_families),
            "top_codons": list(self.top_codons),
            "top_opcodes": list(self.top_opcodes),
            "codon_family_usage": dict(self.codon_family_usage),
            "signature": dict(self.signature),
        }


def _top(counts: pd.Series, label: str, total: int) -> list[dict]:
    # Stable sort keeps first-seen order among ties.
    ranked = counts.sort_values(ascending=False, kind="stable").head(TOP_N)
    return [{label: key, "count": int(n), "percentage": n / total * 100} for key, n in ranked.items()]


def analyze_codon_usage(tokens: Sequence[Token]) -> CodonAnalysis:
    """Composition statistics over every codon in the token stream, literals included.

    Opcode counts use the static codon table, so a PUSH operand contributes
    to the opcode its triplet would decode to.
    """
    codons = pd.Series([normalize_codon(t.codon) for t in tokens], dtype="object")
    total = len(codons)
    if total == 0:
        return CodonAnalysis(
            total_codons=0,
            codon_frequency={},
            gc_content=0.0,
            at_content=0.0,
            opcode_distribution={},
            opcode_families={family: 0.0 for family in OPCODE_FAMILIES},
            signature={"drawing_density": 0.0, "transform_density": 0.0, "complexity": 0.0, "redundancy": 0.0},
        )

    codon_counts = codons.value_counts(sort=False)
    bases = pd.Series(list("".join(codons)))
    base_counts = bases.value_counts()
    gc = int(base_counts.get("G", 0) + base_counts.get("C", 0))
    at = int(base_counts.get("A", 0) + base_counts.get("T", 0))
    n_bases = (gc + at) or 1

    opcodes = codons.map(lambda c: opcode_of(c).value if opcode_of(c) is not None else None).dropna()
    opcode_counts = opcodes.value_counts(sort=False)
    families = opcodes.map(lambda name: _FAMILY_OF[Opcode(name)]).value_counts()
    family_share = {family: float(families.get(family, 0)) / total * 100 for family in OPCODE_FAMILIES}
    unique_opcodes = len(opcode_counts)

    return CodonAnalysis(
        total_codons=total,
        codon_frequency={k: int(v) for k, v in codon_counts.items()},
        gc_content=gc / n_bases * 100,
        at_content=at / n_bases * 100,
        opcode_distribution={k: int(v) for k, v in opcode_counts.items()},
        opcode_families=family_share,
        top_codons=_top(codon_counts, "codon", total),
        top_opcodes=_top(opcode_counts, "opcode", total),
        codon_family_usage={k: int(v) for k, v in codons.str[:2].value_counts(sort=False).items()},
        signature={
            "drawing_density": family_share["drawing"],
            "transform_density": family_share["transform"],
            "complexity": unique_opcodes / total,
            "redundancy": total / (unique_opcodes or 1),
        },
    )


def compare_analyses(a: CodonAnalysis, b: CodonAnalysis) -> float:
    """Weighted 0-100 similarity of two analyses; 100 means identical profiles."""
    fa, fb = a.opcode_families, b.opcode_families
    family = (
        (100 - abs(fa["drawing"] - fb["drawing"])) * 0.3
        + (100 - abs(fa["transform"] - fb["transform"])) * 0.2
        + (100 - abs(fa["stack"] - fb["stack"])) * 0.2
        + (100 - abs(fa["control"] - fb["control"])) * 0.15
        + (100 - abs(fa["utility"] - fb["utility"])) * 0.15
    )
    gc = 100 - abs(a.gc_content - b.gc_content)
    sa, sb = a.signature, b.signature
    signature = (
        (100 - abs(sa["drawing_density"] - sb["drawing_density"])) * 0.4
        + (100 - abs(sa["transform_density"] - sb["transform_density"])) * 0.3
        + (100 - abs(sa["complexity"] - sb["complexity"]) * 100) * 0.3
    )
    return family * 0.5 + gc * 0.2 + signature * 0.3
