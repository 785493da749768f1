"""Edit distance and common-substring similarity between genome texts."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from codoncanvas.core.lexer import clean_genome

DEFAULT_THRESHOLD = 0.8


def levenshtein_distance(a: str, b: str) -> int:
    # Two-row DP; each row is updated with numpy except the insertion chain.
    prev = np.arange(len(b) + 1, dtype=np.int64)
    codes_b = np.frombuffer(b.encode("utf-32-le"), dtype=np.uint32) if b else np.empty(0, dtype=np.uint32)
    for i, ch in enumerate(a, start=1):
        cost = (codes_b != ord(ch)).astype(np.int64)
        cur = np.empty_like(prev)
        cur[0] = i
        cur[1:] = np.minimum(prev[1:] + 1, prev[:-1] + cost)
        for j in range(1, len(cur)):
            if cur[j - 1] + 1 < cur[j]:
                cur[j] = cur[j - 1] + 1
        prev = cur
    return int(prev[-1])


def longest_common_substring(a: str, b: str) -> str:
    """Longest contiguous run shared by both strings; earliest in ``a`` on ties."""
    if not a or not b:
        return ""
    table = np.zeros((len(a) + 1, len(b) + 1), dtype=np.int64)
    best, end = 0, 0
    for i, ch in enumerate(a, start=1):
        for j, other in enumerate(b, start=1):
            if ch == other:
                table[i, j] = table[i - 1, j - 1] + 1
                if table[i, j] > best:
                    best, end = int(table[i, j]), i
    return a[end - best : end]


@dataclass(frozen=True)
class SimilarityReport:
    length_a: int
    length_b: int
    distance: int
    edit_similarity: float
    common_substring: str
    lcs_ratio: float
    threshold: float

    @property
    def is_similar(self) -> bool:
        return self.edit_similarity >= self.threshold or self.lcs_ratio >= self.threshold

    def as_dict(self) -> dict:
        return {
            "length_a": self.length_a,
            "length_b": self.length_b,
            "distance": self.distance,
            "edit_similarity": self.edit_similarity,
            "common_substring_length": len(self.common_substring),
            "lcs_ratio": self.lcs_ratio,
            "threshold": self.threshold,
            "is_similar": self.is_similar,
        }


def genome_similarity(a: str, b: str, threshold: float = DEFAULT_THRESHOLD) -> SimilarityReport:
    """Compare two genome texts on their cleaned base sequences."""
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")
    bases_a, bases_b = clean_genome(a), clean_genome(b)
    distance = levenshtein_distance(bases_a, bases_b)
    longest = max(len(bases_a), len(bases_b))
    common = longest_common_substring(bases_a, bases_b)
    ratios = [len(common) / len(s) for s in (bases_a, bases_b) if s]
    return SimilarityReport(
        length_a=len(bases_a),
        length_b=len(bases_b),
        distance=distance,
        edit_similarity=1 - distance / longest if longest else 1.0,
        common_substring=common,
        lcs_ratio=max(ratios, default=0.0),
        threshold=threshold,
    )
