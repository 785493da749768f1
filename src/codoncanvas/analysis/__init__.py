"""Genome analysis helpers."""
from .codon_usage import CodonAnalysis, analyze_codon_usage, compare_analyses
from .similarity import SimilarityReport, genome_similarity, levenshtein_distance, longest_common_substring

__all__ = [
    "CodonAnalysis",
    "analyze_codon_usage",
    "compare_analyses",
    "SimilarityReport",
    "genome_similarity",
    "levenshtein_distance",
    "longest_common_substring",
]
