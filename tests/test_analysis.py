import pytest

pytest.importorskip("pandas")

from codoncanvas.analysis import (
    analyze_codon_usage,
    compare_analyses,
    genome_similarity,
    levenshtein_distance,
    longest_common_substring,
)
from codoncanvas.core.lexer import tokenize


def test_codon_usage_counts(hello_circle):
    analysis = analyze_codon_usage(tokenize(hello_circle))
    assert analysis.total_codons == 5
    assert analysis.codon_frequency == {"ATG": 1, "GAA": 1, "CCC": 1, "GGA": 1, "TAA": 1}
    # G=4, C=3 out of 15 bases
    assert analysis.gc_content == pytest.approx(7 / 15 * 100)
    assert analysis.gc_content + analysis.at_content == pytest.approx(100)
    assert analysis.opcode_distribution["CIRCLE"] == 1
    assert analysis.opcode_families["control"] == pytest.approx(40)
    assert analysis.codon_family_usage["GA"] == 1


def test_codon_usage_top_and_signature():
    analysis = analyze_codon_usage(tokenize("ATG GGA GGA GGC TAA"))
    assert analysis.top_codons[0] == {"codon": "GGA", "count": 2, "percentage": 40.0}
    assert analysis.top_opcodes[0]["opcode"] == "CIRCLE"
    assert analysis.top_opcodes[0]["count"] == 3
    assert analysis.signature["drawing_density"] == pytest.approx(60)
    assert analysis.signature["complexity"] == pytest.approx(3 / 5)
    assert analysis.as_dict()["total_codons"] == 5


def test_codon_usage_empty():
    analysis = analyze_codon_usage([])
    assert analysis.total_codons == 0
    assert analysis.gc_content == 0
    assert analysis.top_codons == []


def test_compare_analyses_identical_is_100(hello_circle):
    analysis = analyze_codon_usage(tokenize(hello_circle))
    assert compare_analyses(analysis, analysis) == pytest.approx(100)


@pytest.mark.parametrize(
    "a, b, expected",
    [("kitten", "sitting", 3), ("", "abc", 3), ("abc", "", 3), ("same", "same", 0), ("flaw", "lawn", 2)],
)
def test_levenshtein_distance(a, b, expected):
    assert levenshtein_distance(a, b) == expected


def test_longest_common_substring():
    assert longest_common_substring("ABCDEF", "ZCDEY") == "CDE"
    assert longest_common_substring("ABC", "XYZ") == ""
    assert longest_common_substring("", "ABC") == ""


def test_genome_similarity(hello_circle):
    report = genome_similarity(hello_circle, hello_circle.lower())
    assert report.distance == 0
    assert report.edit_similarity == 1.0
    assert report.is_similar

    different = genome_similarity("ATG GGA TAA", "CCC CCC CCC")
    assert different.edit_similarity < 0.5
    assert not different.is_similar
    assert different.as_dict()["is_similar"] is False


def test_genome_similarity_threshold_bounds():
    with pytest.raises(ValueError):
        genome_similarity("ATG", "ATG", threshold=1.5)
