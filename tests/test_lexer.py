import pytest

from codoncanvas.core.codons import Opcode
from codoncanvas.core.lexer import (
    CodonLexer,
    GenomeParseError,
    clean_genome,
    format_as_codons,
    parse_genome,
    split_codons,
    tokenize,
    validate_frame,
    validate_structure,
)


def test_tokenize_strips_comments_and_whitespace():
    tokens = tokenize("ATG ; start here\nGAA CCC   GGA\n\tTAA ; done")
    assert [t.codon for t in tokens] == ["ATG", "GAA", "CCC", "GGA", "TAA"]
    assert [t.source_index for t in tokens] == [0, 3, 6, 9, 12]
    assert [t.line for t in tokens] == [1, 2, 2, 2, 3]


def test_push_operand_is_a_literal():
    tokens = tokenize("ATG GAA CCC GGA TAA")
    literal = tokens[2]
    assert literal.opcode is None
    assert literal.value == 21
    assert literal.is_literal
    assert tokens[1].opcode is Opcode.PUSH
    assert tokens[3].opcode is Opcode.CIRCLE


def test_operand_that_looks_like_stop_is_still_a_literal():
    tokens = tokenize("ATG GAA TAA GGA TAA")
    assert tokens[2].opcode is None
    assert tokens[2].value == 48
    assert tokens[-1].opcode is Opcode.STOP


def test_tokenize_normalizes_case_and_uracil():
    tokens = tokenize("aug gga uaa")
    assert [t.codon for t in tokens] == ["ATG", "GGA", "TAA"]
    assert tokens[0].opcode is Opcode.START


def test_trailing_partial_codon_is_dropped():
    assert [t.codon for t in tokenize("ATGGG")] == ["ATG"]
    assert tokenize("") == []
    assert tokenize("; only a comment\n   ") == []


def test_unknown_codon_gets_a_best_effort_token():
    tokens = tokenize("ATG XYZ TAA")
    assert tokens[1].is_unknown
    assert tokens[1].opcode is None


def test_clean_split_and_format():
    assert clean_genome("atg ; x\n gg u") == "ATGGGT"
    assert split_codons("ATG GG") == ["ATG", "GG"]
    assert format_as_codons("ATGGGATA") == "ATG GGA TA"


def test_validate_structure_accepts_well_formed_genome():
    assert validate_structure(tokenize("ATG GAA CCC GGA TAA")) == []
    assert validate_structure([]) == []


def test_validate_structure_missing_start():
    errors = validate_structure(tokenize("GGA TAA"))
    assert len(errors) == 1
    assert errors[0].severity == "error"
    assert "START" in errors[0].message
    assert errors[0].fix


def test_validate_structure_missing_stop():
    errors = validate_structure(tokenize("ATG GGA"))
    assert [e.severity for e in errors] == ["error"]
    assert "no STOP codon" in errors[0].message


def test_validate_structure_unknown_codon():
    errors = validate_structure(tokenize("ATG XYZ TAA"))
    assert len(errors) == 1
    assert "XYZ" in errors[0].message
    assert errors[0].position == 3


def test_validate_structure_start_after_stop_is_a_warning():
    problems = validate_structure(tokenize("ATG TAA ATG GGA TAA"))
    assert [p.severity for p in problems] == ["warning"]


def test_validate_frame_length_warning():
    warnings = validate_frame("ATG GG")
    assert len(warnings) == 1
    assert warnings[0].severity == "warning"
    assert "not a multiple of 3" in warnings[0].message
    assert warnings[0].position == 3


def test_validate_frame_mid_triplet_break():
    warnings = validate_frame("AT GTAA")
    assert len(warnings) == 1
    assert "Mid-triplet" in warnings[0].message
    assert warnings[0].position == 2


def test_validate_frame_clean_genome_has_no_warnings():
    assert validate_frame("ATG  GAA CCC\nGGA TAA ; A B") == []


def test_parse_genome_raises_on_errors():
    with pytest.raises(GenomeParseError) as excinfo:
        parse_genome("GGA TAA")
    assert str(excinfo.value).startswith("Parse error: ")
    assert excinfo.value.errors
    assert isinstance(excinfo.value, ValueError)


def test_parse_genome_rejects_empty_input():
    with pytest.raises(GenomeParseError):
        parse_genome("   ")


def test_parse_genome_ignores_warnings():
    tokens = parse_genome("ATG TAA ATG TAA")
    assert len(tokens) == 4


def test_lexer_object_matches_functions():
    lexer = CodonLexer()
    source = "ATG GAA CCC GGA TAA"
    assert lexer.tokenize(source) == tokenize(source)
    assert lexer.parse(source) == parse_genome(source)
    assert lexer.validate_frame(source) == []
    assert lexer.validate_structure(lexer.tokenize(source)) == []
