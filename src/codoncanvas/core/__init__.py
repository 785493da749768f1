"""Codon table, lexer and virtual machine."""
from .codons import CODON_MAP, Opcode, literal_value_of, opcode_of
from .lexer import CodonLexer, GenomeParseError, ParseError, Token, parse_genome, tokenize, validate_frame, validate_structure
from .vm import CodonVM, VMState

__all__ = [
    "CODON_MAP",
    "Opcode",
    "literal_value_of",
    "opcode_of",
    "CodonLexer",
    "GenomeParseError",
    "ParseError",
    "Token",
    "parse_genome",
    "tokenize",
    "validate_frame",
    "validate_structure",
    "CodonVM",
    "VMState",
]
