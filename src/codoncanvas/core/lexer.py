"""Genome lexer: turns triplet text into instruction tokens and validates it."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Literal

from .codons import Opcode, START_CODON, STOP_CODONS, literal_value_of, opcode_of

Severity = Literal["error", "warning"]

COMMENT_CHAR = ";"


@dataclass(frozen=True)
class Token:
    codon: str
    opcode: Opcode | None
    source_index: int
    line: int
    value: int | None = None

    @property
    def is_literal(self) -> bool:
        return self.opcode is None and self.value is not None

    @property
    def is_unknown(self) -> bool:
        return self.opcode is None and self.value is None


@dataclass(frozen=True)
class ParseError:
    message: str
    severity: Severity
    position: int
    fix: str | None = None

    def as_dict(self) -> dict:
        return {"message": self.message, "severity": self.severity, "position": self.position, "fix": self.fix}


ParseWarning = ParseError


class GenomeParseError(ValueError):
    """Raised by :func:`parse_genome` when a genome has error-level problems."""

    def __init__(self, errors: List[ParseError]):
        self.errors = list(errors)
        detail = "; ".join(e.message for e in self.errors)
        super().__init__(f"Parse error: {detail}")


def _strip_comment(line: str) -> str:
    idx = line.find(COMMENT_CHAR)
    return line if idx < 0 else line[:idx]


def _iter_bases(text: str) -> Iterator[tuple[str, int]]:
    """Yield normalized bases with their 1-based source line."""
    for line_no, line in enumerate(text.split("\n"), start=1):
        for char in _strip_comment(line):
            if char.isspace():
                continue
            base = char.upper()
            yield ("T" if base == "U" else base), line_no


def clean_genome(text: str) -> str:
    """Comments and whitespace removed, uppercased, U normalized to T."""
    return "".join(base for base, _ in _iter_bases(text))


def split_codons(text: str) -> list[str]:
    """Cleaned genome chunked in threes; a trailing partial chunk is kept."""
    cleaned = clean_genome(text)
    return [cleaned[i : i + 3] for i in range(0, len(cleaned), 3)]


def format_as_codons(bases: str) -> str:
    return " ".join(bases[i : i + 3] for i in range(0, len(bases), 3))


def tokenize(text: str) -> list[Token]:
    bases = list(_iter_bases(text))
    tokens: list[Token] = []
    expect_literal = False
    for start in range(0, len(bases) - len(bases) % 3, 3):
        chunk = bases[start : start + 3]
        codon = "".join(base for base, _ in chunk)
        line = chunk[0][1]
        if expect_literal:
            expect_literal = False
            opcode = opcode_of(codon)
            value = literal_value_of(codon) if opcode is not None else None
            tokens.append(Token(codon=codon, opcode=None, source_index=start, line=line, value=value))
            continue
        opcode = opcode_of(codon)
        tokens.append(Token(codon=codon, opcode=opcode, source_index=start, line=line))
        expect_literal = opcode is Opcode.PUSH
    return tokens


def validate_structure(tokens: List[Token]) -> list[ParseError]:
    errors: list[ParseError] = []
    if not tokens:
        return errors

    first = next((t for t in tokens if not t.is_literal), None)
    if first is None or first.opcode is not Opcode.START:
        errors.append(
            ParseError(
                message=f"Program should begin with START codon ({START_CODON})",
                severity="error",
                position=0 if first is None else first.source_index,
                fix=f"Add {START_CODON} at the beginning",
            )
        )

    for token in tokens:
        if token.is_unknown:
            errors.append(
                ParseError(
                    message=f"Unknown codon '{token.codon}' at line {token.line}",
                    severity="error",
                    position=token.source_index,
                    fix="Use only A, C, G, T (or U) bases",
                )
            )

    stop_seen = False
    for token in tokens:
        if token.opcode is Opcode.STOP:
            stop_seen = True
        elif stop_seen and token.opcode is Opcode.START:
            errors.append(
                ParseError(
                    message=f"START codon after STOP at position {token.source_index}",
                    severity="warning",
                    position=token.source_index,
                    fix="Remove unreachable code after STOP",
                )
            )

    if not stop_seen:
        errors.append(
            ParseError(
                message=f"Program has no STOP codon ({', '.join(sorted(STOP_CODONS))})",
                severity="error",
                position=tokens[-1].source_index,
                fix="Add TAA at the end",
            )
        )
    return errors


def validate_frame(text: str) -> list[ParseError]:
    """Reading-frame warnings; these never block tokenizing or execution."""
    warnings: list[ParseError] = []
    for line_no, line in enumerate(text.split("\n"), start=1):
        base_count = 0
        prev_space = False
        for col, char in enumerate(_strip_comment(line)):
            if char.isspace():
                if base_count % 3 and not prev_space:
                    warnings.append(
                        ParseError(
                            message=f"Mid-triplet break detected at line {line_no}. {base_count % 3} base(s) before whitespace.",
                            severity="warning",
                            position=col,
                            fix="Remove whitespace or complete the codon",
                        )
                    )
                prev_space = True
            else:
                base_count += 1
                prev_space = False

    length = len(clean_genome(text))
    remainder = length % 3
    if remainder:
        warnings.append(
            ParseError(
                message=f"Genome length {length} is not a multiple of 3; {remainder} trailing base(s) are outside the reading frame",
                severity="warning",
                position=length - remainder,
                fix=f"Add {3 - remainder} base(s) or remove {remainder}",
            )
        )
    return warnings


def parse_genome(text: str) -> list[Token]:
    """Tokenize and validate, raising :class:`GenomeParseError` on any error."""
    tokens = tokenize(text)
    if not tokens:
        raise GenomeParseError([ParseError("Genome is empty", "error", 0)])
    errors = [e for e in validate_structure(tokens) if e.severity == "error"]
    if errors:
        raise GenomeParseError(errors)
    return tokens


class CodonLexer:
    """Object wrapper around the module-level lexer functions."""

    def tokenize(self, text: str) -> list[Token]:
        return tokenize(text)

    def validate_structure(self, tokens: List[Token]) -> list[ParseError]:
        return validate_structure(tokens)

    def validate_frame(self, text: str) -> list[ParseError]:
        return validate_frame(text)

    def parse(self, text: str) -> list[Token]:
        return parse_genome(text)
