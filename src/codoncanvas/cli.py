"""Typer CLI for CodonCanvas."""
from __future__ import annotations
import json
import logging
import typer
import yaml
from pathlib import Path
from pydantic import ValidationError
from typing import List, Optional
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from codoncanvas.analysis import analyze_codon_usage, genome_similarity
from codoncanvas.analysis.similarity import DEFAULT_THRESHOLD
from codoncanvas.config import DEFAULTS_PATH, load_config
from codoncanvas.core.lexer import ParseError, clean_genome, tokenize, validate_frame, validate_structure
from codoncanvas.core.rng import make_rng
from codoncanvas.engine.runner import run_genome_file
from codoncanvas.genetics.mutations import (
    MUTATION_FUNCTIONS,
    MUTATION_TYPES,
    MutationType,
    apply_deletion,
    apply_insertion,
    compare_genomes,
    get_mutation_by_type,
)

app = typer.Typer(help="CodonCanvas genome CLI")
console = Console()


@app.callback()
def main(log_level: str = typer.Option("WARNING", help="Logging level")):
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error: {escape(message)}[/red]", highlight=False)
    return typer.Exit(code=1)


def _read(path: Path) -> str:
    try:
        return path.read_text()
    except OSError as exc:
        raise _fail(f"cannot read {path}: {exc}")


def _config(path: Path):
    try:
        return load_config(path)
    except (OSError, ValidationError, yaml.YAMLError) as exc:
        raise _fail(f"invalid config {path}: {exc}")


def _check(source: str) -> tuple[int, list[ParseError]]:
    tokens = tokenize(source)
    return len(tokens), validate_frame(source) + validate_structure(tokens)


def _has_errors(problems: list[ParseError]) -> bool:
    return any(p.severity == "error" for p in problems)


def _print_problem(problem: ParseError, indent: str = "  ") -> None:
    icon, color = ("✗", "red") if problem.severity == "error" else ("⚠", "yellow")
    console.print(f"{indent}[{color}]{icon} {problem.message} (position {problem.position})[/{color}]")
    if problem.fix:
        console.print(f"{indent}  [dim]Fix: {problem.fix}[/dim]")


@app.command()
def validate(
    file: Path = typer.Argument(..., help="Genome file"),
    as_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show codon and base counts"),
):
    source = _read(file)
    codons, problems = _check(source)
    bases = len(clean_genome(source))
    if as_json:
        payload = {
            "file": str(file),
            "valid": not problems,
            "errors": [p.as_dict() for p in problems],
            "stats": {"codons": codons, "bases": bases},
        }
        typer.echo(json.dumps(payload, indent=2))
    elif not problems:
        console.print(f"[green]✓ {file} is valid[/green]")
        if verbose:
            console.print(f"  [dim]Codons: {codons}[/dim]")
            console.print(f"  [dim]Bases: {bases}[/dim]")
    else:
        console.print(f"[red]✗ {file} has {len(problems)} problem(s):[/red]")
        for problem in problems:
            _print_problem(problem)
    if _has_errors(problems):
        raise typer.Exit(code=1)


def _expand(paths: List[Path]) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.glob("*.genome") if p.is_file()))
        else:
            files.append(path)
    return files


@app.command()
def lint(
    paths: List[Path] = typer.Argument(..., help="Genome files or directories of *.genome files"),
    as_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
):
    results = []
    for file in _expand(paths):
        try:
            _, problems = _check(file.read_text())
        except OSError as exc:
            problems = [ParseError(f"Failed to read: {exc}", "error", 0)]
        results.append({"file": str(file), "valid": not problems, "errors": problems})
    valid = sum(1 for r in results if r["valid"])
    invalid = len(results) - valid

    if as_json:
        payload = {
            "total": len(results),
            "valid": valid,
            "invalid": invalid,
            "results": [{**r, "errors": [p.as_dict() for p in r["errors"]]} for r in results],
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        console.print("[bold]Validation Summary:[/bold]")
        console.print(f"  [green]✓ Valid: {valid}[/green]")
        console.print(f"  [red]✗ Invalid: {invalid}[/red]")
        console.print(f"  [dim]Total: {len(results)}[/dim]")
        for r in results:
            if r["valid"]:
                console.print(f"[green]✓ {r['file']}[/green]")
                continue
            console.print(f"[red]✗ {r['file']}:[/red]")
            for problem in r["errors"]:
                _print_problem(problem, indent="    ")
    if invalid:
        raise typer.Exit(code=1)


@app.command()
def run(
    file: Path = typer.Argument(..., help="Genome file"),
    config: Path = typer.Option(DEFAULTS_PATH, help="YAML config path"),
    max_instructions: Optional[int] = typer.Option(None, help="Override instruction budget"),
    run_dir: Optional[Path] = typer.Option(None, help="Override output directory"),
    render: bool = typer.Option(True, help="Render canvas.png"),
):
    cfg = _config(config)
    if max_instructions is not None:
        if max_instructions < 1:
            raise _fail("--max-instructions must be positive")
        cfg.vm.max_instructions = max_instructions
    if run_dir is not None:
        cfg.outputs.run_dir = run_dir
    cfg.outputs.render = render
    if not file.is_file():
        raise _fail(f"cannot read {file}: no such file")
    out = run_genome_file(file, cfg)
    summary = json.loads((out / "summary.json").read_text())
    console.print(f"Executed {summary['steps']} instruction(s); outputs in {out}")
    if summary["truncated"]:
        console.print(f"[yellow]⚠ Instruction limit {cfg.vm.max_instructions} reached; output is partial[/yellow]")
    if summary["errors"]:
        raise typer.Exit(code=1)


@app.command()
def mutate(
    file: Path = typer.Argument(..., help="Genome file"),
    mutation_type: str = typer.Argument(..., help="|".join(MUTATION_TYPES)),
    position: Optional[int] = typer.Option(None, help="Codon index (silent/missense/nonsense) or base index"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    config: Path = typer.Option(DEFAULTS_PATH, help="YAML config path"),
    output: Optional[Path] = typer.Option(None, help="Write the mutated genome here"),
):
    cfg = _config(config)
    source = _read(file)
    rng = make_rng(seed if seed is not None else cfg.mutation.seed)
    try:
        kind = MutationType(mutation_type)
        if kind is MutationType.INSERTION:
            result = apply_insertion(source, position, cfg.mutation.indel_length, rng=rng)
        elif kind is MutationType.DELETION:
            result = apply_deletion(source, position, cfg.mutation.indel_length, rng=rng)
        elif position is not None:
            result = MUTATION_FUNCTIONS[kind](source, position, rng=rng)
        else:
            result = get_mutation_by_type(kind, source, rng=rng)
    except ValueError as exc:
        raise _fail(str(exc)) from exc
    console.print(result.description)
    if output is not None:
        output.write_text(result.mutated + "\n")
        console.print(f"Wrote {output}")
    else:
        console.print(result.mutated, highlight=False, soft_wrap=True)


@app.command()
def compare(
    original: Path = typer.Argument(..., help="Original genome"),
    mutated: Path = typer.Argument(..., help="Mutated genome"),
):
    comparison = compare_genomes(_read(original), _read(mutated))
    if not comparison.differences:
        console.print("[green]Genomes are identical at the codon level[/green]")
        return
    table = Table(title=f"{len(comparison.differences)} codon difference(s)")
    table.add_column("position", justify="right")
    table.add_column("original")
    table.add_column("mutated")
    for diff in comparison.differences:
        table.add_row(str(diff.position), diff.original or "-", diff.mutated or "-")
    console.print(table)


@app.command()
def similarity(
    file1: Path = typer.Argument(..., help="First genome"),
    file2: Path = typer.Argument(..., help="Second genome"),
    threshold: float = typer.Option(DEFAULT_THRESHOLD, help="Similarity threshold (0-1)"),
):
    try:
        report = genome_similarity(_read(file1), _read(file2), threshold)
    except ValueError as exc:
        raise _fail(str(exc)) from exc
    console.print("[bold]Similarity Analysis:[/bold]")
    console.print(f"  File 1: {file1} ({report.length_a} bases)")
    console.print(f"  File 2: {file2} ({report.length_b} bases)")
    console.print(f"  Edit similarity: {report.edit_similarity * 100:.1f}%")
    console.print(f"  Longest common substring: {len(report.common_substring)} bases ({report.lcs_ratio * 100:.1f}% of shorter file)")
    if report.is_similar:
        console.print("[yellow]⚠ Files are SIMILAR[/yellow]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Files are sufficiently different[/green]")


@app.command()
def stats(file: Path = typer.Argument(..., help="Genome file")):
    source = _read(file)
    analysis = analyze_codon_usage(tokenize(source))
    lines = [line.strip() for line in source.splitlines() if line.strip()]
    comment_lines = sum(1 for line in lines if line.startswith(";"))
    code_lines = len(lines) - comment_lines

    console.print(f"[bold]Genome Statistics: {file}[/bold]")
    console.print(f"  Total bases: {len(clean_genome(source))}")
    console.print(f"  Total codons: {analysis.total_codons}")
    console.print(f"  Lines of code: {code_lines}")
    console.print(f"  Comment lines: {comment_lines}")
    console.print(f"  GC content: {analysis.gc_content:.1f}%")
    console.print(f"  AT content: {analysis.at_content:.1f}%")

    table = Table(title="Opcode families")
    table.add_column("family")
    table.add_column("share", justify="right")
    for family, share in sorted(analysis.opcode_families.items(), key=lambda kv: -kv[1]):
        if share:
            table.add_row(family, f"{share:.1f}%")
    console.print(table)
    if analysis.top_codons:
        top = ", ".join(f"{t['codon']} x{t['count']}" for t in analysis.top_codons)
        console.print(f"  Top codons: {top}")
    if code_lines:
        console.print(f"  Avg codons per line: {analysis.total_codons / code_lines:.1f}")


if __name__ == "__main__":
    app()
