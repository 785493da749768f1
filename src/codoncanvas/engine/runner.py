"""Genome execution runner: lex, validate, execute, and write run artifacts."""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from codoncanvas.config import ConfigSchema
from codoncanvas.core.lexer import ParseError, Token, tokenize, validate_frame, validate_structure
from codoncanvas.core.vm import CodonVM, VMState
from codoncanvas.engine.trace import save_trace
from codoncanvas.renderers.base import RecordingRenderer, Renderer

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    tokens: List[Token]
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[ParseError] = field(default_factory=list)
    states: List[VMState] = field(default_factory=list)
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> dict:
        return {
            "codons": len(self.tokens),
            "errors": [e.as_dict() for e in self.errors],
            "warnings": [w.as_dict() for w in self.warnings],
            "steps": len(self.states),
            "truncated": self.truncated,
            "final_state": self.states[-1].as_dict() if self.states else None,
        }


def execute_genome(source: str, renderer: Renderer | None = None, config: ConfigSchema | None = None) -> ExecutionResult:
    """Run a genome even when it has structural problems; they are reported, not raised."""
    config = config or ConfigSchema()
    renderer = renderer if renderer is not None else RecordingRenderer()
    tokens = tokenize(source)
    problems = validate_frame(source) + validate_structure(tokens)
    result = ExecutionResult(
        tokens=tokens,
        errors=[p for p in problems if p.severity == "error"],
        warnings=[p for p in problems if p.severity == "warning"],
    )
    for problem in result.errors:
        logger.info("genome problem at %d: %s", problem.position, problem.message)
    vm = CodonVM(renderer, max_instructions=config.vm.max_instructions, seed=config.vm.seed)
    result.states = vm.run(tokens)
    result.truncated = vm.truncated
    return result


def run_genome_file(path: Path, config: ConfigSchema | None = None) -> Path:
    """Execute a genome file and write trace.csv, canvas.png and summary.json under run_dir/<stem>."""
    config = config or ConfigSchema()
    path = Path(path)
    run_dir = Path(config.outputs.run_dir) / path.stem
    run_dir.mkdir(parents=True, exist_ok=True)
    source = path.read_text()

    renderer = None
    if config.outputs.render:
        from codoncanvas.renderers.mpl_renderer import MatplotlibRenderer

        renderer = MatplotlibRenderer(
            config.render.width,
            config.render.height,
            dpi=config.render.dpi,
            background=config.render.background,
            value_range=config.render.value_range,
        )
    try:
        result = execute_genome(source, renderer, config)
        if renderer is not None:
            renderer.save(run_dir / "canvas.png")
    finally:
        if renderer is not None:
            renderer.close()
    if config.outputs.trace:
        save_trace(result.states, run_dir / "trace.csv")
    (run_dir / "summary.json").write_text(json.dumps({"genome": str(path), **result.as_dict()}, indent=2))
    logger.info("run for %s written to %s (%d steps)", path.name, run_dir, len(result.states))
    return run_dir
