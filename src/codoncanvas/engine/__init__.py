"""Execution runner and trace output."""
from .runner import ExecutionResult, execute_genome, run_genome_file
from .trace import save_trace, trace_frame

__all__ = ["ExecutionResult", "execute_genome", "run_genome_file", "save_trace", "trace_frame"]
