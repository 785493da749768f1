"""CodonCanvas: a DNA-inspired visual programming language."""
from codoncanvas.core import CodonVM, parse_genome, tokenize
from codoncanvas.renderers import RecordingRenderer

__version__ = "0.1.0"

__all__ = ["CodonVM", "RecordingRenderer", "parse_genome", "tokenize", "__version__"]
