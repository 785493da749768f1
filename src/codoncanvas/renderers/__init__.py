"""Drawing backends. The matplotlib backend lives in ``renderers.mpl_renderer``."""
from .base import RecordingRenderer, Renderer, Transform

__all__ = ["RecordingRenderer", "Renderer", "Transform"]
