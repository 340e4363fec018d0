"""
POD 3: Compositing Module
Canvas allocation and overlap compositing policies
"""

from .canvas import new_canvas, canvas_size
from .compositor import Compositor, composite, blend_weights
from .schemas import CompositePolicy

__all__ = [
    "new_canvas",
    "canvas_size",
    "Compositor",
    "composite",
    "blend_weights",
    "CompositePolicy"
]
