"""
stitchr - serpentine tile-grid mosaic assembly
"""

__version__ = "0.1.0"

from .pod2_placement import plan, ScanMode
from .pod3_compositing import CompositePolicy, composite, new_canvas
from .pod4_assembly import MosaicAssembler, assemble, GridSpec
from .pipeline import StitchPipeline, StitchRequest

__all__ = [
    "plan",
    "ScanMode",
    "CompositePolicy",
    "composite",
    "new_canvas",
    "MosaicAssembler",
    "assemble",
    "GridSpec",
    "StitchPipeline",
    "StitchRequest"
]
