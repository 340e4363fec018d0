"""
POD 4: Assembly Module
Validates a tile sequence and assembles it into a mosaic canvas
"""

from .engine import MosaicAssembler, assemble
from .schemas import GridSpec, MosaicLayout, MosaicResult

__all__ = [
    "MosaicAssembler",
    "assemble",
    "GridSpec",
    "MosaicLayout",
    "MosaicResult"
]
