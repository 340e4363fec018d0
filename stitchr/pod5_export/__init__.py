"""
POD 5: Export Module
Writes the assembled mosaic to disk
"""

from .exporter import TiffExporter, OUTPUT_DTYPE
from .schemas import ExportConfig

__all__ = [
    "TiffExporter",
    "ExportConfig",
    "OUTPUT_DTYPE"
]
