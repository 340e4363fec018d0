"""
Schemas for assembly module
"""

from dataclasses import dataclass, field
from typing import List, Tuple
import numpy as np
from pydantic import BaseModel, Field, validator

from ..pod2_placement.schemas import ScanMode, Placement
from ..pod3_compositing.schemas import CompositePolicy


class GridSpec(BaseModel):
    """Grid extent, overlap and traversal of a mosaic"""
    rows: int = Field(description="Number of grid rows")
    cols: int = Field(description="Number of grid columns")
    overlap_x: int = Field(default=0, description="Horizontal overlap in pixels")
    overlap_y: int = Field(default=0, description="Vertical overlap in pixels")
    scan_mode: ScanMode = Field(default=ScanMode.VERTICAL, description="Snake direction")

    @validator('rows', 'cols')
    def validate_extent(cls, v):
        """Validate grid extent"""
        if v <= 0:
            raise ValueError(f"rows and cols must be > 0: {v}")
        return v

    @validator('overlap_x', 'overlap_y')
    def validate_overlap(cls, v):
        """Validate overlap"""
        if v < 0:
            raise ValueError(f"Overlap must be >= 0: {v}")
        return v

    @validator('scan_mode', pre=True)
    def validate_scan_mode(cls, v):
        """Empty scan mode means vertical"""
        return ScanMode.parse(v)

    @property
    def tile_count(self) -> int:
        """Number of tiles the grid holds"""
        return self.rows * self.cols

    def scaled(self, factor: int) -> "GridSpec":
        """Overlap scaled down for tiles shrunk by an integer factor"""
        return self.model_copy(update={
            'overlap_x': self.overlap_x // factor,
            'overlap_y': self.overlap_y // factor
        })


class MosaicLayout(BaseModel):
    """Geometry of an assembled mosaic"""
    rows: int
    cols: int
    tile_size: Tuple[int, int]  # width, height
    overlap: Tuple[int, int]  # x, y
    step: Tuple[int, int]  # x, y
    size: Tuple[int, int]  # width, height
    channels: int = 1
    dtype: str = "uint16"
    scan_mode: ScanMode
    policy: CompositePolicy

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]


@dataclass
class MosaicResult:
    """Finished canvas with the layout it was built from"""
    canvas: np.ndarray
    layout: MosaicLayout
    placements: List[Placement] = field(default_factory=list)
    processing_time: float = 0.0  # seconds
