"""
Schemas for placement module
"""

from enum import Enum
from typing import Tuple, Union
from pydantic import BaseModel, Field

from ..common.exceptions import InvalidScanMode


class ScanMode(str, Enum):
    """Snake traversal direction"""
    VERTICAL = "vertical"  # column by column, alternating up/down
    HORIZONTAL = "horizontal"  # row by row, alternating left/right

    @classmethod
    def parse(cls, value: Union[str, "ScanMode", None]) -> "ScanMode":
        """Resolve a scan mode, treating an empty value as vertical"""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.VERTICAL
        try:
            return cls(value)
        except ValueError:
            raise InvalidScanMode(str(value)) from None


class GridPosition(BaseModel):
    """Position of a tile in the grid"""
    row: int
    col: int


class Placement(BaseModel):
    """Grid cell and pixel offset assigned to one tile of the sequence"""
    index: int = Field(description="Position of the tile in the source sequence")
    position: GridPosition
    x: int = Field(description="Pixel offset of the left edge")
    y: int = Field(description="Pixel offset of the top edge")

    @property
    def offset(self) -> Tuple[int, int]:
        """Pixel offset as (x0, y0)"""
        return self.x, self.y
