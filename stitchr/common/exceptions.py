"""
Error kinds raised while assembling a mosaic
"""

from typing import Optional, Tuple


class StitchError(ValueError):
    """Base class for fatal mosaic assembly errors"""


class TileCountMismatch(StitchError):
    """Number of tiles does not match the grid size"""

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"number of images ({actual}) does not match grid size ({expected})"
        )


class TileSizeMismatch(StitchError):
    """A tile's shape differs from the first tile of the run"""

    def __init__(self, index: int, expected: Tuple[int, ...], actual: Tuple[int, ...]):
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"tile {index} has shape {actual}, expected {expected}"
        )


class DimensionError(StitchError):
    """Computed canvas or grid dimensions are not positive"""

    def __init__(self, width: int, height: int, reason: str = ""):
        self.width = width
        self.height = height
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"invalid mosaic dimensions {width}x{height}{detail}"
        )


class InvalidScanMode(StitchError):
    """Scan mode is neither vertical nor horizontal"""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(
            f"invalid snake mode: {mode} (use 'vertical' or 'horizontal')"
        )
