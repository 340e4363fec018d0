"""
Canvas allocation for the mosaic
"""

from typing import Optional, Tuple
import numpy as np

from ..common.exceptions import DimensionError


def canvas_size(
    tile_width: int,
    tile_height: int,
    overlap_x: int,
    overlap_y: int,
    rows: int,
    cols: int
) -> Tuple[int, int]:
    """
    Calculate mosaic dimensions for a regular grid of tiles

    Returns:
        Tuple of (width, height)
    """
    step_x = tile_width - overlap_x
    step_y = tile_height - overlap_y
    return step_x * cols + overlap_x, step_y * rows + overlap_y


def new_canvas(
    width: int,
    height: int,
    channels: Optional[int] = None,
    dtype=np.uint16
) -> np.ndarray:
    """
    Allocate a zero-initialized canvas

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        channels: Channel count, None for a single-channel (H, W) canvas
        dtype: Unsigned integer accumulator dtype

    Returns:
        Canvas array of shape (height, width) or (height, width, channels)
    """
    if width <= 0 or height <= 0:
        raise DimensionError(width, height, "canvas width and height must be > 0")

    shape = (height, width) if channels is None else (height, width, channels)
    return np.zeros(shape, dtype=dtype)
