"""
Compositor - merges tile pixels into the mosaic canvas
"""

import logging
from typing import Optional, Tuple, Union
import numpy as np

from .schemas import CompositePolicy

logger = logging.getLogger(__name__)


def _axis_weights(length: int, overlap: int) -> np.ndarray:
    """Linear ramp over the overlap band at both ends of one axis"""
    weights = np.ones(length, dtype=np.float64)
    if overlap <= 0:
        return weights

    idx = np.arange(length, dtype=np.float64)
    leading = idx < overlap
    trailing = ~leading & (idx >= length - overlap)
    weights[leading] = idx[leading] / overlap
    weights[trailing] = (length - idx[trailing] - 1) / overlap
    return weights


def blend_weights(
    tile_width: int,
    tile_height: int,
    overlap_x: int,
    overlap_y: int
) -> np.ndarray:
    """
    Create the per-pixel alpha of a tile for linear blending

    alpha(x, y) = min(alpha_x(x), alpha_y(y)). Each axis ramps from 0 at
    the tile edge to 1 across its overlap band and is 1 everywhere when
    the overlap on that axis is 0.

    Args:
        tile_width: Tile width
        tile_height: Tile height
        overlap_x: Horizontal overlap in pixels
        overlap_y: Vertical overlap in pixels

    Returns:
        Weight matrix of shape (tile_height, tile_width)
    """
    alpha_x = _axis_weights(tile_width, overlap_x)
    alpha_y = _axis_weights(tile_height, overlap_y)
    return np.minimum.outer(alpha_y, alpha_x)


def _clip_region(
    canvas_shape: Tuple[int, ...],
    tile_shape: Tuple[int, ...],
    x0: int,
    y0: int
) -> Optional[Tuple[slice, slice, slice, slice]]:
    """Destination and source slices of the visible part of a tile"""
    canvas_h, canvas_w = canvas_shape[:2]
    tile_h, tile_w = tile_shape[:2]

    dst_x0, dst_y0 = max(x0, 0), max(y0, 0)
    dst_x1, dst_y1 = min(x0 + tile_w, canvas_w), min(y0 + tile_h, canvas_h)
    if dst_x1 <= dst_x0 or dst_y1 <= dst_y0:
        return None

    return (
        slice(dst_y0, dst_y1),
        slice(dst_x0, dst_x1),
        slice(dst_y0 - y0, dst_y1 - y0),
        slice(dst_x0 - x0, dst_x1 - x0),
    )


def _sum_into(dst: np.ndarray, src: np.ndarray, max_value: int):
    total = dst.astype(np.int64) + src.astype(np.int64)
    np.minimum(total, max_value, out=total)
    dst[...] = total.astype(dst.dtype)


def _blend_into(dst: np.ndarray, src: np.ndarray, alpha: np.ndarray, max_value: int):
    if src.ndim == 3:
        alpha = alpha[..., np.newaxis]
    mixed = alpha * src.astype(np.float64) + (1.0 - alpha) * dst.astype(np.float64)
    # round half up, values are non-negative
    mixed = np.floor(mixed + 0.5)
    np.clip(mixed, 0, max_value, out=mixed)
    dst[...] = mixed.astype(dst.dtype)


def composite(
    canvas: np.ndarray,
    tile: np.ndarray,
    x0: int,
    y0: int,
    policy: Union[str, CompositePolicy] = CompositePolicy.SUM,
    overlap_x: int = 0,
    overlap_y: int = 0,
    weights: Optional[np.ndarray] = None
):
    """
    Write a tile into the canvas at (x0, y0), in place

    Pixels falling outside the canvas are skipped.

    Args:
        canvas: Mosaic canvas, modified in place
        tile: Tile pixels, same channel layout as the canvas
        x0: Left offset of the tile on the canvas
        y0: Top offset of the tile on the canvas
        policy: Sum or linear blend
        overlap_x: Horizontal overlap, used by the blend policy
        overlap_y: Vertical overlap, used by the blend policy
        weights: Precomputed blend weights for this tile size
    """
    policy = CompositePolicy.parse(policy)
    region = _clip_region(canvas.shape, tile.shape, x0, y0)
    if region is None:
        return

    dst_rows, dst_cols, src_rows, src_cols = region
    dst = canvas[dst_rows, dst_cols]
    src = tile[src_rows, src_cols]
    max_value = np.iinfo(canvas.dtype).max

    if policy is CompositePolicy.SUM:
        _sum_into(dst, src, max_value)
    else:
        if weights is None:
            weights = blend_weights(tile.shape[1], tile.shape[0], overlap_x, overlap_y)
        _blend_into(dst, src, weights[src_rows, src_cols], max_value)


class Compositor:
    """
    Applies one compositing policy to every tile of a run
    """

    def __init__(
        self,
        policy: Union[str, CompositePolicy] = CompositePolicy.SUM,
        overlap_x: int = 0,
        overlap_y: int = 0
    ):
        """
        Initialize compositor

        Args:
            policy: Compositing policy for the whole run
            overlap_x: Horizontal overlap in pixels
            overlap_y: Vertical overlap in pixels
        """
        self.policy = CompositePolicy.parse(policy)
        self.overlap_x = overlap_x
        self.overlap_y = overlap_y
        self._weights: Optional[np.ndarray] = None

    def weights_for(self, tile_width: int, tile_height: int) -> np.ndarray:
        """Blend weights for a tile size, cached for the run"""
        if self._weights is None or self._weights.shape != (tile_height, tile_width):
            self._weights = blend_weights(
                tile_width, tile_height, self.overlap_x, self.overlap_y
            )
        return self._weights

    def composite(self, canvas: np.ndarray, tile: np.ndarray, x0: int, y0: int):
        """Place one tile onto the canvas"""
        weights = None
        if self.policy is CompositePolicy.BLEND:
            weights = self.weights_for(tile.shape[1], tile.shape[0])
        composite(
            canvas,
            tile,
            x0,
            y0,
            policy=self.policy,
            overlap_x=self.overlap_x,
            overlap_y=self.overlap_y,
            weights=weights
        )
