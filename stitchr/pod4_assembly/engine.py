"""
Mosaic Assembler - drives placement and compositing over a tile sequence
"""

import logging
import time
from typing import Optional, Sequence, Tuple, Union
import numpy as np
from tqdm import tqdm

from .schemas import GridSpec, MosaicLayout, MosaicResult
from ..common.config import settings
from ..common.exceptions import TileCountMismatch, TileSizeMismatch, DimensionError
from ..pod2_placement import PlacementPlanner, ScanMode
from ..pod3_compositing import Compositor, CompositePolicy, new_canvas, canvas_size

logger = logging.getLogger(__name__)


class MosaicAssembler:
    """
    Assembles equally sized tiles on a regular grid into one canvas
    Tiles are composited strictly in snake order
    """

    def __init__(
        self,
        scan_mode: Union[str, ScanMode, None] = None,
        policy: Union[str, CompositePolicy, None] = None,
        dtype: Optional[str] = None,
        show_progress: Optional[bool] = None
    ):
        """
        Initialize mosaic assembler

        Args:
            scan_mode: Snake direction (defaults to settings)
            policy: Compositing policy (defaults to settings)
            dtype: Canvas accumulator dtype (defaults to settings)
            show_progress: Show a progress bar while compositing
        """
        # parsed when a mosaic is built, after the tiles are validated
        self._scan_mode = settings.scan_mode if scan_mode is None else scan_mode
        self.policy = CompositePolicy.parse(
            settings.composite_policy if policy is None else policy
        )
        self.dtype = np.dtype(dtype or settings.canvas_dtype)
        if self.dtype.kind != 'u':
            raise ValueError(f"Canvas dtype must be an unsigned integer type: {self.dtype}")
        self.show_progress = settings.show_progress if show_progress is None else show_progress

    @property
    def scan_mode(self) -> ScanMode:
        return ScanMode.parse(self._scan_mode)

    def _validate_tiles(self, tiles: Sequence[np.ndarray], expected: int) -> Tuple[int, ...]:
        """
        Check tile count and shapes

        Returns:
            Shared tile shape
        """
        if len(tiles) != expected:
            raise TileCountMismatch(expected, len(tiles))
        if expected == 0:
            return ()

        shape = tuple(tiles[0].shape)
        if len(shape) not in (2, 3):
            raise TileSizeMismatch(0, ("H", "W"), shape)
        for i, tile in enumerate(tiles[1:], start=1):
            if tuple(tile.shape) != shape:
                raise TileSizeMismatch(i, shape, tuple(tile.shape))
        return shape

    def build(self, tiles: Sequence[np.ndarray], grid: GridSpec) -> MosaicResult:
        """
        Assemble tiles laid out on a GridSpec

        Args:
            tiles: Tiles in source order
            grid: Grid extent and overlap; its scan mode overrides the assembler's

        Returns:
            MosaicResult with canvas, layout and placements
        """
        return self._build(tiles, grid.rows, grid.cols, grid.overlap_x, grid.overlap_y, grid.scan_mode)

    def assemble(
        self,
        tiles: Sequence[np.ndarray],
        rows: int,
        cols: int,
        overlap_x: int = 0,
        overlap_y: int = 0
    ) -> np.ndarray:
        """
        Assemble tiles into a canvas

        Args:
            tiles: Exactly rows * cols tiles in source order
            rows: Number of grid rows
            cols: Number of grid columns
            overlap_x: Horizontal overlap in pixels
            overlap_y: Vertical overlap in pixels

        Returns:
            Finished canvas
        """
        return self._build(tiles, rows, cols, overlap_x, overlap_y, self._scan_mode).canvas

    def _build(
        self,
        tiles: Sequence[np.ndarray],
        rows: int,
        cols: int,
        overlap_x: int,
        overlap_y: int,
        scan_mode: Union[str, ScanMode]
    ) -> MosaicResult:
        start_time = time.time()

        shape = self._validate_tiles(tiles, rows * cols)
        if rows <= 0 or cols <= 0:
            raise DimensionError(cols, rows, "rows and cols must be > 0")

        tile_h, tile_w = shape[:2]
        width, height = canvas_size(tile_w, tile_h, overlap_x, overlap_y, rows, cols)
        if overlap_x < 0 or overlap_y < 0:
            raise DimensionError(
                width, height, f"overlap ({overlap_x}, {overlap_y}) must be >= 0"
            )

        step_x = tile_w - overlap_x
        step_y = tile_h - overlap_y
        if step_x <= 0 or step_y <= 0:
            raise DimensionError(
                width, height,
                f"overlap ({overlap_x}, {overlap_y}) must be smaller than tile size ({tile_w}, {tile_h})"
            )

        planner = PlacementPlanner(scan_mode)

        channels = shape[2] if len(shape) == 3 else None
        canvas = new_canvas(width, height, channels=channels, dtype=self.dtype)

        placements = planner.plan_placements(rows, cols, step_x, step_y)
        compositor = Compositor(self.policy, overlap_x, overlap_y)

        logger.info(
            f"Assembling {rows}x{cols} grid into {width}x{height} canvas "
            f"({planner.scan_mode.value} snake, {self.policy.value} policy)"
        )

        for tile, placement in tqdm(
            zip(tiles, placements),
            total=len(placements),
            desc="Compositing",
            disable=not self.show_progress
        ):
            compositor.composite(canvas, tile, placement.x, placement.y)

        layout = MosaicLayout(
            rows=rows,
            cols=cols,
            tile_size=(tile_w, tile_h),
            overlap=(overlap_x, overlap_y),
            step=(step_x, step_y),
            size=(width, height),
            channels=channels or 1,
            dtype=self.dtype.name,
            scan_mode=planner.scan_mode,
            policy=self.policy
        )

        processing_time = time.time() - start_time
        logger.info(f"Assembly completed: {len(placements)} tiles in {processing_time:.2f} seconds")

        return MosaicResult(
            canvas=canvas,
            layout=layout,
            placements=placements,
            processing_time=processing_time
        )


def assemble(
    tiles: Sequence[np.ndarray],
    rows: int,
    cols: int,
    overlap_x: int = 0,
    overlap_y: int = 0,
    scan_mode: Union[str, ScanMode] = ScanMode.VERTICAL,
    policy: Union[str, CompositePolicy] = CompositePolicy.SUM
) -> np.ndarray:
    """Assemble tiles into a canvas with an explicit scan mode and policy"""
    assembler = MosaicAssembler(scan_mode=scan_mode, policy=policy, show_progress=False)
    return assembler.assemble(tiles, rows, cols, overlap_x, overlap_y)
