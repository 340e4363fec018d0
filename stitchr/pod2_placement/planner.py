"""
Placement Planner - snake traversal of the tile grid
"""

import logging
from typing import List, Tuple, Union

from .schemas import ScanMode, GridPosition, Placement
from ..common.exceptions import DimensionError

logger = logging.getLogger(__name__)


def plan(
    rows: int,
    cols: int,
    scan_mode: Union[str, ScanMode] = ScanMode.VERTICAL
) -> List[Tuple[int, int]]:
    """
    Compute the (row, col) visited at each sequence position

    Args:
        rows: Number of grid rows
        cols: Number of grid columns
        scan_mode: 'vertical' (default, also for '') or 'horizontal'

    Returns:
        List of (row, col) pairs of length rows * cols
    """
    mode = ScanMode.parse(scan_mode)
    if rows <= 0 or cols <= 0:
        raise DimensionError(cols, rows, "rows and cols must be > 0")

    order = []
    if mode is ScanMode.HORIZONTAL:
        for r in range(rows):
            if r % 2 == 0:
                # left -> right
                columns = range(cols)
            else:
                # right -> left
                columns = range(cols - 1, -1, -1)
            order.extend((r, c) for c in columns)
    else:
        for c in range(cols):
            if c % 2 == 0:
                # bottom -> top
                grid_rows = range(rows - 1, -1, -1)
            else:
                # top -> bottom
                grid_rows = range(rows)
            order.extend((r, c) for r in grid_rows)

    return order


class PlacementPlanner:
    """
    Turns a snake traversal into pixel placements for equally sized tiles
    """

    def __init__(self, scan_mode: Union[str, ScanMode] = ScanMode.VERTICAL):
        """
        Initialize placement planner

        Args:
            scan_mode: Snake direction, validated immediately
        """
        self.scan_mode = ScanMode.parse(scan_mode)

    def plan_placements(
        self,
        rows: int,
        cols: int,
        step_x: int,
        step_y: int
    ) -> List[Placement]:
        """
        Compute placements with pixel offsets

        Args:
            rows: Number of grid rows
            cols: Number of grid columns
            step_x: Horizontal distance between tile origins
            step_y: Vertical distance between tile origins

        Returns:
            One placement per sequence index, in sequence order
        """
        placements = [
            Placement(
                index=i,
                position=GridPosition(row=row, col=col),
                x=col * step_x,
                y=row * step_y
            )
            for i, (row, col) in enumerate(plan(rows, cols, self.scan_mode))
        ]
        logger.debug(
            f"Planned {len(placements)} placements ({self.scan_mode.value} snake, "
            f"{rows}x{cols} grid)"
        )
        return placements
