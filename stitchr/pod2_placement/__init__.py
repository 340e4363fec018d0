"""
POD 2: Placement Module
Computes the serpentine visiting order of the tile grid
"""

from .planner import PlacementPlanner, plan
from .schemas import ScanMode, GridPosition, Placement

__all__ = [
    "PlacementPlanner",
    "plan",
    "ScanMode",
    "GridPosition",
    "Placement"
]
