"""
Stitch pipeline - tile source to exported mosaic
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, validator

from .common.config import settings
from .pod1_tile_source import TileSource, TileSourceConfig, TileRecord
from .pod3_compositing import CompositePolicy
from .pod4_assembly import MosaicAssembler, GridSpec, MosaicResult
from .pod5_export import TiffExporter, ExportConfig, OUTPUT_DTYPE

logger = logging.getLogger(__name__)


class StitchRequest(BaseModel):
    """Everything needed for one mosaic run"""
    source: TileSourceConfig
    grid: GridSpec
    policy: CompositePolicy = Field(default=CompositePolicy.SUM, description="Overlap compositing policy")
    output_path: str = Field(default="mosaic.tiff", description="Output TIFF path")
    export: ExportConfig = Field(default_factory=ExportConfig)

    @validator('policy', pre=True)
    def validate_policy(cls, v):
        """Accept policy names as well as values"""
        return CompositePolicy.parse(v)


@dataclass
class StitchResult:
    """Outcome of a mosaic run"""
    mosaic: MosaicResult
    records: List[TileRecord]
    output_path: Path
    processing_time: float  # seconds
    metadata: dict = field(default_factory=dict)


class StitchPipeline:
    """
    Loads tiles, assembles them and writes the mosaic
    Nothing is written unless assembly succeeds
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        show_progress: Optional[bool] = None
    ):
        """
        Initialize pipeline

        Args:
            max_workers: Tile decoding threads (defaults to settings)
            show_progress: Show progress bars (defaults to settings)
        """
        self.max_workers = max_workers or settings.max_workers
        self.show_progress = settings.show_progress if show_progress is None else show_progress

    def run(self, request: StitchRequest) -> StitchResult:
        """
        Execute a mosaic run

        Args:
            request: Stitch request

        Returns:
            StitchResult object
        """
        start_time = time.time()
        grid = request.grid

        source = TileSource(
            request.source,
            max_workers=self.max_workers,
            show_progress=self.show_progress
        )
        try:
            tiles, records = source.load(grid.tile_count)
        finally:
            source.cleanup()

        # overlap follows the tiles when they were shrunk
        factor = request.source.downsample
        scaled_grid = grid.scaled(factor)
        if factor > 1:
            logger.info(
                f"Downsampled by {factor}: overlap ({grid.overlap_x}, {grid.overlap_y}) -> "
                f"({scaled_grid.overlap_x}, {scaled_grid.overlap_y})"
            )

        assembler = MosaicAssembler(
            scan_mode=scaled_grid.scan_mode,
            policy=request.policy,
            dtype=OUTPUT_DTYPE.name,
            show_progress=self.show_progress
        )
        mosaic = assembler.build(tiles, scaled_grid)

        exporter = TiffExporter(request.export)
        output_path = exporter.save(mosaic.canvas, request.output_path)

        processing_time = time.time() - start_time
        logger.info(f"Stitching completed: {len(tiles)} tiles in {processing_time:.2f} seconds")

        return StitchResult(
            mosaic=mosaic,
            records=records,
            output_path=output_path,
            processing_time=processing_time,
            metadata={
                'downsample': factor,
                'source_overlap': (grid.overlap_x, grid.overlap_y)
            }
        )
