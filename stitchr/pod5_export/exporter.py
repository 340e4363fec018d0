"""
TIFF Exporter - persists the finished mosaic canvas
"""

import logging
import warnings
from pathlib import Path
from typing import Optional
import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning

from .schemas import ExportConfig
from ..common.config import settings

logger = logging.getLogger(__name__)
warnings.filterwarnings("ignore", category=NotGeoreferencedWarning)

# mosaics are always encoded as 16-bit samples
OUTPUT_DTYPE = np.dtype(np.uint16)


class TiffExporter:
    """
    Writes a canvas as a compressed, non-georeferenced TIFF
    """

    def __init__(self, config: Optional[ExportConfig] = None):
        """
        Initialize exporter

        Args:
            config: Export configuration (defaults to settings)
        """
        self.config = config or ExportConfig(
            compression=settings.compression,
            predictor=settings.predictor
        )

    def _profile(self, canvas: np.ndarray) -> dict:
        """Build the rasterio profile for a canvas"""
        height, width = canvas.shape[:2]
        profile = {
            'driver': 'GTiff',
            'width': width,
            'height': height,
            'count': canvas.shape[2] if canvas.ndim == 3 else 1,
            'dtype': OUTPUT_DTYPE.name,
        }
        if self.config.compression:
            profile['compress'] = self.config.compression
            profile['predictor'] = self.config.predictor
        if self.config.tiled:
            profile.update({
                'tiled': True,
                'blockxsize': self.config.block_size,
                'blockysize': self.config.block_size
            })
        return profile

    def save(self, canvas: np.ndarray, output_path: str) -> Path:
        """
        Save canvas to disk

        Args:
            canvas: Mosaic canvas (height, width[, channels])
            output_path: Output file path

        Returns:
            Path of the written file
        """
        if canvas.dtype != OUTPUT_DTYPE:
            raise ValueError(
                f"Mosaic must be {OUTPUT_DTYPE.name} to be written, got {canvas.dtype.name}"
            )

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # rasterio expects band-first data
        data = canvas[np.newaxis] if canvas.ndim == 2 else np.moveaxis(canvas, -1, 0)

        with rasterio.open(path, 'w', **self._profile(canvas)) as dst:
            dst.write(data)

        logger.info(f"Mosaic written to {path} ({canvas.shape[1]}x{canvas.shape[0]}, {canvas.dtype})")
        return path
