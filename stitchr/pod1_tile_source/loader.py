"""
Tile Source - discovers, decodes and downsamples tile images
"""

import asyncio
import logging
import re
import warnings
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union
import numpy as np
import cv2
import rasterio
from rasterio.errors import NotGeoreferencedWarning
from tqdm import tqdm

from .schemas import TileSourceConfig, TileRecord
from ..common.config import settings
from ..common.exceptions import TileCountMismatch, DimensionError

logger = logging.getLogger(__name__)
warnings.filterwarnings("ignore", category=NotGeoreferencedWarning)  # plain microscope TIFFs

# tile number embedded in acquisition file names, e.g. "scan-12_ch0.tif"
SEQUENCE_PATTERN = re.compile(r'-(\d+)_')

GRAY16_MAX = 65535


def natural_key(text: str) -> List[Union[int, str]]:
    """Sort key comparing digit runs numerically"""
    return [int(part) if part.isdigit() else part.lower()
            for part in re.split(r'(\d+)', text)]


def sequence_number(path: str) -> int:
    """Tile number captured by SEQUENCE_PATTERN, 0 when absent"""
    match = SEQUENCE_PATTERN.search(path)
    return int(match.group(1)) if match else 0


def sort_paths(paths: List[str]) -> List[str]:
    """Order paths by tile number, then naturally"""
    return sorted(paths, key=lambda p: (sequence_number(p), natural_key(p)))


def discover_paths(
    directory: str,
    pattern: Optional[re.Pattern] = None,
    extensions: Tuple[str, ...] = (".tif", ".tiff")
) -> List[str]:
    """
    Find tile images under a directory

    Args:
        directory: Directory walked recursively
        pattern: Optional regex searched in each file name
        extensions: Accepted extensions, compared case-insensitively

    Returns:
        Sorted list of paths
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Tile directory not found: {directory}")

    accepted = {ext.lower() for ext in extensions}
    paths = [
        str(path) for path in root.rglob("*")
        if path.is_file()
        and path.suffix.lower() in accepted
        and (pattern is None or pattern.search(path.name))
    ]
    return sort_paths(paths)


def read_list_file(list_file: str) -> List[str]:
    """Read tile paths from a text file, one per line"""
    path = Path(list_file)
    if not path.exists():
        raise FileNotFoundError(f"List file not found: {list_file}")

    with open(path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip()]


def _to_gray16_scale(band: np.ndarray) -> np.ndarray:
    """Bring one band to the 0-65535 range"""
    if band.dtype == np.uint8:
        return band.astype(np.uint32) * 257
    if band.dtype == np.uint16:
        return band.astype(np.uint32)
    return np.clip(band, 0, GRAY16_MAX).astype(np.uint32)


def to_gray16(data: np.ndarray) -> np.ndarray:
    """
    Convert band-first raster data to a 16-bit grayscale image

    Args:
        data: Array of shape (bands, height, width)

    Returns:
        uint16 array of shape (height, width)
    """
    if data.ndim == 2:
        data = data[np.newaxis]

    if data.shape[0] >= 3:
        r, g, b = (_to_gray16_scale(data[i]).astype(np.uint64) for i in range(3))
        gray = (19595 * r + 38470 * g + 7471 * b + (1 << 15)) >> 16
    else:
        # gray or gray + alpha
        gray = _to_gray16_scale(data[0])

    return gray.astype(np.uint16)


def downsample(image: np.ndarray, factor: int) -> np.ndarray:
    """
    Shrink an image by an integer factor with Lanczos resampling

    Args:
        image: Image array (height, width[, channels])
        factor: Downsample factor, 1 returns the image unchanged

    Returns:
        Image of size (width // factor, height // factor)
    """
    if factor <= 1:
        return image

    height, width = image.shape[:2]
    new_w, new_h = width // factor, height // factor
    if new_w <= 0 or new_h <= 0:
        raise DimensionError(
            new_w, new_h,
            f"downsample factor {factor} too large for {width}x{height} tile"
        )
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LANCZOS4)


class TileSource:
    """
    Produces the ordered tile sequence of a mosaic run
    Decoding runs in a thread pool, order follows the discovered paths
    """

    def __init__(
        self,
        config: Optional[TileSourceConfig] = None,
        max_workers: Optional[int] = None,
        show_progress: Optional[bool] = None
    ):
        """
        Initialize tile source

        Args:
            config: Tile source configuration
            max_workers: Decoding threads (defaults to settings)
            show_progress: Show a progress bar while loading
        """
        self.config = config or TileSourceConfig(downsample=settings.downsample)
        self.show_progress = settings.show_progress if show_progress is None else show_progress
        self._executor = ThreadPoolExecutor(max_workers=max_workers or settings.max_workers)

    def discover(self) -> List[str]:
        """
        List candidate tile paths, from the list file when one is given

        Returns:
            Ordered list of paths
        """
        if self.config.list_file:
            paths = read_list_file(self.config.list_file)
        elif self.config.directory:
            paths = discover_paths(
                self.config.directory,
                self.config.pattern,
                self.config.extensions
            )
        else:
            raise ValueError("either a tile directory or a list file must be specified")

        logger.info(f"Found {len(paths)} tile images")
        return paths

    def select(self, paths: List[str], count: int) -> List[str]:
        """
        Keep the first `count` paths

        Args:
            paths: Ordered candidate paths
            count: Number of tiles the grid needs

        Returns:
            Exactly `count` paths
        """
        if len(paths) < count:
            raise TileCountMismatch(
                count, len(paths),
                f"Not enough images: have {len(paths)} need {count}"
            )
        if len(paths) > count:
            logger.warning(f"Using the first {count} of {len(paths)} images")
        return paths[:count]

    def load_tile(self, path: str, index: int = 0) -> Tuple[np.ndarray, TileRecord]:
        """
        Decode and downsample a single tile

        Args:
            path: Tile image path
            index: Position of the tile in the sequence

        Returns:
            Tuple of (tile_array, record)
        """
        logger.info(f"Processing {path}")
        if not Path(path).exists():
            raise FileNotFoundError(f"Tile image not found: {path}")

        with rasterio.open(path) as src:
            data = src.read()
            source_dtype = src.dtypes[0]

        tile = to_gray16(data)
        source_h, source_w = tile.shape
        tile = downsample(tile, self.config.downsample)

        record = TileRecord(
            index=index,
            file_path=str(path),
            source_size=(source_w, source_h),
            size=(tile.shape[1], tile.shape[0]),
            bands=data.shape[0],
            source_dtype=source_dtype
        )
        return tile, record

    async def load_tiles_async(
        self,
        paths: List[str]
    ) -> Tuple[List[np.ndarray], List[TileRecord]]:
        """
        Decode tiles concurrently

        Args:
            paths: Tile paths in sequence order

        Returns:
            Tuple of (tiles, records), both in the order of `paths`
        """
        loop = asyncio.get_event_loop()

        with tqdm(total=len(paths), desc="Loading", disable=not self.show_progress) as pbar:
            futures = []
            for i, path in enumerate(paths):
                future = loop.run_in_executor(self._executor, self.load_tile, path, i)
                future.add_done_callback(lambda _: pbar.update(1))
                futures.append(future)

            results = await asyncio.gather(*futures)

        tiles = [tile for tile, _ in results]
        records = [record for _, record in results]
        return tiles, records

    def load_tiles(self, paths: List[str]) -> Tuple[List[np.ndarray], List[TileRecord]]:
        """Decode tiles, blocking until all are loaded"""
        return asyncio.run(self.load_tiles_async(paths))

    def load(self, count: int) -> Tuple[List[np.ndarray], List[TileRecord]]:
        """
        Discover, select and decode the tiles of a grid

        Args:
            count: rows * cols

        Returns:
            Tuple of (tiles, records)
        """
        paths = self.select(self.discover(), count)
        return self.load_tiles(paths)

    def cleanup(self):
        """Cleanup resources"""
        self._executor.shutdown(wait=True)
