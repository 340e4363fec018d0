"""
Unit tests for Tile Source (POD1)
"""

import re
from pathlib import Path

import pytest
import numpy as np
import rasterio

from stitchr.pod1_tile_source import (
    TileSource,
    TileSourceConfig,
    discover_paths,
    downsample,
    read_list_file,
    sort_paths,
    to_gray16
)
from stitchr.pod1_tile_source.loader import natural_key, sequence_number
from stitchr.common.exceptions import TileCountMismatch, DimensionError


def write_tiff(path, data):
    """Write a band-first array as a plain TIFF"""
    if data.ndim == 2:
        data = data[np.newaxis]
    profile = {
        'driver': 'GTiff',
        'width': data.shape[2],
        'height': data.shape[1],
        'count': data.shape[0],
        'dtype': data.dtype.name
    }
    with rasterio.open(path, 'w', **profile) as dst:
        dst.write(data)


class TestPathOrdering:
    """Test path discovery and ordering"""

    def test_sequence_number(self):
        """Test tile number extraction"""
        assert sequence_number("scan/tile-12_ch0.tif") == 12
        assert sequence_number("tile12.tif") == 0

    def test_sort_numeric(self):
        """Test tile numbers sort numerically"""
        paths = ["a-10_x.tif", "a-2_x.tif", "a-1_x.tif"]
        assert sort_paths(paths) == ["a-1_x.tif", "a-2_x.tif", "a-10_x.tif"]

    def test_sort_unnumbered_first(self):
        """Test paths without a tile number sort as 0"""
        assert sort_paths(["a-3_x.tif", "b.tif"]) == ["b.tif", "a-3_x.tif"]

    def test_natural_tie_break(self):
        """Test ties are broken in natural order"""
        assert sort_paths(["img10.tif", "img9.tif"]) == ["img9.tif", "img10.tif"]
        assert natural_key("a2") < natural_key("a10")

    def test_discover_paths(self, tmp_path):
        """Test recursive discovery with extension and regex filters"""
        (tmp_path / "sub").mkdir()
        for name in ["s-2_a.tif", "s-1_a.TIFF", "sub/s-3_a.tif", "s-4_b.tif", "notes.txt"]:
            (tmp_path / name).write_bytes(b"")

        paths = discover_paths(str(tmp_path))
        names = [Path(p).relative_to(tmp_path).as_posix() for p in paths]
        assert names == ["s-1_a.TIFF", "s-2_a.tif", "sub/s-3_a.tif", "s-4_b.tif"]

        filtered = discover_paths(str(tmp_path), re.compile(r"_a\."))
        assert len(filtered) == 3
        assert all("_a." in p for p in filtered)

    def test_discover_missing_directory(self, tmp_path):
        """Test missing directory"""
        with pytest.raises(FileNotFoundError):
            discover_paths(str(tmp_path / "missing"))

    def test_read_list_file(self, tmp_path):
        """Test list file skips blank lines and keeps order"""
        list_file = tmp_path / "tiles.txt"
        list_file.write_text("b.tif\n\na.tif\n  \nc.tif\n", encoding="utf-8")
        assert read_list_file(str(list_file)) == ["b.tif", "a.tif", "c.tif"]

    def test_read_missing_list_file(self, tmp_path):
        """Test missing list file"""
        with pytest.raises(FileNotFoundError):
            read_list_file(str(tmp_path / "nope.txt"))


class TestPixelConversion:
    """Test grayscale conversion and downsampling"""

    def test_gray8_scaled_to_16bit(self):
        """Test 8-bit gray is expanded to the 16-bit range"""
        data = np.array([[[0, 1, 255]]], dtype=np.uint8)
        assert to_gray16(data).tolist() == [[0, 257, 65535]]

    def test_gray16_kept(self):
        """Test 16-bit gray passes through"""
        data = np.array([[[0, 1234, 65535]]], dtype=np.uint16)
        gray = to_gray16(data)
        assert gray.dtype == np.uint16
        assert gray.tolist() == [[0, 1234, 65535]]

    def test_rgb_luminance(self):
        """Test RGB is reduced to luminance"""
        data = np.zeros((3, 1, 3), dtype=np.uint8)
        data[:, 0, 0] = 255  # white
        data[0, 0, 1] = 255  # red
        gray = to_gray16(data)
        assert gray[0, 0] == 65535
        assert gray[0, 1] == 19595
        assert gray[0, 2] == 0

    def test_downsample(self):
        """Test integer downsampling"""
        image = np.full((60, 100), 1000, dtype=np.uint16)
        small = downsample(image, 4)
        assert small.shape == (15, 25)
        assert small.dtype == np.uint16
        assert abs(int(small[7, 12]) - 1000) <= 1

    def test_downsample_identity(self):
        """Test factor 1 keeps the image"""
        image = np.zeros((4, 4), dtype=np.uint16)
        assert downsample(image, 1) is image

    def test_downsample_too_large(self):
        """Test factor larger than the tile"""
        with pytest.raises(DimensionError):
            downsample(np.zeros((4, 4), dtype=np.uint16), 8)


class TestTileSource:
    """Test Tile Source functionality"""

    @pytest.fixture
    def tile_dir(self, tmp_path):
        """Directory with four numbered 8x6 tiles"""
        for i in range(4):
            write_tiff(tmp_path / f"scan-{i + 1}_c0.tif", np.full((6, 8), i + 1, dtype=np.uint16))
        return tmp_path

    @pytest.fixture
    def source(self, tile_dir):
        """Create test tile source"""
        source = TileSource(TileSourceConfig(directory=str(tile_dir)), max_workers=2, show_progress=False)
        yield source
        source.cleanup()

    def test_load_in_order(self, source):
        """Test tiles come back in sorted order"""
        tiles, records = source.load(4)
        assert [int(t[0, 0]) for t in tiles] == [1, 2, 3, 4]
        assert all(t.shape == (6, 8) for t in tiles)
        assert [r.index for r in records] == [0, 1, 2, 3]
        assert records[0].size == (8, 6)
        assert records[0].file_path.endswith("scan-1_c0.tif")

    def test_extra_images_ignored(self, source):
        """Test only the first rows * cols images are used"""
        tiles, _ = source.load(3)
        assert len(tiles) == 3

    def test_not_enough_images(self, source):
        """Test too few images"""
        with pytest.raises(TileCountMismatch) as exc_info:
            source.load(5)
        assert "Not enough images" in str(exc_info.value)
        assert exc_info.value.actual == 4

    def test_list_file(self, tile_dir):
        """Test loading from a list file keeps its order"""
        list_file = tile_dir / "order.txt"
        list_file.write_text(
            "\n".join(str(tile_dir / f"scan-{i}_c0.tif") for i in (3, 1, 2)),
            encoding="utf-8"
        )
        source = TileSource(TileSourceConfig(list_file=str(list_file)), show_progress=False)
        try:
            tiles, _ = source.load(3)
        finally:
            source.cleanup()
        assert [int(t[0, 0]) for t in tiles] == [3, 1, 2]

    def test_downsampled_load(self, tmp_path):
        """Test tiles are shrunk on load"""
        write_tiff(tmp_path / "big-1_c0.tif", np.full((40, 80), 500, dtype=np.uint16))
        source = TileSource(TileSourceConfig(directory=str(tmp_path), downsample=4), show_progress=False)
        try:
            tiles, records = source.load(1)
        finally:
            source.cleanup()
        assert tiles[0].shape == (10, 20)
        assert records[0].source_size == (80, 40)
        assert records[0].size == (20, 10)

    def test_rgb_tile(self, tmp_path):
        """Test RGB tiles are converted to gray"""
        write_tiff(tmp_path / "rgb-1_c0.tif", np.full((3, 4, 4), 255, dtype=np.uint8))
        source = TileSource(TileSourceConfig(directory=str(tmp_path)), show_progress=False)
        try:
            tiles, records = source.load(1)
        finally:
            source.cleanup()
        assert tiles[0].dtype == np.uint16
        assert (tiles[0] == 65535).all()
        assert records[0].bands == 3
        assert records[0].source_dtype == "uint8"

    def test_missing_tile(self, tmp_path):
        """Test a listed tile that does not exist"""
        source = TileSource(TileSourceConfig(directory=str(tmp_path)), show_progress=False)
        try:
            with pytest.raises(FileNotFoundError):
                source.load_tiles([str(tmp_path / "gone.tif")])
        finally:
            source.cleanup()

    def test_no_input(self):
        """Test neither directory nor list file"""
        source = TileSource(TileSourceConfig(), show_progress=False)
        try:
            with pytest.raises(ValueError):
                source.discover()
        finally:
            source.cleanup()

    @pytest.mark.asyncio
    async def test_load_tiles_async(self, source, tile_dir):
        """Test concurrent loading preserves order"""
        paths = [str(tile_dir / f"scan-{i}_c0.tif") for i in (4, 2, 3, 1)]
        tiles, records = await source.load_tiles_async(paths)
        assert [int(t[0, 0]) for t in tiles] == [4, 2, 3, 1]
        assert [r.index for r in records] == [0, 1, 2, 3]


class TestTileSourceConfig:
    """Test Tile Source Configuration"""

    def test_valid_config(self):
        """Test valid configuration"""
        config = TileSourceConfig(directory="tiles", regex=r"-\d+_", downsample=2)
        assert config.pattern.search("a-1_b.tif")
        assert config.downsample == 2

    def test_empty_regex(self):
        """Test empty regex disables filtering"""
        assert TileSourceConfig(regex="").pattern is None

    def test_invalid_downsample(self):
        """Test invalid downsample factor"""
        with pytest.raises(ValueError):
            TileSourceConfig(downsample=0)

    def test_invalid_regex(self):
        """Test invalid regex"""
        with pytest.raises(ValueError):
            TileSourceConfig(regex="(unclosed")

    def test_regex_ignored_with_list_file(self):
        """Test the filename filter is not applied to list files"""
        config = TileSourceConfig(list_file="tiles.txt", regex="(unclosed")
        assert config.regex is None
        assert config.pattern is None
