"""
Unit tests for TIFF Exporter (POD5)
"""

import pytest
import numpy as np
import rasterio
from rasterio.enums import Compression

from stitchr.pod5_export import TiffExporter, ExportConfig


class TestTiffExporter:
    """Test TIFF Exporter functionality"""

    @pytest.fixture
    def exporter(self):
        """Create test exporter"""
        return TiffExporter(ExportConfig(compression="deflate", predictor=2))

    def test_save_grayscale(self, exporter, tmp_path):
        """Test a 16-bit grayscale canvas is written losslessly"""
        canvas = np.arange(180 * 120, dtype=np.uint32).reshape(120, 180).astype(np.uint16)
        path = exporter.save(canvas, str(tmp_path / "out" / "mosaic.tiff"))

        assert path.exists()
        with rasterio.open(path) as src:
            assert src.count == 1
            assert src.width == 180
            assert src.height == 120
            assert src.dtypes[0] == "uint16"
            assert src.compression == Compression.deflate
            np.testing.assert_array_equal(src.read(1), canvas)

    def test_save_multichannel(self, exporter, tmp_path):
        """Test channels become bands"""
        canvas = np.zeros((4, 5, 3), dtype=np.uint16)
        canvas[..., 1] = 7
        path = exporter.save(canvas, str(tmp_path / "rgb.tiff"))

        with rasterio.open(path) as src:
            assert src.count == 3
            assert (src.read(2) == 7).all()
            assert not src.read(1).any()

    def test_uncompressed(self, tmp_path):
        """Test writing without compression"""
        exporter = TiffExporter(ExportConfig(compression="none"))
        path = exporter.save(np.ones((2, 2), dtype=np.uint16), str(tmp_path / "plain.tif"))
        with rasterio.open(path) as src:
            assert src.compression is None

    def test_tiled(self, tmp_path):
        """Test tiled output"""
        exporter = TiffExporter(ExportConfig(tiled=True, block_size=16))
        path = exporter.save(np.ones((40, 40), dtype=np.uint16), str(tmp_path / "tiled.tif"))
        with rasterio.open(path) as src:
            assert src.block_shapes[0] == (16, 16)


class TestExportConfig:
    """Test Export Configuration"""

    def test_defaults(self):
        """Test default configuration"""
        config = ExportConfig()
        assert config.compression == "deflate"
        assert config.predictor == 2

    def test_invalid_compression(self):
        """Test invalid compression"""
        with pytest.raises(ValueError):
            ExportConfig(compression="jpeg2000")

    def test_invalid_predictor(self):
        """Test invalid predictor"""
        with pytest.raises(ValueError):
            ExportConfig(predictor=3)

    def test_rejects_non_16bit_canvas(self, tmp_path):
        """Test only 16-bit canvases are written"""
        exporter = TiffExporter()
        out = tmp_path / "wide.tiff"
        with pytest.raises(ValueError):
            exporter.save(np.ones((2, 2), dtype=np.uint32), str(out))
        assert not out.exists()
