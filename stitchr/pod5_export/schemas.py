"""
Schemas for export module
"""

from typing import Optional
from pydantic import BaseModel, Field, validator


class ExportConfig(BaseModel):
    """Configuration for writing the mosaic"""
    compression: Optional[str] = Field(default="deflate", description="Compression method")
    predictor: int = Field(default=2, description="TIFF predictor (1 none, 2 horizontal)")
    tiled: bool = Field(default=False, description="Write a tiled TIFF")
    block_size: int = Field(default=256, description="Block size when tiled")

    @validator('compression')
    def validate_compression(cls, v):
        """Validate compression method"""
        if v is None or v.lower() == "none":
            return None
        valid = ['deflate', 'lzw', 'zstd', 'packbits']
        if v.lower() not in valid:
            raise ValueError(f"Invalid compression: {v}")
        return v.lower()

    @validator('predictor')
    def validate_predictor(cls, v):
        """Validate predictor"""
        if v not in (1, 2):
            raise ValueError(f"Invalid predictor: {v}")
        return v

    @validator('block_size')
    def validate_block_size(cls, v):
        """Validate block size"""
        if v <= 0 or v % 16 != 0:
            raise ValueError(f"Block size must be a positive multiple of 16: {v}")
        return v
