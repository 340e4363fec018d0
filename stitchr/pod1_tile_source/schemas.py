"""
Schemas for tile source module
"""

import re
from typing import Optional, Tuple
from pydantic import BaseModel, Field, validator


class TileSourceConfig(BaseModel):
    """Where tiles come from and how they are prepared"""
    directory: Optional[str] = Field(default=None, description="Directory scanned for TIFF tiles")
    list_file: Optional[str] = Field(default=None, description="Text file listing one tile path per line")
    regex: Optional[str] = Field(default=None, description="Regex searched in tile file names")
    downsample: int = Field(default=1, description="Integer downsample factor")
    extensions: Tuple[str, ...] = Field(default=(".tif", ".tiff"), description="Accepted file extensions")

    @validator('downsample')
    def validate_downsample(cls, v):
        """Validate downsample factor"""
        if v < 1:
            raise ValueError(f"downsample factor must be >= 1: {v}")
        return v

    @validator('regex')
    def validate_regex(cls, v, values):
        """Validate filename filter, which only applies to directory scans"""
        if values.get('list_file'):
            return None
        if v:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid regex: {e}")
        return v or None

    @property
    def pattern(self) -> Optional["re.Pattern"]:
        """Compiled filename filter"""
        return re.compile(self.regex) if self.regex else None


class TileRecord(BaseModel):
    """A decoded tile as it entered the mosaic"""
    index: int
    file_path: str
    source_size: Tuple[int, int]  # width, height on disk
    size: Tuple[int, int]  # width, height after downsampling
    bands: int = 1
    source_dtype: str = "uint16"
