"""
Configuration management for stitchr
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings"""

    # Layout
    scan_mode: str = Field(
        default="vertical",
        description="Snake pattern direction (vertical or horizontal)"
    )
    composite_policy: str = Field(
        default="sum",
        description="Overlap compositing policy (sum or linear)"
    )
    canvas_dtype: str = Field(
        default="uint16",
        description="Accumulator dtype of assembler canvases; exported mosaics are always uint16"
    )

    # Input
    downsample: int = Field(
        default=1,
        description="Default downsample factor applied to every tile"
    )

    # Output
    output_path: str = Field(
        default="mosaic.tiff",
        description="Default output TIFF path"
    )
    compression: str = Field(
        default="deflate",
        description="TIFF compression method"
    )
    predictor: int = Field(
        default=2,
        description="TIFF predictor (2 = horizontal differencing)"
    )

    # Performance
    max_workers: int = Field(
        default=4,
        description="Maximum number of tile decoding threads"
    )
    show_progress: bool = Field(
        default=True,
        description="Show tqdm progress bars"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )

    class Config:
        env_prefix = "STITCHR_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Create global settings instance
settings = Settings()
