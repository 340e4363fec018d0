"""
Command line interface for stitchr
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .common.config import settings
from .common.exceptions import StitchError
from .pod1_tile_source import TileSourceConfig
from .pod4_assembly import GridSpec
from .pod5_export import ExportConfig
from .pipeline import StitchPipeline, StitchRequest

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Configure root logging for a CLI run"""
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stitchr",
        description="Assemble a snake-scanned grid of TIFF tiles into one grayscale mosaic"
    )

    parser.add_argument(
        '--dir',
        type=str,
        default=None,
        help='Directory containing images (required unless using --list)'
    )
    parser.add_argument(
        '--list',
        dest='list_file',
        type=str,
        default=None,
        help='Optional file containing list of images'
    )
    parser.add_argument(
        '--regex',
        type=str,
        default=None,
        help='Optional regex to filter filenames in directory'
    )
    parser.add_argument(
        '--rows',
        type=int,
        default=0,
        help='Number of rows in mosaic'
    )
    parser.add_argument(
        '--cols',
        type=int,
        default=0,
        help='Number of columns in mosaic'
    )
    parser.add_argument(
        '--overlapX',
        dest='overlap_x',
        type=int,
        default=0,
        help='Overlap in X (pixels)'
    )
    parser.add_argument(
        '--overlapY',
        dest='overlap_y',
        type=int,
        default=0,
        help='Overlap in Y (pixels)'
    )
    parser.add_argument(
        '--downsample',
        type=int,
        default=settings.downsample,
        help='Downsample factor (integer >=1)'
    )
    parser.add_argument(
        '--out',
        type=str,
        default=settings.output_path,
        help='Output TIFF file'
    )
    parser.add_argument(
        '--snake',
        type=str,
        default=settings.scan_mode,
        help='Snake pattern direction: vertical (default) or horizontal'
    )
    parser.add_argument(
        '--blend',
        type=str,
        choices=['sum', 'linear'],
        default=settings.composite_policy,
        help='Overlap compositing: sum (saturating add) or linear (feathered blend)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=settings.max_workers,
        help='Number of tile decoding threads'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=settings.log_level,
        help='Logging level'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars'
    )

    return parser


def _usage_error(parser: argparse.ArgumentParser, message: str) -> int:
    print(f"Error: {message}")
    parser.print_help()
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI, returning the process exit status"""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv

    # If no flags were provided, show usage and exit
    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)

    if args.rows <= 0 or args.cols <= 0:
        return _usage_error(parser, "rows and cols must be > 0")
    if args.downsample <= 0:
        return _usage_error(parser, "downsample factor must be >= 1")
    if not args.list_file and not args.dir:
        return _usage_error(parser, "either --dir or --list must be specified")
    if args.regex and not args.list_file:
        try:
            re.compile(args.regex)
        except re.error as e:
            return _usage_error(parser, f"invalid regex: {e}")

    setup_logging(args.log_level, settings.log_file)

    try:
        request = StitchRequest(
            source=TileSourceConfig(
                directory=args.dir,
                list_file=args.list_file,
                regex=args.regex,
                downsample=args.downsample
            ),
            grid=GridSpec(
                rows=args.rows,
                cols=args.cols,
                overlap_x=args.overlap_x,
                overlap_y=args.overlap_y,
                scan_mode=args.snake
            ),
            policy=args.blend,
            output_path=args.out,
            export=ExportConfig(
                compression=settings.compression,
                predictor=settings.predictor
            )
        )
        pipeline = StitchPipeline(
            max_workers=args.workers,
            show_progress=settings.show_progress and not args.no_progress
        )
        result = pipeline.run(request)
    except (StitchError, ValidationError, ValueError, OSError) as e:
        logger.error(f"Stitching failed: {e}")
        return 1

    print(f"Mosaic saved as {result.output_path} (grayscale TIFF)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
