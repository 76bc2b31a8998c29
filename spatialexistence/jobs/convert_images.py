"""
Convert source artwork into embedded-SVG blobs.

Reads 1a.png … 4c.png from the originals directory and writes
1.b64 … 12.b64 to the svgs directory.
"""

import argparse
import logging
from pathlib import Path

from spatialexistence.config import settings
from spatialexistence.services.svg_converter import convert_images

logger = logging.getLogger(__name__)


def run_convert(originals_dir: Path, svg_dir: Path) -> list[Path]:
    """Convert all source images and report how many were written."""
    logger.info("Converting images from %s...", originals_dir)

    try:
        written = convert_images(originals_dir, svg_dir)
    except Exception as e:
        logger.error("Failed to convert images: %s", e)
        raise

    logger.info("Converted %d images into %s", len(written), svg_dir)
    return written


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(description="Convert artwork PNGs to base64 SVG blobs")
    parser.add_argument(
        "--originals",
        type=Path,
        default=Path(settings.originals_dir),
        help="Directory holding 1a.png … 4c.png",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=Path(settings.svg_dir),
        help="Output directory for .b64 blobs",
    )
    args = parser.parse_args()

    run_convert(args.originals, args.out)


if __name__ == "__main__":
    main()
