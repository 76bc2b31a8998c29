"""
Generate per-token metadata documents.

Wraps 1.b64 … 12.b64 into 1a.json … 4c.json, one document per token
and phase.
"""

import argparse
import logging
from pathlib import Path

from spatialexistence.config import settings
from spatialexistence.services.metadata_builder import generate_metadata

logger = logging.getLogger(__name__)


def run_generate(svg_dir: Path, metadata_dir: Path) -> list[Path]:
    """Write all metadata documents and report how many were written."""
    logger.info("Generating metadata from %s...", svg_dir)

    try:
        written = generate_metadata(svg_dir, metadata_dir)
    except Exception as e:
        logger.error("Failed to generate metadata: %s", e)
        raise

    logger.info("Wrote %d metadata documents to %s", len(written), metadata_dir)
    return written


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(description="Wrap SVG blobs into metadata JSON")
    parser.add_argument(
        "--svgs",
        type=Path,
        default=Path(settings.svg_dir),
        help="Directory holding 1.b64 … 12.b64",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=Path(settings.metadata_dir),
        help="Output directory for metadata JSON",
    )
    args = parser.parse_args()

    run_generate(args.svgs, args.out)


if __name__ == "__main__":
    main()
