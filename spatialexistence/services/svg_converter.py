"""
Raster to embedded-SVG conversion.

Turns the twelve source images 1a.png … 4c.png into base64-encoded SVG
documents that wrap the (recompressed) PNG in an <image> tag, ready to be
referenced from metadata as a data URI.

Output naming follows a pointer index 1..12:
    1a -> 1.b64, 1b -> 2.b64, 1c -> 3.b64, 2a -> 4.b64, …, 4c -> 12.b64
"""

import base64
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from spatialexistence.config import PHASE_SUFFIXES, TOTAL_SUPPLY
from spatialexistence.models.failure import AssetPipelineError

logger = logging.getLogger(__name__)

SOURCE_PATTERN = re.compile(rf"^([1-{TOTAL_SUPPLY}])([{''.join(PHASE_SUFFIXES)}])\.png$")

SVG_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}">'
    '<image href="data:image/png;base64,{png}" width="{width}" height="{height}"/>'
    "</svg>"
)


@dataclass(frozen=True)
class SourceImage:
    """A source raster matched by name to its token and phase."""

    path: Path
    token_id: int
    phase: int

    @property
    def pointer_index(self) -> int:
        """Position 1..12 of this (token, phase) pair."""
        return pointer_index(self.token_id, self.phase)


def pointer_index(token_id: int, phase: int) -> int:
    return (token_id - 1) * len(PHASE_SUFFIXES) + phase + 1


def parse_source_name(filename: str) -> tuple[int, int] | None:
    """
    Match a source filename.

    Returns:
        (token_id, phase) for names like "3b.png", None otherwise
    """
    match = SOURCE_PATTERN.match(filename)
    if match is None:
        return None
    return int(match.group(1)), PHASE_SUFFIXES.index(match.group(2))


def find_source_images(originals_dir: Path) -> list[SourceImage]:
    """List source images in a directory, ordered by pointer index."""
    if not originals_dir.is_dir():
        raise AssetPipelineError(str(originals_dir), "originals directory not found")

    sources: list[SourceImage] = []
    for path in originals_dir.iterdir():
        parsed = parse_source_name(path.name)
        if parsed is None:
            continue
        token_id, phase = parsed
        sources.append(SourceImage(path=path, token_id=token_id, phase=phase))

    return sorted(sources, key=lambda s: s.pointer_index)


def minify_svg(markup: str) -> str:
    """Collapse whitespace between and inside tags."""
    markup = re.sub(r">\s+<", "><", markup.strip())
    return re.sub(r"\s{2,}", " ", markup)


def image_to_svg(path: Path) -> str:
    """
    Embed a raster image into minified SVG markup.

    The image keeps its original dimensions and is re-encoded as PNG at
    maximum compression.
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
            buffer = io.BytesIO()
            img.save(buffer, format="PNG", optimize=True, compress_level=9)
    except (OSError, UnidentifiedImageError) as e:
        raise AssetPipelineError(str(path), f"unreadable image: {e}") from e

    png_b64 = base64.b64encode(buffer.getvalue()).decode("ascii")
    return minify_svg(SVG_TEMPLATE.format(width=width, height=height, png=png_b64))


def encode_svg(markup: str) -> str:
    return base64.b64encode(markup.encode("utf-8")).decode("ascii")


def convert_images(originals_dir: Path, svg_dir: Path) -> list[Path]:
    """
    Convert every matching source image into an .b64 blob.

    Args:
        originals_dir: Directory holding 1a.png … 4c.png
        svg_dir: Output directory (created if missing)

    Returns:
        Paths of the written blobs, ordered by pointer index
    """
    sources = find_source_images(originals_dir)
    svg_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for source in sources:
        blob = encode_svg(image_to_svg(source.path))
        out_path = svg_dir / f"{source.pointer_index}.b64"
        out_path.write_text(blob, encoding="utf-8")
        logger.info("%s -> %s", source.path.name, out_path)
        written.append(out_path)

    return written
