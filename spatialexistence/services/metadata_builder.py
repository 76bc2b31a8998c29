"""
Metadata document generation.

Wraps each embedded-SVG blob 1.b64 … 12.b64 into the metadata document
served for its (token, phase) pair, written as {token_id}{suffix}.json.
"""

import json
import logging
from pathlib import Path

from spatialexistence.config import PHASE_NAMES, PHASE_SUFFIXES, TOTAL_SUPPLY, settings
from spatialexistence.models.failure import AssetPipelineError
from spatialexistence.models.metadata import TokenMetadata

logger = logging.getLogger(__name__)

ARTWORK_TYPE = "Generative Artwork"


def split_pointer_index(index: int) -> tuple[int, int]:
    """
    Inverse of the pointer index.

    Returns:
        (token_id, phase) for an index in 1..12
    """
    phase_count = len(PHASE_SUFFIXES)
    if not 1 <= index <= TOTAL_SUPPLY * phase_count:
        raise ValueError(f"Pointer index out of range: {index}")
    return (index - 1) // phase_count + 1, (index - 1) % phase_count


def metadata_filename(token_id: int, phase: int) -> str:
    return f"{token_id}{PHASE_SUFFIXES[phase]}.json"


def build_metadata(
    token_id: int,
    phase: int,
    svg_b64: str,
    collection_name: str = settings.collection_name,
    description: str = settings.collection_description,
) -> TokenMetadata:
    """Build the metadata document for one token in one phase."""
    return TokenMetadata(
        name=f"{collection_name} #{token_id}",
        description=description,
        image=f"data:image/svg+xml;base64,{svg_b64}",
        attributes=[
            {"trait_type": "Type", "value": ARTWORK_TYPE},
            {"trait_type": "Phase", "value": PHASE_NAMES[phase]},
        ],
    )


def generate_metadata(
    svg_dir: Path,
    metadata_dir: Path,
    collection_name: str = settings.collection_name,
    description: str = settings.collection_description,
) -> list[Path]:
    """
    Write all twelve metadata documents.

    Every blob must exist; a missing one aborts the run.

    Returns:
        Paths of the written documents in pointer-index order
    """
    metadata_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for index in range(1, TOTAL_SUPPLY * len(PHASE_SUFFIXES) + 1):
        blob_path = svg_dir / f"{index}.b64"
        try:
            svg_b64 = blob_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError as e:
            raise AssetPipelineError(str(blob_path), "blob not found") from e

        token_id, phase = split_pointer_index(index)
        metadata = build_metadata(token_id, phase, svg_b64, collection_name, description)

        out_path = metadata_dir / metadata_filename(token_id, phase)
        out_path.write_text(json.dumps(metadata.to_dict(), indent=2), encoding="utf-8")
        logger.info("Wrote %s", out_path)
        written.append(out_path)

    return written
