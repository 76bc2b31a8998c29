"""
SpatialExistence services.

Collection state machine and the artwork asset pipeline.
"""

from spatialexistence.services.lifecycle import (
    EngineCheckpoint,
    TokenLifecycleEngine,
    capture_events,
    get_engine,
    install_engine,
    reset_engine,
)
from spatialexistence.services.metadata_builder import (
    build_metadata,
    generate_metadata,
    metadata_filename,
    split_pointer_index,
)
from spatialexistence.services.svg_converter import (
    SourceImage,
    convert_images,
    find_source_images,
    image_to_svg,
    parse_source_name,
    pointer_index,
)

__all__ = [
    # Lifecycle engine
    "EngineCheckpoint",
    "TokenLifecycleEngine",
    "capture_events",
    "get_engine",
    "install_engine",
    "reset_engine",
    # Asset pipeline: rasters -> embedded SVG blobs
    "SourceImage",
    "convert_images",
    "find_source_images",
    "image_to_svg",
    "parse_source_name",
    "pointer_index",
    # Asset pipeline: blobs -> metadata documents
    "build_metadata",
    "generate_metadata",
    "metadata_filename",
    "split_pointer_index",
]
