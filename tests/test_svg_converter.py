"""Tests for raster to embedded-SVG conversion."""

import base64
import re
from pathlib import Path

import pytest
from PIL import Image

from spatialexistence.models.failure import AssetPipelineError, FailureKind
from spatialexistence.services.svg_converter import (
    convert_images,
    find_source_images,
    image_to_svg,
    minify_svg,
    parse_source_name,
    pointer_index,
)


def _write_png(path: Path, size: tuple[int, int] = (8, 6), color=(200, 40, 40)) -> Path:
    Image.new("RGB", size, color).save(path, format="PNG")
    return path


@pytest.fixture
def originals(tmp_path: Path) -> Path:
    """Directory with all twelve source images plus some noise."""
    directory = tmp_path / "originals"
    directory.mkdir()
    for token_id in range(1, 5):
        for suffix in "abc":
            _write_png(directory / f"{token_id}{suffix}.png")
    _write_png(directory / "5a.png")
    _write_png(directory / "1d.png")
    (directory / "notes.txt").write_text("not an image")
    return directory


class TestSourceNames:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("1a.png", (1, 0)), ("2b.png", (2, 1)), ("4c.png", (4, 2))],
    )
    def test_matching_names(self, name: str, expected: tuple[int, int]) -> None:
        assert parse_source_name(name) == expected

    @pytest.mark.parametrize("name", ["0a.png", "5a.png", "1d.png", "1a.jpg", "11a.png", "a1.png"])
    def test_non_matching_names(self, name: str) -> None:
        assert parse_source_name(name) is None

    def test_pointer_index_layout(self) -> None:
        assert pointer_index(1, 0) == 1
        assert pointer_index(1, 2) == 3
        assert pointer_index(2, 0) == 4
        assert pointer_index(4, 2) == 12

    def test_find_ignores_other_files(self, originals: Path) -> None:
        sources = find_source_images(originals)

        assert len(sources) == 12
        assert [s.pointer_index for s in sources] == list(range(1, 13))
        assert sources[4].path.name == "2b.png"

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(AssetPipelineError) as exc_info:
            find_source_images(tmp_path / "absent")

        assert exc_info.value.kind == FailureKind.INVALID_INPUT


class TestImageToSvg:
    def test_embeds_png_with_original_size(self, tmp_path: Path) -> None:
        path = _write_png(tmp_path / "1a.png", size=(32, 20))

        svg = image_to_svg(path)

        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="32" height="20">')
        assert svg.endswith("</svg>")
        match = re.search(r'href="data:image/png;base64,([^"]+)"', svg)
        assert match is not None

        png_bytes = base64.b64decode(match.group(1))
        assert png_bytes.startswith(b"\x89PNG")

    def test_unreadable_image(self, tmp_path: Path) -> None:
        path = tmp_path / "1a.png"
        path.write_bytes(b"not a png")

        with pytest.raises(AssetPipelineError):
            image_to_svg(path)

    def test_minify_collapses_whitespace(self) -> None:
        markup = """
          <svg  xmlns="x">
            <image href="y"/>
          </svg>"""

        assert minify_svg(markup) == '<svg xmlns="x"><image href="y"/></svg>'


class TestConvertImages:
    def test_writes_twelve_blobs(self, originals: Path, tmp_path: Path) -> None:
        svg_dir = tmp_path / "svgs"

        written = convert_images(originals, svg_dir)

        assert [p.name for p in written] == [f"{i}.b64" for i in range(1, 13)]
        assert sorted(p.name for p in svg_dir.iterdir()) == sorted(p.name for p in written)

    def test_blob_decodes_to_svg(self, originals: Path, tmp_path: Path) -> None:
        written = convert_images(originals, tmp_path / "svgs")

        markup = base64.b64decode(written[0].read_text()).decode("utf-8")

        assert markup.startswith("<svg")
        assert 'width="8" height="6"' in markup

    def test_partial_set(self, tmp_path: Path) -> None:
        originals = tmp_path / "originals"
        originals.mkdir()
        _write_png(originals / "3b.png")

        written = convert_images(originals, tmp_path / "svgs")

        assert [p.name for p in written] == ["8.b64"]
