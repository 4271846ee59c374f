"""Shared fixtures for building synthetic photos."""

from pathlib import Path

import pytest
from PIL import Image

ORIENTATION = 0x0112


def make_photo(
    path: Path,
    size: tuple[int, int],
    orientation: int | None = None,
    mode: str = "RGB",
    fmt: str | None = None,
) -> Path:
    """Write a gradient test image, optionally with an EXIF orientation."""
    width, height = size
    img = Image.new(mode, size)
    if mode in ("RGB", "RGBA"):
        img.putdata([
            (x * 255 // max(1, width - 1), y * 255 // max(1, height - 1), 128) + ((255,) if mode == "RGBA" else ())
            for y in range(height)
            for x in range(width)
        ])

    kwargs = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[ORIENTATION] = orientation
        kwargs["exif"] = exif.tobytes()

    img.save(path, fmt, **kwargs)
    return path


@pytest.fixture
def photo_factory(tmp_path):
    """Create photos inside the test's temporary directory."""

    def factory(name: str = "photo.jpg", size=(48, 64), orientation=None, mode="RGB", fmt=None) -> Path:
        return make_photo(tmp_path / name, size, orientation=orientation, mode=mode, fmt=fmt)

    return factory


@pytest.fixture
def corrupt_jpeg(tmp_path) -> Path:
    """A JPEG cut off halfway through its pixel data."""
    source = make_photo(tmp_path / "full.jpg", (200, 200))
    data = source.read_bytes()
    path = tmp_path / "truncated.jpg"
    path.write_bytes(data[: len(data) // 2])
    return path
