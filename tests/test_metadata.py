"""Tests for orientation metadata reading."""

import logging

import pytest

from scopepipeline.errors import MetadataReadFailure
from scopepipeline.metadata import read_orientation
from scopepipeline.models import CapturedImage, OrientationTag


class TestReadOrientation:
    """Tests for read_orientation."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            (1, OrientationTag.NORMAL),
            (3, OrientationTag.ROTATE_180),
            (6, OrientationTag.ROTATE_90),
            (8, OrientationTag.ROTATE_270),
        ],
    )
    def test_reads_exif_orientation(self, photo_factory, code, expected):
        """EXIF orientation codes are read from JPEG files."""
        path = photo_factory(orientation=code)
        assert read_orientation(CapturedImage(path)) is expected

    def test_accepts_plain_path(self, photo_factory):
        """A bare path works as well as a CapturedImage."""
        path = photo_factory(orientation=6)
        assert read_orientation(path) is OrientationTag.ROTATE_90

    def test_reads_past_pixel_limit(self, photo_factory, monkeypatch):
        """Large photos still report their orientation; no pixels are decoded."""
        from PIL import Image

        path = photo_factory(size=(100, 100), orientation=6)
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        assert read_orientation(path) is OrientationTag.ROTATE_90
        assert Image.MAX_IMAGE_PIXELS == 1000

    def test_no_metadata_container(self, photo_factory):
        """A file without any EXIF block reads as NORMAL."""
        path = photo_factory("plain.png", fmt="PNG")
        assert read_orientation(path) is OrientationTag.NORMAL

    def test_exif_without_orientation(self, tmp_path):
        """EXIF present but lacking the orientation field reads as NORMAL."""
        from PIL import Image

        exif = Image.Exif()
        exif[0x010F] = "Scope Camera"  # Make
        path = tmp_path / "make_only.jpg"
        Image.new("RGB", (8, 8)).save(path, exif=exif.tobytes())

        assert read_orientation(path) is OrientationTag.NORMAL

    @pytest.mark.parametrize("code", [2, 4, 5, 7])
    def test_mirrored_orientation_is_normal(self, photo_factory, code, caplog):
        """Mirrored orientations are not rotated and are logged."""
        path = photo_factory(orientation=code)
        with caplog.at_level(logging.WARNING, logger="scopepipeline.metadata"):
            assert read_orientation(path) is OrientationTag.NORMAL
        assert "Mirrored orientation" in caplog.text

    def test_not_an_image(self, tmp_path):
        """Unidentifiable content fails open to NORMAL."""
        path = tmp_path / "notes.jpg"
        path.write_bytes(b"this is not an image at all")
        assert read_orientation(path) is OrientationTag.NORMAL

    def test_truncated_file(self, corrupt_jpeg):
        """Corrupt pixel data does not affect metadata reading."""
        assert read_orientation(corrupt_jpeg) is OrientationTag.NORMAL

    def test_missing_file_raises(self, tmp_path):
        """A file that cannot be opened raises MetadataReadFailure."""
        path = tmp_path / "missing.jpg"
        with pytest.raises(MetadataReadFailure) as exc_info:
            read_orientation(path)
        assert exc_info.value.path == path

    def test_directory_raises(self, tmp_path):
        """A directory is not an openable file."""
        with pytest.raises(MetadataReadFailure):
            read_orientation(tmp_path)

    def test_does_not_modify_file(self, photo_factory):
        """Reading metadata leaves the file untouched."""
        path = photo_factory(orientation=8)
        before = path.read_bytes()
        read_orientation(path)
        assert path.read_bytes() == before
