"""
Orientation metadata reading.

A missing or broken EXIF block is common on camera output and must not
block normalization, so anything short of an unopenable file reads as NORMAL.
"""

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import Base

from .errors import MetadataReadFailure
from .imaging import open_unchecked
from .models import CapturedImage, OrientationTag

logger = logging.getLogger(__name__)

ORIENTATION_TAG_ID = Base.Orientation  # 0x0112

# EXIF codes for flipped/transposed images; not rotated
MIRRORED_ORIENTATIONS = frozenset({2, 4, 5, 7})


def read_orientation(image: CapturedImage | Path) -> OrientationTag:
    """Read the EXIF orientation of a captured image.

    Args:
        image: Captured image (or path to it)

    Returns:
        Orientation tag, NORMAL when the metadata is absent or unusable

    Raises:
        MetadataReadFailure: If the file cannot be opened at all
    """
    path = image.path if isinstance(image, CapturedImage) else Path(image)

    try:
        fh = path.open("rb")
    except OSError as e:
        raise MetadataReadFailure(path, e.strerror or str(e)) from e

    with fh:
        raw = _read_raw_orientation(fh, path)

    if raw is None:
        logger.debug(f"No orientation tag in {path.name}, assuming upright")
        return OrientationTag.NORMAL

    if raw in MIRRORED_ORIENTATIONS:
        logger.warning(f"Mirrored orientation {raw} in {path.name} is not supported, treating as upright")
        return OrientationTag.NORMAL

    tag = OrientationTag.from_exif(raw)
    if tag is OrientationTag.NORMAL and raw != OrientationTag.NORMAL.value:
        logger.debug(f"Unrecognized orientation value {raw!r} in {path.name}, assuming upright")

    logger.debug(f"Orientation of {path.name}: {tag.name} ({tag.degrees} deg)")
    return tag


def _read_raw_orientation(fh, path: Path):
    """Return the raw orientation value from an open file, or None."""
    try:
        # Only headers are parsed here, so the pixel limit does not apply
        with open_unchecked(fh) as img:
            exif = img.getexif()
            if not exif:
                return None
            return exif.get(ORIENTATION_TAG_ID)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        logger.debug(f"Could not read EXIF from {path}: {e}")
        return None
