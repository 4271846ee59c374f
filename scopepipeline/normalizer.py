"""
Orientation normalization: decode, rotate upright, convert to RGBA.
"""

import logging
import math
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .imaging import check_pixel_limit, open_unchecked
from .models import CANONICAL_MODE, CapturedImage, OrientationTag, PixelBuffer

logger = logging.getLogger(__name__)

# Transpose operations are lossless and swap dimensions for quarter turns.
# Pillow's ROTATE_* constants are counter-clockwise.
_CLOCKWISE_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}

# Modes whose bytes only make sense together with a palette
_PALETTE_MODES = ("P", "PA")

# Modes Pillow converts straight to RGBA
_DIRECT_MODES = ("1", "L", "LA", "La", "RGB", "RGBA", "RGBa", "RGBX")

_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
    EOFError,
)


def _check_factor(downsample_factor: int) -> None:
    if isinstance(downsample_factor, bool) or not isinstance(downsample_factor, int):
        raise ValueError(f"downsample_factor must be an integer, got {downsample_factor!r}")
    if downsample_factor < 1:
        raise ValueError(f"downsample_factor must be >= 1, got {downsample_factor}")


def _decode_image(path: Path, downsample_factor: int) -> Image.Image:
    """Decode a file into a loaded Pillow image, subsampled by the factor.

    JPEG files are scaled during DCT decoding (``draft``) by the largest
    power of two that does not undershoot the target, so the full-size
    raster is never allocated. The result is then box-filtered to exactly
    ceil(W/N) x ceil(H/N). Palette images are expanded to RGBA.

    The Pillow pixel limit is checked against the size actually decoded,
    so a large JPEG can still be opened at a small enough factor.
    """
    with open_unchecked(path) as img:
        full_width, full_height = img.size
        target = (
            math.ceil(full_width / downsample_factor),
            math.ceil(full_height / downsample_factor),
        )

        if downsample_factor > 1:
            img.draft(img.mode, target)
        check_pixel_limit(img.size)
        img.load()

        if img.mode in _PALETTE_MODES:
            decoded = img.convert("RGBA")
        else:
            decoded = img.copy()

    if decoded.size != target:
        # Resample in a mode with full filter support
        if decoded.mode == "1":
            decoded = decoded.convert("L")
        elif decoded.mode.startswith("I;16"):
            decoded = decoded.convert("I")
        decoded = decoded.resize(target, Image.Resampling.BOX)

    logger.debug(
        f"Decoded {path.name}: {full_width}x{full_height} -> "
        f"{decoded.width}x{decoded.height} {decoded.mode} (factor {downsample_factor})"
    )
    return decoded


def decode(image: CapturedImage | Path, downsample_factor: int = 1) -> PixelBuffer:
    """Decode an image file into a raw (unrotated, native format) buffer.

    Args:
        image: Captured image (or path to it)
        downsample_factor: Integer >= 1; N decodes at ceil(W/N) x ceil(H/N)

    Returns:
        Raw pixel buffer

    Raises:
        DecodeError: If the file is missing, corrupt, not an image, or
            too large to decode at this factor
        ValueError: If downsample_factor is invalid
    """
    _check_factor(downsample_factor)
    path = image.path if isinstance(image, CapturedImage) else Path(image)

    try:
        img = _decode_image(path, downsample_factor)
    except _DECODE_ERRORS as e:
        raise DecodeError(path, str(e)) from e

    return PixelBuffer.from_image(img)


def rotate(buffer: PixelBuffer, tag: OrientationTag) -> PixelBuffer:
    """Rotate a buffer clockwise by the tag's angle without cropping."""
    degrees = tag.degrees
    if degrees == 0:
        return buffer

    rotated = buffer.to_image().transpose(_CLOCKWISE_TRANSPOSE[degrees])
    return PixelBuffer.from_image(rotated)


def to_canonical(buffer: PixelBuffer) -> PixelBuffer:
    """Convert a buffer to fully opaque 8-bit RGBA."""
    if buffer.is_canonical:
        return buffer

    img = buffer.to_image()

    if img.mode.startswith("I"):
        # 16/32-bit grayscale: keep the top 8 bits instead of clipping
        img = img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    elif img.mode == "F":
        img = img.convert("L")
    elif img.mode not in _DIRECT_MODES:
        # CMYK, YCbCr and friends go through RGB
        img = img.convert("RGB")

    img = img.convert(CANONICAL_MODE)
    img.putalpha(255)
    return PixelBuffer.from_image(img)


def normalize(
    image: CapturedImage | Path,
    tag: OrientationTag,
    downsample_factor: int = 1,
) -> PixelBuffer:
    """Decode, rotate upright, and convert an image to the canonical format.

    Args:
        image: Captured image (or path to it)
        tag: Orientation read from the image metadata
        downsample_factor: Integer >= 1 decode-time subsampling

    Returns:
        Upright RGBA buffer with opaque alpha

    Raises:
        DecodeError: If the file cannot be decoded
    """
    raw = decode(image, downsample_factor)
    upright = rotate(raw, tag)
    result = to_canonical(upright)

    logger.debug(
        f"Normalized {raw.width}x{raw.height} {raw.mode} "
        f"-> {result.width}x{result.height} {result.mode} (rotated {tag.degrees} deg)"
    )
    return result
