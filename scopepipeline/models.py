"""
Core data types: captured files, orientation tags, and pixel buffers.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from PIL import Image

# Fixed output format handed to OCR: 8-bit R, G, B, A in that byte order
CANONICAL_MODE = "RGBA"


@dataclass(frozen=True)
class CapturedImage:
    """A photo written to disk by the capture device."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))


class OrientationTag(Enum):
    """Orientation read from EXIF, valued by its EXIF orientation code.

    Only the four pure rotations are modelled. Mirrored codes (2, 4, 5, 7)
    are treated as NORMAL.
    """

    NORMAL = 1
    ROTATE_180 = 3
    ROTATE_90 = 6
    ROTATE_270 = 8

    @classmethod
    def from_exif(cls, value: object) -> "OrientationTag":
        """Map a raw EXIF orientation value to a tag, defaulting to NORMAL."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.NORMAL

    @property
    def degrees(self) -> int:
        """Clockwise rotation needed to make the image upright."""
        return _DEGREES[self]

    @property
    def inverse(self) -> "OrientationTag":
        """Tag whose rotation undoes this one."""
        return _BY_DEGREES[(360 - self.degrees) % 360]


_DEGREES = {
    OrientationTag.NORMAL: 0,
    OrientationTag.ROTATE_90: 90,
    OrientationTag.ROTATE_180: 180,
    OrientationTag.ROTATE_270: 270,
}
_BY_DEGREES = {degrees: tag for tag, degrees in _DEGREES.items()}


@dataclass(frozen=True)
class PixelBuffer:
    """A decoded raster image.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        mode: Pillow mode string describing the pixel layout (e.g. "RGB", "RGBA")
        data: Row-major pixel bytes as produced by ``Image.tobytes()``
    """

    width: int
    height: int
    mode: str
    data: bytes

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        """Copy a loaded Pillow image into a buffer."""
        return cls(width=img.width, height=img.height, mode=img.mode, data=img.tobytes())

    def to_image(self) -> Image.Image:
        """Build a new Pillow image from the buffer."""
        return Image.frombytes(self.mode, (self.width, self.height), self.data)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def getpixel(self, x: int, y: int):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        return self.to_image().getpixel((x, y))

    @property
    def is_canonical(self) -> bool:
        """True if the buffer is RGBA with every alpha byte at 255."""
        if self.mode != CANONICAL_MODE:
            return False
        alpha = self.data[3::4]
        return len(alpha) == self.width * self.height and alpha.count(255) == len(alpha)
