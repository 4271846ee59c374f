"""
OCR preprocessing: brightness and contrast correction.

Both corrections are linear levels remaps applied with a lookup table:
values inside an input range are stretched onto an output range and values
outside it clamp to the output bounds.
"""

import logging
from dataclasses import dataclass

from .models import CANONICAL_MODE, PixelBuffer

logger = logging.getLogger(__name__)

MAX_BRIGHTNESS = 255
MAX_CONTRAST = 127


def levels_table(in_range: tuple[int, int], out_range: tuple[int, int]) -> list[int]:
    """Build a 256-entry table mapping in_range linearly onto out_range.

    Args:
        in_range: (min, max) input values
        out_range: (min, max) output values

    Returns:
        Lookup table usable with ``Image.point``
    """
    in_min, in_max = in_range
    out_min, out_max = out_range

    k = 0.0
    b = 0.0
    if in_max != in_min:
        k = (out_max - out_min) / (in_max - in_min)
        b = out_min - k * in_min

    table = []
    for v in range(256):
        if v >= in_max:
            table.append(out_max)
        elif v <= in_min:
            table.append(out_min)
        else:
            table.append(int(k * v + b))
    return table


def brightness_table(adjust: int) -> list[int]:
    """Lookup table shifting every level by ``adjust`` (clamped to +/-255)."""
    adjust = max(-MAX_BRIGHTNESS, min(MAX_BRIGHTNESS, adjust))
    if adjust > 0:
        return levels_table((0, 255 - adjust), (adjust, 255))
    return levels_table((-adjust, 255), (0, 255 + adjust))


def contrast_table(factor: int) -> list[int]:
    """Lookup table stretching (factor > 0) or squeezing (factor < 0) levels."""
    factor = max(-MAX_CONTRAST, min(MAX_CONTRAST, factor))
    if factor > 0:
        return levels_table((factor, 255 - factor), (0, 255))
    return levels_table((0, 255), (-factor, 255 + factor))


@dataclass
class LevelsCorrection:
    """Brightness then contrast correction for OCR input.

    Attributes:
        brightness: Level shift in [-255, 255]; 0 leaves the image unchanged
        contrast: Contrast factor in [-127, 127]; 0 leaves the image unchanged
    """

    brightness: int = 0
    contrast: int = 0

    def __post_init__(self) -> None:
        self.brightness = max(-MAX_BRIGHTNESS, min(MAX_BRIGHTNESS, int(self.brightness)))
        self.contrast = max(-MAX_CONTRAST, min(MAX_CONTRAST, int(self.contrast)))

    @property
    def is_identity(self) -> bool:
        return self.brightness == 0 and self.contrast == 0

    def table(self) -> list[int]:
        """Combined 256-entry table: brightness first, then contrast."""
        bright = brightness_table(self.brightness)
        contrast = contrast_table(self.contrast)
        return [contrast[v] for v in bright]

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Apply the correction to the colour channels of an RGBA buffer.

        Alpha is left untouched.

        Raises:
            ValueError: If the buffer is not in the canonical RGBA mode
        """
        if self.is_identity:
            return buffer

        if buffer.mode != CANONICAL_MODE:
            raise ValueError(f"Levels correction expects {CANONICAL_MODE} input, got {buffer.mode}")

        channel = self.table()
        identity = list(range(256))
        corrected = buffer.to_image().point(channel * 3 + identity)

        logger.debug(f"Applied levels correction (brightness={self.brightness}, contrast={self.contrast})")
        return PixelBuffer.from_image(corrected)
