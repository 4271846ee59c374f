"""
Image opening with the pixel limit applied to the decoded size.

Pillow refuses to open a file whose header declares more than twice
``Image.MAX_IMAGE_PIXELS`` pixels. Reading metadata never allocates the
raster, and a subsampled JPEG decode allocates only the scaled one, so files
are opened without that check and ``check_pixel_limit`` is applied to the
size about to be decoded instead.
"""

import threading
from contextlib import contextmanager

from PIL import Image

# Image.MAX_IMAGE_PIXELS is module-global
_limit_lock = threading.Lock()


@contextmanager
def open_unchecked(fp):
    """Open an image like ``Image.open`` but skip the open-time pixel limit."""
    with _limit_lock:
        limit = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            img = Image.open(fp)
        finally:
            Image.MAX_IMAGE_PIXELS = limit

    with img:
        yield img


def check_pixel_limit(size: tuple[int, int]) -> None:
    """Raise ``Image.DecompressionBombError`` if decoding ``size`` is over the limit.

    Uses the same threshold Pillow applies when opening: twice
    ``Image.MAX_IMAGE_PIXELS``. A limit of None disables the check.
    """
    limit = Image.MAX_IMAGE_PIXELS
    if limit is None:
        return

    pixels = size[0] * size[1]
    if pixels > 2 * limit:
        raise Image.DecompressionBombError(
            f"Decoding {size[0]}x{size[1]} ({pixels} pixels) exceeds the limit of {2 * limit} pixels"
        )
