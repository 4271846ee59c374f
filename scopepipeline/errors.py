"""
Exceptions raised by the capture pipeline.

A cancelled capture is not an error and has no exception here; see
``capture.CaptureCancelled``.
"""

from pathlib import Path


class ScopeError(Exception):
    """Base class for pipeline failures."""


class CaptureTimeout(ScopeError):
    """The capture device did not report back within the allowed wait."""

    def __init__(self, destination: Path, timeout: float) -> None:
        self.destination = Path(destination)
        self.timeout = timeout
        super().__init__(
            f"Capture device did not respond within {timeout:g}s (destination: {self.destination})"
        )


class CaptureFailure(ScopeError):
    """The capture device broke instead of producing or declining a photo."""

    def __init__(self, destination: Path, reason: str = "") -> None:
        self.destination = Path(destination)
        self.reason = reason
        message = f"Capture failed (destination: {self.destination})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MetadataReadFailure(ScopeError):
    """The image file could not be opened to read its metadata."""

    def __init__(self, path: Path, reason: str = "") -> None:
        self.path = Path(path)
        message = f"Cannot open image file: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class DecodeError(ScopeError):
    """The image file is corrupt or unreadable as pixels."""

    def __init__(self, path: Path, reason: str = "") -> None:
        self.path = Path(path)
        message = f"Failed to decode image: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
