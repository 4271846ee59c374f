"""
Configuration for the capture pipeline.
"""

from dataclasses import dataclass
from pathlib import Path

from .capture import DEFAULT_CAPTURE_TIMEOUT
from .preprocessor import MAX_BRIGHTNESS, MAX_CONTRAST


@dataclass
class PipelineConfig:
    """Configuration for the capture pipeline.

    Attributes:
        destination: Where the capture device writes the photo. Overwritten
            on every run; the parent directory must exist.

        # Decoding
        downsample_factor: Decode at 1/N resolution to bound memory use

        # Capture
        capture_timeout: Seconds to wait for the capture device

        # OCR preprocessing
        brightness: Brightness correction in [-255, 255] (0 = off)
        contrast: Contrast correction in [-127, 127] (0 = off)

        # Resumability
        checkpoint_file: Where to persist the pending-run checkpoint
            (defaults to a file beside the destination)
    """

    # Required
    destination: Path

    # Decoding
    downsample_factor: int = 4

    # Capture
    capture_timeout: float = DEFAULT_CAPTURE_TIMEOUT

    # OCR preprocessing
    brightness: int = 0
    contrast: int = 0

    # Resumability
    checkpoint_file: Path | None = None

    def __post_init__(self) -> None:
        """Validate and convert paths."""
        self.destination = Path(self.destination)

        if self.checkpoint_file:
            self.checkpoint_file = Path(self.checkpoint_file)

        if not self.destination.name:
            raise ValueError(f"destination must name a file, got {self.destination}")

        if isinstance(self.downsample_factor, bool) or not isinstance(self.downsample_factor, int):
            raise ValueError(f"downsample_factor must be an integer, got {self.downsample_factor!r}")

        if self.downsample_factor < 1:
            raise ValueError(f"downsample_factor must be >= 1, got {self.downsample_factor}")

        if self.capture_timeout <= 0:
            raise ValueError(f"capture_timeout must be > 0, got {self.capture_timeout}")

        if not -MAX_BRIGHTNESS <= self.brightness <= MAX_BRIGHTNESS:
            raise ValueError(
                f"brightness must be in [-{MAX_BRIGHTNESS}, {MAX_BRIGHTNESS}], got {self.brightness}"
            )

        if not -MAX_CONTRAST <= self.contrast <= MAX_CONTRAST:
            raise ValueError(f"contrast must be in [-{MAX_CONTRAST}, {MAX_CONTRAST}], got {self.contrast}")

    @property
    def checkpoint_path(self) -> Path:
        """Path of the resumable checkpoint file."""
        if self.checkpoint_file:
            return self.checkpoint_file
        return self.destination.with_name(f"{self.destination.name}.checkpoint.json")
