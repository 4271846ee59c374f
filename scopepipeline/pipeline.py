"""
Main pipeline orchestration: capture, read orientation, normalize, hand off.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .capture import CaptureCancelled, CaptureDevice, CaptureOutcome, request_capture
from .checkpoint import CaptureCheckpoint
from .config import PipelineConfig
from .errors import CaptureFailure, CaptureTimeout, DecodeError, MetadataReadFailure
from .metadata import read_orientation
from .models import CapturedImage, OrientationTag, PixelBuffer
from .normalizer import normalize
from .preprocessor import LevelsCorrection

logger = logging.getLogger(__name__)

OCRConsumer = Callable[[PixelBuffer], None]
Notifier = Callable[[CaptureOutcome], None]


class PipelineStatus(Enum):
    """Terminal outcome of one pipeline run."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    CAPTURE_FAILED = "capture_failed"
    UNREADABLE = "unreadable"
    DECODE_FAILED = "decode_failed"


@dataclass
class PipelineResult:
    """Result of running the pipeline once."""

    status: PipelineStatus
    image: CapturedImage | None
    orientation: OrientationTag | None
    buffer: PixelBuffer | None
    error: Exception | None
    message: str

    @property
    def success(self) -> bool:
        return self.status is PipelineStatus.COMPLETED


class ScanPipeline:
    """Orchestrator for a single capture-to-OCR-input run.

    Usage:
        config = PipelineConfig(destination="./scope/ocr.jpg")
        device = CommandCaptureDevice(["libcamera-still", "-o", "{output}"])
        pipeline = ScanPipeline(config, device, consumer=ocr_engine.recognize)
        result = pipeline.run()
    """

    def __init__(
        self,
        config: PipelineConfig,
        device: CaptureDevice,
        consumer: OCRConsumer | None = None,
        notify: Notifier | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration
            device: Capture device that writes photos to disk
            consumer: Receives the normalized buffer (the OCR stage)
            notify: Told when a capture completes or is cancelled
        """
        self.config = config
        self.device = device
        self.consumer = consumer
        self.notify = notify
        self.levels = LevelsCorrection(brightness=config.brightness, contrast=config.contrast)
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Ensure logging is configured.

        Only sets up a basic config if no handlers are configured,
        allowing the CLI to control logging setup.
        """
        if not logging.root.handlers:
            logging.basicConfig(
                level=logging.INFO,
                format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )

    def run(self) -> PipelineResult:
        """Capture a photo and produce the OCR-ready buffer.

        Returns:
            PipelineResult describing how the run ended
        """
        checkpoint_path = self.config.checkpoint_path
        destination = self.config.destination

        # A new capture supersedes any pending one
        CaptureCheckpoint(destination, taken=False).save(checkpoint_path)

        try:
            outcome = request_capture(self.device, destination, self.config.capture_timeout)
        except CaptureTimeout as e:
            CaptureCheckpoint.clear(checkpoint_path)
            return PipelineResult(
                status=PipelineStatus.TIMED_OUT,
                image=None,
                orientation=None,
                buffer=None,
                error=e,
                message=str(e),
            )
        except CaptureFailure as e:
            CaptureCheckpoint.clear(checkpoint_path)
            return PipelineResult(
                status=PipelineStatus.CAPTURE_FAILED,
                image=None,
                orientation=None,
                buffer=None,
                error=e,
                message=str(e),
            )
        except Exception:
            CaptureCheckpoint.clear(checkpoint_path)
            raise

        if isinstance(outcome, CaptureCancelled):
            CaptureCheckpoint.clear(checkpoint_path)
            self._notify(outcome)
            return PipelineResult(
                status=PipelineStatus.CANCELLED,
                image=None,
                orientation=None,
                buffer=None,
                error=None,
                message="Capture cancelled",
            )

        CaptureCheckpoint(destination, taken=True).save(checkpoint_path)
        self._notify(outcome)
        return self.process(outcome)

    def resume(self) -> PipelineResult | None:
        """Finish a run interrupted after the photo was taken.

        Returns:
            Result of the resumed run, or None if nothing was pending
        """
        checkpoint = CaptureCheckpoint.load(self.config.checkpoint_path)
        if checkpoint is None or not checkpoint.taken:
            logger.info("No pending capture to resume")
            return None

        logger.info(f"Resuming normalization of {checkpoint.destination}")
        return self.process(CapturedImage(checkpoint.destination))

    def process(self, image: CapturedImage) -> PipelineResult:
        """Run the post-capture stages on an image already on disk.

        Args:
            image: Captured image to normalize

        Returns:
            PipelineResult with the normalized buffer on success
        """
        checkpoint_path = self.config.checkpoint_path

        try:
            orientation = read_orientation(image)
        except MetadataReadFailure as e:
            logger.error(str(e))
            CaptureCheckpoint.clear(checkpoint_path)
            return PipelineResult(
                status=PipelineStatus.UNREADABLE,
                image=image,
                orientation=None,
                buffer=None,
                error=e,
                message=str(e),
            )

        logger.info(f"Orientation: {orientation.name} (rotate {orientation.degrees} deg)")

        try:
            buffer = normalize(image, orientation, self.config.downsample_factor)
        except DecodeError as e:
            logger.error(str(e))
            CaptureCheckpoint.clear(checkpoint_path)
            return PipelineResult(
                status=PipelineStatus.DECODE_FAILED,
                image=image,
                orientation=orientation,
                buffer=None,
                error=e,
                message=str(e),
            )

        buffer = self.levels.apply(buffer)

        if self.consumer is not None:
            self.consumer(buffer)

        CaptureCheckpoint.clear(checkpoint_path)
        logger.info(f"Normalized {image.path.name} to {buffer.width}x{buffer.height} {buffer.mode}")

        return PipelineResult(
            status=PipelineStatus.COMPLETED,
            image=image,
            orientation=orientation,
            buffer=buffer,
            error=None,
            message=f"Photo ready for OCR ({buffer.width}x{buffer.height})",
        )

    def _notify(self, outcome: CaptureOutcome) -> None:
        if self.notify is not None:
            self.notify(outcome)
