"""
Capture trigger and capture device adapters.

The device interaction is asynchronous: a device is asked to write a photo
to a path and reports back through a callback, possibly from another thread.
``request_capture`` turns that into a blocking call with a bounded wait.
"""

import logging
import shutil
import subprocess
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from .errors import CaptureFailure, CaptureTimeout
from .models import CapturedImage

logger = logging.getLogger(__name__)

DEFAULT_CAPTURE_TIMEOUT = 300.0  # seconds; the user may take a while to frame the shot

OUTPUT_PLACEHOLDER = "{output}"


class CaptureStatus(Enum):
    """What the capture device reported."""

    CAPTURED = "captured"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class CaptureCancelled:
    """The user or device declined to produce a photo."""

    destination: Path


CaptureOutcome = CapturedImage | CaptureCancelled
ResultCallback = Callable[[CaptureStatus], None]


class CaptureDevice(ABC):
    """An external camera or picker that can write a photo to a path."""

    @abstractmethod
    def request_capture(self, destination: Path, on_result: ResultCallback) -> None:
        """Start a capture that writes to ``destination``.

        Must return promptly and call ``on_result`` exactly once when the
        device finishes, from any thread. Any existing file at the
        destination is overwritten.
        """

    def abort(self) -> None:
        """Abandon the in-flight request, if any."""


def request_capture(
    device: CaptureDevice,
    destination: Path,
    timeout: float = DEFAULT_CAPTURE_TIMEOUT,
) -> CaptureOutcome:
    """Ask a device for a photo and wait for it.

    Args:
        device: Capture device to drive
        destination: Where the device must store the photo. The parent
            directory must already exist.
        timeout: Maximum seconds to wait for the device to report back

    Returns:
        CapturedImage on success, CaptureCancelled if the user backed out

    Raises:
        CaptureTimeout: If the device did not report within ``timeout``
        CaptureFailure: If the device could not be started or reported a
            failure
    """
    destination = Path(destination)
    done = threading.Event()
    reported: list[CaptureStatus] = []

    def on_result(status: CaptureStatus) -> None:
        if done.is_set():
            logger.warning(f"Capture device reported twice for {destination}, ignoring {status.value}")
            return
        reported.append(status)
        done.set()

    logger.info(f"Requesting capture to {destination}")
    try:
        device.request_capture(destination, on_result)
    except OSError as e:
        logger.error(f"Could not start capture device: {e}")
        raise CaptureFailure(destination, str(e)) from e

    if not done.wait(timeout):
        logger.error(f"Capture device did not respond within {timeout:g}s")
        device.abort()
        raise CaptureTimeout(destination, timeout)

    status = reported[0]
    if status is CaptureStatus.FAILED:
        logger.error(f"Capture device reported a failure for {destination}")
        raise CaptureFailure(destination, "capture device reported a failure")

    if status is CaptureStatus.CANCELLED:
        logger.info("User cancelled capture")
        return CaptureCancelled(destination)

    logger.info(f"Photo captured: {destination}")
    return CapturedImage(destination)


class CommandCaptureDevice(CaptureDevice):
    """Runs an external capture command such as ``libcamera-still``.

    Usage:
        device = CommandCaptureDevice(["libcamera-still", "-o", "{output}"])

    The ``{output}`` placeholder in any argument is replaced with the
    destination path. Exit status 0 with the file written counts as a
    capture and a non-zero exit as a cancellation. A program that cannot be
    started, or exits 0 without writing the file, is a failure.
    """

    def __init__(self, command: Sequence[str]) -> None:
        if not command:
            raise ValueError("command cannot be empty")
        self.command = list(command)
        self.process: subprocess.Popen | None = None
        self._lock = threading.Lock()

    def build_command(self, destination: Path) -> list[str]:
        return [arg.replace(OUTPUT_PLACEHOLDER, str(destination)) for arg in self.command]

    def request_capture(self, destination: Path, on_result: ResultCallback) -> None:
        cmd = self.build_command(destination)
        logger.info(f"Capture command: {' '.join(cmd)}")

        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )

        with self._lock:
            self.process = process

        thread = threading.Thread(
            target=self._wait,
            args=(process, destination, on_result),
            name="capture-command",
            daemon=True,
        )
        thread.start()

    def _wait(self, process: subprocess.Popen, destination: Path, on_result: ResultCallback) -> None:
        output, _ = process.communicate()

        with self._lock:
            aborted = self.process is not process
            if not aborted:
                self.process = None

        if aborted:
            logger.debug(f"Capture command for {destination} was aborted")
            return

        if process.returncode == 0 and destination.exists():
            on_result(CaptureStatus.CAPTURED)
            return

        if process.returncode == 0:
            logger.error(f"Capture command succeeded but wrote nothing to {destination}")
            on_result(CaptureStatus.FAILED)
            return

        logger.info(f"Capture command exited with status {process.returncode}")
        if output:
            logger.debug(f"Capture command output:\n{output[-2000:]}")
        on_result(CaptureStatus.CANCELLED)

    def abort(self) -> None:
        with self._lock:
            process = self.process
            self.process = None

        if process is None:
            return

        logger.info("Stopping capture command...")
        process.terminate()
        try:
            process.wait(timeout=10)
        except subprocess.TimeoutExpired:
            process.kill()


class ImportDevice(CaptureDevice):
    """Picks an existing photo, like a gallery picker.

    Copies ``source`` to the destination. A missing source counts as the
    user cancelling the picker.
    """

    def __init__(self, source: Path) -> None:
        self.source = Path(source)

    def request_capture(self, destination: Path, on_result: ResultCallback) -> None:
        if not self.source.is_file():
            logger.info(f"Nothing to import at {self.source}")
            on_result(CaptureStatus.CANCELLED)
            return

        if self.source.resolve() != Path(destination).resolve():
            shutil.copyfile(self.source, destination)
        on_result(CaptureStatus.CAPTURED)
