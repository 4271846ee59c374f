"""
Resumable "photo taken, normalization pending" state.

A host that is suspended between the capture and the normalization can
reload this checkpoint and finish the run instead of capturing again.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CHECKPOINT_VERSION = 1


@dataclass(frozen=True)
class CaptureCheckpoint:
    """Persisted pipeline state.

    Attributes:
        destination: Path the photo was (or is being) captured to
        taken: True once the capture device has reported a photo
    """

    destination: Path
    taken: bool = False

    def to_dict(self) -> dict:
        return {
            "version": CHECKPOINT_VERSION,
            "destination": str(self.destination),
            "taken": self.taken,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CaptureCheckpoint":
        if data.get("version") != CHECKPOINT_VERSION:
            raise ValueError(f"Unsupported checkpoint version: {data.get('version')!r}")
        taken = data["taken"]
        if not isinstance(taken, bool):
            raise ValueError(f"Checkpoint 'taken' must be a boolean, got {taken!r}")
        return cls(destination=Path(data["destination"]), taken=taken)

    def save(self, path: Path) -> None:
        """Write the checkpoint, replacing any previous one atomically."""
        path = Path(path)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        os.replace(tmp_path, path)
        logger.debug(f"Checkpoint saved: {path} (taken={self.taken})")

    @classmethod
    def load(cls, path: Path) -> "CaptureCheckpoint | None":
        """Read a checkpoint.

        Returns:
            The checkpoint, or None if there is none or it cannot be parsed
        """
        path = Path(path)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable checkpoint {path}: {e}")
            return None

    @staticmethod
    def clear(path: Path) -> None:
        """Remove a checkpoint if present."""
        Path(path).unlink(missing_ok=True)
