"""
ScopePipeline - Turn a phone/camera photo into an upright, OCR-ready bitmap

A small pipeline for:
1. Triggering a capture on an external camera or picker
2. Reading the EXIF orientation of the photo
3. Decoding (optionally subsampled), rotating upright, and converting to RGBA
4. Optional brightness/contrast correction before OCR
5. Resuming a run interrupted between capture and normalization
"""

__version__ = "0.1.0"
__author__ = "Scope"

from .config import PipelineConfig
from .errors import CaptureFailure, CaptureTimeout, DecodeError, MetadataReadFailure, ScopeError
from .models import CANONICAL_MODE, CapturedImage, OrientationTag, PixelBuffer
from .pipeline import PipelineResult, PipelineStatus, ScanPipeline

__all__ = [
    "CANONICAL_MODE",
    "CaptureFailure",
    "CaptureTimeout",
    "CapturedImage",
    "DecodeError",
    "MetadataReadFailure",
    "OrientationTag",
    "PipelineConfig",
    "PipelineResult",
    "PipelineStatus",
    "PixelBuffer",
    "ScanPipeline",
    "ScopeError",
]
