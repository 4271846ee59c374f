"""Tests for pipeline configuration."""

from pathlib import Path

import pytest

from scopepipeline.config import PipelineConfig


class TestPipelineConfig:
    """Tests for PipelineConfig validation."""

    def test_defaults(self):
        config = PipelineConfig(destination="scope/ocr.jpg")
        assert config.destination == Path("scope/ocr.jpg")
        assert config.downsample_factor == 4
        assert config.capture_timeout > 0
        assert config.brightness == 0
        assert config.contrast == 0

    def test_checkpoint_beside_destination(self):
        config = PipelineConfig(destination="scope/ocr.jpg")
        assert config.checkpoint_path == Path("scope/ocr.jpg.checkpoint.json")

    def test_explicit_checkpoint(self, tmp_path):
        config = PipelineConfig(destination=tmp_path / "ocr.jpg", checkpoint_file=str(tmp_path / "state.json"))
        assert config.checkpoint_path == tmp_path / "state.json"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"downsample_factor": 0},
            {"downsample_factor": 2.0},
            {"capture_timeout": 0},
            {"capture_timeout": -5},
            {"brightness": 256},
            {"brightness": -256},
            {"contrast": 128},
            {"contrast": -128},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Out-of-range settings are rejected."""
        with pytest.raises(ValueError):
            PipelineConfig(destination="ocr.jpg", **kwargs)

    def test_destination_must_be_file(self):
        with pytest.raises(ValueError):
            PipelineConfig(destination="")
