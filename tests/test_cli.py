"""Smoke tests for the command-line interface."""

from PIL import Image

from conftest import make_photo
from scopepipeline.checkpoint import CaptureCheckpoint
from scopepipeline.cli import EXIT_FAILED, EXIT_NO_PHOTO, EXIT_OK, main


class TestOrientationCommand:
    def test_prints_tags(self, tmp_path, capsys):
        rotated = make_photo(tmp_path / "a.jpg", (8, 8), orientation=8)
        plain = make_photo(tmp_path / "b.png", (8, 8))

        assert main(["orientation", str(rotated), str(plain)]) == EXIT_OK

        out = capsys.readouterr().out
        assert f"{rotated}: ROTATE_270" in out
        assert f"{plain}: NORMAL" in out

    def test_missing_file(self, tmp_path):
        assert main(["orientation", str(tmp_path / "missing.jpg")]) == EXIT_FAILED


class TestNormalizeCommand:
    def test_auto_orientation(self, tmp_path):
        source = make_photo(tmp_path / "photo.jpg", (30, 20), orientation=6)
        output = tmp_path / "out" / "ocr.png"

        assert main(["normalize", str(source), "-o", str(output)]) == EXIT_OK

        with Image.open(output) as img:
            assert img.size == (20, 30)
            assert img.mode == "RGBA"

    def test_forced_orientation(self, tmp_path):
        source = make_photo(tmp_path / "photo.png", (30, 20))
        output = tmp_path / "ocr.png"

        assert main(["normalize", str(source), "-o", str(output), "--orientation", "270"]) == EXIT_OK

        with Image.open(output) as img:
            assert img.size == (20, 30)

    def test_corrupt_input(self, tmp_path, corrupt_jpeg):
        assert main(["normalize", str(corrupt_jpeg), "-o", str(tmp_path / "x.png")]) == EXIT_FAILED

    def test_bad_factor(self, tmp_path):
        source = make_photo(tmp_path / "photo.jpg", (8, 8))
        assert main(["normalize", str(source), "-o", str(tmp_path / "x.png"), "--downsample", "0"]) == EXIT_FAILED


class TestCaptureCommand:
    def test_import(self, tmp_path):
        source = make_photo(tmp_path / "gallery.jpg", (40, 20), orientation=3)
        destination = tmp_path / "ocr.jpg"
        output = tmp_path / "ocr.png"

        code = main(["capture", str(destination), "--from", str(source), "--downsample", "1", "-o", str(output)])

        assert code == EXIT_OK
        with Image.open(output) as img:
            assert img.size == (40, 20)

    def test_cancelled_import(self, tmp_path):
        code = main(["capture", str(tmp_path / "ocr.jpg"), "--from", str(tmp_path / "missing.jpg")])
        assert code == EXIT_NO_PHOTO

    def test_missing_camera_program(self, tmp_path):
        """A capture command that cannot start is a failure, not a cancel."""
        code = main(["capture", str(tmp_path / "ocr.jpg"), "--command", "scope-test-no-such-camera-binary {output}"])
        assert code == EXIT_FAILED
        assert not (tmp_path / "ocr.jpg.checkpoint.json").exists()

    def test_zero_timeout_rejected(self, tmp_path):
        """An explicit --timeout 0 is validated, not replaced by the default."""
        source = make_photo(tmp_path / "gallery.jpg", (8, 8))
        code = main(["capture", str(tmp_path / "ocr.jpg"), "--from", str(source), "--timeout", "0"])
        assert code == EXIT_FAILED
        assert not (tmp_path / "ocr.jpg").exists()


class TestResumeCommand:
    def test_nothing_pending(self, tmp_path):
        assert main(["resume", str(tmp_path / "ocr.jpg")]) == EXIT_NO_PHOTO

    def test_resumes(self, tmp_path):
        destination = make_photo(tmp_path / "ocr.jpg", (40, 20), orientation=6)
        CaptureCheckpoint(destination, taken=True).save(tmp_path / "ocr.jpg.checkpoint.json")
        output = tmp_path / "ocr.png"

        assert main(["resume", str(destination), "--downsample", "1", "-o", str(output)]) == EXIT_OK

        with Image.open(output) as img:
            assert img.size == (20, 40)
