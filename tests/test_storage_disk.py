"""Unit tests for DiskArtifactStorage."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from memory_companion.storage.base import artifact_stamp
from memory_companion.storage.disk import DiskArtifactStorage

NOW = datetime(2025, 11, 8, 14, 30, 0, 123000, tzinfo=UTC)


def test_artifact_stamp_is_filesystem_safe():
    assert artifact_stamp(NOW) == "2025-11-08T14-30-00-123Z"


class TestDiskArtifactStorage:
    def test_screenshot_layout(self, tmp_path: Path):
        s = DiskArtifactStorage(str(tmp_path))
        key = s.save_screenshot(b"\x89PNG", NOW)
        assert key == "screenshots/screenshot-2025-11-08T14-30-00-123Z.png"
        assert (tmp_path / key).read_bytes() == b"\x89PNG"

    def test_transcript_layout(self, tmp_path: Path):
        s = DiskArtifactStorage(str(tmp_path))
        key = s.save_transcript("Hi, I'm Ada", NOW)
        assert key == "transcripts/transcript-2025-11-08T14-30-00-123Z.txt"
        assert s.read(key) == "Hi, I'm Ada".encode()

    def test_same_timestamp_does_not_overwrite(self, tmp_path: Path):
        s = DiskArtifactStorage(str(tmp_path))
        first = s.save_screenshot(b"one", NOW)
        second = s.save_screenshot(b"two", NOW)
        assert first != second
        assert s.read(first) == b"one"
        assert s.read(second) == b"two"

    def test_exists(self, tmp_path: Path):
        s = DiskArtifactStorage(str(tmp_path))
        assert not s.exists("screenshots/missing.png")
        key = s.save_screenshot(b"x", NOW)
        assert s.exists(key)

    def test_key_outside_root_rejected(self, tmp_path: Path):
        s = DiskArtifactStorage(str(tmp_path / "store"))
        with pytest.raises(ValueError):
            s.read("../secret.txt")

    def test_clear_keeps_dotfiles(self, tmp_path: Path):
        s = DiskArtifactStorage(str(tmp_path))
        s.save_screenshot(b"a", NOW)
        s.save_transcript("b", NOW)
        (tmp_path / "screenshots" / ".gitkeep").write_text("")

        assert s.clear() == 2
        assert (tmp_path / "screenshots" / ".gitkeep").exists()
        assert list((tmp_path / "transcripts").iterdir()) == []

    def test_clear_empty(self, tmp_path: Path):
        assert DiskArtifactStorage(str(tmp_path)).clear() == 0
