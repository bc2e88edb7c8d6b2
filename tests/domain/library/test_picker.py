"""Tests for the directory pick prompt."""

from unittest.mock import patch

import pytest

from audioflow.core.errors import AudioFlowError, NotADirectoryPicked, PickCancelled
from audioflow.domain.library.picker import normalize_picked_path, pick_directory


class TestNormalizePickedPath:
    """Tests for normalize_picked_path."""

    def test_file_uri(self) -> None:
        assert normalize_picked_path("file:///sdcard/Music") == "/sdcard/Music"

    def test_strips_whitespace_and_trailing_slash(self) -> None:
        assert normalize_picked_path("  /sdcard/Music/  ") == "/sdcard/Music"

    def test_expands_home(self, monkeypatch) -> None:
        monkeypatch.setenv("HOME", "/home/listener")
        assert normalize_picked_path("~/Music") == "/home/listener/Music"


class TestPickDirectory:
    """Tests for pick_directory with the prompt patched out."""

    @pytest.fixture
    def prompt(self):
        with patch("audioflow.domain.library.picker.PromptSession") as session_cls:
            yield session_cls.return_value.prompt

    def test_returns_picked_directory(self, prompt, tmp_path) -> None:
        prompt.return_value = str(tmp_path)
        assert pick_directory() == str(tmp_path)

    @pytest.mark.parametrize("error", [KeyboardInterrupt, EOFError])
    def test_interrupt_cancels(self, prompt, error) -> None:
        prompt.side_effect = error
        with pytest.raises(PickCancelled):
            pick_directory()

    def test_empty_answer_cancels(self, prompt) -> None:
        prompt.return_value = "   "
        with pytest.raises(PickCancelled):
            pick_directory()

    def test_not_a_directory(self, prompt, tmp_path) -> None:
        track = tmp_path / "a.mp3"
        track.write_bytes(b"")
        prompt.return_value = str(track)
        with pytest.raises(NotADirectoryPicked) as exc:
            pick_directory()
        assert exc.value.path == str(track)
        assert isinstance(exc.value, AudioFlowError)

    def test_missing_path(self, prompt, tmp_path) -> None:
        prompt.return_value = str(tmp_path / "gone")
        with pytest.raises(NotADirectoryPicked):
            pick_directory()
