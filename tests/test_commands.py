"""Tests for CLI command handlers and routing."""

from unittest.mock import MagicMock

import pytest

from audioflow.commands import library as library_commands
from audioflow.commands.playback import format_progress, handle_play_command
from audioflow.context import AppContext
from audioflow.core.config import Config
from audioflow.domain.library.catalog import FolderCatalog
from audioflow.domain.library.models import Catalog, Folder, Track
from audioflow.domain.library.scanner import LibraryScanner
from audioflow.domain.library.service import CATALOG_CACHE_KEY, LibraryService
from audioflow.domain.playback.session import PlaybackSnapshot, PlaybackState
from audioflow.router import handle_command


class DictStore(dict):
    def set(self, key, value):
        self[key] = value

    def delete(self, key):
        return self.pop(key, None) is not None


@pytest.fixture
def ctx(tmp_path) -> AppContext:
    """Context with a cached two-folder catalog and a mocked controller."""
    album = tmp_path / "Album"
    album.mkdir()
    (album / "b.mp3").write_bytes(b"")
    (album / "a.mp3").write_bytes(b"")

    catalog = Catalog((Folder.from_path(str(album)), Folder("Gone", "/gone")))
    store = DictStore({CATALOG_CACHE_KEY: catalog.to_json()})
    service = LibraryService(store, LibraryScanner(), [], FolderCatalog())
    service.load_catalog()

    ctx = AppContext(config=Config(), store=store, library=service)
    ctx.controller = MagicMock()
    yield ctx
    service.catalog.close()


class TestResolveFolder:
    """Tests for folder argument resolution."""

    def test_by_index(self, ctx) -> None:
        assert library_commands.resolve_folder(ctx, "2") == Folder("Gone", "/gone")

    def test_index_out_of_range(self, ctx) -> None:
        assert library_commands.resolve_folder(ctx, "3") is None
        assert library_commands.resolve_folder(ctx, "0") is None

    def test_by_catalog_path(self, ctx, tmp_path) -> None:
        folder = library_commands.resolve_folder(ctx, str(tmp_path / "Album"))
        assert folder.name == "Album"
        assert len(ctx.library.catalog.folders) == 2

    def test_unknown_directory_added_for_session(self, ctx, tmp_path) -> None:
        """Test a directory outside the catalog is added, not persisted."""
        other = tmp_path / "Other"
        other.mkdir()
        cached = ctx.store[CATALOG_CACHE_KEY]

        folder = library_commands.resolve_folder(ctx, str(other))

        assert folder.path == str(other)
        assert ctx.library.catalog.find(str(other)) == folder
        assert ctx.store[CATALOG_CACHE_KEY] == cached

    def test_missing_path(self, ctx, tmp_path) -> None:
        assert library_commands.resolve_folder(ctx, str(tmp_path / "nope")) is None


class TestLibraryCommands:
    """Tests for library subcommand handlers."""

    def test_list_folder_tracks_sorted(self, ctx, tmp_path) -> None:
        folder = Folder.from_path(str(tmp_path / "Album"))
        tracks = library_commands.list_folder_tracks(ctx, folder, "desc")
        assert [track.name for track in tracks] == ["b.mp3", "a.mp3"]

    def test_tracks_command(self, ctx) -> None:
        assert library_commands.handle_tracks_command(ctx, "1", "asc") == 0
        assert library_commands.handle_tracks_command(ctx, "9") == 1

    def test_tracks_for_deleted_folder(self, ctx) -> None:
        """Test a catalog folder deleted since the scan lists as empty."""
        assert library_commands.handle_tracks_command(ctx, "2") == 0

    def test_clear_cache_command(self, ctx) -> None:
        assert library_commands.handle_clear_cache_command(ctx) == 0
        assert CATALOG_CACHE_KEY not in ctx.store

    def test_pick_cancelled(self, ctx, monkeypatch) -> None:
        """Test a cancelled pick exits cleanly."""
        from audioflow.core.errors import PickCancelled

        def cancel():
            raise PickCancelled()

        monkeypatch.setattr(library_commands, "pick_directory", cancel)
        assert library_commands.handle_pick_command(ctx) == 0

    def test_pick_not_a_directory(self, ctx, monkeypatch) -> None:
        """Test picking a file reports an error exit code."""
        from audioflow.core.errors import NotADirectoryPicked

        def bad_pick():
            raise NotADirectoryPicked("/etc/hostname")

        monkeypatch.setattr(library_commands, "pick_directory", bad_pick)
        assert library_commands.handle_pick_command(ctx) == 1


class TestFormatProgress:
    """Tests for the progress toolbar text."""

    def test_idle(self) -> None:
        snapshot = PlaybackSnapshot(state=PlaybackState.IDLE, queue_length=3)
        assert "3 tracks queued" in format_progress(snapshot)

    def test_playing(self) -> None:
        snapshot = PlaybackSnapshot(
            state=PlaybackState.PLAYING,
            position=65.0,
            duration=180.0,
            current_index=1,
            current_track=Track("B.mp3", "/music/B.mp3"),
            queue_length=3,
        )
        text = format_progress(snapshot)
        assert "[2/3]" in text
        assert "B.mp3" in text
        assert "01:05 / 03:00" in text

    def test_unknown_duration(self) -> None:
        snapshot = PlaybackSnapshot(
            state=PlaybackState.LOADING,
            current_index=0,
            current_track=Track("A.mp3", "/music/A.mp3"),
            queue_length=1,
        )
        assert "--:--" in format_progress(snapshot)


class TestRouter:
    """Tests for transport shell command routing."""

    def test_quit_stops_playback(self, ctx) -> None:
        _, should_continue = handle_command(ctx, "quit", [])
        assert should_continue is False
        ctx.controller.stop.assert_called_once()

    def test_unknown_command_continues(self, ctx) -> None:
        _, should_continue = handle_command(ctx, "dance", [])
        assert should_continue is True

    def test_seek_parses_seconds(self, ctx) -> None:
        ctx.controller.state = PlaybackState.PLAYING
        handle_command(ctx, "seek", ["42.5"])
        ctx.controller.seek.assert_called_once_with(42.5)

    def test_seek_rejects_garbage(self, ctx) -> None:
        handle_command(ctx, "seek", ["soon"])
        ctx.controller.seek.assert_not_called()

    def test_play_is_one_based(self, ctx) -> None:
        ctx.controller.queue = [Track("A.mp3", "/a"), Track("B.mp3", "/b")]
        ctx.controller.state = PlaybackState.PLAYING
        handle_play_command(ctx, ["2"])
        ctx.controller.play.assert_called_once_with(1)

    def test_play_out_of_range(self, ctx) -> None:
        ctx.controller.queue = [Track("A.mp3", "/a")]
        handle_play_command(ctx, ["5"])
        ctx.controller.play.assert_not_called()

    def test_next_at_end_reports(self, ctx) -> None:
        ctx.controller.next.return_value = None
        _, should_continue = handle_command(ctx, "next", [])
        assert should_continue is True
        ctx.controller.next.assert_called_once()
