"""Tests for library models and the catalog cache format."""

import json

import pytest

from audioflow.domain.library.metadata import format_time, get_display_name
from audioflow.domain.library.models import Catalog, Folder, Track


class TestFolder:
    """Tests for Folder."""

    def test_from_path_uses_basename(self) -> None:
        folder = Folder.from_path("/sdcard/Music/Album")
        assert folder == Folder(name="Album", path="/sdcard/Music/Album")

    def test_from_path_root(self) -> None:
        """Test a path without a basename is its own name."""
        assert Folder.from_path("/").name == "/"


class TestCatalog:
    """Tests for Catalog serialization and deduplication."""

    def test_to_json_format(self) -> None:
        """Test the cache blob is a JSON list of {name, path} objects."""
        catalog = Catalog((Folder("Music", "/sdcard/Music"),))
        assert json.loads(catalog.to_json()) == [{"name": "Music", "path": "/sdcard/Music"}]

    def test_from_json(self) -> None:
        blob = '[{"name":"Music","path":"/sdcard/Music"}]'
        assert Catalog.from_json(blob).folders == (Folder("Music", "/sdcard/Music"),)

    def test_from_json_deduplicates_paths(self) -> None:
        """Test duplicate paths in a blob keep the first entry."""
        blob = json.dumps([
            {"name": "A", "path": "/a"},
            {"name": "A again", "path": "/a"},
            {"name": "B", "path": "/b"},
        ])
        assert Catalog.from_json(blob).paths() == ["/a", "/b"]

    @pytest.mark.parametrize("blob", [
        '{"name": "Music"}',
        '[{"name": "Music"}]',
        '["just a string"]',
        'not json at all',
    ])
    def test_from_json_rejects_bad_data(self, blob: str) -> None:
        """Test malformed blobs raise ValueError."""
        with pytest.raises(ValueError):
            Catalog.from_json(blob)

    def test_with_folder_appends_once(self) -> None:
        catalog = Catalog().with_folder(Folder("A", "/a"))
        assert catalog.with_folder(Folder("other", "/a")) is catalog
        assert len(catalog.with_folder(Folder("B", "/b"))) == 2

    def test_from_folders_keeps_order(self) -> None:
        folders = [Folder("B", "/b"), Folder("A", "/a"), Folder("B", "/b")]
        assert Catalog.from_folders(folders).paths() == ["/b", "/a"]

    def test_iterates_folders(self) -> None:
        folders = (Folder("A", "/a"), Folder("B", "/b"))
        assert list(Catalog(folders)) == list(folders)


class TestDisplayHelpers:
    """Tests for track display formatting."""

    def test_display_name_with_artist(self) -> None:
        track = Track("song.mp3", "/a/song.mp3", artist="Band")
        assert get_display_name(track) == "Band - song.mp3"

    def test_display_name_without_artist(self) -> None:
        assert get_display_name(Track("song.mp3", "/a/song.mp3")) == "song.mp3"

    def test_format_time(self) -> None:
        assert format_time(0) == "00:00"
        assert format_time(185.9) == "03:05"
        assert format_time(-1) == "00:00"
