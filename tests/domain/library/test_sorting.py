"""Tests for track list sorting."""

import locale
from unittest.mock import patch

import pytest

from audioflow.domain.library.models import Track
from audioflow.domain.library.sorting import SortDirection, init_collation, sort_tracks

UTF8_LOCALES = ["en_US.UTF-8", "en_GB.UTF-8", "de_DE.UTF-8", "fr_FR.UTF-8"]


def make_tracks(*names: str) -> list[Track]:
    return [Track(name=name, path=f"/music/{i}/{name}") for i, name in enumerate(names)]


@pytest.fixture
def language_collation():
    """Switch LC_COLLATE to an installed language locale, restoring it afterwards."""
    saved = locale.setlocale(locale.LC_COLLATE)
    for name in UTF8_LOCALES:
        try:
            locale.setlocale(locale.LC_COLLATE, name)
        except locale.Error:
            continue
        yield name
        locale.setlocale(locale.LC_COLLATE, saved)
        return
    pytest.skip("no language UTF-8 locale installed")
class TestSortTracks:
    """Tests for sort_tracks."""

    def test_ascending_by_name(self) -> None:
        """Test ascending order by track name."""
        tracks = make_tracks("c.mp3", "a.mp3", "b.mp3")
        result = sort_tracks(tracks, SortDirection.ASCENDING)
        assert [track.name for track in result] == ["a.mp3", "b.mp3", "c.mp3"]

    def test_descending_is_reverse_of_ascending(self) -> None:
        """Test descending is exactly the reversed ascending list."""
        tracks = make_tracks("Beta.mp3", "alpha.mp3", "beta.mp3", "Gamma.mp3", "alpha.mp3")
        ascending = sort_tracks(tracks, SortDirection.ASCENDING)
        descending = sort_tracks(tracks, SortDirection.DESCENDING)
        assert descending == list(reversed(ascending))

    def test_case_insensitive(self) -> None:
        """Test upper and lower case names interleave."""
        tracks = make_tracks("b.mp3", "A.mp3", "C.mp3")
        result = sort_tracks(tracks, SortDirection.ASCENDING)
        assert [track.name for track in result] == ["A.mp3", "b.mp3", "C.mp3"]

    def test_sort_is_permutation(self) -> None:
        """Test sorting neither adds nor drops tracks."""
        tracks = make_tracks("x.mp3", "y.mp3", "x.mp3")
        result = sort_tracks(tracks, SortDirection.DESCENDING)
        assert sorted(result) == sorted(tracks)

    def test_input_not_mutated(self) -> None:
        """Test the original list keeps its order."""
        tracks = make_tracks("b.mp3", "a.mp3")
        sort_tracks(tracks, SortDirection.ASCENDING)
        assert [track.name for track in tracks] == ["b.mp3", "a.mp3"]

    def test_empty(self) -> None:
        assert sort_tracks([], SortDirection.ASCENDING) == []

    def test_accented_names_collate_by_locale(self, language_collation) -> None:
        """Test an accented initial sorts with its base letter, not after Z."""
        tracks = make_tracks("Zebra.mp3", "Émile.mp3", "apple.mp3")
        result = sort_tracks(tracks, SortDirection.ASCENDING)
        assert [track.name for track in result] == ["apple.mp3", "Émile.mp3", "Zebra.mp3"]


class TestInitCollation:
    """Tests for init_collation."""

    def test_uses_environment_locale(self) -> None:
        """Test the collation category is taken from the environment."""
        with patch("audioflow.domain.library.sorting.locale.setlocale") as setlocale:
            assert init_collation() is True
        setlocale.assert_called_once_with(locale.LC_COLLATE, "")

    def test_missing_locale_is_tolerated(self) -> None:
        """Test an uninstalled locale leaves the default collation in place."""
        with patch(
            "audioflow.domain.library.sorting.locale.setlocale",
            side_effect=locale.Error("unsupported locale setting"),
        ):
            assert init_collation() is False

    def test_cli_initialises_collation(self, monkeypatch) -> None:
        """Test the command entry point sets up collation before dispatching."""
        from audioflow import cli

        monkeypatch.setattr("sys.argv", ["audioflow"])
        with patch.object(cli, "init_collation") as init:
            with pytest.raises(SystemExit) as exc:
                cli.main()
        assert exc.value.code == 0
        init.assert_called_once_with()
