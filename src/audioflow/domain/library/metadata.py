"""
Track metadata extraction.

Reads artist/album tags with Mutagen and looks for folder cover art next
to the audio file.
"""

import os
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from .models import Track

COVER_ART_NAMES = ("cover.jpg", "folder.jpg", "cover.png", "folder.png")


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                if isinstance(value, list) and value:
                    return str(value[0])
                return str(value)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
    return None


def find_cover_art(directory: str) -> Optional[str]:
    """Return a file:// URI for a known cover image in directory, if any."""
    for name in COVER_ART_NAMES:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            return Path(candidate).absolute().as_uri()
    return None


def read_tags(path: str) -> tuple[Optional[str], Optional[str]]:
    """Read (artist, album) from an audio file. Missing tags are None."""
    try:
        audio_file = MutagenFile(path)
    except (MutagenError, OSError) as e:
        logger.debug(f"Cannot read tags from {path}: {e}")
        return None, None

    if audio_file is None:
        return None, None

    artist = get_tag_value(audio_file, ["TPE1", "\xa9ART", "ARTIST", "artist"])
    album = get_tag_value(audio_file, ["TALB", "\xa9alb", "ALBUM", "album"])
    return artist, album


def enrich_track(track: Track, cover_art_url: Optional[str] = None) -> Track:
    """Fill artist, album and cover art on a listed track."""
    artist, album = read_tags(track.path)
    return track._replace(
        artist=artist or track.artist,
        album=album or track.album,
        cover_art_url=cover_art_url or track.cover_art_url,
    )


def get_display_name(track: Track) -> str:
    """Get formatted display name for a track."""
    if track.artist:
        return f"{track.artist} - {track.name}"
    return track.name


def format_time(seconds: float) -> str:
    """Format time in seconds to MM:SS format."""
    if seconds < 0:
        return "00:00"

    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"
