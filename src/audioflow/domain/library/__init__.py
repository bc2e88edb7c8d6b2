"""Library domain - folder discovery, listing and ordering.

This domain handles:
- Folder/Track/Catalog models
- Recursive folder scanning with a persisted catalog cache
- Folder selection and track listing
- Track sorting and metadata
"""

# Models
from .models import Catalog, Folder, Track

# Filesystem access
from .probe import DirEntry, FilesystemProbe, LocalFilesystemProbe, is_supported_format

# Scanning
from .scanner import CatalogBuilder, LibraryScanner, normalize_path, scan_music_library

# Catalog and sorting
from .catalog import FolderCatalog, list_tracks
from .sorting import SortDirection, init_collation, sort_tracks

# Metadata
from .metadata import enrich_track, find_cover_art, format_time, get_display_name, read_tags

# Service
from .service import CATALOG_CACHE_KEY, LibraryService

__all__ = [
    # Models
    "Catalog",
    "Folder",
    "Track",
    # Probe
    "DirEntry",
    "FilesystemProbe",
    "LocalFilesystemProbe",
    "is_supported_format",
    # Scanner
    "CatalogBuilder",
    "LibraryScanner",
    "normalize_path",
    "scan_music_library",
    # Catalog
    "FolderCatalog",
    "list_tracks",
    "SortDirection",
    "init_collation",
    "sort_tracks",
    # Metadata
    "enrich_track",
    "find_cover_art",
    "format_time",
    "get_display_name",
    "read_tags",
    # Service
    "CATALOG_CACHE_KEY",
    "LibraryService",
]
