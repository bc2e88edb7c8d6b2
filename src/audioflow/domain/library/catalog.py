"""
Folder catalog: discovered folders plus the selected folder's track list.

Folder listings run on a background worker. A listing is applied only if its
folder is still the current selection when it finishes; stale results are
discarded.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from loguru import logger

from audioflow.core.errors import ScanError

from .metadata import enrich_track, find_cover_art
from .models import Catalog, Folder, Track
from .probe import FilesystemProbe, LocalFilesystemProbe, is_supported_format
from .sorting import SortDirection, sort_tracks

# listener(selected_folder, tracks)
TracksListener = Callable[[Optional[Folder], list[Track]], None]


def list_tracks(
    folder: Folder,
    probe: Optional[FilesystemProbe] = None,
    extensions: Iterable[str] = (".mp3",),
    read_tags: bool = False,
) -> list[Track]:
    """List the playable files directly inside folder, in filesystem order.

    Subdirectories are ignored; they are separate folders.

    Raises:
        ScanError: If the folder cannot be listed (e.g. deleted since the scan)
    """
    probe = probe or LocalFilesystemProbe()
    extensions = [ext.lower() for ext in extensions]

    try:
        entries = probe.list_directory(folder.path)
    except OSError as e:
        raise ScanError(folder.path, str(e)) from e

    tracks = [
        Track(name=entry.name, path=entry.path)
        for entry in entries
        if entry.is_file and is_supported_format(entry.name, extensions)
    ]

    if read_tags and tracks:
        cover_art_url = find_cover_art(folder.path)
        tracks = [enrich_track(track, cover_art_url) for track in tracks]

    return tracks


class FolderCatalog:
    """In-memory catalog with the current folder selection."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        probe: Optional[FilesystemProbe] = None,
        extensions: Iterable[str] = (".mp3",),
        read_tags: bool = False,
    ):
        self.probe = probe or LocalFilesystemProbe()
        self.extensions = [ext.lower() for ext in extensions]
        self.read_tags = read_tags

        self._lock = threading.Lock()
        self._catalog = catalog or Catalog()
        self._selected: Optional[Folder] = None
        self._selection_id = 0
        self._tracks: list[Track] = []
        self._sort_direction: Optional[SortDirection] = None
        self._listeners: list[TracksListener] = []
        self._executor = ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="folder-listing"
        )

    @property
    def catalog(self) -> Catalog:
        with self._lock:
            return self._catalog

    @property
    def folders(self) -> list[Folder]:
        with self._lock:
            return list(self._catalog.folders)

    @property
    def selected_folder(self) -> Optional[Folder]:
        with self._lock:
            return self._selected

    @property
    def tracks(self) -> list[Track]:
        """Snapshot of the displayed track list."""
        with self._lock:
            return list(self._tracks)

    @property
    def sort_direction(self) -> Optional[SortDirection]:
        with self._lock:
            return self._sort_direction

    def subscribe(self, listener: TracksListener) -> None:
        """Register a listener called whenever the displayed track list changes."""
        self._listeners.append(listener)

    def replace(self, catalog: Catalog) -> None:
        """Swap in a freshly scanned or loaded catalog."""
        with self._lock:
            self._catalog = catalog

    def add_folder(self, folder: Folder) -> bool:
        """Append a folder for this session. False if its path is already present."""
        with self._lock:
            if self._catalog.contains(folder.path):
                return False
            self._catalog = self._catalog.with_folder(folder)
            return True

    def find(self, path: str) -> Optional[Folder]:
        with self._lock:
            for folder in self._catalog.folders:
                if folder.path == path:
                    return folder
        return None

    def select(self, folder: Folder) -> Future:
        """Select folder and list its tracks in the background.

        Any applied sort is reset. The returned future resolves to the listed
        tracks; they are applied only if folder is still selected by then.
        """
        with self._lock:
            self._selection_id += 1
            selection_id = self._selection_id
            self._selected = folder
            self._tracks = []
            self._sort_direction = None

        self._publish(folder, [])
        return self._executor.submit(self._load_selection, folder, selection_id)

    def list_selected(self, folder: Folder) -> list[Track]:
        """Select folder and block until its listing is applied."""
        return self.select(folder).result()

    def sort(self, direction: SortDirection) -> list[Track]:
        """Reorder the displayed track list. Catalog and tracks are untouched."""
        with self._lock:
            self._tracks = sort_tracks(self._tracks, direction)
            self._sort_direction = direction
            folder, tracks = self._selected, list(self._tracks)

        self._publish(folder, tracks)
        return tracks

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _load_selection(self, folder: Folder, selection_id: int) -> list[Track]:
        try:
            tracks = list_tracks(
                folder,
                probe=self.probe,
                extensions=self.extensions,
                read_tags=self.read_tags,
            )
        except ScanError as e:
            logger.warning(str(e))
            tracks = []

        with self._lock:
            if selection_id != self._selection_id or self._selected != folder:
                logger.debug(f"Discarding stale listing for {folder.path}")
                return tracks
            # A sort requested while listing applies to the finished list.
            if self._sort_direction is not None:
                tracks = sort_tracks(tracks, self._sort_direction)
            self._tracks = list(tracks)

        logger.debug(f"Listed {len(tracks)} track(s) in {folder.path}")
        self._publish(folder, list(tracks))
        return tracks

    def _publish(self, folder: Optional[Folder], tracks: list[Track]) -> None:
        for listener in list(self._listeners):
            try:
                listener(folder, tracks)
            except Exception:
                logger.exception("Track list listener failed")
