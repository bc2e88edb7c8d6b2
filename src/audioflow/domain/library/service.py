"""
Library service: cache-or-scan startup and folder catalog maintenance.

The discovered catalog is persisted under a single key. When a cached value
exists it is used verbatim and no filesystem scan is performed; a rescan has
to be requested explicitly.
"""

from concurrent.futures import Future
from typing import Callable, Optional, Protocol

from loguru import logger

from audioflow.core.config import Config
from audioflow.core.errors import PickCancelled

from .catalog import FolderCatalog
from .models import Catalog, Folder
from .probe import FilesystemProbe, LocalFilesystemProbe
from .scanner import LibraryScanner, ProgressCallback

CATALOG_CACHE_KEY = "folder_catalog"


class CatalogStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> bool: ...


class LibraryService:
    """Owns the folder catalog and its persisted cache."""

    def __init__(
        self,
        store: CatalogStore,
        scanner: LibraryScanner,
        roots: list[str],
        catalog: Optional[FolderCatalog] = None,
    ):
        self.store = store
        self.scanner = scanner
        self.roots = list(roots)
        self.catalog = catalog or FolderCatalog(
            probe=scanner.probe, extensions=scanner.extensions
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        store: CatalogStore,
        probe: Optional[FilesystemProbe] = None,
    ) -> "LibraryService":
        probe = probe or LocalFilesystemProbe()
        scanner = LibraryScanner(
            probe=probe,
            extensions=config.library.audio_extensions,
            parallel=config.library.parallel_scan,
            max_workers=config.library.scan_workers,
        )
        catalog = FolderCatalog(
            probe=probe,
            extensions=config.library.audio_extensions,
            read_tags=config.library.read_tags,
        )
        return cls(store, scanner, config.library.resolved_roots(), catalog)

    def cached_catalog(self) -> Optional[Catalog]:
        """Return the persisted catalog, or None if absent or unreadable."""
        blob = self.store.get(CATALOG_CACHE_KEY)
        if blob is None:
            return None
        try:
            return Catalog.from_json(blob)
        except ValueError as e:
            logger.warning(f"Ignoring corrupt catalog cache: {e}")
            return None

    def load_catalog(
        self, progress_callback: Optional[ProgressCallback] = None
    ) -> Catalog:
        """Load the cached catalog, scanning and persisting only on a cache miss."""
        catalog = self.cached_catalog()
        if catalog is not None:
            logger.info(f"Loaded {len(catalog)} folder(s) from catalog cache")
            self.catalog.replace(catalog)
            return catalog
        return self.rescan(progress_callback)

    def rescan(self, progress_callback: Optional[ProgressCallback] = None) -> Catalog:
        """Run a full scan, persist the result and replace the in-memory catalog."""
        catalog = self.scanner.scan(self.roots, progress_callback)
        self.store.set(CATALOG_CACHE_KEY, catalog.to_json())
        self.catalog.replace(catalog)
        return catalog

    def clear_cache(self) -> bool:
        """Drop the persisted catalog. The next load_catalog() scans again."""
        removed = self.store.delete(CATALOG_CACHE_KEY)
        if removed:
            logger.info("Catalog cache cleared")
        return removed

    def add_picked_folder(self, path: str) -> tuple[Folder, Future]:
        """Use a user-picked directory immediately.

        The folder is added to the in-memory catalog for this session and
        selected. It is not written to the cache and no scan is run.

        Returns:
            (folder, future resolving to the folder's tracks)
        """
        folder = self.catalog.find(path) or Folder.from_path(path)
        if self.catalog.add_folder(folder):
            logger.info(f"Added picked folder for this session: {path}")
        return folder, self.catalog.select(folder)

    def pick_and_add(
        self, pick: Callable[[], str]
    ) -> Optional[tuple[Folder, Future]]:
        """Run a directory pick; a cancelled pick returns None without error.

        Raises:
            NotADirectoryPicked: If the picked path is not a directory
        """
        try:
            path = pick()
        except PickCancelled:
            logger.debug("Directory pick cancelled")
            return None
        return self.add_picked_folder(path)
