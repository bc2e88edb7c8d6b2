"""
Music library scanning.

Walks root directories depth-first and records every directory that directly
contains a playable file as a Folder. Read failures never abort a scan: the
offending root or subdirectory is logged and skipped.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Optional

from loguru import logger

from audioflow.core.config import Config

from .models import Catalog, Folder
from .probe import FilesystemProbe, LocalFilesystemProbe, is_supported_format

# progress_callback(directories_visited, folders_found)
ProgressCallback = Callable[[int, int], None]


def normalize_path(path: str) -> str:
    """Key used for deduplication: resolved, case-normalized absolute path."""
    return os.path.normcase(os.path.realpath(path))


class CatalogBuilder:
    """Shared accumulator for one scan.

    All walks of a scan append through the same builder, so the visited and
    added sets are single, lock-protected structures even when roots are
    walked in parallel.
    """

    def __init__(self, progress_callback: Optional[ProgressCallback] = None):
        self._lock = threading.Lock()
        self._visited: set[str] = set()
        self._added: set[str] = set()
        self._entries: list[tuple[int, int, Folder]] = []
        self._progress_callback = progress_callback

    def claim_directory(self, path: str) -> bool:
        """Mark a directory as walked. False if another walk already claimed it."""
        key = normalize_path(path)
        with self._lock:
            if key in self._visited:
                return False
            self._visited.add(key)
            visited, found = len(self._visited), len(self._entries)

        if self._progress_callback:
            self._progress_callback(visited, found)
        return True

    def add_folder(self, folder: Folder, root_index: int, sequence: int) -> bool:
        """Append folder unless its path was already added during this scan."""
        key = normalize_path(folder.path)
        with self._lock:
            if key in self._added:
                return False
            self._added.add(key)
            self._entries.append((root_index, sequence, folder))
            return True

    def build(self) -> Catalog:
        """Catalog ordered by root order, then discovery order within a walk.

        A folder sorts under the root whose walk claimed it, so overlapping
        roots walked in parallel can file a shared subtree under a later root.
        """
        with self._lock:
            entries = sorted(self._entries, key=lambda e: (e[0], e[1]))
        return Catalog(tuple(folder for _, _, folder in entries))


class LibraryScanner:
    """Recursive folder discovery over a fixed list of roots."""

    def __init__(
        self,
        probe: Optional[FilesystemProbe] = None,
        extensions: Iterable[str] = (".mp3",),
        parallel: bool = False,
        max_workers: int = 4,
    ):
        self.probe = probe or LocalFilesystemProbe()
        self.extensions = [ext.lower() for ext in extensions]
        self.parallel = parallel
        self.max_workers = max(1, max_workers)

    def scan(
        self, roots: Iterable[str], progress_callback: Optional[ProgressCallback] = None
    ) -> Catalog:
        """Scan roots and return the discovered folders.

        Args:
            roots: Root directories, processed in the order supplied
            progress_callback: Optional callback(directories_visited, folders_found)

        Returns:
            Catalog in pre-order discovery order
        """
        roots = list(roots)
        builder = CatalogBuilder(progress_callback)

        logger.info(f"Scanning {len(roots)} root(s) (parallel={self.parallel})")

        if self.parallel and len(roots) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {
                    executor.submit(self._walk_root, root, index, builder): root
                    for index, root in enumerate(roots)
                }
                for future in as_completed(futures):
                    try:
                        future.result()
                    except Exception:
                        logger.exception(f"Scan of root failed: {futures[future]}")
        else:
            for index, root in enumerate(roots):
                try:
                    self._walk_root(root, index, builder)
                except Exception:
                    logger.exception(f"Scan of root failed: {root}")

        catalog = builder.build()
        logger.info(f"Library scan complete: {len(catalog)} folder(s) found")
        return catalog

    def _walk_root(self, root: str, root_index: int, builder: CatalogBuilder) -> None:
        if not self.probe.exists(root):
            logger.debug(f"Library root does not exist: {root}")
            return

        logger.debug(f"Scanning: {root}")
        sequence = 0
        # Explicit stack, children pushed in reverse so pops follow listing order
        stack = [root]
        while stack:
            path = stack.pop()
            if not builder.claim_directory(path):
                continue

            try:
                entries = self.probe.list_directory(path)
            except OSError as e:
                logger.warning(f"Skipping unreadable directory {path}: {e}")
                continue

            if any(
                entry.is_file and is_supported_format(entry.name, self.extensions)
                for entry in entries
            ):
                if builder.add_folder(Folder.from_path(path), root_index, sequence):
                    sequence += 1

            subdirectories = [entry.path for entry in entries if entry.is_directory]
            stack.extend(reversed(subdirectories))


def scan_music_library(
    config: Config,
    probe: Optional[FilesystemProbe] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Catalog:
    """Scan all configured library roots.

    Args:
        config: Configuration object
        probe: Filesystem probe (defaults to the local filesystem)
        progress_callback: Optional callback(directories_visited, folders_found)

    Returns:
        Catalog of discovered folders
    """
    scanner = LibraryScanner(
        probe=probe,
        extensions=config.library.audio_extensions,
        parallel=config.library.parallel_scan,
        max_workers=config.library.scan_workers,
    )
    return scanner.scan(config.library.resolved_roots(), progress_callback)
