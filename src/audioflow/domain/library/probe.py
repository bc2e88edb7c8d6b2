"""
Filesystem probe: existence checks and single-level directory listings.

The scanner and catalog only touch the filesystem through a probe, so
tests can substitute an in-memory one.
"""

import os
from typing import NamedTuple, Protocol


class DirEntry(NamedTuple):
    """One child of a listed directory."""
    name: str
    path: str
    is_file: bool
    is_directory: bool


class FilesystemProbe(Protocol):
    def exists(self, path: str) -> bool: ...

    def list_directory(self, path: str) -> list[DirEntry]: ...


class LocalFilesystemProbe:
    """Probe backed by the local filesystem via os.scandir."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def list_directory(self, path: str) -> list[DirEntry]:
        """List direct children of path in filesystem order.

        Entries whose type cannot be determined (e.g. broken symlinks)
        are reported as neither file nor directory.

        Raises:
            OSError: If the directory cannot be read
        """
        entries = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_file = entry.is_file()
                    is_directory = entry.is_dir()
                except OSError:
                    is_file = is_directory = False
                entries.append(
                    DirEntry(
                        name=entry.name,
                        path=entry.path,
                        is_file=is_file,
                        is_directory=is_directory,
                    )
                )
        return entries


def is_supported_format(name: str, extensions: list[str]) -> bool:
    """Check if a file name has a recognized audio extension (case-insensitive)."""
    return os.path.splitext(name)[1].lower() in extensions
