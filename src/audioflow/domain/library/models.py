"""
Music library domain models.

Contains data structures for folders, tracks and the folder catalog.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, NamedTuple, Optional


class Folder(NamedTuple):
    """A directory that directly contains at least one playable track.

    The absolute path is the folder's identity.
    """
    name: str  # basename of path
    path: str  # absolute path

    @classmethod
    def from_path(cls, path: str) -> "Folder":
        """Create a folder from a path, deriving the display name."""
        name = Path(path).name or path
        return cls(name=name, path=path)


class Track(NamedTuple):
    """Represents one playable audio file.

    A track's identity is its path; name is the file name as listed.
    """
    name: str
    path: str
    artist: Optional[str] = None
    album: Optional[str] = None
    cover_art_url: Optional[str] = None


@dataclass(frozen=True)
class Catalog:
    """Ordered, path-deduplicated set of discovered folders."""

    folders: tuple[Folder, ...] = ()

    def __len__(self) -> int:
        return len(self.folders)

    def __iter__(self):
        return iter(self.folders)

    def paths(self) -> list[str]:
        return [folder.path for folder in self.folders]

    def contains(self, path: str) -> bool:
        return any(folder.path == path for folder in self.folders)

    def with_folder(self, folder: Folder) -> "Catalog":
        """Return a catalog with folder appended, unless its path is present."""
        if self.contains(folder.path):
            return self
        return Catalog(self.folders + (folder,))

    def to_json(self) -> str:
        """Serialize to the cache blob format: a JSON list of {name, path}."""
        return json.dumps(
            [{"name": folder.name, "path": folder.path} for folder in self.folders]
        )

    @classmethod
    def from_json(cls, blob: str) -> "Catalog":
        """Deserialize a cache blob.

        Raises:
            ValueError: If the blob is not a list of {name, path} objects
        """
        data = json.loads(blob)
        if not isinstance(data, list):
            raise ValueError("Catalog blob must be a JSON list")

        folders: list[Folder] = []
        seen: set[str] = set()
        for item in data:
            try:
                folder = Folder(name=str(item["name"]), path=str(item["path"]))
            except (KeyError, TypeError) as e:
                raise ValueError(f"Invalid folder entry: {item!r}") from e
            if folder.path not in seen:
                seen.add(folder.path)
                folders.append(folder)
        return cls(tuple(folders))

    @classmethod
    def from_folders(cls, folders: Iterable[Folder]) -> "Catalog":
        catalog = cls()
        for folder in folders:
            catalog = catalog.with_folder(folder)
        return catalog
