"""
Library command handlers for AudioFlow CLI.

Handles: scan, clear-cache, folders, tracks, pick
"""

import os
from typing import List, Optional

from rich.table import Table

from audioflow.context import AppContext
from audioflow.core.errors import NotADirectoryPicked
from audioflow.core.output import get_console
from audioflow.core.output import log
from audioflow.domain.library import Folder, SortDirection, Track, get_display_name
from audioflow.domain.library.picker import pick_directory


def resolve_folder(ctx: AppContext, folder_arg: str) -> Optional[Folder]:
    """Resolve a folder argument: a 1-based catalog index or a directory path.

    A directory outside the catalog is added for this session, like a pick.
    """
    folders = ctx.library.catalog.folders

    if folder_arg.isdigit():
        index = int(folder_arg) - 1
        if 0 <= index < len(folders):
            return folders[index]
        log(f"No folder #{folder_arg} (catalog has {len(folders)})", "error")
        return None

    path = os.path.abspath(os.path.expanduser(folder_arg))
    folder = ctx.library.catalog.find(path)
    if folder:
        return folder
    if os.path.isdir(path):
        folder, _ = ctx.library.add_picked_folder(path)
        return folder

    log(f"Folder not found: {folder_arg}", "error")
    return None


def list_folder_tracks(
    ctx: AppContext, folder: Folder, sort: Optional[str] = None
) -> List[Track]:
    """Select folder, wait for its listing and apply an optional sort."""
    tracks = ctx.library.catalog.list_selected(folder)
    if sort:
        tracks = ctx.library.catalog.sort(SortDirection(sort))
    return tracks


def print_folders(ctx: AppContext) -> None:
    folders = ctx.library.catalog.folders
    if not folders:
        log("No music folders found", "warning")
        return

    table = Table(title=f"Music folders ({len(folders)})")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Folder", style="bold")
    table.add_column("Path", style="dim")
    for i, folder in enumerate(folders, 1):
        table.add_row(str(i), folder.name, folder.path)
    get_console().print(table)


def print_tracks(folder: Folder, tracks: List[Track]) -> None:
    if not tracks:
        log(f"No playable tracks in {folder.path}", "warning")
        return

    table = Table(title=f"{folder.name} ({len(tracks)} tracks)")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Track", style="bold")
    table.add_column("Album", style="dim")
    for i, track in enumerate(tracks, 1):
        table.add_row(str(i), get_display_name(track), track.album or "")
    get_console().print(table)


def load_catalog(ctx: AppContext, rescan: bool = False) -> None:
    """Load the catalog from cache or scan, showing scan progress."""
    console = get_console()
    with console.status("Scanning for music folders...") as status:

        def on_progress(visited: int, found: int) -> None:
            status.update(
                f"Scanning for music folders... {visited} directories, {found} found"
            )

        if rescan:
            ctx.library.rescan(on_progress)
        else:
            ctx.library.load_catalog(on_progress)


def handle_scan_command(ctx: AppContext, rescan: bool = False) -> int:
    """Handle scan command.

    Args:
        ctx: Application context
        rescan: Ignore the cache and walk the roots again

    Returns:
        Exit code
    """
    load_catalog(ctx, rescan=rescan)
    log(f"✅ {len(ctx.library.catalog.folders)} music folder(s)", "success")
    print_folders(ctx)
    return 0


def handle_clear_cache_command(ctx: AppContext) -> int:
    if ctx.library.clear_cache():
        log("🗑️  Catalog cache cleared", "success")
    else:
        log("Catalog cache was already empty", "info")
    return 0


def handle_folders_command(ctx: AppContext) -> int:
    load_catalog(ctx)
    print_folders(ctx)
    return 0


def handle_tracks_command(
    ctx: AppContext, folder_arg: str, sort: Optional[str] = None
) -> int:
    """Handle tracks command - list one folder's playable files."""
    load_catalog(ctx)
    folder = resolve_folder(ctx, folder_arg)
    if folder is None:
        return 1

    print_tracks(folder, list_folder_tracks(ctx, folder, sort))
    return 0


def handle_pick_command(ctx: AppContext) -> int:
    """Handle pick command - choose a directory and list its tracks.

    A cancelled pick is not an error.
    """
    load_catalog(ctx)
    try:
        picked = ctx.library.pick_and_add(pick_directory)
    except NotADirectoryPicked as e:
        log(str(e), "error")
        return 1

    if picked is None:
        return 0

    folder, listing = picked
    print_tracks(folder, listing.result())
    return 0
