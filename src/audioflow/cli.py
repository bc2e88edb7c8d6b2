"""
Command-line interface for AudioFlow.

Library subcommands run once and exit; ``play`` opens an interactive
transport shell with a progress toolbar.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style

from audioflow.commands import library
from audioflow.commands.playback import format_progress
from audioflow.context import AppContext
from audioflow.core.config import load_config
from audioflow.core.errors import AudioFlowError
from audioflow.core.output import log
from audioflow.domain.library import init_collation
from audioflow.domain.playback import check_mpv_available
from audioflow.router import handle_command

SHELL_COMMANDS = [
    'play', 'pause', 'resume', 'toggle', 'next', 'prev', 'seek', 'stop', 'status', 'help', 'quit',
]

SHELL_STYLE = Style.from_dict({
    'prompt': '#00aa00 bold',
    'bottom-toolbar': 'bg:#222222 #00aaaa',
})


def run_play_shell(
    ctx: AppContext, folder_arg: str, start: int = 1, sort: Optional[str] = None
) -> int:
    """Queue a folder and run the interactive transport shell.

    Args:
        ctx: Application context
        folder_arg: Catalog index or directory path
        start: 1-based track number to start with
        sort: Optional sort direction ("asc" or "desc")

    Returns:
        Exit code
    """
    if not check_mpv_available():
        log("❌ mpv is not installed or not on PATH", "error")
        return 1

    library.load_catalog(ctx)
    folder = library.resolve_folder(ctx, folder_arg)
    if folder is None:
        return 1

    tracks = library.list_folder_tracks(ctx, folder, sort)
    if not tracks:
        log(f"No playable tracks in {folder.path}", "warning")
        return 1
    if not 1 <= start <= len(tracks):
        log(f"No track #{start} ({len(tracks)} tracks in {folder.name})", "error")
        return 1

    controller = ctx.get_controller()
    controller.subscribe_errors(lambda error: log(f"❌ {error}", "error"))
    controller.load_queue(tracks, start_index=start - 1)

    session = PromptSession(
        completer=WordCompleter(SHELL_COMMANDS),
        style=SHELL_STYLE,
        bottom_toolbar=lambda: format_progress(controller.snapshot()),
        refresh_interval=1.0,
    )

    log(f"🎵 {folder.name}: {len(tracks)} tracks. Type 'help' for commands.", "info")

    with patch_stdout():
        while True:
            try:
                line = session.prompt("audioflow> ")
            except KeyboardInterrupt:
                continue
            except EOFError:
                ctx, _ = handle_command(ctx, 'quit', [])
                break

            parts = line.strip().split()
            if not parts:
                continue

            ctx, should_continue = handle_command(ctx, parts[0].lower(), parts[1:])
            if not should_continue:
                break

    return 0


def main() -> None:
    """Main entry point for the audioflow command."""
    init_collation()

    parser = argparse.ArgumentParser(
        description="AudioFlow - browse and play your local music folders",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--config',
        type=Path,
        help='Path to config.toml (default: auto-detected)'
    )

    subparsers = parser.add_subparsers(dest='subcommand', help='Available commands')

    scan_parser = subparsers.add_parser(
        'scan', help='Load the folder catalog (scans only if nothing is cached)'
    )
    scan_parser.add_argument(
        '--rescan',
        action='store_true',
        help='Ignore the cache and walk the music roots again'
    )

    subparsers.add_parser('clear-cache', help='Forget the cached folder catalog')
    subparsers.add_parser('folders', help='List music folders')

    tracks_parser = subparsers.add_parser('tracks', help='List tracks in a folder')
    tracks_parser.add_argument('folder', help='Folder number (from "folders") or path')
    tracks_parser.add_argument('--sort', choices=['asc', 'desc'], help='Sort by name')

    play_parser = subparsers.add_parser('play', help='Play a folder interactively')
    play_parser.add_argument('folder', help='Folder number (from "folders") or path')
    play_parser.add_argument(
        '--start', type=int, default=1, help='Track number to start with (default: 1)'
    )
    play_parser.add_argument('--sort', choices=['asc', 'desc'], help='Sort by name')

    subparsers.add_parser('pick', help='Choose a music directory by path')

    args = parser.parse_args()

    if not args.subcommand:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    ctx = AppContext.create(config)

    try:
        if args.subcommand == 'scan':
            code = library.handle_scan_command(ctx, rescan=args.rescan)

        elif args.subcommand == 'clear-cache':
            code = library.handle_clear_cache_command(ctx)

        elif args.subcommand == 'folders':
            code = library.handle_folders_command(ctx)

        elif args.subcommand == 'tracks':
            code = library.handle_tracks_command(ctx, args.folder, args.sort)

        elif args.subcommand == 'play':
            code = run_play_shell(ctx, args.folder, args.start, args.sort)

        elif args.subcommand == 'pick':
            code = library.handle_pick_command(ctx)

        else:
            parser.print_help()
            code = 1

    except AudioFlowError as e:
        log(f"❌ {e}", "error")
        code = 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        code = 1
    except Exception:
        logger.exception("Unhandled error")
        log("❌ Unexpected error, see the log file for details", "error")
        code = 1
    finally:
        ctx.shutdown()

    sys.exit(code)


if __name__ == "__main__":
    main()
