"""
Command routing for the AudioFlow transport shell.
"""

from typing import List, Tuple

from audioflow.commands import playback
from audioflow.context import AppContext


def print_help() -> None:
    """Display help information."""
    help_text = """
Transport commands:
  play [N]                Play track N of the queue (or resume)
  pause                   Pause playback
  resume                  Resume paused playback
  p, toggle               Toggle pause
  next                    Skip to the next track
  prev                    Go back to the previous track
  seek SECONDS            Jump to an absolute position
  stop                    Stop playback
  status                  Show the current track and queue
  help                    Show this help message
  quit, exit              Leave the player
"""
    print(help_text.strip())


def handle_command(
    ctx: AppContext, command: str, args: List[str]
) -> Tuple[AppContext, bool]:
    """
    Handle a single command with explicit state passing.

    Args:
        ctx: Application context
        command: Command name
        args: Command arguments

    Returns:
        (updated_context, should_continue) - Updated context and whether to continue
    """
    if command in ['quit', 'exit']:
        ctx.get_controller().stop()
        print("Goodbye!")
        return ctx, False

    elif command == 'help':
        print_help()
        return ctx, True

    elif command == 'play':
        return playback.handle_play_command(ctx, args)

    elif command == 'pause':
        return playback.handle_pause_command(ctx)

    elif command == 'resume':
        return playback.handle_resume_command(ctx)

    elif command in ['p', 'toggle']:
        ctx.get_controller().toggle_pause()
        return ctx, True

    elif command in ['next', 'skip']:
        return playback.handle_next_command(ctx)

    elif command in ['prev', 'previous']:
        return playback.handle_prev_command(ctx)

    elif command == 'seek':
        return playback.handle_seek_command(ctx, args)

    elif command == 'stop':
        return playback.handle_stop_command(ctx)

    elif command == 'status':
        return playback.handle_status_command(ctx)

    else:
        print(f"Unknown command: '{command}'. Type 'help' for available commands.")
        return ctx, True
