"""
Playback command handlers for the AudioFlow transport shell.

Handles: play, pause, resume, next, prev, seek, stop, status
"""

from typing import List, Tuple

from audioflow.context import AppContext
from audioflow.core.output import log
from audioflow.domain.library import format_time, get_display_name
from audioflow.domain.playback import PlaybackSnapshot, PlaybackState

STATE_ICONS = {
    PlaybackState.IDLE: "⏹",
    PlaybackState.LOADING: "⏳",
    PlaybackState.PLAYING: "▶",
    PlaybackState.PAUSED: "⏸",
    PlaybackState.STOPPED: "⏹",
}


def format_progress(snapshot: PlaybackSnapshot) -> str:
    """One-line progress summary for the toolbar and status command."""
    icon = STATE_ICONS[snapshot.state]
    if snapshot.current_track is None:
        return f"{icon} {snapshot.state.value} ({snapshot.queue_length} tracks queued)"

    position = format_time(snapshot.position)
    duration = format_time(snapshot.duration) if snapshot.duration > 0 else "--:--"
    number = snapshot.current_index + 1
    return (
        f"{icon} [{number}/{snapshot.queue_length}] "
        f"{get_display_name(snapshot.current_track)}  {position} / {duration}"
    )


def handle_play_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle play command.

    With no argument, resumes if paused or starts the first queued track.
    ``play N`` plays the N-th queued track (1-based).

    Args:
        ctx: Application context
        args: Command arguments

    Returns:
        (updated_context, should_continue)
    """
    controller = ctx.get_controller()
    queue_length = len(controller.queue)

    if not args:
        if controller.state is PlaybackState.PAUSED:
            controller.resume()
            return ctx, True
        index = controller.current_index if controller.current_index is not None else 0
    else:
        try:
            index = int(args[0]) - 1
        except ValueError:
            log(f"Invalid track number: {args[0]}", "error")
            return ctx, True

    if not 0 <= index < queue_length:
        log(f"No track #{index + 1} (queue has {queue_length})", "error")
        return ctx, True

    controller.play(index)
    return ctx, True


def handle_pause_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    controller = ctx.get_controller()
    if controller.state is not PlaybackState.PLAYING:
        log("Nothing is playing", "warning")
        return ctx, True
    controller.pause()
    log("⏸ Paused", "info")
    return ctx, True


def handle_resume_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    controller = ctx.get_controller()
    if controller.state is not PlaybackState.PAUSED:
        log("Playback is not paused", "warning")
        return ctx, True
    controller.resume()
    log("▶ Resumed", "info")
    return ctx, True


def handle_next_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    if ctx.get_controller().next() is None:
        log("Already at the last track", "warning")
    return ctx, True


def handle_prev_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    if ctx.get_controller().previous() is None:
        log("Already at the first track", "warning")
    return ctx, True


def handle_seek_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle seek command - jump to an absolute position in seconds."""
    if not args:
        log("Usage: seek SECONDS", "error")
        return ctx, True

    try:
        seconds = float(args[0])
    except ValueError:
        log(f"Invalid position: {args[0]}", "error")
        return ctx, True

    controller = ctx.get_controller()
    if controller.state is PlaybackState.IDLE:
        log("Nothing is playing", "warning")
        return ctx, True

    controller.seek(seconds)
    return ctx, True


def handle_stop_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    ctx.get_controller().stop()
    log("⏹ Stopped", "info")
    return ctx, True


def handle_status_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle status command - show the current track and queue."""
    controller = ctx.get_controller()
    snapshot = controller.snapshot()

    log(format_progress(snapshot), "info")
    for i, track in enumerate(controller.queue, 1):
        marker = "→" if snapshot.current_index == i - 1 else " "
        log(f"{marker} {i:3d}. {get_display_name(track)}", "info")
    return ctx, True
