"""
Playback engine contract.

An engine opens one audio file at a time and hands back a resource handle.
The session controller is the only owner of a live resource: it stops the
resource, waits for the stop to be confirmed and then releases it exactly once.
"""

from typing import Callable, Protocol


class PlaybackResource(Protocol):
    """One loaded, decodable audio stream."""

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self, on_stopped: Callable[[], None]) -> None:
        """Stop playback and call on_stopped once the engine confirms."""
        ...

    def release(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def get_position(self) -> float: ...

    def get_duration(self) -> float: ...


class PlaybackEngine(Protocol):
    def open(self, path: str, on_finished: Callable[[], None]) -> PlaybackResource:
        """Load path, ready to play but not yet playing.

        on_finished is called when the track reaches its natural end, never
        after a user-initiated stop.

        Raises:
            LoadError: If the file cannot be opened or decoded
        """
        ...
