"""
Playback session controller.

Owns the track queue, the transport state machine and the single live
playback resource:

    IDLE -> LOADING -> PLAYING <-> PAUSED
    PLAYING | PAUSED -> STOPPED -> IDLE
    LOADING -> IDLE (load failure)

Loads run on a single worker thread so at most one open() is outstanding.
Every load request bumps a generation counter; results, completion signals
and progress ticks carrying an older generation are discarded.
Stopping or replacing the queue mid-load waits for the outstanding open to
return and be released before the session settles to IDLE.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from functools import partial
from typing import Callable, NamedTuple, Optional

from loguru import logger

from audioflow.core.errors import LoadError
from audioflow.domain.library.models import Track

from .progress import ProgressPoller
from .resource import PlaybackEngine, PlaybackResource


class PlaybackState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class PlaybackSnapshot(NamedTuple):
    """Immutable view of the session published to observers."""

    state: PlaybackState
    position: float = 0.0
    duration: float = 0.0
    current_index: Optional[int] = None
    current_track: Optional[Track] = None
    queue_length: int = 0


SnapshotListener = Callable[[PlaybackSnapshot], None]
ErrorListener = Callable[[LoadError], None]

_ACTIVE_STATES = (PlaybackState.PLAYING, PlaybackState.PAUSED)


def _completed(result: bool) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


class PlaybackController:
    """Sequential playback over a queue of tracks from one folder."""

    def __init__(
        self,
        engine: PlaybackEngine,
        progress_interval: float = 1.0,
        stop_timeout: float = 2.0,
    ):
        """
        Args:
            engine: Opens playback resources
            progress_interval: Seconds between progress samples (0 disables the poller)
            stop_timeout: Seconds to wait for a resource to confirm stop before releasing
        """
        self.engine = engine
        self.stop_timeout = stop_timeout

        self._lock = threading.RLock()
        self._queue: list[Track] = []
        self._current_index: Optional[int] = None
        self._state = PlaybackState.IDLE
        self._position = 0.0
        self._duration = 0.0
        self._resource: Optional[PlaybackResource] = None
        self._generation = 0
        self._pending_seek: Optional[float] = None
        self._pending_snapshots: list[PlaybackSnapshot] = []
        self._open_done: Optional[threading.Event] = None
        self._load_thread: Optional[threading.Thread] = None
        self._closed = False

        self._listeners: list[SnapshotListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="playback-load"
        )
        self._poller = (
            ProgressPoller(self.sample_progress, progress_interval)
            if progress_interval > 0
            else None
        )

    def __enter__(self) -> "PlaybackController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ----------------------------
    # Observation
    # ----------------------------

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return self._state

    @property
    def queue(self) -> list[Track]:
        with self._lock:
            return list(self._queue)

    @property
    def current_index(self) -> Optional[int]:
        with self._lock:
            return self._current_index

    @property
    def position(self) -> float:
        with self._lock:
            return self._position

    @property
    def duration(self) -> float:
        with self._lock:
            return self._duration

    def snapshot(self) -> PlaybackSnapshot:
        with self._lock:
            return self._snapshot()

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a listener for every published snapshot."""
        self._listeners.append(listener)

    def subscribe_errors(self, listener: ErrorListener) -> None:
        """Register a listener for load failures."""
        self._error_listeners.append(listener)

    # ----------------------------
    # Transport
    # ----------------------------

    def load_queue(
        self, tracks: list[Track], start_index: Optional[int] = None
    ) -> Optional[Future]:
        """Replace the queue, releasing any live resource first.

        Returns:
            The load future if start_index was given, else None
        """
        self._settle_inflight_load()
        with self._lock:
            self._stop_locked()
            self._queue = list(tracks)
            self._pending_snapshots.append(self._snapshot())
            future = (
                self._play_locked(start_index) if start_index is not None else None
            )
        self._flush()
        return future

    def play(self, index: int) -> Future:
        """Play the queue entry at index.

        Resumes in place if index is the paused active track; otherwise the
        live resource is released and the track is loaded from the start.

        Returns:
            Future resolving to True once playing, False if superseded;
            a failed load sets LoadError on the future

        Raises:
            IndexError: If index is outside the queue
        """
        with self._lock:
            future = self._play_locked(index)
        self._flush()
        return future

    def pause(self) -> None:
        """Pause playback. No-op unless PLAYING."""
        with self._lock:
            if self._state is not PlaybackState.PLAYING or self._resource is None:
                return
            self._resource.pause()
            self._transition(PlaybackState.PAUSED)
        self._flush()

    def resume(self) -> None:
        """Resume playback. No-op unless PAUSED."""
        with self._lock:
            if self._state is not PlaybackState.PAUSED or self._resource is None:
                return
            self._resource.play()
            self._transition(PlaybackState.PLAYING)
        self._flush()

    def toggle_pause(self) -> None:
        if self.state is PlaybackState.PLAYING:
            self.pause()
        else:
            self.resume()

    def stop(self) -> None:
        """Release the resource and settle to IDLE via STOPPED."""
        self._settle_inflight_load()
        with self._lock:
            self._stop_locked()
        self._flush()

    def seek(self, seconds: float) -> None:
        """Seek to an absolute position, clamped to [0, duration].

        While LOADING the request is kept and applied once the track is ready.
        """
        with self._lock:
            if self._state is PlaybackState.LOADING:
                self._pending_seek = max(0.0, seconds)
                return
            if self._state not in _ACTIVE_STATES or self._resource is None:
                return

            duration = self._duration or self._resource.get_duration()
            target = self._clamp(seconds, duration)
            self._resource.seek(target)
            self._position = target
            self._duration = max(0.0, duration)
            self._pending_snapshots.append(self._snapshot())
        self._flush()

    def next(self) -> Optional[Future]:
        """Advance to the next track. No-op (None) at the end of the queue."""
        return self._step(1)

    def previous(self) -> Optional[Future]:
        """Go back to the previous track. No-op (None) at the start of the queue."""
        return self._step(-1)

    def sample_progress(self) -> Optional[PlaybackSnapshot]:
        """Read position/duration from the live resource and publish them.

        Ticks are discarded while IDLE, LOADING or STOPPED.
        """
        with self._lock:
            if self._state not in _ACTIVE_STATES or self._resource is None:
                return None
            duration = max(0.0, self._resource.get_duration())
            position = self._resource.get_position()
            # The read may have signalled completion and moved the session on
            if self._state not in _ACTIVE_STATES or self._resource is None:
                return None
            self._duration = duration
            self._position = self._clamp(position, duration)
            snapshot = self._snapshot()
            self._pending_snapshots.append(snapshot)
        self._flush()
        return snapshot

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until queued load and auto-advance work has run."""
        with self._lock:
            if self._closed:
                return
            barrier = self._executor.submit(lambda: None)
        barrier.result(timeout=timeout)

    def close(self) -> None:
        """Tear down the session: release the resource and stop background work."""
        self._settle_inflight_load()
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stop_locked()
        self._flush()

        if self._poller:
            self._poller.stop()
        self._executor.shutdown(wait=True)

    # ----------------------------
    # Internals (lock held unless noted)
    # ----------------------------

    def _step(self, offset: int) -> Optional[Future]:
        with self._lock:
            if self._current_index is None or self._state is PlaybackState.IDLE:
                return None
            target = self._current_index + offset
            if not 0 <= target < len(self._queue):
                return None
            future = self._play_locked(target)
        self._flush()
        return future

    def _play_locked(self, index: int) -> Future:
        if self._closed:
            raise RuntimeError("Playback controller is closed")
        if not 0 <= index < len(self._queue):
            raise IndexError(f"Track index {index} out of range (queue has {len(self._queue)})")

        if index == self._current_index and self._state is PlaybackState.PAUSED:
            self._resource.play()
            self._transition(PlaybackState.PLAYING)
            return _completed(True)

        generation, track = self._begin_load(index)
        return self._executor.submit(self._load, generation, track)

    def _begin_load(self, index: int) -> tuple[int, Track]:
        # The previous resource is fully released before the new open is queued
        self._release_resource()
        self._generation += 1
        self._current_index = index
        self._position = 0.0
        self._duration = 0.0
        self._pending_seek = None
        self._transition(PlaybackState.LOADING)
        return self._generation, self._queue[index]

    def _stop_locked(self) -> None:
        had_session = self._resource is not None or self._state is not PlaybackState.IDLE
        self._generation += 1
        self._release_resource()
        self._position = 0.0
        self._duration = 0.0
        self._pending_seek = None
        if had_session:
            self._transition(PlaybackState.STOPPED)
        self._current_index = None
        if had_session:
            self._transition(PlaybackState.IDLE)

    def _release_resource(self) -> None:
        resource = self._resource
        if resource is None:
            return
        self._resource = None
        self._dispose(resource)

    def _dispose(self, resource: PlaybackResource) -> None:
        """Stop, wait for confirmation, then release exactly once. Lock not required."""
        stopped = threading.Event()
        try:
            resource.stop(stopped.set)
            if not stopped.wait(self.stop_timeout):
                logger.warning("Playback resource did not confirm stop; releasing anyway")
        except Exception:
            logger.exception("Failed to stop playback resource")
        finally:
            try:
                resource.release()
            except Exception:
                logger.exception("Failed to release playback resource")

    def _settle_inflight_load(self) -> None:
        """Supersede a load in progress and wait until its open has returned
        and anything it produced is released. Lock not held.
        """
        with self._lock:
            if self._state is not PlaybackState.LOADING:
                return
            self._generation += 1
            done = self._open_done
            # Listeners run on the load worker; it cannot wait on itself
            if done is None or threading.current_thread() is self._load_thread:
                return
        done.wait()

    def _load(self, generation: int, track: Track) -> bool:
        """Open track on the worker thread and start it if still current."""
        with self._lock:
            if generation != self._generation:
                return False
            done = threading.Event()
            self._open_done = done
            self._load_thread = threading.current_thread()

        try:
            return self._open_and_start(generation, track)
        finally:
            done.set()

    def _open_and_start(self, generation: int, track: Track) -> bool:
        try:
            resource = self.engine.open(track.path, partial(self._on_finished, generation))
        except LoadError as e:
            if not self._load_failed(generation, e):
                return False
            raise
        except Exception as e:
            error = LoadError(track.path, str(e))
            if not self._load_failed(generation, error):
                return False
            raise error from e

        with self._lock:
            stale = generation != self._generation
            if not stale:
                self._resource = resource
                self._duration = max(0.0, resource.get_duration())
                if self._pending_seek is not None:
                    target = self._clamp(self._pending_seek, self._duration)
                    resource.seek(target)
                    self._position = target
                    self._pending_seek = None
                resource.play()
                self._transition(PlaybackState.PLAYING)

        if stale:
            logger.debug(f"Discarding superseded load: {track.path}")
            self._dispose(resource)
            return False

        logger.info(f"Now playing: {track.name}")
        self._flush()
        if self._poller:
            self._poller.start()
        return True

    def _load_failed(self, generation: int, error: LoadError) -> bool:
        """Settle to IDLE and report error. False if the load was already superseded."""
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Ignoring failure of superseded load: {error}")
                return False
            # Queue stays intact; only the attempted selection is dropped
            self._current_index = None
            self._position = 0.0
            self._duration = 0.0
            self._pending_seek = None
            self._transition(PlaybackState.IDLE)
        self._flush()

        logger.error(str(error))
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception:
                logger.exception("Error listener failed")
        return True

    def _on_finished(self, generation: int) -> None:
        """Natural end of track, called by the resource from any thread."""
        with self._lock:
            if generation != self._generation or self._closed:
                return
            self._executor.submit(self._advance_after_finish, generation)

    def _advance_after_finish(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state not in _ACTIVE_STATES:
                return
            next_index = self._current_index + 1
            if next_index < len(self._queue):
                next_generation, track = self._begin_load(next_index)
            else:
                logger.info("Reached end of queue")
                self._stop_locked()
                track = None
        self._flush()

        if track is not None:
            try:
                # Already on the worker thread, so load inline
                self._load(next_generation, track)
            except LoadError:
                pass  # reported to error listeners by _load_failed

    def _transition(self, state: PlaybackState) -> None:
        if state is not PlaybackState.IDLE and self._current_index is None:
            raise RuntimeError(f"Cannot enter {state.name} without a current track")
        self._state = state
        self._pending_snapshots.append(self._snapshot())

    def _snapshot(self) -> PlaybackSnapshot:
        index = self._current_index
        return PlaybackSnapshot(
            state=self._state,
            position=self._position,
            duration=self._duration,
            current_index=index,
            current_track=self._queue[index] if index is not None else None,
            queue_length=len(self._queue),
        )

    @staticmethod
    def _clamp(seconds: float, duration: float) -> float:
        position = max(0.0, seconds)
        if duration > 0:
            position = min(position, duration)
        return position

    def _flush(self) -> None:
        """Publish queued snapshots outside the lock."""
        with self._lock:
            snapshots = self._pending_snapshots
            self._pending_snapshots = []
        for snapshot in snapshots:
            for listener in list(self._listeners):
                try:
                    listener(snapshot)
                except Exception:
                    logger.exception("Snapshot listener failed")
