"""
MPV playback engine using JSON IPC.

One long-lived ``mpv --idle`` process serves every resource the engine opens.
Files are loaded paused; the resource unpauses on play(). End of track is
detected from the ``eof-reached`` property while the position is sampled.
"""

import json
import os
import socket
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from audioflow.core.config import PlayerConfig
from audioflow.core.errors import LoadError


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            ["mpv", "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _ipc_request(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC command and return the decoded response, if any."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(socket_path)

            sock.send((json.dumps(command) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8").strip()
    except (socket.error, OSError):
        return None

    # mpv may interleave event lines with the reply; the reply has an "error" key
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if "error" in data:
            return data
    return None


def send_mpv_command(socket_path: Optional[str], command: list[Any]) -> bool:
    """Send JSON IPC command to MPV."""
    response = _ipc_request(socket_path, {"command": command})
    return response is not None and response.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    response = _ipc_request(socket_path, {"command": ["get_property", property_name]})
    if response and response.get("error") == "success":
        return response.get("data")
    return None


class MpvResource:
    """A file loaded into the engine's mpv process."""

    def __init__(
        self,
        engine: "MpvEngine",
        path: str,
        duration: float,
        on_finished: Callable[[], None],
    ):
        self.engine = engine
        self.path = path
        self._duration = duration
        self._position = 0.0
        self._on_finished = on_finished
        self._finished_signalled = False
        self._stopped = False
        self._released = False

    def play(self) -> None:
        self.engine.command(["set_property", "pause", False])

    def pause(self) -> None:
        self.engine.command(["set_property", "pause", True])

    def stop(self, on_stopped: Callable[[], None]) -> None:
        self._stopped = True
        self.engine.command(["stop"])
        on_stopped()

    def release(self) -> None:
        if self._released:
            logger.warning(f"Resource released twice: {self.path}")
            return
        self._released = True
        self.engine.resource_released(self)

    def seek(self, seconds: float) -> None:
        self.engine.command(["seek", seconds, "absolute"])
        self._position = seconds

    def get_position(self) -> float:
        position = self.engine.get_property("time-pos")
        if position is not None:
            self._position = float(position)
        self._check_finished()
        return self._position

    def get_duration(self) -> float:
        duration = self.engine.get_property("duration")
        if duration is not None and duration > 0:
            self._duration = float(duration)
        return self._duration

    def _check_finished(self) -> None:
        if self._stopped or self._finished_signalled:
            return
        if self.engine.get_property("eof-reached") is True:
            self._finished_signalled = True
            logger.debug(f"Track finished: {self.path}")
            self._on_finished()


class MpvEngine:
    """Playback engine backed by a single mpv process."""

    def __init__(self, config: Optional[PlayerConfig] = None):
        self.config = config or PlayerConfig()
        self.socket_path: Optional[str] = None
        self.process: Optional[subprocess.Popen] = None
        self._active: Optional[MpvResource] = None
        self._lock = threading.Lock()

    def is_running(self) -> bool:
        """Check if the MPV process is alive and its socket exists."""
        if not self.process or self.process.poll() is not None:
            return False
        return bool(self.socket_path and os.path.exists(self.socket_path))

    def start(self) -> bool:
        """Start MPV with JSON IPC. Returns False if it could not be started."""
        if self.is_running():
            return True

        if self.config.mpv_socket_path:
            socket_path = self.config.mpv_socket_path
        else:
            socket_path = str(
                Path(tempfile.gettempdir()) / f"audioflow-mpv-{os.getpid()}"
            )

        logger.info(f"Starting MPV player with socket: {socket_path}")

        try:
            if os.path.exists(socket_path):
                os.unlink(socket_path)

            cmd = [
                "mpv",
                "--idle=yes",
                "--no-video",
                "--no-terminal",
                f"--input-ipc-server={socket_path}",
                f"--volume={self.config.volume}",
                "--keep-open=yes",
                "--load-scripts=no",
            ]
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.error(f"Failed to start MPV: {e}")
            return False

        deadline = time.monotonic() + 5.0
        while not os.path.exists(socket_path):
            if time.monotonic() > deadline or process.poll() is not None:
                logger.error("MPV socket was not created")
                process.kill()
                return False
            time.sleep(0.1)

        self.process = process
        self.socket_path = socket_path
        return True

    def shutdown(self) -> None:
        """Stop the MPV process and remove its socket."""
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired):
                pass
            self.process = None

        if self.socket_path and os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass

    def command(self, command: list[Any]) -> bool:
        return send_mpv_command(self.socket_path, command)

    def get_property(self, name: str) -> Any:
        return get_mpv_property(self.socket_path, name)

    def open(self, path: str, on_finished: Callable[[], None]) -> MpvResource:
        """Load path paused and wait for mpv to report a stable duration.

        Raises:
            LoadError: If the file is missing, mpv is unavailable, or no
                duration is reported within the load timeout
        """
        if not os.path.isfile(path):
            raise LoadError(path, "file not found")

        with self._lock:
            if self._active is not None:
                raise LoadError(path, "previous resource was not released")
            if not self.start():
                raise LoadError(path, "mpv is not available")

            self.command(["set_property", "pause", True])
            if not self.command(["loadfile", path, "replace"]):
                raise LoadError(path, "mpv rejected the file")

            duration = self._wait_for_duration(path)
            if duration is None:
                self.command(["stop"])
                raise LoadError(path, "could not decode audio")

            resource = MpvResource(self, path, duration, on_finished)
            self._active = resource
            return resource

    def resource_released(self, resource: MpvResource) -> None:
        with self._lock:
            if self._active is resource:
                self._active = None

    def _wait_for_duration(self, path: str) -> Optional[float]:
        """Poll duration until two consecutive reads agree."""
        poll_interval = 0.05
        deadline = time.monotonic() + self.config.load_timeout
        last_duration = None
        stable_reads = 0

        while time.monotonic() < deadline:
            duration = self.get_property("duration")
            if duration and duration > 0:
                if last_duration is not None and abs(duration - last_duration) < 0.1:
                    stable_reads += 1
                    if stable_reads >= 2:
                        logger.info(f"Loaded {path}: duration={duration:.2f}s")
                        return float(duration)
                else:
                    stable_reads = 0
                last_duration = duration
            time.sleep(poll_interval)

        logger.warning(f"Metadata load incomplete for {path}: duration={last_duration}")
        return float(last_duration) if last_duration else None
