"""Playback domain - session state machine and engine integration.

This domain handles:
- The playback engine/resource contract
- MPV integration via JSON IPC
- Queue, transport and auto-advance (PlaybackController)
- Periodic progress sampling
"""

# Engine contract and MPV backend
from .resource import PlaybackEngine, PlaybackResource
from .mpv import MpvEngine, MpvResource, check_mpv_available

# Session
from .session import PlaybackController, PlaybackSnapshot, PlaybackState
from .progress import ProgressPoller

__all__ = [
    # Engine
    "PlaybackEngine",
    "PlaybackResource",
    "MpvEngine",
    "MpvResource",
    "check_mpv_available",
    # Session
    "PlaybackController",
    "PlaybackSnapshot",
    "PlaybackState",
    "ProgressPoller",
]
