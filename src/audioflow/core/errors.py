"""AudioFlow exceptions for error handling."""


class AudioFlowError(Exception):
    """Base exception for AudioFlow operations."""

    pass


class ScanError(AudioFlowError):
    """Raised when a folder cannot be listed (e.g. deleted since the scan)."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Cannot list folder: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class LoadError(AudioFlowError):
    """Raised when a playback resource fails to open or decode."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Failed to load: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class PickCancelled(AudioFlowError):
    """Raised when the user cancels a directory pick. Not a failure."""

    pass


class NotADirectoryPicked(AudioFlowError):
    """Raised when a picked path is missing or is not a directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a directory: {path}")
