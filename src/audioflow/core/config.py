"""
Configuration management for AudioFlow
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

# Directories probed beneath the storage root when no explicit roots are configured
DEFAULT_ROOT_PATHS = [
    "",
    "Music",
    "Download",
    "Download/Music",
    "Download/Musik",
    "Downloads",
    "Downloads/Music",
    "Downloads/Musik",
    "Download/Rap",
]


@dataclass
class LibraryConfig:
    """Configuration for library scanning."""

    storage_root: str = field(default_factory=lambda: str(Path.home()))
    root_paths: List[str] = field(default_factory=lambda: list(DEFAULT_ROOT_PATHS))
    audio_extensions: List[str] = field(default_factory=lambda: [".mp3"])
    parallel_scan: bool = False
    scan_workers: int = 4
    read_tags: bool = True

    def resolved_roots(self) -> List[str]:
        """Return root paths as absolute paths, in configured order.

        Relative entries are resolved beneath storage_root; an empty entry
        is the storage root itself.
        """
        base = Path(self.storage_root).expanduser()
        roots = []
        for entry in self.root_paths:
            path = Path(entry).expanduser()
            if not path.is_absolute():
                path = base / entry if entry else base
            roots.append(os.path.normpath(str(path)))
        return roots


@dataclass
class PlayerConfig:
    """Configuration for the playback engine."""

    mpv_socket_path: Optional[str] = None
    volume: int = 50
    progress_interval: float = 1.0  # seconds between progress samples
    load_timeout: float = 5.0  # seconds to wait for mpv to report a duration
    stop_timeout: float = 2.0  # seconds to wait for a resource to confirm stop


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: <data dir>/audioflow.log
    console_output: bool = False


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


APP_NAME = "audioflow"


def _xdg_dir(env_var: str, *home_fallback: str) -> Path:
    """Per-app directory under an XDG base dir, or its default beneath home."""
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home().joinpath(*home_fallback)
    return root / APP_NAME


def get_config_dir() -> Path:
    return _xdg_dir("XDG_CONFIG_HOME", ".config")


def _find_project_config() -> Optional[Path]:
    """Find config.toml in the project root (marked by pyproject.toml).

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. AUDIOFLOW_CONFIG, if set
    2. Project root (detected via pyproject.toml) - for development
    3. Current working directory
    4. XDG_CONFIG_HOME/audioflow (or ~/.config/audioflow)
    """
    explicit = os.environ.get("AUDIOFLOW_CONFIG")
    if explicit:
        return Path(explicit).expanduser()

    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Directory for the database and log file."""
    return _xdg_dir("XDG_DATA_HOME", ".local", "share")


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# AudioFlow Configuration

[library]
# Base directory that relative root paths are resolved against
# storage_root = "~"

# Directories to scan recursively for music folders ("" is the storage root)
root_paths = ["", "Music", "Download", "Download/Music", "Download/Musik", "Downloads", "Downloads/Music", "Downloads/Musik", "Download/Rap"]

# File extensions recognized as playable audio (case-insensitive)
audio_extensions = [".mp3"]

# Walk each root on its own worker thread
parallel_scan = false
scan_workers = 4

# Read artist/album tags when listing a folder
read_tags = true

[player]
# Path for mpv socket (auto-detected if not specified)
# mpv_socket_path = "/tmp/audioflow-mpv-socket"

# Default volume (0-100)
volume = 50

# Seconds between progress updates
progress_interval = 1.0

# Seconds to wait for a track to load
load_timeout = 5.0

[logging]
level = "INFO"
# log_file = "~/.local/share/audioflow/audioflow.log"
console_output = false
"""


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, falling back to defaults per key."""
    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            storage_root=str(
                Path(
                    library_data.get("storage_root", config.library.storage_root)
                ).expanduser()
            ),
            root_paths=list(library_data.get("root_paths", config.library.root_paths)),
            audio_extensions=[
                ext.lower()
                for ext in library_data.get(
                    "audio_extensions", config.library.audio_extensions
                )
            ],
            parallel_scan=library_data.get(
                "parallel_scan", config.library.parallel_scan
            ),
            scan_workers=library_data.get("scan_workers", config.library.scan_workers),
            read_tags=library_data.get("read_tags", config.library.read_tags),
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_socket_path=player_data.get("mpv_socket_path"),
            volume=player_data.get("volume", config.player.volume),
            progress_interval=float(
                player_data.get("progress_interval", config.player.progress_interval)
            ),
            load_timeout=float(
                player_data.get("load_timeout", config.player.load_timeout)
            ),
            stop_timeout=float(
                player_data.get("stop_timeout", config.player.stop_timeout)
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Apply AUDIOFLOW_* environment overrides."""
    storage_root = os.environ.get("AUDIOFLOW_STORAGE_ROOT")
    if storage_root:
        config.library.storage_root = str(Path(storage_root).expanduser())

    log_level = os.environ.get("AUDIOFLOW_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - AUDIOFLOW_STORAGE_ROOT
    - AUDIOFLOW_LOG_LEVEL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(_parse_config(toml_data))


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
