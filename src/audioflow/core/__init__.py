"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Key-value persistence (SQLite)
- Logging and console output (Loguru, Rich)
- Exception types
"""

# Configuration
from .config import (
    Config,
    LibraryConfig,
    LoggingConfig,
    PlayerConfig,
    create_default_config,
    ensure_directories,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)

# Persistence
from .database import KeyValueStore, get_database_path, get_db_connection, init_database

# Errors
from .errors import AudioFlowError, LoadError, NotADirectoryPicked, PickCancelled, ScanError

# Output
from .output import get_console, log, setup_loguru

__all__ = [
    # Config
    "Config",
    "LibraryConfig",
    "LoggingConfig",
    "PlayerConfig",
    "create_default_config",
    "ensure_directories",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    # Persistence
    "KeyValueStore",
    "get_database_path",
    "get_db_connection",
    "init_database",
    # Errors
    "AudioFlowError",
    "LoadError",
    "NotADirectoryPicked",
    "PickCancelled",
    "ScanError",
    # Output
    "get_console",
    "log",
    "setup_loguru",
]
