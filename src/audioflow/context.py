"""Application context for explicit state passing.

AppContext bundles the loaded configuration with the services built from it,
so command handlers receive everything they need as one argument.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from audioflow.core.config import Config, ensure_directories, get_data_dir
from audioflow.core.database import KeyValueStore
from audioflow.core.output import setup_loguru
from audioflow.domain.library.service import LibraryService
from audioflow.domain.playback.mpv import MpvEngine
from audioflow.domain.playback.session import PlaybackController


@dataclass
class AppContext:
    """Application context passed to command handlers.

    Attributes:
        config: Application configuration
        store: Persistent key-value store holding the catalog cache
        library: Folder catalog and cache service
        engine: Playback engine, started on first use
        controller: Playback session, created on first use
    """

    config: Config
    store: KeyValueStore
    library: LibraryService
    engine: Optional[MpvEngine] = field(default=None)
    controller: Optional[PlaybackController] = field(default=None)

    @classmethod
    def create(cls, config: Config, db_path: Optional[Path] = None) -> "AppContext":
        """Configure logging and build the library services."""
        ensure_directories()
        log_file = (
            Path(config.logging.log_file)
            if config.logging.log_file
            else get_data_dir() / "audioflow.log"
        )
        setup_loguru(
            log_file,
            level=config.logging.level,
            console_output=config.logging.console_output,
        )

        store = KeyValueStore(db_path)
        library = LibraryService.from_config(config, store)
        return cls(config=config, store=store, library=library)

    def get_controller(self) -> PlaybackController:
        """Return the playback controller, creating the engine on first use."""
        if self.controller is None:
            self.engine = MpvEngine(self.config.player)
            self.controller = PlaybackController(
                self.engine,
                progress_interval=self.config.player.progress_interval,
                stop_timeout=self.config.player.stop_timeout,
            )
        return self.controller

    def shutdown(self) -> None:
        """Release playback and background workers."""
        if self.controller is not None:
            self.controller.close()
        if self.engine is not None:
            self.engine.shutdown()
        self.library.catalog.close()
