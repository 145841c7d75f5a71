"""Application composition root"""

from typing import Optional

from .api.directory_client import DirectoryClient
from .core.connectivity import ConnectivityMonitor
from .core.directory_state import DirectoryState
from .services.key_value_store import KeyValueStore
from .utils.config import ConfigManager, Settings
from .utils.logger import setup_logger, get_logger

logger = get_logger(__name__)


class DirectoryApp:
    """Builds one store, client, connectivity monitor and state per process"""

    def __init__(self, config_dir: str = "config"):
        self.config_manager = ConfigManager(config_dir)
        self.config: Optional[Settings] = None
        self.store: Optional[KeyValueStore] = None
        self.client: Optional[DirectoryClient] = None
        self.connectivity: Optional[ConnectivityMonitor] = None
        self.state: Optional[DirectoryState] = None

    def initialize(self, settings: Optional[Settings] = None) -> DirectoryState:
        """Load configuration and wire the services together"""
        self.config = settings or self.config_manager.load_settings()

        setup_logger(
            log_level=self.config.logging.level,
            log_format=self.config.logging.format,
            file_path=self.config.logging.file_path,
            max_bytes=self.config.logging.max_bytes,
            backup_count=self.config.logging.backup_count,
        )

        logger.info(
            "Configuration loaded",
            app_name=self.config.app.name,
            version=self.config.app.version,
            environment=self.config.app.environment,
            base_url=self.config.api.base_url,
        )

        self.store = KeyValueStore(self.config.storage.path)
        self.client = DirectoryClient(
            store=self.store,
            base_url=self.config.api.base_url,
            connection_timeout=self.config.api.connection_timeout,
            read_timeout=self.config.api.read_timeout,
            token_key=self.config.storage.token_key,
        )
        self.connectivity = ConnectivityMonitor(
            probe_url=self.config.connectivity.probe_url or self.config.api.base_url,
            poll_interval_seconds=self.config.connectivity.poll_interval_seconds,
            probe_timeout=self.config.connectivity.probe_timeout,
        )
        self.state = DirectoryState(
            client=self.client,
            connectivity=self.connectivity,
            page_size=self.config.api.page_size,
        )
        self.state.load_positions()

        logger.info("Application initialized successfully")
        return self.state

    def start(self) -> None:
        """Start connectivity polling; the first online signal loads users"""
        if self.connectivity is None:
            raise RuntimeError("Application not initialized")
        self.connectivity.start()

    def stop(self) -> None:
        if self.connectivity is not None:
            self.connectivity.stop()
        if self.state is not None:
            self.state.close()
        logger.info("Application stopped")
