"""Main application entry point"""

import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .core.input_engine import InputEngine
from .services.record_store import RecordStore
from .utils.config import ConfigManager, Settings
from .utils.exceptions import ConfigError, PersistenceError
from .utils.logger import get_logger, setup_logger
from .workflow.engine import WorkflowEngine

logger = get_logger(__name__)


class PetAdoptApp:
    """Wires configuration, logging, the record store and the menu together"""

    def __init__(self, config_manager: Optional[ConfigManager] = None, console: Optional[Console] = None):
        self.config_manager = config_manager or ConfigManager()
        self.console = console or Console()
        self.config: Optional[Settings] = None
        self.store: Optional[RecordStore] = None
        self.workflow: Optional[WorkflowEngine] = None

    def initialize(self) -> None:
        """Load configuration and the record store. Raises on unusable startup state."""
        self.config = self.config_manager.load_settings()

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
            data_dir=self.config.storage.data_dir,
        )

        storage = self.config.storage
        self.store = RecordStore(
            data_dir=storage.data_dir,
            users_file=storage.users_file,
            pets_file=storage.pets_file,
            applications_file=storage.applications_file,
            bootstrap_username=self.config.auth.bootstrap_username,
            bootstrap_password=self.config.auth.bootstrap_password,
            seed_demo_pets=storage.seed_demo_pets,
        ).load()

        inputs = InputEngine(console=self.console, max_attempts=self.config.input.max_attempts)
        self.workflow = WorkflowEngine(self.store, inputs, console=self.console)

    def run(self) -> None:
        if self.workflow is None:
            self.initialize()
        self.workflow.run()


def main() -> int:
    console = Console()
    app = PetAdoptApp(console=console)
    try:
        app.initialize()
    except (ConfigError, PersistenceError) as e:
        console.print(f"[bold red]Startup failed:[/bold red] {escape(str(e))}")
        logger.error("Startup failed", error_type=type(e).__name__, error=str(e))
        return 1

    try:
        app.run()
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Goodbye![/yellow]")
        logger.info("Session ended by interrupt")
    return 0


if __name__ == "__main__":
    sys.exit(main())
