"""
Runtime configuration for Podi Tracker.

Settings come from the environment:

- PODI_TRACKER_ENV: production (default), development or test
- PODI_TRACKER_DATABASE_URL: any SQLAlchemy URL, replacing the default file
- PODI_TRACKER_BACKEND: catalog storage, sql (default) or memory
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import DATABASE_FILENAME

ENVIRONMENT_VARIABLE = "PODI_TRACKER_ENV"
DATABASE_URL_VARIABLE = "PODI_TRACKER_DATABASE_URL"
BACKEND_VARIABLE = "PODI_TRACKER_BACKEND"

VALID_ENVIRONMENTS = ("production", "development", "test")

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

logger = logging.getLogger(__name__)


class Config:
    """
    Where the database lives and which catalog backend to use.

    production keeps podi_tracker.db under ~/Documents/PodiTracker,
    development under the project's data/ directory, and test runs
    against in-memory SQLite.
    """

    def __init__(
        self,
        environment: str = "production",
        database_url: Optional[str] = None,
        backend: Optional[str] = None,
    ):
        """
        Args:
            environment: One of VALID_ENVIRONMENTS
            database_url: Explicit SQLAlchemy URL; falls back to PODI_TRACKER_DATABASE_URL
            backend: 'sql' or 'memory'; falls back to PODI_TRACKER_BACKEND, then 'sql'

        Raises:
            ValueError: If environment is not recognized
        """
        if environment not in VALID_ENVIRONMENTS:
            raise ValueError(
                f"Unknown environment '{environment}'. "
                f"Expected one of: {', '.join(VALID_ENVIRONMENTS)}"
            )

        self.environment = environment
        self._url_override = database_url or os.environ.get(DATABASE_URL_VARIABLE)
        self._backend = backend or os.environ.get(BACKEND_VARIABLE, "sql")

        if environment == "development":
            data_dir = PROJECT_ROOT / "data"
        else:
            data_dir = Path.home() / "Documents" / "PodiTracker"
        self._database_path = data_dir / DATABASE_FILENAME

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def database_path(self) -> Path:
        """Default database file; unused when a URL override or the test environment applies."""
        return self._database_path

    @property
    def uses_file_database(self) -> bool:
        return self._url_override is None and self.environment != "test"

    @property
    def database_url(self) -> str:
        if self._url_override:
            return self._url_override
        if self.environment == "test":
            return "sqlite:///:memory:"
        return "sqlite:///" + self._database_path.as_posix()

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def ensure_directories(self) -> None:
        """Create the folder holding the default database file."""
        if self.uses_file_database:
            self._database_path.parent.mkdir(parents=True, exist_ok=True)

    def database_exists(self) -> bool:
        """Whether the database file is present. Non-file databases always count as present."""
        if not self.uses_file_database:
            return True
        return self._database_path.exists()

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Process-wide Config, created on first call.

    Args:
        environment: Used only when the instance is first created; defaults
            to PODI_TRACKER_ENV, then production. A different value on a
            later call is ignored with a warning so the database never
            changes mid-process.
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(environment or os.environ.get(ENVIRONMENT_VARIABLE, "production"))
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"Ignoring environment '{environment}': configuration already "
            f"initialized for '{_config_instance.environment}'"
        )

    return _config_instance


def set_config(config: Config) -> None:
    """Install a specific configuration as the process-wide instance."""
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Forget the process-wide instance; the next get_config() builds a new one."""
    global _config_instance
    _config_instance = None
