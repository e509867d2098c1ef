"""
Configuration management with schema validation.
Single source of truth for PetAdopt settings (config/settings.yaml).
"""

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

SETTINGS_FILE = Path(os.getenv("PETADOPT_CONFIG", "config/settings.yaml"))


class AppSettings(BaseModel):
    name: str = "PetAdopt"
    version: str = "1.0.0"
    environment: str = "production"


class StorageSettings(BaseModel):
    data_dir: str = "data"
    users_file: str = "users.dat"
    pets_file: str = "pets.dat"
    applications_file: str = "applications.dat"
    seed_demo_pets: bool = True


class AuthSettings(BaseModel):
    """Bootstrap admin credentials. Documented, not secret."""
    bootstrap_username: str = "admin"
    bootstrap_password: str = "admin123"


class InputSettings(BaseModel):
    max_attempts: int = Field(default=3, ge=1, le=10)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: str = "logs/petadopt.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    input: InputSettings = Field(default_factory=InputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ConfigManager:
    """Loads settings.yaml, substituting ${VAR} / ${VAR:default} from the environment"""

    def __init__(self, settings_path: Optional[Union[str, Path]] = None):
        self.settings_path = Path(settings_path) if settings_path else SETTINGS_FILE
        self._settings: Optional[Settings] = None

    def _substitute_env_vars(self, value: Any) -> Any:
        """Recursively substitute environment variables"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                else:
                    return os.getenv(var_expr, value)
        elif isinstance(value, dict):
            return {k: self._substitute_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._substitute_env_vars(item) for item in value]
        return value

    def load_settings(self) -> Settings:
        """Load and validate settings.yaml; defaults apply when the file is absent"""
        if not self.settings_path.exists():
            logger.info("Settings file not found, using defaults", path=str(self.settings_path))
            self._settings = Settings()
            return self._settings

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {self.settings_path}: {e}")

        if not isinstance(raw_data, dict):
            raise ConfigError(f"Settings file {self.settings_path} must contain a mapping")

        processed_data = self._substitute_env_vars(raw_data)
        try:
            self._settings = Settings(**processed_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {self.settings_path}: {e}")
        return self._settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            return self.load_settings()
        return self._settings
