"""
Configuration management with schema validation.
Settings come from config/settings.yaml with ${VAR} / ${VAR:default} substitution.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from dotenv import load_dotenv

from .exceptions import ConfigError

# Load environment variables
load_dotenv()

DEFAULT_BASE_URL = "https://frontend-test-assignment-api.abz.agency/api/v1"
SETTINGS_FILENAME = "settings.yaml"


class AppSettings(BaseModel):
    name: str = "User Directory"
    version: str = "1.0.0"
    environment: str = "production"


class ApiSettings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    connection_timeout: int = 30
    read_timeout: int = 60
    page_size: int = Field(default=6, ge=1, le=100)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = Field(default="json", pattern="^(json|console)$")
    file_path: Optional[str] = "logs/userdir.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class StorageSettings(BaseModel):
    path: str = "data/storage.json"
    token_key: str = "api_token"


class ConnectivitySettings(BaseModel):
    probe_url: Optional[str] = None  # None = probe api.base_url
    poll_interval_seconds: int = Field(default=10, ge=1)
    probe_timeout: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    connectivity: ConnectivitySettings = Field(default_factory=ConnectivitySettings)


class ConfigManager:
    """Loads and validates settings.yaml"""

    def __init__(self, config_dir: str = "config"):
        self.config_dir = Path(config_dir)
        self.settings_path = self.config_dir / SETTINGS_FILENAME
        self._settings: Optional[Settings] = None

    def _substitute_env_vars(self, value: Any) -> Any:
        """Recursively substitute environment variables"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                env_value = os.getenv(var_expr)
                if env_value is None:
                    raise ConfigError(f"Environment variable {var_expr} not found")
                return env_value
        elif isinstance(value, dict):
            return {k: self._substitute_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._substitute_env_vars(item) for item in value]
        return value

    def load_settings(self) -> Settings:
        """Load and validate settings.yaml"""
        if not self.settings_path.exists():
            raise ConfigError(f"Settings file not found: {self.settings_path}")

        with open(self.settings_path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f) or {}

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
