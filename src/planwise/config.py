"""Configuration management for planwise."""

import json
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, ValidationError

from planwise.models.config_models import AppConfig
from planwise.utils.logger import get_logger


class ConfigManager:
    """Manages planwise configuration."""

    def __init__(self, profile: str = "default"):
        self.profile = profile
        self.config_dir = Path(user_config_dir("planwise"))
        self.data_dir = Path(user_data_dir("planwise"))
        self.config_file = self.config_dir / f"{profile}.json"

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    data = json.load(f)
                return AppConfig(**data)
            except (json.JSONDecodeError, ValidationError) as e:
                # If config is corrupted, return default
                get_logger().warning(
                    "ignoring unreadable config %s: %s", self.config_file, e
                )
                return AppConfig()
        return AppConfig()

    def save_config(self, config: Optional[AppConfig] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config

        with open(self.config_file, "w") as f:
            json.dump(config.model_dump(), f, indent=2)

    @property
    def db_path(self) -> Path:
        """SQLite database location, configured or under the user data dir."""
        configured = self.config.storage.db_path
        if configured:
            return Path(configured)
        return self.data_dir / "planwise.db"

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self.get_from_config(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key."""
        keys = key.split(".")
        config_dict = self.config.model_dump()

        # Navigate to the nested dictionary; unknown sections would be dropped silently
        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise KeyError(f"Unknown configuration key '{key}'")
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(f"Unknown configuration key '{key}'")

        current[keys[-1]] = value

        # Reload config from the modified dictionary so validation runs
        self._config = AppConfig(**config_dict)
        self.save_config()

    def reset(self, key: Optional[str] = None) -> None:
        """Reset configuration to defaults, entirely or for one key."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
        else:
            self.set(key, self.get_from_config(AppConfig(), key))

    def get_from_config(self, config: AppConfig, key: str) -> Any:
        """Get value from a config object using dot notation."""
        keys = key.split(".")
        value: Any = config
        for k in keys:
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(profile: str = "default") -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None or _config_manager.profile != profile:
        _config_manager = ConfigManager(profile)
    return _config_manager
