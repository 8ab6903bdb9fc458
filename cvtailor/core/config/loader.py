"""Configuration loader with multi-level hierarchy."""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Load environment variables (provider API keys included) from .env file
load_dotenv()

ENV_PREFIX = "CVTAILOR_"
ENV_PATH_SEPARATOR = "__"


class ConfigLoader:
    """Load and merge configuration from multiple sources.

    Hierarchy (later overrides earlier):
    1. Default config (config/default.yaml)
    2. Environment config (config/environments/{env}.yaml)
    3. Run-specific config (provided programmatically) [optional]
    4. Environment variables (CVTAILOR_SECTION__KEY)
    """

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize config loader.

        Args:
            config_dir: Configuration directory (defaults to ./config)
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent.parent / "config"
        self.config_dir = Path(config_dir)

    def load(self, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        """Load configuration with full hierarchy.

        Args:
            overrides: Run-specific configuration dict (provided programmatically)

        Returns:
            Merged configuration dictionary
        """
        config = self._load_yaml(self.config_dir / "default.yaml")

        env = os.getenv(f"{ENV_PREFIX}ENV", "development")
        env_config_path = self.config_dir / f"environments/{env}.yaml"
        if env_config_path.exists():
            config = self._deep_merge(config, self._load_yaml(env_config_path))

        if overrides:
            config = self._deep_merge(config, overrides)

        return self._apply_env_overrides(config)

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Parsed YAML as dictionary
        """
        if not path.exists():
            return {}

        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
            return content if content else {}

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary (base is not modified)
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: dict[str, Any]) -> dict[str, Any]:
        """Override config with environment variables.

        Nested keys are separated by a double underscore so that keys may
        themselves contain underscores.
        Example: CVTAILOR_GENERATION__MAX_ATTEMPTS overrides
        config["generation"]["max_attempts"]

        Args:
            config: Configuration dictionary

        Returns:
            Config with environment variable overrides
        """
        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or ENV_PATH_SEPARATOR not in key:
                continue
            path = key[len(ENV_PREFIX):].lower().split(ENV_PATH_SEPARATOR)
            if all(path):
                self._set_nested(config, path, value)

        return config

    def _set_nested(self, config: dict[str, Any], path: list[str], value: str) -> None:
        """Set nested configuration value.

        Args:
            config: Configuration dictionary
            path: Path to nested key (e.g., ["generation", "max_attempts"])
            value: Value to set
        """
        current = config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            elif not isinstance(current[key], dict):
                # Can't traverse non-dict
                return
            current = current[key]

        current[path[-1]] = self._convert_value(value)

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type.

        Args:
            value: String value from environment variable

        Returns:
            Converted value (bool, int, float, or str)
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value


# Global config loader instance
_config_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get global configuration loader instance.

    Returns:
        ConfigLoader: Global config loader
    """
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_config(overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """Load configuration (convenience function).

    Args:
        overrides: Run-specific configuration provided programmatically

    Returns:
        Merged configuration dictionary
    """
    return get_config_loader().load(overrides=overrides)
