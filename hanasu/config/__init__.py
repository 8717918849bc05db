"""Simple YAML configuration loader for Hanasu."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


class HanasuConfig:
    """Hanasu configuration loader."""

    # Keys holding filesystem paths that are resolved relative to the config file
    PATH_KEYS = (
        'keywords.storage_path',
        'logging.file_path',
        'speech.google_cloud.credentials_path',
    )

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file (e.g. hanasu.yaml)
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for key_path in self.PATH_KEYS:
            *parents, leaf = key_path.split('.')
            section = config
            for key in parents:
                section = section.get(key) if isinstance(section, dict) else None
            if not isinstance(section, dict) or not section.get(leaf):
                continue
            path = section[leaf]
            if not os.path.isabs(path):
                section[leaf] = str(config_dir / path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'llm.model').

        Args:
            key_path: Dot-separated key path (e.g., 'session.debounce_ms')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'session.target_language')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_api_key(self) -> str:
        """Get the LLM API key from config or the configured environment variable.

        Raises:
            ConfigurationError: If no key is available
        """
        api_key = self.get('llm.api_key')
        if api_key:
            return api_key

        env_name = self.get('llm.api_key_env', DEFAULT_API_KEY_ENV)
        api_key = os.getenv(env_name)
        if not api_key:
            raise ConfigurationError(
                f"{env_name} is not configured (set it or llm.api_key in {self.config_file.name})"
            )
        return api_key

    def get_keyword_storage_path(self) -> str:
        """Get the keyword glossary JSON path."""
        path = self.get('keywords.storage_path', 'data/keywords.json')
        return str(Path(path).absolute())

    def get_debounce_seconds(self) -> float:
        return float(self.get('session.debounce_ms', 300)) / 1000.0
