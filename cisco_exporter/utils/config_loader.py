"""
Configuration Loader

Utilities for loading YAML configuration files with validation.
"""

import yaml
from pathlib import Path
from typing import Any, Dict
import os


class ConfigLoader:
    """
    Load and validate YAML configuration files.
    """

    @staticmethod
    def load(config_path: str) -> Dict[str, Any]:
        """
        Load a YAML configuration file.

        Args:
            config_path: Path to YAML file

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the document is not a mapping
            yaml.YAMLError: If YAML is invalid
        """
        path = Path(config_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            config = yaml.safe_load(f)

        if config is None:
            config = {}

        if not isinstance(config, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        return config

    @staticmethod
    def apply_env_overrides(config: Dict[str, Any], env_prefix: str = "CISCO_EXPORTER_") -> Dict[str, Any]:
        """
        Override top-level config values from environment variables.

        CISCO_EXPORTER_TIMEOUT overrides config['timeout'], and so on.
        Values are left as strings; typed parsing happens in the config model.
        """
        for key, value in os.environ.items():
            if key.startswith(env_prefix):
                config_key = key[len(env_prefix):].lower()
                config[config_key] = value

        return config

    @staticmethod
    def load_with_env_override(config_path: str, env_prefix: str = "CISCO_EXPORTER_") -> Dict[str, Any]:
        """
        Load config and override with environment variables.

        Args:
            config_path: Path to YAML file
            env_prefix: Prefix for environment variables

        Returns:
            Configuration dictionary with env overrides applied
        """
        config = ConfigLoader.load(config_path)
        return ConfigLoader.apply_env_overrides(config, env_prefix)
