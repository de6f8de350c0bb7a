"""
load the settings from config.yaml and the environment
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any


class Settings:
    """Settings loader that reads from config.yaml and environment variables."""

    # Environment variable -> location in the settings tree
    ENV_MAPPINGS = {
        'HTTP_TO_HDFS_URL': ('action', 'url'),
        'HTTP_TO_HDFS_METHOD': ('action', 'method'),
        'HTTP_TO_HDFS_FILE_PATH': ('action', 'hdfsFilePath'),
        'HTTP_TO_HDFS_OUTPUT_FORMAT': ('action', 'outputFormat'),
        'HTTP_TO_HDFS_CHARSET': ('action', 'charset'),
        'HTTP_TO_HDFS_NUM_RETRIES': ('action', 'numRetries'),
        'HTTP_TO_HDFS_CONNECT_TIMEOUT': ('action', 'connectTimeout'),
        'HTTP_TO_HDFS_READ_TIMEOUT': ('action', 'readTimeout'),
        'HTTP_TO_HDFS_DISABLE_SSL_VALIDATION': ('action', 'disableSSLValidation'),
        'HTTP_TO_HDFS_FOLLOW_REDIRECTS': ('action', 'followRedirects'),
        'LOG_LEVEL': ('logging', 'level'),
        'LOG_FORMAT': ('logging', 'format'),
    }

    def __init__(self, config_path: str = None):
        """Initialize settings loader.

        Args:
            config_path: Path to config.yaml file. If None, looks for config.yaml
                        in the current working directory.
        """
        if config_path is None:
            config_path = Path.cwd() / "config.yaml"

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load settings from YAML file and override with environment variables."""
        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not isinstance(config, dict):
            raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")

        return self._apply_env_overrides(config)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to settings."""
        for env_var, config_path in self.ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                current = config
                for key in config_path[:-1]:
                    if not isinstance(current.get(key), dict):
                        current[key] = {}
                    current = current[key]

                current[config_path[-1]] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str):
        """Convert environment variable string to appropriate Python type."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        try:
            return int(value)
        except ValueError:
            pass

        return value

    def get(self, *keys, default=None):
        """Get a settings value by nested keys.

        Args:
            *keys: Settings keys (e.g., 'logging', 'level')
            default: Default value if key not found

        Returns:
            Settings value or default
        """
        current = self._config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    @property
    def action(self) -> Dict[str, Any]:
        """Get the action properties."""
        return self.get('action', default={})

    @property
    def arguments(self) -> Dict[str, Any]:
        """Get runtime arguments used to resolve macros."""
        return self.get('arguments', default={})

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.get('logging', default={})
