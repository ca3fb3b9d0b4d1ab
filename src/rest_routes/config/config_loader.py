"""
Configuration Loader
Loads client configuration from files and dictionaries
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rest_routes.config.client_config import ClientConfig, ConfigDefaults
from rest_routes.config.config_validator import ConfigValidator
from rest_routes.exceptions import ConfigError


class ConfigLoader:
    """
    ConfigLoader class
    Provides multiple ways to load and merge configuration
    """

    def __init__(self) -> None:
        self._validator = ConfigValidator()

    def from_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a JSON file

        Args:
            path: Path to JSON configuration file

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigError: If file not found or invalid JSON
        """
        file_path = Path(path).resolve()

        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {file_path}",
                code="CONFIG_PARSE_ERROR"
            ) from e

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object: {file_path}",
                code="CONFIG_PARSE_ERROR"
            )
        return config

    def from_dict(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load configuration from a dictionary

        Returns:
            Copy of configuration dictionary
        """
        return config.copy()

    def merge(self, *sources: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configuration sources
        Priority: later sources override earlier sources

        Header mappings are merged key by key rather than replaced.

        Args:
            sources: Configuration dictionaries in order of increasing priority

        Returns:
            Merged configuration dictionary
        """
        merged: Dict[str, Any] = {}

        for source in sources:
            filtered = self._filter_none(source)
            headers = filtered.pop("default_headers", None)
            merged.update(filtered)
            if isinstance(headers, dict) and isinstance(
                merged.get("default_headers"), dict
            ):
                merged["default_headers"] = {**merged["default_headers"], **headers}
            elif headers is not None:
                merged["default_headers"] = headers

        return merged

    def resolve(self, config: Dict[str, Any]) -> ClientConfig:
        """
        Resolve configuration with defaults and validation

        Raises:
            ConfigError: If configuration is invalid
        """
        self._validator.validate_or_raise(config)

        return ClientConfig(**config)

    def load(
        self,
        file: Optional[Union[str, Path]] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> ClientConfig:
        """
        Load, merge, and resolve configuration from multiple sources

        Args:
            file: Path to JSON configuration file (optional)
            config: Programmatic configuration dictionary (optional)

        Returns:
            Fully resolved ClientConfig object
        """
        sources: list[Dict[str, Any]] = []

        if file is not None:
            sources.append(self.from_file(file))

        if config is not None:
            sources.append(self.from_dict(config))

        merged = self.merge(*sources)
        return self.resolve(merged)

    def create_template(self, path: Union[str, Path]) -> None:
        """
        Create a configuration template file

        Args:
            path: Path to write template
        """
        template = {
            "base_url": "https://api.example.com/v1",
            "default_headers": dict(ConfigDefaults.DEFAULT_HEADERS),
            "enable_audit_log": ConfigDefaults.ENABLE_AUDIT_LOG,
        }

        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(template, f, indent=2)

    def _filter_none(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Filter out None values from config dictionary"""
        return {k: v for k, v in config.items() if v is not None}
