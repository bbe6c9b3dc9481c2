"""Configuration management for the AWS sub-resource provider.

This module handles YAML configuration loading, validation, and
environment variable override support. A configuration declares the
AWS connection settings, the retry budget for distribution updates,
the local state file and the list of managed resources.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml


DEFAULT_REGION = "us-east-1"
DEFAULT_RETRY_TIMEOUT_SECONDS = 60
DEFAULT_STATE_FILE = "terraform-subresources.state.json"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


class Configuration:
    """Configuration management with YAML loading and validation.

    This class handles loading configuration from YAML files,
    validating the structure, and supporting environment variable
    overrides for the AWS region and profile.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        If None, auto-detects config.yaml in current directory.

        Raises:
            ConfigurationError: When configuration file is invalid
        """
        self._config: Dict[str, Any] = {}
        self._config_path = self._resolve_config_path(config_path)
        self._load_configuration()
        self._apply_environment_overrides()
        self._validate_configuration()

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path.

        Args:
            config_path: Optional path to configuration file

        Returns:
            Resolved Path object to configuration file

        Raises:
            ConfigurationError: When configuration file not found
        """
        if config_path:
            path = Path(config_path)
        else:
            path = Path("config.yaml")
            if not path.exists():
                path = Path("config/settings.yaml")

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}. "
                "Please create a configuration file or specify a valid path."
            )

        return path

    def _load_configuration(self) -> None:
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: When YAML file is invalid
        """
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {self._config_path}: {e}"
            )
        except IOError as e:
            raise ConfigurationError(
                f"Unable to read configuration file {self._config_path}: {e}"
            )

        if not isinstance(self._config, dict):
            raise ConfigurationError(
                f"Configuration file {self._config_path} must contain a mapping"
            )

    def _validate_configuration(self) -> None:
        """Validate configuration structure.

        Raises:
            ConfigurationError: When a section has the wrong shape
        """
        aws_config = self._config.get("aws", {})
        if not isinstance(aws_config, dict):
            raise ConfigurationError("Section 'aws' must be a mapping")

        region = aws_config.get("region", DEFAULT_REGION)
        if not isinstance(region, str) or not region:
            raise ConfigurationError("Field 'aws.region' must be a non-empty string")

        timeout = self.get("retry.timeout_seconds", DEFAULT_RETRY_TIMEOUT_SECONDS)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(
                "Field 'retry.timeout_seconds' must be a positive number"
            )

        resources = self._config.get("resources", [])
        if not isinstance(resources, list):
            raise ConfigurationError("Field 'resources' must be a list")

        seen = set()
        for index, resource in enumerate(resources):
            if not isinstance(resource, dict):
                raise ConfigurationError(f"Resource #{index} must be a mapping")
            for field in ("type", "name"):
                if not resource.get(field):
                    raise ConfigurationError(
                        f"Resource #{index} is missing required field '{field}'"
                    )
            if not isinstance(resource.get("args", {}), dict):
                raise ConfigurationError(
                    f"Field 'args' of resource {resource['type']}.{resource['name']} "
                    "must be a mapping"
                )
            address = f"{resource['type']}.{resource['name']}"
            if address in seen:
                raise ConfigurationError(f"Duplicate resource address: {address}")
            seen.add(address)

    def _apply_environment_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        if "AWS_REGION" in os.environ:
            self._set_nested_value("aws.region", os.environ["AWS_REGION"])

        if "AWS_PROFILE" in os.environ:
            self._set_nested_value("aws.profile_name", os.environ["AWS_PROFILE"])

    def _set_nested_value(self, key_path: str, value: Any) -> None:
        """Set nested configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            value: Value to set
        """
        keys = key_path.split(".")
        current = self._config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        current = self._config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_region(self) -> str:
        """Get AWS region for API clients."""
        return self.get("aws.region", DEFAULT_REGION)

    def get_profile_name(self) -> Optional[str]:
        """Get AWS profile name, if one is configured."""
        return self.get("aws.profile_name")

    def get_retry_timeout(self) -> float:
        """Get the time budget for retrying distribution updates, in seconds."""
        return self.get("retry.timeout_seconds", DEFAULT_RETRY_TIMEOUT_SECONDS)

    def get_state_file(self) -> str:
        """Get path of the local state file."""
        return self.get("state_file", DEFAULT_STATE_FILE)

    def get_resources(self) -> List[Dict[str, Any]]:
        """Get declared resources.

        Returns:
            List of resource declarations with 'type', 'name' and 'args'
        """
        return [
            {
                "type": resource["type"],
                "name": resource["name"],
                "args": resource.get("args") or {},
            }
            for resource in self._config.get("resources", [])
        ]
