from __future__ import annotations

import json
import os
import pathlib
from copy import deepcopy
from typing import Any, Dict, List, Optional, Set, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from vnite_sdk.core.base import VniteManager
from vnite_sdk.utils.exceptions import ConfigurationError, ManagerInitializationError

DEFAULT_CONFIG_FILE = 'vnite-sdk.yaml'
ENV_PREFIX = 'VNITE_SDK_'
ENV_NESTING_SEPARATOR = '__'


class PackagingSettings(BaseModel):
    """Settings for the plugin packaging pipeline.

    Attributes:
        manifest_file: Name of the plugin descriptor at the project root
        output_dir: Directory, relative to the project root, receiving artifacts
        staging_dir: Name of the staging tree created inside the output directory
        extension: Extension of the produced archive, without the leading dot
        compression_level: Deflate level used for archive entries (0-9)
    """

    manifest_file: str = 'package.json'
    output_dir: str = 'dist'
    staging_dir: str = '.temp-package'
    extension: str = 'vnpkg'
    compression_level: int = Field(default=9, ge=0, le=9)

    @field_validator('extension')
    @classmethod
    def validate_extension(cls, v: str) -> str:
        v = v.lstrip('.')
        if not v:
            raise ValueError('Archive extension must not be empty')
        return v

    @field_validator('manifest_file', 'output_dir', 'staging_dir')
    @classmethod
    def validate_relative_path(cls, v: str) -> str:
        path = pathlib.PurePath(v)
        if not v or path.is_absolute() or not path.parts or '..' in path.parts:
            raise ValueError('Packaging paths must be relative paths inside the project root')
        return v

    @field_validator('staging_dir')
    @classmethod
    def validate_staging_dir(cls, v: str) -> str:
        # Removed recursively on every run, so it must be a direct child of output_dir
        if len(pathlib.PurePath(v).parts) != 1 or '/' in v or '\\' in v:
            raise ValueError('Staging directory must be a single directory name')
        return v


class ConfigSchema(BaseModel):
    """Schema for validating configuration data.

    This model defines the expected structure and default values for the
    SDK configuration.
    """
    logging: Dict[str, Any] = Field(
        default_factory=lambda: {
            'level': 'WARNING',
            'format': 'text',
            'file': {
                'enabled': False,
                'path': 'logs/vnite-sdk.log',
                'rotation': '10 MB',
                'retention': '30 days',
            },
            'console': {
                'enabled': True,
                'level': 'WARNING',
            },
        },
        description='Logging settings',
    )
    packaging: PackagingSettings = Field(
        default_factory=PackagingSettings,
        description='Plugin packaging settings',
    )

    @model_validator(mode='after')
    def validate_log_format(self) -> 'ConfigSchema':
        """Validate that the log format is one the logging manager can render."""
        log_format = str(self.logging.get('format', 'text')).lower()
        if log_format not in ('text', 'json'):
            raise ValueError("Log format must be either 'text' or 'json'.")
        return self


class ConfigManager(VniteManager):
    """Configuration manager for the SDK tools.

    This manager handles loading, validating, and providing access to
    configuration settings from files and environment variables.

    Attributes:
        _config_path: Path to the configuration file
        _env_prefix: Prefix for environment variables
        _config: The loaded configuration
        _loaded_from_file: Whether configuration was loaded from a file
        _env_vars_applied: Set of applied environment variables
    """

    def __init__(
            self,
            config_path: Optional[Union[str, pathlib.Path]] = None,
            env_prefix: str = ENV_PREFIX,
            config_required: bool = False
    ) -> None:
        """Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
            env_prefix: Prefix for environment variables
            config_required: Fail when the configuration file does not exist
        """
        super().__init__(name='config_manager')
        self._config_path = pathlib.Path(config_path) if config_path else pathlib.Path(DEFAULT_CONFIG_FILE)
        self._env_prefix = env_prefix
        self._config_required = config_required
        self._config: Dict[str, Any] = {}
        self._loaded_from_file = False
        self._env_vars_applied: Set[str] = set()

    def initialize(self) -> None:
        """Initialize the configuration manager.

        Loads configuration from default schema, file, and environment variables.

        Raises:
            ManagerInitializationError: If initialization fails
        """
        try:
            self._config = ConfigSchema().model_dump()
            self._load_from_file()
            self._apply_env_vars()
            self._validate_config()

            self._initialized = True
            self._healthy = True
        except Exception as e:
            raise ManagerInitializationError(
                f'Failed to initialize ConfigManager: {str(e)}',
                manager_name=self.name
            ) from e

    def _load_from_file(self) -> None:
        """Load configuration from a file.

        Reads and parses the configuration file if it exists.

        Raises:
            ConfigurationError: If the file cannot be parsed, or is required and missing
        """
        if not self._config_path.exists():
            if self._config_required:
                raise ConfigurationError(
                    f'Config file not found: {self._config_path}',
                    config_key='config_path'
                )
            return

        try:
            content = self._config_path.read_text(encoding='utf-8')

            if self._config_path.suffix.lower() in ('.yaml', '.yml'):
                file_config = yaml.safe_load(content)
            elif self._config_path.suffix.lower() == '.json':
                file_config = json.loads(content)
            else:
                raise ConfigurationError(
                    f'Unsupported config file format: {self._config_path.suffix}',
                    config_key='config_path'
                )
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f'Error parsing config file {self._config_path}: {str(e)}',
                config_key='config_path'
            ) from e

        if file_config is None:
            return
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f'Config file {self._config_path} must contain a mapping at the top level',
                config_key='config_path'
            )

        self._merge_config(file_config)
        self._loaded_from_file = True

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Merge new configuration values into the current configuration.

        Args:
            new_config: Configuration values to merge
        """

        def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
            for key, value in source.items():
                if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                    deep_merge(target[key], value)
                else:
                    target[key] = deepcopy(value)

        deep_merge(self._config, new_config)

    def _apply_env_vars(self) -> None:
        """Apply environment variables to the configuration.

        ``VNITE_SDK_LOGGING__LEVEL=DEBUG`` sets ``logging.level``; a double
        underscore separates nesting levels so keys may contain underscores.
        """
        for env_name, env_value in os.environ.items():
            if not env_name.startswith(self._env_prefix):
                continue

            config_path = env_name[len(self._env_prefix):].lower().split(ENV_NESTING_SEPARATOR)
            if any(not part for part in config_path):
                continue
            self._set_nested_value(self._config, config_path, self._parse_env_value(env_value))
            self._env_vars_applied.add(env_name)

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable values into appropriate types.

        Args:
            value: The string value from the environment

        Returns:
            The parsed value (bool, int, float, or string)
        """
        if value.lower() in ('true', 'yes', 'on'):
            return True
        if value.lower() in ('false', 'no', 'off'):
            return False

        try:
            if value.isdigit() or (value.startswith('-') and value[1:].isdigit()):
                return int(value)
            return float(value)
        except ValueError:
            return value

    def _set_nested_value(self, config: Dict[str, Any], path: List[str], value: Any) -> None:
        """Set a nested value in the configuration dictionary.

        Args:
            config: The configuration dictionary
            path: List of keys forming the path to the value
            value: The value to set
        """
        if not path:
            return

        if len(path) == 1:
            config[path[0]] = value
            return

        key = path[0]
        if key not in config or not isinstance(config[key], dict):
            config[key] = {}

        self._set_nested_value(config[key], path[1:], value)

    def _validate_config(self) -> None:
        """Validate the configuration against the schema.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        try:
            self._config = ConfigSchema(**self._config).model_dump()
        except ValidationError as e:
            errors = e.errors()
            error_details = ', '.join((
                f"{'.'.join((str(loc) for loc in error['loc']))}: {error['msg']}"
                for error in errors
            ))
            raise ConfigurationError(
                f'Invalid configuration: {error_details}',
                details={'validation_errors': errors}
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key.

        Args:
            key: The configuration key (dot-separated for nested values)
            default: Default value if the key doesn't exist

        Returns:
            The configuration value or default

        Raises:
            ConfigurationError: If the manager isn't initialized
        """
        if not self._initialized:
            raise ConfigurationError(
                'Cannot access configuration before initialization',
                config_key=key
            )

        result: Any = self._config
        try:
            for part in key.split('.'):
                result = result[part]
            return result
        except (KeyError, TypeError):
            return default

    def packaging_settings(self) -> PackagingSettings:
        """Return the validated packaging section as a model."""
        return PackagingSettings(**self.get('packaging', {}))

    @property
    def config_path(self) -> pathlib.Path:
        """Path of the configuration file consulted on initialization."""
        return self._config_path

    @property
    def loaded_from_file(self) -> bool:
        """Whether a configuration file contributed to the configuration."""
        return self._loaded_from_file

    @property
    def env_vars_applied(self) -> Set[str]:
        """Names of the environment variables that overrode a setting."""
        return set(self._env_vars_applied)

    def shutdown(self) -> None:
        """Shut down the configuration manager."""
        self._initialized = False
        self._healthy = False

    def status(self) -> Dict[str, Any]:
        """Get the status of the configuration manager.

        Returns:
            Dict containing status information
        """
        status = super().status()
        status.update({
            'config_path': str(self._config_path),
            'loaded_from_file': self._loaded_from_file,
            'env_vars_applied': sorted(self._env_vars_applied),
        })
        return status
