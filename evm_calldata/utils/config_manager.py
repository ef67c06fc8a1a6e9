"""
Configuration manager with JSON schema validation

Loads encoder and deployment settings from JSON or YAML files, validates them
against an embedded schema and applies environment variable overrides.

Design Notes:
- Uses jsonschema (Draft 7) for validation with readable error paths
- YAML and JSON files are both accepted, chosen by file suffix
- EVM_CALLDATA_<KEY> environment variables override file values
- Dataclasses expose the validated settings to the rest of the package
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
import yaml

from .exceptions import ConfigurationError, ErrorCodes

LOG = logging.getLogger(__name__)

ENV_PREFIX = "EVM_CALLDATA_"

DEFAULT_MAX_TYPE_DEPTH = 32

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "max_type_depth": {"type": "integer", "minimum": 1, "maximum": 256},
        "value": {"type": "integer", "minimum": 0},
        "gas_limit": {"type": ["integer", "null"], "minimum": 21000},
        "gas_price": {"type": ["integer", "null"], "minimum": 0},
        "receipt_timeout": {"type": "number", "exclusiveMinimum": 0},
        "compiler_version": {"type": ["string", "null"]},
    },
    "additionalProperties": False,
}


@dataclass
class ValidationResult:
    """Result of configuration validation"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    validated_config: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class EncoderConfig:
    """Settings that bound the type parser and encoder"""
    max_type_depth: int = DEFAULT_MAX_TYPE_DEPTH


@dataclass
class DeploymentOptions:
    """Options for a contract deployment transaction"""
    value: int = 0
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    receipt_timeout: float = 120.0
    compiler_version: Optional[str] = None


@dataclass
class Settings:
    """Validated configuration split into its consumers"""
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    deployment: DeploymentOptions = field(default_factory=DeploymentOptions)


class ConfigManager:
    """
    Loads and validates configuration files.

    Keeps a cache of loaded files keyed by resolved path.
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None):
        self.schema = schema or CONFIG_SCHEMA
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _read_file(self, path: Path) -> Dict[str, Any]:
        """Read a JSON or YAML mapping from disk"""
        try:
            with open(path, 'r') as f:
                if path.suffix.lower() in ('.yaml', '.yml'):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file {path}: {e}",
                config_file=str(path),
                cause=e
            )
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file {path}: {e}",
                config_file=str(path),
                cause=e
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping",
                config_file=str(path)
            )
        return data

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """Validate configuration against the schema"""
        validator = jsonschema.Draft7Validator(self.schema)
        errors = []
        for error in sorted(validator.iter_errors(config), key=lambda e: list(e.path)):
            if error.path:
                path = " -> ".join(str(p) for p in error.path)
                errors.append(f"'{path}' {error.message}")
            else:
                errors.append(error.message)

        if errors:
            return ValidationResult(is_valid=False, errors=errors)
        return ValidationResult(is_valid=True, validated_config=config)

    def _get_env_override(self, key: str, default: Any = None) -> Any:
        """Get environment variable override"""
        env_value = os.getenv(f"{ENV_PREFIX}{key.upper()}")

        if env_value is not None:
            # JSON first so numbers and null come through typed
            try:
                return json.loads(env_value)
            except json.JSONDecodeError:
                return env_value

        return default

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        result = dict(config)
        for key in CONFIG_SCHEMA["properties"]:
            value = self._get_env_override(key, result.get(key))
            if value is not None or key in result:
                result[key] = value
        return result

    def load_config(
        self,
        path: Union[str, Path, None] = None,
        apply_env_overrides: bool = True
    ) -> Settings:
        """
        Load, override and validate a configuration file.

        Args:
            path: JSON or YAML file; None loads defaults plus overrides
            apply_env_overrides: Whether to apply environment variable overrides

        Returns:
            Validated Settings

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        config: Dict[str, Any] = {}
        config_file = None

        if path is not None:
            config_file = Path(path).resolve()
            key = str(config_file)
            if key in self._cache:
                config = self._cache[key]
            else:
                if not config_file.exists():
                    raise ConfigurationError(
                        f"Config file not found: {config_file}",
                        config_file=key,
                        code=ErrorCodes.CONFIG_NOT_FOUND
                    )
                config = self._read_file(config_file)
                self._cache[key] = config

        if apply_env_overrides:
            config = self._apply_env_overrides(config)

        result = self.validate(config)
        if not result.is_valid:
            raise ConfigurationError(
                "Configuration validation failed: " + "; ".join(result.errors),
                config_file=str(config_file) if config_file else None
            )

        LOG.debug(f"Loaded configuration: {config}")
        return self._to_settings(config)

    @staticmethod
    def _to_settings(config: Dict[str, Any]) -> Settings:
        encoder_keys = {f.name for f in fields(EncoderConfig)}
        deployment_keys = {f.name for f in fields(DeploymentOptions)}
        return Settings(
            encoder=EncoderConfig(**{k: v for k, v in config.items() if k in encoder_keys}),
            deployment=DeploymentOptions(
                **{k: v for k, v in config.items() if k in deployment_keys}
            ),
        )
