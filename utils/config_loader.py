"""
Configuration management for the MIDI catalog builder.

This module handles loading and validating configuration from YAML files
with sensible defaults and environment variable support.
"""

import json
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from utils.exceptions import ConfigurationError


ENV_PREFIX = "MIDI_CATALOG_"


@dataclass
class PathsConfig:
    """Locations relative to the base directory."""

    new_dir: str = "new"
    midi_dir: str = "midi"
    output_file: str = "museplay.json"
    log_file: str = "history.log"
    backup_suffix: str = ".bak"


@dataclass
class FilesystemConfig:
    midi_extensions: list = field(default_factory=lambda: ['.mid', '.midi'])


@dataclass
class CatalogConfig:
    basedir_label: str = "midi/"
    indent: int = 2


@dataclass
class LoggingConfig:
    level: str = "INFO"
    max_file_size: int = 1024 * 1024
    backup_count: int = 3


@dataclass
class MidiCatalogConfig:
    """Structured configuration class with defaults."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file with defaults and environment variable support.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config_dict = _dataclass_to_dict(MidiCatalogConfig())

    if config_path and config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {config_path}: {e}")

        if file_config:
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"Config file {config_path} must contain a mapping")
            config_dict = _merge_configs(config_dict, file_config)

    config_dict = _apply_env_overrides(config_dict)

    _validate_config(config_dict)

    return config_dict


def _dataclass_to_dict(obj) -> Dict[str, Any]:
    """Convert dataclass to dictionary recursively."""
    if hasattr(obj, '__dataclass_fields__'):
        result = {}
        for field_name in obj.__dataclass_fields__:
            value = getattr(obj, field_name)
            result[field_name] = _dataclass_to_dict(value)
        return result
    elif isinstance(obj, dict):
        return {k: _dataclass_to_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_dataclass_to_dict(item) for item in obj]
    else:
        return obj


def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge configuration dictionaries.

    Args:
        base: Base configuration dictionary
        override: Override configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables should be prefixed with MIDI_CATALOG_ and use
    double underscores to represent nested keys.

    Examples:
        MIDI_CATALOG_LOGGING__LEVEL=DEBUG
        MIDI_CATALOG_PATHS__OUTPUT_FILE=catalog.json
    """
    for env_var, value in os.environ.items():
        if not env_var.startswith(ENV_PREFIX):
            continue

        key_path = env_var[len(ENV_PREFIX):].lower().split('__')
        _set_nested_value(config, key_path, _convert_env_value(value))

    return config


def _convert_env_value(value: str) -> Any:
    """Convert environment variable string to appropriate Python type."""
    if value.lower() in ('true', 'yes', 'on'):
        return True
    elif value.lower() in ('false', 'no', 'off'):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    # JSON/List values (if starts with [ or {)
    if value.startswith(('[', '{')):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _set_nested_value(config: Dict[str, Any], key_path: list, value: Any):
    """Set a value in a nested dictionary using a list of keys."""
    current = config

    for key in key_path[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[key_path[-1]] = value


def _validate_config(config: Dict[str, Any]):
    """
    Validate configuration values.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    paths_config = config.get('paths', {})
    for key in ('new_dir', 'midi_dir', 'output_file', 'log_file', 'backup_suffix'):
        value = paths_config.get(key)
        if not isinstance(value, str) or not value:
            raise ConfigurationError(f"paths.{key} must be a non-empty string")

    filesystem_config = config.get('filesystem', {})
    midi_extensions = filesystem_config.get('midi_extensions', [])
    if not isinstance(midi_extensions, list) or not midi_extensions:
        raise ConfigurationError("filesystem.midi_extensions must be a non-empty list")
    if not all(isinstance(ext, str) and ext.startswith('.') for ext in midi_extensions):
        raise ConfigurationError("filesystem.midi_extensions entries must start with '.'")

    catalog_config = config.get('catalog', {})
    if not isinstance(catalog_config.get('basedir_label'), str):
        raise ConfigurationError("catalog.basedir_label must be a string")
    indent = catalog_config.get('indent', 2)
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 0:
        raise ConfigurationError("catalog.indent must be a non-negative integer")

    logging_config = config.get('logging', {})
    log_level = logging_config.get('level', 'INFO')
    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if not isinstance(log_level, str) or log_level.upper() not in valid_levels:
        raise ConfigurationError(f"logging.level must be one of {valid_levels}")

    for key in ('max_file_size', 'backup_count'):
        value = logging_config.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigurationError(f"logging.{key} must be a non-negative integer")


def get_config_template() -> str:
    """
    Get a YAML template for the configuration file.

    Returns:
        YAML configuration template as string
    """
    return """# Configuration for midi-catalog
paths:
  new_dir: "new"                # drop folder, emptied into midi_dir on each run
  midi_dir: "midi"              # scanned library folder
  output_file: "museplay.json"
  log_file: "history.log"
  backup_suffix: ".bak"

filesystem:
  midi_extensions:
    - .mid
    - .midi

catalog:
  basedir_label: "midi/"
  indent: 2

logging:
  level: INFO
  max_file_size: 1048576
  backup_count: 3
"""
