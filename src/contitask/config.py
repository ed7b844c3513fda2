"""
ContiTask Configuration

This module provides configuration management for contitask drivers and
tools: defaults, file- and environment-based settings, and validation.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .core.tracing import DiagnosticTracer, install_tracer
from .utils.logging import DEFAULT_FORMAT, configure_logging


@dataclass
class RuntimeConfig:
    """Main configuration class for contitask components"""

    # Core settings
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = DEFAULT_FORMAT
    use_structlog: bool = True

    # Tracing
    enable_tracing: bool = False
    trace_limit: int = 10000

    # Driver settings
    max_idle_sleep: float = 1.0

    # Custom settings
    custom: Dict[str, Any] = field(default_factory=dict)


def get_default_config() -> RuntimeConfig:
    """Get default contitask configuration"""
    return RuntimeConfig()


def load_config_from_file(config_path: Union[str, Path]) -> RuntimeConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        RuntimeConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f) or {}
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    return _config_from_dict(data)


def _parse_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


def load_config_from_env() -> RuntimeConfig:
    """
    Load configuration from environment variables

    Environment variables are prefixed with CONTITASK_,
    for example: CONTITASK_DEBUG=true, CONTITASK_LOG_LEVEL=DEBUG

    Returns:
        RuntimeConfig instance
    """
    config = RuntimeConfig()

    env_mappings = {
        "CONTITASK_DEBUG": ("debug", _parse_bool),
        "CONTITASK_LOG_LEVEL": ("log_level", str),
        "CONTITASK_LOG_FORMAT": ("log_format", str),
        "CONTITASK_USE_STRUCTLOG": ("use_structlog", _parse_bool),
        "CONTITASK_ENABLE_TRACING": ("enable_tracing", _parse_bool),
        "CONTITASK_TRACE_LIMIT": ("trace_limit", int),
        "CONTITASK_MAX_IDLE_SLEEP": ("max_idle_sleep", float),
    }

    for env_var, (attr_name, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                setattr(config, attr_name, converter(value))
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value for {env_var}: {value}. Error: {e}")

    return config


def merge_configs(base_config: RuntimeConfig, override_config: Dict[str, Any]) -> RuntimeConfig:
    """
    Merge an override dictionary into a RuntimeConfig instance

    Args:
        base_config: Base configuration
        override_config: Override values as dictionary

    Returns:
        Merged RuntimeConfig instance
    """
    merged = _deep_merge(asdict(base_config), override_config)
    return _config_from_dict(merged)


def validate_config(config: RuntimeConfig) -> List[str]:
    """
    Validate configuration and return list of issues

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    if config.trace_limit <= 0:
        issues.append("trace_limit must be positive")

    if config.max_idle_sleep <= 0:
        issues.append("max_idle_sleep must be positive")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        issues.append(
            f"Invalid log_level: {config.log_level}. Must be one of {valid_log_levels}"
        )

    return issues


def apply_config(config: RuntimeConfig) -> None:
    """Configure logging and the process-wide tracer from a RuntimeConfig"""
    issues = validate_config(config)
    if issues:
        raise ValueError(f"Invalid configuration: {'; '.join(issues)}")

    level = "DEBUG" if config.debug else config.log_level
    configure_logging(level, config.log_format, config.use_structlog)

    if config.enable_tracing:
        install_tracer(
            DiagnosticTracer(enable_detailed_logging=config.debug, limit=config.trace_limit)
        )
    else:
        install_tracer(None)


def _config_from_dict(data: Dict[str, Any]) -> RuntimeConfig:
    """Create RuntimeConfig from dictionary"""
    known = set(RuntimeConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {unknown}")
    return RuntimeConfig(**data)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries"""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
