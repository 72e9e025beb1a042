"""YAML configuration for burrow."""

from burrow.config.loader import (
    ConfigValidationError,
    expand_env_vars,
    increment_edition,
    load_config,
    resolve_config_path,
)
from burrow.config.schemas import BurrowConfig, EmailConfig, SourceConfig, SourceType


__all__ = [
    "BurrowConfig",
    "ConfigValidationError",
    "EmailConfig",
    "SourceConfig",
    "SourceType",
    "expand_env_vars",
    "increment_edition",
    "load_config",
    "resolve_config_path",
]
