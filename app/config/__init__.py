"""Configuration management module for the WARN notice pipeline."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import apply_environment_overrides, load_config
from .models import (
    AdvancedConfig,
    AppConfig,
    FallbackPolicy,
    JurisdictionConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    OrchestratorConfig,
    OutputConfig,
    ProviderSpec,
    ProviderType,
)

__all__ = [
    # Main loader functions
    "load_config",
    "apply_environment_overrides",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "JurisdictionConfig",
    "ProviderSpec",
    "OrchestratorConfig",
    "OutputConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "FallbackPolicy",
    "ProviderType",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
