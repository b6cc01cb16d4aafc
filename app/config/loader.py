"""Configuration loader for the WARN notice pipeline."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from app.logging import get_logger

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

logger = get_logger(__name__, component="config")

DEFAULT_CONFIG_LOCATIONS = (Path("config.yaml"), Path("config") / "config.yaml")


def load_config(config_path: Optional[Path] = None) -> tuple[AppConfig, EnvironmentConfig]:
    """
    Load and validate configuration from YAML file and environment variables.

    Config file lookup:
    1. Use provided config_path if given (must exist)
    2. Try config.yaml in current directory
    3. Try ./config/config.yaml
    4. Fall back to built-in defaults (every field has one)

    Environment overrides are applied after validation: EXPORT_DIR replaces
    output.export_dir and STATES replaces states.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with validated configuration

    Raises:
        ConfigurationError: If configuration is invalid or an explicit file is missing
    """
    config_file = _find_config_file(config_path)

    config_dict: Dict[str, Any] = {}
    if config_file is None:
        logger.info(
            "No configuration file found, using defaults",
            extra={"event": "config.defaults_used"},
        )
    else:
        config_dict = _read_yaml(config_file)

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    app_config = _validate(config_dict)

    try:
        env_config = load_environment_config()
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load environment configuration: {e}",
            suggestions=["Copy .env.example to .env and adjust the values"],
        ) from e

    return apply_environment_overrides(app_config, env_config), env_config


def apply_environment_overrides(app_config: AppConfig, env_config: EnvironmentConfig) -> AppConfig:
    """Return a copy of the config with EXPORT_DIR / STATES / LOG_LEVEL applied."""
    updates: Dict[str, Any] = {}
    if env_config.export_dir:
        updates["output"] = app_config.output.model_copy(update={"export_dir": env_config.export_dir})
    if env_config.states:
        updates["states"] = list(env_config.states)
    if env_config.log_level:
        updates["logging"] = app_config.logging.model_copy(update={"level": env_config.log_level})
    if not updates:
        return app_config
    return app_config.model_copy(update=updates)


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} is readable"],
        ) from e

    if config_dict is None:
        return {}
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            suggestions=["Review config.example.yaml for correct format"],
        )
    return config_dict


def _validate(config_dict: Dict[str, Any]) -> AppConfig:
    try:
        return AppConfig.model_validate(config_dict)
    except ValidationError as e:
        errors: List[str] = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            error_type = error["type"]

            if error_type == "missing":
                errors.append(f"Missing required field: {field_path}")
            elif error_type in ["string_type", "int_type", "bool_type", "list_type"]:
                expected_type = error_type.replace("_type", "")
                errors.append(
                    f"Invalid type for '{field_path}': expected {expected_type}, got {error.get('input')}"
                )
            else:
                errors.append(f"{field_path}: {error['msg']}")

        raise ConfigurationError(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                "Review config.example.yaml for correct format",
                "Verify field types match the expected schema",
            ],
        ) from e


def _find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find configuration file using fallback logic.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Path to configuration file, or None when no default location exists

    Raises:
        ConfigurationError: If an explicit path does not exist
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit --config to run with built-in defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate

    return None
