"""Environment variable loading and validation."""

import os
from typing import List, Optional

from app.domain.jurisdictions import resolve_state

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/warn_notices.db"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        log_level: Optional[str] = None,
        database_url: Optional[str] = None,
        export_dir: Optional[str] = None,
        states: Optional[List[str]] = None,
    ):
        """Initialize environment configuration."""
        self.log_level = log_level
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.export_dir = export_dir
        self.states = states or []


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional:
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - DATABASE_URL: Database URL for the notice store (default: sqlite:///./data/warn_notices.db)
    - EXPORT_DIR: Override output.export_dir from the config file
    - STATES: Comma-separated jurisdictions to fetch (e.g. "CA,NY,TX")

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If a variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("LOG_LEVEL")
    database_url = os.getenv("DATABASE_URL")
    export_dir = os.getenv("EXPORT_DIR")
    states_raw = os.getenv("STATES")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if database_url is not None and not database_url.strip():
        errors.append("DATABASE_URL is set but empty")

    if export_dir is not None and not export_dir.strip():
        errors.append("EXPORT_DIR is set but empty")

    states: List[str] = []
    if states_raw:
        for value in states_raw.split(","):
            if not value.strip():
                continue
            code = resolve_state(value)
            if code is None:
                errors.append(f"Unknown jurisdiction in STATES: '{value.strip()}'")
            elif code not in states:
                states.append(code)

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Use two-letter codes in STATES, separated by commas",
            ],
        )

    return EnvironmentConfig(
        log_level=log_level.upper() if log_level else None,
        database_url=database_url.strip() if database_url else None,
        export_dir=export_dir.strip() if export_dir else None,
        states=states,
    )
