"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    # Disabled jurisdiction overrides
    overrides = config_dict.get("jurisdictions", [])
    if isinstance(overrides, list):
        for override in overrides:
            if isinstance(override, dict) and override.get("enabled") is False:
                code = override.get("code", "Unknown")
                warning_messages.append(f"Jurisdiction '{code}' is disabled and will be skipped")

    # Frequent runs hammer state agency sites that publish weekly at most
    scan_interval = config_dict.get("scan_interval")
    if isinstance(scan_interval, str):
        try:
            if parse_duration(scan_interval) < 6 * 3600:
                warning_messages.append(
                    f"Short scan_interval ({scan_interval}); most sources update at most daily"
                )
        except DurationParseError:
            pass  # reported by model validation

    orchestrator = config_dict.get("orchestrator", {})
    if isinstance(orchestrator, dict):
        max_workers = orchestrator.get("max_workers")
        if isinstance(max_workers, int) and max_workers > 8:
            warning_messages.append(
                f"High max_workers ({max_workers}) may trigger rate limits on shared aggregators"
            )
        timeout = orchestrator.get("adapter_timeout_seconds")
        if isinstance(timeout, int) and timeout < 15:
            warning_messages.append(
                f"Short adapter_timeout_seconds ({timeout}) leaves little room for provider fallback"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
