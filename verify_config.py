#!/usr/bin/env python3
"""Check config.example.yaml against the configuration schema and print a summary."""

import sys
from pathlib import Path

from app.config.exceptions import ConfigurationError
from app.config.loader import load_config


def verify_config_structure(config_file: Path = Path("config.example.yaml")) -> bool:
    """Load the example config through the real loader and report what it configures."""
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return False

    try:
        app_config, _ = load_config(config_file)
    except ConfigurationError as e:
        print(f"✗ {config_file} validation failed:")
        print(e)
        return False

    disabled = [o.code for o in app_config.jurisdictions if not o.enabled]
    replaced = [o.code for o in app_config.jurisdictions if o.providers]

    print(f"✓ {config_file} is valid")
    print(f"  - States: {', '.join(app_config.states) or 'all'}")
    print(f"  - Scan interval: {app_config.scan_interval} ({app_config.scan_interval_seconds}s)")
    print(
        f"  - Workers: {app_config.orchestrator.max_workers}, "
        f"timeout {app_config.orchestrator.adapter_timeout_seconds}s per adapter"
    )
    print(f"  - {len(app_config.jurisdictions)} jurisdiction override(s)")
    print(f"  - Disabled: {', '.join(disabled) or 'none'}")
    print(f"  - Custom provider chains: {', '.join(replaced) or 'none'}")
    return True


if __name__ == "__main__":
    sys.exit(0 if verify_config_structure() else 1)
