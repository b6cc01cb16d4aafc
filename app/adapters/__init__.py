"""Notice providers and per-jurisdiction adapters.

Providers read one source each:
- official.HtmlTableProvider / CsvProvider / SpreadsheetProvider / TextListingProvider
- layoffdata.LayoffDataProvider, warntracker.WarnTrackerProvider, usatoday.UsaTodayProvider

A StateAdapter runs a jurisdiction's providers in priority order under its
fallback policy. Use the registry to build the adapters for a run:
    from app.adapters import list_adapters
    adapters = list_adapters(app_config)
    result = adapters[0].fetch_latest()

Exception handling:
    from app.adapters.exceptions import AdapterError, AdapterHTTPError, AdapterTimeoutError, AdapterResponseError
"""

from .base import BaseProvider, filter_by_state, text_proxy_url
from .exceptions import (
    AdapterConfigurationError,
    AdapterError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)
from .factory import PROVIDER_MAP, get_provider
from .layoffdata import LayoffDataProvider
from .official import CsvProvider, HtmlTableProvider, SpreadsheetProvider, TextListingProvider
from .registry import JURISDICTION_SOURCES, JurisdictionSource, build_adapter, list_adapters
from .state import ProviderOutcome, StateAdapter
from .usatoday import UsaTodayProvider
from .warntracker import WarnTrackerProvider

__all__ = [
    # Base, factory and registry
    "BaseProvider",
    "PROVIDER_MAP",
    "get_provider",
    "JURISDICTION_SOURCES",
    "JurisdictionSource",
    "build_adapter",
    "list_adapters",
    "StateAdapter",
    "ProviderOutcome",
    "filter_by_state",
    "text_proxy_url",
    # Providers
    "HtmlTableProvider",
    "CsvProvider",
    "SpreadsheetProvider",
    "TextListingProvider",
    "LayoffDataProvider",
    "WarnTrackerProvider",
    "UsaTodayProvider",
    # Exceptions
    "AdapterError",
    "AdapterHTTPError",
    "AdapterTimeoutError",
    "AdapterResponseError",
    "AdapterConfigurationError",
]
