"""Factory function for instantiating notice providers."""

from typing import Optional

from app.config.models import AdvancedConfig, OrchestratorConfig, ProviderSpec
from app.logging import get_logger

from .base import BaseProvider
from .exceptions import AdapterConfigurationError
from .layoffdata import LayoffDataProvider
from .official import CsvProvider, HtmlTableProvider, SpreadsheetProvider, TextListingProvider
from .usatoday import UsaTodayProvider
from .warntracker import WarnTrackerProvider

logger = get_logger(__name__, component="adapter")

PROVIDER_MAP = {
    "html_table": HtmlTableProvider,
    "csv": CsvProvider,
    "spreadsheet": SpreadsheetProvider,
    "text_listing": TextListingProvider,
    "layoffdata": LayoffDataProvider,
    "warntracker": WarnTrackerProvider,
    "usatoday": UsaTodayProvider,
}


def get_provider(
    spec: ProviderSpec,
    jurisdiction: str,
    advanced_config: AdvancedConfig,
    orchestrator_config: Optional[OrchestratorConfig] = None,
    default_name: Optional[str] = None,
) -> BaseProvider:
    """Factory function to instantiate the provider a ProviderSpec describes.

    HTTP settings (timeout, user-agent, notice cap, proxy) come from
    advanced_config; retry settings from orchestrator_config.

    Args:
        spec: Provider specification from the registry or a config override
        jurisdiction: Two-letter code the provider serves
        advanced_config: Advanced configuration with HTTP settings
        orchestrator_config: Retry settings (defaults apply when omitted)
        default_name: Provenance name for official-source providers with no configured name

    Returns:
        Instantiated provider

    Raises:
        AdapterConfigurationError: If the provider type is unknown or settings are invalid

    Example:
        >>> spec = ProviderSpec(type="warntracker")
        >>> provider = get_provider(spec, "OR", AdvancedConfig())
        >>> provider.name
        'WARNTracker (OR)'
    """
    orchestrator_config = orchestrator_config or OrchestratorConfig()
    provider_type = str(getattr(spec.type, "value", spec.type)).lower()
    provider_class = PROVIDER_MAP.get(provider_type)

    if not provider_class:
        supported_types = ", ".join(sorted(PROVIDER_MAP.keys()))
        raise AdapterConfigurationError(
            f"Unknown provider type: {spec.type}. Supported types: {supported_types}"
        )

    options = {
        "timeout": advanced_config.http_request_timeout,
        "user_agent": advanced_config.user_agent,
        "retry_attempts": orchestrator_config.retry_attempts,
        "retry_backoff_seconds": orchestrator_config.retry_backoff_seconds,
        "max_notices": advanced_config.max_notices_per_provider,
        "text_proxy_base": advanced_config.text_proxy_base,
    }
    name = spec.name

    if provider_type == "html_table":
        options.update(
            table_selector=spec.table_selector,
            next_page_selector=spec.next_page_selector,
            max_pages=spec.max_pages or advanced_config.max_pages,
            via_text_proxy=spec.via_text_proxy,
        )
    elif provider_type == "csv":
        options.update(data_url=spec.data_url, state_values=spec.state_values)
    elif provider_type == "spreadsheet":
        options.update(data_url=spec.data_url, sheet_name=spec.sheet_name)

    if provider_type in ("layoffdata", "warntracker", "usatoday"):
        args = (jurisdiction, name, spec.url)
    else:
        # Aggregators keep their own provenance name; official sources take the jurisdiction's
        name = name or default_name
        if not name:
            raise AdapterConfigurationError(f"Provider {provider_type} for {jurisdiction} needs a name")
        args = (jurisdiction, name, spec.url or spec.data_url)

    logger.debug(
        "Creating provider instance",
        extra={
            "event": "provider.factory.creating",
            "provider_type": provider_type,
            "jurisdiction": jurisdiction,
            "provider_class": provider_class.__name__,
        },
    )

    try:
        return provider_class(*args, **options)
    except AdapterConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise AdapterConfigurationError(f"Failed to create {provider_type} provider: {e}") from e
