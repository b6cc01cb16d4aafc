"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.domain.jurisdictions import resolve_state

from .duration import DurationParseError, parse_duration, validate_duration_range


class ProviderType(str, Enum):
    """Supported provider kinds."""

    HTML_TABLE = "html_table"
    CSV = "csv"
    SPREADSHEET = "spreadsheet"
    TEXT_LISTING = "text_listing"
    LAYOFFDATA = "layoffdata"
    WARNTRACKER = "warntracker"
    USATODAY = "usatoday"


# Provider kinds that read a jurisdiction-specific URL and cannot run without one.
URL_REQUIRED_TYPES = {
    ProviderType.HTML_TABLE.value,
    ProviderType.CSV.value,
    ProviderType.SPREADSHEET.value,
    ProviderType.TEXT_LISTING.value,
}


class FallbackPolicy(str, Enum):
    """When a jurisdiction adapter stops trying further providers."""

    FIRST_NON_EMPTY = "first_non_empty"
    MINIMUM_COUNT = "minimum_count"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ProviderSpec(BaseModel):
    """Configuration for one provider in a jurisdiction's fallback chain."""

    type: ProviderType = Field(..., description="Provider kind")
    name: Optional[str] = Field(None, description="Provenance name (defaults per provider kind)")
    url: Optional[str] = Field(None, description="Public page URL for the source")
    data_url: Optional[str] = Field(None, description="Download URL when it differs from the page")
    table_selector: Optional[str] = Field(None, description="CSS selector for the notice table")
    next_page_selector: Optional[str] = Field(None, description="CSS selector for the next-page link")
    max_pages: Optional[int] = Field(None, ge=1, le=50, description="Page limit for paginated tables")
    via_text_proxy: bool = Field(False, description="Fetch through the text-rendering proxy")
    sheet_name: Optional[str] = Field(None, description="Worksheet name for spreadsheet providers")
    state_values: List[str] = Field(
        default_factory=list,
        description="Accepted values of a State column (case-insensitive); empty accepts all rows",
    )

    @field_validator("name", "url", "data_url")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace, converting blanks to None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @model_validator(mode="after")
    def validate_urls(self):
        """Providers that read a jurisdiction page must have a URL."""
        if self.type in URL_REQUIRED_TYPES and not (self.url or self.data_url):
            raise ValueError(f"Provider type '{self.type}' requires url or data_url")
        return self

    model_config = {"use_enum_values": True}


class JurisdictionConfig(BaseModel):
    """Per-jurisdiction overrides of the built-in registry."""

    code: str = Field(..., description="Two-letter jurisdiction code or state name")
    enabled: bool = Field(True, description="Whether to fetch this jurisdiction")
    fallback_policy: Optional[FallbackPolicy] = Field(None, description="Override escalation policy")
    min_results: Optional[int] = Field(
        None, ge=1, le=10000, description="Result count that stops escalation (minimum_count policy)"
    )
    providers: Optional[List[ProviderSpec]] = Field(
        None, description="Replacement provider chain, in priority order"
    )

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Resolve the code to a known two-letter jurisdiction."""
        code = resolve_state(v)
        if code is None:
            raise ValueError(f"Unknown jurisdiction: {v}")
        return code

    @field_validator("providers")
    @classmethod
    def validate_providers(cls, v: Optional[List[ProviderSpec]]) -> Optional[List[ProviderSpec]]:
        """An explicit chain must list at least one provider."""
        if v is not None and not v:
            raise ValueError("providers cannot be an empty list; omit it to use the default chain")
        return v

    @model_validator(mode="after")
    def validate_threshold(self):
        """minimum_count needs an explicit min_results; it is never inferred."""
        if self.fallback_policy == FallbackPolicy.MINIMUM_COUNT and self.min_results is None:
            raise ValueError(
                f"Jurisdiction {self.code}: fallback_policy 'minimum_count' requires min_results"
            )
        return self

    model_config = {"use_enum_values": True}


class OrchestratorConfig(BaseModel):
    """Fan-out settings for a fetch run."""

    max_workers: int = Field(4, ge=1, le=32, description="Adapters in flight at once")
    adapter_timeout_seconds: int = Field(
        45, ge=5, le=600, description="Wall-clock budget per jurisdiction adapter"
    )
    retry_attempts: int = Field(2, ge=1, le=5, description="Attempts per provider request")
    retry_backoff_seconds: float = Field(
        1.0, ge=0.0, le=30.0, description="Linear backoff step between attempts"
    )


class OutputConfig(BaseModel):
    """Where run results are written."""

    export_dir: str = Field("data", min_length=1, description="Directory for JSON exports")
    write_per_state: bool = Field(True, description="Also write one JSON file per jurisdiction")
    database_enabled: bool = Field(False, description="Upsert notices into DATABASE_URL")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """Advanced runtime settings."""

    http_request_timeout: int = Field(
        30, ge=5, le=300, description="Request timeout for provider HTTP calls (seconds)"
    )
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; LNI-WARNBot/1.0)",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )
    max_pages: int = Field(5, ge=1, le=50, description="Default page limit for paginated tables")
    text_proxy_base: str = Field(
        "https://r.jina.ai/", min_length=1, description="Base URL of the text-rendering proxy"
    )
    max_notices_per_provider: int = Field(
        5000, ge=0, description="Maximum notices kept per provider (0 = unlimited)"
    )

    @field_validator("user_agent", "text_proxy_base")
    @classmethod
    def strip_required(cls, v: str) -> str:
        """Strip whitespace from required string settings."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Value cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration object for the WARN notice pipeline."""

    states: List[str] = Field(
        default_factory=list,
        description="Jurisdictions to fetch (empty = every registered jurisdiction)",
    )
    jurisdictions: List[JurisdictionConfig] = Field(
        default_factory=list, description="Per-jurisdiction overrides"
    )
    scan_interval: str = Field("24h", description="Interval between scheduled runs")
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    # Computed field
    scan_interval_seconds: Optional[int] = None

    @field_validator("states")
    @classmethod
    def validate_states(cls, v: List[str]) -> List[str]:
        """Resolve state names/codes and reject unknown ones."""
        resolved: List[str] = []
        unknown: List[str] = []
        for value in v:
            code = resolve_state(value)
            if code is None:
                unknown.append(value)
            elif code not in resolved:
                resolved.append(code)
        if unknown:
            raise ValueError(f"Unknown jurisdictions: {', '.join(unknown)}")
        return resolved

    @field_validator("scan_interval")
    @classmethod
    def validate_scan_interval(cls, v: str) -> str:
        """Validate and parse scan interval (1 hour to 7 days)."""
        try:
            seconds = parse_duration(v)
            validate_duration_range(seconds)
            return v
        except DurationParseError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def validate_overrides_and_compute_fields(self):
        """Reject duplicate overrides and compute derived fields."""
        seen = set()
        for override in self.jurisdictions:
            if override.code in seen:
                raise ValueError(f"Duplicate jurisdiction override: {override.code}")
            seen.add(override.code)

        self.scan_interval_seconds = parse_duration(self.scan_interval)
        return self

    def get_override(self, code: str) -> Optional[JurisdictionConfig]:
        """Get the override block for a jurisdiction, if any."""
        for override in self.jurisdictions:
            if override.code == code.upper():
                return override
        return None
