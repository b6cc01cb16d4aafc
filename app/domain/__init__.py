"""Domain models for WARN notices and nursing impact."""

from .jurisdictions import STATE_NAMES, StateCode, resolve_state, state_name
from .models import (
    AdapterFetchResult,
    Attachment,
    CareSetting,
    ImpactLabel,
    NormalizedNotice,
    NursingImpact,
    Provenance,
    RoleMix,
)

__all__ = [
    "AdapterFetchResult",
    "Attachment",
    "CareSetting",
    "ImpactLabel",
    "NormalizedNotice",
    "NursingImpact",
    "Provenance",
    "RoleMix",
    "STATE_NAMES",
    "StateCode",
    "resolve_state",
    "state_name",
]
