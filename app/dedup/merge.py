"""Left-biased merge of notices that share an identity hash.

The first-seen notice wins every field it already has; later sightings only
fill gaps. Provenance always stays with the first-seen notice. The merge is
idempotent: merging the same incoming notice twice changes nothing the second
time.
"""

from typing import Any, Dict, Iterable, List

from app.domain.models import NormalizedNotice
from app.scoring import apply_impact

MERGEABLE_FIELDS = (
    "employer_name",
    "parent_system",
    "city",
    "county",
    "address",
    "notice_date",
    "effective_date",
    "employees_affected",
    "industry_code",
    "reason",
    "raw_text",
    "attachments",
)


class MergeError(ValueError):
    """Raised when asked to merge notices with different identities."""


def _is_empty(value: Any) -> bool:
    # Zero is a real headcount; only None and blank containers/strings are gaps
    if value is None:
        return True
    if isinstance(value, (str, list, tuple)):
        return len(value) == 0
    return False


def merge_notices(existing: NormalizedNotice, incoming: NormalizedNotice) -> NormalizedNotice:
    """Fill gaps in `existing` from `incoming`.

    Args:
        existing: First-seen notice (kept as the base)
        incoming: Later notice with the same id

    Returns:
        `existing` unchanged when nothing was filled, else a new notice with the
        impact recomputed from the merged fields

    Raises:
        MergeError: If the ids differ
    """
    if existing.id != incoming.id:
        raise MergeError(f"Cannot merge notices with different ids: {existing.id} != {incoming.id}")

    updates: Dict[str, Any] = {}
    for name in MERGEABLE_FIELDS:
        current = getattr(existing, name)
        candidate = getattr(incoming, name)
        if _is_empty(current) and not _is_empty(candidate):
            updates[name] = candidate

    if not updates and existing.impact is not None:
        return existing

    return apply_impact(existing.model_copy(update=updates))


def deduplicate(notices: Iterable[NormalizedNotice]) -> List[NormalizedNotice]:
    """Collapse notices sharing an id, keeping first-seen order."""
    by_id: Dict[str, NormalizedNotice] = {}
    for notice in notices:
        existing = by_id.get(notice.id)
        by_id[notice.id] = merge_notices(existing, notice) if existing is not None else notice
    return list(by_id.values())
