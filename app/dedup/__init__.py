"""Identity-based deduplication and merge of notices."""

from .merge import MergeError, deduplicate, merge_notices

__all__ = ["MergeError", "deduplicate", "merge_notices"]
