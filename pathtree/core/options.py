"""Option flags shared by the counting, delete and copy machinery."""

from enum import Enum
from typing import Any, FrozenSet, Iterable, Optional


class CounterPrecision(Enum):
    """How counters store their values.

    Chosen once per walk; every counter of a PathCounters shares it.
    """
    FIXED = "fixed"    # Signed 64-bit, wraps silently
    EXACT = "exact"    # Unbounded Python int
    NONE = "none"      # Discards every update


class DeleteOption(Enum):
    """Optional behavior for delete and clean operations."""
    OVERRIDE_READ_ONLY = "override_read_only"


class CopyOption(Enum):
    """Optional behavior for copy operations."""
    REPLACE_EXISTING = "replace_existing"    # Overwrite existing target files
    COPY_ATTRIBUTES = "copy_attributes"      # Preserve permission bits and timestamps
    NOFOLLOW_LINKS = "nofollow_links"        # Copy symbolic links as links


def option_set(options: Optional[Iterable[Any]]) -> FrozenSet[Any]:
    """Normalize None, a single flag, or an iterable of flags to a frozenset."""
    if options is None:
        return frozenset()
    if isinstance(options, Enum):
        return frozenset((options,))
    return frozenset(options)
