"""Exception taxonomy for pathtree.

Filesystem conditions are reported with Python's builtin ``OSError``
subclasses (``FileNotFoundError``, ``PermissionError``,
``NotADirectoryError``, ``IsADirectoryError``). The classes below cover
the conditions that have no builtin equivalent.
"""

from pathlib import Path
from typing import Iterable, Optional, Union


class PathTreeError(Exception):
    """Base class for errors raised by pathtree itself."""
    pass


class WalkConfigError(PathTreeError, ValueError):
    """Raised when a WalkConfig fails validation."""
    pass


class UnsupportedAttributeViewError(PathTreeError):
    """Raised when a DOS or POSIX attribute view is required but unavailable.

    Probing helpers return ``None`` instead of raising; this error only
    surfaces from the explicit ``require_*`` helpers and from operations
    that cannot proceed without some attribute view.
    """

    def __init__(self, path: Union[str, Path], view: str):
        self.path = Path(path)
        self.view = view
        super().__init__(f"{view} attribute view not available for '{path}'")


class StructuralMismatchError(PathTreeError, AssertionError):
    """Two trees stopped agreeing in shape while their contents were compared.

    Shape equality is established before any file content is read, so
    this only happens when the filesystem is modified concurrently with
    the comparison. It is not a user-facing condition.
    """

    def __init__(self, relative_path: Union[str, Path]):
        self.relative_path = Path(relative_path)
        super().__init__(f"Unexpected mismatch for '{relative_path}'")


class FileSystemLoopError(OSError):
    """A symbolic link cycle was detected while following links."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(f"File system loop detected: '{path}'")
        self.filename = str(path)


class PathOutsideFenceError(PathTreeError, ValueError):
    """Raised by PathFence when a path is not below any allowed root."""

    def __init__(self, path: Union[str, Path], resolved: Path, roots: Iterable[Path]):
        self.path = path
        self.resolved = resolved
        self.roots = list(roots)
        super().__init__(f"[{path}] -> [{resolved}] not in the fence {self.roots}")


def attach_partial_counters(error: BaseException, counters: Optional[object]) -> BaseException:
    """Record the counters accumulated before ``error`` aborted a walk.

    Args:
        error: Exception escaping from a facade call
        counters: PathCounters filled up to the point of failure

    Returns:
        The same exception, for use in a ``raise`` statement
    """
    if counters is not None and not hasattr(error, 'partial_counters'):
        try:
            error.partial_counters = counters
        except AttributeError:
            # Exceptions defined with __slots__ cannot carry extra state
            pass
    return error
