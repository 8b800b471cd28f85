"""Path fence: restricts paths to a set of allowed roots.

A fence with no roots lets every path through. Otherwise a path is
accepted only if its absolute, normalized form lies under one of the
roots, which guards destructive operations against stray paths.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .errors import PathOutsideFenceError


def _absolute_normalize(path: Union[str, Path]) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


class PathFence:
    """Accepts paths under a fixed set of roots.

    Example:
        >>> fence = PathFence(["/srv/data"])
        >>> fence.apply("/srv/data/reports")
        PosixPath('/srv/data/reports')
        >>> fence.apply("/etc/passwd")
        Traceback (most recent call last):
        PathOutsideFenceError: ...
    """

    def __init__(self, roots: Optional[Iterable[Union[str, Path]]] = None):
        self.roots: List[Path] = [_absolute_normalize(root) for root in (roots or ())]

    def contains(self, path: Union[str, Path]) -> bool:
        """Check if ``path`` is inside the fence."""
        if not self.roots:
            return True
        resolved = _absolute_normalize(path)
        return any(resolved == root or root in resolved.parents for root in self.roots)

    def apply(self, path: Union[str, Path]) -> Path:
        """Return ``path`` as a Path if it is inside the fence.

        Raises:
            PathOutsideFenceError: If ``path`` is outside every root
        """
        if not self.contains(path):
            raise PathOutsideFenceError(path, _absolute_normalize(path), self.roots)
        return Path(path)

    __call__ = apply

    def __repr__(self) -> str:
        return f"PathFence({[str(root) for root in self.roots]!r})"
