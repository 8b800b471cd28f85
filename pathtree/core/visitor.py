"""Visitor abstraction for pathtree.

A visitor is called by the walker at three points for every directory
and file it reaches:

- ``pre_visit_directory`` when a directory is entered (pre-order),
- ``visit_file`` for every non-directory entry,
- ``post_visit_directory`` after all children of a directory have been
  processed (post-order).

A fourth callback, ``visit_file_failed``, receives errors raised while
reading an entry's attributes or opening a directory. Each callback
returns a VisitResult that steers the walk.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Callable, Optional


class VisitResult(Enum):
    """Tri-state signal returned by visitor callbacks."""
    CONTINUE = "continue"          # Keep walking (descend into a directory)
    SKIP_SUBTREE = "skip_subtree"  # Don't descend; no post-visit for this directory
    TERMINATE = "terminate"        # Stop the whole walk now


# Attributes handed to callbacks; None when they were not read.
Attributes = Optional[os.stat_result]

DirectoryCallback = Callable[[Path, Attributes, int], VisitResult]
FileCallback = Callable[[Path, Attributes, int], VisitResult]
PostDirectoryCallback = Callable[[Path, Optional[OSError], int], VisitResult]
FailureCallback = Callable[[Path, OSError], VisitResult]


class PathVisitor:
    """Base visitor: continues everywhere and re-raises failures.

    Subclasses (or SimplePathVisitor with injected functions) override
    the callbacks they care about. ``depth`` is relative to the walk's
    starting path, which has depth 0.
    """

    def pre_visit_directory(self, directory: Path, attributes: Attributes, depth: int) -> VisitResult:
        """Called before a directory's entries are visited."""
        return VisitResult.CONTINUE

    def visit_file(self, file: Path, attributes: Attributes, depth: int) -> VisitResult:
        """Called for every non-directory entry."""
        return VisitResult.CONTINUE

    def post_visit_directory(self, directory: Path, error: Optional[OSError], depth: int) -> VisitResult:
        """Called after all entries of a directory were visited.

        Args:
            directory: The directory being left
            error: Error that cut the listing short, or None
            depth: Depth of the directory

        Raises:
            OSError: ``error`` when one is given
        """
        if error is not None:
            raise error
        return VisitResult.CONTINUE

    def visit_file_failed(self, path: Path, error: OSError) -> VisitResult:
        """Called when an entry cannot be read; re-raises by default."""
        raise error


class SimplePathVisitor(PathVisitor):
    """Visitor assembled from plain functions.

    Any callback left as None keeps the PathVisitor default.

    Example:
        >>> seen = []
        >>> visitor = SimplePathVisitor(
        ...     on_file=lambda f, a, d: seen.append(f) or VisitResult.CONTINUE)
        >>> walk_file_tree(visitor, Path("/tmp/project"))
    """

    def __init__(self,
                 on_enter_directory: Optional[DirectoryCallback] = None,
                 on_file: Optional[FileCallback] = None,
                 on_exit_directory: Optional[PostDirectoryCallback] = None,
                 on_failure: Optional[FailureCallback] = None):
        self._on_enter_directory = on_enter_directory
        self._on_file = on_file
        self._on_exit_directory = on_exit_directory
        self._on_failure = on_failure

    def pre_visit_directory(self, directory: Path, attributes: Attributes, depth: int) -> VisitResult:
        if self._on_enter_directory is None:
            return super().pre_visit_directory(directory, attributes, depth)
        return self._on_enter_directory(directory, attributes, depth)

    def visit_file(self, file: Path, attributes: Attributes, depth: int) -> VisitResult:
        if self._on_file is None:
            return super().visit_file(file, attributes, depth)
        return self._on_file(file, attributes, depth)

    def post_visit_directory(self, directory: Path, error: Optional[OSError], depth: int) -> VisitResult:
        if self._on_exit_directory is None:
            return super().post_visit_directory(directory, error, depth)
        return self._on_exit_directory(directory, error, depth)

    def visit_file_failed(self, path: Path, error: OSError) -> VisitResult:
        if self._on_failure is None:
            return super().visit_file_failed(path, error)
        return self._on_failure(path, error)
