"""Counting visitor: the shared traversal engine of pathtree.

CountingVisitor applies the file and directory filters and keeps the
walk's PathCounters. Deleting, cleaning, copying and accumulating are
not subclasses of it; they are VisitStrategy objects injected into it,
so every specialization reuses exactly the same counting contract:

- a directory is entered only if its filter answers CONTINUE; otherwise
  it and its descendants are neither visited nor counted;
- a file is counted (files +1, bytes + size) only if it still exists and
  its filter answers CONTINUE; the walk always continues afterwards;
- a directory is counted on exit, after all of its children, and the
  walk's starting directory is never counted.
"""

import os
from pathlib import Path
from typing import Optional

from .counters import PathCounters, exact_path_counters, fixed_path_counters
from .filters import PathFilter, accept_all, reject_symbolic_links
from .policies import FailFastPolicy, FailurePolicy
from .visitor import Attributes, PathVisitor, VisitResult


class VisitStrategy:
    """Effects injected into a CountingVisitor at its three callback points.

    The base strategy only counts. Subclasses override the hooks to add
    side effects (delete, copy, record) and call back into the visitor's
    ``accepts_file`` / ``count_file`` to keep the counting contract.
    """

    def enter_directory(self, visitor: 'CountingVisitor', directory: Path,
                        attributes: Attributes, depth: int) -> VisitResult:
        """Called for a directory that passed the directory filter.

        Returns:
            CONTINUE to descend, SKIP_SUBTREE to prune, TERMINATE to stop
        """
        return VisitResult.CONTINUE

    def visit_file(self, visitor: 'CountingVisitor', file: Path,
                   attributes: Attributes, depth: int) -> None:
        """Called for every file; counts it if the visitor accepts it."""
        if visitor.accepts_file(file, attributes):
            visitor.count_file(file, attributes)

    def exit_directory(self, visitor: 'CountingVisitor', directory: Path, depth: int) -> None:
        """Called after all children of an entered directory, before it is counted."""
        pass


class CountingVisitor(PathVisitor):
    """Visitor that counts files, directories and bytes.

    Example:
        >>> visitor = walk_file_tree(CountingVisitor(), Path("/tmp/project"))
        >>> print(visitor.counters)
        12 files, 3 directories, 40,960 bytes
    """

    def __init__(self,
                 counters: Optional[PathCounters] = None,
                 file_filter: PathFilter = reject_symbolic_links,
                 dir_filter: PathFilter = accept_all,
                 strategy: Optional[VisitStrategy] = None,
                 policy: Optional[FailurePolicy] = None):
        """Initialize the visitor.

        Args:
            counters: Counters to update (default: new fixed-width counters)
            file_filter: Decides which files are counted
            dir_filter: Decides which directories are entered
            strategy: Side effects to run at each callback point
            policy: Handles entries that cannot be read (default: fail fast)
        """
        self.counters = counters if counters is not None else fixed_path_counters()
        self.file_filter = file_filter
        self.dir_filter = dir_filter
        self.strategy = strategy if strategy is not None else VisitStrategy()
        self.policy = policy if policy is not None else FailFastPolicy()

    @classmethod
    def with_fixed_counters(cls, **kwargs) -> 'CountingVisitor':
        """Create a visitor counting with fixed-width counters."""
        return cls(fixed_path_counters(), **kwargs)

    @classmethod
    def with_exact_counters(cls, **kwargs) -> 'CountingVisitor':
        """Create a visitor counting with arbitrary-precision counters."""
        return cls(exact_path_counters(), **kwargs)

    # Callbacks

    def pre_visit_directory(self, directory: Path, attributes: Attributes, depth: int) -> VisitResult:
        if self.dir_filter(directory, attributes) is not VisitResult.CONTINUE:
            return VisitResult.SKIP_SUBTREE
        return self.strategy.enter_directory(self, directory, attributes, depth)

    def visit_file(self, file: Path, attributes: Attributes, depth: int) -> VisitResult:
        self.strategy.visit_file(self, file, attributes, depth)
        return VisitResult.CONTINUE

    def post_visit_directory(self, directory: Path, error: Optional[OSError], depth: int) -> VisitResult:
        if error is not None:
            return self.visit_file_failed(directory, error)
        self.strategy.exit_directory(self, directory, depth)
        self.update_directory_counter(directory, depth)
        return VisitResult.CONTINUE

    def visit_file_failed(self, path: Path, error: OSError) -> VisitResult:
        return self.policy.handle(path, error)

    # Counting contract, shared with strategies

    def accepts_file(self, file: Path, attributes: Attributes) -> bool:
        """True if ``file`` still exists and passes the file filter."""
        return os.path.exists(file) and self.file_filter(file, attributes) is VisitResult.CONTINUE

    def count_file(self, file: Path, attributes: Attributes) -> None:
        """Add one file and its size to the counters."""
        size = attributes.st_size if attributes is not None else os.stat(file).st_size
        self.counters.file_counter.increment()
        self.counters.byte_counter.add(size)

    def update_directory_counter(self, directory: Path, depth: int) -> None:
        """Count an exited directory; the walk's root (depth 0) is not counted."""
        if depth > 0:
            self.counters.directory_counter.increment()

    def __str__(self) -> str:
        return str(self.counters)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.counters!r}, strategy={type(self.strategy).__name__})"
