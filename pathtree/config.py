"""Configuration system for pathtree.

This module defines how callers describe a walk: whether symbolic links
are followed, how deep to descend, which files and directories to
accept, how precisely to count, and what to do when visiting an entry
fails.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .core.filters import PathFilter, accept_all, reject_symbolic_links
from .core.options import CounterPrecision, CopyOption, DeleteOption, option_set


@dataclass
class WalkConfig:
    """Complete configuration for one tree walk.

    This is the primary way callers specify how a facade operation
    walks the tree. Keyword arguments of the facade functions are
    folded into one of these before the walk starts.
    """

    # Traversal control
    follow_links: bool = False
    max_depth: Optional[int] = None

    # Filtering
    file_filter: PathFilter = field(default=reject_symbolic_links)
    dir_filter: PathFilter = field(default=accept_all)

    # Counting
    precision: CounterPrecision = CounterPrecision.FIXED

    # Failure handling (a FailurePolicy; None = the operation's default)
    policy: Optional[Any] = None

    @classmethod
    def shallow(cls, max_depth: int = 1) -> 'WalkConfig':
        """Create config for walking only the top levels of a tree.

        Args:
            max_depth: How deep to descend (default 1 = immediate children only)

        Returns:
            WalkConfig limited to ``max_depth``
        """
        return cls(max_depth=max_depth)

    @classmethod
    def exact(cls, **kwargs) -> 'WalkConfig':
        """Create config that counts with arbitrary precision."""
        return cls(precision=CounterPrecision.EXACT, **kwargs)

    @classmethod
    def following_links(cls, **kwargs) -> 'WalkConfig':
        """Create config that descends through symbolic links."""
        return cls(follow_links=True, **kwargs)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                errors.append("max_depth must be an integer or None")
            elif self.max_depth < 0:
                errors.append("max_depth cannot be negative")

        if not callable(self.file_filter):
            errors.append("file_filter must be callable")
        if not callable(self.dir_filter):
            errors.append("dir_filter must be callable")

        if not isinstance(self.precision, CounterPrecision):
            errors.append("precision must be a CounterPrecision")

        if self.policy is not None and not callable(getattr(self.policy, 'handle', None)):
            errors.append("policy must provide a handle(path, error) method")

        return errors


__all__ = [
    'WalkConfig',
    'CounterPrecision',
    'DeleteOption',
    'CopyOption',
    'option_set',
]
