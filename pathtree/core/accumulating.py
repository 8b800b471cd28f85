"""Accumulate strategy for pathtree.

Records the normalized path of every visited file and every exited
directory in two ordered lists. All paths are kept in memory, so this is
meant for trees of modest size, e.g. building a location-independent
fingerprint of a tree's shape with ``relativize_files`` and
``relativize_directories``.
"""

import os
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from .counters import PathCounters
from .counting import CountingVisitor, VisitStrategy
from .filters import PathFilter, accept_all, reject_symbolic_links
from .policies import FailurePolicy
from .visitor import Attributes


def relativize(paths: Iterable[Path],
               root: Union[str, Path],
               sort: bool = True,
               key: Optional[Callable[[Path], Any]] = None) -> List[Path]:
    """Express ``paths`` relative to ``root``, optionally sorted.

    Args:
        paths: Paths under ``root``
        root: Directory to relativize against
        sort: Sort the result
        key: Sort key (default: natural Path ordering)

    Returns:
        List of relative paths
    """
    root = Path(os.path.normpath(root))
    relative = [Path(os.path.relpath(path, root)) for path in paths]
    if sort:
        relative.sort(key=key)
    return relative


class AccumulateStrategy(VisitStrategy):
    """Collects visited file and directory paths, then counts as usual."""

    def __init__(self):
        self.file_list: List[Path] = []
        self.dir_list: List[Path] = []

    def visit_file(self, visitor: CountingVisitor, file: Path,
                   attributes: Attributes, depth: int) -> None:
        self.file_list.append(Path(os.path.normpath(file)))
        super().visit_file(visitor, file, attributes, depth)

    def exit_directory(self, visitor: CountingVisitor, directory: Path, depth: int) -> None:
        # Same rule as the directory counter: the walk's root is not a member.
        if depth > 0:
            self.dir_list.append(Path(os.path.normpath(directory)))

    def relativize_files(self, root: Union[str, Path], sort: bool = True,
                         key: Optional[Callable[[Path], Any]] = None) -> List[Path]:
        """Return the recorded files relative to ``root``."""
        return relativize(self.file_list, root, sort, key)

    def relativize_directories(self, root: Union[str, Path], sort: bool = True,
                               key: Optional[Callable[[Path], Any]] = None) -> List[Path]:
        """Return the recorded directories relative to ``root``."""
        return relativize(self.dir_list, root, sort, key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccumulateStrategy):
            return NotImplemented
        return self.file_list == other.file_list and self.dir_list == other.dir_list

    __hash__ = None


def accumulating_visitor(counters: Optional[PathCounters] = None,
                         file_filter: PathFilter = reject_symbolic_links,
                         dir_filter: PathFilter = accept_all,
                         policy: Optional[FailurePolicy] = None) -> CountingVisitor:
    """Create a CountingVisitor that records every path it visits.

    Every visited file is recorded; the file filter only decides which
    are counted. Read the lists from ``visitor.strategy``.
    """
    return CountingVisitor(
        counters,
        file_filter=file_filter,
        dir_filter=dir_filter,
        strategy=AccumulateStrategy(),
        policy=policy,
    )
