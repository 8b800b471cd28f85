"""Depth-first filesystem walker for pathtree.

``walk_file_tree`` is the single traversal engine: it drives any
PathVisitor through a tree, calling ``pre_visit_directory`` before a
directory's entries, ``visit_file`` for each non-directory entry, and
``post_visit_directory`` once every entry has returned.

Directory listings are read inside a ``with os.scandir(...)`` block,
sorted by name, and closed before any entry is visited, so no listing
handle outlives the directory that opened it, whichever way the walk
ends.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple, TypeVar, Union

from ..errors import FileSystemLoopError
from .filters import PathFilter, accepts
from .visitor import PathVisitor, VisitResult

logger = logging.getLogger(__name__)

V = TypeVar('V', bound=PathVisitor)


def _list_directory(directory: Path) -> List[os.DirEntry]:
    """Read and sort a directory listing, releasing the handle before returning."""
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


def _read_attributes(path: Union[Path, os.DirEntry], follow_links: bool) -> os.stat_result:
    """Stat an entry under the link policy.

    When following links, a dangling link is reported with its own
    attributes instead of failing.
    """
    if isinstance(path, os.DirEntry):
        if not follow_links:
            return path.stat(follow_symlinks=False)
        try:
            return path.stat(follow_symlinks=True)
        except FileNotFoundError:
            return path.stat(follow_symlinks=False)
    if not follow_links:
        return os.lstat(path)
    try:
        return os.stat(path)
    except FileNotFoundError:
        return os.lstat(path)


class _Walk:
    """State of one walk: visitor, options and the active ancestor chain."""

    def __init__(self, visitor: PathVisitor, follow_links: bool, max_depth: Optional[int]):
        self.visitor = visitor
        self.follow_links = follow_links
        self.max_depth = max_depth
        self._ancestors: Set[Tuple[int, int]] = set()

    def _should_explore(self, depth: int) -> bool:
        """Check if entries of a directory at given depth should be listed."""
        if self.max_depth is None:
            return True
        return depth < self.max_depth

    def start(self, start: Path) -> VisitResult:
        try:
            attributes = _read_attributes(start, self.follow_links)
        except OSError as exc:
            return self.visitor.visit_file_failed(start, exc)

        if stat.S_ISDIR(attributes.st_mode):
            return self.directory(start, attributes, 0)
        return self.visitor.visit_file(start, attributes, 0)

    def directory(self, directory: Path, attributes: os.stat_result, depth: int) -> VisitResult:
        key = (attributes.st_dev, attributes.st_ino)
        if self.follow_links and key in self._ancestors:
            return self.visitor.visit_file_failed(directory, FileSystemLoopError(directory))

        result = self.visitor.pre_visit_directory(directory, attributes, depth)
        if result is VisitResult.TERMINATE:
            return result
        if result is VisitResult.SKIP_SUBTREE:
            return VisitResult.CONTINUE

        error: Optional[OSError] = None
        entries: List[os.DirEntry] = []
        if self._should_explore(depth):
            try:
                entries = _list_directory(directory)
            except OSError as exc:
                error = exc

        self._ancestors.add(key)
        try:
            for entry in entries:
                if self.entry(Path(entry.path), entry, depth + 1) is VisitResult.TERMINATE:
                    return VisitResult.TERMINATE
        finally:
            self._ancestors.discard(key)

        result = self.visitor.post_visit_directory(directory, error, depth)
        if result is VisitResult.TERMINATE:
            return result
        return VisitResult.CONTINUE

    def entry(self, path: Path, entry: os.DirEntry, depth: int) -> VisitResult:
        try:
            attributes = _read_attributes(entry, self.follow_links)
        except OSError as exc:
            return self.visitor.visit_file_failed(path, exc)

        if stat.S_ISDIR(attributes.st_mode):
            return self.directory(path, attributes, depth)
        return self.visitor.visit_file(path, attributes, depth)


def walk_file_tree(visitor: V,
                   start: Union[str, Path],
                   follow_links: bool = False,
                   max_depth: Optional[int] = None) -> V:
    """Walk the tree rooted at ``start``, depth-first, driving ``visitor``.

    Entries are visited in name order. If ``start`` is not a directory
    the visitor's ``visit_file`` is called once for it.

    Args:
        visitor: Receives the walk's callbacks
        start: Root of the walk
        follow_links: Descend into directories reached through symbolic links
        max_depth: Deepest directory level to list (None = unlimited);
            a directory at ``max_depth`` is entered and exited but not listed

    Returns:
        The visitor, for chaining (e.g. ``walk_file_tree(v, p).counters``)

    Raises:
        OSError: Whatever the visitor's callbacks raise, which aborts the walk
    """
    start = Path(start)
    logger.debug("Walking %s (follow_links=%s, max_depth=%s)", start, follow_links, max_depth)
    result = _Walk(visitor, follow_links, max_depth).start(start)
    logger.debug("Finished walking %s (%s)", start, result.name)
    return visitor


def iter_tree(start: Union[str, Path],
              follow_links: bool = False,
              max_depth: Optional[int] = None) -> Iterator[Tuple[Path, os.stat_result, int]]:
    """Lazily yield ``(path, attributes, depth)`` for every entry, pre-order.

    Uses recursion (via generator) for natural depth-first behavior.
    Unlike ``walk_file_tree`` errors are not routed through a visitor;
    they propagate to the consumer.
    """
    start = Path(start)
    ancestors: Set[Tuple[int, int]] = set()

    def _walk_recursive(path: Path, attributes: os.stat_result, depth: int):
        yield (path, attributes, depth)
        if not stat.S_ISDIR(attributes.st_mode):
            return
        if max_depth is not None and depth >= max_depth:
            return

        key = (attributes.st_dev, attributes.st_ino)
        if follow_links and key in ancestors:
            raise FileSystemLoopError(path)
        ancestors.add(key)
        try:
            for entry in _list_directory(path):
                child_attributes = _read_attributes(entry, follow_links)
                yield from _walk_recursive(Path(entry.path), child_attributes, depth + 1)
        finally:
            ancestors.discard(key)

    yield from _walk_recursive(start, _read_attributes(start, follow_links), 0)


def walk(start: Union[str, Path],
         path_filter: PathFilter,
         max_depth: Optional[int] = None,
         read_attributes: bool = True,
         follow_links: bool = False) -> Iterator[Path]:
    """Yield the paths of a tree accepted by ``path_filter``, pre-order.

    Args:
        start: Root of the walk (yielded too, if accepted)
        path_filter: Decides which paths are yielded; it does not prune
        max_depth: Deepest level to list (None = unlimited)
        read_attributes: Pass attributes to the filter; when False the
            filter receives None
        follow_links: Descend through symbolic links to directories

    Yields:
        Accepted paths
    """
    for path, attributes, _ in iter_tree(start, follow_links, max_depth):
        if accepts(path_filter, path, attributes if read_attributes else None):
            yield path
