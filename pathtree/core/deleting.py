"""Delete and clean strategies for pathtree.

DeleteStrategy plugs into CountingVisitor to remove what the walk
visits:

- files are removed when visited; directories are removed in the
  post-order hook, and only if they are empty by then, so children are
  always gone before their parent;
- a skip-set of bare names protects matching files (kept, but still
  counted) and matching directories (pruned, not descended);
- with ``DeleteOption.OVERRIDE_READ_ONLY`` a deletion refused with
  ``PermissionError`` is retried once after making the entry writable
  and its parent directory writable+searchable for the owner. Parent
  permissions changed this way are restored once the directory has been
  processed, or at the end of the walk.

Cleaning is the same strategy with directory removal switched off.
"""

import logging
import os
from bisect import bisect_left
from pathlib import Path
from typing import Dict, Iterable, Optional

from .attributes import PosixAttributeView, parent_of, probe_view
from .counters import PathCounters
from .counting import CountingVisitor, VisitStrategy
from .filters import PathFilter, accept_all, reject_symbolic_links
from .options import DeleteOption, option_set
from .policies import FailurePolicy, IgnoreMissingPolicy
from .visitor import Attributes, VisitResult

logger = logging.getLogger(__name__)


def is_empty_directory(directory: Path) -> bool:
    """Check if ``directory`` has no entries.

    Raises:
        NotADirectoryError: If ``directory`` is not a directory
        FileNotFoundError: If it does not exist
    """
    with os.scandir(directory) as it:
        return next(it, None) is None


class DeleteStrategy(VisitStrategy):
    """Removes visited files and emptied directories."""

    def __init__(self,
                 skip: Optional[Iterable[str]] = None,
                 options: Optional[Iterable[DeleteOption]] = None,
                 delete_directories: bool = True,
                 follow_links: bool = False):
        """Initialize the strategy.

        Args:
            skip: Bare file/directory names to leave in place
            options: DeleteOption flags
            delete_directories: Remove directories once empty (False = clean)
            follow_links: Presence checks follow symbolic links
        """
        # Sorted once here; membership is a bisect over this tuple.
        self.skip = tuple(sorted(set(skip or ())))
        self.options = option_set(options)
        self.override_read_only = DeleteOption.OVERRIDE_READ_ONLY in self.options
        self.delete_directories = delete_directories
        self.follow_links = follow_links
        self._adjusted: Dict[Path, int] = {}

    def is_skipped(self, path: Path) -> bool:
        """Check if the final name component of ``path`` is in the skip-set."""
        name = path.name
        index = bisect_left(self.skip, name)
        return index < len(self.skip) and self.skip[index] == name

    # Hooks

    def enter_directory(self, visitor: CountingVisitor, directory: Path,
                        attributes: Attributes, depth: int) -> VisitResult:
        if self.is_skipped(directory):
            logger.debug("Skipping directory %s", directory)
            return VisitResult.SKIP_SUBTREE
        return VisitResult.CONTINUE

    def visit_file(self, visitor: CountingVisitor, file: Path,
                   attributes: Attributes, depth: int) -> None:
        # Decide before deleting, the file won't exist afterwards.
        counted = visitor.accepts_file(file, attributes)
        if not self.is_skipped(file):
            self.delete_file(file)
        if counted:
            visitor.count_file(file, attributes)

    def exit_directory(self, visitor: CountingVisitor, directory: Path, depth: int) -> None:
        self._restore(directory)
        if not self.delete_directories:
            return
        try:
            empty = is_empty_directory(directory)
        except FileNotFoundError:
            return
        if empty:
            self.remove(directory, os.rmdir)

    # Deletion

    def delete_file(self, file: Path) -> None:
        """Delete one file or link, tolerating its absence."""
        present = os.path.exists(file) if self.follow_links else os.path.lexists(file)
        if present:
            self.remove(file, os.unlink)
        # A dangling link is not "present" when links are followed.
        if os.path.islink(file):
            try:
                os.unlink(file)
            except FileNotFoundError:
                pass

    def remove(self, path: Path, remove=os.unlink) -> bool:
        """Remove ``path`` with ``remove``, retrying once after a read-only override.

        Returns:
            True if this call removed the entry, False if it was already gone
        """
        try:
            remove(path)
            return True
        except FileNotFoundError:
            return False
        except PermissionError as exc:
            if not self.override_read_only:
                raise
            self._make_deletable(path, exc)

        try:
            remove(path)
        except FileNotFoundError:
            return False
        logger.info("Deleted %s after overriding read-only permissions", path)
        return True

    def _make_deletable(self, path: Path, error: PermissionError) -> None:
        view = probe_view()
        if view is None:
            raise error
        try:
            if isinstance(view, PosixAttributeView):
                parent = parent_of(path)
                if parent is not None and parent not in self._adjusted:
                    self._adjusted[parent] = view.permissions(parent)
                view.set_delete_permissions(parent, True)
                if not os.path.islink(path):
                    view.set_read_only(path, False)
            else:
                view.set_read_only(path, False, self.follow_links)
        except OSError as exc:
            logger.warning("Could not override read-only state of %s: %s", path, exc)
            raise error from exc

    # Permission bookkeeping

    def _restore(self, directory: Path) -> None:
        mode = self._adjusted.pop(directory, None)
        if mode is not None and os.path.lexists(directory):
            os.chmod(directory, mode)

    def restore_permissions(self) -> None:
        """Put back every parent permission changed by a read-only override."""
        for directory in list(self._adjusted):
            self._restore(directory)


def deleting_visitor(counters: Optional[PathCounters] = None,
                     skip: Optional[Iterable[str]] = None,
                     options: Optional[Iterable[DeleteOption]] = None,
                     follow_links: bool = False,
                     file_filter: PathFilter = reject_symbolic_links,
                     dir_filter: PathFilter = accept_all,
                     policy: Optional[FailurePolicy] = None) -> CountingVisitor:
    """Create a CountingVisitor that deletes the tree it walks.

    Entries that vanish while the walk runs are treated as deleted.

    Args:
        counters: Counters to update (default: new fixed-width counters)
        skip: Bare names to leave in place
        options: DeleteOption flags
        follow_links: Presence checks follow symbolic links
        file_filter: Decides which files are counted (not which are deleted)
        dir_filter: Decides which directories are entered
        policy: Failure policy (default: IgnoreMissingPolicy)

    Returns:
        The configured visitor; its ``strategy`` is a DeleteStrategy
    """
    return CountingVisitor(
        counters,
        file_filter=file_filter,
        dir_filter=dir_filter,
        strategy=DeleteStrategy(skip, options, delete_directories=True, follow_links=follow_links),
        policy=policy if policy is not None else IgnoreMissingPolicy(),
    )


def cleaning_visitor(counters: Optional[PathCounters] = None,
                     skip: Optional[Iterable[str]] = None,
                     options: Optional[Iterable[DeleteOption]] = None,
                     follow_links: bool = False,
                     file_filter: PathFilter = reject_symbolic_links,
                     dir_filter: PathFilter = accept_all,
                     policy: Optional[FailurePolicy] = None) -> CountingVisitor:
    """Create a CountingVisitor that deletes files but keeps directories."""
    return CountingVisitor(
        counters,
        file_filter=file_filter,
        dir_filter=dir_filter,
        strategy=DeleteStrategy(skip, options, delete_directories=False, follow_links=follow_links),
        policy=policy if policy is not None else IgnoreMissingPolicy(),
    )
