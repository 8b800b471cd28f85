"""Copy strategy for pathtree.

CopyStrategy mirrors a source tree into a target root while the
CountingVisitor walks the source:

- on entering a source directory the matching target directory is
  created, before any of its files are copied;
- each visited file is copied to the matching target path and counted
  if the copy exists and passes the file filter.

Source paths are translated by relativizing against the source root and
re-joining the relative parts onto the target root. Going through the
plain string parts keeps this working when the two roots are different
``pathlib`` flavours.
"""

import logging
import os
import shutil
from pathlib import Path, PurePath
from typing import Iterable, Optional, Union

from .counters import PathCounters
from .counting import CountingVisitor, VisitStrategy
from .filters import PathFilter, accept_all, reject_symbolic_links
from .options import CopyOption, option_set
from .policies import FailurePolicy
from .visitor import Attributes, VisitResult

logger = logging.getLogger(__name__)


def copy_file(source: Path, target: Path, options: Iterable[CopyOption] = ()) -> Path:
    """Copy one file's bytes under the given copy options.

    Args:
        source: File to copy
        target: Destination path (not a directory)
        options: CopyOption flags

    Returns:
        ``target``

    Raises:
        FileExistsError: If ``target`` exists and REPLACE_EXISTING is not set
        IsADirectoryError: If ``target`` is an existing directory
    """
    options = option_set(options)
    follow = CopyOption.NOFOLLOW_LINKS not in options

    if os.path.lexists(target):
        if CopyOption.REPLACE_EXISTING not in options:
            raise FileExistsError(f"Target already exists: '{target}'")
        if os.path.isdir(target) and not os.path.islink(target):
            raise IsADirectoryError(f"Cannot replace directory with file: '{target}'")
        if os.path.islink(target) or not follow:
            os.unlink(target)

    if not follow and os.path.islink(source):
        os.symlink(os.readlink(source), target)
    elif os.path.isdir(source):
        # A link to a directory, reached without following links: copied as an empty directory
        if not os.path.isdir(target):
            os.mkdir(target)
    elif CopyOption.COPY_ATTRIBUTES in options:
        shutil.copy2(source, target, follow_symlinks=follow)
    else:
        shutil.copyfile(source, target, follow_symlinks=follow)
    return target


class CopyStrategy(VisitStrategy):
    """Creates target directories and copies files while walking a source tree."""

    def __init__(self,
                 source_root: Union[str, Path],
                 target_root: Union[str, Path],
                 options: Optional[Iterable[CopyOption]] = None):
        """Initialize the strategy.

        Args:
            source_root: Root of the walked tree
            target_root: Root the tree is mirrored into
            options: CopyOption flags passed to every file copy
        """
        self.source_root = Path(source_root)
        self.target_root = Path(target_root)
        self.options = option_set(options)

    def resolve_target(self, source: Path) -> Path:
        """Translate a path under the source root to the matching target path."""
        relative = PurePath(os.path.relpath(source, self.source_root))
        parts = [part for part in relative.parts if part != os.curdir]
        return self.target_root.joinpath(*parts)

    def enter_directory(self, visitor: CountingVisitor, directory: Path,
                        attributes: Attributes, depth: int) -> VisitResult:
        target = self.resolve_target(directory)
        if not target.exists():
            logger.debug("Creating directory %s", target)
            target.mkdir(parents=True)
        return VisitResult.CONTINUE

    def visit_file(self, visitor: CountingVisitor, file: Path,
                   attributes: Attributes, depth: int) -> None:
        target = copy_file(file, self.resolve_target(file), self.options)
        if visitor.accepts_file(target, attributes):
            visitor.count_file(target, attributes)


def copying_visitor(source_root: Union[str, Path],
                    target_root: Union[str, Path],
                    counters: Optional[PathCounters] = None,
                    options: Optional[Iterable[CopyOption]] = None,
                    file_filter: PathFilter = reject_symbolic_links,
                    dir_filter: PathFilter = accept_all,
                    policy: Optional[FailurePolicy] = None) -> CountingVisitor:
    """Create a CountingVisitor that copies the tree it walks.

    Every file is copied; the file filter only decides which copies are
    counted. The directory filter prunes whole subtrees from the copy.

    Args:
        source_root: Root of the tree to copy
        target_root: Root to copy into (created if missing)
        counters: Counters to update (default: new fixed-width counters)
        options: CopyOption flags
        file_filter: Decides which copied files are counted
        dir_filter: Decides which directories are copied
        policy: Failure policy (default: fail fast)

    Returns:
        The configured visitor; its ``strategy`` is a CopyStrategy
    """
    return CountingVisitor(
        counters,
        file_filter=file_filter,
        dir_filter=dir_filter,
        strategy=CopyStrategy(source_root, target_root, options),
        policy=policy,
    )
