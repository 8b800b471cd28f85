"""High-level API for pathtree.

This module provides simple, functional interfaces for the common tree
operations: count, delete, clean, copy and compare. Each call performs
one complete walk (two for comparisons) and returns the walk's
PathCounters, or a boolean for comparisons.

Errors are not swallowed: they abort the walk and propagate. The
counters filled before the failure are attached to the escaping
exception as ``partial_counters``, and a ``counters`` instance passed in
by the caller holds the same partial totals.
"""

import contextlib
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .compare import accumulate, content_equals, file_content_equals, shape_equals
from .config import WalkConfig
from .core.attributes import preserved_permissions, parent_of, set_read_only
from .core.copying import copy_file, copying_visitor
from .core.counters import PathCounters, path_counters
from .core.counting import CountingVisitor
from .core.deleting import DeleteStrategy, cleaning_visitor, deleting_visitor, is_empty_directory
from .core.options import CopyOption, CounterPrecision, DeleteOption, option_set
from .core.walker import walk, walk_file_tree
from .errors import WalkConfigError, attach_partial_counters
from .fence import PathFence

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

visit_file_tree = walk_file_tree


def _build_config(config: Optional[WalkConfig], **overrides) -> WalkConfig:
    """Fold keyword overrides into a (copied) WalkConfig and validate it."""
    if config is None:
        config = WalkConfig()
    else:
        config = WalkConfig(**vars(config))

    # Apply any additional kwargs to config
    for key, value in overrides.items():
        if not hasattr(config, key):
            raise WalkConfigError(f"Unknown walk option: {key}")
        setattr(config, key, value)

    errors = config.validate()
    if errors:
        raise WalkConfigError(f"Invalid configuration: {'; '.join(errors)}")
    return config


@contextlib.contextmanager
def _reporting(counters: PathCounters, operation: str, path: PathLike) -> Iterator[None]:
    """Attach partial counters to any error escaping an operation."""
    try:
        yield
    except Exception as exc:
        logger.debug("%s of %s aborted after %s: %s", operation, path, counters, exc)
        raise attach_partial_counters(exc, counters)


def _fenced(fence: Optional[PathFence], *paths: PathLike) -> None:
    if fence is not None:
        for path in paths:
            fence.apply(path)


# Counting

def count_directory(directory: PathLike,
                    config: Optional[WalkConfig] = None,
                    counters: Optional[PathCounters] = None,
                    **options) -> PathCounters:
    """Count the files, directories and bytes of a tree.

    Args:
        directory: Root of the tree (a single file counts as one file)
        config: Walk configuration; keyword ``options`` override its fields
        counters: Counters to add to (default: new counters of ``config.precision``)
        **options: WalkConfig fields (follow_links, max_depth, file_filter,
            dir_filter, precision, policy)

    Returns:
        The walk's PathCounters

    Example:
        >>> counters = count_directory("/tmp/project", max_depth=2)
        >>> counters.files, counters.directories, counters.bytes
        (12, 3, 40960)
    """
    config = _build_config(config, **options)
    if counters is None:
        counters = path_counters(config.precision)
    visitor = CountingVisitor(counters, config.file_filter, config.dir_filter, policy=config.policy)
    with _reporting(counters, "count", directory):
        walk_file_tree(visitor, directory, config.follow_links, config.max_depth)
    return counters


def count_directory_exact(directory: PathLike, **options) -> PathCounters:
    """Count a tree with arbitrary-precision counters."""
    return count_directory(directory, precision=CounterPrecision.EXACT, **options)


def size_of_directory(directory: PathLike, exact: bool = False) -> int:
    """Return the total size in bytes of the files below ``directory``.

    Args:
        directory: Root of the tree
        exact: Count with arbitrary precision; otherwise the sum may wrap

    Raises:
        FileNotFoundError: If ``directory`` does not exist
    """
    counters = count_directory_exact(directory) if exact else count_directory(directory)
    return counters.byte_counter.as_exact() if exact else counters.byte_counter.as_fixed()


def size_of(path: PathLike, exact: bool = False) -> int:
    """Return the size of a file, or the total size of a directory tree.

    Raises:
        FileNotFoundError: If ``path`` does not exist
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"File system element for parameter 'path' does not exist: '{path}'")
    if os.path.isdir(path):
        return size_of_directory(path, exact)
    return os.path.getsize(path)


# Deleting

def delete(path: PathLike,
           options: Optional[Iterable[DeleteOption]] = None,
           skip: Optional[Iterable[str]] = None,
           follow_links: bool = False,
           counters: Optional[PathCounters] = None,
           fence: Optional[PathFence] = None) -> PathCounters:
    """Delete a file or a whole directory tree.

    Symbolic links are deleted, never their targets. A missing path is
    not an error; the returned counters are simply zero.

    Args:
        path: File or directory to delete
        options: DeleteOption flags
        skip: Bare names to leave in place (directories only)
        follow_links: Presence checks follow symbolic links
        counters: Counters to add to (default: new fixed-width counters)
        fence: Refuse paths outside this fence

    Returns:
        PathCounters of what was visited
    """
    if os.path.isdir(path) and not os.path.islink(path):
        return delete_directory(path, options, skip, follow_links, counters, fence=fence)
    return delete_file(path, options, follow_links, counters, fence=fence)


def delete_directory(directory: PathLike,
                     options: Optional[Iterable[DeleteOption]] = None,
                     skip: Optional[Iterable[str]] = None,
                     follow_links: bool = False,
                     counters: Optional[PathCounters] = None,
                     config: Optional[WalkConfig] = None,
                     fence: Optional[PathFence] = None) -> PathCounters:
    """Delete a directory tree, children before parents.

    Files counted are those accepted by the file filter; files named in
    ``skip`` are counted but kept, directories named in ``skip`` are
    neither entered nor counted. With OVERRIDE_READ_ONLY, parent
    permissions adjusted during the walk are restored before returning.

    Symbolic links are never descended; they are removed like files and
    their targets are left alone. ``follow_links`` only changes how the
    presence of an entry is checked before it is removed.

    Returns:
        PathCounters of what was visited
    """
    _fenced(fence, directory)
    config = _build_config(config, **({'follow_links': True} if follow_links else {}))
    if counters is None:
        counters = path_counters(config.precision)
    visitor = deleting_visitor(counters, skip, options,
                               follow_links=config.follow_links,
                               file_filter=config.file_filter,
                               dir_filter=config.dir_filter,
                               policy=config.policy)
    try:
        with _reporting(counters, "delete", directory):
            walk_file_tree(visitor, directory, False, config.max_depth)
    finally:
        visitor.strategy.restore_permissions()
    return counters


def delete_file(file: PathLike,
                options: Optional[Iterable[DeleteOption]] = None,
                follow_links: bool = False,
                counters: Optional[PathCounters] = None,
                fence: Optional[PathFence] = None) -> PathCounters:
    """Delete a single file or symbolic link.

    A link to a directory is removed as a link.

    Returns:
        PathCounters with one file and its size if something was deleted

    Raises:
        IsADirectoryError: If ``file`` is a directory
        PermissionError: If deletion is refused and cannot be overridden
    """
    _fenced(fence, file)
    file = Path(file)
    if os.path.isdir(file) and not os.path.islink(file):
        raise IsADirectoryError(f"Not a file: '{file}'")
    if counters is None:
        counters = path_counters()

    strategy = DeleteStrategy(options=options, follow_links=follow_links)
    exists = os.path.exists(file) if follow_links else os.path.lexists(file)
    size = os.path.getsize(file) if exists and not os.path.islink(file) else 0
    try:
        with _reporting(counters, "delete", file):
            if strategy.remove(file):
                counters.file_counter.increment()
                counters.byte_counter.add(size)
    finally:
        strategy.restore_permissions()
    return counters


def clean_directory(directory: PathLike,
                    options: Optional[Iterable[DeleteOption]] = None,
                    skip: Optional[Iterable[str]] = None,
                    counters: Optional[PathCounters] = None,
                    config: Optional[WalkConfig] = None,
                    fence: Optional[PathFence] = None) -> PathCounters:
    """Delete every file below ``directory`` but keep the directories.

    Symbolic links below ``directory`` are removed, never descended.

    Returns:
        PathCounters of what was visited
    """
    _fenced(fence, directory)
    config = _build_config(config)
    if counters is None:
        counters = path_counters(config.precision)
    visitor = cleaning_visitor(counters, skip, options,
                               follow_links=config.follow_links,
                               file_filter=config.file_filter,
                               dir_filter=config.dir_filter,
                               policy=config.policy)
    try:
        with _reporting(counters, "clean", directory):
            walk_file_tree(visitor, directory, False, config.max_depth)
    finally:
        visitor.strategy.restore_permissions()
    return counters


# Copying

def copy_directory(source: PathLike,
                   target: PathLike,
                   options: Optional[Iterable[CopyOption]] = None,
                   counters: Optional[PathCounters] = None,
                   config: Optional[WalkConfig] = None,
                   fence: Optional[PathFence] = None,
                   **walk_options) -> PathCounters:
    """Copy a directory tree into ``target``, creating it if needed.

    Args:
        source: Directory to copy
        target: Directory to copy into; it mirrors ``source``
        options: CopyOption flags for each file
        counters: Counters to add to (default: new counters of ``config.precision``)
        config: Walk configuration
        fence: Refuse targets outside this fence
        **walk_options: WalkConfig fields overriding ``config``

    Returns:
        PathCounters of the copied tree

    Raises:
        NotADirectoryError: If ``source`` is not a directory
        FileExistsError: If a target file exists and REPLACE_EXISTING is not set
    """
    _fenced(fence, target)
    if os.path.lexists(source) and not os.path.isdir(source):
        raise NotADirectoryError(f"Not a directory: '{source}'")
    config = _build_config(config, **walk_options)
    if counters is None:
        counters = path_counters(config.precision)
    visitor = copying_visitor(source, target, counters, options,
                              file_filter=config.file_filter,
                              dir_filter=config.dir_filter,
                              policy=config.policy)
    with _reporting(counters, "copy", source):
        walk_file_tree(visitor, source, config.follow_links, config.max_depth)
    return counters


def copy_file_to_directory(source_file: PathLike,
                           target_directory: PathLike,
                           options: Optional[Iterable[CopyOption]] = None) -> Path:
    """Copy a file into a directory, keeping its name.

    Returns:
        Path of the new file
    """
    source_file = Path(source_file)
    if not os.path.lexists(source_file):
        raise FileNotFoundError(f"File system element for parameter 'source_file' does not exist: '{source_file}'")
    if os.path.isdir(source_file):
        raise IsADirectoryError(f"Not a file: '{source_file}'")
    return copy_file(source_file, Path(target_directory) / source_file.name, option_set(options))


# Emptiness

def is_empty_file(file: PathLike) -> bool:
    """Check if ``file`` has a size of zero."""
    return os.path.getsize(file) == 0


def is_empty(path: PathLike) -> bool:
    """Check if a directory has no entries or a file has no bytes."""
    if os.path.isdir(path):
        return is_empty_directory(Path(path))
    return is_empty_file(path)


def make_deletable(path: PathLike) -> Path:
    """Clear the read-only state of ``path`` so it can be deleted.

    The parent's permissions are restored afterwards if the platform
    only offers POSIX permissions; use ``set_read_only`` to keep them.
    """
    path = Path(path)
    with preserved_permissions(parent_of(path)):
        set_read_only(path, False)
    return path


__all__ = [
    'accumulate',
    'clean_directory',
    'content_equals',
    'copy_directory',
    'copy_file',
    'copy_file_to_directory',
    'count_directory',
    'count_directory_exact',
    'delete',
    'delete_directory',
    'delete_file',
    'file_content_equals',
    'is_empty',
    'is_empty_directory',
    'is_empty_file',
    'set_read_only',
    'shape_equals',
    'size_of',
    'size_of_directory',
    'visit_file_tree',
    'walk',
]
