"""Tree and file comparison for pathtree.

Two trees are compared in two phases:

1. **Shape** (``shape_equals``): walk both trees, then compare the
   numbers of files and directories and the sorted lists of their paths
   relative to each root. File contents are not read.
2. **Content** (``content_equals``): only when the shapes match, compare
   each pair of corresponding files byte for byte.

The shape phase is cheap compared to reading every file, so trees that
differ structurally are rejected before any content is opened.
"""

import logging
import os
from bisect import bisect_left
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Union

from .core.accumulating import AccumulateStrategy, accumulating_visitor
from .core.walker import walk_file_tree
from .errors import StructuralMismatchError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
StreamComparator = Callable[[BinaryIO, BinaryIO], bool]

DEFAULT_CHUNK_SIZE = 64 * 1024


def streams_equal(stream1: BinaryIO, stream2: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bool:
    """Compare two binary streams chunk by chunk until they differ or end."""
    while True:
        chunk1 = stream1.read(chunk_size)
        chunk2 = stream2.read(chunk_size)
        if chunk1 != chunk2:
            return False
        if not chunk1:
            return True


def _exists(path: Path, follow_links: bool) -> bool:
    return os.path.exists(path) if follow_links else os.path.lexists(path)


def file_content_equals(path1: Optional[PathLike],
                        path2: Optional[PathLike],
                        follow_links: bool = True,
                        comparator: Optional[StreamComparator] = None) -> bool:
    """Compare the contents of two files.

    Cheap checks come first: both None or both absent means equal, only
    one present means different, different sizes mean different, and the
    same path means equal. Only then are the bytes streamed through
    ``comparator``.

    When links are not followed, a symbolic link only equals another
    link with the same target text; its target is never opened.

    Args:
        path1: First file
        path2: Second file
        follow_links: Compare link targets rather than links
        comparator: Byte-stream comparator (default: ``streams_equal``)

    Returns:
        True if the files have the same content

    Raises:
        IsADirectoryError: If either path is a directory
    """
    if path1 is None and path2 is None:
        return True
    if path1 is None or path2 is None:
        return False

    npath1 = Path(os.path.normpath(path1))
    npath2 = Path(os.path.normpath(path2))
    exists1 = _exists(npath1, follow_links)
    if exists1 != _exists(npath2, follow_links):
        return False
    if not exists1:
        # Two missing files are considered equal
        return True

    if not follow_links:
        link1, link2 = os.path.islink(npath1), os.path.islink(npath2)
        if link1 or link2:
            return link1 and link2 and os.readlink(npath1) == os.readlink(npath2)

    stat1 = os.stat(npath1) if follow_links else os.lstat(npath1)
    stat2 = os.stat(npath2) if follow_links else os.lstat(npath2)
    for npath in (npath1, npath2):
        if os.path.isdir(npath):
            raise IsADirectoryError(f"Can't compare directories, only files: {npath}")
    if stat1.st_size != stat2.st_size:
        return False
    if npath1 == npath2:
        return True

    compare = comparator if comparator is not None else streams_equal
    with open(npath1, 'rb') as stream1, open(npath2, 'rb') as stream2:
        return compare(stream1, stream2)


def accumulate(directory: PathLike,
               max_depth: Optional[int] = None,
               follow_links: bool = False) -> AccumulateStrategy:
    """Walk ``directory`` and return the recorded file and directory paths."""
    visitor = walk_file_tree(accumulating_visitor(), directory,
                             follow_links=follow_links, max_depth=max_depth)
    return visitor.strategy


class RelativeSortedPaths:
    """Walks two trees and decides whether they have the same shape.

    Keeps the sorted relative file lists so a content comparison can
    reuse them.
    """

    def __init__(self,
                 dir1: Optional[PathLike],
                 dir2: Optional[PathLike],
                 max_depth: Optional[int] = None,
                 follow_links: bool = False):
        """Walk both trees and compare their shapes.

        Args:
            dir1: First tree root
            dir2: Second tree root
            max_depth: Deepest level to walk (None = unlimited)
            follow_links: Walk through symbolic links
        """
        self.relative_file_list1: List[Path] = []
        self.relative_file_list2: List[Path] = []
        self.equals = self._compare(dir1, dir2, max_depth, follow_links)

    def _compare(self, dir1, dir2, max_depth, follow_links) -> bool:
        if dir1 is None and dir2 is None:
            return True
        if dir1 is None or dir2 is None:
            return False

        missing1 = not _exists(Path(dir1), follow_links)
        missing2 = not _exists(Path(dir2), follow_links)
        if missing1 or missing2:
            return missing1 and missing2

        tree1 = accumulate(dir1, max_depth, follow_links)
        tree2 = accumulate(dir2, max_depth, follow_links)
        if (len(tree1.dir_list) != len(tree2.dir_list)
                or len(tree1.file_list) != len(tree2.file_list)):
            logger.debug("Trees differ in size: %s vs %s", dir1, dir2)
            return False

        if tree1.relativize_directories(dir1) != tree2.relativize_directories(dir2):
            logger.debug("Trees differ in directory layout: %s vs %s", dir1, dir2)
            return False

        self.relative_file_list1 = tree1.relativize_files(dir1)
        self.relative_file_list2 = tree2.relativize_files(dir2)
        return self.relative_file_list1 == self.relative_file_list2


def shape_equals(path1: Optional[PathLike],
                 path2: Optional[PathLike],
                 max_depth: Optional[int] = None,
                 follow_links: bool = False) -> bool:
    """Check whether two trees contain the same relative file and directory paths.

    File contents are ignored. Two missing roots are equal.

    Args:
        path1: First tree root
        path2: Second tree root
        max_depth: Deepest level to walk (None = unlimited)
        follow_links: Walk through symbolic links

    Returns:
        True if both trees have the same shape
    """
    return RelativeSortedPaths(path1, path2, max_depth, follow_links).equals


def content_equals(path1: Optional[PathLike],
                   path2: Optional[PathLike],
                   follow_links: bool = False,
                   comparator: Optional[StreamComparator] = None) -> bool:
    """Check whether two trees have the same shape and identical file contents.

    The shape is compared first; file contents are read only when the
    shapes match.

    Args:
        path1: First tree root
        path2: Second tree root
        follow_links: Walk through symbolic links
        comparator: Byte-stream comparator for file contents

    Returns:
        True if both trees have the same shape and the same file contents

    Raises:
        StructuralMismatchError: If the trees changed while being compared
    """
    if path1 is None and path2 is None:
        return True
    if path1 is None or path2 is None:
        return False

    paths = RelativeSortedPaths(path1, path2, follow_links=follow_links)
    if not paths.equals:
        return False

    root1 = Path(path1)
    root2 = Path(path2)
    files2 = paths.relative_file_list2
    for relative in paths.relative_file_list1:
        index = bisect_left(files2, relative)
        if index == len(files2) or files2[index] != relative:
            raise StructuralMismatchError(relative)
        if not file_content_equals(root1 / relative, root2 / relative,
                                   follow_links=follow_links, comparator=comparator):
            logger.debug("Content differs: %s", relative)
            return False
    return True
