"""pathtree - Recursive filesystem tree operations.

pathtree walks a directory tree depth-first and counts, deletes,
cleans, copies or records what it finds, and compares two trees by
shape and then by content.

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from pathtree import count_directory, delete_directory, content_equals

    counters = count_directory("build")
    print(counters)    # 12 files, 3 directories, 40,960 bytes
━━━━━━━━━━━━━━━━━━━━━━━━━━

Every operation is one synchronous walk. The lower-level pieces
(walker, visitors, strategies, filters) live in ``pathtree.core``.
"""

__version__ = "0.1.0"

from .api import (
    clean_directory,
    copy_directory,
    copy_file_to_directory,
    count_directory,
    count_directory_exact,
    delete,
    delete_directory,
    delete_file,
    is_empty,
    is_empty_directory,
    is_empty_file,
    make_deletable,
    size_of,
    size_of_directory,
    visit_file_tree,
)
from .compare import accumulate, content_equals, file_content_equals, shape_equals
from .config import CopyOption, CounterPrecision, DeleteOption, WalkConfig
from .core import (
    CountingVisitor,
    PathCounters,
    PathVisitor,
    SimplePathVisitor,
    VisitResult,
    walk,
    walk_file_tree,
)
from .core.attributes import probe_view, set_read_only
from .errors import (
    FileSystemLoopError,
    PathOutsideFenceError,
    PathTreeError,
    StructuralMismatchError,
    UnsupportedAttributeViewError,
    WalkConfigError,
)
from .fence import PathFence

__all__ = [
    "__version__",
    # Operations
    "count_directory",
    "count_directory_exact",
    "size_of",
    "size_of_directory",
    "delete",
    "delete_directory",
    "delete_file",
    "clean_directory",
    "copy_directory",
    "copy_file_to_directory",
    "is_empty",
    "is_empty_directory",
    "is_empty_file",
    "make_deletable",
    "set_read_only",
    "probe_view",
    "visit_file_tree",
    "walk_file_tree",
    "walk",
    # Comparison
    "shape_equals",
    "content_equals",
    "file_content_equals",
    "accumulate",
    # Types
    "WalkConfig",
    "CounterPrecision",
    "DeleteOption",
    "CopyOption",
    "PathCounters",
    "PathVisitor",
    "SimplePathVisitor",
    "CountingVisitor",
    "VisitResult",
    "PathFence",
    # Errors
    "PathTreeError",
    "WalkConfigError",
    "UnsupportedAttributeViewError",
    "StructuralMismatchError",
    "FileSystemLoopError",
    "PathOutsideFenceError",
]
