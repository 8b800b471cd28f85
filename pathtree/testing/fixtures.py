"""Test fixtures for pathtree consumers.

Builders for small directory trees with known counts, and an
instrumented byte comparator for checking when content comparison
actually reads files.
"""

from pathlib import Path
from typing import BinaryIO, Dict, List, Mapping, Optional, Tuple, Union

from ..compare import StreamComparator, streams_equal

# A tree layout: names map to file contents (str/bytes) or nested layouts.
TreeLayout = Mapping[str, Union[str, bytes, 'TreeLayout']]


def build_tree(base_dir: Union[str, Path], layout: TreeLayout) -> Path:
    """Create files and directories under ``base_dir`` from a nested mapping.

    Args:
        base_dir: Existing or new directory to build into
        layout: ``{name: contents}`` for files, ``{name: {...}}`` for directories

    Returns:
        ``base_dir`` as a Path

    Example:
        >>> build_tree(tmp, {"x": {"1.txt": "abc"}, "y": {}})
    """
    base_dir = Path(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)
    for name, contents in layout.items():
        path = base_dir / name
        if isinstance(contents, bytes):
            path.write_bytes(contents)
        elif isinstance(contents, str):
            path.write_text(contents)
        else:
            build_tree(path, contents)
    return base_dir


def create_scenario_tree(base_dir: Union[str, Path]) -> Path:
    """Create the two-directory reference tree.

    Structure::

        base_dir/
        ├── x/
        │   ├── 1.txt   (3 bytes)
        │   └── 2.txt   (5 bytes)
        └── y/

    Counts as 2 files, 2 directories, 8 bytes.
    """
    return build_tree(base_dir, {
        "x": {"1.txt": b"abc", "2.txt": b"hello"},
        "y": {},
    })


def create_test_tree(base_dir: Union[str, Path]) -> Path:
    """Create a mixed test directory structure.

    Structure::

        base_dir/
        ├── file1.txt
        ├── file2.py
        ├── dir1/
        │   ├── file3.txt
        │   ├── file4.py
        │   └── subdir1/
        │       └── file5.txt
        └── dir2/
            └── file6.txt

    Counts as 6 files, 3 directories and ``TEST_TREE_BYTES`` bytes.
    """
    return build_tree(base_dir, TEST_TREE_LAYOUT)


TEST_TREE_LAYOUT: Dict[str, object] = {
    "file1.txt": "content1",
    "file2.py": "# python file",
    "dir1": {
        "file3.txt": "content3",
        "file4.py": "# another python file",
        "subdir1": {"file5.txt": "content5"},
    },
    "dir2": {"file6.txt": "content6"},
}


def _layout_totals(layout: Mapping) -> Tuple[int, int, int]:
    files = directories = size = 0
    for contents in layout.values():
        if isinstance(contents, (str, bytes)):
            files += 1
            size += len(contents.encode() if isinstance(contents, str) else contents)
        else:
            directories += 1
            sub_files, sub_dirs, sub_size = _layout_totals(contents)
            files += sub_files
            directories += sub_dirs
            size += sub_size
    return files, directories, size


def layout_counts(layout: Mapping) -> Tuple[int, int, int]:
    """Return the ``(files, directories, bytes)`` a layout is expected to count.

    The directory the layout is built into is not counted.
    """
    return _layout_totals(layout)


TEST_TREE_BYTES = layout_counts(TEST_TREE_LAYOUT)[2]


def list_tree(base_dir: Union[str, Path]) -> List[str]:
    """Return every path below ``base_dir`` as sorted POSIX-style relative strings."""
    base_dir = Path(base_dir)
    return sorted(path.relative_to(base_dir).as_posix() for path in base_dir.rglob("*"))


class CountingComparator:
    """Byte-stream comparator that records how often it is called.

    Example:
        comparator = CountingComparator()
        content_equals(a, b, comparator=comparator)
        assert comparator.calls == 0
    """

    def __init__(self, comparator: Optional[StreamComparator] = None):
        self._comparator = comparator if comparator is not None else streams_equal
        self.calls = 0
        self.compared: List[Tuple[str, str]] = []

    def __call__(self, stream1: BinaryIO, stream2: BinaryIO) -> bool:
        self.calls += 1
        self.compared.append((getattr(stream1, 'name', ''), getattr(stream2, 'name', '')))
        return self._comparator(stream1, stream2)

    def reset(self) -> None:
        self.calls = 0
        self.compared.clear()
