"""Tests for shape and content comparison of trees and files."""

import io
import os
import sys
import tempfile
import shutil
import unittest
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pathtree.compare as compare_module
from pathtree import content_equals, copy_directory, file_content_equals, shape_equals
from pathtree.compare import RelativeSortedPaths, streams_equal
from pathtree.errors import StructuralMismatchError
from pathtree.testing import CountingComparator, build_tree, create_scenario_tree, create_test_tree


class TestScenarioComparison(unittest.TestCase):
    """Test a tree against its copy."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.test_path = Path(self.test_dir)
        self.a = create_scenario_tree(self.test_path / "a")
        self.b = self.test_path / "b"
        copy_directory(self.a, self.b)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_copy_is_equal(self):
        self.assertTrue(shape_equals(self.a, self.b))
        self.assertTrue(content_equals(self.a, self.b))

    def test_one_changed_byte(self):
        (self.b / "x" / "1.txt").write_bytes(b"abd")

        self.assertTrue(shape_equals(self.a, self.b))
        self.assertFalse(content_equals(self.a, self.b))

    def test_changed_size_skips_comparator(self):
        (self.b / "x" / "1.txt").write_bytes(b"abcd")
        comparator = CountingComparator()

        self.assertFalse(content_equals(self.a, self.b, comparator=comparator))
        self.assertEqual(comparator.calls, 0)

    def test_extra_file_skips_comparator(self):
        (self.b / "x" / "3.txt").write_bytes(b"")
        comparator = CountingComparator()

        self.assertFalse(content_equals(self.a, self.b, comparator=comparator))
        self.assertFalse(shape_equals(self.a, self.b))
        self.assertEqual(comparator.calls, 0)

    def test_comparator_called_per_file(self):
        comparator = CountingComparator()
        self.assertTrue(content_equals(self.a, self.b, comparator=comparator))
        self.assertEqual(comparator.calls, 2)

    def test_extra_directory(self):
        (self.b / "z").mkdir()
        self.assertFalse(shape_equals(self.a, self.b))
        self.assertFalse(content_equals(self.a, self.b))

    def test_renamed_directory(self):
        (self.b / "y").rename(self.b / "w")
        self.assertFalse(shape_equals(self.a, self.b))

    def test_renamed_file(self):
        (self.b / "x" / "2.txt").rename(self.b / "x" / "3.txt")
        self.assertFalse(shape_equals(self.a, self.b))

    def test_shape_ignores_content(self):
        (self.b / "x" / "2.txt").write_bytes(b"a much longer file")
        self.assertTrue(shape_equals(self.a, self.b))


def test_copy_round_trip_has_equal_content(tmp_path):
    source = create_test_tree(tmp_path / "src")
    copy_directory(source, tmp_path / "dst")
    assert content_equals(source, tmp_path / "dst")


@pytest.mark.parametrize("layout1,layout2", [
    ({"a.txt": "a"}, {"a.txt": "a"}),
    ({"a.txt": "a"}, {"b.txt": "a"}),
    ({"d": {}}, {"a.txt": "a"}),
    ({"d": {"a.txt": "a"}}, {"d": {}, "a.txt": "a"}),
    ({}, {"d": {}}),
])
def test_shape_equals_is_symmetric(tmp_path, layout1, layout2):
    tree1 = build_tree(tmp_path / "one", layout1)
    tree2 = build_tree(tmp_path / "two", layout2)
    assert shape_equals(tree1, tree2) == shape_equals(tree2, tree1)


def test_missing_and_none_roots(tmp_path):
    tree = create_scenario_tree(tmp_path / "a")
    assert shape_equals(None, None)
    assert not shape_equals(tree, None)
    assert not shape_equals(None, tree)
    assert shape_equals(tmp_path / "missing1", tmp_path / "missing2")
    assert not shape_equals(tree, tmp_path / "missing")
    assert content_equals(None, None)
    assert not content_equals(tree, None)
    assert content_equals(tmp_path / "missing1", tmp_path / "missing2")


def test_shape_with_max_depth(tmp_path):
    tree1 = build_tree(tmp_path / "one", {"d": {"a.txt": "a"}})
    tree2 = build_tree(tmp_path / "two", {"d": {"b.txt": "b"}})
    assert not shape_equals(tree1, tree2)
    assert shape_equals(tree1, tree2, max_depth=1)


def test_relative_sorted_paths_keeps_file_lists(tmp_path):
    tree1 = create_scenario_tree(tmp_path / "a")
    tree2 = create_scenario_tree(tmp_path / "b")
    paths = RelativeSortedPaths(tree1, tree2)
    assert paths.equals
    assert paths.relative_file_list1 == [Path("x/1.txt"), Path("x/2.txt")]
    assert paths.relative_file_list1 == paths.relative_file_list2


def test_structural_mismatch_during_content_comparison(tmp_path, monkeypatch):
    tree1 = create_scenario_tree(tmp_path / "a")
    tree2 = create_scenario_tree(tmp_path / "b")

    class Drifting(RelativeSortedPaths):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            # As if the second tree changed after its shape was read
            self.relative_file_list2 = [Path("x/1.txt"), Path("x/9.txt")]

    monkeypatch.setattr(compare_module, "RelativeSortedPaths", Drifting)

    with pytest.raises(StructuralMismatchError) as exc_info:
        content_equals(tree1, tree2)
    assert exc_info.value.relative_path == Path("x/2.txt")


class TestFileContentEquals(unittest.TestCase):
    """Test single-file comparison and its shortcuts."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.test_path = Path(self.test_dir)
        self.file1 = self.test_path / "one.bin"
        self.file2 = self.test_path / "two.bin"
        self.file1.write_bytes(b"same bytes")
        self.file2.write_bytes(b"same bytes")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_equal_files(self):
        self.assertTrue(file_content_equals(self.file1, self.file2))

    def test_different_files_of_equal_size(self):
        self.file2.write_bytes(b"same bytez")
        self.assertFalse(file_content_equals(self.file1, self.file2))

    def test_none_operands(self):
        self.assertTrue(file_content_equals(None, None))
        self.assertFalse(file_content_equals(self.file1, None))

    def test_missing_files(self):
        missing = self.test_path / "missing"
        self.assertTrue(file_content_equals(missing, self.test_path / "missing2"))
        self.assertFalse(file_content_equals(self.file1, missing))

    def test_same_path_skips_comparator(self):
        comparator = CountingComparator()
        self.assertTrue(file_content_equals(self.file1, self.test_path / "." / "one.bin", comparator=comparator))
        self.assertEqual(comparator.calls, 0)

    def test_size_mismatch_skips_comparator(self):
        self.file2.write_bytes(b"longer bytes")
        comparator = CountingComparator()
        self.assertFalse(file_content_equals(self.file1, self.file2, comparator=comparator))
        self.assertEqual(comparator.calls, 0)

    def test_directories_are_refused(self):
        with self.assertRaises(IsADirectoryError):
            file_content_equals(self.file1, self.test_path)
        with self.assertRaises(IsADirectoryError):
            file_content_equals(self.test_path, self.test_path)

    def test_custom_comparator(self):
        self.file2.write_bytes(b"SAME BYTES")
        self.assertTrue(file_content_equals(
            self.file1, self.file2,
            comparator=lambda s1, s2: s1.read().lower() == s2.read().lower()))


def _linked_tree(base, link_target="d"):
    root = build_tree(base, {"d": {"f.txt": "data"}, "e": {"f.txt": "data"}})
    try:
        os.symlink(link_target, root / "dl", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("cannot create symlinks here")
    return root


def test_trees_with_directory_links_compare_links(tmp_path):
    tree1 = _linked_tree(tmp_path / "a")
    tree2 = _linked_tree(tmp_path / "b")
    comparator = CountingComparator()

    assert shape_equals(tree1, tree2)
    assert content_equals(tree1, tree2, comparator=comparator)
    # Only the two regular files are read
    assert comparator.calls == 2
    assert file_content_equals(tree1 / "dl", tree2 / "dl", follow_links=False)


def test_directory_links_with_different_targets(tmp_path):
    tree1 = _linked_tree(tmp_path / "a")
    tree2 = _linked_tree(tmp_path / "b", link_target="e")

    assert shape_equals(tree1, tree2)
    assert not content_equals(tree1, tree2)
    assert not file_content_equals(tree1 / "dl", tree2 / "dl", follow_links=False)


def test_link_never_equals_regular_file(tmp_path):
    tree1 = _linked_tree(tmp_path / "a")
    (tmp_path / "plain").write_text("d")

    assert not file_content_equals(tree1 / "dl", tmp_path / "plain", follow_links=False)


@pytest.mark.parametrize("data1,data2,chunk_size,expected", [
    (b"", b"", 4, True),
    (b"abcdefgh", b"abcdefgh", 3, True),
    (b"abcdefgh", b"abcdefgX", 3, False),
    (b"abc", b"abcd", 2, False),
])
def test_streams_equal(data1, data2, chunk_size, expected):
    assert streams_equal(io.BytesIO(data1), io.BytesIO(data2), chunk_size) is expected
