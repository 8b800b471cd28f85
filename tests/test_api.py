"""Tests for the high-level API and walk configuration."""

import os
import stat
import sys
import unittest
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pathtree
from pathtree import (
    CounterPrecision,
    WalkConfig,
    WalkConfigError,
    count_directory,
    count_directory_exact,
    is_empty,
    is_empty_directory,
    is_empty_file,
    make_deletable,
    size_of,
    size_of_directory,
    visit_file_tree,
)
from pathtree.core.counters import ArbitraryPrecisionCounter, NoopCounter, exact_path_counters
from pathtree.core.filters import suffix_filter
from pathtree.core.policies import CollectErrorsPolicy
from pathtree.core.visitor import SimplePathVisitor, VisitResult
from pathtree.testing import TEST_TREE_BYTES, create_scenario_tree, create_test_tree


class TestCountDirectory(unittest.TestCase):
    """Test count_directory with keywords and configs."""

    def setUp(self):
        import tempfile
        self.test_dir = tempfile.mkdtemp()
        self.test_path = Path(self.test_dir)
        create_test_tree(self.test_path)

    def tearDown(self):
        import shutil
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        counters = count_directory(self.test_path)
        self.assertEqual(counters.as_tuple(), (6, 3, TEST_TREE_BYTES))

    def test_keyword_options(self):
        counters = count_directory(self.test_path, max_depth=1, file_filter=suffix_filter(".txt"))
        self.assertEqual(counters.as_tuple()[:2], (1, 2))

    def test_config_object(self):
        counters = count_directory(self.test_path, config=WalkConfig.shallow())
        self.assertEqual(counters.files, 2)

    def test_keywords_override_config_without_changing_it(self):
        config = WalkConfig.shallow()
        counters = count_directory(self.test_path, config=config, max_depth=None)
        self.assertEqual(counters.files, 6)
        self.assertEqual(config.max_depth, 1)

    def test_exact_precision(self):
        counters = count_directory_exact(self.test_path)
        self.assertIsInstance(counters.byte_counter, ArbitraryPrecisionCounter)
        self.assertEqual(counters.bytes, TEST_TREE_BYTES)

    def test_no_precision(self):
        counters = count_directory(self.test_path, precision=CounterPrecision.NONE)
        self.assertIsInstance(counters.file_counter, NoopCounter)
        self.assertEqual(counters.as_tuple(), (0, 0, 0))

    def test_caller_counters_accumulate(self):
        counters = exact_path_counters()
        count_directory(self.test_path / "dir1", counters=counters)
        count_directory(self.test_path / "dir2", counters=counters)
        self.assertEqual(counters.as_tuple()[:2], (4, 1))

    def test_invalid_config(self):
        with self.assertRaises(WalkConfigError):
            count_directory(self.test_path, max_depth=-1)
        with self.assertRaises(ValueError):
            count_directory(self.test_path, file_filter="*.txt")

    def test_unknown_option(self):
        with self.assertRaises(WalkConfigError):
            count_directory(self.test_path, depth=3)

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError) as ctx:
            count_directory(self.test_path / "missing")
        self.assertEqual(ctx.exception.partial_counters.as_tuple(), (0, 0, 0))


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0,
                    reason="needs POSIX permissions and a non-root user")
def test_partial_counters_on_failure(tmp_path):
    root = create_scenario_tree(tmp_path / "a")
    locked = root / "y"
    locked.chmod(0)
    counters = exact_path_counters()
    try:
        with pytest.raises(PermissionError) as exc_info:
            count_directory(root, counters=counters)
        partial = exc_info.value.partial_counters
        assert partial is counters
        # x and its files were finished before y failed
        assert partial.as_tuple() == (2, 1, 8)

        policy = CollectErrorsPolicy()
        assert count_directory(root, policy=policy).as_tuple() == (2, 1, 8)
        assert policy.skipped_paths == [locked]
    finally:
        locked.chmod(0o755)


def test_size_of(tmp_path):
    root = create_scenario_tree(tmp_path / "a")
    assert size_of(root) == 8
    assert size_of(root / "x" / "2.txt") == 5
    assert size_of_directory(root) == 8
    assert size_of_directory(root, exact=True) == 8
    with pytest.raises(FileNotFoundError):
        size_of(tmp_path / "missing")
    with pytest.raises(FileNotFoundError):
        size_of_directory(tmp_path / "missing")


def test_emptiness(tmp_path):
    root = create_scenario_tree(tmp_path / "a")
    (root / "empty.txt").write_bytes(b"")

    assert is_empty(root / "y")
    assert not is_empty(root)
    assert is_empty(root / "empty.txt")
    assert not is_empty(root / "x" / "1.txt")
    assert is_empty_directory(root / "y")
    assert is_empty_file(root / "empty.txt")


def test_visit_file_tree_alias(tmp_path):
    create_scenario_tree(tmp_path)
    names = []
    visitor = SimplePathVisitor(on_file=lambda f, a, d: names.append(f.name) or VisitResult.CONTINUE)
    assert visit_file_tree(visitor, tmp_path) is visitor
    assert names == ["1.txt", "2.txt"]


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0,
                    reason="needs POSIX permissions and a non-root user")
def test_make_deletable_restores_parent(tmp_path):
    parent = tmp_path / "parent"
    parent.mkdir()
    file = parent / "f.txt"
    file.write_text("x")
    file.chmod(0o444)
    parent.chmod(0o555)
    try:
        make_deletable(file)
        assert stat.S_IMODE(file.stat().st_mode) & stat.S_IWUSR
        assert stat.S_IMODE(parent.stat().st_mode) == 0o555
    finally:
        parent.chmod(0o755)


def test_public_names():
    for name in pathtree.__all__:
        assert hasattr(pathtree, name), name
    assert pathtree.__version__


class TestWalkConfig(unittest.TestCase):
    """Test WalkConfig construction and validation."""

    def test_defaults_are_valid(self):
        self.assertEqual(WalkConfig().validate(), [])

    def test_constructors(self):
        self.assertEqual(WalkConfig.shallow(3).max_depth, 3)
        self.assertEqual(WalkConfig.exact().precision, CounterPrecision.EXACT)
        self.assertTrue(WalkConfig.following_links(max_depth=2).follow_links)

    def test_validation_errors(self):
        config = WalkConfig(max_depth=-1, file_filter=None, dir_filter=42, precision="exact", policy=object())
        errors = config.validate()
        self.assertEqual(len(errors), 5)
        self.assertIn("max_depth cannot be negative", errors)

    def test_boolean_depth_is_rejected(self):
        self.assertEqual(WalkConfig(max_depth=True).validate(), ["max_depth must be an integer or None"])

    def test_policy_must_handle(self):
        self.assertEqual(WalkConfig(policy=CollectErrorsPolicy()).validate(), [])


if __name__ == "__main__":
    unittest.main()
