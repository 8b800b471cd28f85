"""Testing utilities for pathtree consumers."""

from .fixtures import (
    TEST_TREE_BYTES,
    TEST_TREE_LAYOUT,
    CountingComparator,
    build_tree,
    create_scenario_tree,
    create_test_tree,
    layout_counts,
    list_tree,
)

__all__ = [
    'CountingComparator',
    'TEST_TREE_BYTES',
    'TEST_TREE_LAYOUT',
    'build_tree',
    'create_scenario_tree',
    'create_test_tree',
    'layout_counts',
    'list_tree',
]
