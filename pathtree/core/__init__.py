"""Core traversal machinery for pathtree.

The walker drives a visitor; CountingVisitor is the one concrete
visitor, specialized by the delete, copy and accumulate strategies.
"""

from .counters import (
    ArbitraryPrecisionCounter,
    Counter,
    FixedWidthCounter,
    NoopCounter,
    PathCounters,
    exact_path_counters,
    fixed_path_counters,
    noop_path_counters,
    path_counters,
)
from .visitor import PathVisitor, SimplePathVisitor, VisitResult
from .filters import PathFilter, accept_all, reject_symbolic_links
from .policies import CollectErrorsPolicy, FailFastPolicy, FailurePolicy, IgnoreMissingPolicy
from .walker import iter_tree, walk, walk_file_tree
from .counting import CountingVisitor, VisitStrategy
from .deleting import DeleteStrategy, cleaning_visitor, deleting_visitor
from .copying import CopyStrategy, copying_visitor
from .accumulating import AccumulateStrategy, accumulating_visitor

__all__ = [
    # Counters
    'Counter',
    'FixedWidthCounter',
    'ArbitraryPrecisionCounter',
    'NoopCounter',
    'PathCounters',
    'fixed_path_counters',
    'exact_path_counters',
    'noop_path_counters',
    'path_counters',
    # Visitors
    'PathVisitor',
    'SimplePathVisitor',
    'VisitResult',
    'CountingVisitor',
    'VisitStrategy',
    # Filters
    'PathFilter',
    'accept_all',
    'reject_symbolic_links',
    # Policies
    'FailurePolicy',
    'FailFastPolicy',
    'IgnoreMissingPolicy',
    'CollectErrorsPolicy',
    # Walking
    'walk_file_tree',
    'iter_tree',
    'walk',
    # Strategies
    'DeleteStrategy',
    'deleting_visitor',
    'cleaning_visitor',
    'CopyStrategy',
    'copying_visitor',
    'AccumulateStrategy',
    'accumulating_visitor',
]
