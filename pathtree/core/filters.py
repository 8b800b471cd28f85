"""Path filters for pathtree.

A PathFilter is a pure function ``(path, attributes) -> VisitResult``.
``attributes`` is the entry's ``os.stat_result`` when the walker has
one, or None when it was withheld; filters that need attributes read
them on demand.

Filters answer CONTINUE to accept an entry. For directories any other
answer prunes the subtree; for files any other answer means "don't
count".
"""

import fnmatch
import os
import re
import stat
from pathlib import Path
from typing import Callable, Iterable, Optional, Pattern, Union

from .visitor import Attributes, VisitResult


PathFilter = Callable[[Path, Attributes], VisitResult]


def _lstat(path: Path, attributes: Attributes) -> Optional[os.stat_result]:
    """Return attributes, reading them without following links if missing."""
    if attributes is not None:
        return attributes
    try:
        return os.lstat(path)
    except FileNotFoundError:
        return None


def _result(accepted: bool,
            on_accept: VisitResult = VisitResult.CONTINUE,
            on_reject: VisitResult = VisitResult.TERMINATE) -> VisitResult:
    return on_accept if accepted else on_reject


def accept_all(path: Path, attributes: Attributes = None) -> VisitResult:
    """Accept every entry. The default directory filter."""
    return VisitResult.CONTINUE


def reject_all(path: Path, attributes: Attributes = None) -> VisitResult:
    """Reject every entry."""
    return VisitResult.TERMINATE


def reject_symbolic_links(path: Path, attributes: Attributes = None) -> VisitResult:
    """Reject symbolic links, accept everything else. The default file filter.

    Counting a link and its target would count the same bytes twice.
    Checks the path itself since walker attributes may have followed the
    link.
    """
    return _result(not os.path.islink(path))


def from_predicate(predicate: Callable[[Path], bool],
                   on_accept: VisitResult = VisitResult.CONTINUE,
                   on_reject: VisitResult = VisitResult.TERMINATE) -> PathFilter:
    """Turn a boolean predicate over paths into a PathFilter.

    Args:
        predicate: Returns True for accepted paths
        on_accept: Result for accepted paths
        on_reject: Result for rejected paths

    Returns:
        PathFilter wrapping the predicate
    """
    def path_filter(path: Path, attributes: Attributes = None) -> VisitResult:
        return _result(bool(predicate(path)), on_accept, on_reject)
    return path_filter


def name_filter(*names: str, case_sensitive: bool = True) -> PathFilter:
    """Accept entries whose final name component is one of ``names``."""
    if case_sensitive:
        wanted = frozenset(names)
        return from_predicate(lambda p: p.name in wanted)
    folded = frozenset(n.casefold() for n in names)
    return from_predicate(lambda p: p.name.casefold() in folded)


def suffix_filter(*suffixes: str, case_sensitive: bool = True) -> PathFilter:
    """Accept entries whose name ends with one of ``suffixes`` (e.g. ``.txt``)."""
    if case_sensitive:
        wanted = tuple(suffixes)
        return from_predicate(lambda p: p.name.endswith(wanted))
    folded = tuple(s.casefold() for s in suffixes)
    return from_predicate(lambda p: p.name.casefold().endswith(folded))


def prefix_filter(*prefixes: str) -> PathFilter:
    """Accept entries whose name starts with one of ``prefixes``."""
    wanted = tuple(prefixes)
    return from_predicate(lambda p: p.name.startswith(wanted))


def glob_filter(*patterns: str) -> PathFilter:
    """Accept entries whose name matches one of the shell-style ``patterns``."""
    return from_predicate(
        lambda p: any(fnmatch.fnmatchcase(p.name, pattern) for pattern in patterns)
    )


def regex_filter(pattern: Union[str, Pattern]) -> PathFilter:
    """Accept entries whose whole name matches ``pattern``."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return from_predicate(lambda p: compiled.fullmatch(p.name) is not None)


def hidden_filter(path: Path, attributes: Attributes = None) -> VisitResult:
    """Accept hidden entries (dot-names)."""
    return _result(path.name.startswith('.'))


def regular_file_filter(path: Path, attributes: Attributes = None) -> VisitResult:
    """Accept regular files (links are not followed)."""
    st = _lstat(path, attributes)
    return _result(st is not None and stat.S_ISREG(st.st_mode))


def directory_filter(path: Path, attributes: Attributes = None) -> VisitResult:
    """Accept directories (links are not followed)."""
    st = _lstat(path, attributes)
    return _result(st is not None and stat.S_ISDIR(st.st_mode))


def empty_filter(path: Path, attributes: Attributes = None) -> VisitResult:
    """Accept empty files and empty directories."""
    st = _lstat(path, attributes)
    if st is None:
        return VisitResult.TERMINATE
    if stat.S_ISDIR(st.st_mode):
        with os.scandir(path) as entries:
            return _result(next(entries, None) is None)
    return _result(st.st_size == 0)


def size_filter(threshold: int, accept_larger: bool = True) -> PathFilter:
    """Accept files by size.

    Args:
        threshold: Size in bytes
        accept_larger: True accepts sizes >= threshold, False accepts sizes < threshold

    Returns:
        PathFilter comparing entry sizes against ``threshold``
    """
    if threshold < 0:
        raise ValueError("threshold cannot be negative")

    def path_filter(path: Path, attributes: Attributes = None) -> VisitResult:
        st = _lstat(path, attributes)
        if st is None:
            return VisitResult.TERMINATE
        return _result((st.st_size >= threshold) == accept_larger)
    return path_filter


def and_filter(*filters: PathFilter) -> PathFilter:
    """Accept entries accepted by every filter (short-circuits)."""
    def path_filter(path: Path, attributes: Attributes = None) -> VisitResult:
        for f in filters:
            result = f(path, attributes)
            if result is not VisitResult.CONTINUE:
                return result
        return VisitResult.CONTINUE
    return path_filter


def or_filter(*filters: PathFilter) -> PathFilter:
    """Accept entries accepted by any filter (short-circuits)."""
    def path_filter(path: Path, attributes: Attributes = None) -> VisitResult:
        last = VisitResult.TERMINATE
        for f in filters:
            last = f(path, attributes)
            if last is VisitResult.CONTINUE:
                return last
        return last
    return path_filter


def not_filter(inner: PathFilter) -> PathFilter:
    """Invert a filter: CONTINUE becomes TERMINATE and anything else CONTINUE."""
    def path_filter(path: Path, attributes: Attributes = None) -> VisitResult:
        if inner(path, attributes) is VisitResult.CONTINUE:
            return VisitResult.TERMINATE
        return VisitResult.CONTINUE
    return path_filter


def accepts(path_filter: PathFilter, path: Path, attributes: Attributes = None) -> bool:
    """True when ``path_filter`` answers CONTINUE for ``path``."""
    return path_filter(path, attributes) is VisitResult.CONTINUE


def filter_paths(path_filter: PathFilter, paths: Iterable[Union[str, Path]]) -> list:
    """Return the paths accepted by ``path_filter``, in order.

    Attributes are not read; filters that need them read them on demand.
    """
    return [Path(p) for p in paths if accepts(path_filter, Path(p))]
