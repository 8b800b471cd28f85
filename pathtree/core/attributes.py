"""File attribute views for pathtree.

Read-only handling differs by platform: Windows exposes a DOS read-only
attribute, POSIX systems expose permission bits. Instead of branching on
the OS at every call site, ``probe_view()`` selects the available view
once at runtime and returns it, or None when neither is available.
Callers must treat a missing view as "optionally absent", not as an
error; only the ``require_*`` helpers raise.
"""

import contextlib
import os
import stat
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional, Union

from ..errors import UnsupportedAttributeViewError


# Owner permissions needed on a directory to remove entries from it.
DELETE_CHILD_BITS = stat.S_IWUSR | stat.S_IXUSR


def _chmod(path: Path, mode: int, follow_links: bool) -> None:
    """chmod that leaves symbolic links alone when links are not followed."""
    if not follow_links and os.path.islink(path):
        if os.chmod in os.supports_follow_symlinks:
            os.chmod(path, mode, follow_symlinks=False)
        return
    os.chmod(path, mode)


def _stat(path: Path, follow_links: bool) -> os.stat_result:
    return os.stat(path) if follow_links else os.lstat(path)


class AttributeView(ABC):
    """Platform view for reading and changing an entry's writability."""

    name = "abstract"

    @abstractmethod
    def is_read_only(self, path: Path, follow_links: bool = False) -> bool:
        """Check if ``path`` is read-only for its owner."""
        pass

    @abstractmethod
    def set_read_only(self, path: Path, read_only: bool, follow_links: bool = False) -> None:
        """Make ``path`` read-only, or writable again."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class DosAttributeView(AttributeView):
    """DOS read-only attribute (Windows).

    On Windows ``os.chmod`` toggles exactly this attribute.
    """

    name = "dos"

    def is_read_only(self, path: Path, follow_links: bool = False) -> bool:
        st = _stat(path, follow_links)
        attributes = getattr(st, 'st_file_attributes', 0)
        return bool(attributes & stat.FILE_ATTRIBUTE_READONLY)

    def set_read_only(self, path: Path, read_only: bool, follow_links: bool = False) -> None:
        _chmod(path, stat.S_IREAD if read_only else stat.S_IREAD | stat.S_IWRITE, follow_links)


class PosixAttributeView(AttributeView):
    """POSIX owner permission bits."""

    name = "posix"

    def permissions(self, path: Path, follow_links: bool = False) -> int:
        """Return the permission bits of ``path``."""
        return stat.S_IMODE(_stat(path, follow_links).st_mode)

    def set_permissions(self, path: Path, mode: int, follow_links: bool = False) -> None:
        """Set the permission bits of ``path``."""
        _chmod(path, stat.S_IMODE(mode), follow_links)

    def update_permissions(self, path: Path, bits: int, add: bool, follow_links: bool = False) -> bool:
        """Add or remove permission ``bits`` on ``path``.

        Returns:
            True if the permissions changed
        """
        current = self.permissions(path, follow_links)
        updated = current | bits if add else current & ~bits
        if updated == current:
            return False
        self.set_permissions(path, updated, follow_links)
        return True

    def set_delete_permissions(self, parent: Optional[Path], enable: bool, follow_links: bool = False) -> bool:
        """Allow or forbid removing entries from ``parent``.

        POSIX requires write and execute permission on the *parent*
        directory to unlink a child.

        Returns:
            True if ``parent`` was given and its permissions were updated
        """
        if parent is None:
            return False
        self.update_permissions(parent, DELETE_CHILD_BITS, enable, follow_links)
        return True

    def is_read_only(self, path: Path, follow_links: bool = False) -> bool:
        return not self.permissions(path, follow_links) & stat.S_IWUSR

    def set_read_only(self, path: Path, read_only: bool, follow_links: bool = False) -> None:
        if read_only:
            bits = self.permissions(path, follow_links) | stat.S_IRUSR
            self.set_permissions(path, bits & ~stat.S_IWUSR, follow_links)
            return
        bits = stat.S_IRUSR | stat.S_IWUSR
        if os.path.isdir(path) and (follow_links or not os.path.islink(path)):
            bits |= stat.S_IXUSR
        self.update_permissions(path, bits, True, follow_links)


@lru_cache(maxsize=None)
def probe_view() -> Optional[AttributeView]:
    """Select the attribute view available on this platform, once.

    Returns:
        DosAttributeView on Windows, PosixAttributeView on POSIX, else None
    """
    if os.name == 'nt':
        return DosAttributeView()
    if os.name == 'posix':
        return PosixAttributeView()
    return None


def dos_view() -> Optional[DosAttributeView]:
    """Return the DOS view if this platform has one."""
    view = probe_view()
    return view if isinstance(view, DosAttributeView) else None


def posix_view() -> Optional[PosixAttributeView]:
    """Return the POSIX view if this platform has one."""
    view = probe_view()
    return view if isinstance(view, PosixAttributeView) else None


def require_view(path: Union[str, Path]) -> AttributeView:
    """Return the platform view, or raise if there is none."""
    view = probe_view()
    if view is None:
        raise UnsupportedAttributeViewError(path, "DOS or POSIX")
    return view


def require_posix_view(path: Union[str, Path]) -> PosixAttributeView:
    """Return the POSIX view, or raise if this platform has none."""
    view = posix_view()
    if view is None:
        raise UnsupportedAttributeViewError(path, "POSIX")
    return view


def parent_of(path: Path) -> Optional[Path]:
    """Return the parent directory of ``path``, or None at a filesystem root."""
    parent = path.parent
    if parent == path:
        return None
    return parent


def set_read_only(path: Union[str, Path], read_only: bool, follow_links: bool = False) -> Path:
    """Set or clear the read-only state of ``path``.

    With a DOS view only the attribute is toggled. With a POSIX view,
    clearing read-only adds owner read/write (and execute for
    directories) to ``path`` and owner write+execute to its parent, so
    the entry can then be deleted.

    Args:
        path: Entry to update
        read_only: True to make read-only, False to make writable/deletable
        follow_links: Update a link's target instead of the link

    Returns:
        ``path`` as a Path

    Raises:
        UnsupportedAttributeViewError: If no attribute view is available
    """
    path = Path(path)
    view = require_view(path)
    if isinstance(view, PosixAttributeView) and not read_only:
        # Parent first, we may not be able to touch the entry otherwise.
        view.set_delete_permissions(parent_of(path), True)
    view.set_read_only(path, read_only, follow_links)
    return path


@contextlib.contextmanager
def preserved_permissions(path: Optional[Path], enabled: bool = True) -> Iterator[Optional[int]]:
    """Restore the POSIX permissions of ``path`` when the block exits.

    Does nothing when disabled, when ``path`` is None, or when the
    platform has no POSIX view. Permissions are restored only if ``path``
    still exists.

    Yields:
        The saved permission bits, or None when nothing was saved
    """
    view = posix_view() if enabled else None
    saved = None
    if view is not None and path is not None and os.path.lexists(path):
        saved = view.permissions(path)
    try:
        yield saved
    finally:
        if saved is not None and os.path.lexists(path):
            view.set_permissions(path, saved)
