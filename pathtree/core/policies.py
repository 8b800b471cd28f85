"""
Failure handling policies for pathtree.

When the walker cannot read an entry (it vanished, permission was
denied, a link loop was found) the visitor's ``visit_file_failed``
callback decides what happens. The counting visitors delegate that
decision to one of the policies below, so the same walk can fail fast,
tolerate missing entries, or collect errors for later inspection.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Tuple, Type

from .visitor import VisitResult

logger = logging.getLogger(__name__)


class FailurePolicy(ABC):
    """
    Base class for failure handling policies.

    Subclasses implement different strategies for errors raised while
    visiting a path during a walk.
    """

    @abstractmethod
    def handle(self, path: Path, error: OSError) -> VisitResult:
        """
        Handle an error raised while visiting ``path``.

        Args:
            path: The path whose visit failed
            error: The exception that was raised

        Returns:
            A VisitResult that lets the walk go on, or re-raises the
            exception to abort the walk.
        """
        pass

    def __call__(self, path: Path, error: OSError) -> VisitResult:
        return self.handle(path, error)


class FailFastPolicy(FailurePolicy):
    """
    Policy that immediately re-raises any error, stopping the walk.

    This is the default behavior. Whatever was counted before the error
    stays in the walk's counters.
    """

    def handle(self, path: Path, error: OSError) -> VisitResult:
        """Re-raise the error immediately."""
        raise error


class IgnoreMissingPolicy(FailurePolicy):
    """
    Policy that treats entries that vanished mid-walk as already gone.

    ``FileNotFoundError`` is ignored and the walk continues; every other
    error is re-raised. Installed by the delete and clean visitors, for
    which a missing entry is the desired end state.
    """

    def __init__(self):
        self.missing: List[Path] = []

    def handle(self, path: Path, error: OSError) -> VisitResult:
        """Record and skip missing entries, re-raise anything else."""
        if isinstance(error, FileNotFoundError):
            logger.debug("Entry vanished during walk: %s", path)
            self.missing.append(path)
            return VisitResult.CONTINUE
        raise error


class CollectErrorsPolicy(FailurePolicy):
    """
    Policy that collects errors and continues the walk.

    Useful for collecting all errors and presenting them at the end.
    Errors of the types listed in ``fatal`` are still re-raised.
    """

    def __init__(self, fatal: Tuple[Type[BaseException], ...] = ()):
        """
        Initialize the policy.

        Args:
            fatal: Exception types that abort the walk anyway
        """
        self.fatal = fatal
        self.errors: List[Dict[str, Any]] = []
        self.skipped_paths: List[Path] = []

    def handle(self, path: Path, error: OSError) -> VisitResult:
        """Record the error and skip the failing path."""
        if self.fatal and isinstance(error, self.fatal):
            raise error

        self.errors.append({
            'path': path,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        })
        self.skipped_paths.append(path)
        logger.warning("Skipping '%s': %s", path, error)
        return VisitResult.CONTINUE

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'permission_errors': sum(1 for e in self.errors if e['error_type'] == 'PermissionError'),
            'missing_errors': sum(1 for e in self.errors if e['error_type'] == 'FileNotFoundError'),
            'skipped_paths': len(self.skipped_paths),
            'errors': self.errors,
        }
