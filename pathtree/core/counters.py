"""Counters for tree walks.

A walk counts three things: files, directories and bytes. Each is held
by a Counter, and the three travel together as a PathCounters record
that is created for one walk, mutated only by that walk, and handed
back to the caller as the walk's result.

Three Counter representations are provided:

- FixedWidthCounter: a signed 64-bit value that wraps silently when it
  leaves its range, the way a machine word does.
- ArbitraryPrecisionCounter: an exact, unbounded value.
- NoopCounter: discards every update, for callers that don't need counts.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .options import CounterPrecision


_WIDTH = 64
_MASK = (1 << _WIDTH) - 1
_SIGN_BIT = 1 << (_WIDTH - 1)

FIXED_MIN = -_SIGN_BIT
FIXED_MAX = _SIGN_BIT - 1


def wrap_fixed(value: int) -> int:
    """Truncate an integer to a signed 64-bit two's-complement value."""
    value &= _MASK
    if value & _SIGN_BIT:
        value -= 1 << _WIDTH
    return value


class Counter(ABC):
    """A mutable, monotonically updated count.

    Counters are plain mutable state. They are owned by exactly one walk
    at a time and are not safe for concurrent updates.
    """

    @abstractmethod
    def add(self, amount: int) -> None:
        """Add ``amount`` to the count."""
        pass

    @abstractmethod
    def increment(self) -> None:
        """Add one to the count."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Set the count back to zero."""
        pass

    @abstractmethod
    def as_exact(self) -> int:
        """Return the stored value without truncation.

        For a FixedWidthCounter the stored value may already have wrapped.
        """
        pass

    def as_fixed(self) -> int:
        """Return the value truncated to a signed 64-bit integer.

        This may wrap: a count past ``FIXED_MAX`` comes back negative.
        """
        return wrap_fixed(self.as_exact())

    @property
    def value(self) -> int:
        """The current count (same as ``as_exact()``)."""
        return self.as_exact()

    def __int__(self) -> int:
        return self.as_exact()

    def __index__(self) -> int:
        return self.as_exact()

    def __eq__(self, other: object) -> bool:
        """Counters are equal when their exact values are equal."""
        if not isinstance(other, Counter):
            return NotImplemented
        return self.as_exact() == other.as_exact()

    # Mutable: equal by value, so not hashable
    __hash__ = None

    def __str__(self) -> str:
        return str(self.as_exact())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.as_exact()})"


class FixedWidthCounter(Counter):
    """Counter backed by a signed 64-bit value.

    Cheap to update. Values past ``FIXED_MAX`` wrap around silently.
    """

    __slots__ = ('_value',)

    def __init__(self, value: int = 0):
        self._value = wrap_fixed(value)

    def add(self, amount: int) -> None:
        self._value = wrap_fixed(self._value + amount)

    def increment(self) -> None:
        self._value = wrap_fixed(self._value + 1)

    def reset(self) -> None:
        self._value = 0

    def as_exact(self) -> int:
        return self._value

    def as_fixed(self) -> int:
        return self._value


class ArbitraryPrecisionCounter(Counter):
    """Counter backed by an unbounded integer; never overflows."""

    __slots__ = ('_value',)

    def __init__(self, value: int = 0):
        self._value = value

    def add(self, amount: int) -> None:
        self._value += amount

    def increment(self) -> None:
        self._value += 1

    def reset(self) -> None:
        self._value = 0

    def as_exact(self) -> int:
        return self._value


class NoopCounter(Counter):
    """Counter that ignores every update and always reads zero."""

    _instance: Optional['NoopCounter'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def add(self, amount: int) -> None:
        pass

    def increment(self) -> None:
        pass

    def reset(self) -> None:
        pass

    def as_exact(self) -> int:
        return 0


class PathCounters:
    """The file, directory and byte counters of one walk.

    Created once per walk, owned exclusively by that walk while it runs,
    and returned to the caller as the result. Callers wanting cumulative
    totals may pass the same instance to several facade calls.
    """

    __slots__ = ('file_counter', 'directory_counter', 'byte_counter')

    def __init__(self,
                 file_counter: Counter,
                 directory_counter: Counter,
                 byte_counter: Counter):
        """Initialize from three counters.

        Args:
            file_counter: Counts regular files visited
            directory_counter: Counts directories exited
            byte_counter: Sums the sizes of counted files
        """
        self.file_counter = file_counter
        self.directory_counter = directory_counter
        self.byte_counter = byte_counter

    @property
    def files(self) -> int:
        return self.file_counter.as_exact()

    @property
    def directories(self) -> int:
        return self.directory_counter.as_exact()

    @property
    def bytes(self) -> int:
        return self.byte_counter.as_exact()

    def reset(self) -> None:
        """Reset all three counters to zero."""
        self.byte_counter.reset()
        self.directory_counter.reset()
        self.file_counter.reset()

    def as_tuple(self):
        """Return ``(files, directories, bytes)`` as exact integers."""
        return (self.files, self.directories, self.bytes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathCounters):
            return NotImplemented
        return (self.file_counter == other.file_counter
                and self.directory_counter == other.directory_counter
                and self.byte_counter == other.byte_counter)

    __hash__ = None

    def __str__(self) -> str:
        """Human-readable summary, e.g. ``2 files, 2 directories, 8 bytes``."""
        return (f"{self.files:,} files, "
                f"{self.directories:,} directories, "
                f"{self.bytes:,} bytes")

    def __repr__(self) -> str:
        return (f"PathCounters(files={self.files}, "
                f"directories={self.directories}, bytes={self.bytes})")


_NOOP_PATH_COUNTERS: Optional[PathCounters] = None


def fixed_counter() -> Counter:
    """Create a new FixedWidthCounter."""
    return FixedWidthCounter()


def exact_counter() -> Counter:
    """Create a new ArbitraryPrecisionCounter."""
    return ArbitraryPrecisionCounter()


def noop_counter() -> Counter:
    """Return the shared NoopCounter."""
    return NoopCounter()


def fixed_path_counters() -> PathCounters:
    """Create PathCounters backed by fixed-width counters."""
    return PathCounters(FixedWidthCounter(), FixedWidthCounter(), FixedWidthCounter())


def exact_path_counters() -> PathCounters:
    """Create PathCounters backed by arbitrary-precision counters."""
    return PathCounters(ArbitraryPrecisionCounter(),
                        ArbitraryPrecisionCounter(),
                        ArbitraryPrecisionCounter())


def noop_path_counters() -> PathCounters:
    """Return the shared PathCounters that discards every update."""
    global _NOOP_PATH_COUNTERS
    if _NOOP_PATH_COUNTERS is None:
        counter = NoopCounter()
        _NOOP_PATH_COUNTERS = PathCounters(counter, counter, counter)
    return _NOOP_PATH_COUNTERS


def path_counters(precision: CounterPrecision = CounterPrecision.FIXED) -> PathCounters:
    """Create PathCounters for the given precision.

    Args:
        precision: FIXED, EXACT or NONE

    Returns:
        A fresh PathCounters (shared for NONE)

    Raises:
        ValueError: If precision is not recognized
    """
    factories = {
        CounterPrecision.FIXED: fixed_path_counters,
        CounterPrecision.EXACT: exact_path_counters,
        CounterPrecision.NONE: noop_path_counters,
    }
    if precision not in factories:
        raise ValueError(
            f"Unknown counter precision: {precision}. "
            f"Choose from: {', '.join(p.name for p in factories)}"
        )
    return factories[precision]()
