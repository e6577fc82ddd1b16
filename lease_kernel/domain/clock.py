"""
Clock -- Logical time abstraction.

Responsibility:
    Provides an injectable logical clock so that domain and service code
    never decide for themselves what "now" is.  Logical time is an
    abstract, monotonically non-decreasing integer (a block height, a tick
    counter, a day number); producing it is the host's job.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  CallableClock is the
    one sanctioned adapter to a host time source.

Failure modes:
    - SequentialClock raises ValueError if initialized with no times.
    - DeterministicClock raises ValueError if moved backwards.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator


class LogicalClock(ABC):
    """
    Abstract logical clock interface.

    Contract:
        Services receive a LogicalClock via constructor injection and read
        it exactly once per operation.

    Guarantees:
        ``now()`` returns a non-negative integer that never decreases
        between calls.
    """

    @abstractmethod
    def now(self) -> int:
        """Get the current logical time."""
        ...


class CallableClock(LogicalClock):
    """
    Adapter around a host-provided time source.

    Contract:
        ``source`` is a zero-argument callable returning the host's current
        logical time (e.g. a chain's block height).  The adapter does not
        cache; every ``now()`` consults the host.
    """

    def __init__(self, source: Callable[[], int]):
        self._source = source

    def now(self) -> int:
        return int(self._source())


class DeterministicClock(LogicalClock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance()``, ``set_time()`` or ``tick()`` is called.
        - Time never moves backwards.
    """

    def __init__(self, start: int = 0):
        """
        Initialize at a given logical time.

        Args:
            start: Initial logical time (default 0).
        """
        if start < 0:
            raise ValueError("Logical time cannot be negative")
        self._time = start

    def now(self) -> int:
        """Get the controlled time."""
        return self._time

    def set_time(self, time: int) -> None:
        """Move the clock to a specific time (forward only)."""
        if time < self._time:
            raise ValueError(
                f"Logical time cannot move backwards ({self._time} -> {time})"
            )
        self._time = time

    def advance(self, units: int = 1) -> None:
        """Advance the clock by the given number of units."""
        if units < 0:
            raise ValueError("Cannot advance by a negative amount")
        self._time += units

    def tick(self) -> int:
        """Advance by 1 unit and return new time."""
        self.advance(1)
        return self._time


class SequentialClock(LogicalClock):
    """
    Clock that returns sequential times from a predefined list.

    Contract:
        Initialized with a non-empty list of times.  After exhaustion,
        repeats the last value.

    Raises:
        ValueError: If initialized with an empty list.
    """

    def __init__(self, times: list[int]):
        if not times:
            raise ValueError("SequentialClock requires at least one time")
        self._times: Iterator[int] = iter(times)
        self._last_time: int = times[0]

    def now(self) -> int:
        """Get the next time in sequence."""
        self._last_time = next(self._times, self._last_time)
        return self._last_time
