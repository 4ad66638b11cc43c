"""Abstract time provider.

Isolates wall-clock reads and sleeping so retry delays can be asserted in
tests without actually waiting.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract interface for time operations."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the current task for the given number of seconds.

        Args:
            seconds: Delay in seconds (0 yields control without waiting)
        """
        ...

    @abstractmethod
    def now(self) -> float:
        """Return the current Unix timestamp in seconds."""
        ...
