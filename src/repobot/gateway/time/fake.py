"""Fake time provider for testing."""

from repobot.gateway.time.abc import Time


class FakeTime(Time):
    """In-memory time provider that records sleeps instead of waiting.

    Each sleep advances the fake clock, so code computing delays from
    timestamps observes consistent time.
    """

    def __init__(self, *, current_time: float = 1_700_000_000.0) -> None:
        self._current_time = current_time
        self._sleep_calls: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)
        self._current_time += seconds

    def now(self) -> float:
        return self._current_time

    @property
    def sleep_calls(self) -> list[float]:
        """Read-only access to recorded sleep durations for test assertions."""
        return list(self._sleep_calls)
