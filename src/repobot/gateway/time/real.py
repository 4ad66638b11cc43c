"""Production time provider backed by asyncio and the system clock."""

import asyncio
import time

from repobot.gateway.time.abc import Time


class RealTime(Time):
    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def now(self) -> float:
        return time.time()
