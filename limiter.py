"""
Ограничение скорости запуска запросов.
"""

import asyncio
from typing import Optional


class RateLimiter:
    """
    Тикер: не больше ``rate`` разрешений в секунду, равномерно.

    Ограничивает только запуск новых запросов. Уже запущенные воркеры
    работают до конца независимо от лимитера.
    """

    def __init__(self, rate: int):
        if rate < 1:
            raise ValueError("rate must be at least 1")
        self.rate = rate
        self.period = 1.0 / rate
        self._next: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Ждать следующего разрешения."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            now = loop.time()
            if self._next is None:
                self._next = now

            # asyncio.sleep может проснуться чуть раньше срока
            while now < self._next:
                await asyncio.sleep(self._next - now)
                now = loop.time()

            self._next = max(now, self._next) + self.period
