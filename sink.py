"""
Сериализация результатов из параллельных воркеров в один поток вывода.
"""

import asyncio
from typing import Callable, Optional

from config import Config


class ResultSink:
    """
    Очередь результатов с единственным писателем.

    Воркеры кладут строки в ограниченную очередь (при заполнении ``put``
    блокируется), отдельная задача забирает их и передает в ``writer``
    в порядке поступления. Если ``writer`` бросил исключение, ожидающие
    и последующие ``put`` и ``close`` получают это исключение.
    """

    _CLOSE = None

    def __init__(self, writer: Callable[[str], None], maxsize: int = Config.RESULT_QUEUE_SIZE):
        self.writer = writer
        self.written = 0
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._consumer: Optional[asyncio.Task] = None

    @property
    def failed(self) -> bool:
        """Писатель завершился с ошибкой."""
        consumer = self._consumer
        return (consumer is not None and consumer.done()
                and not consumer.cancelled() and consumer.exception() is not None)

    def start(self) -> 'ResultSink':
        if self._consumer is None:
            self._consumer = asyncio.create_task(self._drain())
        return self

    async def put(self, line: str) -> None:
        await self._enqueue(line)

    async def close(self) -> None:
        """Дописать все, что в очереди, и остановить писателя."""
        if self._consumer is None:
            return
        await self._enqueue(self._CLOSE)
        try:
            await self._consumer
        finally:
            self._consumer = None

    async def _enqueue(self, item: Optional[str]) -> None:
        consumer = self._consumer
        if consumer is None:
            await self._queue.put(item)
            return

        # Писатель уже упал (например, закрыт stdout)
        if consumer.done():
            consumer.result()
            return

        # Ждем место в очереди или падения писателя, что раньше
        put = asyncio.ensure_future(self._queue.put(item))
        await asyncio.wait({put, consumer}, return_when=asyncio.FIRST_COMPLETED)
        if put.done():
            put.result()
            return
        put.cancel()
        consumer.result()

    async def _drain(self) -> None:
        while True:
            line = await self._queue.get()
            if line is self._CLOSE:
                break
            self.writer(line)
            self.written += 1

    async def __aenter__(self) -> 'ResultSink':
        return self.start()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
