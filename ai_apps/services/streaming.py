import asyncio
from typing import AsyncIterator, Optional


class ChannelClosed(Exception):
    """The consumer went away; the producer should stop."""


_END = object()


class FragmentChannel:
    """
    Single-slot hand-off between a fragment producer and one consumer.

    The producer ``send``s fragments and calls ``finish`` (optionally with an
    error) when done. The consumer iterates the channel and calls ``close``
    when it stops early; the producer's next ``send`` then raises
    ``ChannelClosed``.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = False
        self._finished = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def finished(self) -> bool:
        """True once the end-of-stream marker has been handed to the consumer side."""
        return self._finished

    async def send(self, fragment: str) -> None:
        if self._closed:
            raise ChannelClosed()
        await self._queue.put(fragment)

    async def finish(self, error: Optional[BaseException] = None) -> None:
        if self._closed:
            return
        await self._queue.put(error if error is not None else _END)
        self._finished = True

    def close(self) -> None:
        self._closed = True

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END:
            self._closed = True
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._closed = True
            raise item
        return item
