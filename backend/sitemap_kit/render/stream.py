"""Streaming sitemap emission for URL sets too large to hold in memory."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Iterable, Iterator

from sitemap_kit.core.errors import StreamClosedError
from sitemap_kit.core.metrics import STREAM_ENTRIES
from sitemap_kit.entries.normalize import MtimeReader, file_mtime, normalize_entry
from sitemap_kit.entries.types import ErrorLevel
from sitemap_kit.entries.validate import validate_entry
from sitemap_kit.models.dto import LooseItem
from sitemap_kit.render.xml import URLSET_CLOSE, render_entry, urlset_preamble

DEFAULT_HIGH_WATER_MARK = 16


class SitemapTransform:
    """Turn loose entries into XML chunks one entry at a time.

    The preamble goes out with the first entry only; ``finish`` always emits
    the closing ``</urlset>`` tag, after which the transform accepts nothing
    more. No entry outlives its own ``push`` call.
    """

    def __init__(
        self,
        hostname: str | None = None,
        level: ErrorLevel | str = ErrorLevel.WARN,
        mtime_reader: MtimeReader = file_mtime,
    ) -> None:
        self.hostname = hostname
        self.level = ErrorLevel(level)
        self.mtime_reader = mtime_reader
        self.has_head_output = False
        self.finished = False

    def push(self, item: LooseItem) -> list[str]:
        if self.finished:
            raise StreamClosedError("push after finish")
        entry = normalize_entry(item, self.hostname, self.mtime_reader)
        validate_entry(entry, self.level)
        chunks: list[str] = []
        if not self.has_head_output:
            self.has_head_output = True
            chunks.append(urlset_preamble())
        chunks.append(render_entry(entry))
        STREAM_ENTRIES.inc()
        return chunks

    def finish(self) -> list[str]:
        if self.finished:
            raise StreamClosedError("sitemap already finished")
        self.finished = True
        return [URLSET_CLOSE]


def iter_sitemap(
    items: Iterable[LooseItem],
    hostname: str | None = None,
    level: ErrorLevel | str = ErrorLevel.WARN,
    mtime_reader: MtimeReader = file_mtime,
) -> Iterator[str]:
    """Lazily yield sitemap XML chunks for ``items``."""
    transform = SitemapTransform(hostname=hostname, level=level, mtime_reader=mtime_reader)
    for item in items:
        yield from transform.push(item)
    yield from transform.finish()


class SitemapStream:
    """Async producer/consumer channel around :class:`SitemapTransform`.

    Producers ``await write(item)`` and finally ``await end()``; consumers
    iterate with ``async for chunk in stream``. The channel is bounded by
    ``high_water_mark`` chunks, so a producer that outpaces its consumer is
    suspended until the consumer catches up.
    """

    def __init__(
        self,
        hostname: str | None = None,
        level: ErrorLevel | str = ErrorLevel.WARN,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        mtime_reader: MtimeReader = file_mtime,
    ) -> None:
        self._transform = SitemapTransform(hostname=hostname, level=level, mtime_reader=mtime_reader)
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=high_water_mark)
        self._ended = False

    @property
    def ended(self) -> bool:
        return self._ended

    async def write(self, item: LooseItem) -> None:
        if self._ended:
            raise StreamClosedError("write after end")
        for chunk in self._transform.push(item):
            await self._queue.put(chunk)

    async def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        for chunk in self._transform.finish():
            await self._queue.put(chunk)
        await self._queue.put(None)

    async def pump(self, items: Iterable[LooseItem]) -> None:
        """Write every item, then end the stream."""
        for item in items:
            await self.write(item)
        await self.end()

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        chunk = await self._queue.get()
        if chunk is None:
            # keep the sentinel so later iterations stop too
            self._queue.put_nowait(None)
            raise StopAsyncIteration
        return chunk


__all__ = ["DEFAULT_HIGH_WATER_MARK", "SitemapTransform", "SitemapStream", "iter_sitemap"]
