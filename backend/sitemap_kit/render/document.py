"""In-memory sitemap document with a time-based serialization cache."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Iterator, Mapping
from xml.etree.ElementTree import Element, indent, tostring

from sitemap_kit.core.config import Settings, get_settings
from sitemap_kit.core.logging import get_logger
from sitemap_kit.core.metrics import SERIALIZATIONS, SERIALIZE_DURATION
from sitemap_kit.entries.normalize import MtimeReader, file_mtime, normalize_entry
from sitemap_kit.entries.types import ErrorLevel, SitemapEntry
from sitemap_kit.entries.validate import validate_entry
from sitemap_kit.models.dto import LooseEntry, LooseItem
from sitemap_kit.render.xml import (
    URLSET_CLOSE,
    URLSET_NAMESPACES,
    XML_DECLARATION,
    build_url_element,
    parse_namespace_attributes,
    render_entry,
    stylesheet_instruction,
    urlset_preamble,
)
from sitemap_kit.storage.compress import CompressCallback, gzip_bytes, gzip_with_callback
from sitemap_kit.utils.time import now_ms

logger = get_logger(__name__)


class Sitemap:
    """A set of sitemap entries keyed by resolved URL.

    Entries keep their first insertion position; adding a URL that is already
    present replaces its metadata. ``cache_time`` is in milliseconds and
    ``0`` disables caching, so every serialization re-renders.
    """

    def __init__(
        self,
        urls: Iterable[LooseItem] = (),
        hostname: str | None = None,
        cache_time: int = 0,
        xsl_url: str | None = None,
        xml_ns: str | None = None,
        level: ErrorLevel | str = ErrorLevel.WARN,
        mtime_reader: MtimeReader = file_mtime,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.hostname = hostname
        self.cache_time = cache_time
        self.xsl_url = xsl_url
        self.xml_ns = xml_ns or ""
        self.level = ErrorLevel(level)
        self.mtime_reader = mtime_reader
        self.clock = clock
        self.cache = ""
        self.cache_set_timestamp = 0
        self._urls: dict[str, SitemapEntry] = {}
        for item in urls:
            self.add(item)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, urls: Iterable[LooseItem] = ()) -> "Sitemap":
        """Build a sitemap from ``settings``, or from ``get_settings()`` when omitted."""
        settings = settings or get_settings()
        return cls(
            urls,
            hostname=settings.hostname,
            cache_time=settings.cache_time,
            xsl_url=settings.xsl_url,
            xml_ns=settings.xml_ns,
            level=settings.level,
        )

    # Cache ------------------------------------------------------------

    def clear_cache(self) -> None:
        """Empty the cache and bypass it until it is set again."""
        self.cache = ""

    def is_cache_valid(self) -> bool:
        return bool(self.cache_time and self.cache and self.cache_set_timestamp + self.cache_time >= self.clock())

    def set_cache(self, value: str) -> str:
        self.cache = value
        self.cache_set_timestamp = self.clock()
        return self.cache

    # Entries ----------------------------------------------------------

    def add(self, item: LooseItem, level: ErrorLevel | str | None = None) -> int:
        """Add or replace an entry and return the number of entries."""
        entry = self._normalize(item)
        validate_entry(entry, level or self.level)
        self._urls[entry.url] = entry
        return len(self._urls)

    def contains(self, item: LooseItem) -> bool:
        return self._normalize(item).url in self._urls

    def delete(self, item: LooseItem) -> bool:
        """Remove an entry; report whether it was present."""
        return self._urls.pop(self._normalize(item).url, None) is not None

    @property
    def urls(self) -> Mapping[str, SitemapEntry]:
        return self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[SitemapEntry]:
        return iter(self._urls.values())

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, (str, Mapping, LooseEntry)):
            return False
        return self.contains(item)

    # Serialization ----------------------------------------------------

    def to_xml(self, pretty: bool = False) -> str:
        return self.to_string(pretty)

    def to_string(self, pretty: bool = False) -> str:
        """Serialize the document, serving the cached copy while it is fresh."""
        if self.is_cache_valid():
            SERIALIZATIONS.labels(cache="hit").inc()
            return self.cache
        SERIALIZATIONS.labels(cache="miss").inc()
        started = time.perf_counter()
        document = self._render_pretty() if pretty else self._render()
        SERIALIZE_DURATION.observe(time.perf_counter() - started)
        logger.debug("Serialized sitemap with %s entries", len(self._urls))
        return self.set_cache(document)

    def __str__(self) -> str:
        return self.to_string()

    def to_gzip(self, callback: CompressCallback | None = None) -> bytes | None:
        """Gzip the serialized document.

        Returns the compressed bytes, or hands them to ``callback(error, data)``
        when one is given.
        """
        payload = self.to_string().encode("utf-8")
        if callback is not None:
            gzip_with_callback(payload, callback)
            return None
        return gzip_bytes(payload)

    # Internal helpers -------------------------------------------------

    def _normalize(self, item: LooseItem) -> SitemapEntry:
        return normalize_entry(item, self.hostname, self.mtime_reader)

    def _render(self) -> str:
        parts = [urlset_preamble(self.xml_ns or None, self.xsl_url)]
        parts.extend(render_entry(entry) for entry in self._urls.values())
        parts.append(URLSET_CLOSE)
        return "".join(parts)

    def _render_pretty(self) -> str:
        attributes = parse_namespace_attributes(self.xml_ns) if self.xml_ns else dict(URLSET_NAMESPACES)
        root = Element("urlset", attributes)
        root.extend([build_url_element(entry) for entry in self._urls.values()])
        indent(root, space="  ")
        head = [XML_DECLARATION]
        if self.xsl_url:
            head.append(stylesheet_instruction(self.xsl_url))
        head.append(tostring(root, encoding="unicode"))
        return "\n".join(head)


def create_sitemap(
    urls: Iterable[LooseItem] = (),
    hostname: str | None = None,
    cache_time: int = 0,
    xsl_url: str | None = None,
    xml_ns: str | None = None,
    level: ErrorLevel | str = ErrorLevel.WARN,
    mtime_reader: MtimeReader = file_mtime,
) -> Sitemap:
    """Shortcut for ``Sitemap(...)``."""
    return Sitemap(
        urls,
        hostname=hostname,
        cache_time=cache_time,
        xsl_url=xsl_url,
        xml_ns=xml_ns,
        level=level,
        mtime_reader=mtime_reader,
    )


__all__ = ["Sitemap", "create_sitemap"]
