"""Sitemap index documents and partitioned sitemap writing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from itertools import islice
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional
from xml.sax.saxutils import escape

from sitemap_kit.core.config import MAX_SITEMAP_SIZE, Settings, get_settings
from sitemap_kit.core.errors import ConfigurationError
from sitemap_kit.core.logging import get_logger
from sitemap_kit.core.metrics import FILES_WRITTEN
from sitemap_kit.entries.normalize import MtimeReader, file_mtime, normalize_date, resolve_url
from sitemap_kit.entries.types import ErrorLevel, IndexReference
from sitemap_kit.models.dto import LooseItem
from sitemap_kit.render.document import Sitemap
from sitemap_kit.render.xml import XML_DECLARATION, open_tag, parse_namespace_attributes, stylesheet_instruction
from sitemap_kit.storage.compress import gzip_bytes
from sitemap_kit.storage.files import SitemapFileTarget

logger = get_logger(__name__)

INDEX_NAMESPACES: Mapping[str, str] = {
    "xmlns": "https://www.sitemaps.org/schemas/sitemap/0.9",
    "xmlns:mobile": "https://www.google.com/schemas/sitemap-mobile/1.0",
    "xmlns:image": "https://www.google.com/schemas/sitemap-image/1.1",
    "xmlns:video": "https://www.google.com/schemas/sitemap-video/1.1",
}

IndexItem = IndexReference | str | Mapping[str, Any]
DateValue = str | date | datetime


@dataclass(slots=True)
class SitemapIndexResult:
    """Files produced by one :class:`SitemapIndexWriter` run."""

    index_path: Path
    sitemap_paths: list[Path] = field(default_factory=list)
    sitemap_urls: list[str] = field(default_factory=list)
    entry_count: int = 0


IndexCallback = Callable[[Optional[BaseException], Optional[SitemapIndexResult]], None]


def build_sitemap_index(
    urls: Iterable[IndexItem],
    xsl_url: str | None = None,
    xml_ns: str | None = None,
    lastmod: DateValue | None = None,
    lastmod_iso: str | None = None,
) -> str:
    """Render a ``sitemapindex`` document referencing ``urls``.

    A reference's own lastmod wins over the document-wide ``lastmod_iso`` /
    ``lastmod`` values.
    """
    default_lastmod = lastmod_iso or (normalize_date("lastmod", lastmod) if lastmod else None)
    attributes = parse_namespace_attributes(xml_ns) if xml_ns else INDEX_NAMESPACES

    lines = [XML_DECLARATION]
    if xsl_url:
        lines.append(stylesheet_instruction(xsl_url))
    lines.append(open_tag("sitemapindex", attributes))
    for item in urls:
        reference = _as_reference(item)
        lines.append("<sitemap>")
        lines.append(f"<loc>{escape(reference.url)}</loc>")
        reference_lastmod = reference.lastmod or default_lastmod
        if reference_lastmod:
            lines.append(f"<lastmod>{escape(reference_lastmod)}</lastmod>")
        lines.append("</sitemap>")
    lines.append("</sitemapindex>")
    return "\n".join(lines)


class SitemapIndexWriter:
    """Split a URL set into sitemap files of bounded size plus an index file.

    Files already written stay on disk when a later chunk fails.
    """

    def __init__(
        self,
        target: SitemapFileTarget,
        hostname: str | None = None,
        sitemap_size: int = MAX_SITEMAP_SIZE,
        cache_time: int = 0,
        xsl_url: str | None = None,
        xml_ns: str | None = None,
        level: ErrorLevel | str = ErrorLevel.WARN,
        lastmod: DateValue | None = None,
        compressor: Callable[[bytes], bytes] = gzip_bytes,
        mtime_reader: MtimeReader = file_mtime,
    ) -> None:
        if sitemap_size < 1:
            raise ConfigurationError(f"sitemap_size must be positive, got {sitemap_size}")
        if sitemap_size > MAX_SITEMAP_SIZE:
            logger.warning("sitemap_size %s exceeds the protocol limit of %s URLs", sitemap_size, MAX_SITEMAP_SIZE)
        self.target = target
        self.hostname = hostname
        self.sitemap_size = sitemap_size
        self.cache_time = cache_time
        self.xsl_url = xsl_url
        self.xml_ns = xml_ns
        self.level = ErrorLevel(level)
        self.lastmod = lastmod
        self.compressor = compressor
        self.mtime_reader = mtime_reader

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SitemapIndexWriter":
        settings = settings or get_settings()
        target = SitemapFileTarget(settings.target_folder, settings.sitemap_name, settings.gzip)
        return cls(
            target,
            hostname=settings.hostname,
            sitemap_size=settings.sitemap_size,
            cache_time=settings.cache_time,
            xsl_url=settings.xsl_url,
            xml_ns=settings.xml_ns,
            level=settings.level,
        )

    def write(self, urls: Iterable[LooseItem], callback: IndexCallback | None = None) -> SitemapIndexResult | None:
        """Write every chunk and the index.

        Without a callback the result is returned and failures raise. With a
        callback the outcome is reported as ``callback(error, result)``. A
        missing target folder or hostname always raises before anything is
        written.
        """
        self.target.ensure_ready()
        if not self.hostname:
            raise ConfigurationError("hostname is required to reference sitemaps from the index")
        if callback is None:
            return self._write(urls)
        try:
            result = self._write(urls)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Sitemap index write failed: %s", exc)
            callback(exc, None)
            return None
        callback(None, result)
        return None

    # Internal helpers -------------------------------------------------

    def _write(self, urls: Iterable[LooseItem]) -> SitemapIndexResult:
        sitemap_paths: list[Path] = []
        sitemap_urls: list[str] = []
        entry_count = 0
        for index, chunk in enumerate(_chunked(urls, self.sitemap_size)):
            sitemap = Sitemap(
                chunk,
                hostname=self.hostname,
                cache_time=self.cache_time,
                xsl_url=self.xsl_url,
                level=self.level,
                mtime_reader=self.mtime_reader,
            )
            payload = sitemap.to_string().encode("utf-8")
            if self.target.gzip:
                payload = self.compressor(payload)
            filename = self.target.chunk_filename(index)
            sitemap_paths.append(self.target.write(filename, payload))
            sitemap_urls.append(self._reference_url(filename))
            entry_count += len(sitemap)
            FILES_WRITTEN.labels(kind="urlset").inc()
            logger.info("Wrote sitemap %s with %s entries", filename, len(sitemap), extra={"ctx_file": filename})

        index_xml = build_sitemap_index(sitemap_urls, xsl_url=self.xsl_url, xml_ns=self.xml_ns, lastmod=self.lastmod)
        index_filename = self.target.index_filename()
        index_path = self.target.write(index_filename, index_xml.encode("utf-8"))
        FILES_WRITTEN.labels(kind="index").inc()
        logger.info(
            "Wrote sitemap index %s referencing %s sitemaps",
            index_filename,
            len(sitemap_urls),
            extra={"ctx_file": index_filename},
        )
        return SitemapIndexResult(
            index_path=index_path,
            sitemap_paths=sitemap_paths,
            sitemap_urls=sitemap_urls,
            entry_count=entry_count,
        )

    def _reference_url(self, filename: str) -> str:
        base = self.hostname if self.hostname.endswith("/") else self.hostname + "/"
        return resolve_url(filename, base)


def create_sitemap_index(
    urls: Iterable[LooseItem],
    target_folder: Path | str | None,
    hostname: str | None = None,
    sitemap_name: str = "sitemap",
    sitemap_size: int = MAX_SITEMAP_SIZE,
    gzip: bool = False,
    cache_time: int = 0,
    xsl_url: str | None = None,
    xml_ns: str | None = None,
    level: ErrorLevel | str = ErrorLevel.WARN,
    lastmod: DateValue | None = None,
    callback: IndexCallback | None = None,
    mtime_reader: MtimeReader = file_mtime,
) -> SitemapIndexResult | None:
    """Shortcut for building a :class:`SitemapIndexWriter` and running it."""
    target = SitemapFileTarget(
        Path(target_folder) if target_folder is not None else None,
        sitemap_name=sitemap_name,
        gzip=gzip,
    )
    writer = SitemapIndexWriter(
        target,
        hostname=hostname,
        sitemap_size=sitemap_size,
        cache_time=cache_time,
        xsl_url=xsl_url,
        xml_ns=xml_ns,
        level=level,
        lastmod=lastmod,
        mtime_reader=mtime_reader,
    )
    return writer.write(urls, callback=callback)


def _as_reference(item: IndexItem) -> IndexReference:
    if isinstance(item, IndexReference):
        return item
    if isinstance(item, str):
        return IndexReference(url=item)
    return IndexReference(url=item["url"], lastmod=item.get("lastmod"))


def _chunked(items: Iterable[LooseItem], size: int) -> Iterator[list[LooseItem]]:
    iterator = iter(items)
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield chunk


__all__ = [
    "INDEX_NAMESPACES",
    "SitemapIndexResult",
    "SitemapIndexWriter",
    "build_sitemap_index",
    "create_sitemap_index",
]
