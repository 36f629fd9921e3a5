"""XML rendering of individual sitemap entries."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping
from xml.etree.ElementTree import Element, SubElement, tostring
from xml.sax.saxutils import quoteattr

from sitemap_kit.core.errors import ConfigurationError
from sitemap_kit.entries.types import NewsItem, SitemapEntry, SitemapImage, SitemapVideo

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

URLSET_NAMESPACES: Mapping[str, str] = {
    "xmlns": "http://www.sitemaps.org/schemas/sitemap/0.9",
    "xmlns:news": "http://www.google.com/schemas/sitemap-news/0.9",
    "xmlns:xhtml": "http://www.w3.org/1999/xhtml",
    "xmlns:mobile": "http://www.google.com/schemas/sitemap-mobile/1.0",
    "xmlns:image": "http://www.google.com/schemas/sitemap-image/1.1",
    "xmlns:video": "http://www.google.com/schemas/sitemap-video/1.1",
}
URLSET_CLOSE = "</urlset>"

_NS_ATTR_RE = re.compile(r"""([^\s=]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"']+))""")


def parse_namespace_attributes(xml_ns: str) -> dict[str, str]:
    """Parse ``xmlns="..." xmlns:image="..."`` into an ordered attribute map.

    Values may be double-quoted, single-quoted or bare. Raises
    :class:`ConfigurationError` when no attribute can be parsed.
    """
    attributes = {
        name: double or single or bare for name, double, single, bare in _NS_ATTR_RE.findall(xml_ns)
    }
    if not attributes:
        raise ConfigurationError(f"xml_ns holds no namespace attributes: {xml_ns!r}")
    return attributes


def stylesheet_instruction(xsl_url: str) -> str:
    return f"<?xml-stylesheet type=\"text/xsl\" href={quoteattr(xsl_url)}?>"


def open_tag(name: str, attributes: Mapping[str, str]) -> str:
    attrs = "".join(f" {key}={quoteattr(value)}" for key, value in attributes.items())
    return f"<{name}{attrs}>"


def urlset_preamble(xml_ns: str | None = None, xsl_url: str | None = None) -> str:
    """Everything a ``urlset`` document contains before its first ``<url>``."""
    attributes = parse_namespace_attributes(xml_ns) if xml_ns else URLSET_NAMESPACES
    head = XML_DECLARATION
    if xsl_url:
        head += stylesheet_instruction(xsl_url)
    return head + open_tag("urlset", attributes)


def format_number(value: float | int) -> str:
    """Render numbers without a trailing ``.0`` for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_url_element(entry: SitemapEntry) -> Element:
    """Build the ``<url>`` element for one entry, children in protocol order."""
    url = Element("url")
    _text_element(url, "loc", entry.url)
    if entry.lastmod:
        _text_element(url, "lastmod", entry.lastmod)
    if entry.changefreq:
        _text_element(url, "changefreq", entry.changefreq)
    if entry.priority is not None:
        _text_element(url, "priority", f"{entry.priority:.1f}")
    for image in entry.img:
        _image_element(url, image)
    for video in entry.video:
        _video_element(url, video)
    for link in entry.links:
        attributes = {"rel": "alternate", "hreflang": link.lang, "href": link.url}
        SubElement(url, "xhtml:link", {key: value for key, value in attributes.items() if value})
    if entry.expires:
        _text_element(url, "expires", entry.expires)
    if entry.android_link:
        SubElement(url, "xhtml:link", {"rel": "alternate", "href": entry.android_link})
    if entry.mobile:
        mobile = SubElement(url, "mobile:mobile")
        if isinstance(entry.mobile, str):
            mobile.set("type", entry.mobile)
    if entry.news is not None:
        _news_element(url, entry.news)
    if entry.amp_link:
        SubElement(url, "xhtml:link", {"rel": "amphtml", "href": entry.amp_link})
    return url


def render_entry(entry: SitemapEntry) -> str:
    """Serialize a single entry as an XML fragment."""
    return tostring(build_url_element(entry), encoding="unicode")


# Internal helpers -------------------------------------------------


def _text(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    return str(value)


def _text_element(parent: Element, tag: str, value: Any, attributes: Mapping[str, Any] | None = None) -> Element:
    element = SubElement(parent, tag, {key: _text(val) for key, val in (attributes or {}).items() if val is not None})
    element.text = _text(value)
    return element


def _image_element(parent: Element, image: SitemapImage) -> None:
    node = SubElement(parent, "image:image")
    _text_element(node, "image:loc", image.url)
    if image.caption:
        _text_element(node, "image:caption", image.caption)
    if image.geo_location:
        _text_element(node, "image:geo_location", image.geo_location)
    if image.title:
        _text_element(node, "image:title", image.title)
    if image.license:
        _text_element(node, "image:license", image.license)


def _video_element(parent: Element, video: SitemapVideo) -> None:
    node = SubElement(parent, "video:video")
    _text_element(node, "video:thumbnail_loc", video.thumbnail_loc or "")
    _text_element(node, "video:title", video.title or "")
    _text_element(node, "video:description", video.description or "")
    if video.content_loc:
        _text_element(node, "video:content_loc", video.content_loc)
    if video.player_loc:
        _text_element(
            node,
            "video:player_loc",
            video.player_loc,
            {"autoplay": video.player_autoplay, "allow_embed": video.player_allow_embed},
        )
    if video.duration is not None:
        _text_element(node, "video:duration", video.duration)
    if video.expiration_date:
        _text_element(node, "video:expiration_date", video.expiration_date)
    if video.rating is not None:
        _text_element(node, "video:rating", video.rating)
    if video.view_count is not None:
        _text_element(node, "video:view_count", video.view_count)
    if video.publication_date:
        _text_element(node, "video:publication_date", video.publication_date)
    for tag in video.tag:
        _text_element(node, "video:tag", tag)
    if video.category:
        _text_element(node, "video:category", video.category)
    if video.family_friendly is not None:
        _text_element(node, "video:family_friendly", video.family_friendly)
    if video.restriction is not None:
        _text_element(
            node,
            "video:restriction",
            video.restriction.countries,
            {"relationship": video.restriction.relationship},
        )
    if video.gallery_loc:
        _text_element(node, "video:gallery_loc", video.gallery_loc, {"title": video.gallery_title})
    if video.price is not None:
        _text_element(
            node,
            "video:price",
            video.price.amount,
            {
                "currency": video.price.currency,
                "type": video.price.type,
                "resolution": video.price.resolution,
            },
        )
    if video.requires_subscription is not None:
        _text_element(node, "video:requires_subscription", video.requires_subscription)
    if video.uploader:
        _text_element(node, "video:uploader", video.uploader, {"info": video.uploader_info})
    if video.platform is not None:
        _text_element(
            node,
            "video:platform",
            video.platform.platforms,
            {"relationship": video.platform.relationship},
        )
    if video.live is not None:
        _text_element(node, "video:live", video.live)
    if video.id:
        _text_element(node, "video:id", video.id, {"type": "url"})


def _news_element(parent: Element, news: NewsItem) -> None:
    node = SubElement(parent, "news:news")
    if news.publication is not None:
        publication = SubElement(node, "news:publication")
        if news.publication.name:
            _text_element(publication, "news:name", news.publication.name)
        if news.publication.language:
            _text_element(publication, "news:language", news.publication.language)
    if news.access:
        _text_element(node, "news:access", news.access)
    if news.genres:
        _text_element(node, "news:genres", news.genres)
    _text_element(node, "news:publication_date", news.publication_date or "")
    _text_element(node, "news:title", news.title or "")
    if news.keywords:
        _text_element(node, "news:keywords", news.keywords)
    if news.stock_tickers:
        _text_element(node, "news:stock_tickers", news.stock_tickers)


__all__ = [
    "XML_DECLARATION",
    "URLSET_NAMESPACES",
    "URLSET_CLOSE",
    "parse_namespace_attributes",
    "stylesheet_instruction",
    "open_tag",
    "urlset_preamble",
    "format_number",
    "build_url_element",
    "render_entry",
]
