"""Normalize loose sitemap entries into strict ``SitemapEntry`` records."""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Iterable, TypeVar
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from sitemap_kit.core.errors import InvalidDateError, InvalidFieldValueError, MalformedURLError
from sitemap_kit.entries.types import (
    ChangeFreq,
    LinkItem,
    NewsItem,
    NewsPublication,
    SitemapEntry,
    SitemapImage,
    SitemapVideo,
    VideoPlatform,
    VideoPrice,
    VideoRestriction,
    YesNo,
)
from sitemap_kit.models.dto import LooseEntry, LooseImage, LooseItem, LooseNews, LooseVideo
from sitemap_kit.utils.time import parse_datetime, timestamp_to_iso, to_iso

MtimeReader = Callable[[Path], float]

T = TypeVar("T")

_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = _PATH_SAFE + "?"
_STRICT_FIELDS = frozenset(f.name for f in fields(SitemapEntry))


def file_mtime(path: Path) -> float:
    """Default last-modified reader: the file's mtime in POSIX seconds."""
    return os.stat(path).st_mtime


def resolve_url(url: str, hostname: str | None = None) -> str:
    """Resolve ``url`` against ``hostname`` and return an absolute URL.

    Raises :class:`MalformedURLError` when the result has no scheme or host.
    """
    if not isinstance(url, str) or not url.strip():
        raise MalformedURLError(url, hostname)
    candidate = url.strip()
    try:
        if hostname:
            candidate = urljoin(hostname, candidate)
        parts = urlsplit(candidate)
    except ValueError as exc:
        raise MalformedURLError(url, hostname) from exc
    if not parts.scheme or not parts.netloc:
        raise MalformedURLError(url, hostname)
    path = quote(parts.path or "/", safe=_PATH_SAFE)
    query = quote(parts.query, safe=_QUERY_SAFE)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, query, parts.fragment))


def to_yes_no(value: Any) -> YesNo | Any:
    """Map native booleans onto the protocol's yes/no values."""
    if value is None:
        return None
    if isinstance(value, bool):
        return YesNo.YES if value else YesNo.NO
    if isinstance(value, str) and value in YesNo._value2member_map_:
        return YesNo(value)
    return value


def normalize_date(field_name: str, value: Any) -> str:
    try:
        return to_iso(parse_datetime(value))
    except (TypeError, ValueError) as exc:
        raise InvalidDateError(field_name, value) from exc


def normalize_entry(
    item: LooseItem,
    hostname: str | None = None,
    mtime_reader: MtimeReader = file_mtime,
) -> SitemapEntry:
    """Convert one loose entry into a strict, fully resolved entry."""
    loose = LooseEntry.coerce(item)
    entry = SitemapEntry(url=resolve_url(loose.url, hostname))

    entry.img = [_normalize_image(image, hostname) for image in _as_list(loose.img)]
    entry.video = [_normalize_video(video, hostname) for video in _as_list(loose.video)]
    entry.links = [
        LinkItem(lang=link.lang, url=resolve_url(link.url, hostname)) for link in _as_list(loose.links)
    ]

    if loose.lastmodfile:
        entry.lastmod = timestamp_to_iso(mtime_reader(loose.lastmodfile))
    elif loose.lastmod_iso:
        entry.lastmod = normalize_date("lastmodISO", loose.lastmod_iso)
    elif loose.lastmod:
        entry.lastmod = normalize_date("lastmod", loose.lastmod)

    entry.changefreq = _normalize_changefreq(loose.changefreq)
    entry.priority = loose.priority
    entry.news = _normalize_news(loose.news) if loose.news is not None else None
    entry.expires = normalize_date("expires", loose.expires) if loose.expires else None
    entry.android_link = resolve_url(loose.android_link, hostname) if loose.android_link else None
    entry.mobile = loose.mobile
    entry.amp_link = resolve_url(loose.amp_link, hostname) if loose.amp_link else None
    entry.extensions = {key: value for key, value in loose.extras.items() if key not in _STRICT_FIELDS}
    return entry


def normalize_entries(
    items: Iterable[LooseItem],
    hostname: str | None = None,
    mtime_reader: MtimeReader = file_mtime,
) -> dict[str, SitemapEntry]:
    """Normalize many entries into an insertion-ordered map keyed by resolved URL."""
    entries: dict[str, SitemapEntry] = {}
    for item in items:
        entry = normalize_entry(item, hostname, mtime_reader)
        entries[entry.url] = entry
    return entries


# Internal helpers -------------------------------------------------


def _as_list(value: T | list[T] | None) -> list[T]:
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def _normalize_changefreq(value: ChangeFreq | str | None) -> ChangeFreq | str | None:
    if value is None or isinstance(value, ChangeFreq):
        return value
    if value in ChangeFreq._value2member_map_:
        return ChangeFreq(value)
    return value


def _normalize_image(image: LooseImage | str, hostname: str | None) -> SitemapImage:
    if isinstance(image, str):
        return SitemapImage(url=resolve_url(image, hostname))
    return SitemapImage(
        url=resolve_url(image.url, hostname),
        caption=image.caption,
        title=image.title,
        license=image.license,
        geo_location=image.geo_location,
    )


def _normalize_video(video: LooseVideo, hostname: str | None) -> SitemapVideo:
    normalized = SitemapVideo(
        thumbnail_loc=resolve_url(video.thumbnail_loc, hostname) if video.thumbnail_loc else None,
        title=video.title,
        description=video.description,
        content_loc=resolve_url(video.content_loc, hostname) if video.content_loc else None,
        player_loc=resolve_url(video.player_loc, hostname) if video.player_loc else None,
        player_autoplay=video.player_autoplay,
        player_allow_embed=to_yes_no(video.player_allow_embed),
        duration=video.duration,
        expiration_date=video.expiration_date,
        rating=_parse_rating(video.rating),
        view_count=str(video.view_count) if video.view_count is not None else None,
        publication_date=video.publication_date,
        tag=_as_list(video.tag),
        category=video.category,
        family_friendly=to_yes_no(video.family_friendly),
        gallery_loc=resolve_url(video.gallery_loc, hostname) if video.gallery_loc else None,
        gallery_title=video.gallery_title,
        requires_subscription=to_yes_no(video.requires_subscription),
        uploader=video.uploader,
        uploader_info=video.uploader_info,
        live=to_yes_no(video.live),
        id=video.id,
    )

    if isinstance(video.restriction, str):
        normalized.restriction = VideoRestriction(video.restriction, video.restriction_relationship)
    elif video.restriction is not None:
        normalized.restriction = VideoRestriction(
            video.restriction.countries,
            video.restriction.relationship or video.restriction_relationship,
        )

    if isinstance(video.platform, str):
        normalized.platform = VideoPlatform(video.platform, video.platform_relationship)
    elif video.platform is not None:
        normalized.platform = VideoPlatform(
            video.platform.platforms,
            video.platform.relationship or video.platform_relationship,
        )

    if video.price is not None and not isinstance(video.price, (str, float, int)):
        normalized.price = VideoPrice(
            amount=_format_amount(video.price.amount),
            currency=video.price.currency or video.price_currency,
            type=video.price.type or video.price_type,
            resolution=video.price.resolution or video.price_resolution,
        )
    elif video.price is not None or video.price_type is not None:
        normalized.price = VideoPrice(
            amount=_format_amount(video.price) if video.price is not None else "",
            currency=video.price_currency,
            type=video.price_type,
            resolution=video.price_resolution,
        )
    return normalized


def _parse_rating(value: float | str | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise InvalidFieldValueError("video.rating", value, "rating must be numeric") from exc
    return float(value)


def _format_amount(value: float | str) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _normalize_news(news: LooseNews) -> NewsItem:
    publication = None
    if news.publication is not None:
        publication = NewsPublication(name=news.publication.name, language=news.publication.language)
    return NewsItem(
        publication=publication,
        publication_date=news.publication_date,
        title=news.title,
        access=news.access,
        genres=news.genres,
        keywords=news.keywords,
        stock_tickers=news.stock_tickers,
    )


__all__ = [
    "MtimeReader",
    "file_mtime",
    "resolve_url",
    "to_yes_no",
    "normalize_date",
    "normalize_entry",
    "normalize_entries",
]
