"""Strict sitemap entry structures produced by normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorLevel(str, Enum):
    """How validation violations are handled."""

    SILENT = "silent"
    WARN = "warn"
    ERROR = "error"


class ChangeFreq(str, Enum):
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


class YesNo(str, Enum):
    YES = "yes"
    NO = "no"


class AllowDeny(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(slots=True)
class SitemapImage:
    url: str
    caption: str | None = None
    title: str | None = None
    license: str | None = None
    geo_location: str | None = None


@dataclass(slots=True)
class LinkItem:
    """Alternate-language version of a page (``xhtml:link``)."""

    lang: str | None
    url: str


@dataclass(slots=True)
class VideoRestriction:
    countries: str
    relationship: str | None = None


@dataclass(slots=True)
class VideoPlatform:
    platforms: str
    relationship: str | None = None


@dataclass(slots=True)
class VideoPrice:
    amount: str
    currency: str | None = None
    type: str | None = None
    resolution: str | None = None


@dataclass(slots=True)
class SitemapVideo:
    """Video descriptor; thumbnail_loc, title and description are required by the protocol."""

    thumbnail_loc: str | None
    title: str | None
    description: str | None
    content_loc: str | None = None
    player_loc: str | None = None
    player_autoplay: str | None = None
    player_allow_embed: YesNo | str | None = None
    duration: float | None = None
    expiration_date: str | None = None
    rating: float | None = None
    view_count: str | None = None
    publication_date: str | None = None
    tag: list[str] = field(default_factory=list)
    category: str | None = None
    family_friendly: YesNo | str | None = None
    restriction: VideoRestriction | None = None
    gallery_loc: str | None = None
    gallery_title: str | None = None
    price: VideoPrice | None = None
    requires_subscription: YesNo | str | None = None
    uploader: str | None = None
    uploader_info: str | None = None
    platform: VideoPlatform | None = None
    live: YesNo | str | None = None
    id: str | None = None


@dataclass(slots=True)
class NewsPublication:
    name: str | None = None
    language: str | None = None


@dataclass(slots=True)
class NewsItem:
    publication: NewsPublication | None
    publication_date: str | None
    title: str | None
    access: str | None = None
    genres: str | None = None
    keywords: str | None = None
    stock_tickers: str | None = None


@dataclass(slots=True)
class SitemapEntry:
    """Fully resolved sitemap entry; every URL it holds is absolute."""

    url: str
    img: list[SitemapImage] = field(default_factory=list)
    video: list[SitemapVideo] = field(default_factory=list)
    links: list[LinkItem] = field(default_factory=list)
    lastmod: str | None = None
    changefreq: ChangeFreq | str | None = None
    priority: float | None = None
    news: NewsItem | None = None
    expires: str | None = None
    android_link: str | None = None
    mobile: bool | str | None = None
    amp_link: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class IndexReference:
    """One ``<sitemap>`` element of a sitemap index."""

    url: str
    lastmod: str | None = None


__all__ = [
    "ErrorLevel",
    "ChangeFreq",
    "YesNo",
    "AllowDeny",
    "SitemapImage",
    "LinkItem",
    "VideoRestriction",
    "VideoPlatform",
    "VideoPrice",
    "SitemapVideo",
    "NewsPublication",
    "NewsItem",
    "SitemapEntry",
    "IndexReference",
]
