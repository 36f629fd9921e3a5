"""Protocol validation for normalized sitemap entries."""

from __future__ import annotations

import re
from typing import Any, Iterator, NamedTuple

from sitemap_kit.core.errors import VIOLATION_TYPES, ValidationViolation, ViolationKind
from sitemap_kit.core.logging import get_logger
from sitemap_kit.core.metrics import VALIDATION_VIOLATIONS
from sitemap_kit.entries.types import (
    AllowDeny,
    ChangeFreq,
    ErrorLevel,
    NewsItem,
    SitemapEntry,
    SitemapVideo,
    YesNo,
)

logger = get_logger(__name__)

MAX_URL_LENGTH = 2048
MAX_VIDEO_DURATION = 28800
MAX_VIDEO_TITLE_LENGTH = 100
MAX_VIDEO_DESCRIPTION_LENGTH = 2048
MAX_VIDEO_CATEGORY_LENGTH = 256
MAX_VIDEO_TAGS = 32
NEWS_ACCESS_VALUES = ("Registration", "Subscription")
PRICE_TYPES = ("rent", "purchase", "RENT", "PURCHASE")
PRICE_RESOLUTIONS = ("HD", "hd", "SD", "sd")

PATTERNS = {
    "price:currency": re.compile(r"^[A-Z]{3}$"),
    "restriction": re.compile(r"^([A-Z]{2}( +[A-Z]{2})*)?$"),
    "platform": re.compile(r"^((web|mobile|tv)( (web|mobile|tv))*)?$"),
    "language": re.compile(r"^(zh-cn|zh-tw|[a-z]{2,3})$"),
    "genres": re.compile(
        r"^(PressRelease|Satire|Blog|OpEd|Opinion|UserGenerated)"
        r"(, *(PressRelease|Satire|Blog|OpEd|Opinion|UserGenerated))*$"
    ),
    "stock_tickers": re.compile(r"^(\w+:\w+(, *\w+:\w+){0,4})?$"),
}


class Violation(NamedTuple):
    kind: ViolationKind
    field: str
    value: Any
    message: str

    def as_error(self) -> ValidationViolation:
        return VIOLATION_TYPES[self.kind](self.field, self.value, self.message)


def validate_entry(entry: SitemapEntry, level: ErrorLevel | str = ErrorLevel.WARN) -> None:
    """Check ``entry`` against protocol constraints.

    ``silent`` skips every check, ``warn`` logs each violation and carries on,
    ``error`` raises the first violation found.
    """
    level = ErrorLevel(level)
    if level is ErrorLevel.SILENT:
        return
    for violation in iter_violations(entry):
        VALIDATION_VIOLATIONS.labels(kind=violation.kind.value, level=level.value).inc()
        if level is ErrorLevel.ERROR:
            raise violation.as_error()
        logger.warning(
            "Invalid sitemap entry %s: %s",
            entry.url,
            violation.message,
            extra={
                "ctx_url": entry.url,
                "ctx_field": violation.field,
                "ctx_violation": violation.kind.value,
            },
        )


def iter_violations(entry: SitemapEntry) -> Iterator[Violation]:
    """Yield every violation in ``entry`` in a fixed order."""
    if not entry.url:
        yield Violation(ViolationKind.MISSING_FIELD, "url", entry.url, "URL is required")
    elif len(entry.url) > MAX_URL_LENGTH:
        yield Violation(
            ViolationKind.OUT_OF_RANGE,
            "url",
            entry.url,
            f"URL must be at most {MAX_URL_LENGTH} characters",
        )

    if entry.changefreq is not None and not isinstance(entry.changefreq, ChangeFreq):
        yield Violation(
            ViolationKind.INVALID_ENUM,
            "changefreq",
            entry.changefreq,
            f"changefreq must be one of {', '.join(freq.value for freq in ChangeFreq)}",
        )

    if entry.priority is not None and not _in_range(entry.priority, 0.0, 1.0):
        yield Violation(ViolationKind.OUT_OF_RANGE, "priority", entry.priority, "priority must be between 0.0 and 1.0")

    if entry.news is not None:
        yield from _news_violations(entry.news)

    for video in entry.video:
        yield from _video_violations(video)

    for link in entry.links:
        if not link.lang:
            yield Violation(ViolationKind.MISSING_FIELD, "links.lang", link.url, "alternate link requires a language")


# Internal helpers -------------------------------------------------


def _in_range(value: Any, low: float, high: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return low <= value <= high


def _news_violations(news: NewsItem) -> Iterator[Violation]:
    if news.access and news.access not in NEWS_ACCESS_VALUES:
        yield Violation(
            ViolationKind.INVALID_ENUM,
            "news.access",
            news.access,
            "news access must be Registration or Subscription",
        )
    publication = news.publication
    has_publication = publication is not None and publication.name and publication.language
    if not has_publication or not news.publication_date or not news.title:
        yield Violation(
            ViolationKind.MISSING_FIELD,
            "news",
            news,
            "news requires publication name, publication language, publication_date and title",
        )
    checks = {
        "language": publication.language if publication else None,
        "genres": news.genres,
        "stock_tickers": news.stock_tickers,
    }
    for key, value in checks.items():
        if value and not PATTERNS[key].match(value):
            yield Violation(ViolationKind.INVALID_FORMAT, f"news.{key}", value, f"news {key} has an invalid format")


def _video_violations(video: SitemapVideo) -> Iterator[Violation]:
    for name in ("thumbnail_loc", "title", "description"):
        if not getattr(video, name):
            yield Violation(ViolationKind.MISSING_FIELD, f"video.{name}", None, f"video requires {name}")

    if video.duration is not None and not _in_range(video.duration, 0, MAX_VIDEO_DURATION):
        yield Violation(
            ViolationKind.OUT_OF_RANGE,
            "video.duration",
            video.duration,
            f"video duration must be between 0 and {MAX_VIDEO_DURATION} seconds",
        )
    if video.rating is not None and not _in_range(video.rating, 0.0, 5.0):
        yield Violation(ViolationKind.OUT_OF_RANGE, "video.rating", video.rating, "video rating must be between 0 and 5")
    if video.title and len(video.title) > MAX_VIDEO_TITLE_LENGTH:
        yield Violation(
            ViolationKind.OUT_OF_RANGE,
            "video.title",
            video.title,
            f"video title must be at most {MAX_VIDEO_TITLE_LENGTH} characters",
        )
    if video.description and len(video.description) > MAX_VIDEO_DESCRIPTION_LENGTH:
        yield Violation(
            ViolationKind.OUT_OF_RANGE,
            "video.description",
            video.description,
            f"video description must be at most {MAX_VIDEO_DESCRIPTION_LENGTH} characters",
        )
    if video.category is not None and len(video.category) > MAX_VIDEO_CATEGORY_LENGTH:
        yield Violation(
            ViolationKind.OUT_OF_RANGE,
            "video.category",
            video.category,
            f"video category must be at most {MAX_VIDEO_CATEGORY_LENGTH} characters",
        )
    if len(video.tag) > MAX_VIDEO_TAGS:
        yield Violation(
            ViolationKind.OUT_OF_RANGE,
            "video.tag",
            len(video.tag),
            f"video may have at most {MAX_VIDEO_TAGS} tags",
        )
    if video.view_count is not None and video.view_count.lstrip().startswith("-"):
        yield Violation(ViolationKind.OUT_OF_RANGE, "video.view_count", video.view_count, "video view_count must not be negative")

    for name in ("family_friendly", "live", "requires_subscription"):
        value = getattr(video, name)
        if value is not None and not isinstance(value, YesNo):
            yield Violation(ViolationKind.INVALID_ENUM, f"video.{name}", value, f"video {name} must be yes or no")

    restriction = video.restriction
    if restriction is not None:
        if not PATTERNS["restriction"].match(restriction.countries):
            yield Violation(
                ViolationKind.INVALID_FORMAT,
                "video.restriction",
                restriction.countries,
                "video restriction must be a space separated list of ISO 3166 country codes",
            )
        if restriction.relationship not in AllowDeny._value2member_map_:
            yield Violation(
                ViolationKind.INVALID_ENUM,
                "video.restriction:relationship",
                restriction.relationship,
                "video restriction requires a relationship of allow or deny",
            )

    platform = video.platform
    if platform is not None:
        if not PATTERNS["platform"].match(platform.platforms):
            yield Violation(
                ViolationKind.INVALID_FORMAT,
                "video.platform",
                platform.platforms,
                "video platform must be a space separated list of web, mobile or tv",
            )
        if platform.relationship is not None and platform.relationship not in AllowDeny._value2member_map_:
            yield Violation(
                ViolationKind.INVALID_ENUM,
                "video.platform:relationship",
                platform.relationship,
                "video platform relationship must be allow or deny",
            )

    price = video.price
    if price is not None:
        if price.amount == "" and price.type is None:
            yield Violation(ViolationKind.MISSING_FIELD, "video.price:type", None, "an empty video price requires a price type")
        if price.type is not None and price.type not in PRICE_TYPES:
            yield Violation(ViolationKind.INVALID_ENUM, "video.price:type", price.type, "video price type must be rent or purchase")
        if price.resolution is not None and price.resolution not in PRICE_RESOLUTIONS:
            yield Violation(
                ViolationKind.INVALID_ENUM,
                "video.price:resolution",
                price.resolution,
                "video price resolution must be HD or SD",
            )
        if price.currency is not None and not PATTERNS["price:currency"].match(price.currency):
            yield Violation(
                ViolationKind.INVALID_FORMAT,
                "video.price:currency",
                price.currency,
                "video price currency must be an ISO 4217 code",
            )


__all__ = ["Violation", "validate_entry", "iter_violations", "MAX_URL_LENGTH"]
