"""Pydantic models for caller-supplied (loose) sitemap entries.

Loose entries accept the shapes callers tend to have at hand: a bare URL
string, scalar-or-list metadata fields, the camelCase keys used by most
sitemap tooling (``lastmodISO``, ``androidLink``) and the flat
``attribute:qualifier`` keys of the video extension
(``restriction:relationship``, ``price:currency``). Unknown keys are kept as
extras and travel with the entry.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping, Union

from pydantic import BaseModel, Field, ValidationError

from sitemap_kit.core.errors import InvalidFieldValueError, InvalidInputError
from sitemap_kit.entries.types import ChangeFreq

_LOOSE_CONFIG = {"extra": "allow", "populate_by_name": True}

DateLike = Union[datetime, date, str]


class LooseImage(BaseModel):
    model_config = _LOOSE_CONFIG

    url: str
    caption: str | None = None
    title: str | None = None
    license: str | None = None
    geo_location: str | None = Field(default=None, alias="geoLocation")


class LooseLink(BaseModel):
    model_config = _LOOSE_CONFIG

    lang: str | None = None
    url: str


class LooseRestriction(BaseModel):
    countries: str
    relationship: str | None = None


class LoosePlatform(BaseModel):
    platforms: str
    relationship: str | None = None


class LoosePrice(BaseModel):
    amount: str | float = ""
    currency: str | None = None
    type: str | None = None
    resolution: str | None = None


class LooseVideo(BaseModel):
    model_config = _LOOSE_CONFIG

    thumbnail_loc: str | None = None
    title: str | None = None
    description: str | None = None
    content_loc: str | None = None
    player_loc: str | None = None
    player_autoplay: str | None = Field(default=None, alias="player_loc:autoplay")
    player_allow_embed: bool | str | None = Field(default=None, alias="player_loc:allow_embed")
    duration: float | None = None
    expiration_date: str | None = None
    rating: float | str | None = None
    view_count: int | str | None = None
    publication_date: str | None = None
    tag: str | list[str] | None = None
    category: str | None = None
    family_friendly: bool | str | None = None
    restriction: LooseRestriction | str | None = None
    restriction_relationship: str | None = Field(default=None, alias="restriction:relationship")
    gallery_loc: str | None = None
    gallery_title: str | None = Field(default=None, alias="gallery_loc:title")
    price: LoosePrice | float | str | None = None
    price_currency: str | None = Field(default=None, alias="price:currency")
    price_type: str | None = Field(default=None, alias="price:type")
    price_resolution: str | None = Field(default=None, alias="price:resolution")
    requires_subscription: bool | str | None = None
    uploader: str | None = None
    uploader_info: str | None = Field(default=None, alias="uploader:info")
    platform: LoosePlatform | str | None = None
    platform_relationship: str | None = Field(default=None, alias="platform:relationship")
    live: bool | str | None = None
    id: str | None = None


class LoosePublication(BaseModel):
    name: str | None = None
    language: str | None = None


class LooseNews(BaseModel):
    model_config = _LOOSE_CONFIG

    publication: LoosePublication | None = None
    publication_date: str | None = None
    title: str | None = None
    access: str | None = None
    genres: str | None = None
    keywords: str | None = None
    stock_tickers: str | None = None


class LooseEntry(BaseModel):
    """Permissive entry shape accepted by every public entry point."""

    model_config = _LOOSE_CONFIG

    url: str
    img: LooseImage | str | list[LooseImage | str] | None = None
    video: LooseVideo | list[LooseVideo] | None = None
    links: LooseLink | list[LooseLink] | None = None
    lastmod: DateLike | None = None
    lastmod_iso: DateLike | None = Field(default=None, alias="lastmodISO")
    lastmodfile: Path | None = None
    changefreq: ChangeFreq | str | None = None
    priority: float | None = None
    news: LooseNews | None = None
    expires: DateLike | None = None
    android_link: str | None = Field(default=None, alias="androidLink")
    mobile: bool | str | None = None
    amp_link: str | None = Field(default=None, alias="ampLink")

    @classmethod
    def coerce(cls, item: "LooseEntry | str | Mapping[str, Any]") -> "LooseEntry":
        """Turn a URL string or mapping into a ``LooseEntry``."""
        if isinstance(item, cls):
            return item
        if isinstance(item, str):
            return cls(url=item)
        if isinstance(item, Mapping):
            try:
                return cls.model_validate(dict(item))
            except ValidationError as exc:
                error = exc.errors()[0]
                field = ".".join(str(part) for part in error["loc"]) or "entry"
                raise InvalidFieldValueError(field, error.get("input"), error["msg"]) from exc
        raise InvalidInputError(f"Unsupported sitemap entry type: {type(item).__name__}")

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


LooseItem = Union[LooseEntry, str, Mapping[str, Any]]


__all__ = [
    "LooseImage",
    "LooseLink",
    "LooseRestriction",
    "LoosePlatform",
    "LoosePrice",
    "LooseVideo",
    "LoosePublication",
    "LooseNews",
    "LooseEntry",
    "LooseItem",
]
