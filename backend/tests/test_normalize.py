"""Tests for entry normalization."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from sitemap_kit.core.errors import InvalidDateError, InvalidFieldValueError, MalformedURLError
from sitemap_kit.entries.normalize import normalize_entries, normalize_entry, resolve_url, to_yes_no
from sitemap_kit.entries.types import ChangeFreq, LinkItem, VideoPrice, VideoRestriction, YesNo


def test_bare_string_becomes_entry(hostname: str) -> None:
    entry = normalize_entry("/page-1", hostname)
    assert entry.url == "http://test.com/page-1"
    assert entry.img == [] and entry.video == [] and entry.links == []
    assert entry.lastmod is None


@pytest.mark.parametrize(
    ("url", "base", "expected"),
    [
        ("/page-1", "http://test.com", "http://test.com/page-1"),
        ("page", "https://example.com/blog/", "https://example.com/blog/page"),
        ("https://other.org/x", "http://test.com", "https://other.org/x"),
        ("http://ya.ru", None, "http://ya.ru/"),
        ("/a b", "http://test.com", "http://test.com/a%20b"),
    ],
)
def test_resolve_url(url: str, base: str | None, expected: str) -> None:
    assert resolve_url(url, base) == expected


def test_relative_url_without_hostname_is_rejected() -> None:
    with pytest.raises(MalformedURLError):
        normalize_entry("/relative")


def test_images_and_links_are_resolved(hostname: str) -> None:
    entry = normalize_entry(
        {
            "url": "/gallery",
            "img": ["/a.jpg", {"url": "/b.jpg", "caption": "Bee", "geoLocation": "Dublin"}],
            "links": {"lang": "de", "url": "/de/gallery"},
        },
        hostname,
    )
    assert [image.url for image in entry.img] == ["http://test.com/a.jpg", "http://test.com/b.jpg"]
    assert entry.img[1].caption == "Bee"
    assert entry.img[1].geo_location == "Dublin"
    assert entry.links == [LinkItem(lang="de", url="http://test.com/de/gallery")]


def test_single_image_string_becomes_list(hostname: str) -> None:
    entry = normalize_entry({"url": "/", "img": "/only.png"}, hostname)
    assert [image.url for image in entry.img] == ["http://test.com/only.png"]


def test_video_fields_are_normalized(hostname: str) -> None:
    entry = normalize_entry(
        {
            "url": "/watch",
            "video": {
                "thumbnail_loc": "/thumb.jpg",
                "title": "Grilling",
                "description": "Steaks",
                "content_loc": "/video.mp4",
                "rating": "4.5",
                "view_count": 1234,
                "family_friendly": True,
                "live": False,
                "requires_subscription": "maybe",
                "tag": "cooking",
                "restriction": "IE GB",
                "restriction:relationship": "allow",
                "price": "1.99",
                "price:currency": "EUR",
            },
        },
        hostname,
    )
    video = entry.video[0]
    assert video.thumbnail_loc == "http://test.com/thumb.jpg"
    assert video.content_loc == "http://test.com/video.mp4"
    assert video.rating == 4.5
    assert video.view_count == "1234"
    assert video.family_friendly is YesNo.YES
    assert video.live is YesNo.NO
    assert video.requires_subscription == "maybe"
    assert video.tag == ["cooking"]
    assert video.restriction == VideoRestriction("IE GB", "allow")
    assert video.price == VideoPrice(amount="1.99", currency="EUR")


def test_unset_video_flags_stay_unset(hostname: str) -> None:
    entry = normalize_entry({"url": "/v", "video": [{"thumbnail_loc": "/t.jpg", "title": "t", "description": "d"}]}, hostname)
    assert entry.video[0].family_friendly is None
    assert entry.video[0].tag == []


def test_unparsable_rating_fails(hostname: str) -> None:
    with pytest.raises(InvalidFieldValueError):
        normalize_entry({"url": "/v", "video": {"title": "t", "rating": "great"}}, hostname)


def test_to_yes_no() -> None:
    assert to_yes_no(True) is YesNo.YES
    assert to_yes_no(False) is YesNo.NO
    assert to_yes_no(None) is None
    assert to_yes_no("no") is YesNo.NO
    assert to_yes_no("sometimes") == "sometimes"


def test_lastmod_formats(hostname: str) -> None:
    assert normalize_entry({"url": "/", "lastmod": "2019-01-01"}, hostname).lastmod == "2019-01-01T00:00:00.000Z"
    assert normalize_entry({"url": "/", "lastmod": date(2019, 1, 2)}, hostname).lastmod == "2019-01-02T00:00:00.000Z"
    moment = datetime(2019, 1, 3, 8, 30, 15, 250000, tzinfo=timezone.utc)
    assert normalize_entry({"url": "/", "lastmod": moment}, hostname).lastmod == "2019-01-03T08:30:15.250Z"
    iso = normalize_entry({"url": "/", "lastmodISO": "2019-01-01T12:30:00+02:00"}, hostname)
    assert iso.lastmod == "2019-01-01T10:30:00.000Z"


def test_lastmod_precedence(hostname: str) -> None:
    seen = []

    def reader(path) -> float:
        seen.append(str(path))
        return 86400.0

    entry = normalize_entry(
        {"url": "/", "lastmodfile": "docs/page.md", "lastmodISO": "2020-01-01", "lastmod": "2021-01-01"},
        hostname,
        mtime_reader=reader,
    )
    assert entry.lastmod == "1970-01-02T00:00:00.000Z"
    assert seen == ["docs/page.md"]

    entry = normalize_entry({"url": "/", "lastmodISO": "2020-01-01", "lastmod": "2021-01-01"}, hostname)
    assert entry.lastmod == "2020-01-01T00:00:00.000Z"


def test_invalid_lastmod_fails(hostname: str) -> None:
    with pytest.raises(InvalidDateError):
        normalize_entry({"url": "/", "lastmod": "last tuesday"}, hostname)


def test_changefreq_is_enumerated(hostname: str) -> None:
    assert normalize_entry({"url": "/", "changefreq": "daily"}, hostname).changefreq is ChangeFreq.DAILY
    assert normalize_entry({"url": "/", "changefreq": "sometimes"}, hostname).changefreq == "sometimes"


def test_extension_fields_pass_through(hostname: str) -> None:
    entry = normalize_entry(
        {"url": "/", "customField": {"a": 1}, "priority": 0.4, "extensions": "ignored"},
        hostname,
    )
    assert entry.extensions == {"customField": {"a": 1}}
    assert entry.priority == 0.4


def test_protocol_extensions_are_resolved(hostname: str) -> None:
    entry = normalize_entry(
        {"url": "/story", "androidLink": "android-app://com.test/page", "ampLink": "/amp/story", "mobile": True},
        hostname,
    )
    assert entry.android_link == "android-app://com.test/page"
    assert entry.amp_link == "http://test.com/amp/story"
    assert entry.mobile is True


def test_bad_field_type_is_input_error(hostname: str) -> None:
    with pytest.raises(InvalidFieldValueError) as excinfo:
        normalize_entry({"url": "/", "priority": "high"}, hostname)
    assert excinfo.value.field == "priority"


def test_normalize_entries_last_write_wins(hostname: str) -> None:
    entries = normalize_entries(["/a", "/b", {"url": "/a", "priority": 0.3}], hostname)
    assert list(entries) == ["http://test.com/a", "http://test.com/b"]
    assert entries["http://test.com/a"].priority == 0.3
