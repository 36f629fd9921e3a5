"""Tests for the in-memory sitemap document."""

from __future__ import annotations

import gzip

import pytest

from sitemap_kit.core.config import Settings
from sitemap_kit.core.errors import ConfigurationError, OutOfRangeError
from sitemap_kit.render.document import Sitemap, create_sitemap

XML_DEF = '<?xml version="1.0" encoding="UTF-8"?>'
URLSET_OPEN = (
    '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'
    ' xmlns:news="http://www.google.com/schemas/sitemap-news/0.9"'
    ' xmlns:xhtml="http://www.w3.org/1999/xhtml"'
    ' xmlns:mobile="http://www.google.com/schemas/sitemap-mobile/1.0"'
    ' xmlns:image="http://www.google.com/schemas/sitemap-image/1.1"'
    ' xmlns:video="http://www.google.com/schemas/sitemap-video/1.1">'
)


def test_simple_document() -> None:
    sitemap = create_sitemap(urls=[{"url": "http://test.com/page-1", "changefreq": "weekly", "priority": 0.3}])
    assert sitemap.to_xml() == (
        XML_DEF
        + URLSET_OPEN
        + "<url><loc>http://test.com/page-1</loc><changefreq>weekly</changefreq><priority>0.3</priority></url>"
        + "</urlset>"
    )


def test_empty_document() -> None:
    assert Sitemap().to_xml() == XML_DEF + URLSET_OPEN + "</urlset>"


def test_custom_namespace_and_stylesheet() -> None:
    sitemap = Sitemap(
        ["http://test.com/"],
        xml_ns='xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"',
        xsl_url="https://test.com/style.xsl",
    )
    assert sitemap.to_xml() == (
        XML_DEF
        + '<?xml-stylesheet type="text/xsl" href="https://test.com/style.xsl"?>'
        + '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + "<url><loc>http://test.com/</loc></url></urlset>"
    )


def test_add_same_url_replaces(hostname: str) -> None:
    sitemap = Sitemap(hostname=hostname)
    assert sitemap.add({"url": "/a", "priority": 0.1}) == 1
    assert sitemap.add("/b") == 2
    assert sitemap.add({"url": "/a", "priority": 0.9}) == 2
    assert sitemap.urls["http://test.com/a"].priority == 0.9
    assert [entry.url for entry in sitemap] == ["http://test.com/a", "http://test.com/b"]


def test_contains_and_delete(hostname: str) -> None:
    sitemap = Sitemap(hostname=hostname)
    sitemap.add("/a")
    assert sitemap.contains("/a")
    assert sitemap.contains({"url": "http://test.com/a"})
    assert "/a" in sitemap
    assert sitemap.delete("/a") is True
    assert not sitemap.contains("/a")
    assert sitemap.delete("/a") is False
    assert len(sitemap) == 0


def test_add_validates_at_requested_level(hostname: str) -> None:
    sitemap = Sitemap(hostname=hostname)
    assert sitemap.add({"url": "/a", "priority": 4}) == 1
    with pytest.raises(OutOfRangeError):
        sitemap.add({"url": "/b", "priority": 4}, level="error")
    assert not sitemap.contains("/b")
    with pytest.raises(OutOfRangeError):
        Sitemap([{"url": "/c", "priority": 4}], hostname=hostname, level="error")


def test_video_rating_round_trip(hostname: str) -> None:
    sitemap = Sitemap(
        [
            {
                "url": "/watch",
                "video": {
                    "thumbnail_loc": "/thumb.jpg",
                    "title": "Grilling",
                    "description": "Steaks & sides",
                    "rating": "4.5",
                },
            }
        ],
        hostname=hostname,
    )
    xml = sitemap.to_xml()
    assert "<video:rating>4.5</video:rating>" in xml
    assert "<video:description>Steaks &amp; sides</video:description>" in xml


def test_video_children_follow_protocol_order(hostname: str) -> None:
    sitemap = Sitemap(
        [
            {
                "url": "/watch",
                "video": {
                    "thumbnail_loc": "/thumb.jpg",
                    "title": "t",
                    "description": "d",
                    "player_loc": "/player",
                    "player_loc:autoplay": "ap=1",
                    "duration": 600,
                    "view_count": 12,
                    "tag": ["a", "b"],
                    "family_friendly": False,
                    "restriction": "IE GB",
                    "restriction:relationship": "allow",
                    "price": 1.99,
                    "price:currency": "EUR",
                    "platform": {"platforms": "web tv", "relationship": "allow"},
                    "live": True,
                    "id": "http://test.com/id/1",
                },
            }
        ],
        hostname=hostname,
    )
    xml = sitemap.to_xml()
    fragments = [
        "<video:thumbnail_loc>http://test.com/thumb.jpg</video:thumbnail_loc>",
        "<video:title>t</video:title>",
        "<video:description>d</video:description>",
        '<video:player_loc autoplay="ap=1">http://test.com/player</video:player_loc>',
        "<video:duration>600</video:duration>",
        "<video:view_count>12</video:view_count>",
        "<video:tag>a</video:tag><video:tag>b</video:tag>",
        "<video:family_friendly>no</video:family_friendly>",
        '<video:restriction relationship="allow">IE GB</video:restriction>',
        '<video:price currency="EUR">1.99</video:price>',
        '<video:platform relationship="allow">web tv</video:platform>',
        "<video:live>yes</video:live>",
        '<video:id type="url">http://test.com/id/1</video:id>',
    ]
    positions = [xml.index(fragment) for fragment in fragments]
    assert positions == sorted(positions)


def test_entry_children_follow_protocol_order(hostname: str) -> None:
    sitemap = Sitemap(
        [
            {
                "url": "/story?a=1&b=2",
                "lastmod": "2019-01-01",
                "changefreq": "daily",
                "priority": 0.8,
                "img": {"url": "/img.jpg", "caption": "Cap"},
                "links": [{"lang": "de", "url": "/de/story"}],
                "mobile": True,
                "ampLink": "/amp/story",
                "news": {
                    "publication": {"name": "Daily", "language": "en"},
                    "publication_date": "2019-01-01",
                    "title": "Story",
                },
            }
        ],
        hostname=hostname,
    )
    xml = sitemap.to_xml()
    fragments = [
        "<loc>http://test.com/story?a=1&amp;b=2</loc>",
        "<lastmod>2019-01-01T00:00:00.000Z</lastmod>",
        "<changefreq>daily</changefreq>",
        "<priority>0.8</priority>",
        "<image:image><image:loc>http://test.com/img.jpg</image:loc><image:caption>Cap</image:caption></image:image>",
        '<xhtml:link rel="alternate" hreflang="de" href="http://test.com/de/story" />',
        "<mobile:mobile />",
        "<news:news><news:publication><news:name>Daily</news:name><news:language>en</news:language>",
        '<xhtml:link rel="amphtml" href="http://test.com/amp/story" />',
    ]
    positions = [xml.index(fragment) for fragment in fragments]
    assert positions == sorted(positions)


def test_lastmodfile_uses_injected_reader(hostname: str) -> None:
    sitemap = Sitemap(hostname=hostname, mtime_reader=lambda path: 86400.0)
    sitemap.add({"url": "/f", "lastmodfile": "content/f.md"})
    assert "<lastmod>1970-01-02T00:00:00.000Z</lastmod>" in sitemap.to_xml()


def test_cache_serves_stale_copy_within_ttl(hostname: str, clock) -> None:
    sitemap = Sitemap(["/a"], hostname=hostname, cache_time=1000, clock=clock)
    first = sitemap.to_xml()
    sitemap.add("/b")
    clock.advance(500)
    assert sitemap.to_xml() == first

    clock.advance(501)
    refreshed = sitemap.to_xml()
    assert refreshed != first
    assert "<loc>http://test.com/b</loc>" in refreshed


def test_cache_is_stable_without_changes(hostname: str, clock) -> None:
    sitemap = Sitemap(["/a"], hostname=hostname, cache_time=1000, clock=clock)
    first = sitemap.to_xml()
    clock.advance(5000)
    assert sitemap.to_xml() == first


def test_clear_cache_forces_rerender(hostname: str, clock) -> None:
    sitemap = Sitemap(["/a"], hostname=hostname, cache_time=60_000, clock=clock)
    sitemap.to_xml()
    sitemap.delete("/a")
    assert sitemap.is_cache_valid()
    sitemap.clear_cache()
    assert "<loc>" not in sitemap.to_xml()


def test_zero_ttl_disables_cache(hostname: str, clock) -> None:
    sitemap = Sitemap(["/a"], hostname=hostname, cache_time=0, clock=clock)
    sitemap.to_xml()
    sitemap.add("/b")
    assert "<loc>http://test.com/b</loc>" in sitemap.to_xml()
    assert not sitemap.is_cache_valid()


def test_pretty_output(hostname: str) -> None:
    xml = Sitemap(["/a"], hostname=hostname).to_xml(pretty=True)
    assert xml.startswith(XML_DEF + "\n<urlset")
    assert "\n  <url>\n    <loc>http://test.com/a</loc>\n  </url>\n" in xml


def test_to_gzip(hostname: str) -> None:
    sitemap = Sitemap(["/a"], hostname=hostname)
    compressed = sitemap.to_gzip()
    assert gzip.decompress(compressed).decode("utf-8") == sitemap.to_xml()

    outcome = []
    assert sitemap.to_gzip(lambda err, data: outcome.append((err, data))) is None
    err, data = outcome[0]
    assert err is None
    assert gzip.decompress(data).decode("utf-8") == sitemap.to_xml()


def test_from_settings() -> None:
    settings = Settings(hostname="https://example.com", xsl_url="https://example.com/s.xsl")
    sitemap = Sitemap.from_settings(settings, ["/about"])
    xml = sitemap.to_xml()
    assert "<loc>https://example.com/about</loc>" in xml
    assert 'href="https://example.com/s.xsl"' in xml


def test_unquoted_namespace_attributes() -> None:
    sitemap = Sitemap(
        ["http://test.com/"],
        xml_ns=(
            "xmlns=http://www.sitemaps.org/schemas/sitemap/0.9"
            " xmlns:image='http://www.google.com/schemas/sitemap-image/1.1'"
        ),
    )
    assert sitemap.to_xml() == (
        XML_DEF
        + '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'
        + ' xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">'
        + "<url><loc>http://test.com/</loc></url></urlset>"
    )


def test_unparsable_namespace_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        Sitemap(["http://test.com/"], xml_ns="sitemaps.org").to_xml()


def test_from_cached_settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("sitemap:\n  hostname: https://example.com\n", encoding="utf-8")
    monkeypatch.setenv("SITEMAP_CONFIG", str(config))
    sitemap = Sitemap.from_settings(urls=["/about"])
    assert "<loc>https://example.com/about</loc>" in sitemap.to_xml()
