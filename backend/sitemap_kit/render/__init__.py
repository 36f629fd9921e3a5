"""Sitemap rendering components."""

from .document import Sitemap, create_sitemap
from .index import SitemapIndexResult, SitemapIndexWriter, build_sitemap_index, create_sitemap_index
from .stream import SitemapStream, SitemapTransform, iter_sitemap

__all__ = [
    "Sitemap",
    "create_sitemap",
    "SitemapStream",
    "SitemapTransform",
    "iter_sitemap",
    "SitemapIndexResult",
    "SitemapIndexWriter",
    "build_sitemap_index",
    "create_sitemap_index",
]
