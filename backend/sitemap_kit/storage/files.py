"""File-system destination for partitioned sitemaps."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sitemap_kit.core.errors import UndefinedTargetFolderError
from sitemap_kit.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class SitemapFileTarget:
    """Where chunk and index files are written and what they are called."""

    target_folder: Path | None
    sitemap_name: str = "sitemap"
    gzip: bool = False

    def ensure_ready(self) -> Path:
        """Return the target folder or raise if it is missing or not a directory."""
        if self.target_folder is None:
            raise UndefinedTargetFolderError(None)
        folder = Path(self.target_folder).expanduser()
        if not folder.is_dir():
            raise UndefinedTargetFolderError(folder)
        return folder

    def chunk_filename(self, index: int) -> str:
        suffix = ".xml.gz" if self.gzip else ".xml"
        return f"{self.sitemap_name}-{index}{suffix}"

    def index_filename(self) -> str:
        return f"{self.sitemap_name}-index.xml"

    def path_for(self, filename: str) -> Path:
        return self.ensure_ready() / filename

    def write(self, filename: str, payload: bytes) -> Path:
        path = self.path_for(filename)
        path.write_bytes(payload)
        logger.debug("Wrote %s bytes to %s", len(payload), path)
        return path


__all__ = ["SitemapFileTarget"]
