"""Gzip compression helpers."""

from __future__ import annotations

import gzip
from typing import Callable, Optional

CompressCallback = Callable[[Optional[BaseException], Optional[bytes]], None]


def gzip_bytes(data: bytes) -> bytes:
    """Return ``data`` gzip-compressed."""
    return gzip.compress(data)


def gzip_with_callback(data: bytes, callback: CompressCallback) -> None:
    """Compress ``data`` and report the outcome as ``callback(error, result)``."""
    try:
        compressed = gzip_bytes(data)
    except Exception as exc:  # noqa: BLE001
        callback(exc, None)
        return
    callback(None, compressed)


__all__ = ["CompressCallback", "gzip_bytes", "gzip_with_callback"]
