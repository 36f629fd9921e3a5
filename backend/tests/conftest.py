"""Test fixtures for sitemap_kit."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def reset_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset cached settings and environment between tests."""
    for key in list(os.environ):
        if key.startswith("SITEMAP_"):
            monkeypatch.delenv(key, raising=False)

    from sitemap_kit.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeClock:
    """Millisecond clock the tests advance by hand."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def hostname() -> str:
    return "http://test.com"
