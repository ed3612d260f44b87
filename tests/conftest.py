from __future__ import annotations

import asyncio

import pytest

from page_analyzer.errors import NavigationError
from page_analyzer.extraction.base import PageHandle, PageLoader
from page_analyzer.extraction.static_loader import StaticPageHandle


class FakePageLoader(PageLoader):
    """
    Serves inline HTML per URL; unknown URLs fail like an unreachable host.
    """

    def __init__(self, pages: dict[str, str], *, gate: asyncio.Event | None = None) -> None:
        self.pages = pages
        self.gate = gate
        self.loaded: list[str] = []
        self.released: list[str] = []

    async def load(self, url: str) -> PageHandle:
        if self.gate is not None:
            await self.gate.wait()
        if url not in self.pages:
            raise NavigationError(f"Failed to load {url}: net::ERR_NAME_NOT_RESOLVED")
        self.loaded.append(url)
        return StaticPageHandle.from_html(self.pages[url], url=url)

    async def release(self, handle: PageHandle) -> None:
        self.released.append(handle.url)


@pytest.fixture()
def make_loader():
    """Factory for fake page loaders backed by inline HTML."""

    def _make(pages: dict[str, str], *, gate: asyncio.Event | None = None) -> FakePageLoader:
        return FakePageLoader(pages, gate=gate)

    return _make
