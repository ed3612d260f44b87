"""
Page loader interfaces consumed by the page extractor and orchestrator.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from page_analyzer.domain.analysis import ElementDescriptor
from page_analyzer.logging_utils import describe_error, log_event

logger = logging.getLogger(__name__)


class PageHandle(ABC):
    """
    A loaded page that answers DOM queries.
    """

    url: str

    @abstractmethod
    async def query_all(self, selector: str) -> list[ElementDescriptor]:
        """
        Return descriptors for every element matching a CSS selector, in document order.
        """


class PageLoader(ABC):
    """
    Capability that renders a URL into a queryable page.

    ``load`` must clean up anything it allocated before raising.
    """

    @abstractmethod
    async def load(self, url: str) -> PageHandle:
        """
        Navigate to the URL and wait for the page to settle.

        Raises NavigationError when the page cannot be loaded.
        """

    @abstractmethod
    async def release(self, handle: PageHandle) -> None:
        """
        Tear down every resource associated with the handle.
        """

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[PageHandle]:
        """
        Load a page for the duration of the block and always release it.
        """

        handle = await self.load(url)
        log_event(logger, logging.INFO, "page_loaded", url=url, final_url=handle.url)
        try:
            yield handle
        finally:
            try:
                await self.release(handle)
                log_event(logger, logging.DEBUG, "page_released", url=url)
            except Exception as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "page_release_failed",
                    url=url,
                    error=describe_error(exc),
                )
