"""
Page extraction passes for links, icons and interactive-element locators.
"""

from __future__ import annotations

import logging
from typing import Any

from page_analyzer.domain.analysis import ElementDescriptor, PageExtraction
from page_analyzer.errors import ExtractionError, NavigationError
from page_analyzer.extraction.base import PageHandle
from page_analyzer.extraction.locators import build_locator
from page_analyzer.logging_utils import log_event

logger = logging.getLogger(__name__)

LINK_SELECTOR = "a"
IMAGE_SELECTOR = "img"
SVG_SELECTOR = "svg"
ICON_CLASS_SELECTOR = '[class*="icon"]'
BUTTON_SELECTOR = 'button, [role="button"]'
INPUT_SELECTOR = "input, textarea, select"
NAVIGATION_SELECTOR = 'nav, [role="navigation"]'


class PageExtractor:
    """
    Runs independent query-and-map passes over one loaded page.
    """

    async def extract(self, page: PageHandle) -> PageExtraction:
        """
        Extract every category from the page.

        Raises ExtractionError for unexpected query failures; NavigationError
        from the page handle propagates unchanged.
        """

        try:
            extraction = PageExtraction(
                links=await self.extract_links(page),
                icons=await self.extract_icons(page),
                buttons=await self.extract_buttons(page),
                inputs=await self.extract_inputs(page),
                navigation=await self.extract_navigation(page),
            )
        except (ExtractionError, NavigationError):
            raise
        except Exception as exc:
            raise ExtractionError(f"Failed to extract {page.url}: {exc}") from exc

        log_event(
            logger,
            logging.INFO,
            "page_extracted",
            url=page.url,
            links=len(extraction.links),
            icons=len(extraction.icons),
            buttons=len(extraction.buttons),
            inputs=len(extraction.inputs),
            navigation=len(extraction.navigation),
        )
        return extraction

    async def extract_links(self, page: PageHandle) -> list[dict[str, Any]]:
        return [
            {"href": element.href, "text": element.text}
            for element in await page.query_all(LINK_SELECTOR)
        ]

    async def extract_icons(self, page: PageHandle) -> list[dict[str, Any]]:
        images = [
            {"type": "image", "src": element.src, "alt": element.alt}
            for element in await page.query_all(IMAGE_SELECTOR)
        ]
        svgs = [
            {"type": "svg", "content": element.outer_html}
            for element in await page.query_all(SVG_SELECTOR)
        ]
        icon_elements = [
            {"type": "icon", "class": element.class_name}
            for element in await page.query_all(ICON_CLASS_SELECTOR)
        ]
        return [*images, *svgs, *icon_elements]

    async def extract_buttons(self, page: PageHandle) -> list[dict[str, Any]]:
        return [
            {"text": element.text, **self._locator_fields(element)}
            for element in await page.query_all(BUTTON_SELECTOR)
        ]

    async def extract_inputs(self, page: PageHandle) -> list[dict[str, Any]]:
        return [
            {"type": element.input_type or element.tag.lower(), **self._locator_fields(element)}
            for element in await page.query_all(INPUT_SELECTOR)
        ]

    async def extract_navigation(self, page: PageHandle) -> list[dict[str, Any]]:
        return [self._locator_fields(element) for element in await page.query_all(NAVIGATION_SELECTOR)]

    @staticmethod
    def _locator_fields(element: ElementDescriptor) -> dict[str, str]:
        locator = build_locator(element)
        return {"css": locator.css, "xpath": locator.xpath}
