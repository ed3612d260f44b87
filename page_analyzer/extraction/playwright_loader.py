"""
Headless Chromium page loader built on Playwright.

Each loaded page owns its own Playwright driver and browser process so that
concurrent jobs never share browser state.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from page_analyzer.config import BrowserSettings
from page_analyzer.domain.analysis import ElementDescriptor
from page_analyzer.errors import NavigationError
from page_analyzer.extraction.base import PageHandle, PageLoader
from page_analyzer.logging_utils import describe_error, log_event

logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

DESCRIBE_ELEMENTS_JS = """
(selector) => {
    const resolve = (el, name) => {
        const raw = el.getAttribute(name);
        if (raw === null) {
            return '';
        }
        try {
            return new URL(raw, document.baseURI).href;
        } catch (e) {
            return raw;
        }
    };
    return Array.from(document.querySelectorAll(selector)).map((el) => ({
        tag: el.tagName.toLowerCase(),
        id: el.getAttribute('id') || null,
        className: el.getAttribute('class') || '',
        href: typeof el.href === 'string' ? el.href : resolve(el, 'href'),
        text: (el.textContent || '').trim(),
        src: typeof el.src === 'string' ? el.src : resolve(el, 'src'),
        alt: typeof el.alt === 'string' ? el.alt : (el.getAttribute('alt') || ''),
        outerHTML: el.outerHTML,
        type: el.getAttribute('type'),
    }));
}
"""


def descriptor_from_payload(payload: dict[str, Any]) -> ElementDescriptor:
    """
    Convert one in-page element record into an ElementDescriptor.
    """

    class_name = str(payload.get("className") or "")
    raw_type = payload.get("type")
    input_type = str(raw_type).strip().lower() if raw_type else ""
    return ElementDescriptor(
        tag=str(payload.get("tag") or "").lower(),
        element_id=payload.get("id") or None,
        class_list=ElementDescriptor.split_classes(class_name),
        class_name=class_name,
        href=str(payload.get("href") or ""),
        text=str(payload.get("text") or "").strip(),
        src=str(payload.get("src") or ""),
        alt=str(payload.get("alt") or ""),
        outer_html=str(payload.get("outerHTML") or ""),
        input_type=input_type or None,
    )


class PlaywrightPageHandle(PageHandle):
    def __init__(self, *, playwright: Playwright, browser: Browser, page: Page) -> None:
        self._playwright = playwright
        self._browser = browser
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def query_all(self, selector: str) -> list[ElementDescriptor]:
        records = await self._page.evaluate(DESCRIBE_ELEMENTS_JS, selector)
        return [descriptor_from_payload(record) for record in records]

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightPageLoader(PageLoader):
    """
    Launches Chromium, navigates and waits for the configured load state.
    """

    def __init__(self, *, settings: BrowserSettings) -> None:
        self._settings = settings

    async def load(self, url: str) -> PageHandle:
        playwright = await async_playwright().start()
        browser: Browser | None = None
        try:
            browser = await playwright.chromium.launch(
                headless=self._settings.headless,
                args=BROWSER_ARGS,
            )
            page = await browser.new_page()
            await page.goto(
                url,
                wait_until=self._settings.wait_until,
                timeout=self._settings.page_load_timeout_ms,
            )
        except PlaywrightError as exc:
            await self._shutdown_quietly(playwright, browser, url)
            raise NavigationError(f"Failed to load {url}: {exc.message}") from exc
        except BaseException:
            await self._shutdown_quietly(playwright, browser, url)
            raise
        return PlaywrightPageHandle(playwright=playwright, browser=browser, page=page)

    async def release(self, handle: PageHandle) -> None:
        if isinstance(handle, PlaywrightPageHandle):
            await handle.close()

    @staticmethod
    async def _shutdown_quietly(
        playwright: Playwright,
        browser: Browser | None,
        url: str,
    ) -> None:
        try:
            if browser is not None:
                await browser.close()
            await playwright.stop()
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "browser_shutdown_failed",
                url=url,
                error=describe_error(exc),
            )
