"""
Static page loader backed by requests and BeautifulSoup.

Answers the same DOM queries as the browser loader against the raw server
HTML. Scripts are not executed, so client-rendered content is invisible.
"""

from __future__ import annotations

import asyncio
import logging
import time
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from page_analyzer.config import StaticFetchSettings
from page_analyzer.domain.analysis import ElementDescriptor
from page_analyzer.errors import NavigationError
from page_analyzer.extraction.base import PageHandle, PageLoader
from page_analyzer.logging_utils import log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class StaticPageHandle(PageHandle):
    """
    Parsed HTML document queried with soupsieve CSS selectors.
    """

    def __init__(self, *, url: str, soup: BeautifulSoup) -> None:
        self.url = url
        self.soup = soup
        self._base_url = self._resolve_base_url(url, soup)

    @classmethod
    def from_html(cls, html: str, *, url: str = "about:blank") -> "StaticPageHandle":
        return cls(url=url, soup=BeautifulSoup(html, "html.parser"))

    async def query_all(self, selector: str) -> list[ElementDescriptor]:
        return [self._describe(node) for node in self.soup.select(selector)]

    def _describe(self, node: Tag) -> ElementDescriptor:
        class_name = self._class_attribute(node)
        element_id = node.get("id")
        input_type = node.get("type")
        return ElementDescriptor(
            tag=node.name,
            element_id=element_id if isinstance(element_id, str) and element_id else None,
            class_list=ElementDescriptor.split_classes(class_name),
            class_name=class_name,
            href=self._resolve_attribute(node, "href"),
            text=node.get_text().strip(),
            src=self._resolve_attribute(node, "src"),
            alt=str(node.get("alt") or ""),
            outer_html=str(node),
            input_type=input_type.strip().lower() if isinstance(input_type, str) and input_type.strip() else None,
        )

    def _resolve_attribute(self, node: Tag, name: str) -> str:
        raw_value = node.get(name)
        if raw_value is None:
            return ""
        return urljoin(self._base_url, str(raw_value).strip())

    @staticmethod
    def _class_attribute(node: Tag) -> str:
        raw_value = node.get("class")
        if raw_value is None:
            return ""
        if isinstance(raw_value, str):
            return raw_value
        return " ".join(raw_value)

    @staticmethod
    def _resolve_base_url(url: str, soup: BeautifulSoup) -> str:
        base_tag = soup.find("base", href=True)
        if base_tag is None:
            return url
        return urljoin(url, str(base_tag["href"]).strip())


class StaticPageLoader(PageLoader):
    """
    Fetches HTML over HTTP with retry on transient failures.
    """

    def __init__(
        self,
        *,
        settings: StaticFetchSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._headers = {"User-Agent": settings.user_agent}

    async def load(self, url: str) -> PageHandle:
        response = await asyncio.to_thread(self._request_with_retry, url)
        soup = BeautifulSoup(response.text, "html.parser")
        return StaticPageHandle(url=response.url or url, soup=soup)

    async def release(self, handle: PageHandle) -> None:
        """
        Parsed documents hold no external resources.
        """

    def _request_with_retry(self, url: str) -> requests.Response:
        last_error: Exception | None = None

        for attempt in range(self._settings.max_retries + 1):
            try:
                response = self._session.get(
                    url,
                    headers=self._headers,
                    timeout=self._settings.timeout_seconds,
                    allow_redirects=True,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable status={response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as exc:
                last_error = exc
                if isinstance(exc, requests.HTTPError):
                    status_code = exc.response.status_code if exc.response is not None else None
                    if status_code not in RETRYABLE_STATUS_CODES:
                        raise NavigationError(f"Failed to load {url}: {exc}") from exc
            except requests.RequestException as exc:
                raise NavigationError(f"Failed to load {url}: {exc}") from exc

            if attempt >= self._settings.max_retries:
                break

            backoff_seconds = self._settings.backoff_initial_seconds * (
                self._settings.backoff_multiplier**attempt
            )
            log_event(
                logger,
                logging.WARNING,
                "static_fetch_retry",
                url=url,
                attempt=attempt + 1,
                backoff_seconds=backoff_seconds,
                error=str(last_error),
            )
            time.sleep(backoff_seconds)

        raise NavigationError(f"Failed to load {url} after retries: {last_error}")
