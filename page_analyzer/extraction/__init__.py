"""
Page loading and extraction exports.
"""

from page_analyzer.extraction.base import PageHandle, PageLoader
from page_analyzer.extraction.extractor import PageExtractor
from page_analyzer.extraction.locators import build_locator, generate_css, generate_xpath
from page_analyzer.extraction.static_loader import StaticPageHandle, StaticPageLoader

__all__ = [
    "PageExtractor",
    "PageHandle",
    "PageLoader",
    "StaticPageHandle",
    "StaticPageLoader",
    "build_locator",
    "generate_css",
    "generate_xpath",
]
