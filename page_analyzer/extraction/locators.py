"""
CSS and XPath locator generation for extracted elements.

Locators are best-effort hints. Identifier and class values are substituted
literally without escaping, and the tag-name fallback may match several
elements (or none) when reused on a later page state.
"""

from __future__ import annotations

from page_analyzer.domain.analysis import ElementDescriptor, Locator


def generate_css(descriptor: ElementDescriptor) -> str:
    """
    Build a CSS selector: ``#id``, else ``.class1.class2``, else the tag name.
    """

    if descriptor.element_id:
        return f"#{descriptor.element_id}"
    tokens = [token for token in descriptor.class_list if token]
    if tokens:
        return "." + ".".join(tokens)
    return descriptor.tag.lower()


def generate_xpath(descriptor: ElementDescriptor) -> str:
    """
    Build an XPath expression: id predicate when available, else ``//tag``.
    """

    if descriptor.element_id:
        return f'//*[@id="{descriptor.element_id}"]'
    return f"//{descriptor.tag.lower()}"


def build_locator(descriptor: ElementDescriptor) -> Locator:
    return Locator(
        css=generate_css(descriptor),
        xpath=generate_xpath(descriptor),
    )
