from __future__ import annotations

import logging

from lxml import etree
from lxml.html import HtmlElement

from domlocator.core.deep_query import count_text_matches, evaluate_xpath_deep, iter_elements_deep, query_all_deep
from domlocator.core.document import Document
from domlocator.core.exceptions import InvalidLocatorError
from domlocator.utils.css import attribute_selector, escape_identifier
from domlocator.utils.dom_extract import element_text, tag_name
from domlocator.utils.selectors import XPATH_PREFIXES, is_potential_code, looks_like_xpath, parse_js_path, unwrap_code

logger = logging.getLogger(__name__)

AUTO = "auto"


def resolve_elements(locator: str, document: Document, strategy: str | None = None) -> list[HtmlElement]:
    """Returns the elements ``locator`` selects.

    With a ``strategy`` the locator is evaluated the way that strategy's output
    is meant to be used; without one the engine is guessed: CSS first, XPath when
    CSS finds nothing or the text reads like XPath. Framework calls such as
    ``cy.get('#login')`` are unwrapped first.

    Raises:
        InvalidLocatorError: the locator cannot be evaluated.
    """

    locator = locator.strip()
    if not locator:
        return []
    if strategy and strategy != AUTO:
        return _resolve_explicit(locator, document, strategy)
    return _resolve_discovery(locator, document)


def count_matches(locator: str | None, document: Document, strategy: str | None = None) -> int:
    """Live match count for ``locator``; evaluation failures count as zero."""

    if not locator or not locator.strip():
        return 0
    try:
        matches = len(resolve_elements(locator, document, strategy))
        if matches or (strategy and strategy != AUTO):
            return matches
        text = locator.strip()
        if len(text) > 2:
            return count_text_matches(text, document)
        return 0
    except (InvalidLocatorError, etree.LxmlError, ValueError) as exc:
        logger.debug("Counting %r as zero matches: %s", locator, exc)
        return 0


def _resolve_explicit(locator: str, document: Document, strategy: str) -> list[HtmlElement]:
    key = strategy.lower()
    if "xpath" in key:
        return evaluate_xpath_deep(locator, document)
    if key == "linktext":
        return [element for element in _anchors(document) if element_text(element) == locator]
    if key == "partiallinktext":
        return [element for element in _anchors(document) if locator in element_text(element)]
    if key == "jspath":
        parsed = parse_js_path(locator)
        if parsed is None:
            raise InvalidLocatorError(f"Unsupported JS path {locator!r}")
        selector, select_all = parsed
        matches = query_all_deep(selector, document)
        return matches if select_all else matches[:1]
    if key in ("playwright", "cypress"):
        unwrapped = unwrap_code(locator)
        if unwrapped is None:
            raise InvalidLocatorError(f"Cannot unwrap {locator!r}")
        inner, kind = unwrapped
        return resolve_elements(inner, document, kind)
    if key == "id" and not locator.startswith("#"):
        locator = "#" + escape_identifier(locator)
    elif key == "classname" and not locator.startswith("."):
        locator = "".join("." + escape_identifier(name) for name in locator.split())
    elif key == "name" and not locator.startswith("["):
        locator = attribute_selector("name", locator)
    return query_all_deep(locator, document)


def _resolve_discovery(locator: str, document: Document) -> list[HtmlElement]:
    xpath_like = looks_like_xpath(locator)
    if not locator.startswith(XPATH_PREFIXES) and is_potential_code(locator):
        unwrapped = unwrap_code(locator)
        if unwrapped is not None:
            inner, kind = unwrapped
            if kind != AUTO:
                return resolve_elements(inner, document, kind)
            locator = inner
            xpath_like = looks_like_xpath(locator)

    css_matches: list[HtmlElement] = []
    if not xpath_like:
        try:
            css_matches = query_all_deep(locator, document)
        except InvalidLocatorError as exc:
            logger.debug("Not a CSS selector %r: %s", locator, exc)

    xpath_matches: list[HtmlElement] = []
    if not css_matches or xpath_like:
        try:
            xpath_matches = evaluate_xpath_deep(locator, document)
        except InvalidLocatorError as exc:
            logger.debug("Not an XPath expression %r: %s", locator, exc)

    return xpath_matches if len(xpath_matches) > len(css_matches) else css_matches


def _anchors(document: Document) -> list[HtmlElement]:
    return [element for element in iter_elements_deep(document) if tag_name(element) == "a"]
