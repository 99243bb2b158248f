from __future__ import annotations

import logging
from typing import Iterator

from cssselect import SelectorError
from lxml import etree
from lxml.cssselect import CSSSelector
from lxml.html import HtmlElement

from domlocator.core.document import Document, Scope
from domlocator.core.exceptions import InvalidLocatorError

logger = logging.getLogger(__name__)


def iter_scopes(document: Document, start: Scope | None = None) -> Iterator[Scope]:
    """Walks the scope tree depth-first; frames that could not be read have no children."""

    stack = [start or document.scope]
    while stack:
        scope = stack.pop()
        yield scope
        stack.extend(reversed(document.child_scopes(scope)))


def iter_elements_deep(document: Document) -> Iterator[HtmlElement]:
    for scope in iter_scopes(document):
        yield from document.walk(scope)


def compile_css(selector: str) -> CSSSelector:
    if not selector or not selector.strip():
        raise InvalidLocatorError("Empty CSS selector")
    try:
        return CSSSelector(selector, translator="html")
    except (SelectorError, etree.XPathError, ValueError) as exc:
        raise InvalidLocatorError(f"Invalid CSS selector {selector!r}: {exc}") from exc


def compile_xpath(expression: str) -> etree.XPath:
    if not expression or not expression.strip():
        raise InvalidLocatorError("Empty XPath expression")
    try:
        return etree.XPath(expression)
    except (etree.XPathError, ValueError) as exc:
        raise InvalidLocatorError(f"Invalid XPath {expression!r}: {exc}") from exc


def query_all_deep(selector: str, document: Document) -> list[HtmlElement]:
    compiled = compile_css(selector)
    results: list[HtmlElement] = []
    for scope in iter_scopes(document):
        try:
            matches = compiled(scope.root)
        except (etree.XPathError, ValueError) as exc:
            raise InvalidLocatorError(f"Invalid CSS selector {selector!r}: {exc}") from exc
        results.extend(_accept(matches, scope, document))
    return results


def evaluate_xpath_deep(expression: str, document: Document) -> list[HtmlElement]:
    compiled = compile_xpath(expression)
    results: list[HtmlElement] = []
    for scope in iter_scopes(document):
        try:
            matches = compiled(scope.xpath_context())
        except (etree.XPathError, ValueError) as exc:
            raise InvalidLocatorError(f"Invalid XPath {expression!r}: {exc}") from exc
        if not isinstance(matches, list):
            raise InvalidLocatorError(f"XPath {expression!r} does not select nodes")
        results.extend(_accept(matches, scope, document))
    return results


def get_element_by_id_deep(element_id: str, document: Document) -> HtmlElement | None:
    for element in iter_elements_deep(document):
        if element.get("id") == element_id:
            return element
    return None


def count_text_matches(query: str, document: Document) -> int:
    """Counts text nodes containing ``query`` (case-insensitive) across all scopes."""

    needle = query.lower()
    count = 0
    for scope in iter_scopes(document):
        if not scope.includes_root:
            count += _count_own_text(scope.root, needle)
        for element in document.walk(scope):
            if element.text and needle in element.text.lower():
                count += 1
            for child in element:
                if child.tail and needle in child.tail.lower():
                    count += 1
    return count


def _count_own_text(container: HtmlElement, needle: str) -> int:
    """Text held directly by a shadow root, which ``Document.walk`` never yields."""

    count = 1 if container.text and needle in container.text.lower() else 0
    return count + sum(1 for child in container if child.tail and needle in child.tail.lower())


def _accept(matches, scope: Scope, document: Document) -> Iterator[HtmlElement]:
    for node in matches:
        if not isinstance(node, etree._Element) or not isinstance(node.tag, str):
            continue
        if node is scope.root and not scope.includes_root:
            continue
        if document.is_owned(node):
            continue
        yield node
