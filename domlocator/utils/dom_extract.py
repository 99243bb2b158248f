from __future__ import annotations

from lxml import etree
from lxml.html import HtmlElement

from domlocator.config.constants import DEFAULT_HIGHLIGHT_CLASS, FINGERPRINT_ATTRIBUTES, FINGERPRINT_TEXT_LENGTH

_STRING_CONTENT = etree.XPath("string()")


def tag_name(element: HtmlElement | None) -> str:
    if element is None or not isinstance(element.tag, str):
        return ""
    return element.tag.lower()


def element_text(element: HtmlElement) -> str:
    """Trimmed text content of the element and its light-DOM descendants."""

    return str(_STRING_CONTENT(element)).strip()


def fingerprint_text(element: HtmlElement) -> str:
    return element_text(element)[:FINGERPRINT_TEXT_LENGTH]


def class_list(element: HtmlElement | None, highlight_class: str = DEFAULT_HIGHLIGHT_CLASS) -> list[str]:
    if element is None:
        return []
    classes: list[str] = []
    for name in (element.get("class") or "").split():
        if name != highlight_class and name not in classes:
            classes.append(name)
    return classes


def previous_element(element: HtmlElement) -> HtmlElement | None:
    for sibling in element.itersiblings(preceding=True):
        if isinstance(sibling.tag, str):
            return sibling
    return None


def same_tag_index(element: HtmlElement) -> int:
    """1-based position of the element among preceding siblings with the same tag."""

    index = 1
    for sibling in element.itersiblings(preceding=True):
        if sibling.tag == element.tag:
            index += 1
    return index


def has_same_tag_siblings(element: HtmlElement) -> bool:
    parent = element.getparent()
    if parent is None:
        return False
    return any(child is not element and child.tag == element.tag for child in parent)


def important_attributes(element: HtmlElement) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for name in FINGERPRINT_ATTRIBUTES:
        value = element.get(name)
        if value:
            attributes[name] = value
    return attributes
