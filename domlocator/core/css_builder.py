from __future__ import annotations

import logging

from lxml.html import HtmlElement

from domlocator.core.deep_query import query_all_deep
from domlocator.core.document import Document
from domlocator.core.exceptions import InvalidLocatorError
from domlocator.core.metadata import StrategyContext
from domlocator.utils.css import attribute_selector, class_selector, escape_identifier
from domlocator.utils.dom_extract import class_list, has_same_tag_siblings, same_tag_index, tag_name

logger = logging.getLogger(__name__)


def is_unique(selector: str, document: Document) -> bool:
    try:
        return len(query_all_deep(selector, document)) == 1
    except InvalidLocatorError as exc:
        logger.debug("Uniqueness check rejected %s: %s", selector, exc)
        return False


def has_digit(value: str) -> bool:
    return any(char.isdigit() for char in value)


def generate_css_selector(element: HtmlElement, context: StrategyContext) -> str:
    """Builds a CSS selector for ``element``.

    Candidates are tried in priority order and each is accepted only when it
    matches exactly one element across the whole document:

    1. ``#id``
    2. ``[attr='value']`` for the configured attribute list (``input[name=...]``
       as a second try for inputs)
    3. ``.class.list`` then ``tag.class.list``
    4. a ``>``-joined ancestor path, built upwards until it is unique or the
       walk reaches ``<body>``
    """

    document, settings = context.document, context.settings
    tag = tag_name(element)

    element_id = element.get("id") or ""
    if element_id and not (settings.exclude_numbers and has_digit(element_id)):
        selector = "#" + escape_identifier(element_id)
        if is_unique(selector, document):
            return selector

    for attribute in settings.css_attributes:
        value = element.get(attribute)
        if not value:
            continue
        selector = attribute_selector(attribute, value)
        if is_unique(selector, document):
            return selector
        if tag == "input" and attribute == "name":
            selector = attribute_selector(attribute, value, tag)
            if is_unique(selector, document):
                return selector

    classes = class_selector(class_list(element, settings.highlight_class))
    if classes:
        if is_unique(classes, document):
            return classes
        if is_unique(tag + classes, document):
            return tag + classes

    return ancestor_path(element, context)


def ancestor_path(element: HtmlElement, context: StrategyContext) -> str:
    document, settings = context.document, context.settings
    path: list[str] = []
    current: HtmlElement | None = element
    while current is not None:
        tag = tag_name(current)
        current_id = current.get("id")
        if current_id:
            path.insert(0, f"{tag}#{escape_identifier(current_id)}")
        else:
            segment = tag
            if has_same_tag_siblings(current):
                segment += f":nth-of-type({same_tag_index(current)})"
            segment += class_selector(class_list(current, settings.highlight_class))
            path.insert(0, segment)
        if is_unique(" > ".join(path), document):
            break

        current = document.parent(current)
        if current is not None and tag_name(current) == "body":
            path.insert(0, "body")
            break
    return " > ".join(path)
