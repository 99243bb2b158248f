from __future__ import annotations

import logging
import re

from cssselect import HTMLTranslator, SelectorError
from lxml.html import HtmlElement

from domlocator.config.constants import CONTAINS_ATTRIBUTES, PARTIAL_LINK_TEXT_LENGTH, PREFIX_ATTRIBUTES, TEXT_CONTAINER_TAGS
from domlocator.core.css_builder import generate_css_selector, has_digit
from domlocator.core.deep_query import evaluate_xpath_deep
from domlocator.core.document import Document
from domlocator.core.exceptions import InvalidLocatorError
from domlocator.core.metadata import StrategyContext
from domlocator.utils.dom_extract import class_list, element_text, same_tag_index, tag_name

logger = logging.getLogger(__name__)

_SEGMENT_SEPARATOR = re.compile(r"[-_:]")
_TRANSLATOR = HTMLTranslator()


def xpath_literal(value: str) -> str:
    """Quotes ``value`` for XPath 1.0, falling back to ``concat()`` when it holds both quote kinds."""

    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = [f"'{part}'" for part in value.split("'")]
    return "concat(" + ", \"'\", ".join(parts) + ")"


def is_unique_xpath(expression: str, document: Document) -> bool:
    try:
        return len(evaluate_xpath_deep(expression, document)) == 1
    except InvalidLocatorError as exc:
        logger.debug("Uniqueness check rejected %s: %s", expression, exc)
        return False


def normalized_text(element: HtmlElement) -> str:
    return " ".join(element_text(element).split())


def _usable_id(element: HtmlElement, context: StrategyContext) -> str:
    element_id = element.get("id") or ""
    if context.settings.exclude_numbers and has_digit(element_id):
        return ""
    return element_id


def _attribute_predicate(element: HtmlElement, context: StrategyContext) -> str | None:
    element_id = _usable_id(element, context)
    if element_id:
        return f"//*[@id={xpath_literal(element_id)}]"
    for attribute in context.settings.xpath_attributes:
        value = element.get(attribute)
        if value:
            return f"//*[@{attribute}={xpath_literal(value)}]"
    return None


def relative_xpath(element: HtmlElement, context: StrategyContext) -> str:
    expression = _attribute_predicate(element, context)
    if expression:
        return expression

    tag = tag_name(element)
    settings = context.settings
    if tag in TEXT_CONTAINER_TAGS:
        text = normalized_text(element)
        if settings.text_match_min < len(text) < settings.text_match_max:
            return f"//{tag}[normalize-space()={xpath_literal(text)}]"
    return f"//{tag}"


def attribute_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    return _attribute_predicate(element, context)


def contains_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    text = element_text(element)
    if text and len(text) < context.settings.text_match_max:
        return f"//*[contains(text(),{xpath_literal(text)})]"

    for attribute in CONTAINS_ATTRIBUTES:
        value = element.get(attribute)
        if not value:
            continue
        if attribute == "class":
            classes = class_list(element, context.settings.highlight_class)
            if classes:
                return f"//*[contains(@class,{xpath_literal(classes[0])})]"
            continue
        return f"//*[contains(@{attribute},{xpath_literal(value)})]"
    return None


def indexed_xpath(element: HtmlElement, context: StrategyContext) -> str:
    return f"({relative_xpath(element, context)})[{same_tag_index(element)}]"


def link_text_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    if tag_name(element) != "a":
        return None
    text = normalized_text(element)
    if not text:
        return None
    return f"//a[normalize-space()={xpath_literal(text)}]"


def partial_link_text_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    if tag_name(element) != "a":
        return None
    text = normalized_text(element)[:PARTIAL_LINK_TEXT_LENGTH]
    if not text:
        return None
    return f"//a[contains(normalize-space(),{xpath_literal(text)})]"


def css_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    selector = generate_css_selector(element, context)
    try:
        return _TRANSLATOR.css_to_xpath(selector, prefix="//")
    except SelectorError as exc:
        logger.debug("Cannot translate %s to XPath: %s", selector, exc)
        return None


def absolute_xpath(element: HtmlElement, context: StrategyContext) -> str:
    segments: list[str] = []
    current: HtmlElement | None = element
    while current is not None:
        segments.insert(0, f"/{tag_name(current)}[{same_tag_index(current)}]")
        current = context.document.parent(current)
    return "".join(segments)


def stable_prefix(value: str) -> str | None:
    """Returns the part of ``value`` before a generated tail such as ``-482910``.

    The tail is the last ``-``/``_``/``:`` separated segment and counts as
    generated when it holds a digit or is longer than 8 characters.
    """

    separators = list(_SEGMENT_SEPARATOR.finditer(value))
    if not separators:
        return None
    cut = separators[-1].end()
    tail = value[cut:]
    prefix = value[:cut]
    if not prefix.strip("-_:"):
        return None
    if has_digit(tail) or len(tail) > 8:
        return prefix
    return None


def starts_with_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    tag = tag_name(element)
    for attribute in PREFIX_ATTRIBUTES:
        value = element.get(attribute)
        if not value:
            continue
        prefix = stable_prefix(value)
        if prefix:
            expression = f"//{tag}[starts-with(@{attribute},{xpath_literal(prefix)})]"
            if is_unique_xpath(expression, context.document):
                return expression

    for attribute in PREFIX_ATTRIBUTES:
        value = element.get(attribute) or ""
        stripped = value.rstrip("0123456789")
        if stripped and stripped != value:
            return f"//{tag}[starts-with(@{attribute},{xpath_literal(stripped)})]"
    return None


def or_xpath(element: HtmlElement, context: StrategyContext) -> str | None:
    """Combines the two strongest signals so either one surviving a re-render still matches."""

    settings = context.settings
    conditions: list[str] = []
    if element.get("id"):
        conditions.append(f"@id={xpath_literal(element.get('id'))}")
    if element.get("name"):
        conditions.append(f"@name={xpath_literal(element.get('name'))}")
    text = normalized_text(element)
    if settings.text_match_min < len(text) < settings.text_match_max:
        conditions.append(f"normalize-space()={xpath_literal(text)}")
    classes = class_list(element, settings.highlight_class)
    if classes:
        conditions.append(f"contains(@class,{xpath_literal(classes[0])})")
    if len(conditions) < 2:
        return None
    return f"//{tag_name(element)}[{conditions[0]} or {conditions[1]}]"


def axes_xpath(anchor: HtmlElement, target: HtmlElement, context: StrategyContext) -> str | None:
    """Describes ``target`` relative to ``anchor`` along an XPath axis."""

    if anchor is target:
        return "self::*"
    document = context.document
    if document.scope_of(anchor) is not document.scope_of(target):
        return None

    if any(node is anchor for node in target.iterancestors()):
        axis = "descendant"
    elif any(node is target for node in anchor.iterancestors()):
        axis = "ancestor"
    else:
        siblings = anchor.getparent() is target.getparent()
        if _follows(anchor, target):
            axis = "following-sibling" if siblings else "following"
        else:
            axis = "preceding-sibling" if siblings else "preceding"

    predicate = ""
    target_id = target.get("id")
    text = normalized_text(target)
    classes = class_list(target, context.settings.highlight_class)
    if target_id:
        predicate = f"[@id={xpath_literal(target_id)}]"
    elif text and len(text) < context.settings.text_match_max:
        predicate = f"[normalize-space()={xpath_literal(text)}]"
    elif classes:
        predicate = f"[contains(@class,{xpath_literal(classes[0])})]"

    return f"{relative_xpath(anchor, context)}/{axis}::{tag_name(target)}{predicate}"


def _follows(anchor: HtmlElement, target: HtmlElement) -> bool:
    root = anchor.getroottree().getroot()
    for node in root.iter():
        if node is anchor:
            return True
        if node is target:
            return False
    return False
