from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from lxml.html import HtmlElement

from domlocator.config.constants import PARTIAL_LINK_TEXT_LENGTH, StrategyKey
from domlocator.core import xpath_builder
from domlocator.core.css_builder import generate_css_selector
from domlocator.core.metadata import StrategyContext
from domlocator.utils.css import attribute_selector, class_selector, escape_identifier, js_string
from domlocator.utils.dom_extract import class_list, element_text, tag_name

StrategyFunction = Callable[[HtmlElement, StrategyContext], "str | None"]


@dataclass(frozen=True, slots=True)
class StrategySpec:
    key: StrategyKey
    display_name: str
    build: StrategyFunction
    feature: str | None


def id_locator(element: HtmlElement, context: StrategyContext) -> str | None:
    element_id = element.get("id")
    return "#" + escape_identifier(element_id) if element_id else None


def name_locator(element: HtmlElement, context: StrategyContext) -> str | None:
    name = element.get("name")
    return attribute_selector("name", name) if name else None


def class_name_locator(element: HtmlElement, context: StrategyContext) -> str | None:
    return class_selector(class_list(element, context.settings.highlight_class)) or None


def tag_name_locator(element: HtmlElement, context: StrategyContext) -> str | None:
    return tag_name(element) or None


def link_text(element: HtmlElement, context: StrategyContext) -> str | None:
    if tag_name(element) != "a":
        return None
    return element_text(element) or None


def partial_link_text(element: HtmlElement, context: StrategyContext) -> str | None:
    if tag_name(element) != "a":
        return None
    return element_text(element)[:PARTIAL_LINK_TEXT_LENGTH] or None


def js_path(element: HtmlElement, context: StrategyContext) -> str | None:
    return f"document.querySelector({js_string(generate_css_selector(element, context))})"


def playwright_locator(element: HtmlElement, context: StrategyContext) -> str | None:
    test_id = element.get("data-testid")
    if test_id:
        return f"page.getByTestId({js_string(test_id)})"
    return f"page.locator({js_string(generate_css_selector(element, context))})"


def cypress_locator(element: HtmlElement, context: StrategyContext) -> str | None:
    return f"cy.get({js_string(generate_css_selector(element, context))})"


def _spec(key: StrategyKey, display_name: str, build: StrategyFunction, gated: bool = True) -> StrategySpec:
    return StrategySpec(key, display_name, build, f"locator.{key.value}" if gated else None)


STRATEGIES: Mapping[StrategyKey, StrategySpec] = MappingProxyType(
    {
        spec.key: spec
        for spec in (
            _spec(StrategyKey.ID, "ID", id_locator),
            _spec(StrategyKey.NAME, "Name", name_locator),
            _spec(StrategyKey.CLASS_NAME, "ClassName", class_name_locator),
            _spec(StrategyKey.TAG_NAME, "TagName", tag_name_locator),
            _spec(StrategyKey.CSS, "CSS", generate_css_selector),
            _spec(StrategyKey.LINK_TEXT, "Link Text", link_text),
            _spec(StrategyKey.PARTIAL_LINK_TEXT, "Partial Link Text", partial_link_text),
            _spec(StrategyKey.ABSOLUTE_XPATH, "Absolute XPath", xpath_builder.absolute_xpath),
            _spec(StrategyKey.RELATIVE_XPATH, "Relative XPath", xpath_builder.relative_xpath),
            _spec(StrategyKey.CONTAINS_XPATH, "Contains XPath", xpath_builder.contains_xpath),
            _spec(StrategyKey.INDEXED_XPATH, "Indexed XPath", xpath_builder.indexed_xpath),
            _spec(StrategyKey.LINK_TEXT_XPATH, "Link Text XPath", xpath_builder.link_text_xpath),
            _spec(StrategyKey.PARTIAL_LINK_TEXT_XPATH, "Partial Link XPath", xpath_builder.partial_link_text_xpath),
            _spec(StrategyKey.ATTRIBUTE_XPATH, "Attribute XPath", xpath_builder.attribute_xpath),
            _spec(StrategyKey.CSS_XPATH, "CSS XPath", xpath_builder.css_xpath),
            _spec(StrategyKey.STARTS_WITH_XPATH, "Starts-With XPath", xpath_builder.starts_with_xpath, gated=False),
            _spec(StrategyKey.OR_XPATH, "OR XPath", xpath_builder.or_xpath),
            _spec(StrategyKey.JS_PATH, "JS Path", js_path),
            _spec(StrategyKey.PLAYWRIGHT, "Playwright", playwright_locator),
            _spec(StrategyKey.CYPRESS, "Cypress", cypress_locator),
        )
    }
)
