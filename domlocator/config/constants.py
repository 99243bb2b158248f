from __future__ import annotations

from enum import StrEnum


class StrategyKey(StrEnum):
    ID = "id"
    NAME = "name"
    CLASS_NAME = "className"
    TAG_NAME = "tagname"
    CSS = "css"
    LINK_TEXT = "linkText"
    PARTIAL_LINK_TEXT = "partialLinkText"
    ABSOLUTE_XPATH = "absoluteXpath"
    RELATIVE_XPATH = "relativeXpath"
    CONTAINS_XPATH = "containsXpath"
    INDEXED_XPATH = "indexedXpath"
    LINK_TEXT_XPATH = "linkTextXpath"
    PARTIAL_LINK_TEXT_XPATH = "partialLinkTextXpath"
    ATTRIBUTE_XPATH = "attributeXpath"
    CSS_XPATH = "cssXpath"
    STARTS_WITH_XPATH = "startsWithXpath"
    OR_XPATH = "orXpath"
    JS_PATH = "jsPath"
    PLAYWRIGHT = "playwright"
    CYPRESS = "cypress"


# Attributes tried, in order, by CSS synthesis.
CSS_IMPORTANT_ATTRIBUTES = ("data-testid", "data-test", "data-cy", "aria-label", "name", "placeholder")

# Attributes tried, in order, by relative XPath synthesis.
XPATH_IMPORTANT_ATTRIBUTES = ("data-testid", "data-test", "aria-label", "placeholder", "title", "alt")

# Attributes captured into a fingerprint and compared during healing.
FINGERPRINT_ATTRIBUTES = ("data-testid", "data-test", "data-cy", "aria-label")

# Attributes inspected by the starts-with strategy.
PREFIX_ATTRIBUTES = ("id", "name", "data-testid", "data-test")

CONTAINS_ATTRIBUTES = ("id", "class", "name", "title", "placeholder", "role", "aria-label")

TEXT_CONTAINER_TAGS = frozenset({"a", "button", "label", "h1", "h2", "h3", "span", "div"})

# Native tags for ARIA roles, used to gather candidates after a re-render.
ROLE_TAGS = {
    "button": ("button",),
    "link": ("a",),
    "checkbox": ("input",),
    "radio": ("input",),
    "textbox": ("input", "textarea"),
    "combobox": ("select",),
    "listbox": ("select",),
    "heading": ("h1", "h2", "h3", "h4", "h5", "h6"),
    "img": ("img",),
    "list": ("ul", "ol"),
    "listitem": ("li",),
    "navigation": ("nav",),
    "form": ("form",),
}

TEXT_MATCH_MIN = 2
TEXT_MATCH_MAX = 50
FINGERPRINT_TEXT_LENGTH = 50
PARTIAL_LINK_TEXT_LENGTH = 10
DYNAMIC_VALUE_MAX_LENGTH = 30
LONG_LOCATOR_LENGTH = 120
HEALING_SCORE_FLOOR = 40

DEFAULT_HIGHLIGHT_CLASS = "lx-highlight"

WARNING_DYNAMIC_ID = "Contains dynamic ID"
WARNING_LONG_LOCATOR = "Locator exceeds {limit} characters and may be brittle"
WARNING_ABSOLUTE_XPATH = "Absolute XPath breaks on any layout change"
