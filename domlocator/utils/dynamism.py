from __future__ import annotations

import re

from lxml.html import HtmlElement

from domlocator.config.constants import DYNAMIC_VALUE_MAX_LENGTH

_SEPARATED_DIGITS = re.compile(r"[-_:]\d+")
_NUMERIC = re.compile(r"\d+")
_HEX_LIKE = re.compile(r"[0-9a-fA-F]{9,}")

_ID_PATTERNS = (
    re.compile(r"@id\s*=\s*(['\"])(?P<value>.*?)\1"),
    re.compile(r"getByTestId\(\s*(['\"])(?P<value>.*?)\1\s*\)"),
    re.compile(r"#(?P<value>(?:\\[0-9a-fA-F]{1,6} ?|\\.|[\w-])+)"),
)
_CSS_HEX_ESCAPE = re.compile(r"\\([0-9a-fA-F]{1,6}) ?")
_CSS_ESCAPE = re.compile(r"\\(.)")


def looks_dynamic(value: str | None, max_length: int = DYNAMIC_VALUE_MAX_LENGTH) -> bool:
    """Heuristic for generated identifiers such as ``user-482910`` or ``a8f9e2b17c3d4401``."""

    if not value:
        return False
    if _NUMERIC.fullmatch(value):
        return True
    if _SEPARATED_DIGITS.search(value):
        return True
    if len(value) > max_length:
        return True
    return bool(_HEX_LIKE.fullmatch(value))


def is_dynamic_element(element: HtmlElement, max_length: int = DYNAMIC_VALUE_MAX_LENGTH) -> bool:
    element_id = element.get("id") or ""
    name = element.get("name") or ""
    for value in (element_id, name, element.get("data-testid")):
        if looks_dynamic(value, max_length):
            return True
    return not element_id and not name and bool((element.get("class") or "").strip())


def extract_id_segment(locator: str) -> str | None:
    """Pulls the id a locator depends on out of CSS, XPath or wrapper syntax."""

    patterns = _ID_PATTERNS[:1] if locator.lstrip().startswith(("/", "(")) else _ID_PATTERNS
    for pattern in patterns:
        match = pattern.search(locator)
        if match:
            return _unescape_css(match.group("value"))
    return None


def _unescape_css(value: str) -> str:
    value = _CSS_HEX_ESCAPE.sub(lambda match: chr(int(match.group(1), 16)), value)
    return _CSS_ESCAPE.sub(r"\1", value)
