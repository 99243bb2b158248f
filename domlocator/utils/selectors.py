from __future__ import annotations

import re

from domlocator.utils.css import attribute_selector

XPATH_PREFIXES = ("/", "(", ".//")
XPATH_MARKERS = ("//", "text()", "@")
CODE_MARKERS = ("(", ")", "By.", "cy.", "page.", "driver.", "findElement", "await", "$")

_PYTHON_BY = re.compile(r"By\.([A-Z_]+)\s*,\s*(['\"])(?P<locator>.*?)\2")
_TEST_ID = re.compile(r"getByTestId\s*\(\s*(['\"])(?P<locator>.*?)\1\s*\)")
_CODE_PATTERNS = (
    re.compile(
        r"By\.(?:xpath|id|name|className|cssSelector|linkText|partialLinkText|tagName)\s*\(\s*(['\"])(?P<locator>.*?)\1\s*\)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:\.locator|get|xpath|contains|\$)\s*\(\s*(['\"])(?P<locator>.*?)\1\s*\)", re.IGNORECASE),
    re.compile(r"[a-z0-9_]+\s*\(\s*(['\"])(?P<locator>.*?)\1\s*\)", re.IGNORECASE),
)
_PYTHON_BY_TYPES = {
    "ID": "id",
    "NAME": "name",
    "XPATH": "xpath",
    "CSS_SELECTOR": "css",
    "CLASS_NAME": "className",
    "TAG_NAME": "tagname",
    "LINK_TEXT": "linkText",
    "PARTIAL_LINK_TEXT": "partialLinkText",
}
_JS_PATH = re.compile(
    r"^\s*document\.querySelector(?P<all>All)?\(\s*(['\"])(?P<selector>(?:\\.|(?!\2).)*)\2\s*\)(?:\.length)?\s*;?\s*$"
)
_JS_ESCAPE = re.compile(r"\\(.)")


def looks_like_xpath(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith(XPATH_PREFIXES) or any(marker in stripped for marker in XPATH_MARKERS)


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def is_potential_code(text: str) -> bool:
    if not text or len(text) < 5:
        return False
    return any(marker in text for marker in CODE_MARKERS)


def unwrap_code(code: str) -> tuple[str, str] | None:
    """Extracts ``(locator, type)`` from a test-framework call.

    Recognizes Selenium (``By.id("x")``, ``By.XPATH, "//a"``), Playwright
    (``page.locator("...")``, ``page.getByTestId("...")``) and Cypress
    (``cy.get("...")``) snippets. ``type`` is ``"auto"`` when the call does not
    say which engine the locator targets.
    """

    match = _PYTHON_BY.search(code)
    if match:
        return _unescape(match.group("locator")), _PYTHON_BY_TYPES.get(match.group(1), "auto")
    match = _TEST_ID.search(code)
    if match:
        return attribute_selector("data-testid", _unescape(match.group("locator"))), "css"
    for pattern in _CODE_PATTERNS:
        match = pattern.search(code)
        if match:
            locator = _unescape(match.group("locator"))
            engine, _, rest = locator.partition("=")
            if rest and engine in ("css", "xpath"):
                return rest, engine
            return locator, _call_type(code[match.start() : match.start("locator")].lower(), locator)
    return None


def parse_js_path(expression: str) -> tuple[str, bool] | None:
    """Returns ``(css selector, selects all)`` for a ``document.querySelector`` expression."""

    match = _JS_PATH.match(expression)
    if not match:
        return None
    return _unescape(match.group("selector")), bool(match.group("all"))


def _call_type(call: str, locator: str) -> str:
    if "xpath" in call:
        return "xpath"
    if "locator(" in call:
        # Playwright reads selectors starting with // or .. as XPath
        return "xpath" if locator.lstrip().startswith(XPATH_PREFIXES + ("..",)) else "css"
    if "css" in call or "get(" in call:
        return "css"
    if "partiallinktext(" in call:
        return "partialLinkText"
    if "linktext(" in call:
        return "linkText"
    if "classname(" in call:
        return "className"
    if "tagname(" in call:
        return "tagname"
    if "id(" in call:
        return "id"
    if "name(" in call:
        return "name"
    return "auto"


def _unescape(value: str) -> str:
    return _JS_ESCAPE.sub(r"\1", value)
