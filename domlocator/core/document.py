from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Iterator, Mapping, Sequence

from lxml import etree, html
from lxml.html import HtmlElement

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT = "<html><head></head><body></body></html>"
SHADOW_MODE_ATTRIBUTES = ("shadowrootmode", "shadowroot")


class ScopeKind(StrEnum):
    DOCUMENT = "document"
    SHADOW_ROOT = "shadow-root"
    FRAME = "frame"


@dataclass(frozen=True, slots=True)
class Scope:
    """A queryable tree: the page itself, an open shadow root or a same-origin frame.

    Shadow roots are backed by a detached container element that is not an
    element of the page, so queries against a shadow scope never return the root.
    """

    kind: ScopeKind
    root: HtmlElement
    host: HtmlElement | None = None

    @property
    def includes_root(self) -> bool:
        return self.kind is not ScopeKind.SHADOW_ROOT

    def xpath_context(self):
        if self.kind is ScopeKind.SHADOW_ROOT:
            return self.root
        return self.root.getroottree()


class Document:
    """Parsed HTML page with its shadow roots, frame documents and overlay elements."""

    def __init__(self, root: HtmlElement, frames: Sequence[Mapping[str, Any] | None] | None = None) -> None:
        self.root = root
        self.scope = Scope(ScopeKind.DOCUMENT, root)
        self._shadow_roots: dict[HtmlElement, Scope] = {}
        self._frames: dict[HtmlElement, Scope | None] = {}
        self._scopes_by_root: dict[HtmlElement, Scope] = {root: self.scope}
        self._owned: set[HtmlElement] = set()
        self._attach(self.scope, frames)

    @classmethod
    def from_html(cls, markup: str) -> Document:
        return cls(_parse(markup))

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> Document:
        """Builds a document from a captured page.

        ``snapshot`` has the shape ``{"html": str, "frames": [snapshot | None, ...]}``
        where ``frames`` lines up with the page's light-DOM iframes in document
        order and ``None`` marks a frame whose document could not be read.
        """

        return cls(_parse(snapshot.get("html") or ""), snapshot.get("frames"))

    def child_scopes(self, scope: Scope) -> list[Scope]:
        children: list[Scope] = []
        for element in scope.root.iter():
            if element in self._owned:
                continue
            shadow = self._shadow_roots.get(element)
            if shadow is not None:
                children.append(shadow)
            frame = self._frames.get(element)
            if frame is not None:
                children.append(frame)
        return children

    def shadow_root(self, host: HtmlElement) -> Scope | None:
        return self._shadow_roots.get(host)

    def frame_scope(self, iframe: HtmlElement) -> Scope | None:
        return self._frames.get(iframe)

    def scope_of(self, element: HtmlElement) -> Scope | None:
        return self._scopes_by_root.get(element.getroottree().getroot())

    def parent(self, element: HtmlElement) -> HtmlElement | None:
        """Returns the parent element, or ``None`` at the top of a scope."""

        parent = element.getparent()
        if parent is None:
            return None
        scope = self._scopes_by_root.get(parent)
        if scope is not None and not scope.includes_root:
            return None
        return parent

    def claim(self, element: HtmlElement) -> None:
        """Marks an injected overlay element; it and its subtree are ignored by every query."""

        self._owned.add(element)

    def release(self, element: HtmlElement) -> None:
        self._owned.discard(element)

    def is_owned(self, element: HtmlElement | None) -> bool:
        node = element
        while node is not None:
            if node in self._owned:
                return True
            parent = node.getparent()
            if parent is None:
                scope = self._scopes_by_root.get(node)
                parent = scope.host if scope is not None else None
            node = parent
        return False

    def walk(self, scope: Scope) -> Iterator[HtmlElement]:
        """Yields the elements of one scope in document order, skipping overlay subtrees."""

        stack = [scope.root]
        while stack:
            node = stack.pop()
            if not isinstance(node.tag, str) or node in self._owned:
                continue
            if node is not scope.root or scope.includes_root:
                yield node
            stack.extend(reversed(node))

    def _attach(self, scope: Scope, frames: Sequence[Mapping[str, Any] | None] | None) -> None:
        for template in _shadow_templates(scope.root):
            host = template.getparent()
            if host in self._shadow_roots:
                logger.debug("Ignoring extra shadow root template on <%s>", host.tag)
                continue
            container = copy.deepcopy(template)
            container.tail = None
            _detach(template)
            shadow = Scope(ScopeKind.SHADOW_ROOT, container, host)
            self._shadow_roots[host] = shadow
            self._scopes_by_root[container] = shadow
            self._attach(shadow, None)

        for index, iframe in enumerate(scope.root.iter("iframe")):
            if frames is not None and index < len(frames):
                snapshot = frames[index]
            else:
                snapshot = _srcdoc_snapshot(iframe)
            if snapshot is None:
                self._frames[iframe] = None
                continue
            frame_root = _parse(snapshot.get("html") or "")
            frame = Scope(ScopeKind.FRAME, frame_root, iframe)
            self._frames[iframe] = frame
            self._scopes_by_root[frame_root] = frame
            self._attach(frame, snapshot.get("frames"))


def _parse(markup: str) -> HtmlElement:
    if not markup.strip():
        markup = EMPTY_DOCUMENT
    try:
        return html.document_fromstring(markup)
    except (etree.ParserError, ValueError):
        logger.warning("Falling back to an empty document for unparseable markup")
        return html.document_fromstring(EMPTY_DOCUMENT)


def _shadow_templates(root: HtmlElement) -> list[HtmlElement]:
    """Finds open shadow-root templates, outermost first; nested ones are handled per scope."""

    found: list[HtmlElement] = []
    stack = list(reversed(root))
    while stack:
        node = stack.pop()
        if not isinstance(node.tag, str):
            continue
        if node.tag == "template" and _is_open_shadow_template(node):
            found.append(node)
            continue
        stack.extend(reversed(node))
    return found


def _is_open_shadow_template(node: HtmlElement) -> bool:
    if node.getparent() is None:
        return False
    return any((node.get(name) or "").lower() == "open" for name in SHADOW_MODE_ATTRIBUTES)


def _detach(element: HtmlElement) -> None:
    parent = element.getparent()
    if element.tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + element.tail
        else:
            parent.text = (parent.text or "") + element.tail
    parent.remove(element)


def _srcdoc_snapshot(iframe: HtmlElement) -> dict[str, Any] | None:
    srcdoc = iframe.get("srcdoc")
    if srcdoc is None:
        return None
    return {"html": srcdoc}
