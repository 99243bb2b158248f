from __future__ import annotations

from lxml.html import HtmlElement
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domlocator.config.constants import DEFAULT_HIGHLIGHT_CLASS
from domlocator.core.document import Document
from domlocator.utils.dom_extract import (
    class_list,
    fingerprint_text,
    important_attributes,
    previous_element,
    tag_name,
)


class Fingerprint(BaseModel):
    """Structural snapshot of an element, independent of any locator syntax.

    Serialized with camelCase keys (``parentTag``, ``prevSiblingTag``) so an
    external store can persist ``model_dump(by_alias=True)`` and restore it with
    ``Fingerprint.model_validate``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    tag: str = ""
    id: str = ""
    name: str = ""
    classes: tuple[str, ...] = ()
    type: str = ""
    role: str = ""
    placeholder: str = ""
    text: str = ""
    href: str = ""
    alt: str = ""
    title: str = ""
    parent_tag: str = ""
    parent_id: str = ""
    parent_classes: tuple[str, ...] = ()
    prev_sibling_tag: str = ""
    attributes: dict[str, str] = Field(default_factory=dict)


def capture_fingerprint(
    element: HtmlElement,
    document: Document,
    highlight_class: str = DEFAULT_HIGHLIGHT_CLASS,
) -> Fingerprint:
    parent = document.parent(element)
    previous = previous_element(element)
    return Fingerprint(
        tag=tag_name(element),
        id=element.get("id") or "",
        name=element.get("name") or "",
        classes=tuple(class_list(element, highlight_class)),
        type=element.get("type") or "",
        role=element.get("role") or "",
        placeholder=element.get("placeholder") or "",
        text=fingerprint_text(element),
        href=element.get("href") or "",
        alt=element.get("alt") or "",
        title=element.get("title") or "",
        parent_tag=tag_name(parent),
        parent_id=(parent.get("id") or "") if parent is not None else "",
        parent_classes=tuple(class_list(parent, highlight_class)),
        prev_sibling_tag=tag_name(previous),
        attributes=important_attributes(element),
    )
