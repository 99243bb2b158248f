from __future__ import annotations

from lxml.html import HtmlElement

from domlocator.core.document import Document
from domlocator.core.fingerprint import Fingerprint
from domlocator.utils.dom_extract import class_list, fingerprint_text, tag_name

TAG_WEIGHT = 10.0
ID_WEIGHT = 30.0
NAME_WEIGHT = 20.0
CLASS_WEIGHT = 15.0
TEXT_WEIGHT = 15.0
PARTIAL_TEXT_RATIO = 0.6
ATTRIBUTE_WEIGHT = 15.0
CONTEXT_WEIGHT = 5.0


def calculate_score(element: HtmlElement, fingerprint: Fingerprint, document: Document) -> tuple[float, list[str]]:
    """Scores how closely ``element`` resembles the captured ``fingerprint``."""

    score = 0.0
    reasons: list[str] = []

    if tag_name(element) == fingerprint.tag:
        score += TAG_WEIGHT
        reasons.append("Tag match")

    if fingerprint.id and element.get("id") == fingerprint.id:
        score += ID_WEIGHT
        reasons.append("ID match")

    if fingerprint.name and element.get("name") == fingerprint.name:
        score += NAME_WEIGHT
        reasons.append("Name match")

    ratio = _class_overlap(fingerprint.classes, class_list(element))
    if ratio > 0:
        score += CLASS_WEIGHT * ratio
        reasons.append(f"Class match ({round(ratio * 100)}%)")

    text_points, text_reason = _text_similarity(fingerprint.text, fingerprint_text(element))
    if text_reason:
        score += text_points
        reasons.append(text_reason)

    attribute_ratio = _attribute_overlap(fingerprint.attributes, element)
    if attribute_ratio > 0:
        score += ATTRIBUTE_WEIGHT * attribute_ratio
        reasons.append("Attribute match")

    if fingerprint.parent_tag and tag_name(document.parent(element)) == fingerprint.parent_tag:
        score += CONTEXT_WEIGHT / 2
        reasons.append("Parent tag match")

    return score, reasons


def _class_overlap(expected: tuple[str, ...], actual: list[str]) -> float:
    if not expected or not actual:
        return 0.0
    shared = [name for name in expected if name in actual]
    return len(shared) / len(expected)


def _text_similarity(expected: str, actual: str) -> tuple[float, str]:
    if not expected or not actual:
        return 0.0, ""
    if expected == actual:
        return TEXT_WEIGHT, "Exact text match"
    if expected in actual or actual in expected:
        return TEXT_WEIGHT * PARTIAL_TEXT_RATIO, "Partial text match"
    return 0.0, ""


def _attribute_overlap(expected: dict[str, str], element: HtmlElement) -> float:
    if not expected:
        return 0.0
    matched = sum(1 for name, value in expected.items() if element.get(name) == value)
    return matched / len(expected)
