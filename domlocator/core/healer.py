from __future__ import annotations

import logging
from typing import Any, Mapping

from lxml.html import HtmlElement
from pydantic import ValidationError

from domlocator.config.constants import HEALING_SCORE_FLOOR, ROLE_TAGS
from domlocator.core.deep_query import get_element_by_id_deep, query_all_deep
from domlocator.core.document import Document
from domlocator.core.exceptions import InvalidLocatorError
from domlocator.core.fingerprint import Fingerprint
from domlocator.core.metadata import HealAttempt, MatchResult
from domlocator.logging.audit import HealingAuditLogger
from domlocator.utils.css import attribute_selector
from domlocator.utils.scoring import calculate_score

logger = logging.getLogger(__name__)


class HealingMatcher:
    """Re-finds an element from its fingerprint after the page changed."""

    def __init__(self, audit_logger: HealingAuditLogger | None = None) -> None:
        self.audit_logger = audit_logger

    @staticmethod
    def coerce(fingerprint: Fingerprint | Mapping[str, Any] | None) -> Fingerprint | None:
        if fingerprint is None or isinstance(fingerprint, Fingerprint):
            return fingerprint
        try:
            return Fingerprint.model_validate(fingerprint)
        except ValidationError as exc:
            logger.warning("Ignoring malformed fingerprint: %s", exc)
            return None

    def find_best_match(
        self,
        fingerprint: Fingerprint | Mapping[str, Any] | None,
        document: Document,
    ) -> MatchResult | None:
        captured = self.coerce(fingerprint)
        if captured is None or not captured.tag:
            return None

        match, attempt = self.evaluate(captured, document)
        if self.audit_logger is not None:
            self.audit_logger.write(attempt)
        return match

    def evaluate(self, fingerprint: Fingerprint, document: Document) -> tuple[MatchResult | None, HealAttempt]:
        """Returns the accepted match, if any, together with the record of how it was chosen."""

        ranked = self.rank(fingerprint, document)
        best = ranked[0] if ranked else None
        success = best is not None and best.score >= HEALING_SCORE_FLOOR
        logger.debug(
            "Healing <%s>: %d candidates, best score %.1f",
            fingerprint.tag,
            len(ranked),
            best.score if best else 0.0,
        )
        attempt = HealAttempt(
            fingerprint=fingerprint.model_dump(mode="json", by_alias=True),
            candidate_count=len(ranked),
            best_score=best.score if best else 0.0,
            reasons=list(best.reasons) if best else [],
            success=success,
        )
        return (best if success else None), attempt

    def rank(self, fingerprint: Fingerprint, document: Document) -> list[MatchResult]:
        """Scores every candidate, best first; equal scores keep document order."""

        results = []
        for element in self.gather_candidates(fingerprint, document):
            score, reasons = calculate_score(element, fingerprint, document)
            results.append(MatchResult(element, score, reasons))
        results.sort(key=lambda item: item.score, reverse=True)
        return results

    def gather_candidates(self, fingerprint: Fingerprint, document: Document) -> list[HtmlElement]:
        candidates: list[HtmlElement] = []

        def add(elements) -> None:
            for element in elements:
                if element not in candidates:
                    candidates.append(element)

        add(_select(fingerprint.tag, document))
        if fingerprint.id:
            match = get_element_by_id_deep(fingerprint.id, document)
            if match is not None:
                add([match])
        if fingerprint.name:
            add(_select(attribute_selector("name", fingerprint.name), document))
        for name, value in fingerprint.attributes.items():
            add(_select(attribute_selector(name, value), document))

        if fingerprint.role:
            for tag in ROLE_TAGS.get(fingerprint.role, ()):
                add(_select(tag, document))
            add(_select(attribute_selector("role", fingerprint.role), document))
        for role, tags in ROLE_TAGS.items():
            if fingerprint.tag in tags:
                add(_select(attribute_selector("role", role), document))
        return candidates


def _select(selector: str, document: Document) -> list[HtmlElement]:
    try:
        return query_all_deep(selector, document)
    except InvalidLocatorError as exc:
        logger.debug("Skipping candidate query %s: %s", selector, exc)
        return []
