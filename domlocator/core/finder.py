from __future__ import annotations

import logging
from typing import Any, Mapping

from lxml.html import HtmlElement

from domlocator.core.document import Document
from domlocator.core.exceptions import ElementNotFoundError, InvalidLocatorError
from domlocator.core.fingerprint import Fingerprint
from domlocator.core.healer import HealingMatcher
from domlocator.core.metadata import FindResult, LocatorResult
from domlocator.core.resolution import resolve_elements
from domlocator.core.synthesizer import Synthesizer
from domlocator.logging.audit import HealingAuditLogger
from domlocator.utils.selectors import infer_selector_type

logger = logging.getLogger(__name__)


class SelfHealingFinder:
    """Centralized element lookup with fingerprint healing."""

    def __init__(
        self,
        synthesizer: Synthesizer,
        matcher: HealingMatcher | None = None,
        audit_logger: HealingAuditLogger | None = None,
    ) -> None:
        self.synthesizer = synthesizer
        self.matcher = matcher or HealingMatcher()
        self.audit_logger = audit_logger
        self.locator_overrides = audit_logger.read_overrides() if audit_logger else {}

    @property
    def document(self) -> Document:
        return self.synthesizer.document

    def find(
        self,
        locator: str,
        fingerprint: Fingerprint | Mapping[str, Any] | None = None,
        strategy: str | None = None,
    ) -> FindResult:
        for candidate, candidate_strategy in self._locator_specs(locator, strategy):
            element = self._first_match(candidate, candidate_strategy)
            if element is not None:
                return FindResult(element)

        if fingerprint is not None:
            healed = self.heal(locator, fingerprint)
            if healed is not None:
                return healed
        raise ElementNotFoundError(f"No element matches {locator!r}")

    def heal(self, locator: str, fingerprint: Fingerprint | Mapping[str, Any]) -> FindResult | None:
        captured = self.matcher.coerce(fingerprint)
        if captured is None or not captured.tag:
            return None

        match, attempt = self.matcher.evaluate(captured, self.document)
        locators: list[LocatorResult] = []
        if match is not None:
            locators = self.synthesizer.generate(match.element)
            attempt.regenerated = [result.to_dict() for result in locators]
            attempt.locator = _preferred_locator(locators)
            if attempt.locator:
                self.locator_overrides[locator] = attempt.locator
            logger.info("Healed %r with score %.1f", locator, match.score)
        else:
            logger.info("Could not heal %r; best score %.1f", locator, attempt.best_score)

        if self.audit_logger is not None:
            self.audit_logger.write(attempt, original_locator=locator)
        if match is None:
            return None
        return FindResult(match.element, healed=True, match=match, locators=locators)

    def _locator_specs(self, locator: str, strategy: str | None) -> list[tuple[str, str | None]]:
        specs: list[tuple[str, str | None]] = []
        override = self.locator_overrides.get(locator)
        if override:
            specs.append((override, infer_selector_type(override)))
        specs.append((locator, strategy))
        return specs

    def _first_match(self, locator: str, strategy: str | None) -> HtmlElement | None:
        try:
            matches = resolve_elements(locator, self.document, strategy)
        except InvalidLocatorError as exc:
            logger.debug("Locator %r could not be evaluated: %s", locator, exc)
            return None
        return matches[0] if matches else None


def _preferred_locator(locators: list[LocatorResult]) -> str:
    for result in locators:
        if result.matches == 1:
            return result.locator
    return locators[0].locator if locators else ""
