from __future__ import annotations

import logging
from typing import Iterable

from lxml.html import HtmlElement

from domlocator.config.constants import (
    WARNING_ABSOLUTE_XPATH,
    WARNING_DYNAMIC_ID,
    WARNING_LONG_LOCATOR,
    StrategyKey,
)
from domlocator.config.schema import SynthesisSettings
from domlocator.core.document import Document
from domlocator.core.features import AllowAllGate, FeatureGate
from domlocator.core.fingerprint import Fingerprint, capture_fingerprint
from domlocator.core.metadata import LocatorResult, StrategyContext
from domlocator.core.resolution import count_matches
from domlocator.core.strategies import STRATEGIES, StrategySpec
from domlocator.core.xpath_builder import axes_xpath
from domlocator.utils.dynamism import extract_id_segment, is_dynamic_element, looks_dynamic

logger = logging.getLogger(__name__)

# Strategies whose output is plain text, never an id reference.
_TEXT_STRATEGIES = frozenset({StrategyKey.LINK_TEXT, StrategyKey.PARTIAL_LINK_TEXT, StrategyKey.TAG_NAME})


class Synthesizer:
    """Generates locators for elements of one document."""

    def __init__(
        self,
        document: Document,
        settings: SynthesisSettings | None = None,
        feature_gate: FeatureGate | None = None,
    ) -> None:
        self.document = document
        self.settings = settings or SynthesisSettings()
        self.feature_gate = feature_gate or AllowAllGate()

    @property
    def exclude_numbers(self) -> bool:
        return self.settings.exclude_numbers

    @exclude_numbers.setter
    def exclude_numbers(self, value: bool) -> None:
        self.settings.exclude_numbers = value

    @property
    def context(self) -> StrategyContext:
        return StrategyContext(self.document, self.settings)

    def allowed_strategies(self, keys: Iterable[str]) -> list[StrategySpec]:
        allowed: list[StrategySpec] = []
        for key in keys:
            try:
                spec = STRATEGIES[StrategyKey(key)]
            except ValueError:
                logger.debug("Skipping unknown strategy %r", key)
                continue
            if spec in allowed:
                continue
            if spec.feature is not None and not self.feature_gate.is_enabled(spec.feature):
                logger.debug("Strategy %s is not enabled for this plan", spec.key)
                continue
            allowed.append(spec)
        return allowed

    def generate(self, element: HtmlElement, keys: Iterable[str] | None = None) -> list[LocatorResult]:
        if self.document.is_owned(element):
            return []

        requested = list(keys) if keys is not None else list(self.settings.default_strategies)
        specs = self.allowed_strategies(requested)
        context = self.context
        results: list[LocatorResult] = []
        for spec in specs:
            result = self._run(spec, element, context)
            if result is not None:
                results.append(result)

        if self._wants_or_fallback(specs, element):
            result = self._run(STRATEGIES[StrategyKey.OR_XPATH], element, context)
            if result is not None:
                results.append(result)
        return results

    def fingerprint(self, element: HtmlElement) -> Fingerprint:
        return capture_fingerprint(element, self.document, self.settings.highlight_class)

    def count_matches(self, locator: str | None, strategy: str | None = None) -> int:
        return count_matches(locator, self.document, strategy)

    def axes(self, anchor: HtmlElement, target: HtmlElement) -> str | None:
        return axes_xpath(anchor, target, self.context)

    def _run(self, spec: StrategySpec, element: HtmlElement, context: StrategyContext) -> LocatorResult | None:
        try:
            locator = spec.build(element, context)
        except Exception as exc:  # noqa: BLE001 - one failing strategy must not hide the others.
            logger.warning("Strategy %s failed: %s", spec.key, exc)
            return None
        if not locator:
            return None
        return LocatorResult(
            type=spec.display_name,
            locator=locator,
            matches=self.count_matches(locator, spec.key.value),
            warnings=self._warnings(spec.key, locator),
            strategy=spec.key.value,
        )

    def _wants_or_fallback(self, specs: list[StrategySpec], element: HtmlElement) -> bool:
        keys = {spec.key for spec in specs}
        if StrategyKey.RELATIVE_XPATH not in keys or StrategyKey.OR_XPATH in keys:
            return False
        feature = STRATEGIES[StrategyKey.OR_XPATH].feature
        if feature is not None and not self.feature_gate.is_enabled(feature):
            return False
        return is_dynamic_element(element, self.settings.dynamic_value_max_length)

    def _warnings(self, key: StrategyKey, locator: str) -> list[str]:
        warnings: list[str] = []
        if key not in _TEXT_STRATEGIES:
            segment = extract_id_segment(locator)
            if segment and looks_dynamic(segment, self.settings.dynamic_value_max_length):
                warnings.append(WARNING_DYNAMIC_ID)
        if len(locator) > self.settings.long_locator_length:
            warnings.append(WARNING_LONG_LOCATOR.format(limit=self.settings.long_locator_length))
        if key is StrategyKey.ABSOLUTE_XPATH:
            warnings.append(WARNING_ABSOLUTE_XPATH)
        return warnings
