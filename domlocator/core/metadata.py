from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lxml.html import HtmlElement

from domlocator.config.schema import SynthesisSettings
from domlocator.core.document import Document


@dataclass(slots=True)
class LocatorResult:
    type: str
    locator: str
    matches: int
    warnings: list[str] = field(default_factory=list)
    strategy: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "locator": self.locator,
            "matches": self.matches,
            "warnings": list(self.warnings),
        }


@dataclass(slots=True)
class MatchResult:
    element: HtmlElement
    score: float
    reasons: list[str] = field(default_factory=list)


@dataclass(slots=True)
class FindResult:
    element: HtmlElement
    healed: bool = False
    match: MatchResult | None = None
    locators: list[LocatorResult] = field(default_factory=list)


@dataclass(slots=True)
class HealAttempt:
    fingerprint: dict[str, Any]
    candidate_count: int
    best_score: float
    reasons: list[str]
    success: bool
    locator: str = ""
    regenerated: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class StrategyContext:
    """Everything a strategy function may read besides the element itself."""

    document: Document
    settings: SynthesisSettings
