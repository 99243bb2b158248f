from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from domlocator.config.constants import (
    CSS_IMPORTANT_ATTRIBUTES,
    DEFAULT_HIGHLIGHT_CLASS,
    DYNAMIC_VALUE_MAX_LENGTH,
    LONG_LOCATOR_LENGTH,
    TEXT_MATCH_MAX,
    TEXT_MATCH_MIN,
    XPATH_IMPORTANT_ATTRIBUTES,
    StrategyKey,
)

PLAN_NAMES = ("free", "pro", "team")

FREE_FEATURES = [
    "locator.id",
    "locator.name",
    "locator.className",
    "locator.tagname",
    "locator.linkText",
    "locator.partialLinkText",
    "locator.jsPath",
    "locator.css",
    "locator.absoluteXpath",
    "locator.relativeXpath",
    "locator.containsXpath",
    "locator.indexedXpath",
    "locator.linkTextXpath",
    "locator.partialLinkTextXpath",
    "locator.attributeXpath",
    "locator.cssXpath",
    "locator.playwright",
    "locator.cypress",
    "module.inspect",
    "module.saved",
    "module.axes",
]

PRO_FEATURES = [
    "locator.orXpath",
    "ui.settings.excludeNumbers",
]


class SynthesisSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    exclude_numbers: bool = False
    highlight_class: str = DEFAULT_HIGHLIGHT_CLASS
    css_attributes: list[str] = Field(default_factory=lambda: list(CSS_IMPORTANT_ATTRIBUTES))
    xpath_attributes: list[str] = Field(default_factory=lambda: list(XPATH_IMPORTANT_ATTRIBUTES))
    text_match_min: int = TEXT_MATCH_MIN
    text_match_max: int = TEXT_MATCH_MAX
    dynamic_value_max_length: int = DYNAMIC_VALUE_MAX_LENGTH
    long_locator_length: int = LONG_LOCATOR_LENGTH
    default_strategies: list[StrategyKey] = Field(
        default_factory=lambda: [
            StrategyKey.ID,
            StrategyKey.NAME,
            StrategyKey.CSS,
            StrategyKey.RELATIVE_XPATH,
        ]
    )

    @field_validator("css_attributes", "xpath_attributes")
    @classmethod
    def normalize_attributes(cls, value: list[str]) -> list[str]:
        normalized = [item.strip().lower() for item in value if item.strip()]
        if not normalized:
            raise ValueError("attribute priority lists cannot be empty")
        return normalized

    @model_validator(mode="after")
    def validate_text_bounds(self) -> SynthesisSettings:
        if self.text_match_min < 0 or self.text_match_max <= self.text_match_min:
            raise ValueError("text_match_max must be greater than text_match_min")
        return self


class PlanCatalog(BaseModel):
    free: list[str] = Field(default_factory=lambda: list(FREE_FEATURES))
    pro: list[str] = Field(default_factory=lambda: list(PRO_FEATURES))
    team: list[str] | Literal["ALL"] = "ALL"

    def features_for(self, plan: str) -> set[str] | None:
        """Returns the feature keys of a plan, or ``None`` when it grants everything.

        Each tier inherits the features of the tiers below it.
        """

        if plan == "free":
            return set(self.free)
        if plan == "pro":
            return set(self.free) | set(self.pro)
        if plan == "team":
            if self.team == "ALL":
                return None
            return set(self.free) | set(self.pro) | set(self.team)
        raise KeyError(f"Unknown plan: {plan}")


class LocatorSettings(BaseModel):
    plan: str = "free"
    synthesis: SynthesisSettings = Field(default_factory=SynthesisSettings)
    plans: PlanCatalog = Field(default_factory=PlanCatalog)

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in PLAN_NAMES:
            raise ValueError(f"Unsupported plan: {value}")
        return normalized
