from __future__ import annotations

from typing import Protocol

from domlocator.config.schema import LocatorSettings, PlanCatalog


class FeatureGate(Protocol):
    def is_enabled(self, feature_key: str) -> bool: ...


class AllowAllGate:
    """Gate used when the caller does not restrict any feature."""

    def is_enabled(self, feature_key: str) -> bool:
        return True


class PlanFeatureGate:
    """Answers feature checks from the plan catalog; higher tiers inherit lower ones."""

    def __init__(self, plan: str = "free", catalog: PlanCatalog | None = None) -> None:
        self.plan = plan.lower()
        self.catalog = catalog or PlanCatalog()
        self._features = self.catalog.features_for(self.plan)

    @classmethod
    def from_settings(cls, settings: LocatorSettings) -> PlanFeatureGate:
        return cls(settings.plan, settings.plans)

    def is_enabled(self, feature_key: str) -> bool:
        if self._features is None:
            return True
        return feature_key in self._features
