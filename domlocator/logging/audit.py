from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from domlocator.core.metadata import HealAttempt


class HealingAuditLogger:
    """Appends healing attempts as JSON lines and keeps the latest healed locator per original."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.healed_elements_path = self.root / "healed_elements.jsonl"
        self.locator_overrides_path = self.root / "locator_overrides.json"

    def write(self, attempt: HealAttempt, original_locator: str | None = None) -> None:
        payload = asdict(attempt)
        payload["best_score"] = round(attempt.best_score, 4)
        if original_locator is not None:
            payload["original_locator"] = original_locator
        with self.healed_elements_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

        if original_locator and attempt.success and attempt.locator:
            overrides = self.read_overrides()
            overrides[original_locator] = attempt.locator
            self.locator_overrides_path.write_text(
                json.dumps(overrides, indent=2, sort_keys=True),
                encoding="utf-8",
            )

    def read_overrides(self) -> dict[str, str]:
        if not self.locator_overrides_path.exists():
            return {}
        return json.loads(self.locator_overrides_path.read_text(encoding="utf-8"))

    def read_attempts(self) -> list[dict]:
        if not self.healed_elements_path.exists():
            return []
        with self.healed_elements_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
