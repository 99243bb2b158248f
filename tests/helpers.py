from __future__ import annotations

from domlocator.core.document import Document


def element(document: Document, selector: str):
    matches = document.root.cssselect(selector)
    assert matches, f"markup has no {selector}"
    return matches[0]


class FakeDriver:
    """Stands in for a WebDriver session; records the scripts it was asked to run."""

    def __init__(self, snapshot=None, page_source: str = "", error: Exception | None = None) -> None:
        self.snapshot = snapshot
        self._page_source = page_source
        self.error = error
        self.scripts: list[str] = []
        self.visited: list[str] = []
        self.closed = False

    def execute_script(self, script: str):
        self.scripts.append(script)
        if self.error is not None:
            raise self.error
        return self.snapshot

    @property
    def page_source(self) -> str:
        return self._page_source

    def get(self, url: str) -> None:
        self.visited.append(url)

    def quit(self) -> None:
        self.closed = True
