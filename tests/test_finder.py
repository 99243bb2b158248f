from __future__ import annotations

import json

import pytest

from domlocator.core.document import Document
from domlocator.core.exceptions import ElementNotFoundError
from domlocator.core.finder import SelfHealingFinder
from domlocator.core.synthesizer import Synthesizer
from domlocator.logging.audit import HealingAuditLogger
from tests.helpers import element

ORIGINAL = """
<form>
  <input id="email" name="email" class="field">
  <button type="submit" class="btn">Sign in</button>
</form>
"""
RERENDERED = ORIGINAL.replace('id="email"', 'id="email-2"')


@pytest.fixture()
def stored_fingerprint():
    document = Document.from_html(ORIGINAL)
    return Synthesizer(document).fingerprint(element(document, "#email"))


def test_find_returns_direct_match():
    document = Document.from_html(ORIGINAL)
    finder = SelfHealingFinder(Synthesizer(document))

    result = finder.find("#email")

    assert result.element is element(document, "#email")
    assert result.healed is False
    assert result.match is None


def test_find_honors_strategy():
    document = Document.from_html(ORIGINAL)
    finder = SelfHealingFinder(Synthesizer(document))

    assert finder.find("email", strategy="name").element is element(document, "#email")
    assert finder.find("//button[normalize-space()='Sign in']").element is element(document, "button")


def test_find_heals_and_regenerates_locators(tmp_path, stored_fingerprint):
    audit = HealingAuditLogger(tmp_path)
    document = Document.from_html(RERENDERED)
    finder = SelfHealingFinder(Synthesizer(document), audit_logger=audit)

    result = finder.find("#email", fingerprint=stored_fingerprint.model_dump(by_alias=True))

    assert result.healed is True
    assert result.element is element(document, "[name='email']")
    assert result.match.score >= 40
    assert [item.locator for item in result.locators][:2] == ["#email-2", "[name='email']"]

    attempts = audit.read_attempts()
    assert attempts[-1]["success"] is True
    assert attempts[-1]["original_locator"] == "#email"
    assert attempts[-1]["locator"] == "#email-2"
    assert json.loads(audit.locator_overrides_path.read_text(encoding="utf-8")) == {"#email": "#email-2"}


def test_overrides_are_tried_before_healing(tmp_path, stored_fingerprint):
    audit = HealingAuditLogger(tmp_path)
    document = Document.from_html(RERENDERED)
    SelfHealingFinder(Synthesizer(document), audit_logger=audit).find("#email", fingerprint=stored_fingerprint)

    result = SelfHealingFinder(Synthesizer(document), audit_logger=audit).find("#email")

    assert result.healed is False
    assert result.element is element(document, "#email-2")
    assert len(audit.read_attempts()) == 1


def test_find_raises_when_nothing_matches(tmp_path):
    audit = HealingAuditLogger(tmp_path)
    document = Document.from_html(ORIGINAL)
    finder = SelfHealingFinder(Synthesizer(document), audit_logger=audit)

    with pytest.raises(ElementNotFoundError):
        finder.find("#missing")
    with pytest.raises(ElementNotFoundError):
        finder.find("#missing", fingerprint={"tag": "select", "id": "country"})

    assert audit.read_attempts()[-1]["success"] is False
    assert audit.read_overrides() == {}


def test_malformed_locator_falls_through_to_healing(stored_fingerprint):
    document = Document.from_html(RERENDERED)
    finder = SelfHealingFinder(Synthesizer(document))

    result = finder.find("//input[", fingerprint=stored_fingerprint, strategy="relativeXpath")

    assert result.healed is True
    assert result.element is element(document, "#email-2")
