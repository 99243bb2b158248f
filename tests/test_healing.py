from __future__ import annotations

from domlocator.core.document import Document
from domlocator.core.fingerprint import Fingerprint, capture_fingerprint
from domlocator.core.healer import HealingMatcher
from domlocator.logging.audit import HealingAuditLogger
from domlocator.utils.scoring import calculate_score
from tests.helpers import element

FORM = """
<form class="auth">
  <label>Email</label>
  <input id="email" name="email" class="field wide" placeholder="you@example.com">
  <input id="password" name="password" class="field">
</form>
"""


def test_fingerprint_captures_structure(login_document):
    field = element(login_document, "#email")

    fingerprint = capture_fingerprint(field, login_document)

    assert fingerprint.tag == "input"
    assert fingerprint.id == "email"
    assert fingerprint.name == "email"
    assert fingerprint.classes == ("field",)
    assert fingerprint.type == "email"
    assert fingerprint.placeholder == "you@example.com"
    assert fingerprint.parent_tag == "form"
    assert fingerprint.parent_id == "login"
    assert fingerprint.parent_classes == ("auth-form",)
    assert fingerprint.prev_sibling_tag == "label"


def test_fingerprint_is_stable(synthesizer):
    button = element(synthesizer.document, "button")

    first = synthesizer.fingerprint(button)
    second = synthesizer.fingerprint(button)

    assert first == second
    assert first.attributes == {"data-testid": "sign-in"}
    assert first.text == "Sign in"


def test_fingerprint_text_is_truncated():
    document = Document.from_html(f"<p>   {'word ' * 30}</p>")

    fingerprint = capture_fingerprint(element(document, "p"), document)

    assert len(fingerprint.text) == 50
    assert fingerprint.text.startswith("word word")


def test_fingerprint_round_trips_through_camel_case_json(synthesizer):
    fingerprint = synthesizer.fingerprint(element(synthesizer.document, "#email"))

    payload = fingerprint.model_dump(mode="json", by_alias=True)

    assert payload["parentTag"] == "form"
    assert payload["prevSiblingTag"] == "label"
    assert Fingerprint.model_validate(payload) == fingerprint


def test_highlight_class_is_not_part_of_the_fingerprint():
    document = Document.from_html('<button class="btn lx-highlight">Go</button>')

    fingerprint = capture_fingerprint(element(document, "button"), document)

    assert fingerprint.classes == ("btn",)


def test_healing_survives_id_drift_with_lower_score():
    original = Document.from_html(FORM)
    fingerprint = capture_fingerprint(element(original, "#email"), original)
    matcher = HealingMatcher()

    baseline = matcher.find_best_match(fingerprint, original)
    drifted = Document.from_html(FORM.replace('id="email"', 'id="email-2f9a"'))
    healed = matcher.find_best_match(fingerprint, drifted)

    assert baseline is not None
    assert healed is not None
    assert healed.element is element(drifted, "[name='email']")
    assert 40 <= healed.score < baseline.score
    assert "ID match" not in healed.reasons
    assert "Name match" in healed.reasons


def test_healing_tolerates_tag_change_after_rerender():
    before = Document.from_html(
        '<form><div role="button" class="btn-submit" data-testid="submit">Submit</div></form>'
    )
    fingerprint = capture_fingerprint(element(before, "div[role='button']"), before)
    after = Document.from_html(
        '<form><a href="/help">Help</a><button class="btn-submit" data-testid="submit">Submit</button></form>'
    )

    match = HealingMatcher().find_best_match(fingerprint, after)

    assert match is not None
    assert match.element is element(after, "button")
    assert match.score >= 40
    assert "Tag match" not in match.reasons
    assert "Exact text match" in match.reasons


def test_bare_tag_change_stays_below_the_floor():
    before = Document.from_html('<form><div role="button">Submit</div></form>')
    fingerprint = capture_fingerprint(element(before, "div[role='button']"), before)
    after = Document.from_html("<form><button>Submit</button></form>")

    score, reasons = calculate_score(element(after, "button"), fingerprint, after)

    assert (score, reasons) == (17.5, ["Exact text match", "Parent tag match"])
    assert HealingMatcher().find_best_match(fingerprint, after) is None


def test_role_lookup_gathers_native_tags():
    fingerprint = Fingerprint(tag="div", role="button", text="Submit")
    document = Document.from_html("<button>Submit</button><span>Submit</span>")

    candidates = HealingMatcher().gather_candidates(fingerprint, document)

    assert [node.tag for node in candidates] == ["button"]


def test_weak_matches_are_rejected():
    fingerprint = Fingerprint(tag="button", text="Checkout")
    document = Document.from_html("<button>Cancel</button>")

    assert HealingMatcher().find_best_match(fingerprint, document) is None


def test_ties_keep_document_order():
    fingerprint = Fingerprint(tag="li", classes=("item",), text="Row", parent_tag="ul")
    document = Document.from_html('<ul><li class="item">Row</li><li class="item">Row</li></ul>')

    match = HealingMatcher().find_best_match(fingerprint, document)

    assert match.element is document.root.cssselect("li")[0]


def test_malformed_fingerprints_yield_none():
    document = Document.from_html('<button id="go">Go</button>')
    matcher = HealingMatcher()

    assert matcher.find_best_match(None, document) is None
    assert matcher.find_best_match({"id": "go"}, document) is None
    assert matcher.find_best_match({"tag": 5}, document) is None
    assert matcher.find_best_match({"tag": "button", "id": "go", "parentTag": "body"}, document) is not None


def test_score_reasons():
    document = Document.from_html(FORM)
    field = element(document, "#email")
    fingerprint = Fingerprint(
        tag="input",
        id="email",
        name="email",
        classes=("field", "narrow"),
        parent_tag="form",
        attributes={"aria-label": "Email"},
    )

    score, reasons = calculate_score(field, fingerprint, document)

    assert score == 10 + 30 + 20 + 7.5 + 2.5
    assert reasons == ["Tag match", "ID match", "Name match", "Class match (50%)", "Parent tag match"]


def test_matcher_writes_audit_record(tmp_path):
    audit = HealingAuditLogger(tmp_path)
    document = Document.from_html(FORM)
    fingerprint = capture_fingerprint(element(document, "#password"), document)

    HealingMatcher(audit_logger=audit).find_best_match(fingerprint, document)

    attempts = audit.read_attempts()
    assert len(attempts) == 1
    assert attempts[0]["success"] is True
    assert attempts[0]["fingerprint"]["tag"] == "input"
    assert attempts[0]["candidate_count"] == 2
