from __future__ import annotations

import pytest

from domlocator.core.css_builder import is_unique
from domlocator.core.deep_query import (
    count_text_matches,
    evaluate_xpath_deep,
    get_element_by_id_deep,
    iter_elements_deep,
    iter_scopes,
    query_all_deep,
)
from domlocator.core.document import Document, ScopeKind
from domlocator.core.exceptions import InvalidLocatorError
from domlocator.core.synthesizer import Synthesizer
from tests.helpers import element

SHADOW_PAGE = """
<div id="host">
  <template shadowrootmode="open">
    <button class="inner" id="go">Go</button>
    <div id="nested"><template shadowrootmode="open"><span class="deep">x</span></template></div>
  </template>
</div>
<button class="outer">Out</button>
"""


def test_shadow_roots_are_queried_as_separate_scopes():
    document = Document.from_html(SHADOW_PAGE)
    host = element(document, "#host")

    assert [scope.kind for scope in iter_scopes(document)] == [
        ScopeKind.DOCUMENT,
        ScopeKind.SHADOW_ROOT,
        ScopeKind.SHADOW_ROOT,
    ]
    assert document.shadow_root(host).host is host
    assert len(query_all_deep("button", document)) == 2
    assert len(query_all_deep(".deep", document)) == 1
    assert len(evaluate_xpath_deep("//*[@id='go']", document)) == 1
    assert document.root.cssselect(".inner") == []


def test_shadow_scope_is_a_boundary_for_parents():
    document = Document.from_html(SHADOW_PAGE)
    inner = query_all_deep("#go", document)[0]

    assert document.scope_of(inner).kind is ScopeKind.SHADOW_ROOT
    assert document.parent(inner) is None
    assert all(node.tag != "template" for node in iter_elements_deep(document))


def test_locators_inside_shadow_root_are_unique():
    document = Document.from_html(SHADOW_PAGE)
    synthesizer = Synthesizer(document)
    inner = query_all_deep("#go", document)[0]

    results = synthesizer.generate(inner, ["css", "relativeXpath"])

    assert [(item.locator, item.matches) for item in results] == [("#go", 1), ("//*[@id='go']", 1)]


def test_srcdoc_frames_are_searched():
    document = Document.from_html(
        """<p>outer</p><iframe id="pay" srcdoc="<form><input id='card' name='card'></form>"></iframe>"""
    )
    iframe = element(document, "#pay")

    assert document.frame_scope(iframe).kind is ScopeKind.FRAME
    assert len(query_all_deep("#card", document)) == 1
    assert get_element_by_id_deep("card", document) is not None
    assert Synthesizer(document).count_matches("//input[@name='card']") == 1


def test_snapshot_frames_line_up_with_iframes():
    document = Document.from_snapshot(
        {
            "html": "<iframe id='a'></iframe><iframe id='b'></iframe>",
            "frames": [None, {"html": "<p id='inner'>hi</p>", "frames": []}],
        }
    )

    assert document.frame_scope(element(document, "#a")) is None
    assert document.frame_scope(element(document, "#b")).kind is ScopeKind.FRAME
    assert len(query_all_deep("#inner", document)) == 1


def test_inaccessible_frame_has_no_children():
    document = Document.from_snapshot(
        {"html": "<iframe src='https://other.example/'></iframe><p id='x'>x</p>", "frames": [None]}
    )

    assert [scope.kind for scope in iter_scopes(document)] == [ScopeKind.DOCUMENT]
    assert len(query_all_deep("p", document)) == 1


def test_claimed_overlay_is_invisible_to_queries():
    document = Document.from_html('<div id="overlay"><span class="tip">x</span></div><span class="tip">y</span>')
    overlay = element(document, "#overlay")
    overlay_tip = element(document, "#overlay .tip")

    document.claim(overlay)

    assert len(query_all_deep(".tip", document)) == 1
    assert len(evaluate_xpath_deep("//span", document)) == 1
    assert overlay not in list(iter_elements_deep(document))
    assert count_text_matches("x", document) == 0
    assert Synthesizer(document).generate(overlay_tip, ["css"]) == []

    document.release(overlay)
    assert len(query_all_deep(".tip", document)) == 2


def test_text_matches_are_case_insensitive():
    document = Document.from_html("<p>Sign in</p><div>Please <b>sign in</b> first</div>")

    assert count_text_matches("SIGN IN", document) == 2


@pytest.mark.parametrize("selector", ["div[", "", "   "])
def test_malformed_css_raises(selector):
    document = Document.from_html("<div></div>")

    with pytest.raises(InvalidLocatorError):
        query_all_deep(selector, document)


def test_malformed_xpath_raises():
    document = Document.from_html("<div></div>")

    with pytest.raises(InvalidLocatorError):
        evaluate_xpath_deep("//div[", document)
    with pytest.raises(InvalidLocatorError):
        evaluate_xpath_deep("count(//div)", document)


def test_control_characters_are_invalid_not_fatal():
    document = Document.from_html('<div id="a\x01b">A</div>')
    target = element(document, "div")

    with pytest.raises(InvalidLocatorError):
        query_all_deep("#a\\1 b", document)
    with pytest.raises(InvalidLocatorError):
        evaluate_xpath_deep("//*[@id='a\x01b']", document)
    assert not is_unique("#a\\1 b", document)

    results = Synthesizer(document).generate(target, ["css"])
    assert [item.strategy for item in results] == ["css"]
    assert results[0].matches == 1


def test_text_directly_inside_shadow_root_is_counted():
    document = Document.from_html(
        '<div id="host"><template shadowrootmode="open">Checkout now<b>x</b>pay later</template></div>'
    )

    assert count_text_matches("Checkout", document) == 1
    assert count_text_matches("pay later", document) == 1
    assert Synthesizer(document).count_matches("pay later") == 1


def test_empty_markup_builds_an_empty_document():
    document = Document.from_html("")

    assert [node.tag for node in iter_elements_deep(document)] == ["html", "head", "body"]
