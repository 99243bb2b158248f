from __future__ import annotations

import pytest

from domlocator.config.schema import SynthesisSettings
from domlocator.core.document import Document
from domlocator.core.features import AllowAllGate
from domlocator.core.synthesizer import Synthesizer

LOGIN_FORM = """
<html>
  <body>
    <form id="login" class="auth-form">
      <label id="email-label" for="email">Email</label>
      <input id="email" name="email" type="email" class="field" placeholder="you@example.com">
      <input id="password" name="password" type="password" class="field">
      <button type="submit" class="btn primary" data-testid="sign-in">Sign in</button>
      <a href="/forgot" class="link">Forgot password?</a>
    </form>
  </body>
</html>
"""


@pytest.fixture()
def login_document() -> Document:
    return Document.from_html(LOGIN_FORM)


@pytest.fixture()
def make_synthesizer():
    def factory(markup: str, settings: SynthesisSettings | None = None, feature_gate=None) -> Synthesizer:
        return Synthesizer(Document.from_html(markup), settings, feature_gate or AllowAllGate())

    return factory


@pytest.fixture()
def synthesizer(login_document) -> Synthesizer:
    return Synthesizer(login_document, feature_gate=AllowAllGate())

