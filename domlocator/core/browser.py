from __future__ import annotations

import logging
from typing import Mapping

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver import ChromeOptions, FirefoxOptions

from domlocator.core.document import Document
from domlocator.core.exceptions import DocumentCaptureError

logger = logging.getLogger(__name__)

# Serializes the page with its open shadow roots as declarative templates.
# Light-DOM iframes are listed in document order; null marks a frame whose
# document is not readable from the page (cross-origin).
SERIALIZE_PAGE_SCRIPT = """
const collectShadowRoots = (root, found) => {
  for (const element of root.querySelectorAll('*')) {
    if (element.shadowRoot) {
      found.push(element.shadowRoot);
      collectShadowRoots(element.shadowRoot, found);
    }
  }
  return found;
};
const serialize = (doc) => {
  const html = doc.documentElement;
  if (!html) {
    return {html: '', frames: []};
  }
  let markup = html.outerHTML;
  if (typeof html.getHTML === 'function') {
    const openTag = html.cloneNode(false).outerHTML.replace(/<\\/html>$/, '');
    markup = openTag + html.getHTML({shadowRoots: collectShadowRoots(doc, [])}) + '</html>';
  }
  const frames = Array.from(doc.querySelectorAll('iframe')).map((frame) => {
    try {
      const inner = frame.contentDocument;
      return inner ? serialize(inner) : null;
    } catch (error) {
      return null;
    }
  });
  return {html: markup, frames: frames};
};
return serialize(document);
"""


class PageCapture:
    """Builds a Document from the page currently loaded in a WebDriver session."""

    def __init__(self, script: str = SERIALIZE_PAGE_SCRIPT) -> None:
        self.script = script

    def capture(self, driver) -> Document:
        try:
            snapshot = driver.execute_script(self.script)
        except WebDriverException as exc:
            raise DocumentCaptureError(f"Could not serialize the page: {exc.msg or exc}") from exc

        if isinstance(snapshot, Mapping) and snapshot.get("html"):
            return Document.from_snapshot(snapshot)

        logger.warning("Page serialization returned no markup; falling back to page_source")
        try:
            page_source = driver.page_source
        except WebDriverException as exc:
            raise DocumentCaptureError(f"Could not read page source: {exc.msg or exc}") from exc
        return Document.from_html(page_source or "")


class BrowserSession:
    """Loads pages in a local browser and turns them into Documents."""

    def __init__(
        self,
        browser_name: str = "chrome",
        headless: bool = True,
        page_load_timeout: int = 30,
        page_capture: PageCapture | None = None,
    ) -> None:
        self.browser_name = browser_name.lower()
        self.headless = headless
        self.page_load_timeout = page_load_timeout
        self.page_capture = page_capture or PageCapture()

    def start(self):
        if self.browser_name == "chrome":
            options = ChromeOptions()
            if self.headless:
                options.add_argument("--headless=new")
            driver = webdriver.Chrome(options=options)
        elif self.browser_name == "firefox":
            options = FirefoxOptions()
            if self.headless:
                options.add_argument("-headless")
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {self.browser_name}")
        driver.set_page_load_timeout(self.page_load_timeout)
        return driver

    def snapshot(self, url: str) -> Document:
        """Opens ``url`` in a fresh session and captures it, shadow roots and frames included."""

        driver = self.start()
        try:
            try:
                driver.get(url)
            except WebDriverException as exc:
                raise DocumentCaptureError(f"Could not load {url}: {exc.msg or exc}") from exc
            document = self.page_capture.capture(driver)
        finally:
            driver.quit()
        logger.info("Captured %s with %s", url, self.browser_name)
        return document
