class LocatorError(RuntimeError):
    """Base error for locator synthesis and healing."""


class InvalidLocatorError(LocatorError):
    """Raised when a CSS selector or XPath expression cannot be evaluated."""


class ElementNotFoundError(LocatorError):
    """Raised when neither the locator nor healing resolves an element."""


class DocumentCaptureError(LocatorError):
    """Raised when the browser page cannot be serialized."""
