"""Custom exceptions for the GraphQL endpoint scraper."""


class ScraperError(Exception):
    """Base exception for scraper errors."""

    pass


class BrowserError(ScraperError):
    """Raised when browser operations fail."""

    pass


class BrowserLaunchError(BrowserError):
    """Raised when the browser session cannot be started."""

    pass


class NavigationError(BrowserError):
    """Raised when the entry route cannot be loaded."""

    pass


class EvaluationError(BrowserError):
    """Raised when an expression throws inside the page."""

    pass
