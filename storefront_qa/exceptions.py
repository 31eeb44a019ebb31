from typing import Optional


class StorefrontError(Exception):
    """Base error for storefront reads and flows.

    Carries the diagnostic context captured when the error was raised: the
    page location and whatever text was observed at that point.
    """

    def __init__(self, message: str, url: Optional[str] = None, observed: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.observed = observed

    def __str__(self):
        parts = [self.message]
        if self.url:
            parts.append(f"Page URL: {self.url}")
        if self.observed:
            parts.append(f"Observed: {self.observed}")
        return "\n".join(parts)


class NotFoundError(StorefrontError):
    """An expected element or text never appeared within its bound."""


class ParseError(StorefrontError, ValueError):
    """Monetary text was present but could not be read as a number."""


class WaitTimeoutError(StorefrontError, TimeoutError):
    """A wait bound was exceeded."""


class PreconditionError(StorefrontError):
    """The page state does not satisfy what the caller asserted."""
