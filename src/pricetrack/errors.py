"""
Exception types shared across the pricetrack packages.
"""

from pathlib import Path


class PricetrackError(Exception):
    """Base class for all pricetrack errors."""


class InvalidURL(PricetrackError, ValueError):
    """Raised when a string cannot be parsed into scheme, host and path."""

    def __init__(self, url: object, reason: str = "cannot be parsed as a URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class RuleSourceError(PricetrackError, RuntimeError):
    """Raised when the domain rules source is missing or malformed."""

    def __init__(self, source: Path | str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load domain rules from {source}: {reason}")
