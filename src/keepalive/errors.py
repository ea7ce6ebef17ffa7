"""Error taxonomy for registry operations.

Probe failures are not errors: a transport failure is a normal outcome that
is recorded on the link, never raised to callers.
"""

from __future__ import annotations


class KeepAliveError(Exception):
    """Base class for all keepalive errors."""


class InvalidURLError(KeepAliveError):
    """The URL is not an absolute http(s) URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url!r} (expected an absolute http:// or https:// URL)")
        self.url = url


class DuplicateURLError(KeepAliveError):
    """The URL is already registered; ``code`` is the existing registration."""

    def __init__(self, url: str, code: str) -> None:
        super().__init__(f"URL already registered: {url} (code {code})")
        self.url = url
        self.code = code


class LinkNotFoundError(KeepAliveError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Unknown link code: {code}")
        self.code = code


class PersistError(KeepAliveError):
    """The store failed to durably write the registry document."""


class CodeSpaceExhausted(KeepAliveError):
    """No unused code could be generated within the retry budget."""
