"""Definitions shared by HTTP requests and responses."""

from __future__ import annotations

from enum import Enum


class HttpVersionParseError(ValueError):
    """Raised when a protocol version string is not supported."""

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(f"unsupported HTTP protocol version: {found}")


class HttpVersion(Enum):
    """HTTP protocol versions understood by the server."""

    HTTP11 = "HTTP/1.1"
    HTTP2 = "HTTP/2"

    @classmethod
    def parse(cls, text: str) -> HttpVersion:
        """Parse a protocol version as it appears on the request line."""
        try:
            return cls(text)
        except ValueError:
            raise HttpVersionParseError(text) from None

    def __str__(self) -> str:
        return self.value