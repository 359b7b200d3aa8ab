"""Content encodings the server can apply to response bodies."""

from __future__ import annotations

import gzip
from enum import Enum


class EncodingParseError(ValueError):
    """Raised when an encoding scheme is not supported."""

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(
            f"Only gzip supported. Proposed encoding schemes received: {found}"
        )


class ContentEncoding(Enum):
    """Supported content encodings."""

    GZIP = "gzip"

    @classmethod
    def parse(cls, text: str) -> ContentEncoding:
        """Parse a single encoding scheme name."""
        try:
            return cls(text)
        except ValueError:
            raise EncodingParseError(text) from None

    @classmethod
    def from_header(cls, value: str) -> ContentEncoding | None:
        """Pick gzip from an ``Accept-Encoding`` value, or None if not offered."""
        for scheme in value.split(","):
            try:
                encoding = cls.parse(scheme.strip())
            except EncodingParseError:
                continue
            if encoding is cls.GZIP:
                return encoding
        return None

    def encode_body(self, body: bytes) -> bytes:
        """Encode ``body`` with this scheme."""
        if self is ContentEncoding.GZIP:
            return gzip.compress(bytes(body))
        raise EncodingParseError(self.value)

    def __str__(self) -> str:
        return self.value