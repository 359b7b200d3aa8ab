"""Parsing of HTTP requests from a byte stream."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO

from flyweight.http_commons import HttpVersion, HttpVersionParseError

logger = logging.getLogger(__name__)

_LENGTH_RE = re.compile(r"\+?[0-9]+")


class RequestError(Exception):
    """Base class for errors raised while reading a request."""


class RequestIOError(RequestError):
    """The underlying stream failed while reading."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"I/O while reading request: {error}")


class RequestLineError(RequestError):
    """The request line is not ``<method> <target> <version>``."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"malformed request line: {line}")


class UnsupportedMethodError(RequestError):
    """The request method is not supported."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"unsupported HTTP method: {method}")


class UnsupportedVersionError(RequestError):
    """The protocol version is not supported."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"unsupported HTTP protocol version: {version}")


class HeaderError(RequestError):
    """A header line has no ``:`` separator."""

    def __init__(self, header: str) -> None:
        self.header = header
        super().__init__(f"invalid header: {header}")


class BodyDecodeError(RequestError):
    """The request body is not valid UTF-8."""

    def __init__(self, error: UnicodeDecodeError) -> None:
        self.error = error
        super().__init__(f"body is not valid UTF-8: {error}")


class ContentLengthError(RequestError):
    """The ``Content-Length`` header is not a non-negative integer."""

    def __init__(self, value: str) -> None:
        self.value = value
        reason = (
            "cannot parse integer from empty string"
            if not value
            else "invalid digit found in string"
        )
        super().__init__(f"error parsing the body length: {reason}")


class HttpMethodParseError(ValueError):
    """Raised when a method string is not supported."""

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(f"unsupported HTTP method: {found}")


class HttpMethod(Enum):
    """HTTP methods understood by the server."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def parse(cls, text: str) -> HttpMethod:
        """Parse a method as it appears on the request line."""
        try:
            return cls(text)
        except ValueError:
            raise HttpMethodParseError(text) from None

    def __str__(self) -> str:
        return self.value


def _read_line(stream: BinaryIO) -> str:
    try:
        raw = stream.readline()
    except OSError as err:
        raise RequestIOError(err) from err
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise RequestIOError(err) from err


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        try:
            chunk = stream.read(remaining)
        except OSError as err:
            raise RequestIOError(err) from err
        if not chunk:
            raise RequestIOError(EOFError("failed to fill whole buffer"))
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _parse_length(text: str) -> int:
    if not _LENGTH_RE.fullmatch(text):
        raise ContentLengthError(text)
    return int(text)


@dataclass
class HttpRequest:
    """A parsed HTTP request."""

    method: HttpMethod = HttpMethod.GET
    target: str = ""
    protocol_version: HttpVersion = HttpVersion.HTTP11
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> HttpRequest:
        """Read and parse one request from a binary stream.

        Raises a ``RequestError`` subclass when the request is malformed or
        the stream fails.
        """
        request_line = _read_line(stream)
        logger.debug("read request-line: %r", request_line)

        parts = request_line.split()
        if len(parts) != 3:
            raise RequestLineError(request_line)
        method_text, target, version_text = parts

        try:
            method = HttpMethod.parse(method_text)
        except HttpMethodParseError as err:
            raise UnsupportedMethodError(err.found) from err
        try:
            version = HttpVersion.parse(version_text)
        except HttpVersionParseError as err:
            raise UnsupportedVersionError(err.found) from err

        headers: dict[str, str] = {}
        while True:
            line = _read_line(stream)
            if line == "\r\n":
                break
            name, sep, value = line.partition(":")
            if not sep:
                raise HeaderError(line)
            headers[name.lower()] = value.strip()

        body = None
        length_text = headers.get("content-length")
        if length_text is not None:
            data = _read_exact(stream, _parse_length(length_text))
            try:
                body = data.decode("utf-8")
            except UnicodeDecodeError as err:
                raise BodyDecodeError(err) from err

        return cls(
            method=method,
            target=target,
            protocol_version=version,
            headers=headers,
            body=body,
        )

    def keep_alive(self) -> bool:
        """Whether the connection should stay open after this request."""
        return self.headers.get("connection") != "close"