"""HTTP responses and their serialisation to the wire."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

from flyweight.encoding import ContentEncoding
from flyweight.http_commons import HttpVersion


class StatusCode(Enum):
    """Status codes the server can answer with, as shown on the status line."""

    OK = "200 OK"
    NOT_FOUND = "404 Not Found"
    CREATED = "201 Created"
    NOT_IMPLEMENTED = "501 Not Implemented"
    INTERNAL_SERVER_ERROR = "500 Internal Server Error"
    BAD_REQUEST = "400 Bad Request"

    @property
    def code(self) -> int:
        """The numeric status code."""
        return int(self.value.split(" ", 1)[0])

    def __str__(self) -> str:
        return self.value


_EXTENSIONS = {
    "html": "HTML",
    "htm": "HTML",
    "css": "CSS",
    "js": "JAVASCRIPT",
    "json": "JSON",
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "gif": "GIF",
    "svg": "SVG",
    "txt": "PLAIN_TEXT",
    "pdf": "PDF",
}


class ContentType(Enum):
    """MIME types of response bodies."""

    HTML = "text/html"
    CSS = "text/css"
    JAVASCRIPT = "application/javascript"
    JSON = "application/json"
    PNG = "image/png"
    JPEG = "image/jpeg"
    GIF = "image/gif"
    SVG = "image/svg+xml"
    PLAIN_TEXT = "text/plain"
    PDF = "application/pdf"
    OCTET_STREAM = "application/octet-stream"

    @classmethod
    def from_extension(cls, ext: str) -> ContentType:
        """Map a file extension to a content type; unknown ones are octet-stream."""
        name = _EXTENSIONS.get(ext)
        return cls[name] if name is not None else cls.OCTET_STREAM

    def __str__(self) -> str:
        return self.value


@dataclass
class HttpResponse:
    """An HTTP response ready to be written to a client."""

    protocol_version: HttpVersion = HttpVersion.HTTP11
    status_code: StatusCode = StatusCode.OK
    content_type: ContentType = ContentType.PLAIN_TEXT
    content_length: int = 0
    content_encoding: ContentEncoding | None = None
    conn_close: bool = False
    body: bytes | None = None

    @classmethod
    def from_bad_request(cls, error: BaseException) -> HttpResponse:
        """Build a 400 response whose body describes ``error``."""
        body = str(error).encode("utf-8")
        return cls(
            status_code=StatusCode.BAD_REQUEST,
            body=body,
            content_length=len(body),
        )

    def to_bytes(self) -> bytes:
        """Serialise the response as it is sent on the wire.

        The body is encoded here when a content encoding is set.
        """
        head = [
            f"{self.protocol_version} {self.status_code}\r\n",
            f"content-type: {self.content_type}\r\n",
        ]
        if self.conn_close:
            head.append("connection: close\r\n")

        if self.body is None:
            head.append("\r\n")
            return "".join(head).encode("utf-8")

        if self.content_encoding is not None:
            head.append(f"content-encoding: {self.content_encoding}\r\n")
            payload = self.content_encoding.encode_body(self.body)
        else:
            payload = bytes(self.body)
        head.append(f"content-length: {len(payload)}\r\n\r\n")
        return "".join(head).encode("utf-8") + payload

    def write_to(self, writer: BinaryIO) -> None:
        """Write the serialised response to a binary writer."""
        writer.write(self.to_bytes())

    def __str__(self) -> str:
        parts = [
            f"{self.protocol_version} {self.status_code}\r\n",
            f"Content-Type: {self.content_type}\r\n",
        ]
        if self.conn_close:
            parts.append("Connection: close\r\n")
        if self.body is not None:
            parts.append(f"Content-Length: {len(self.body)}")
            if self.content_type is ContentType.PLAIN_TEXT:
                try:
                    parts.append(bytes(self.body).decode("utf-8"))
                except UnicodeDecodeError as err:
                    parts.append(f"Error converting plain-text body: {err}\n")
        return "".join(parts)