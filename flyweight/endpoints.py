"""Request routing and the handlers behind each endpoint."""

from __future__ import annotations

import logging
import os
import time
from enum import Enum
from pathlib import Path, PurePosixPath

from flyweight.encoding import ContentEncoding
from flyweight.http_request import HttpMethod, HttpRequest
from flyweight.http_response import ContentType, HttpResponse, StatusCode

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "index.html"
SLEEP_SECONDS = 10
MAX_TARGET_LENGTH = 1024

_ECHO_PREFIX = "/echo/"
_FILES_PREFIX = "/files/"


class EndpointError(Exception):
    """Base class for errors raised while handling an endpoint."""


class EndpointNotRecognizedError(EndpointError):
    """The request target matches no endpoint."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"request-target not recognized: {target}")


class WrongEndpointError(EndpointError):
    """A file operation was requested on an endpoint that serves no files."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"wrong endpoint to access a file/url: {target}")


class UserAgentNotFoundError(EndpointError):
    """The request has no ``User-Agent`` header."""

    def __init__(self) -> None:
        super().__init__("user-agent header not found")


class PostBodyNotFoundError(EndpointError):
    """A POST request carried no body."""

    def __init__(self) -> None:
        super().__init__("body not found")


class ContentTypeError(EndpointError):
    """The content type of a file could not be determined."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"problem parsing the content-type : {filename}")


class EndpointIOError(EndpointError):
    """Reading or writing a file failed."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"I/O on the requested file : {error}")


class BadRequestError(EndpointError):
    """The request target is malformed or tries to escape the data directory."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"bad request : {detail}")


def _clean_target(request: HttpRequest, prefix: str) -> str:
    """Strip ``prefix`` from the target and reject unsafe paths."""
    target = request.target
    raw = target[len(prefix):] if target.startswith(prefix) else ""

    if len(raw.encode("utf-8")) > MAX_TARGET_LENGTH or "\0" in raw or "\\" in raw:
        raise BadRequestError(raw)

    if ".." in raw or raw.startswith("."):
        raise BadRequestError(raw)

    if any(part in ("/", "//", ".", "..") for part in PurePosixPath(raw).parts):
        raise BadRequestError(raw)

    return raw


def _render_directory_listing(directory: Path) -> bytes:
    """Render a minimal HTML index of ``directory``, hiding dotfiles."""
    lines = [
        '<!doctype html><meta charset="utf-8">'
        f"<title>Index of {directory}</title><h1>Index of {directory}</h1><ul>"
    ]
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.name.startswith("."):
                continue
            display = f"{entry.name}/" if entry.is_dir() else entry.name
            lines.append(f'<li><a href="{display}">{display}</a></li>')
    lines.append("</ul>")
    return "".join(f"{line}\n" for line in lines).encode("utf-8")


class Endpoint(Enum):
    """The endpoints served by the server."""

    ECHO = "echo"
    USER_AGENT = "user-agent"
    SLEEP = "sleep"
    FILE = "file"
    URL_PATH = "url-path"

    @classmethod
    def from_target(cls, target: str) -> Endpoint:
        """Route a request target to its endpoint."""
        if target.startswith(_ECHO_PREFIX):
            return cls.ECHO
        if target == "/user-agent":
            return cls.USER_AGENT
        if target == "/sleep":
            return cls.SLEEP
        if target.startswith(_FILES_PREFIX):
            return cls.FILE
        if target.startswith("/"):
            return cls.URL_PATH
        logger.warning("error parsing the endpoint: %s", target)
        raise EndpointNotRecognizedError(target)

    def handle_request(self, request: HttpRequest, data_dir: str | os.PathLike) -> HttpResponse:
        """Build the response for ``request``; raises ``EndpointError`` on failure."""
        data_dir = Path(data_dir)
        accept = request.headers.get("accept-encoding")
        response = HttpResponse(
            protocol_version=request.protocol_version,
            content_encoding=ContentEncoding.from_header(accept) if accept is not None else None,
            conn_close=not request.keep_alive(),
        )

        if self is Endpoint.ECHO:
            self._set_body(response, request.target[len(_ECHO_PREFIX):].encode("utf-8"))
        elif self is Endpoint.USER_AGENT:
            user_agent = request.headers.get("user-agent")
            if user_agent is None:
                raise UserAgentNotFoundError()
            self._set_body(response, user_agent.encode("utf-8"))
        elif self is Endpoint.SLEEP:
            time.sleep(SLEEP_SECONDS)
            self._set_body(response, b"Good sleep!")
        elif request.method is HttpMethod.GET:
            self._serve_file(request, data_dir, response)
        else:
            self._store_file(request, data_dir, response)
        return response

    def file_content_type(self, request: HttpRequest, data_dir: str | os.PathLike) -> ContentType:
        """The content type of the file the request targets, from its extension."""
        filename = self._target_filename(request)
        suffix = (Path(data_dir) / filename).suffix
        return ContentType.from_extension(suffix[1:] if suffix else "")

    @staticmethod
    def _set_body(response: HttpResponse, body: bytes) -> None:
        response.content_length = len(body)
        response.body = body

    def _prefix(self, request: HttpRequest) -> str:
        if self is Endpoint.URL_PATH:
            return "/"
        if self is Endpoint.FILE:
            return _FILES_PREFIX
        raise WrongEndpointError(request.target)

    def _target_filename(self, request: HttpRequest) -> str:
        target = _clean_target(request, self._prefix(request))
        return target or DEFAULT_TARGET

    def _file_content(self, request: HttpRequest, data_dir: Path) -> bytes:
        target = _clean_target(request, self._prefix(request))

        if not target:
            try:
                return (data_dir / DEFAULT_TARGET).read_bytes()
            except FileNotFoundError:
                try:
                    return _render_directory_listing(data_dir)
                except OSError as err:
                    raise EndpointIOError(err) from err
            except OSError as err:
                raise EndpointIOError(err) from err

        try:
            real_path = (data_dir / target).resolve(strict=True)
        except (OSError, RuntimeError) as err:
            raise EndpointIOError(err) from err

        if not real_path.is_relative_to(data_dir):
            raise BadRequestError(target)

        try:
            return real_path.read_bytes()
        except OSError as err:
            raise EndpointIOError(err) from err

    def _serve_file(self, request: HttpRequest, data_dir: Path, response: HttpResponse) -> None:
        try:
            content = self._file_content(request, data_dir)
        except EndpointError as err:
            logger.warning("error getting file content: %s", err)
            response.status_code = StatusCode.NOT_FOUND
            return
        response.content_type = self.file_content_type(request, data_dir)
        self._set_body(response, content)

    def _store_file(self, request: HttpRequest, data_dir: Path, response: HttpResponse) -> None:
        file_path = data_dir / self._target_filename(request)
        if request.body is None:
            raise PostBodyNotFoundError()
        try:
            file_path.write_bytes(request.body.encode("utf-8"))
        except OSError:
            response.status_code = StatusCode.NOT_FOUND
            return
        response.status_code = StatusCode.CREATED
        response.content_type = ContentType.OCTET_STREAM


def response_for_request(request: HttpRequest, data_dir: str | os.PathLike) -> HttpResponse:
    """Route ``request`` and build its response, turning failures into 501 or 500."""
    try:
        endpoint = Endpoint.from_target(request.target)
    except EndpointNotRecognizedError:
        return HttpResponse(status_code=StatusCode.NOT_IMPLEMENTED)
    try:
        return endpoint.handle_request(request, data_dir)
    except EndpointError as err:
        logger.error("internal error: %s", err)
        return HttpResponse(status_code=StatusCode.INTERNAL_SERVER_ERROR)