"""The TCP server that reads requests and writes responses."""

from __future__ import annotations

import logging
import os
import socket
import threading
from functools import partial
from pathlib import Path

from flyweight.endpoints import response_for_request
from flyweight.http_request import HttpRequest, RequestError
from flyweight.http_response import HttpResponse
from flyweight.thread_pool import ThreadPool

logger = logging.getLogger(__name__)

READ_TIMEOUT = 30.0
_POLL_INTERVAL = 0.2


class Server:
    """An HTTP server handling each connection on a thread pool."""

    def __init__(self, address: tuple[str, int], pool_size: int, data_dir: str | os.PathLike) -> None:
        self.address = address
        self.thread_pool = ThreadPool(pool_size)
        self.data_dir = Path(data_dir)
        self.listening = threading.Event()
        self._stop = threading.Event()
        self._finished = threading.Event()
        self._finished.set()

    def run(self) -> None:
        """Accept connections until ``shutdown`` is called.

        Raises ``OSError`` when binding or accepting fails.
        """
        self._finished.clear()
        try:
            host = self.address[0]
            family = socket.AF_INET6 if ":" in host else socket.AF_INET
            with socket.create_server(self.address, family=family) as listener:
                listener.settimeout(_POLL_INTERVAL)
                self.address = tuple(listener.getsockname()[:2])
                self.listening.set()
                while not self._stop.is_set():
                    try:
                        conn, _peer = listener.accept()
                    except TimeoutError:
                        continue
                    self.thread_pool.execute(partial(self._serve, conn))
        finally:
            self.listening.clear()
            self.thread_pool.shutdown()
            self._finished.set()

    def _serve(self, conn: socket.socket) -> None:
        try:
            self.handle_connection(conn)
        except OSError as err:
            logger.error("error handling the stream: %s", err)
        else:
            logger.info("successfully handled stream")

    def handle_connection(self, conn: socket.socket) -> None:
        """Serve requests on ``conn`` until the client asks to close or errs."""
        logger.info("accepted new connection")
        conn.settimeout(READ_TIMEOUT)
        with conn, conn.makefile("rb") as reader:
            keep_alive = True
            while keep_alive:
                try:
                    request = HttpRequest.from_stream(reader)
                except RequestError as err:
                    logger.warning("error parsing the http-request: %s", err)
                    keep_alive = False
                    response = HttpResponse.from_bad_request(err)
                else:
                    keep_alive = request.keep_alive()
                    response = response_for_request(request, self.data_dir)
                    logger.info(
                        "built http-response (status code: %s) for %s with content type %s",
                        response.status_code,
                        request.target,
                        response.content_type,
                    )
                conn.sendall(response.to_bytes())

    def shutdown(self) -> None:
        """Stop accepting connections and wait for running handlers to finish."""
        self._stop.set()
        self._finished.wait()
        self.thread_pool.shutdown()