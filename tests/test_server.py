import gzip
import socket
import threading

import pytest

from flyweight.server import Server


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path.resolve()


@pytest.fixture
def running_server(data_dir):
    server = Server(("127.0.0.1", 0), 4, data_dir)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    assert server.listening.wait(5)
    yield server
    server.shutdown()
    thread.join(5)


def _read_response(reader):
    status = reader.readline().decode("utf-8").rstrip("\r\n")
    headers = {}
    while True:
        line = reader.readline()
        if line in (b"\r\n", b""):
            break
        name, _, value = line.decode("utf-8").partition(":")
        headers[name.strip()] = value.strip()
    body = reader.read(int(headers.get("content-length", "0")))
    return status, headers, body


def _exchange(address, raw):
    with socket.create_connection(address, timeout=5) as sock:
        sock.sendall(raw)
        with sock.makefile("rb") as reader:
            return _read_response(reader)


def test_echo_endpoint(running_server):
    status, headers, body = _exchange(
        running_server.address, b"GET /echo/hello HTTP/1.1\r\nHost: localhost\r\n\r\n"
    )
    response = f"{status}\r\ncontent-type: {headers['content-type']}\r\n".encode() + body
    assert b"HTTP/1.1 200 OK" in response
    assert b"content-type: text/plain" in response
    assert b"hello" in response


def test_get_file(running_server, data_dir):
    (data_dir / "hello.txt").write_bytes(b"file contents")
    status, headers, body = _exchange(
        running_server.address, b"GET /files/hello.txt HTTP/1.1\r\n\r\n"
    )
    assert status == "HTTP/1.1 200 OK"
    assert headers["content-type"] == "text/plain"
    assert body == b"file contents"


def test_missing_file_is_not_found(running_server):
    status, _, body = _exchange(running_server.address, b"GET /files/absent.txt HTTP/1.1\r\n\r\n")
    assert status == "HTTP/1.1 404 Not Found"
    assert body == b""


def test_post_file(running_server, data_dir):
    status, headers, _ = _exchange(
        running_server.address,
        b"POST /files/new.txt HTTP/1.1\r\nContent-Length: 3\r\n\r\nabc",
    )
    assert status == "HTTP/1.1 201 Created"
    assert headers["content-type"] == "application/octet-stream"
    assert (data_dir / "new.txt").read_text() == "abc"


def test_gzip_round_trip(running_server):
    status, headers, body = _exchange(
        running_server.address,
        b"GET /echo/hello HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n",
    )
    assert status == "HTTP/1.1 200 OK"
    assert headers["content-encoding"] == "gzip"
    assert gzip.decompress(body) == b"hello"


def test_keep_alive_serves_several_requests(running_server):
    with socket.create_connection(running_server.address, timeout=5) as sock:
        with sock.makefile("rb") as reader:
            sock.sendall(b"GET /echo/one HTTP/1.1\r\n\r\n")
            first = _read_response(reader)
            sock.sendall(b"GET /echo/two HTTP/1.1\r\n\r\n")
            second = _read_response(reader)
    assert first[2] == b"one"
    assert second[2] == b"two"


def test_connection_close(running_server):
    with socket.create_connection(running_server.address, timeout=5) as sock:
        sock.sendall(b"GET /echo/bye HTTP/1.1\r\nConnection: close\r\n\r\n")
        with sock.makefile("rb") as reader:
            status, headers, body = _read_response(reader)
            rest = reader.read()
    assert status == "HTTP/1.1 200 OK"
    assert headers["connection"] == "close"
    assert body == b"bye"
    assert rest == b""


def test_handle_connection_bad_request(data_dir):
    server = Server(("127.0.0.1", 0), 1, data_dir)
    client, server_side = socket.socketpair()
    client.settimeout(5)
    try:
        client.sendall(b"BREW / HTTP/1.1\r\n\r\n")
        result = server.handle_connection(server_side)
        with client.makefile("rb") as reader:
            status, headers, body = _read_response(reader)
    finally:
        client.close()
        server.shutdown()
    assert result is None
    assert status == "HTTP/1.1 400 Bad Request"
    assert headers["content-type"] == "text/plain"
    assert headers["content-length"] == "29"
    assert body == b"unsupported HTTP method: BREW"


def test_shutdown_stops_run(data_dir):
    server = Server(("127.0.0.1", 0), 2, data_dir)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    assert server.listening.wait(5)
    server.shutdown()
    thread.join(5)
    assert not thread.is_alive()
    assert not server.listening.is_set()