# flyweight

A small HTTP/1.1 server with no dependencies. A fixed-size pool of worker threads handles the connections.

## Endpoints

| Target            | Behaviour                                                                 |
|-------------------|---------------------------------------------------------------------------|
| `/echo/<text>`    | Returns `<text>` as `text/plain`.                                         |
| `/user-agent`     | Returns the value of the `User-Agent` header. The server answers 500 if the header is missing. |
| `/sleep`          | Waits ten seconds, then answers `Good sleep!`. This is useful for checking that requests run concurrently. |
| `/files/<name>`   | `GET` reads `<name>` from the data directory. `POST` writes the request body to it and answers `201 Created`. |
| `/<path>`         | Same as `/files/`, but relative to the root of the data directory. `GET /` serves `index.html`, or a directory listing if that file does not exist. |

Rules that apply to every request:

- If a requested file cannot be read, the server answers `404 Not Found`.
- Paths that try to leave the data directory are refused. This covers `..`, leading dots, backslashes and NUL bytes.
- When the client lists `gzip` in `Accept-Encoding`, response bodies are gzip-compressed.
- Connections stay open unless the client sends `Connection: close`.
- A malformed request gets a `400 Bad Request` whose body describes the problem. The server then closes the connection.
- A target that does not start with `/` gets `501 Not Implemented`.

## Installing

```
pip install .
```

## Running

```
flyweight --address 127.0.0.1:4221 --pool-size 10 --data-dir ./public
```

Options:

- `--address`, `-a`: the address to listen on. Give it as `ipv4:port` or `[ipv6]:port`. The default is `127.0.0.1:4221`.
- `--pool-size`, `-s`: the number of worker threads. It must be at least 1. The default is `10`.
- `--data-dir`, `--directory`, `-d`: the directory that files are served from and written to. It must exist. The default is `.`.

The same settings can also come from a `server_config.toml` file in the working directory. Values are written unquoted:

```
[server]
address = 127.0.0.1:8080
pool_size = 4
data_dir = ./public
```

They can also come from the environment variables `ADDRESS`, `POOL_SIZE` and `DATA_DIR`.

Command-line options take precedence over the config file, and the config file takes precedence over the environment. If the config file is missing, the server logs a warning and goes on without it. Press Ctrl-C to stop the server.

## Using it from Python

```python
from pathlib import Path

from flyweight.config import parse_socket_addr
from flyweight.server import Server

server = Server(parse_socket_addr("127.0.0.1:4221"), 4, Path("public"))
server.run()  # blocks; call server.shutdown() from another thread to stop
```

Useful pieces:

- `flyweight.cli.load_config` builds a `Config` from command-line arguments, an environment mapping and a config file path, the same way the command does.
- `flyweight.config.ConfigBuilder` provides `from_cli_args`, `from_env`, `from_config_file`, `merge` and `build`.
- `flyweight.http_request.HttpRequest.from_stream` parses a request from a binary stream.
- `flyweight.endpoints.response_for_request` routes a parsed request and returns an `HttpResponse`. Its `to_bytes()` gives the bytes to send on the wire.

## Limitations

- Only `GET` and `POST` are accepted.
- Request targets are not percent-decoded.
- There is no TLS.
- There is no chunked transfer encoding: a request body is read only when it has a `Content-Length`.
- `HTTP/2` is accepted on the request line, but responses are always framed as plain HTTP/1.1 text.