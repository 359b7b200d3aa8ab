"""Server configuration from command-line flags, the environment and a config file."""

from __future__ import annotations

import ipaddress
import logging
import os
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = ("127.0.0.1", 4221)
DEFAULT_POOL_SIZE = 10
DEFAULT_DATA_DIR = Path(".")

_POOL_SIZE_RE = re.compile(r"\+?[0-9]+")
_PORT_RE = re.compile(r"[0-9]+")


class ConfigError(Exception):
    """Base class for configuration errors."""


class PoolSizeZeroError(ConfigError):
    """The pool size was set to zero."""

    def __init__(self) -> None:
        super().__init__("Config error: pool size must be greater than zero")


class PoolSizeParseError(ConfigError):
    """The pool size is not a non-negative integer."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Config error: invalid pool size: {value!r}")


class BadServerAddrError(ConfigError):
    """The server address is not an ``ip:port`` socket address."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Config error: invalid socket address syntax: {value!r}")


class DataDirNotFoundError(ConfigError):
    """The data directory does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Config error: data directory does not exist: {path}")


class DataDirIOError(ConfigError):
    """The data directory could not be resolved."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"Config error: data directory I/O error: {error}")


class UnknownFlagError(ConfigError):
    """An unknown command-line flag was given."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Config error: {message}")


class MissingValueError(ConfigError):
    """A command-line flag was given without its value."""

    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Config error: missing value for {flag}")


def parse_socket_addr(text: str) -> tuple[str, int]:
    """Parse ``a.b.c.d:port`` or ``[ipv6]:port`` into a ``(host, port)`` pair."""
    if text.startswith("["):
        host, sep, port = text[1:].partition("]:")
        if not sep:
            raise BadServerAddrError(text)
        try:
            address: ipaddress._BaseAddress = ipaddress.IPv6Address(host)
        except ValueError:
            raise BadServerAddrError(text) from None
    else:
        host, sep, port = text.rpartition(":")
        if not sep:
            raise BadServerAddrError(text)
        try:
            address = ipaddress.IPv4Address(host)
        except ValueError:
            raise BadServerAddrError(text) from None
    if not _PORT_RE.fullmatch(port) or int(port) > 65535:
        raise BadServerAddrError(text)
    return str(address), int(port)


def _parse_pool_size(text: str) -> int:
    if not _POOL_SIZE_RE.fullmatch(text):
        raise PoolSizeParseError(text)
    size = int(text)
    if size == 0:
        raise PoolSizeZeroError()
    return size


def _resolve_data_dir(value: str) -> Path:
    if not value:
        raise DataDirIOError(FileNotFoundError("No such file or directory"))
    try:
        path = Path(value).resolve(strict=True)
    except (OSError, RuntimeError) as err:
        raise DataDirIOError(err) from err
    if not path.exists():
        raise DataDirNotFoundError(path)
    return path


def _next_value(args: Iterator[str], flag: str) -> str:
    value = next(args, None)
    if value is None:
        raise MissingValueError(flag)
    return value


@dataclass(frozen=True)
class Config:
    """Final server configuration."""

    server_addr: tuple[str, int]
    pool_size: int
    data_dir: Path


@dataclass
class ConfigBuilder:
    """A partial configuration; unset fields fall back to other sources or defaults."""

    server_addr: tuple[str, int] | None = None
    pool_size: int | None = None
    data_dir: Path | None = None

    @classmethod
    def from_cli_args(cls, args: Sequence[str]) -> ConfigBuilder:
        """Read settings from command-line arguments (without the program name)."""
        builder = cls()
        remaining = iter(args)
        for arg in remaining:
            if arg in ("--address", "-a"):
                builder.server_addr = parse_socket_addr(_next_value(remaining, "--address"))
            elif arg in ("--pool-size", "-s"):
                builder.pool_size = _parse_pool_size(_next_value(remaining, "--pool-size"))
            elif arg in ("--data-dir", "--directory", "-d"):
                builder.data_dir = _resolve_data_dir(_next_value(remaining, "--data-dir"))
            else:
                raise UnknownFlagError(f"Unknown CLI argument flag: {arg}")
        return builder

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConfigBuilder:
        """Read settings from ``ADDRESS``, ``POOL_SIZE`` and ``DATA_DIR``."""
        env = os.environ if environ is None else environ
        builder = cls()
        if (value := env.get("ADDRESS")) is not None:
            builder.server_addr = parse_socket_addr(value)
        if (value := env.get("POOL_SIZE")) is not None:
            builder.pool_size = _parse_pool_size(value)
        if (value := env.get("DATA_DIR")) is not None:
            builder.data_dir = _resolve_data_dir(value)
        return builder

    @classmethod
    def from_config_file(cls, path: str | os.PathLike) -> ConfigBuilder:
        """Read ``key = value`` settings from the ``[server]`` section of a file.

        A file that cannot be read yields an empty builder.
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            logger.warning("failed to read config file '%s': %s", path, err)
            return cls()

        builder = cls()
        in_server_section = False
        for line in content.splitlines():
            if line.startswith("[") and line.endswith("]") and "server" in line:
                in_server_section = True
            if not in_server_section:
                continue
            key, sep, value = line.partition("=")
            if not sep:
                continue
            key, value = key.strip(), value.strip()
            if key == "address":
                builder.server_addr = parse_socket_addr(value)
            elif key == "pool_size":
                builder.pool_size = _parse_pool_size(value)
            elif key == "data_dir":
                builder.data_dir = _resolve_data_dir(value)
            else:
                logger.warning(
                    "unknown key-value pair found in config file [server] section: %s = %s",
                    key,
                    value,
                )
        return builder

    def merge(self, other: ConfigBuilder) -> ConfigBuilder:
        """Combine two builders; settings of ``self`` take precedence."""
        return ConfigBuilder(
            server_addr=self.server_addr if self.server_addr is not None else other.server_addr,
            pool_size=self.pool_size if self.pool_size is not None else other.pool_size,
            data_dir=self.data_dir if self.data_dir is not None else other.data_dir,
        )

    def build(self) -> Config:
        """Produce the final configuration, filling in defaults."""
        return Config(
            server_addr=self.server_addr if self.server_addr is not None else DEFAULT_ADDRESS,
            pool_size=self.pool_size if self.pool_size is not None else DEFAULT_POOL_SIZE,
            data_dir=self.data_dir if self.data_dir is not None else DEFAULT_DATA_DIR,
        )