"""Command-line entry point of the server."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, Sequence

from flyweight.config import Config, ConfigBuilder, ConfigError
from flyweight.server import Server

CONFIG_FILE = "server_config.toml"


def load_config(
    argv: Sequence[str],
    environ: Mapping[str, str] | None = None,
    config_path: str | os.PathLike = CONFIG_FILE,
) -> Config:
    """Combine flags, the config file and the environment, in that order of precedence."""
    cli_cfg = ConfigBuilder.from_cli_args(argv)
    file_cfg = ConfigBuilder.from_config_file(config_path)
    env_cfg = ConfigBuilder.from_env(environ)
    return cli_cfg.merge(file_cfg).merge(env_cfg).build()


def main(argv: Sequence[str] | None = None) -> int:
    """Load the configuration and run the server; returns the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        config = load_config(args)
    except ConfigError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    print(f"Config: {config}")

    server = Server(config.server_addr, config.pool_size, config.data_dir)
    try:
        server.run()
    except KeyboardInterrupt:
        pass
    except OSError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    print("Shutting down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())