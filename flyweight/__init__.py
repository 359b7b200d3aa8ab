"""A small threaded HTTP/1.1 server with echo, user-agent and static file endpoints."""

__version__ = "0.1.0"