"""keepalive: keep-alive monitor for HTTP(S) endpoints."""

__version__ = "0.1.0"
