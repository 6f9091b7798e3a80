"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server and the hx layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  1. Defaults           ServerConfig()                               │
    │  2. Environment        ServerConfig.from_env()   (HTTP_* variables) │
    │  3. Command line       python -m hxserver --port 3000               │
    │                                                                      │
    │  Later sources override earlier ones.                               │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass


_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", port=8080, log_level="DEBUG")

    Behind a shared cache:
        ServerConfig(host="0.0.0.0", port=80, hx_vary=True)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Interface to bind. "0.0.0.0" for all interfaces (containers)."""

    port: int = 8080

    timeout: float = 30.0
    """Socket read timeout per connection, in seconds."""

    max_request_size: int = 10 * 1024 * 1024
    """Requests larger than this are answered with 413."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG also shows which hx headers each response flushed."""

    log_format: str = "text"
    """Access log format: "text" or "json"."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "HXServer/1.0"

    # ─────────────────────────────────────────────────────────────────────
    # HX
    # ─────────────────────────────────────────────────────────────────────

    hx_vary: bool = False
    """
    Add "Vary: HX-Request" to every response.

    Turn this on when the same URL serves a full page to browsers and a
    fragment to the hx client and a cache sits in between; otherwise the
    cache may hand the fragment to a plain page load.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            HTTP_HOST        Server host (default: 127.0.0.1)
            HTTP_PORT        Server port (default: 8080)
            HTTP_TIMEOUT     Read timeout in seconds (default: 30)
            HTTP_LOG_LEVEL   Logging level (default: INFO)
            HTTP_LOG_FORMAT  "text" or "json" (default: text)
            HTTP_HX_VARY     1/true/yes/on to send Vary: HX-Request
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
            hx_vary=os.getenv("HTTP_HX_VARY", "").strip().lower() in _TRUE_VALUES,
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately, not on the
        first request.
        """
        # Port 0 asks the OS for a free port.
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < 1024:
            raise ValueError("max_request_size must be >= 1024")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format!r}. Must be 'text' or 'json'.")
