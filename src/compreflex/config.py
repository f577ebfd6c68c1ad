"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Configuration for the two servers: one dataclass per role, sharing the
network / concurrency / logging settings of ServerConfig.

    ServerConfig
    ├── BackendConfig    port 45000, allowed_types
    └── FacadeConfig     port 35000, backend_url, backend_timeout

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m compreflex backend --port 9000                   │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── COMPREFLEX_BACKEND_PORT=9000 python -m compreflex backend  │
    │                                                                     │
    │   3. Default values (in these dataclasses)                          │
    └─────────────────────────────────────────────────────────────────────┘

Values are validated eagerly at startup: validate() raises ValueError with
a message naming the offending setting.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit


ENV_PREFIX = "COMPREFLEX_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(ENV_PREFIX + name, default)


@dataclass
class ServerConfig:
    """
    Settings shared by both servers.

    Development:
        BackendConfig(log_level="DEBUG")

    Exposed on the network (never without allowed_types!):
        BackendConfig(host="0.0.0.0", workers=8, allowed_types=("math",))
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of connections waiting to be accepted."""

    timeout: Optional[float] = 30.0
    """Socket timeout in seconds for reading the request and writing the response."""

    max_request_size: int = 64 * 1024
    """Maximum size of the request line plus headers (no bodies are read)."""

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 1
    """
    Worker threads serving connections.
    1 = one request at a time, in arrival order.
    """

    queue_size: int = 100
    """Accepted connections waiting for a worker; beyond this, 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-like) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        COMPREFLEX_HOST        Bind address (default: 127.0.0.1)
        COMPREFLEX_WORKERS     Worker threads (default: 1)
        COMPREFLEX_TIMEOUT     Socket timeout in seconds (default: 30)
        COMPREFLEX_LOG_LEVEL   Logging level (default: INFO)
        COMPREFLEX_LOG_FORMAT  Access log format (default: text)

        Role-specific variables are listed on BackendConfig / FacadeConfig.

        =====================================================================
        """
        return cls(**cls._env_values())

    @classmethod
    def _env_values(cls) -> dict:
        values = {
            "host": _env("HOST", cls.host),
            "workers": int(_env("WORKERS", str(cls.workers))),
            "timeout": float(_env("TIMEOUT", str(cls.timeout))),
            "log_level": _env("LOG_LEVEL", cls.log_level).upper(),
            "log_format": _env("LOG_FORMAT", cls.log_format).lower(),
        }
        return values

    def validate(self) -> None:
        """Fail fast on impossible values."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < 1024:
            raise ValueError("max_request_size must be >= 1024")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.log_format}. Use 'text' or 'json'.")


@dataclass
class BackendConfig(ServerConfig):
    """Settings of the backend (the reflective executor)."""

    port: int = 45000

    allowed_types: Optional[tuple[str, ...]] = None
    """
    Dotted names (modules or classes) commands may resolve, including their
    children: ("math", "collections") allows "collections.OrderedDict".
    None = unrestricted, which lets any caller run any importable code.
    """

    @classmethod
    def _env_values(cls) -> dict:
        """
        Adds:
            COMPREFLEX_BACKEND_PORT    (default: 45000)
            COMPREFLEX_ALLOWED_TYPES   comma separated (default: unrestricted)
        """
        values = super()._env_values()
        values["port"] = int(_env("BACKEND_PORT", str(cls.port)))
        values["allowed_types"] = parse_allowed_types(_env("ALLOWED_TYPES"))
        return values

    def validate(self) -> None:
        super().validate()
        if self.allowed_types is not None:
            for name in self.allowed_types:
                if not name or not all(name.split(".")):
                    raise ValueError(f"Invalid allowed type: {name!r}")


@dataclass
class FacadeConfig(ServerConfig):
    """Settings of the facade (client page + proxy)."""

    port: int = 35000

    backend_url: str = "http://localhost:45000"
    """Base URL of the backend; /compreflex is appended."""

    backend_timeout: float = 10.0
    """Connect / read timeout for the call to the backend, in seconds."""

    @classmethod
    def _env_values(cls) -> dict:
        """
        Adds:
            COMPREFLEX_FACADE_PORT      (default: 35000)
            COMPREFLEX_BACKEND_URL      (default: http://localhost:45000)
            COMPREFLEX_BACKEND_TIMEOUT  (default: 10)
        """
        values = super()._env_values()
        values["port"] = int(_env("FACADE_PORT", str(cls.port)))
        values["backend_url"] = _env("BACKEND_URL", cls.backend_url)
        values["backend_timeout"] = float(_env("BACKEND_TIMEOUT", str(cls.backend_timeout)))
        return values

    def validate(self) -> None:
        super().validate()
        parts = urlsplit(self.backend_url)
        if parts.scheme != "http" or not parts.hostname:
            raise ValueError(f"Invalid backend_url: {self.backend_url}. Expected http://host[:port]")
        if self.backend_timeout <= 0:
            raise ValueError("backend_timeout must be > 0")


def parse_allowed_types(value: Optional[str]) -> Optional[tuple[str, ...]]:
    """"math, collections" → ("math", "collections"); empty → None."""
    if not value:
        return None
    names = tuple(name.strip() for name in value.split(",") if name.strip())
    return names or None
