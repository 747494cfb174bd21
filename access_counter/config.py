"""
Configuration for the access-counter service.

Settings come from environment variables with defaults for everything, so the
service starts with no configuration at all when pointed at a local Redis.
Invalid values are logged and replaced by their defaults rather than aborting
startup.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Mapping, List, Tuple

logger = logging.getLogger(__name__)

REDIS_ADDR_DEFAULT = "localhost:6379"
REDIS_PORT_DEFAULT = 6379
REDIS_DB_DEFAULT = 0
REDIS_CONNECT_TIMEOUT_DEFAULT = 5.0
REDIS_SOCKET_TIMEOUT_DEFAULT = 3.0
SECRET_FILE_DEFAULT = "/vault/secrets/redis-config"
PASSWORD_ENV_DEFAULT = "REDIS_PASSWORD"
COUNTER_KEY_DEFAULT = "access_count"
HOST_DEFAULT = "0.0.0.0"
PORT_DEFAULT = 8080
LOG_LEVEL_DEFAULT = "INFO"
STORE_BACKENDS = ("redis", "memory")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def split_addr(addr: str, default_port: int = REDIS_PORT_DEFAULT) -> Tuple[str, int]:
    """Split a ``host:port`` address. Raises ValueError on a non-numeric port.

    Accepts ``host``, ``host:port`` and ``[ipv6]:port``.
    """
    addr = addr.strip()
    if addr.startswith("["):
        host, sep, rest = addr[1:].partition("]")
        if not sep:
            raise ValueError(f"Unterminated IPv6 literal in address: {addr!r}")
        port_part = rest[1:] if rest.startswith(":") else ""
    elif addr.count(":") == 1:
        host, port_part = addr.split(":", 1)
    else:
        host, port_part = addr, ""
    if not port_part:
        return host or "localhost", default_port
    return host or "localhost", int(port_part)


@dataclass
class Settings:
    """Service settings.

    Attributes:
        redis_addr: Store network address as ``host:port``
        redis_db: Logical database index (fixed at the store default)
        redis_connect_timeout: Seconds allowed to open a store connection
        redis_socket_timeout: Seconds allowed for a store reply
        secret_file: Path where the secret-injection sidecar writes the password
        password_env: Name of the fallback environment variable for the password
        counter_key: Name of the counter incremented by ``GET /data``
        store_backend: ``redis`` or ``memory`` (local runs without a server)
        host: Interface the HTTP listener binds to
        port: Port the HTTP listener binds to
        log_level: Logging level name
    """
    redis_addr: str = REDIS_ADDR_DEFAULT
    redis_db: int = REDIS_DB_DEFAULT
    redis_connect_timeout: float = REDIS_CONNECT_TIMEOUT_DEFAULT
    redis_socket_timeout: float = REDIS_SOCKET_TIMEOUT_DEFAULT
    secret_file: str = SECRET_FILE_DEFAULT
    password_env: str = PASSWORD_ENV_DEFAULT
    counter_key: str = COUNTER_KEY_DEFAULT
    store_backend: str = "redis"
    host: str = HOST_DEFAULT
    port: int = PORT_DEFAULT
    log_level: str = LOG_LEVEL_DEFAULT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from an environment mapping (``os.environ`` by default)."""
        env = os.environ if environ is None else environ
        settings = cls()

        redis_addr = env.get("REDIS_ADDR")
        if redis_addr:
            settings.redis_addr = redis_addr

        for var, attr in (("REDIS_CONNECT_TIMEOUT", "redis_connect_timeout"), ("REDIS_SOCKET_TIMEOUT", "redis_socket_timeout")):
            raw = env.get(var)
            if raw:
                try:
                    setattr(settings, attr, float(raw))
                except (ValueError, TypeError):
                    logger.warning(f"Invalid {var} environment variable: {raw}")

        host = env.get("HOST")
        if host:
            settings.host = host

        port = env.get("PORT")
        if port:
            try:
                settings.port = int(port)
            except (ValueError, TypeError):
                logger.warning(f"Invalid PORT environment variable: {port}")

        log_level = env.get("LOG_LEVEL")
        if log_level:
            settings.log_level = log_level.upper()

        backend = env.get("STORE_BACKEND")
        if backend:
            settings.store_backend = backend.strip().lower()

        errors = settings.validate()
        if errors:
            logger.warning(f"Configuration validation errors: {errors}")
            settings._reset_invalid()
        return settings

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        try:
            _, redis_port = split_addr(self.redis_addr)
            if not 0 < redis_port < 65536:
                errors.append(f"REDIS_ADDR port out of range: {redis_port}")
        except ValueError:
            errors.append(f"REDIS_ADDR must be host:port, got {self.redis_addr!r}")
        if not isinstance(self.port, int) or not 0 <= self.port < 65536:
            errors.append("Port must be an integer between 0 and 65535")
        if not self.redis_connect_timeout > 0 or not self.redis_socket_timeout > 0:
            errors.append("Redis timeouts must be positive numbers of seconds")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Log level must be one of {list(VALID_LOG_LEVELS)}")
        if self.store_backend not in STORE_BACKENDS:
            errors.append(f"Store backend must be one of {list(STORE_BACKENDS)}")
        return errors

    def _reset_invalid(self) -> None:
        try:
            _, redis_port = split_addr(self.redis_addr)
            if not 0 < redis_port < 65536:
                raise ValueError(redis_port)
        except ValueError:
            self.redis_addr = REDIS_ADDR_DEFAULT
        if not isinstance(self.port, int) or not 0 <= self.port < 65536:
            self.port = PORT_DEFAULT
        if not self.redis_connect_timeout > 0:
            self.redis_connect_timeout = REDIS_CONNECT_TIMEOUT_DEFAULT
        if not self.redis_socket_timeout > 0:
            self.redis_socket_timeout = REDIS_SOCKET_TIMEOUT_DEFAULT
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            self.log_level = LOG_LEVEL_DEFAULT
        if self.store_backend not in STORE_BACKENDS:
            self.store_backend = "redis"

    def redis_host_port(self) -> Tuple[str, int]:
        return split_addr(self.redis_addr)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the process.

    Uses LOG_LEVEL from the environment when no level is given and falls back
    to INFO for unknown level names.
    """
    name = (level or os.environ.get("LOG_LEVEL") or LOG_LEVEL_DEFAULT).upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
