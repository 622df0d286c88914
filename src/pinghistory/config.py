"""
Central configuration module.

Loads the MySQL connection parameters and service options from the environment
(and an optional .env file) once at startup, and exposes them as an immutable
Settings object that is passed to the connection factory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

SUPPORTED_DRIVERS = ("mysql",)
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _getenv(env: Mapping[str, str], key: str, default: str) -> str:
    """
    Read an environment variable, treating an empty value as unset.
    """
    value = env.get(key, "")
    if len(value) == 0:
        return default
    return value


def parse_port(key: str, raw: str) -> int:
    """
    Parse a TCP port named `key` (env var or CLI flag), raising ConfigError if invalid.
    """
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None
    if not 1 <= port <= 65535:
        raise ConfigError(f"{key} must be in 1..65535, got {port}")
    return port


@dataclass(frozen=True)
class Settings:
    """
    Deployment-specific parameters.

    Attributes:
        driver: Database driver identifier (MYSQL_DRIVER). Only "mysql" is supported.
        user: Database user (MYSQL_USER).
        password: Database password (MYSQL_PASSWORD).
        database: Database holding the history table (MYSQL_DATABASE).
        host: Database host (MYSQL_HOST).
        port: Database port (MYSQL_PORT).
        listen_host: Interface the HTTP server binds to (PING_HOST).
        listen_port: Port the HTTP server binds to (PING_PORT).
        log_level: Root log level (LOG_LEVEL).
    """

    driver: str = "mysql"
    user: str = "root"
    password: str = ""
    database: str = "ping"
    host: str = "127.0.0.1"
    port: int = 3306
    listen_host: str = "0.0.0.0"
    listen_port: int = 8080
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.driver not in SUPPORTED_DRIVERS:
            raise ConfigError(
                f"Unsupported MYSQL_DRIVER {self.driver!r}; expected one of {SUPPORTED_DRIVERS}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {LOG_LEVELS}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Resolve settings from the environment.

        Args:
            env: Mapping to read from. If None, loads .env and uses os.environ.

        Returns:
            Settings instance.

        Raises:
            ConfigError: If a value cannot be used.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        return cls(
            driver=_getenv(env, "MYSQL_DRIVER", "mysql"),
            user=_getenv(env, "MYSQL_USER", "root"),
            password=_getenv(env, "MYSQL_PASSWORD", ""),
            database=_getenv(env, "MYSQL_DATABASE", "ping"),
            host=_getenv(env, "MYSQL_HOST", "127.0.0.1"),
            port=parse_port("MYSQL_PORT", _getenv(env, "MYSQL_PORT", "3306")),
            listen_host=_getenv(env, "PING_HOST", "0.0.0.0"),
            listen_port=parse_port("PING_PORT", _getenv(env, "PING_PORT", "8080")),
            log_level=_getenv(env, "LOG_LEVEL", "INFO").upper(),
        )

    def dsn(self, use_database: bool = True, redact: bool = False) -> str:
        """
        Render the connection string, e.g. ``root:@tcp(127.0.0.1:3306)/ping``.

        Args:
            use_database: If False, no database is selected (server scope).
            redact: Replace a non-empty password with "***" (for logs).
        """
        password = "***" if (redact and self.password) else self.password
        name = self.database if use_database else ""
        return f"{self.user}:{password}@tcp({self.host}:{self.port})/{name}"

    def connect_kwargs(self, use_database: bool = True) -> dict[str, Any]:
        """
        Keyword arguments for pymysql.connect().
        """
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "charset": "utf8mb4",
        }
        if use_database:
            kwargs["database"] = self.database
        return kwargs
