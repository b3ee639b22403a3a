"""Configuration for the PostgreSQL MCP Server.

Connection, SSL and pool settings loaded from environment variables.
Access-control and masking settings live in pgmcp/governance/policy.py.
"""
import os
from dataclasses import dataclass, field

from psycopg.conninfo import make_conninfo


def _env_flag(name: str, default: str) -> str:
    return os.environ.get(name, default).strip().lower()


@dataclass
class ServerConfig:
    """Server configuration loaded from environment variables."""

    # Connection string has priority over the discrete settings below
    url: str = field(default_factory=lambda: os.environ.get("POSTGRES_URL", ""))

    host: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_HOST", "localhost")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_PORT", "5432"))
    )
    database: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_DB", "postgres")
    )
    user: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_USER", "postgres")
    )
    password: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_PASSWORD", "")
    )

    # SSL
    ssl: str = field(default_factory=lambda: _env_flag("POSTGRES_SSL", ""))
    ssl_ca: str = field(default_factory=lambda: os.environ.get("POSTGRES_SSL_CA", ""))
    ssl_cert: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_SSL_CERT", "")
    )
    ssl_key: str = field(default_factory=lambda: os.environ.get("POSTGRES_SSL_KEY", ""))
    ssl_reject_unauthorized: bool = field(
        default_factory=lambda: _env_flag("POSTGRES_SSL_REJECT_UNAUTHORIZED", "true")
        != "false"
    )

    # Pool settings
    pool_max_size: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_POOL_MAX", "5"))
    )
    pool_max_idle: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_POOL_MAX_IDLE", "30"))
    )
    connect_timeout: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_CONNECT_TIMEOUT", "10"))
    )

    # Result size
    max_rows: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_MAX_ROWS", "1000"))
    )

    app_port: int = field(
        default_factory=lambda: int(os.environ.get("APP_PORT", "8000"))
    )


def _ssl_params(config: ServerConfig) -> dict:
    """Translate SSL settings into libpq parameters."""
    if config.ssl == "false":
        return {"sslmode": "disable"}

    if config.ssl == "true" or config.ssl_ca or config.ssl_cert or config.ssl_key:
        params = {
            "sslmode": "verify-full" if config.ssl_reject_unauthorized else "require"
        }
        if config.ssl_ca:
            params["sslrootcert"] = config.ssl_ca
        elif config.ssl == "true" and config.ssl_reject_unauthorized:
            # libpq 16+: verify against the OS trust store
            params["sslrootcert"] = "system"
        if config.ssl_cert:
            params["sslcert"] = config.ssl_cert
        if config.ssl_key:
            params["sslkey"] = config.ssl_key
        return params

    return {}


def build_conninfo(config: ServerConfig) -> str:
    """Build a psycopg conninfo string from the server configuration."""
    params = _ssl_params(config)
    params["connect_timeout"] = config.connect_timeout
    if config.url:
        return make_conninfo(config.url, **params)
    return make_conninfo(
        host=config.host,
        port=config.port,
        dbname=config.database,
        user=config.user,
        password=config.password or None,
        **params,
    )


config = ServerConfig()
