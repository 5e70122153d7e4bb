"""Configuration management for dcon.

Handles the connection model, TOML config files, environment variables,
named profiles, and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--host, --port, etc.)
2. --url flag (parsed into components)
3. Environment variables (PGHOST, PGPORT, PGDATABASE, PGUSER, PGPASSWORD)
4. Named profile (--profile or DCON_PROFILE env var)
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, unquote, urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
    model_validator,
)

from dcon.core.exceptions import InvalidConfigurationError, UrlParseError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "dcon" / "config.toml"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5432
DEFAULT_USER = "postgres"
DEFAULT_DATABASE = "postgres"

_URL_SCHEMES = ("postgresql", "postgres")

_SSL_MODES = {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}

_PG_ENV_VARS: dict[str, str] = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "database",
    "PGUSER": "user",
    "PGPASSWORD": "password",  # pragma: allowlist secret
}

_CONNECTION_FIELDS = ("host", "port", "user", "password", "database")

_SESSION_DEFAULTS: dict[str, Any] = {
    "sslmode": "prefer",
    "connect_timeout": 10,
    "application_name": "dcon",
    "statement_timeout": None,
    "default_format": "table",
}


def _check_port(v: int) -> int:
    if not (0 <= v <= 65535):
        msg = f"Invalid port: {v}. Must be 0-65535"
        raise ValueError(msg)
    return v


def _url_host(netloc: str) -> str:
    """Host part of a URL netloc with its original case.

    urlparse().hostname lowercases; postgres hosts are kept as written.
    """
    hostinfo = netloc.rpartition("@")[2]
    if hostinfo.startswith("["):
        return hostinfo[1:].partition("]")[0]
    return hostinfo.partition(":")[0]


def parse_url(url: str) -> dict[str, Any]:
    """Split a postgres:// URL into the components it actually carries.

    Only present parts are returned, so callers can layer them over
    other sources. Raises InvalidConfigurationError on a foreign scheme
    and UrlParseError when the URL itself is unreadable.
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise UrlParseError(f"Invalid connection URL '{url}': {e}") from e

    if parsed.scheme not in _URL_SCHEMES:
        msg = "URL must use postgresql:// or postgres:// scheme"
        raise InvalidConfigurationError(msg)

    result: dict[str, Any] = {}
    host = _url_host(parsed.netloc)
    if host:
        result["host"] = host
    if port is not None:
        result["port"] = port
    database = parsed.path.lstrip("/")
    if database:
        result["database"] = unquote(database)
    if parsed.username:
        result["user"] = unquote(parsed.username)
    if parsed.password:
        result["password"] = unquote(parsed.password)

    query_params = parse_qs(parsed.query)
    if "sslmode" in query_params:
        result["sslmode"] = query_params["sslmode"][0]
    if "connect_timeout" in query_params:
        try:
            result["connect_timeout"] = int(query_params["connect_timeout"][0])
        except ValueError as e:
            raise UrlParseError(f"Invalid connect_timeout in URL: {e}") from e
    if "application_name" in query_params:
        result["application_name"] = query_params["application_name"][0]
    return result


class ConnectionConfig(BaseModel):
    """Where and as whom to connect. Immutable once resolved."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str = DEFAULT_USER
    password: str | None = None
    database: str = DEFAULT_DATABASE

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _check_port(v)

    def validate(self) -> None:  # type: ignore[override]
        """Raise InvalidConfigurationError if a required field is empty."""
        if not self.host:
            raise InvalidConfigurationError("Host cannot be empty")
        if not self.user:
            raise InvalidConfigurationError("User cannot be empty")
        if not self.database:
            raise InvalidConfigurationError("Database cannot be empty")

    def to_connection_string(self) -> str:
        """Render a libpq keyword/value string.

        Values are not quoted or escaped: a value containing a space or
        ``=`` produces a string libpq will misread.
        """
        conn_str = (
            f"host={self.host} port={self.port} "
            f"user={self.user} dbname={self.database}"
        )
        if self.password is not None:
            conn_str += f" password={self.password}"
        return conn_str

    @classmethod
    def from_url(cls, url: str) -> ConnectionConfig:
        """Build a config from ``postgres://`` or ``postgresql://`` URLs."""
        parts = parse_url(url)
        try:
            return cls(**{k: v for k, v in parts.items() if k in _CONNECTION_FIELDS})
        except ValidationError as e:
            raise UrlParseError(f"Invalid connection URL '{url}': {e}") from e

    def with_database(self, database: str | None) -> ConnectionConfig:
        """Return a copy targeting another database (None keeps this one)."""
        if database is None:
            return self
        return self.model_copy(update={"database": database})


class Profile(BaseModel):
    url: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    database: str = DEFAULT_DATABASE
    user: str = DEFAULT_USER
    password: str | None = None
    sslmode: str = "prefer"
    connect_timeout: int = 10
    application_name: str = "dcon"

    @model_validator(mode="before")
    @classmethod
    def parse_url_into_components(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("url"):
            for key, value in parse_url(data["url"]).items():
                if key not in data:
                    data[key] = value
        return data

    @field_validator("sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        if v not in _SSL_MODES:
            msg = f"Invalid sslmode: '{v}'. Must be one of: {', '.join(sorted(_SSL_MODES))}"
            raise ValueError(msg)
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _check_port(v)


class AppConfig(BaseModel):
    default_format: str = "table"
    default_profile: str | None = None
    profiles: dict[str, Profile] = {}


class ResolvedConfig(BaseModel):
    connection: ConnectionConfig = ConnectionConfig()
    sslmode: str = "prefer"
    connect_timeout: int = 10
    application_name: str = "dcon"
    statement_timeout: float | None = None
    default_format: str = "table"
    active_profile: str | None = None
    sources: dict[str, str] = {}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises InvalidConfigurationError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise InvalidConfigurationError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise InvalidConfigurationError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    url: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > URL > env > profile > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "user": DEFAULT_USER,
        "password": None,
        "database": DEFAULT_DATABASE,
    }
    resolved.update(_SESSION_DEFAULTS)
    for key in resolved:
        sources[key] = "default"

    if config.default_format != "table":
        resolved["default_format"] = config.default_format
        sources["default_format"] = "config"

    # Named profile
    effective_profile = profile_name or os.environ.get("DCON_PROFILE")
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise InvalidConfigurationError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            if key in resolved:
                resolved[key] = getattr(profile, key)
                sources[key] = f"profile: {effective_profile}"

    # Environment variables
    for env_var, field_name in _PG_ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        if field_name == "port":
            try:
                resolved[field_name] = int(value)
            except ValueError:
                msg = f"Invalid {env_var} value: '{value}'. Must be an integer"
                raise InvalidConfigurationError(msg) from None
        else:
            resolved[field_name] = value
        sources[field_name] = f"env: {env_var}"

    # URL flag
    if url:
        for key, value in parse_url(url).items():
            resolved[key] = value
            sources[key] = "url"

    # CLI flags (highest priority)
    cli_to_field = {
        "host": "host",
        "port": "port",
        "database": "database",
        "user": "user",
        "password": "password",  # pragma: allowlist secret
        "sslmode": "sslmode",
        "timeout": "statement_timeout",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name}"

    try:
        connection = ConnectionConfig(**{k: resolved.pop(k) for k in _CONNECTION_FIELDS})
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid connection settings: {e}") from e

    return ResolvedConfig(
        connection=connection,
        active_profile=effective_profile,
        sources=sources,
        **resolved,
    )
