"""
Configuration loaded from external key-value sources at startup.

Keys live under a namespace (default `urlconfig`) and may be spelled either as
dotted properties (`urlconfig.baseUrl`) or as environment variables
(`URLCONFIG_BASE_URL`). Values are validated once; any failure raises
ConfigurationValidationError and the service must not start.
"""
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_NAMESPACE = "urlconfig"
REPOSITORY_URL_MIN_LENGTH = 4

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class FieldError:
    """A single failed constraint on one configuration key."""

    field: str
    constraint: str
    message: str


class ConfigurationValidationError(Exception):
    """Raised when bound configuration violates a constraint. Never recovered locally."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        details = "; ".join(f"{e.field} [{e.constraint}]: {e.message}" for e in self.errors)
        super().__init__(f"Configuration validation failed: {details}")


class BaseUrlConfig(BaseModel):
    """Configuration section carrying a base URL."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Absolute URL, e.g. https://github.com")

    @field_validator("base_url")
    @classmethod
    def check_base_url(cls, value: str) -> str:
        err = validate_base_url(value, "base_url")
        if err is not None:
            raise ValueError(err.message)
        return value


class UrlConfig(BaseUrlConfig):
    """Base URL plus repository path. Immutable once loaded."""

    repository_url: str = Field(..., description="Repository path appended to base_url")

    @field_validator("repository_url")
    @classmethod
    def check_repository_url(cls, value: str) -> str:
        err = validate_repository_url(value, "repository_url")
        if err is not None:
            raise ValueError(err.message)
        return value


class ServerSettings(BaseModel):
    """HTTP listener and logging settings."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL


def env_key(namespace: str, key: str) -> str:
    """`urlconfig`, `baseUrl` -> `URLCONFIG_BASE_URL`."""
    return f"{namespace}_{_CAMEL_RE.sub('_', key)}".upper()


def _environ(source: Mapping[str, str] | None, dotenv_path: str | None = None) -> Mapping[str, str]:
    """`source` if given, else os.environ after loading `dotenv_path` or the .env in the working directory."""
    if source is not None:
        return source
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))
    return os.environ


def _optional(source: Mapping[str, str], *keys: str) -> str | None:
    """First non-blank value among `keys`, stripped; None if all are missing or blank.

    Surrounding whitespace is trimmed before any constraint is checked,
    including the repositoryUrl length check, so "  ab  " counts as two characters.
    """
    for key in keys:
        value = source.get(key)
        if value is not None and value.strip():
            return value.strip()
    return None


def _bind(source: Mapping[str, str], namespace: str, key: str) -> str | None:
    return _optional(source, f"{namespace}.{key}", env_key(namespace, key))


def validate_base_url(value: str | None, field: str = "urlconfig.baseUrl") -> FieldError | None:
    """Base URL must be absolute: a scheme and a host at minimum."""
    if value is None:
        return FieldError(field, "required", "value is missing")
    try:
        parts = urlsplit(value)
        scheme, host = parts.scheme, parts.hostname
    except ValueError:
        scheme, host = "", None
    if not _SCHEME_RE.match(scheme) or not host:
        return FieldError(field, "url", f"must be a valid URL, got {value!r}")
    return None


def validate_repository_url(value: str | None, field: str = "urlconfig.repositoryUrl") -> FieldError | None:
    """Repository path must be at least REPOSITORY_URL_MIN_LENGTH characters."""
    if value is None:
        return FieldError(field, "required", "value is missing")
    if len(value) < REPOSITORY_URL_MIN_LENGTH:
        return FieldError(
            field,
            f"length(min={REPOSITORY_URL_MIN_LENGTH})",
            f"length must be at least {REPOSITORY_URL_MIN_LENGTH}, got {len(value)}",
        )
    return None


def load_url_config(
    source: Mapping[str, str] | None = None,
    namespace: str = DEFAULT_NAMESPACE,
    dotenv_path: str | None = None,
) -> UrlConfig:
    """
    Bind and validate UrlConfig from `source` (defaults to the process environment,
    after loading a .env file if present). Collects every field error before raising.
    """
    env = _environ(source, dotenv_path)
    base_url = _bind(env, namespace, "baseUrl")
    repository_url = _bind(env, namespace, "repositoryUrl")

    errors = [
        err
        for err in (
            validate_base_url(base_url, f"{namespace}.baseUrl"),
            validate_repository_url(repository_url, f"{namespace}.repositoryUrl"),
        )
        if err is not None
    ]
    if errors:
        raise ConfigurationValidationError(errors)
    return UrlConfig(base_url=base_url, repository_url=repository_url)


def load_server_settings(
    source: Mapping[str, str] | None = None,
    dotenv_path: str | None = None,
) -> ServerSettings:
    """Read HOST, PORT and LOG_LEVEL; all optional with uvicorn-like defaults."""
    env = _environ(source, dotenv_path)
    errors = []

    port = DEFAULT_PORT
    raw_port = _optional(env, "PORT")
    if raw_port is not None:
        try:
            port = int(raw_port)
        except ValueError:
            port = -1
        if not 0 < port < 65536:
            errors.append(FieldError("PORT", "port", f"must be an integer in 1-65535, got {raw_port!r}"))

    log_level = (_optional(env, "LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if log_level not in _LOG_LEVELS:
        errors.append(FieldError("LOG_LEVEL", "log_level", f"must be one of {', '.join(_LOG_LEVELS)}"))

    if errors:
        raise ConfigurationValidationError(errors)
    return ServerSettings(
        host=_optional(env, "HOST") or DEFAULT_HOST,
        port=port,
        log_level=log_level,
    )
