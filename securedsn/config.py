"""Connection configuration loading and validation helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Literal, Union

import tomllib

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError, SecurityValidationError
from .registry import DEFAULT_HOST, DEFAULT_PORT
from .security import SecurityConfig, validate_security_config

DEFAULT_DATABASE = "mysql"
DEFAULT_THREAD_COUNT = 3
DEFAULT_RETRY_COUNT = 3


class StandardUpdate(BaseModel):
    """Full-refresh / incremental reads driven by queries."""

    model_config = ConfigDict(frozen=True)

    type: Literal["standard"] = "standard"


class ChangeDataCapture(BaseModel):
    """Reads driven by the server's change log."""

    model_config = ConfigDict(frozen=True)

    type: Literal["cdc"] = "cdc"
    # Older documents spell the key "intial_wait_time".
    initial_wait_time: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("initial_wait_time", "intial_wait_time"),
    )


UpdateMethod = Annotated[Union[StandardUpdate, ChangeDataCapture], Field(discriminator="type")]


class ConnectionConfig(BaseModel):
    """Shape of a MySQL source configuration document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    host: str = Field(default="", alias="hosts")
    port: int = 0
    username: str = ""
    password: str = ""
    database: str = ""
    tls_skip_verify: bool = False
    security: SecurityConfig | None = Field(default=None, alias="ssl_config")
    extra_params: dict[str, str] = Field(default_factory=dict, alias="jdbc_url_params")
    update_method: UpdateMethod = Field(default_factory=StandardUpdate)
    max_threads: int = 0
    retry_count: int = Field(default=0, alias="backoff_retry_count")

    @property
    def resolved_host(self) -> str:
        return self.host or DEFAULT_HOST

    @property
    def resolved_port(self) -> int:
        return self.port or DEFAULT_PORT

    def with_security(self, security: SecurityConfig | None) -> ConnectionConfig:
        """Return a copy with the SSL block replaced."""

        return self.model_copy(update={"security": security})


def validate_connection_config(config: ConnectionConfig) -> ConnectionConfig:
    """Check required fields and return a copy with defaults applied."""

    host = config.host
    if not host:
        raise ConfigError("empty host name")
    if "https" in host or "http" in host:
        raise ConfigError(f"host should not contain http or https: {host}")
    if config.port <= 0 or config.port > 65535:
        raise ConfigError("invalid port number: must be between 1 and 65535")
    if not config.username:
        raise ConfigError("username is required")
    if not config.password:
        raise ConfigError("password is required")

    if config.security is not None:
        try:
            validate_security_config(config.security)
        except SecurityValidationError as exc:
            raise ConfigError(f"invalid SSL configuration: {exc}") from exc

    updates: dict[str, object] = {}
    if not config.database:
        updates["database"] = DEFAULT_DATABASE
    if config.max_threads <= 0:
        updates["max_threads"] = DEFAULT_THREAD_COUNT
    if config.retry_count <= 0:
        updates["retry_count"] = DEFAULT_RETRY_COUNT
    if not updates:
        return config
    return config.model_copy(update=updates)


def load_config(path: Path | str) -> ConnectionConfig:
    """Read a connection config from a ``.toml`` or ``.json`` file."""

    path = Path(path)
    try:
        data = _read_config_file(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"could not parse {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"could not read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a table of settings")
    try:
        return ConnectionConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config in {path}: {exc}") from exc


def _read_config_file(path: Path) -> object:
    if path.suffix.lower() == ".json":
        return json.loads(path.read_text())
    with path.open("rb") as handle:
        return tomllib.load(handle)


__all__ = [
    "ChangeDataCapture",
    "ConnectionConfig",
    "DEFAULT_DATABASE",
    "DEFAULT_RETRY_COUNT",
    "DEFAULT_THREAD_COUNT",
    "StandardUpdate",
    "UpdateMethod",
    "load_config",
    "validate_connection_config",
]
