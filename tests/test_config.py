"""Tests for connection config loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from securedsn.config import (
    ChangeDataCapture,
    ConnectionConfig,
    StandardUpdate,
    load_config,
    validate_connection_config,
)
from securedsn.errors import ConfigError, MissingFieldError
from securedsn.security import SecurityConfig, SecurityMode


def _valid(**overrides: object) -> ConnectionConfig:
    fields: dict[str, object] = {
        "host": "localhost",
        "port": 3306,
        "username": "user",
        "password": "pass",
        "database": "testdb",
    }
    fields.update(overrides)
    return ConnectionConfig(**fields)


def test_validate_accepts_complete_ssl_block() -> None:
    security = SecurityConfig(
        mode=SecurityMode.VERIFY_CA,
        server_ca="ca-cert",
        client_cert="client-cert",
        client_key="client-key",
    )

    result = validate_connection_config(_valid(security=security))

    assert result.security == security


def test_validate_wraps_ssl_errors() -> None:
    config = _valid(security=SecurityConfig(mode=SecurityMode.VERIFY_CA))

    with pytest.raises(ConfigError, match="invalid SSL configuration") as excinfo:
        validate_connection_config(config)

    assert isinstance(excinfo.value.__cause__, MissingFieldError)


def test_validate_applies_defaults() -> None:
    result = validate_connection_config(_valid(database=""))

    assert result.database == "mysql"
    assert result.max_threads == 3
    assert result.retry_count == 3
    assert isinstance(result.update_method, StandardUpdate)


def test_validate_keeps_explicit_values() -> None:
    config = _valid(max_threads=8, retry_count=5)

    assert validate_connection_config(config) is config


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"host": ""}, "empty host name"),
        ({"host": "https://db"}, "host should not contain http or https"),
        ({"port": 0}, "invalid port number"),
        ({"port": 70000}, "invalid port number"),
        ({"username": ""}, "username is required"),
        ({"password": ""}, "password is required"),
    ],
)
def test_validate_rejects_bad_fields(overrides: dict[str, object], message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        validate_connection_config(_valid(**overrides))


def test_load_config_reads_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "source.toml"
    config_path.write_text(
        """
hosts = "db.internal"
port = 3307
username = "replicator"
password = "secret"
tls_skip_verify = true
backoff_retry_count = 4

[jdbc_url_params]
connectTimeout = 30000

[ssl_config]
mode = "require"

[update_method]
type = "cdc"
intial_wait_time = 120
"""
    )

    result = load_config(config_path)

    assert result.host == "db.internal"
    assert result.port == 3307
    assert result.tls_skip_verify is True
    assert result.retry_count == 4
    assert result.extra_params == {"connectTimeout": "30000"}
    assert result.security == SecurityConfig(mode=SecurityMode.REQUIRE)
    assert result.update_method == ChangeDataCapture(initial_wait_time=120)


def test_load_config_reads_json(tmp_path: Path) -> None:
    config_path = tmp_path / "source.json"
    config_path.write_text(
        json.dumps(
            {
                "hosts": "localhost",
                "port": 3306,
                "username": "user",
                "password": "pass",
                "ssl_config": {"mode": "verify-full", "server_ca": "a", "client_cert": "b", "client_key": "c"},
            }
        )
    )

    result = load_config(config_path)

    assert result.security is not None
    assert result.security.mode is SecurityMode.VERIFY_FULL
    assert result.update_method == StandardUpdate()


def test_load_config_rejects_unknown_mode(tmp_path: Path) -> None:
    config_path = tmp_path / "source.toml"
    config_path.write_text('[ssl_config]\nmode = "prefer"\n')

    with pytest.raises(ConfigError, match="invalid config in"):
        load_config(config_path)


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(tmp_path / "absent.toml")


def test_load_config_handles_toml_errors(tmp_path: Path) -> None:
    config_path = tmp_path / "source.toml"
    config_path.write_text("hosts = [unterminated")

    with pytest.raises(ConfigError, match="could not parse"):
        load_config(config_path)


def test_load_config_rejects_non_table_json(tmp_path: Path) -> None:
    config_path = tmp_path / "source.json"
    config_path.write_text("[1, 2]")

    with pytest.raises(ConfigError, match="must contain a table"):
        load_config(config_path)


def test_with_security_replaces_block() -> None:
    config = _valid(security=SecurityConfig(mode=SecurityMode.REQUIRE))

    updated = config.with_security(None)

    assert updated.security is None
    assert config.security is not None


def test_resolved_host_and_port_defaults() -> None:
    config = ConnectionConfig()

    assert config.resolved_host == "localhost"
    assert config.resolved_port == 3306
