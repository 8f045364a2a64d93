"""SSL configuration model and its required-field policy."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .errors import MissingFieldError, MissingModeError, MissingSecurityConfigError


class SecurityMode(str, Enum):
    """Transport security modes understood by the DSN builder."""

    DISABLE = "disable"
    REQUIRE = "require"
    VERIFY_CA = "verify-ca"
    VERIFY_FULL = "verify-full"
    UNSET = ""

    @property
    def verifies_certificate(self) -> bool:
        return self in (SecurityMode.VERIFY_CA, SecurityMode.VERIFY_FULL)


# Checked in this order; the first entry is the one reported first.
CERTIFICATE_FIELDS: tuple[str, ...] = ("server_ca", "client_cert", "client_key")


class SecurityConfig(BaseModel):
    """SSL block of a connection config, as read from TOML or JSON."""

    model_config = ConfigDict(frozen=True)

    mode: SecurityMode = SecurityMode.UNSET
    server_ca: str = ""
    client_cert: str = ""
    client_key: str = ""

    def missing_fields(self) -> tuple[str, ...]:
        """Certificate fields the current mode requires but that are empty."""

        if not self.mode.verifies_certificate:
            return ()
        return tuple(name for name in CERTIFICATE_FIELDS if not getattr(self, name))


def validate_security_config(config: SecurityConfig | None) -> None:
    """Raise a ``SecurityValidationError`` if ``config`` breaks its mode's policy."""

    if config is None:
        raise MissingSecurityConfigError()
    if config.mode is SecurityMode.UNSET:
        raise MissingModeError()
    missing = config.missing_fields()
    if missing:
        raise MissingFieldError(missing)


__all__ = [
    "CERTIFICATE_FIELDS",
    "SecurityConfig",
    "SecurityMode",
    "validate_security_config",
]
