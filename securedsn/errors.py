"""Error types raised while turning a connection config into a DSN."""

from __future__ import annotations


class SecureDSNError(RuntimeError):
    """Base class for every error raised by securedsn."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        self.hint = hint
        if hint:
            message = f"{message} (hint: {hint})"
        super().__init__(message)


class ConfigError(SecureDSNError):
    """Raised when a connection configuration is missing or malformed."""


class SecurityValidationError(ConfigError):
    """Raised when an SSL configuration does not satisfy its mode's policy."""


class MissingSecurityConfigError(SecurityValidationError):
    """The SSL block was expected but absent."""

    def __init__(self) -> None:
        super().__init__("'ssl' config is required")


class MissingModeError(SecurityValidationError):
    """The SSL block has no mode."""

    def __init__(self) -> None:
        super().__init__(
            "'ssl.mode' is required parameter",
            hint="use one of disable, require, verify-ca, verify-full",
        )


class MissingFieldError(SecurityValidationError):
    """One or more certificate fields required by the mode are empty.

    ``fields`` lists every missing field in check order; ``field`` is the
    first of them.
    """

    def __init__(self, fields: tuple[str, ...]) -> None:
        if not fields:
            raise ValueError("MissingFieldError needs at least one field")
        self.fields = fields
        self.field = fields[0]
        quoted = ", ".join(f"'ssl.{name}'" for name in fields)
        verb = "is required parameter" if len(fields) == 1 else "are required parameters"
        super().__init__(f"{quoted} {verb}")


class TLSProfileBuildError(SecureDSNError):
    """Raised when PEM material cannot be turned into a TLS profile."""


class InvalidCAError(TLSProfileBuildError):
    """No certificate in ``server_ca`` could be parsed."""

    def __init__(self) -> None:
        super().__init__(
            "failed to append server CA certificate",
            hint="server_ca must contain at least one PEM encoded certificate",
        )


class InvalidClientCredentialsError(TLSProfileBuildError):
    """The client certificate and key do not form a usable pair."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"failed to load client certificate and key: {detail}")


class RegistrationConflictError(SecureDSNError):
    """Raised when a TLS profile name cannot be registered."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"cannot register TLS profile '{name}': {reason}")


class DSNError(SecureDSNError):
    """Raised when a DSN cannot be parsed or its TLS profile resolved."""


__all__ = [
    "ConfigError",
    "DSNError",
    "InvalidCAError",
    "InvalidClientCredentialsError",
    "MissingFieldError",
    "MissingModeError",
    "MissingSecurityConfigError",
    "RegistrationConflictError",
    "SecureDSNError",
    "SecurityValidationError",
    "TLSProfileBuildError",
]
