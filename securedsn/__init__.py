"""Secure connection configuration for MySQL-family database clients."""

from __future__ import annotations

from .config import ChangeDataCapture, ConnectionConfig, StandardUpdate, load_config, validate_connection_config
from .dsn import DSNBuilder, DSNOptions, build_dsn, parse_dsn, resolve_tls
from .errors import (
    ConfigError,
    DSNError,
    InvalidCAError,
    InvalidClientCredentialsError,
    MissingFieldError,
    MissingModeError,
    MissingSecurityConfigError,
    RegistrationConflictError,
    SecureDSNError,
    SecurityValidationError,
    TLSProfileBuildError,
)
from .registry import DEFAULT_REGISTRY, TLSProfileRegistry, tls_profile_name
from .security import SecurityConfig, SecurityMode, validate_security_config
from .tls import TLSProfile, build_tls_profile

__version__ = "0.1.0"

__all__ = [
    "ChangeDataCapture",
    "ConfigError",
    "ConnectionConfig",
    "DEFAULT_REGISTRY",
    "DSNBuilder",
    "DSNError",
    "DSNOptions",
    "InvalidCAError",
    "InvalidClientCredentialsError",
    "MissingFieldError",
    "MissingModeError",
    "MissingSecurityConfigError",
    "RegistrationConflictError",
    "SecureDSNError",
    "SecurityConfig",
    "SecurityMode",
    "SecurityValidationError",
    "StandardUpdate",
    "TLSProfile",
    "TLSProfileBuildError",
    "TLSProfileRegistry",
    "__version__",
    "build_dsn",
    "build_tls_profile",
    "load_config",
    "parse_dsn",
    "resolve_tls",
    "tls_profile_name",
    "validate_connection_config",
    "validate_security_config",
]
