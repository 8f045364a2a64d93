"""Build and read MySQL DSNs whose ``tls`` parameter may name a registered profile."""

from __future__ import annotations

import logging
import re
import ssl
from dataclasses import dataclass, field
from typing import Callable, Mapping
from urllib.parse import quote, quote_plus, unquote, unquote_plus

from .config import ConnectionConfig
from .errors import DSNError, RegistrationConflictError, TLSProfileBuildError
from .registry import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_REGISTRY, TLSProfileRegistry, tls_profile_name
from .security import SecurityConfig, SecurityMode
from .tls import TLSProfile, build_tls_profile

LOG = logging.getLogger(__name__)

TLS_PARAM = "tls"
TLS_DISABLED = "false"
TLS_UNVERIFIED = "true"
TLS_SKIP_VERIFY = "skip-verify"
TLS_PREFERRED = "preferred"

_TRUE_VALUES = frozenset({"1", "true"})
_FALSE_VALUES = frozenset({"0", "false"})
_ADDRESS = re.compile(r"^(?P<net>[A-Za-z0-9]+)(?:\((?P<addr>[^()]*)\))?$")

ProfileBuilder = Callable[[SecurityConfig], TLSProfile]


class DSNBuilder:
    """Assemble a connection string from a ``ConnectionConfig``.

    Profiles for ``verify-ca`` / ``verify-full`` are registered in
    ``registry`` and referenced from the DSN by name. With ``strict=False``
    a profile that fails to build or register is dropped with a warning and
    the DSN carries no ``tls`` parameter; otherwise the error propagates.

    Extra parameters are merged after the computed ``tls`` value, so an
    ``extra_params`` entry named ``tls`` replaces it. That includes turning
    verification off, so treat it as a sharp tool.
    """

    def __init__(
        self,
        registry: TLSProfileRegistry | None = None,
        *,
        strict: bool = True,
        profile_builder: ProfileBuilder = build_tls_profile,
    ) -> None:
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._strict = strict
        self._profile_builder = profile_builder

    @property
    def registry(self) -> TLSProfileRegistry:
        return self._registry

    def build(self, config: ConnectionConfig) -> str:
        """Return the DSN for ``config``."""

        params: dict[str, str] = {}
        tls_value = self.tls_parameter(config)
        if tls_value is not None:
            params[TLS_PARAM] = tls_value
        params.update(config.extra_params)
        return format_dsn(
            user=config.username,
            password=config.password,
            host=config.resolved_host,
            port=config.resolved_port,
            database=config.database,
            params=params,
        )

    def tls_parameter(self, config: ConnectionConfig) -> str | None:
        """Value of the ``tls`` parameter for ``config``, or ``None`` to omit it."""

        security = config.security
        if security is None:
            return TLS_SKIP_VERIFY if config.tls_skip_verify else None
        if security.mode is SecurityMode.DISABLE:
            return TLS_DISABLED
        if security.mode is SecurityMode.REQUIRE:
            return TLS_UNVERIFIED
        if security.mode.verifies_certificate:
            name = tls_profile_name(config.host, config.port)
            try:
                self._registry.register(name, self._profile_builder(security))
            except (TLSProfileBuildError, RegistrationConflictError) as exc:
                if self._strict:
                    raise
                LOG.warning("Dropping TLS profile %s, DSN will carry no tls parameter: %s", name, exc)
                return None
            return name
        return None


def build_dsn(
    config: ConnectionConfig,
    *,
    registry: TLSProfileRegistry | None = None,
    strict: bool = True,
) -> str:
    """Shortcut for ``DSNBuilder(registry, strict=strict).build(config)``."""

    return DSNBuilder(registry, strict=strict).build(config)


def format_dsn(
    *,
    user: str = "",
    password: str = "",
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    database: str = "",
    params: Mapping[str, str] | None = None,
) -> str:
    """Render ``[user[:password]@]tcp(host:port)/database[?key=value&...]``."""

    parts: list[str] = []
    if user:
        parts.append(user)
        if password:
            parts.append(f":{password}")
        parts.append("@")
    address_host = f"[{host}]" if ":" in host else host
    parts.append(f"tcp({address_host}:{port})")
    parts.append("/")
    parts.append(quote(database, safe=""))
    if params:
        # Keys and values both go through query escaping; plain keys come out unchanged.
        query = "&".join(
            f"{quote_plus(key)}={quote_plus(str(params[key]))}" for key in sorted(params)
        )
        parts.append(f"?{query}")
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class DSNOptions:
    """Fields read back from a DSN."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str = ""
    password: str = ""
    database: str = ""
    params: Mapping[str, str] = field(default_factory=dict)

    @property
    def tls(self) -> str | None:
        return self.params.get(TLS_PARAM)

    def connect_kwargs(self, registry: TLSProfileRegistry | None = None) -> dict[str, object]:
        """Keyword arguments for a MySQL driver's ``connect`` call."""

        kwargs: dict[str, object] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }
        for key, value in self.params.items():
            if key != TLS_PARAM:
                kwargs[key] = value
        kwargs["ssl"] = resolve_tls(self.tls, registry)
        return kwargs


def parse_dsn(dsn: str) -> DSNOptions:
    """Split a DSN produced by ``format_dsn`` back into its fields."""

    slash = dsn.rfind("/")
    if slash < 0:
        raise DSNError("invalid DSN: missing the slash separating the database name")
    prefix, rest = dsn[:slash], dsn[slash + 1 :]

    user = password = ""
    address = prefix
    if "@" in prefix:
        credentials, _, address = prefix.rpartition("@")
        user, _, password = credentials.partition(":")

    host, port = DEFAULT_HOST, DEFAULT_PORT
    if address:
        match = _ADDRESS.match(address)
        if match is None:
            raise DSNError(f"invalid DSN: cannot parse address {address!r}")
        if match.group("addr"):
            host, port = _split_address(match.group("addr"))

    database, _, query = rest.partition("?")
    params: dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        if not sep:
            raise DSNError(f"invalid DSN: parameter {pair!r} has no value")
        params[unquote_plus(key)] = unquote_plus(value)
    return DSNOptions(
        host=host,
        port=port,
        user=user,
        password=password,
        database=unquote(database),
        params=params,
    )


def resolve_tls(value: str | None, registry: TLSProfileRegistry | None = None) -> ssl.SSLContext | None:
    """Turn a DSN ``tls`` value into the ``ssl.SSLContext`` a driver should use."""

    if value is None:
        return None
    lowered = value.lower()
    if lowered in _FALSE_VALUES:
        return None
    if lowered in _TRUE_VALUES or lowered in (TLS_SKIP_VERIFY, TLS_PREFERRED):
        return TLSProfile(mode=SecurityMode.REQUIRE, skip_peer_name_verification=True).create_ssl_context()
    registry = registry if registry is not None else DEFAULT_REGISTRY
    profile = registry.get(value)
    if profile is None:
        raise DSNError(f"invalid value / unknown TLS config name: {value}")
    return profile.create_ssl_context()


def _split_address(address: str) -> tuple[str, int]:
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise DSNError(f"invalid DSN: unterminated IPv6 address {address!r}")
        host, remainder = address[1:end], address[end + 1 :]
        port_text = remainder[1:] if remainder.startswith(":") else ""
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
    else:
        host, port_text = address, ""
    if not port_text:
        return host or DEFAULT_HOST, DEFAULT_PORT
    try:
        port = int(port_text)
    except ValueError as exc:
        raise DSNError(f"invalid DSN: port {port_text!r} is not a number") from exc
    return host or DEFAULT_HOST, port


__all__ = [
    "DSNBuilder",
    "DSNOptions",
    "TLS_DISABLED",
    "TLS_PARAM",
    "TLS_SKIP_VERIFY",
    "TLS_UNVERIFIED",
    "build_dsn",
    "format_dsn",
    "parse_dsn",
    "resolve_tls",
]
