"""Name-keyed store of TLS profiles consulted by drivers at connect time."""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from .errors import RegistrationConflictError
from .tls import TLSProfile

LOG = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306

# Values the DSN ``tls`` parameter already gives a meaning to.
RESERVED_NAMES = frozenset({"true", "false", "1", "0", "skip-verify", "preferred"})
_FORBIDDEN_CHARS = frozenset("&=?/#")


def tls_profile_name(host: str | None, port: int | None) -> str:
    """Registry key for the profile of a given endpoint."""

    return f"custom-tls-{host or DEFAULT_HOST}-{port or DEFAULT_PORT}"


class TLSProfileRegistry:
    """Thread-safe mapping from profile name to ``TLSProfile``."""

    def __init__(self, profiles: Iterable[tuple[str, TLSProfile]] = ()) -> None:
        self._lock = threading.Lock()
        self._profiles: dict[str, TLSProfile] = {}
        for name, profile in profiles:
            self.register(name, profile)

    def register(self, name: str, profile: TLSProfile) -> None:
        """Register ``profile`` under ``name``, replacing any previous entry."""

        _check_name(name)
        with self._lock:
            previous = self._profiles.get(name)
            self._profiles[name] = profile
        if previous is None:
            LOG.debug("Registered TLS profile %s (%s)", name, profile.mode.value)
        elif previous is not profile:
            LOG.debug("Replaced TLS profile %s (%s)", name, profile.mode.value)

    def unregister(self, name: str) -> TLSProfile | None:
        """Drop ``name`` and return the profile it pointed to, if any."""

        with self._lock:
            return self._profiles.pop(name, None)

    def get(self, name: str) -> TLSProfile | None:
        with self._lock:
            return self._profiles.get(name)

    def names(self) -> list[str]:
        """Registered names, sorted."""

        with self._lock:
            return sorted(self._profiles)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._profiles

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)


def _check_name(name: str) -> None:
    if not name:
        raise RegistrationConflictError(name, "name is empty")
    if name.lower() in RESERVED_NAMES:
        raise RegistrationConflictError(name, "name is reserved")
    if any(char in _FORBIDDEN_CHARS or char.isspace() for char in name):
        raise RegistrationConflictError(name, "name contains characters not allowed in a DSN")


DEFAULT_REGISTRY = TLSProfileRegistry()


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_REGISTRY",
    "RESERVED_NAMES",
    "TLSProfileRegistry",
    "tls_profile_name",
]
