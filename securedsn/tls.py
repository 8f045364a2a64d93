"""Materialize a validated SSL configuration into a TLS profile."""

from __future__ import annotations

import re
import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from .errors import InvalidCAError, InvalidClientCredentialsError
from .security import SecurityConfig, SecurityMode

MIN_TLS_VERSION = ssl.TLSVersion.TLSv1_2

_CERT_BLOCK = re.compile(
    r"-----BEGIN CERTIFICATE-----\s(?:(?!-----BEGIN ).)+?\s-----END CERTIFICATE-----",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class TLSProfile:
    """Driver-ready TLS settings derived from a ``SecurityConfig``.

    An empty ``ca_certificates`` tuple means the system trust store. The PEM
    fields keep the exact text the certificates were parsed from so that an
    ``ssl.SSLContext`` can be built from them later.
    """

    mode: SecurityMode
    min_version: ssl.TLSVersion = MIN_TLS_VERSION
    ca_certificates: tuple[x509.Certificate, ...] = ()
    client_certificate: x509.Certificate | None = None
    client_key: PrivateKeyTypes | None = None
    skip_peer_name_verification: bool = False
    ca_pem: str = ""
    client_cert_pem: str = ""
    client_key_pem: str = ""

    @property
    def has_client_certificate(self) -> bool:
        return self.client_certificate is not None

    def create_ssl_context(self) -> ssl.SSLContext:
        """Build a client-side ``ssl.SSLContext`` for this profile."""

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.minimum_version = self.min_version
        if self.ca_pem:
            context.load_verify_locations(cadata=self.ca_pem)
        else:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)
        if self.skip_peer_name_verification:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_REQUIRED if self.ca_certificates else ssl.CERT_NONE
        else:
            context.check_hostname = True
            context.verify_mode = ssl.CERT_REQUIRED
        if self.client_cert_pem and self.client_key_pem:
            # load_cert_chain only reads from disk.
            with tempfile.TemporaryDirectory(prefix="securedsn-") as workdir:
                cert_path = Path(workdir) / "client.crt"
                key_path = Path(workdir) / "client.key"
                cert_path.write_text(self.client_cert_pem)
                key_path.write_text(self.client_key_pem)
                key_path.chmod(0o600)
                context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))
        return context

    def summary(self) -> dict[str, object]:
        """Human readable description, free of key material."""

        subject = (
            self.client_certificate.subject.rfc4514_string()
            if self.client_certificate is not None
            else None
        )
        return {
            "mode": self.mode.value,
            "min_version": self.min_version.name,
            "trust_anchors": len(self.ca_certificates),
            "client_certificate": subject,
            "verify_hostname": not self.skip_peer_name_verification,
        }


def build_tls_profile(config: SecurityConfig) -> TLSProfile:
    """Parse the PEM material of a validated config into a ``TLSProfile``.

    Field presence is not checked again here; parsing failures raise
    ``InvalidCAError`` or ``InvalidClientCredentialsError``.
    """

    if config.mode.verifies_certificate:
        certificates, ca_pem = _parse_ca_bundle(config.server_ca)
        client_certificate: x509.Certificate | None = None
        client_key: PrivateKeyTypes | None = None
        client_cert_pem = ""
        client_key_pem = ""
        if config.client_cert and config.client_key:
            client_certificate, client_key = _parse_key_pair(config.client_cert, config.client_key)
            client_cert_pem = config.client_cert
            client_key_pem = config.client_key
        return TLSProfile(
            mode=config.mode,
            ca_certificates=certificates,
            client_certificate=client_certificate,
            client_key=client_key,
            # verify-ca trusts the chain but not the name on it.
            skip_peer_name_verification=config.mode is SecurityMode.VERIFY_CA,
            ca_pem=ca_pem,
            client_cert_pem=client_cert_pem,
            client_key_pem=client_key_pem,
        )
    if config.mode is SecurityMode.REQUIRE:
        return TLSProfile(mode=config.mode, skip_peer_name_verification=True)
    return TLSProfile(mode=config.mode)


def _parse_ca_bundle(bundle: str) -> tuple[tuple[x509.Certificate, ...], str]:
    certificates: list[x509.Certificate] = []
    blocks: list[str] = []
    for match in _CERT_BLOCK.finditer(bundle):
        block = match.group(0)
        try:
            certificates.append(x509.load_pem_x509_certificate(block.encode()))
        except ValueError:
            continue
        blocks.append(block)
    if not certificates:
        raise InvalidCAError()
    return tuple(certificates), "\n".join(blocks) + "\n"


def _parse_key_pair(cert_pem: str, key_pem: str) -> tuple[x509.Certificate, PrivateKeyTypes]:
    match = _CERT_BLOCK.search(cert_pem)
    if match is None:
        raise InvalidClientCredentialsError("failed to find any PEM data in certificate input")
    try:
        certificate = x509.load_pem_x509_certificate(match.group(0).encode())
    except ValueError as exc:
        raise InvalidClientCredentialsError(f"invalid client certificate: {exc}") from exc
    try:
        key = serialization.load_pem_private_key(key_pem.encode(), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidClientCredentialsError(f"invalid client key: {exc}") from exc
    if _public_der(certificate.public_key()) != _public_der(key.public_key()):
        raise InvalidClientCredentialsError("private key does not match public key")
    return certificate, key


def _public_der(public_key) -> bytes:  # type: ignore[no-untyped-def]
    return public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


__all__ = ["MIN_TLS_VERSION", "TLSProfile", "build_tls_profile"]
