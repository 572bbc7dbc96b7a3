from __future__ import annotations
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_CA_CERTS_PATH = "/etc/ssl/certs"
DEFAULT_INTERNAL_DIR = "/regsec-internal"
CA_CERT_DIR_ENV = "SSL_CERT_DIR"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for the HTTP client built on top of a send option."""

    timeout_s: float = 30.0
    verify_tls: bool = True
    follow_redirects: bool = True
    helper_timeout_s: Optional[float] = None
    extra_headers: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class TLSConfig:
    """Declarative TLS client settings.

    ``ca_cert_path`` may point at a PEM bundle or at a directory of
    certificates. The client pair is optional; ``client_disabled`` turns the
    whole block off so the HTTP layer falls back to its own defaults.
    """

    name: str = ""
    ca_cert_path: str = ""
    client_cert_path: str = ""
    client_key_path: str = ""
    client_passphrase_path: str = ""
    client_disabled: bool = False
    insecure_skip_verify: bool = False


@dataclass(frozen=True)
class BasicAuthConfig:
    """Docker auth fields plus an optional file holding the password."""

    username: str = ""
    password: str = ""
    auth: str = ""
    email: str = ""
    serveraddress: str = ""
    identitytoken: str = ""
    registrytoken: str = ""
    password_file: str = ""


@dataclass(frozen=True)
class SecurityConfig:
    tls: Optional[TLSConfig] = None
    basic: Optional[BasicAuthConfig] = None
    creds_store: str = ""

    def apply_defaults(self, environ: Optional[Mapping[str, str]] = None) -> "SecurityConfig":
        """Return a copy whose TLS settings are present and has a CA path."""
        env = os.environ if environ is None else environ
        tls = self.tls if self.tls is not None else TLSConfig()
        if not tls.ca_cert_path:
            tls = replace(tls, ca_cert_path=env.get(CA_CERT_DIR_ENV) or DEFAULT_CA_CERTS_PATH)
        return replace(self, tls=tls)

    @property
    def uses_basic_auth(self) -> bool:
        return self.basic is not None or self.creds_store != ""
