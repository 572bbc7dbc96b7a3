from __future__ import annotations
import os
import ssl
from typing import List, Optional

from .config import TLSConfig
from .errors import TLSBuildError


def _read_passphrase(path: str) -> Optional[str]:
    if not path:
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read().strip()
    except OSError as e:
        raise TLSBuildError(f"read client passphrase: {e}") from e


def _ca_paths(value: str) -> List[str]:
    # SSL_CERT_DIR style values may list several directories.
    return [p for p in value.split(os.pathsep) if p]


def build_client_context(cfg: TLSConfig) -> Optional[ssl.SSLContext]:
    """Build an SSL context from TLS settings.

    Returns None when the client block is disabled, meaning the HTTP layer should use
    its own default verification.
    """
    if cfg.client_disabled:
        return None

    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    for path in _ca_paths(cfg.ca_cert_path):
        try:
            if os.path.isdir(path):
                ctx.load_verify_locations(capath=path)
            else:
                ctx.load_verify_locations(cafile=path)
        except (OSError, ssl.SSLError) as e:
            raise TLSBuildError(f"load ca certs {path}: {e}") from e

    if cfg.client_cert_path or cfg.client_key_path:
        if not cfg.client_cert_path:
            raise TLSBuildError("client key configured without a client cert")
        password = _read_passphrase(cfg.client_passphrase_path)
        try:
            ctx.load_cert_chain(
                certfile=cfg.client_cert_path,
                keyfile=cfg.client_key_path or None,
                password=password,
            )
        except (OSError, ssl.SSLError) as e:
            raise TLSBuildError(f"load client cert {cfg.client_cert_path}: {e}") from e

    if cfg.insecure_skip_verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx
