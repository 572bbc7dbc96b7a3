from __future__ import annotations
from typing import Optional

import httpx

from .config import SecurityConfig, Settings
from .credentials import HelperFactory, resolve_identity
from .helpers import shell_helper_factory
from .send_option import SendNoop, SendOption, SendTLS, SendTLSTransport
from .tls import build_client_context
from .transport import BasicAuthTransport


def get_http_option(
    cfg: SecurityConfig,
    addr: str,
    repo: str,
    helper_factory: Optional[HelperFactory] = None,
    settings: Optional[Settings] = None,
) -> SendOption:
    """Pick the one send option that fits ``cfg`` for ``(addr, repo)``.

    Basic auth is implied by the mere presence of static credentials or a
    helper name, even if resolution later yields an empty identity.
    """
    settings = settings or Settings()
    use_basic_auth = cfg.uses_basic_auth

    context = None
    if cfg.tls is not None:
        context = build_client_context(cfg.tls)
        if not use_basic_auth:
            return SendTLS(context)

    if use_basic_auth:
        factory = helper_factory or shell_helper_factory(timeout_s=settings.helper_timeout_s)
        identity = resolve_identity(cfg.basic, cfg.creds_store, addr, helper_factory=factory)
        verify = context if context is not None else settings.verify_tls
        wrapped = httpx.HTTPTransport(verify=verify)
        return SendTLSTransport(BasicAuthTransport(addr, repo, wrapped, identity))
    return SendNoop()
