from __future__ import annotations
import ssl
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from .config import Settings


@dataclass(frozen=True)
class SendNoop:
    """No special transport behavior."""

    def client_kwargs(self, settings: Settings) -> Dict[str, Any]:
        return {"verify": settings.verify_tls}


@dataclass(frozen=True)
class SendTLS:
    """Secure transport with a prepared context, no credential injection."""

    context: Optional[ssl.SSLContext]

    def client_kwargs(self, settings: Settings) -> Dict[str, Any]:
        if self.context is None:
            return {"verify": settings.verify_tls}
        return {"verify": self.context}


@dataclass(frozen=True)
class SendTLSTransport:
    """Custom transport; TLS and credentials are already baked into it."""

    transport: httpx.BaseTransport

    def client_kwargs(self, settings: Settings) -> Dict[str, Any]:
        return {"transport": self.transport}


SendOption = Union[SendNoop, SendTLS, SendTLSTransport]


def describe(option: SendOption) -> str:
    if isinstance(option, SendTLSTransport):
        return "basic-auth transport"
    if isinstance(option, SendTLS):
        return "tls"
    return "noop"
