from __future__ import annotations
from urllib.parse import urlparse


def ensure_scheme(u: str, default: str = "https") -> str:
    """Ensure an explicit scheme is present."""
    return u if "://" in u else f"{default}://{u}"


def registry_host(addr: str) -> str:
    """Return host[:port] for a registry address given with or without a scheme."""
    p = urlparse(ensure_scheme(addr))
    return p.netloc or p.path.split("/")[0]


def registry_url(addr: str, path: str = "/v2/") -> str:
    p = urlparse(ensure_scheme(addr))
    netloc = p.netloc or p.path.split("/")[0]
    wp = path if path.startswith("/") else f"/{path}"
    return f"{p.scheme}://{netloc}{wp}"


def redact(secret: str) -> str:
    if not secret:
        return ""
    if len(secret) <= 4:
        return "****"
    return f"{secret[:2]}…{secret[-2:]}"
