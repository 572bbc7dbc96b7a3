from __future__ import annotations
import base64
import re
from typing import Dict, Optional, Tuple

import httpx

from .credentials import Identity, PasswordCredential, TokenCredential
from .errors import TokenExchangeError

CLIENT_ID = "regsec"

DEFAULT_PORTS = {"http": 80, "https": 443}

_PARAM_RE = re.compile(r'(\w+)\s*=\s*(?:"((?:[^"\\]|\\.)*)"|([^\s,]+))')


def parse_challenge(header: str) -> Tuple[str, Dict[str, str]]:
    """Split a WWW-Authenticate header into its scheme and parameters."""
    scheme, _, rest = header.strip().partition(" ")
    params = {}
    for m in _PARAM_RE.finditer(rest):
        value = m.group(2) if m.group(2) is not None else m.group(3)
        params[m.group(1).lower()] = value.replace('\\"', '"')
    return scheme.lower(), params


def basic_header(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def _split_addr(addr: str) -> Tuple[str, Optional[int]]:
    """Return the lowercased host and explicit port, if any, of a registry address."""
    netloc = addr.split("://", 1)[-1].split("/", 1)[0].lower()
    host, sep, port = netloc.rpartition(":")
    if sep and port.isdigit() and not host.endswith(":"):
        return host.strip("[]"), int(port)
    return netloc.strip("[]"), None


class BasicAuthTransport(httpx.BaseTransport):
    """Wraps a transport and answers registry auth challenges for one repo.

    Basic challenges get the password credential directly. Bearer challenges
    go through the docker token flow: the identity is exchanged at the realm
    for a token scoped to ``repository:<repo>:pull,push`` which is then kept
    for later requests to the same registry.
    """

    def __init__(self, addr: str, repo: str, wrapped: httpx.BaseTransport, identity: Identity) -> None:
        self.addr = addr
        self.repo = repo
        self.identity = identity
        self._wrapped = wrapped
        self._host, self._port = _split_addr(addr)
        self._token: Optional[str] = None

    @property
    def scope(self) -> str:
        return f"repository:{self.repo}:pull,push"

    def _applies_to(self, request: httpx.Request) -> bool:
        if request.url.host.lower() != self._host:
            return False
        default = DEFAULT_PORTS.get(request.url.scheme)
        return (request.url.port or default) == (self._port or default)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if not self._applies_to(request):
            return self._wrapped.handle_request(request)

        request.read()
        if self._token is not None:
            request.headers["Authorization"] = f"Bearer {self._token}"
        response = self._wrapped.handle_request(request)
        if response.status_code != 401 or "www-authenticate" not in response.headers:
            return response

        scheme, params = parse_challenge(response.headers["www-authenticate"])
        if scheme == "basic":
            if not isinstance(self.identity, PasswordCredential) or self.identity.is_empty:
                return response
            auth = basic_header(self.identity.username, self.identity.password)
        elif scheme == "bearer" and "realm" in params:
            self._token = self._fetch_token(params)
            auth = f"Bearer {self._token}"
        else:
            return response

        response.read()
        response.close()
        request.headers["Authorization"] = auth
        return self._wrapped.handle_request(request)

    def _fetch_token(self, challenge: Dict[str, str]) -> str:
        realm = challenge["realm"]
        scope = challenge.get("scope") or self.scope
        service = challenge.get("service", "")
        if isinstance(self.identity, TokenCredential):
            request = httpx.Request(
                "POST",
                realm,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self.identity.identity_token,
                    "service": service,
                    "scope": scope,
                    "client_id": CLIENT_ID,
                },
            )
        else:
            params = {"scope": scope}
            if service:
                params["service"] = service
            request = httpx.Request("GET", realm, params=params)
            if not self.identity.is_empty:
                request.headers["Authorization"] = basic_header(self.identity.username, self.identity.password)

        try:
            response = self._wrapped.handle_request(request)
            response.read()
        except httpx.HTTPError as e:
            raise TokenExchangeError(realm, str(e)) from e
        if response.status_code != 200:
            raise TokenExchangeError(realm, f"HTTP {response.status_code}", status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as e:
            raise TokenExchangeError(realm, f"malformed response: {e}") from e
        token = (payload.get("token") or payload.get("access_token")) if isinstance(payload, dict) else None
        if not token:
            raise TokenExchangeError(realm, "response carries no token")
        return token

    def close(self) -> None:
        self._wrapped.close()
