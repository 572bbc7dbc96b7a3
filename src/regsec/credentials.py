from __future__ import annotations
import base64
import binascii
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .config import BasicAuthConfig
from .errors import CredentialReadError, CredentialResolutionError, HelperInvocationError
from .helpers import CredentialHelper, shell_helper_factory

TOKEN_USERNAME = "<token>"

HelperFactory = Callable[[str], CredentialHelper]


@dataclass(frozen=True)
class PasswordCredential:
    username: str = ""
    password: str = ""
    server_address: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.username and not self.password


@dataclass(frozen=True)
class TokenCredential:
    identity_token: str
    server_address: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.identity_token


Identity = Union[PasswordCredential, TokenCredential]

EMPTY_IDENTITY = PasswordCredential()


def _decode_auth(auth: str) -> Optional[tuple[str, str]]:
    """Split a base64 user:password pair; None when it does not decode."""
    try:
        raw = base64.b64decode(auth, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    user, sep, pwd = raw.partition(":")
    if not sep:
        return None
    return user, pwd


def read_basic_auth(basic: BasicAuthConfig) -> Identity:
    """Turn static basic-auth settings into an identity.

    The password file, when configured, is read on every call and its whole
    content is the password. An identity token in the settings wins over the
    username and password.
    """
    username, password = basic.username, basic.password
    if basic.password_file:
        try:
            with open(basic.password_file, "r", encoding="utf-8", newline="") as fh:
                password = fh.read()
        except OSError as e:
            raise CredentialReadError(f"read password file: {e}") from e
    elif not username and not password and basic.auth:
        decoded = _decode_auth(basic.auth)
        if decoded is not None:
            username, password = decoded

    if basic.identitytoken:
        return TokenCredential(identity_token=basic.identitytoken, server_address=basic.serveraddress)
    return PasswordCredential(username=username, password=password, server_address=basic.serveraddress)


def identity_from_helper(helper: CredentialHelper, addr: str) -> Identity:
    creds = helper.get(addr)
    if creds.username == TOKEN_USERNAME:
        return TokenCredential(identity_token=creds.secret, server_address=addr)
    return PasswordCredential(username=creds.username, password=creds.secret, server_address=addr)


def resolve_identity(
    basic: Optional[BasicAuthConfig],
    helper_name: str,
    addr: str,
    helper_factory: Optional[HelperFactory] = None,
) -> Identity:
    """Resolve the single identity to present to ``addr``.

    Static credentials form the baseline. A configured helper replaces them
    entirely on success; a failing helper fails the whole resolution.
    """
    identity: Identity = EMPTY_IDENTITY
    if basic is not None:
        try:
            identity = read_basic_auth(basic)
        except CredentialReadError as e:
            raise CredentialResolutionError("basic auth", e) from e

    if helper_name:
        factory = helper_factory or shell_helper_factory()
        try:
            identity = identity_from_helper(factory(helper_name), addr)
        except HelperInvocationError as e:
            raise CredentialResolutionError(f"credential helper {helper_name}", e) from e
    return identity
