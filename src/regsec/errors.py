from __future__ import annotations
from typing import Optional


class SecurityError(Exception):
    """Base class for every failure raised while building a send option."""


class ConfigError(SecurityError):
    """The configuration document could not be read or validated."""


class TLSBuildError(SecurityError):
    """The TLS settings could not be turned into a client context."""


class CredentialReadError(SecurityError):
    """The password file could not be read."""


class HelperInvocationError(SecurityError):
    """The external credential helper failed."""

    def __init__(self, helper: str, cause: str) -> None:
        super().__init__(f"{helper}: {cause}")
        self.helper = helper
        self.cause = cause


class CredentialsNotFoundError(HelperInvocationError):
    """The helper does not know the requested server address."""


class CredentialResolutionError(SecurityError):
    def __init__(self, step: str, cause: Exception) -> None:
        super().__init__(f"get credentials: {step}: {cause}")
        self.step = step
        self.cause = cause


class TokenExchangeError(SecurityError):
    def __init__(self, realm: str, cause: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"token exchange with {realm}: {cause}")
        self.realm = realm
        self.status_code = status_code
