from __future__ import annotations
import json
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol

from .config import DEFAULT_INTERNAL_DIR
from .errors import CredentialsNotFoundError, HelperInvocationError

HELPER_PREFIX = "docker-credential-"
CREDENTIALS_NOT_FOUND = "credentials not found in native keychain"

log = logging.getLogger("regsec.helpers")


@dataclass(frozen=True)
class HelperCredentials:
    """What a credential helper hands back for one server address."""

    username: str
    secret: str
    server_url: str = ""


class CredentialHelper(Protocol):
    """Anything able to look up a principal and secret for a server address."""

    def get(self, server_address: str) -> HelperCredentials:
        ...


def helper_program(name: str, internal_dir: str = DEFAULT_INTERNAL_DIR) -> str:
    return os.path.join(internal_dir, HELPER_PREFIX + name)


class ShellCredentialHelper:
    """Runs a docker-credential-* program and speaks its ``get`` protocol."""

    def __init__(self, program: str, timeout_s: Optional[float] = None) -> None:
        self.program = program
        self.timeout_s = timeout_s

    def get(self, server_address: str) -> HelperCredentials:
        log.debug("invoking %s get for %s", self.program, server_address)
        try:
            proc = subprocess.run(
                [self.program, "get"],
                input=server_address,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
                check=False,
            )
        except FileNotFoundError as e:
            raise HelperInvocationError(self.program, f"program not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise HelperInvocationError(self.program, f"timed out after {e.timeout}s") from e
        except OSError as e:
            raise HelperInvocationError(self.program, str(e)) from e

        out = proc.stdout.strip()
        if proc.returncode != 0:
            msg = out or proc.stderr.strip() or f"exit status {proc.returncode}"
            if msg == CREDENTIALS_NOT_FOUND:
                raise CredentialsNotFoundError(self.program, msg)
            raise HelperInvocationError(self.program, msg)

        try:
            payload = json.loads(out)
        except json.JSONDecodeError as e:
            raise HelperInvocationError(self.program, f"malformed output: {e}") from e
        if not isinstance(payload, dict) or not isinstance(payload.get("Secret"), str):
            raise HelperInvocationError(self.program, "malformed output: missing Secret")
        return HelperCredentials(
            username=str(payload.get("Username") or ""),
            secret=payload["Secret"],
            server_url=str(payload.get("ServerURL") or ""),
        )


def shell_helper_factory(timeout_s: Optional[float] = None, internal_dir: str = DEFAULT_INTERNAL_DIR):
    """Return a factory mapping a helper name to a ShellCredentialHelper."""

    def factory(name: str) -> CredentialHelper:
        return ShellCredentialHelper(helper_program(name, internal_dir), timeout_s=timeout_s)

    return factory
