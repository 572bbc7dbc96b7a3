from typing import Dict, List, Optional

import pytest

from regsec.errors import HelperInvocationError
from regsec.helpers import HelperCredentials


class FakeHelper:
    """In-memory credential helper keyed by server address."""

    def __init__(self, creds: Dict[str, HelperCredentials], error: Optional[HelperInvocationError] = None) -> None:
        self.creds = creds
        self.error = error
        self.calls: List[str] = []

    def get(self, server_address: str) -> HelperCredentials:
        self.calls.append(server_address)
        if self.error is not None:
            raise self.error
        if server_address not in self.creds:
            raise HelperInvocationError("fake", f"unknown server {server_address}")
        return self.creds[server_address]


class FakeFactory:
    def __init__(self, helper: FakeHelper) -> None:
        self.helper = helper
        self.names: List[str] = []

    def __call__(self, name: str) -> FakeHelper:
        self.names.append(name)
        return self.helper


@pytest.fixture
def addr() -> str:
    return "registry.example.com"


@pytest.fixture
def ca_dir(tmp_path):
    d = tmp_path / "certs"
    d.mkdir()
    return d
