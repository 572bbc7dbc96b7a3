from __future__ import annotations
from typing import Optional

import httpx

from .config import Settings
from .send_option import SendNoop, SendOption


class HttpClient:
    """Synchronous httpx client configured by a send option."""

    def __init__(self, settings: Settings, option: Optional[SendOption] = None) -> None:
        self._settings = settings
        option = option or SendNoop()
        headers = dict(settings.extra_headers) if settings.extra_headers else {}
        self._client = httpx.Client(
            timeout=settings.timeout_s,
            follow_redirects=settings.follow_redirects,
            headers=headers,
            **option.client_kwargs(settings),
        )

    def get(self, url: str) -> httpx.Response:
        return self._client.get(url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
