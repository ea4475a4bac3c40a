"""Pytest configuration for all tests."""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from peachy_ci.github.client import GitHubClient


class FakeGitHub:
    """Stands in for api.github.com behind an ``httpx.MockTransport``.

    Records every request and answers with a fixed status and body. ``body``
    is JSON-encoded unless it is already bytes. ``routes`` maps
    ``(method, path)`` to a ``(status_code, body)`` answer for that request
    only. Set ``error`` to make the transport raise instead of answering.
    """

    def __init__(
        self,
        body: Any = None,
        status_code: int = 200,
        error: Optional[httpx.RequestError] = None,
        routes: Optional[Dict[Tuple[str, str], Tuple[int, Any]]] = None,
    ):
        self.body = body
        self.status_code = status_code
        self.error = error
        self.routes = routes or {}
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        status_code, body = self.routes.get(
            (request.method, request.url.path),
            (self.status_code, self.body),
        )
        if isinstance(body, bytes):
            content = body
        elif body is None:
            content = b""
        else:
            content = json.dumps(body).encode()
        return httpx.Response(status_code, content=content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def client(self, repository: str = "acme/widgets", token: str = "ghp_test") -> GitHubClient:
        return GitHubClient(token, repository, transport=self.transport)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()
