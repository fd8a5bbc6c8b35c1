from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from config.settings import Settings


def completion(content: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"content": content}}]}


class FakeFireworks:
    """Serves queued completion replies and records every request body."""

    def __init__(self, replies: List[httpx.Response]) -> None:
        self.replies = list(replies)
        self.requests: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if not self.replies:
            raise AssertionError("unexpected extra call to the completion API")
        return self.replies.pop(0)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.fireworks_api_key = "test-key"
    s.fireworks_api_url = "https://fireworks.test/v1/chat/completions"
    s.primary_model = "primary-model"
    s.repair_model = "repair-model"
    return s


@pytest.fixture
def fireworks() -> Callable[..., FakeFireworks]:
    def make(*contents: Any) -> FakeFireworks:
        replies = []
        for item in contents:
            if isinstance(item, httpx.Response):
                replies.append(item)
            else:
                replies.append(httpx.Response(200, json=completion(item)))
        return FakeFireworks(replies)

    return make
