"""Shared fakes: a scripted JSON-RPC server behind httpx.MockTransport."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import pytest

from jitorpc.client.rpc import Transport
from jitorpc.config import ClientConfig

ENGINE_URL = "https://engine.test/api/v1"


@dataclass(frozen=True)
class RpcFail:
    """Scripted JSON-RPC error envelope."""
    code: int
    message: str


class NetworkDown:
    """Scripted connection failure."""


@dataclass(frozen=True)
class Recorded:
    url: httpx.URL
    headers: httpx.Headers
    body: dict[str, Any]

    @property
    def method(self) -> str:
        return self.body["method"]

    @property
    def params(self) -> Any:
        return self.body["params"]


class FakeRpc:
    """
    Scripted JSON-RPC endpoint.

    ``script(method, *replies)`` queues replies per method; the last reply
    repeats once the queue is drained. A reply is a result value, an
    ``RpcFail``, or ``NetworkDown``.
    """

    def __init__(self) -> None:
        self.requests: list[Recorded] = []
        self._replies: dict[str, deque[Any]] = {}

    def script(self, method: str, *replies: Any) -> "FakeRpc":
        self._replies[method] = deque(replies)
        return self

    def calls(self, method: str) -> list[Recorded]:
        return [r for r in self.requests if r.method == method]

    def _next(self, method: str) -> Any:
        queue = self._replies.get(method)
        if not queue:
            return RpcFail(-32601, f"Method not found: {method}")
        if len(queue) > 1:
            return queue.popleft()
        return queue[0]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(Recorded(request.url, request.headers, body))
        reply = self._next(body["method"])
        if reply is NetworkDown or isinstance(reply, NetworkDown):
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(reply, RpcFail):
            payload = {
                "jsonrpc": "2.0",
                "id": body["id"],
                "error": {"code": reply.code, "message": reply.message},
            }
            return httpx.Response(200, json=payload)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": reply})

    def mock_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class StubTransport:
    """In-process stand-in for Transport that skips HTTP entirely."""

    def __init__(self, **results: Any) -> None:
        self.results = results
        self.sent: list[tuple[str, str, Any]] = []

    def send(self, endpoint_path: str, method: str, params: Any = None, *, query: Optional[dict] = None) -> Any:
        self.sent.append((endpoint_path, method, params))
        return self.results[method]


@pytest.fixture()
def fake_rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture()
def transport(fake_rpc: FakeRpc):
    with Transport(ClientConfig(ENGINE_URL), transport=fake_rpc.mock_transport()) as t:
        yield t


def no_sleep(_: float) -> None:
    return None


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)
