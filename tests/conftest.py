"""Shared fixtures: a controllable clock, a recording sleep and a fake Stack Exchange API."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

import httpx
import pytest

from api.stackexchange import StackExchangeClient
from core.reliability import ResilientInvoker
from utils.rate_limit import AdmissionGate


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and advances a clock."""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


class FakeStackExchange:
    """
    Routes requests by path to canned JSON payloads.

    ``routes`` maps a path suffix (e.g. ``/questions/1/answers``) to either a
    payload dict or an ``httpx.Response``. Every request is recorded.
    """

    def __init__(self, routes: Dict[str, Any] | None = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/2.3", 1)[-1]
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"error_id": 404, "error_message": f"no route {path}"})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def paths(self) -> List[str]:
        return [r.url.path.split("/2.3", 1)[-1] for r in self.requests]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture
def invoker(clock: FakeClock, sleep: RecordingSleep) -> ResilientInvoker:
    gate = AdmissionGate(max_calls=100, window_seconds=60, clock=clock)
    return ResilientInvoker(gate, cooldown_seconds=2.0, max_retries=3, sleep=sleep)


@pytest.fixture
def fake_api() -> FakeStackExchange:
    return FakeStackExchange()


@pytest.fixture
def make_client(invoker: ResilientInvoker) -> Callable[..., StackExchangeClient]:
    """Build a client whose HTTP traffic goes to a FakeStackExchange."""

    def _make(api: FakeStackExchange, **kwargs: Any) -> StackExchangeClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(api))
        return StackExchangeClient(invoker, http_client=http_client, **kwargs)

    return _make

