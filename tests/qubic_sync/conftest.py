"""
Shared pytest fixtures for component tests.

Provides an HTTP client factory backed by ``httpx.MockTransport`` so that
no test touches the network.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_client() -> Iterator[Callable[[Handler], httpx.Client]]:
    """Build clients that answer every request through a handler."""
    clients: list[httpx.Client] = []

    def factory(handler: Handler) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    """A sleep function that returns immediately."""

    def sleep(_: float) -> None:
        return None

    return sleep
