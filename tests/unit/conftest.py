"""
Shared fixtures for unit tests.

Provides in-memory transports in each ready state, a client wired to one of
them, and a deterministic subscription id factory.
"""

from collections.abc import Callable, Iterator

import pytest

from graphql_transport_ws.client import GraphQLTransportWs
from graphql_transport_ws.correlation import set_correlation_id
from graphql_transport_ws.transport import ReadyState
from tests.helpers.transport import FakeTransport


@pytest.fixture
def transport():
    """FakeTransport that has not opened yet."""
    return FakeTransport()


@pytest.fixture
def open_transport():
    """FakeTransport that is already OPEN."""
    return FakeTransport(ReadyState.OPEN)


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic ids: sub-1, sub-2, ..."""
    counter = iter(range(1, 1_000_000))
    return lambda: f"sub-{next(counter)}"


@pytest.fixture
def client(transport: FakeTransport, id_factory: Callable[[], str]) -> GraphQLTransportWs:
    """Client on a CONNECTING FakeTransport with deterministic ids."""
    return GraphQLTransportWs(transport, id_factory=id_factory)


@pytest.fixture
def open_client(open_transport: FakeTransport, id_factory: Callable[[], str]) -> GraphQLTransportWs:
    """Client on an OPEN FakeTransport with deterministic ids."""
    return GraphQLTransportWs(open_transport, id_factory=id_factory)


@pytest.fixture(autouse=True)
def reset_correlation_id() -> Iterator[None]:
    """Keep correlation IDs from leaking between tests."""
    set_correlation_id(None)
    yield
    set_correlation_id(None)
