"""Shared test fixtures for all test modules."""

from __future__ import annotations

import pytest

from kcp_dynamic.dynamic import ClusterDynamicClient
from tests.helpers import FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    """A fake transport answering every request with an empty object."""
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> ClusterDynamicClient:
    return ClusterDynamicClient(transport)
