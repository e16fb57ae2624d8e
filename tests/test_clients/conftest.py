"""Client-specific test fixtures: a real ApiClient with a stubbed pool and raw urllib3 responses."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from kubernetes.client import ApiClient, Configuration


@pytest.fixture
def mock_api_client() -> ApiClient:
    """A kubernetes ApiClient with a bearer token whose connection pool is a MagicMock."""
    configuration = Configuration(
        host="https://kcp.example:6443/",
        api_key={"authorization": "Bearer test-token"},
    )
    api_client = ApiClient(configuration)
    api_client.default_headers["User-Agent"] = "kcp-dynamic/test"
    api_client.rest_client.pool_manager = MagicMock()
    return api_client


@pytest.fixture
def mock_raw_response() -> MagicMock:
    """A urllib3 response with a small JSON body."""
    raw = MagicMock()
    raw.status = 200
    raw.headers = {"Content-Type": "application/json"}
    raw.data = b'{"kind": "Pod"}'
    return raw
