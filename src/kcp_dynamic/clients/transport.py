"""HTTP transport over the Kubernetes client's connection pool."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import urlencode

import structlog
import urllib3
from kubernetes import client as k8s_client

from kcp_dynamic.errors import TransportError

log = structlog.get_logger()

# Only the bearer token scheme is defined by the generated Kubernetes client.
_AUTH_SETTINGS = ("BearerToken",)


@dataclass(frozen=True)
class Request:
    """A fully configured request, ready to hand to a Transport."""

    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    timeout: float | None = None

    @property
    def query_string(self) -> str:
        return urlencode(self.query)


@dataclass(frozen=True)
class Response:
    status: int
    headers: Mapping[str, str]
    body: bytes


class StreamResponse(Protocol):
    """An open response whose body is consumed incrementally."""

    status: int
    headers: Mapping[str, str]

    def chunks(self) -> Iterator[bytes]: ...

    def read_all(self) -> bytes: ...

    def close(self) -> None: ...


class Transport(Protocol):
    def request(self, request: Request) -> Response: ...

    def stream(self, request: Request) -> StreamResponse: ...


class _Urllib3Stream:
    """StreamResponse backed by an unread urllib3 response."""

    def __init__(self, raw: urllib3.BaseHTTPResponse) -> None:
        self._raw = raw
        self.status = raw.status
        self.headers = dict(raw.headers)

    def chunks(self) -> Iterator[bytes]:
        try:
            # amt=None yields whole HTTP chunks as they arrive on chunked responses
            yield from self._raw.stream(amt=None, decode_content=True)
        except urllib3.exceptions.HTTPError as e:
            msg = f"Stream read failed: {e}"
            raise TransportError(msg) from e

    def read_all(self) -> bytes:
        try:
            return self._raw.read(decode_content=True)
        except urllib3.exceptions.HTTPError as e:
            msg = f"Reading response body failed: {e}"
            raise TransportError(msg) from e

    def close(self) -> None:
        # shutdown() unblocks a read in progress on another thread
        self._raw.shutdown()
        self._raw.close()
        self._raw.release_conn()


class ApiClientTransport:
    """Transport that reuses a configured ``kubernetes.client.ApiClient``.

    The ApiClient supplies the server URL, TLS settings, client certificates
    and bearer token (including refresh hooks) loaded from kubeconfig. Bodies
    are sent as the exact bytes given, bypassing the generated client's own
    JSON serialisation so patch payloads and content types are never rewritten.
    """

    def __init__(self, api_client: k8s_client.ApiClient) -> None:
        self._api_client = api_client

    @property
    def host(self) -> str:
        return str(self._api_client.configuration.host).rstrip("/")

    def _apply_auth(self, headers: dict[str, str], query: list[tuple[str, str]]) -> None:
        """Add credentials from the client configuration.

        auth_settings() runs the configuration's refresh hook on each call.
        """
        settings = self._api_client.configuration.auth_settings()
        for name in _AUTH_SETTINGS:
            setting = settings.get(name)
            if not setting or not setting.get("value"):
                continue
            if setting["in"] == "header":
                headers[setting["key"]] = setting["value"]
            elif setting["in"] == "query":
                query.append((setting["key"], setting["value"]))

    def _prepare(self, request: Request) -> tuple[str, dict[str, str]]:
        headers: dict[str, str] = dict(self._api_client.default_headers)
        headers.update(request.headers)
        query: list[tuple[str, str]] = list(request.query)
        self._apply_auth(headers, query)
        url = f"{self.host}{request.path}"
        if query:
            url = f"{url}?{urlencode(query)}"
        return url, headers

    def _send(self, request: Request, timeout: urllib3.Timeout, preload: bool) -> urllib3.BaseHTTPResponse:
        url, headers = self._prepare(request)
        log.debug("request_sent", method=request.method, path=request.path, query=request.query_string)
        try:
            return self._api_client.rest_client.pool_manager.request(
                request.method,
                url,
                body=request.body,
                headers=headers,
                preload_content=preload,
                timeout=timeout,
            )
        except urllib3.exceptions.HTTPError as e:
            log.error("request_failed", method=request.method, path=request.path, error=str(e))
            msg = f"{request.method} {request.path} failed: {e}"
            raise TransportError(msg) from e

    def request(self, request: Request) -> Response:
        timeout = urllib3.Timeout(connect=request.timeout, read=request.timeout)
        raw = self._send(request, timeout, preload=True)
        return Response(status=raw.status, headers=dict(raw.headers), body=raw.data or b"")

    def stream(self, request: Request) -> StreamResponse:
        # A watch has no read deadline; the timeout bounds connection setup only.
        timeout = urllib3.Timeout(connect=request.timeout, read=None)
        raw = self._send(request, timeout, preload=False)
        return _Urllib3Stream(raw)
