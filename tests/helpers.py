"""Test doubles and document builders shared across test modules."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator
from typing import Any

from kcp_dynamic.clients.transport import Request, Response
from kcp_dynamic.codec import Unstructured
from kcp_dynamic.models import GroupVersionResource

GVR = GroupVersionResource(group="gtest", version="vtest", resource="rtest")


def get_json(version: str, kind: str, name: str) -> bytes:
    return json.dumps({"apiVersion": version, "kind": kind, "metadata": {"name": name}}).encode()


def get_list_json(version: str, kind: str, *items: bytes) -> bytes:
    return b'{"apiVersion": "%s", "kind": "%s", "items": [%s]}' % (
        version.encode(),
        kind.encode(),
        b",".join(items),
    )


def get_object(version: str, kind: str, name: str) -> Unstructured:
    return Unstructured({"apiVersion": version, "kind": kind, "metadata": {"name": name}})


def watch_frame(event_type: str, obj: Unstructured | dict[str, Any]) -> bytes:
    payload = obj.object if isinstance(obj, Unstructured) else obj
    return json.dumps({"type": event_type, "object": payload}).encode() + b"\n"


def respond(body: bytes, status: int = 200) -> Callable[[Request], Response]:
    def handler(request: Request) -> Response:
        return Response(status=status, headers={"Content-Type": "application/json"}, body=body)

    return handler


def echo(request: Request) -> Response:
    return Response(status=200, headers={"Content-Type": "application/json"}, body=request.body or b"")


class FakeStream:
    """StreamResponse yielding canned chunks."""

    def __init__(self, chunks: list[bytes], status: int = 200, body: bytes = b"") -> None:
        self.status = status
        self.headers = {"Content-Type": "application/json"}
        self._chunks = chunks
        self._body = body
        self.closed = False

    def chunks(self) -> Iterator[bytes]:
        yield from self._chunks

    def read_all(self) -> bytes:
        return self._body

    def close(self) -> None:
        self.closed = True


class BlockingStream(FakeStream):
    """Yields its chunks, then blocks like an idle socket until closed."""

    def __init__(self, chunks: list[bytes]) -> None:
        super().__init__(chunks)
        self._closed_event = threading.Event()

    def chunks(self) -> Iterator[bytes]:
        yield from self._chunks
        self._closed_event.wait()
        if self.closed:
            msg = "connection closed"
            raise OSError(msg)

    def close(self) -> None:
        self.closed = True
        self._closed_event.set()


class FakeTransport:
    """Records every request and answers through the given handlers."""

    def __init__(
        self,
        handler: Callable[[Request], Response] | None = None,
        stream: FakeStream | None = None,
    ) -> None:
        self.handler = handler or respond(b"{}")
        self.stream_response = stream
        self.requests: list[Request] = []

    @property
    def last(self) -> Request:
        return self.requests[-1]

    def request(self, request: Request) -> Response:
        self.requests.append(request)
        return self.handler(request)

    def stream(self, request: Request) -> FakeStream:
        self.requests.append(request)
        assert self.stream_response is not None
        return self.stream_response


