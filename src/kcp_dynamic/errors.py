"""Error taxonomy for the dynamic client.

Every failure reaches the caller as exactly one of these exceptions. Nothing
here retries or suppresses; retry policy belongs to a higher layer.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from kubernetes.client import ApiException


class DynamicClientError(Exception):
    """Base class for all dynamic client errors."""


class ArgumentError(DynamicClientError, ValueError):
    """Invalid caller input, detected before any network call."""


class TransportError(DynamicClientError):
    """The connection could not be established or was interrupted."""


class DecodeError(DynamicClientError, ValueError):
    """A response body did not have the expected JSON shape."""


class StreamError(DynamicClientError):
    """A watch frame could not be decoded or the stream broke mid-frame."""


class ServerError(DynamicClientError, ApiException):
    """Non-2xx response from the API server.

    Subclasses ``kubernetes.client.ApiException`` so existing handlers that
    inspect ``e.status`` keep working.
    """

    def __init__(
        self,
        status: int,
        reason: str,
        body: bytes = b"",
        headers: Mapping[str, str] | None = None,
        status_document: dict[str, Any] | None = None,
    ) -> None:
        ApiException.__init__(self, status=status, reason=reason)
        self.body = body
        self.headers = dict(headers or {})
        self.status_document = status_document

    @property
    def message(self) -> str:
        """Human-readable message, preferring the server's Status message."""
        if self.status_document and self.status_document.get("message"):
            return str(self.status_document["message"])
        if self.body:
            return self.body.decode("utf-8", errors="replace")
        return self.reason or ""


def _status_document(body: bytes) -> dict[str, Any] | None:
    if not body:
        return None
    try:
        raw = json.loads(body)
    except ValueError:
        return None
    if isinstance(raw, dict) and raw.get("kind") == "Status":
        return raw
    return None


def raise_for_status(status: int, headers: Mapping[str, str], body: bytes) -> None:
    """Raise ServerError for any status outside 2xx."""
    if 200 <= status <= 299:
        return
    document = _status_document(body)
    reason = ""
    if document and document.get("reason"):
        reason = str(document["reason"])
    else:
        try:
            reason = HTTPStatus(status).phrase
        except ValueError:
            reason = "Unknown"
    raise ServerError(status, reason, body=body, headers=headers, status_document=document)
