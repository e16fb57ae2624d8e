"""Request configuration: method, query, headers and body for each verb."""

from __future__ import annotations

from kcp_dynamic.clients.transport import Request
from kcp_dynamic.codec import CONTENT_TYPE_JSON, Unstructured, encode
from kcp_dynamic.errors import ArgumentError
from kcp_dynamic.models import (
    ApplyOptions,
    CreateOptions,
    DeleteOptions,
    GetOptions,
    ListOptions,
    PatchOptions,
    PatchType,
    UpdateOptions,
)

_ACCEPT = {"Accept": CONTENT_TYPE_JSON}
_JSON_BODY = {"Accept": CONTENT_TYPE_JSON, "Content-Type": CONTENT_TYPE_JSON}


def list_request(path: str, options: ListOptions | None, timeout: float | None) -> Request:
    query = (options or ListOptions()).to_query()
    return Request("GET", path, query=tuple(query), headers=dict(_ACCEPT), timeout=timeout)


def watch_request(path: str, options: ListOptions | None, timeout: float | None) -> Request:
    query = (options or ListOptions()).to_query()
    query.append(("watch", "true"))
    return Request("GET", path, query=tuple(query), headers=dict(_ACCEPT), timeout=timeout)


def get_request(path: str, options: GetOptions | None, timeout: float | None) -> Request:
    query = (options or GetOptions()).to_query()
    return Request("GET", path, query=tuple(query), headers=dict(_ACCEPT), timeout=timeout)


def create_request(
    path: str, obj: Unstructured, options: CreateOptions | None, timeout: float | None
) -> Request:
    query = (options or CreateOptions()).to_query()
    return Request(
        "POST", path, query=tuple(query), headers=dict(_JSON_BODY), body=encode(obj), timeout=timeout
    )


def update_request(
    path: str, obj: Unstructured, options: UpdateOptions | None, timeout: float | None
) -> Request:
    query = (options or UpdateOptions()).to_query()
    return Request(
        "PUT", path, query=tuple(query), headers=dict(_JSON_BODY), body=encode(obj), timeout=timeout
    )


def delete_request(
    path: str,
    options: DeleteOptions | None,
    timeout: float | None,
    list_options: ListOptions | None = None,
) -> Request:
    """DELETE a single object, or a collection when ``list_options`` is given.

    The options body is only sent when something other than the defaults was
    asked for.
    """
    body = None
    if options is not None and not options.is_default():
        body = encode(options.to_body())
    query = list_options.to_query() if list_options is not None else []
    return Request("DELETE", path, query=tuple(query), headers=dict(_JSON_BODY), body=body, timeout=timeout)


def patch_request(
    path: str,
    patch_type: PatchType | str,
    data: bytes,
    options: PatchOptions | None,
    timeout: float | None,
) -> Request:
    """PATCH with the caller's bytes and content type, both passed through untouched."""
    content_type = str(patch_type)
    if not content_type:
        msg = "Patch type is required."
        raise ArgumentError(msg)
    if not isinstance(data, bytes | bytearray):
        msg = f"Patch data must be bytes, got {type(data).__name__}."
        raise ArgumentError(msg)
    query = (options or PatchOptions()).to_query()
    headers = {"Accept": CONTENT_TYPE_JSON, "Content-Type": content_type}
    return Request("PATCH", path, query=tuple(query), headers=headers, body=bytes(data), timeout=timeout)


def apply_request(path: str, obj: Unstructured, options: ApplyOptions, timeout: float | None) -> Request:
    """Server-side apply: a PATCH whose body is the full desired object."""
    query = options.to_query()
    headers = {"Accept": CONTENT_TYPE_JSON, "Content-Type": str(PatchType.APPLY)}
    return Request("PATCH", path, query=tuple(query), headers=headers, body=encode(obj), timeout=timeout)
