"""Dynamically-typed documents and their JSON codec."""

from __future__ import annotations

import copy
import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from kcp_dynamic.errors import ArgumentError, DecodeError

CONTENT_TYPE_JSON = "application/json"


@dataclass
class Unstructured:
    """One API object as a plain nested mapping.

    Only the envelope fields get accessors; everything else is opaque and is
    carried through untouched.
    """

    object: dict[str, Any] = field(default_factory=dict)

    @property
    def api_version(self) -> str:
        return str(self.object.get("apiVersion") or "")

    @property
    def kind(self) -> str:
        return str(self.object.get("kind") or "")

    @property
    def metadata(self) -> dict[str, Any]:
        meta = self.object.get("metadata")
        return meta if isinstance(meta, dict) else {}

    @property
    def name(self) -> str:
        return str(self.metadata.get("name") or "")

    @property
    def namespace(self) -> str:
        return str(self.metadata.get("namespace") or "")

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the underlying mapping."""
        return copy.deepcopy(self.object)


@dataclass
class UnstructuredList:
    """A list envelope: the list's own fields plus its ordered items."""

    object: dict[str, Any] = field(default_factory=dict)
    items: list[Unstructured] = field(default_factory=list)

    @property
    def api_version(self) -> str:
        return str(self.object.get("apiVersion") or "")

    @property
    def kind(self) -> str:
        return str(self.object.get("kind") or "")

    @property
    def resource_version(self) -> str:
        meta = self.object.get("metadata")
        if isinstance(meta, dict):
            return str(meta.get("resourceVersion") or "")
        return ""

    @property
    def continue_token(self) -> str:
        meta = self.object.get("metadata")
        if isinstance(meta, dict):
            return str(meta.get("continue") or "")
        return ""

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Unstructured]:
        return iter(self.items)


def encode(obj: Unstructured | Mapping[str, Any]) -> bytes:
    """Encode a document as compact UTF-8 JSON. The input is not modified."""
    data = obj.object if isinstance(obj, Unstructured) else obj
    try:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        msg = f"Document is not JSON-serialisable: {e}"
        raise ArgumentError(msg) from e


def _load(data: bytes) -> Any:
    try:
        return json.loads(data)
    except UnicodeDecodeError as e:
        msg = f"Response body is not valid UTF-8: {e}"
        raise DecodeError(msg) from e
    except json.JSONDecodeError as e:
        msg = f"Response body is not valid JSON: {e.msg} at position {e.pos}"
        raise DecodeError(msg) from e


def to_unstructured(raw: Any) -> Unstructured:
    """Wrap an already-parsed JSON value, which must be an object."""
    if not isinstance(raw, dict):
        msg = f"Expected a JSON object, got {type(raw).__name__}."
        raise DecodeError(msg)
    return Unstructured(raw)


def decode(data: bytes) -> Unstructured:
    """Decode a single object."""
    return to_unstructured(_load(data))


def decode_list(data: bytes) -> UnstructuredList:
    """Decode a list envelope, keeping items in server order.

    Items that carry neither ``apiVersion`` nor ``kind`` inherit the list's
    ``apiVersion`` and its kind without the ``List`` suffix.
    """
    raw = _load(data)
    if not isinstance(raw, dict):
        msg = f"Expected a JSON list envelope object, got {type(raw).__name__}."
        raise DecodeError(msg)

    raw_items = raw.pop("items", None)
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        msg = f"List field 'items' must be an array, got {type(raw_items).__name__}."
        raise DecodeError(msg)

    api_version = raw.get("apiVersion")
    list_kind = raw.get("kind")
    item_kind = list_kind.removesuffix("List") if isinstance(list_kind, str) else None

    items: list[Unstructured] = []
    for index, entry in enumerate(raw_items):
        if not isinstance(entry, dict):
            msg = f"List item {index} must be an object, got {type(entry).__name__}."
            raise DecodeError(msg)
        if "apiVersion" not in entry and "kind" not in entry:
            if api_version is not None:
                entry["apiVersion"] = api_version
            if item_kind:
                entry["kind"] = item_kind
        items.append(Unstructured(entry))
    return UnstructuredList(object=raw, items=items)


def is_status(doc: Unstructured) -> bool:
    return doc.kind == "Status"
