"""Argument validation helpers, applied before any request leaves the process."""

from __future__ import annotations

import re

from kcp_dynamic.errors import ArgumentError

# RFC 1123 label: lowercase alphanumeric and hyphens, 1-63 chars, starts/ends with alphanumeric
_NAMESPACE_RE = re.compile(r"^[a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?$")

# Logical cluster path: colon-separated segments, e.g. root:org:team
_CLUSTER_SEGMENT = r"[a-z0-9]([a-z0-9\-]*[a-z0-9])?"
_CLUSTER_NAME_RE = re.compile(rf"^{_CLUSTER_SEGMENT}(:{_CLUSTER_SEGMENT})*$")

_INVALID_SEGMENT_NAMES = {".", ".."}
_INVALID_SEGMENT_SUBSTRINGS = ("/", "%")


def validate_namespace(namespace: str) -> None:
    """Validate a namespace name against RFC 1123. Empty means cluster-scoped."""
    if namespace == "":
        return
    if not _NAMESPACE_RE.match(namespace):
        msg = f"Invalid namespace: {namespace!r}. Must be a valid RFC 1123 label."
        raise ArgumentError(msg)


def validate_cluster_name(name: str) -> None:
    """Validate a concrete logical cluster name."""
    if not _CLUSTER_NAME_RE.match(name):
        msg = (
            f"Invalid logical cluster name: {name!r}. "
            "Must be colon-separated lowercase alphanumeric segments, e.g. 'root:org'."
        )
        raise ArgumentError(msg)


def validate_path_segment(value: str, what: str = "name") -> None:
    """Reject values that cannot be used as a single URL path segment."""
    if value in _INVALID_SEGMENT_NAMES:
        msg = f"Invalid {what}: {value!r} may not be used as a path segment."
        raise ArgumentError(msg)
    for bad in _INVALID_SEGMENT_SUBSTRINGS:
        if bad in value:
            msg = f"Invalid {what}: {value!r} may not contain {bad!r}."
            raise ArgumentError(msg)


def require_name(name: str, operation: str) -> None:
    """Ensure an object name is present for operations that target one object."""
    if not name:
        msg = f"{operation}: resource name is required."
        raise ArgumentError(msg)
    validate_path_segment(name)
