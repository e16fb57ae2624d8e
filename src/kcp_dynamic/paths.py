"""REST path construction for cluster-aware resource endpoints.

Grammar::

    /clusters/{cluster|*}[/api/{version} | /apis/{group}/{version}]
        [/namespaces/{namespace}]/{resource}[/{name}][/{subresource}]*

Empty namespace, name and subresource values are omitted, never emitted as
an empty segment.
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import quote

from kcp_dynamic.errors import ArgumentError
from kcp_dynamic.logicalcluster import ClusterSelector, ensure_selector
from kcp_dynamic.models import GroupVersionResource
from kcp_dynamic.validation import validate_path_segment

# RFC 3986 pchar minus unreserved (which quote() never escapes)
_PCHAR_SAFE = "!$&'()*+,;=:@"


def _segment(value: str) -> str:
    return quote(value, safe=_PCHAR_SAFE)


def cluster_path(cluster: ClusterSelector) -> str:
    """Return the ``/clusters/<id>`` prefix for a selector."""
    return ensure_selector(cluster).path


def build_path(
    cluster: ClusterSelector,
    gvr: GroupVersionResource,
    namespace: str = "",
    name: str = "",
    subresources: Sequence[str] = (),
) -> str:
    """Build the canonical URL path for a request.

    Args:
        cluster: ClusterName or WILDCARD.
        gvr: Resource type. A trailing ``/`` on the resource is stripped.
        namespace: Namespace, or empty for cluster-scoped resources.
        name: Object name, or empty for collection endpoints.
        subresources: Segments appended after the name, e.g. ``("status",)``.

    Returns:
        The absolute path, without query string.

    Raises:
        ArgumentError: If version or resource is empty, or a segment is not a
            valid path segment.
    """
    if not gvr.version:
        msg = f"Resource {gvr} has no version."
        raise ArgumentError(msg)
    resource = gvr.resource.rstrip("/")
    if not resource:
        msg = f"Resource {gvr} has no resource name."
        raise ArgumentError(msg)

    parts = [cluster_path(cluster)]
    if gvr.group:
        parts.append(f"/apis/{_segment(gvr.group)}/{_segment(gvr.version)}")
    else:
        parts.append(f"/api/{_segment(gvr.version)}")
    if namespace:
        validate_path_segment(namespace, "namespace")
        parts.append(f"/namespaces/{_segment(namespace)}")
    parts.append(f"/{_segment(resource)}")
    if name:
        validate_path_segment(name)
        parts.append(f"/{_segment(name)}")
    for sub in subresources:
        if not sub:
            continue
        validate_path_segment(sub, "subresource")
        parts.append(f"/{_segment(sub)}")
    return "".join(parts)
