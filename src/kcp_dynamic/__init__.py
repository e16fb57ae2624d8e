"""Schema-agnostic REST client for logical clusters served behind one API endpoint."""

from __future__ import annotations

from kcp_dynamic.codec import Unstructured, UnstructuredList
from kcp_dynamic.config import ClientConfig, load_client_config
from kcp_dynamic.dynamic import ClusterClient, ClusterDynamicClient, ResourceClient
from kcp_dynamic.errors import (
    ArgumentError,
    DecodeError,
    DynamicClientError,
    ServerError,
    StreamError,
    TransportError,
)
from kcp_dynamic.log_config import configure_logging
from kcp_dynamic.logicalcluster import WILDCARD, ClusterName, ClusterSelector
from kcp_dynamic.models import (
    ApplyOptions,
    CreateOptions,
    DeleteOptions,
    GetOptions,
    GroupVersionResource,
    ListOptions,
    PatchOptions,
    PatchType,
    Preconditions,
    UpdateOptions,
)
from kcp_dynamic.watch import EventType, Watcher, WatchEvent

__all__ = [
    "WILDCARD",
    "ApplyOptions",
    "ArgumentError",
    "ClientConfig",
    "ClusterClient",
    "ClusterDynamicClient",
    "ClusterName",
    "ClusterSelector",
    "CreateOptions",
    "DecodeError",
    "DeleteOptions",
    "DynamicClientError",
    "EventType",
    "GetOptions",
    "GroupVersionResource",
    "ListOptions",
    "PatchOptions",
    "PatchType",
    "Preconditions",
    "ResourceClient",
    "ServerError",
    "StreamError",
    "TransportError",
    "UnstructuredList",
    "Unstructured",
    "UpdateOptions",
    "WatchEvent",
    "Watcher",
    "configure_logging",
    "load_client_config",
]
