"""Kubernetes API client construction and the HTTP transport built on it."""

from __future__ import annotations

import re

from kubernetes import client as k8s_client
from kubernetes.config import new_client_from_config

# A kubeconfig server URL that already targets one logical cluster
_CLUSTER_SUFFIX_RE = re.compile(r"/clusters/[^/]+/?$")


def strip_cluster_path(host: str) -> str:
    """Trim a trailing ``/clusters/<name>`` from a server URL.

    Every request path carries its own cluster prefix, so the base URL must
    not.
    """
    return _CLUSTER_SUFFIX_RE.sub("", host.rstrip("/")).rstrip("/")


def load_k8s_api_client(context: str | None = None, host: str | None = None) -> k8s_client.ApiClient:
    """Create an isolated Kubernetes API client for the given kubeconfig context.

    Uses new_client_from_config to avoid mutating the global K8s SDK configuration,
    so several clients for different contexts can coexist in one process.

    Args:
        context: Kubeconfig context name. None selects the current context.
        host: Optional server URL overriding the one in kubeconfig.
    """
    api_client = new_client_from_config(context=context)
    api_client.configuration.host = strip_cluster_path(host or api_client.configuration.host)
    return api_client
