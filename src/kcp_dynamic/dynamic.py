"""Cluster-aware dynamic client: List/Get/Create/Update/Patch/Delete/Watch on any GVR."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, replace

import structlog

from kcp_dynamic import request as req
from kcp_dynamic.clients import load_k8s_api_client
from kcp_dynamic.clients.transport import ApiClientTransport, Request, Transport
from kcp_dynamic.codec import Unstructured, UnstructuredList, decode, decode_list
from kcp_dynamic.config import ClientConfig
from kcp_dynamic.errors import ArgumentError, ServerError, raise_for_status
from kcp_dynamic.logicalcluster import ClusterSelector, ensure_selector, is_wildcard
from kcp_dynamic.models import (
    ApplyOptions,
    CreateOptions,
    DeleteOptions,
    GetOptions,
    GroupVersionResource,
    ListOptions,
    PatchOptions,
    PatchType,
    UpdateOptions,
)
from kcp_dynamic.paths import build_path
from kcp_dynamic.validation import require_name, validate_namespace
from kcp_dynamic.watch import Watcher

log = structlog.get_logger()


class ClusterDynamicClient:
    """Entry point: pick a logical cluster, then a resource type.

    The transport is either supplied directly or built lazily, once, from a
    ClientConfig.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        config: ClientConfig | None = None,
    ) -> None:
        if transport is None and config is None:
            msg = "ClusterDynamicClient needs a transport or a config."
            raise ArgumentError(msg)
        self._config = config or ClientConfig()
        self._transport = transport
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ClientConfig) -> ClusterDynamicClient:
        return cls(config=config)

    def _get_transport(self) -> Transport:
        with self._lock:
            if self._transport is None:
                api_client = load_k8s_api_client(self._config.kubeconfig_context, self._config.host)
                self._transport = ApiClientTransport(api_client)
            return self._transport

    def cluster(self, cluster: ClusterSelector) -> ClusterClient:
        return ClusterClient(self, ensure_selector(cluster))


@dataclass(frozen=True)
class ClusterClient:
    """A client bound to one logical cluster, or to all of them."""

    client: ClusterDynamicClient
    cluster: ClusterSelector

    def resource(self, gvr: GroupVersionResource) -> ResourceClient:
        return ResourceClient(
            transport=self.client._get_transport(),
            cluster=self.cluster,
            gvr=gvr,
            request_timeout=self.client._config.timeout,
        )


@dataclass(frozen=True)
class ResourceClient:
    """Operations on one resource type in one logical cluster.

    Immutable; safe to share between concurrent callers. ``namespace()``
    returns a new handle. Every operation runs its blocking I/O on a worker
    thread and accepts a per-call ``timeout`` in seconds.
    """

    transport: Transport
    cluster: ClusterSelector
    gvr: GroupVersionResource
    namespace_name: str = ""
    request_timeout: float | None = None

    def namespace(self, namespace: str) -> ResourceClient:
        """Scope the handle to ``namespace``. An empty string means cluster-scoped."""
        validate_namespace(namespace)
        return replace(self, namespace_name=namespace)

    def _path(self, name: str = "", subresources: tuple[str, ...] = ()) -> str:
        return build_path(self.cluster, self.gvr, self.namespace_name, name, subresources)

    def _timeout(self, timeout: float | None) -> float | None:
        return self.request_timeout if timeout is None else timeout

    def _require_concrete(self, operation: str) -> None:
        if is_wildcard(self.cluster):
            msg = f"{operation}: the wildcard cluster selector is only valid for list and watch."
            raise ArgumentError(msg)

    async def _do(self, request: Request) -> bytes:
        response = await asyncio.to_thread(self.transport.request, request)
        try:
            raise_for_status(response.status, response.headers, response.body)
        except ServerError as e:
            log.warning(
                "request_rejected",
                cluster=str(self.cluster),
                method=request.method,
                path=request.path,
                status=e.status,
                reason=e.reason,
            )
            raise
        return response.body

    async def list(self, options: ListOptions | None = None, *, timeout: float | None = None) -> UnstructuredList:
        """List objects. Allowed with the wildcard selector."""
        request = req.list_request(self._path(), options, self._timeout(timeout))
        return decode_list(await self._do(request))

    async def get(
        self,
        name: str,
        *subresources: str,
        options: GetOptions | None = None,
        timeout: float | None = None,
    ) -> Unstructured:
        self._require_concrete("get")
        require_name(name, "get")
        request = req.get_request(self._path(name, subresources), options, self._timeout(timeout))
        return decode(await self._do(request))

    async def create(
        self,
        obj: Unstructured,
        *subresources: str,
        options: CreateOptions | None = None,
        timeout: float | None = None,
    ) -> Unstructured:
        """Create an object. With subresources, the name comes from ``obj.metadata.name``."""
        self._require_concrete("create")
        name = ""
        if subresources:
            name = obj.name
            require_name(name, "create")
        request = req.create_request(self._path(name, subresources), obj, options, self._timeout(timeout))
        return decode(await self._do(request))

    async def update(
        self,
        obj: Unstructured,
        *subresources: str,
        options: UpdateOptions | None = None,
        timeout: float | None = None,
    ) -> Unstructured:
        """Replace an object. The name comes from ``obj.metadata.name``."""
        self._require_concrete("update")
        require_name(obj.name, "update")
        request = req.update_request(self._path(obj.name, subresources), obj, options, self._timeout(timeout))
        return decode(await self._do(request))

    async def update_status(
        self,
        obj: Unstructured,
        options: UpdateOptions | None = None,
        *,
        timeout: float | None = None,
    ) -> Unstructured:
        return await self.update(obj, "status", options=options, timeout=timeout)

    async def patch(
        self,
        name: str,
        patch_type: PatchType | str,
        data: bytes,
        *subresources: str,
        options: PatchOptions | None = None,
        timeout: float | None = None,
    ) -> Unstructured:
        """Patch an object with raw bytes sent under the given content type."""
        self._require_concrete("patch")
        require_name(name, "patch")
        request = req.patch_request(self._path(name, subresources), patch_type, data, options, self._timeout(timeout))
        return decode(await self._do(request))

    async def apply(
        self,
        name: str,
        obj: Unstructured,
        *subresources: str,
        options: ApplyOptions,
        timeout: float | None = None,
    ) -> Unstructured:
        """Server-side apply ``obj`` under ``options.field_manager``."""
        self._require_concrete("apply")
        require_name(name, "apply")
        request = req.apply_request(self._path(name, subresources), obj, options, self._timeout(timeout))
        return decode(await self._do(request))

    async def apply_status(
        self,
        name: str,
        obj: Unstructured,
        options: ApplyOptions,
        *,
        timeout: float | None = None,
    ) -> Unstructured:
        return await self.apply(name, obj, "status", options=options, timeout=timeout)

    async def delete(
        self,
        name: str,
        *subresources: str,
        options: DeleteOptions | None = None,
        timeout: float | None = None,
    ) -> None:
        self._require_concrete("delete")
        require_name(name, "delete")
        request = req.delete_request(self._path(name, subresources), options, self._timeout(timeout))
        await self._do(request)

    async def delete_collection(
        self,
        options: DeleteOptions | None = None,
        list_options: ListOptions | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        """Delete every object matching ``list_options``."""
        self._require_concrete("delete_collection")
        request = req.delete_request(
            self._path(), options, self._timeout(timeout), list_options=list_options or ListOptions()
        )
        await self._do(request)

    async def watch(self, options: ListOptions | None = None, *, timeout: float | None = None) -> Watcher:
        """Open a watch. Allowed with the wildcard selector.

        ``timeout`` bounds connection setup only; stop the returned Watcher to
        cancel the stream.
        """
        path = self._path()
        request = req.watch_request(path, options, self._timeout(timeout))
        response = await asyncio.to_thread(self.transport.stream, request)
        if not 200 <= response.status <= 299:
            try:
                body = await asyncio.to_thread(response.read_all)
            finally:
                response.close()
            log.warning("watch_rejected", cluster=str(self.cluster), path=path, status=response.status)
            raise_for_status(response.status, response.headers, body)
        return Watcher(response, path=path)
