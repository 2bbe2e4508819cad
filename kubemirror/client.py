"""Thin handle over the kubernetes-asyncio API client.

Only the three operations the mirror needs are exposed: discovery of a
group/version, listing a collection and watching it.  Requests go through
``ApiClient.call_api`` with an ``object`` response type so objects stay
untyped dictionaries regardless of their kind.
"""

from __future__ import annotations

from typing import Any

import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

from kubemirror.observability.logging import get_logger

_log = get_logger("client")


class ClusterClient:
    """An already-authenticated handle used for discovery, list and watch.

    Args:
        api_client: Configured ``kubernetes_asyncio.client.ApiClient``.
    """

    def __init__(self, api_client: Any) -> None:
        self.api_client = api_client

    @classmethod
    async def from_environment(cls) -> ClusterClient:
        """Build a client from in-cluster config, falling back to kubeconfig."""
        try:
            k8s_config.load_incluster_config()
            _log.info("k8s client configured from in-cluster service account")
        except k8s_config.ConfigException:
            await k8s_config.load_kube_config()
            _log.info("k8s client configured from kubeconfig")
        return cls(k8s_client.ApiClient())

    async def close(self) -> None:
        await self.api_client.close()

    async def get_api_resources(self, api_path: str) -> list[dict[str, Any]]:
        """Return the ``resources`` entries of the discovery document at *api_path*."""
        document = await self._get(api_path)
        resources = document.get("resources", []) if isinstance(document, dict) else []
        return [r for r in resources if isinstance(r, dict)]

    async def list_objects(
        self,
        path: str,
        *,
        watch: bool = False,
        resource_version: str | None = None,
        timeout_seconds: int | None = None,
        allow_watch_bookmarks: bool | None = None,
        _preload_content: bool = True,
        _request_timeout: float | None = None,
    ) -> Any:
        """List (or, with ``watch=True``, watch) the collection at *path*.

        The keyword names follow the generated API methods so this bound
        method can be passed straight to ``kubernetes_asyncio.watch.Watch.stream``.
        """
        query: list[tuple[str, str]] = []
        if watch:
            query.append(("watch", "true"))
        if resource_version:
            query.append(("resourceVersion", resource_version))
        if timeout_seconds is not None:
            query.append(("timeoutSeconds", str(timeout_seconds)))
        if allow_watch_bookmarks is not None:
            query.append(("allowWatchBookmarks", "true" if allow_watch_bookmarks else "false"))
        return await self._get(
            path,
            query_params=query,
            _preload_content=_preload_content,
            _request_timeout=_request_timeout,
        )

    async def _get(
        self,
        path: str,
        query_params: list[tuple[str, str]] | None = None,
        _preload_content: bool = True,
        _request_timeout: float | None = None,
    ) -> Any:
        return await self.api_client.call_api(
            path,
            "GET",
            query_params=query_params or [],
            header_params={"Accept": "application/json"},
            response_types_map={200: "object"},
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _preload_content=_preload_content,
            _request_timeout=_request_timeout,
        )
