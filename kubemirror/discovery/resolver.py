"""Resolve a runtime group/version + kind into concrete endpoint metadata."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import aiohttp
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubemirror.errors import DiscoveryError, MalformedGroupVersionError, ResourceNotFoundError
from kubemirror.models.resources import CORE_API_VERSION, ResourceDescriptor
from kubemirror.observability.logging import get_logger

_log = get_logger("discovery.resolver")


class DiscoveryClient(Protocol):
    async def get_api_resources(self, api_path: str) -> list[dict[str, Any]]: ...


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``group/version`` into its parts; bare ``v1`` is the core group.

    Raises:
        MalformedGroupVersionError: if a non-core string has no ``/`` or an empty part.
    """
    if api_version == CORE_API_VERSION:
        return "", CORE_API_VERSION
    group, sep, version = api_version.partition("/")
    if not sep or not group or not version or "/" in version:
        raise MalformedGroupVersionError(api_version)
    return group, version


async def resolve_descriptor(client: DiscoveryClient, api_version: str, kind: str) -> ResourceDescriptor:
    """Look *kind* up in the discovery document of *api_version*.

    Performs exactly one discovery round trip.  Subresources (``pods/status``)
    share the kind of their parent and are skipped.

    Raises:
        MalformedGroupVersionError: before any network call, for a bad apiversion.
        ResourceNotFoundError: when the group/version or the kind does not exist.
        DiscoveryError: for any other API failure or when the cluster is unreachable.
    """
    group, version = split_api_version(api_version)
    lookup = ResourceDescriptor(group=group, version=version, kind=kind, plural="", namespaced=False)

    try:
        resources = await client.get_api_resources(lookup.api_path)
    except ApiException as exc:
        if exc.status == 404:
            raise ResourceNotFoundError(api_version, kind) from exc
        raise DiscoveryError(f"discovery of {api_version} failed: {exc.status} {exc.reason}") from exc
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
        raise DiscoveryError(f"discovery of {api_version} failed: {exc!r}") from exc

    for entry in resources:
        name = str(entry.get("name", ""))
        if "/" in name or entry.get("kind") != kind:
            continue
        descriptor = ResourceDescriptor(
            group=group,
            version=version,
            kind=kind,
            plural=name,
            namespaced=bool(entry.get("namespaced", False)),
        )
        _log.info(
            "resource_resolved",
            api_version=api_version,
            kind=kind,
            plural=descriptor.plural,
            namespaced=descriptor.namespaced,
        )
        return descriptor

    raise ResourceNotFoundError(api_version, kind)
