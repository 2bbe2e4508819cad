"""Resource type and identity data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

CORE_API_VERSION = "v1"

# An opaque Kubernetes object as decoded from JSON.  No schema is assumed
# beyond ``metadata.name`` and the optional ``metadata.namespace``.
DynamicObject = dict[str, Any]


@dataclass(frozen=True)
class ResourceDescriptor:
    """Concrete endpoint metadata for one resource type.

    Resolved once at startup from a discovery query and never mutated.
    """

    group: str
    version: str
    kind: str
    plural: str
    namespaced: bool

    @property
    def api_version(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    @property
    def api_path(self) -> str:
        """Base URL path of the group/version (``/api/v1`` or ``/apis/<group>/<version>``)."""
        if not self.group:
            return f"/api/{self.version}"
        return f"/apis/{self.group}/{self.version}"

    def __str__(self) -> str:
        return f"{self.api_version}/{self.kind}"


class WatchScope(StrEnum):
    """Scope of a list/watch request."""

    NAMESPACED = "namespaced"
    ALL_NAMESPACES = "all_namespaces"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class WatchTarget:
    """Where to watch: one namespace, every namespace, or a cluster-scoped type."""

    scope: WatchScope
    namespace: str | None = None

    @classmethod
    def namespaced(cls, namespace: str) -> WatchTarget:
        return cls(scope=WatchScope.NAMESPACED, namespace=namespace)

    @classmethod
    def all_namespaces(cls) -> WatchTarget:
        return cls(scope=WatchScope.ALL_NAMESPACES)

    @classmethod
    def cluster_scoped(cls) -> WatchTarget:
        return cls(scope=WatchScope.CLUSTER)

    def collection_path(self, descriptor: ResourceDescriptor) -> str:
        """URL path of the collection this target lists and watches."""
        if self.scope == WatchScope.NAMESPACED:
            return f"{descriptor.api_path}/namespaces/{self.namespace}/{descriptor.plural}"
        return f"{descriptor.api_path}/{descriptor.plural}"

    def __str__(self) -> str:
        if self.scope == WatchScope.NAMESPACED:
            return f"namespace={self.namespace}"
        return self.scope.value


@dataclass(frozen=True, order=True)
class ResourceIdentity:
    """Unique key of an object within one resource type."""

    namespace: str | None
    name: str

    @classmethod
    def of(cls, obj: DynamicObject) -> ResourceIdentity:
        """Build the identity from an object's metadata.

        Raises:
            ValueError: if the object carries no ``metadata.name``.
        """
        metadata = obj.get("metadata") or {}
        name = metadata.get("name")
        if not name:
            raise ValueError("object has no metadata.name")
        return cls(namespace=metadata.get("namespace") or None, name=str(name))

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name
