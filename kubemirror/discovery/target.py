"""Validate the requested scope against a resolved resource descriptor."""

from __future__ import annotations

from kubemirror.errors import ConflictingScopeError, MissingNamespaceError
from kubemirror.models.resources import ResourceDescriptor, WatchTarget


def check_scope_flags(namespace: str | None, global_: bool) -> None:
    """Reject ``--namespace`` together with ``--global``.

    This rule holds for every descriptor, so it runs before discovery.
    """
    if namespace is not None and global_:
        raise ConflictingScopeError()


def resolve_target(descriptor: ResourceDescriptor, namespace: str | None, global_: bool) -> WatchTarget:
    """Combine the descriptor with the requested scope.

    Cluster-scoped types ignore any namespace argument.
    """
    check_scope_flags(namespace, global_)
    if not descriptor.namespaced:
        return WatchTarget.cluster_scoped()
    if global_:
        return WatchTarget.all_namespaces()
    if namespace is None:
        raise MissingNamespaceError(descriptor.kind)
    return WatchTarget.namespaced(namespace)
