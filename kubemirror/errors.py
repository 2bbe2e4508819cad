"""Exception hierarchy for kubemirror.

Configuration and discovery errors are fatal and surface before any watch is
opened.  Stream errors are transient and handled by the resilience wrapper.
"""

from __future__ import annotations


class MirrorError(Exception):
    """Base class for all kubemirror errors."""


class ConfigurationError(MirrorError):
    """Invalid combination of CLI flags or environment settings."""


class ConflictingScopeError(ConfigurationError):
    """Both a namespace and the global flag were requested."""

    def __init__(self) -> None:
        super().__init__("cannot specify a namespace and the global flag at the same time")


class MissingNamespaceError(ConfigurationError):
    """A namespaced resource was requested without a namespace or --global."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"no namespace provided for namespaced resource {kind!r}; use --namespace or --global")
        self.kind = kind


class DiscoveryError(MirrorError):
    """The requested resource type could not be resolved."""


class ResourceNotFoundError(DiscoveryError):
    """No resource of the requested kind exists in the group/version."""

    def __init__(self, api_version: str, kind: str) -> None:
        super().__init__(f"cannot find resource {api_version}/{kind}")
        self.api_version = api_version
        self.kind = kind


class MalformedGroupVersionError(DiscoveryError):
    """A non-core apiversion could not be split into group and version."""

    def __init__(self, api_version: str) -> None:
        super().__init__(f"cannot determine group and version for {api_version!r}")
        self.api_version = api_version


class TransientStreamError(MirrorError):
    """The current list/watch connection terminated and must be reopened."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class CheckpointExpiredError(TransientStreamError):
    """The server can no longer resume the watch from the last checkpoint (HTTP 410)."""

    def __init__(self, message: str = "watch checkpoint expired") -> None:
        super().__init__(message, status=410)
