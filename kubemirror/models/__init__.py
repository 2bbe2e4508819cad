"""Core data structures for kubemirror."""

from kubemirror.models.config import MirrorConfig
from kubemirror.models.events import (
    Applied,
    Deleted,
    EventType,
    ObservedEvent,
    Restarted,
    WatchEvent,
)
from kubemirror.models.resources import (
    CORE_API_VERSION,
    DynamicObject,
    ResourceDescriptor,
    ResourceIdentity,
    WatchScope,
    WatchTarget,
)

__all__ = [
    "Applied",
    "CORE_API_VERSION",
    "Deleted",
    "DynamicObject",
    "EventType",
    "MirrorConfig",
    "ObservedEvent",
    "ResourceDescriptor",
    "ResourceIdentity",
    "Restarted",
    "WatchEvent",
    "WatchScope",
    "WatchTarget",
]
