"""Watch event variants and the observability record derived from them."""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from kubemirror.models.resources import DynamicObject, ResourceIdentity


class EventType(StrEnum):
    """Tag of a watch event."""

    APPLIED = "applied"
    DELETED = "deleted"
    RESTARTED = "restarted"


@dataclass(frozen=True)
class Applied:
    """An object was created or updated."""

    obj: DynamicObject
    type: EventType = field(default=EventType.APPLIED, init=False)

    def modify(self, fn: Callable[[DynamicObject], None]) -> Applied:
        obj = copy.deepcopy(self.obj)
        fn(obj)
        return Applied(obj)


@dataclass(frozen=True)
class Deleted:
    """An object was deleted."""

    obj: DynamicObject
    type: EventType = field(default=EventType.DELETED, init=False)

    def modify(self, fn: Callable[[DynamicObject], None]) -> Deleted:
        obj = copy.deepcopy(self.obj)
        fn(obj)
        return Deleted(obj)


@dataclass(frozen=True)
class Restarted:
    """The stream was (re)established; ``objects`` is the complete current state."""

    objects: tuple[DynamicObject, ...]
    type: EventType = field(default=EventType.RESTARTED, init=False)

    def modify(self, fn: Callable[[DynamicObject], None]) -> Restarted:
        objects = copy.deepcopy(self.objects)
        for obj in objects:
            fn(obj)
        return Restarted(objects)


WatchEvent = Applied | Deleted | Restarted


@dataclass(frozen=True)
class ObservedEvent:
    """One record per processed event, handed to the output sink."""

    event_type: EventType
    count: int
    resource: str
    identities: tuple[ResourceIdentity, ...] = ()
    objects: tuple[DynamicObject, ...] = ()
    observed_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @classmethod
    def from_event(cls, event: WatchEvent, resource: str) -> ObservedEvent:
        if isinstance(event, Restarted):
            objects = event.objects
        else:
            objects = (event.obj,)
        return cls(
            event_type=event.type,
            count=len(objects),
            resource=resource,
            identities=tuple(ResourceIdentity.of(obj) for obj in objects),
            objects=objects,
        )

    def summary(self) -> str:
        """Short human-readable description (``restarted 3``, ``applied default/web``)."""
        if self.event_type == EventType.RESTARTED:
            return f"{self.event_type} {self.count}"
        return f"{self.event_type} {', '.join(str(i) for i in self.identities)}"

    def to_dict(self) -> dict[str, object]:
        return {
            "event_type": self.event_type.value,
            "count": self.count,
            "resource": self.resource,
            "identities": [str(i) for i in self.identities],
            "observed_at": self.observed_at.isoformat(),
        }
