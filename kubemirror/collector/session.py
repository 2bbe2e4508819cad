"""One list-then-watch session against a single collection.

A session lists the collection, surfaces the result as a ``Restarted``
event and then follows the watch stream from the list's resourceVersion.
When the server closes the stream cleanly (its ``timeoutSeconds`` elapsed)
the watch is reopened from the last checkpoint without relisting.  Every
other termination is raised as ``TransientStreamError`` and ends the session;
the resilience wrapper decides when to start a new one.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import Any

import aiohttp
from kubernetes_asyncio import watch  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubemirror.client import ClusterClient
from kubemirror.errors import CheckpointExpiredError, TransientStreamError
from kubemirror.models.events import Applied, Deleted, Restarted, WatchEvent
from kubemirror.models.resources import DynamicObject, ResourceDescriptor, WatchTarget
from kubemirror.observability.logging import get_logger

_log = get_logger("collector.session")

_HTTP_GONE = 410
_DEFAULT_TIMEOUT_SECONDS = 290


def _stream_error(exc: ApiException) -> TransientStreamError:
    if exc.status == _HTTP_GONE:
        return CheckpointExpiredError(f"watch checkpoint expired: {exc.reason}")
    return TransientStreamError(f"api error {exc.status}: {exc.reason}", status=exc.status)


def _extract_rv(metadata: Any) -> str:
    if not isinstance(metadata, dict):
        return ""
    rv = metadata.get("resourceVersion")
    return str(rv) if rv is not None else ""


class WatchSession:
    """List and watch one collection until the connection fails.

    Args:
        client:          Authenticated cluster handle.
        descriptor:      Resolved resource type.
        target:          Validated watch scope.
        timeout_seconds: Server-side watch timeout; the stream is reopened after it.
    """

    def __init__(
        self,
        client: ClusterClient,
        descriptor: ResourceDescriptor,
        target: WatchTarget,
        timeout_seconds: int = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._descriptor = descriptor
        self._path = target.collection_path(descriptor)
        self._timeout_seconds = timeout_seconds
        self._resource_version = ""

    @property
    def resource_version(self) -> str:
        """Last checkpoint seen on this session ("" before the first list)."""
        return self._resource_version

    async def events(self) -> AsyncGenerator[WatchEvent, None]:
        """Yield ``Restarted`` followed by incremental events, forever.

        Raises:
            TransientStreamError: when the list or watch connection fails.
            CheckpointExpiredError: when the server rejects the checkpoint.
        """
        objects = await self._list()
        _log.debug("session_listed", path=self._path, count=len(objects), resource_version=self._resource_version)
        yield Restarted(tuple(objects))

        while True:
            async with aclosing(self._watch()) as stream:
                async for event in stream:
                    yield event
            _log.debug("watch_stream_ended", path=self._path, resource_version=self._resource_version)

    async def _list(self) -> list[DynamicObject]:
        try:
            result = await self._client.list_objects(self._path)
        except ApiException as exc:
            raise _stream_error(exc) from exc
        except Exception as exc:
            raise TransientStreamError(f"list failed: {exc!r}") from exc

        if not isinstance(result, dict):
            raise TransientStreamError(f"unexpected list response type {type(result).__name__}")
        self._resource_version = _extract_rv(result.get("metadata"))

        objects: list[DynamicObject] = []
        for item in result.get("items") or []:
            if not isinstance(item, dict):
                continue
            # List items omit their type fields; restore them so every
            # object carries the same shape as a watched one.
            item.setdefault("apiVersion", self._descriptor.api_version)
            item.setdefault("kind", self._descriptor.kind)
            objects.append(item)
        return objects

    async def _watch(self) -> AsyncGenerator[WatchEvent, None]:
        w = watch.Watch(return_type="object")
        try:
            stream = w.stream(
                self._client.list_objects,
                self._path,
                resource_version=self._resource_version,
                timeout_seconds=self._timeout_seconds,
                allow_watch_bookmarks=True,
            )
            async for raw_event in stream:
                event = self._convert(raw_event)
                if event is not None:
                    yield event
        except ApiException as exc:
            raise _stream_error(exc) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransientStreamError(f"watch failed: {exc!r}") from exc
        except TransientStreamError:
            raise
        except Exception as exc:
            # Malformed lines and events surface as plain exceptions from
            # the watch decoder; the connection is unusable either way.
            raise TransientStreamError(f"watch failed: {exc!r}") from exc
        finally:
            await w.close()

    def _convert(self, raw_event: Any) -> WatchEvent | None:
        """Translate one raw watch event; returns None for bookmarks and unknown types."""
        if not isinstance(raw_event, dict):
            raise TransientStreamError(f"undecodable watch line: {str(raw_event)[:200]!r}")
        event_type = raw_event.get("type")
        raw = raw_event.get("raw_object")
        if not isinstance(raw, dict):
            obj = raw_event.get("object")
            raw = obj if isinstance(obj, dict) else {}

        if event_type == "ERROR":
            code = raw.get("code")
            message = str(raw.get("message", ""))
            if code == _HTTP_GONE:
                raise CheckpointExpiredError(f"watch checkpoint expired: {message}")
            raise TransientStreamError(f"watch error {code}: {message}", status=code)

        rv = _extract_rv(raw.get("metadata"))
        if rv:
            self._resource_version = rv

        if event_type in ("ADDED", "MODIFIED"):
            return Applied(raw)
        if event_type == "DELETED":
            return Deleted(raw)
        if event_type != "BOOKMARK":
            _log.warning("unknown_watch_event_type", event_type=event_type, path=self._path)
        return None
