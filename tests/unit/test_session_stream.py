"""WatchSession against the real kubernetes-asyncio Watch.

Only the HTTP layer is scripted: ``ApiClient.call_api`` returns the list
document for plain requests and a response whose ``content.readline()``
replays byte lines for watch requests.  Watch's own decoding, ERROR-event
handling and argument injection run unmodified through ClusterClient.
"""

from __future__ import annotations

import copy
import json
import random
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from kubemirror.client import ClusterClient
from kubemirror.collector.resilient import resilient_watch
from kubemirror.collector.session import WatchSession
from kubemirror.errors import CheckpointExpiredError, TransientStreamError
from kubemirror.models.config import BackoffConfig
from kubemirror.models.events import Applied, Restarted, WatchEvent
from kubemirror.models.resources import ResourceDescriptor, WatchTarget
from tests.helpers import make_object

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _LineResponse:
    """Stands in for the streaming aiohttp response Watch reads from."""

    def __init__(self, *lines: bytes) -> None:
        self.content = MagicMock()
        # An empty read is the server closing the stream.
        self.content.readline = AsyncMock(side_effect=[*lines, b""])
        self.release = MagicMock()
        self.close = MagicMock()


class _ScriptedApiClient:
    """Serves the list document and then one scripted response per watch."""

    def __init__(self, list_result: dict[str, Any], *responses: _LineResponse) -> None:
        self._list_result = list_result
        self._responses = list(responses)
        self.list_calls: list[dict[str, Any]] = []
        self.watch_calls: list[dict[str, Any]] = []

    async def call_api(self, path: str, method: str, **kwargs: Any) -> Any:
        if ("watch", "true") in kwargs["query_params"]:
            self.watch_calls.append({"path": path, **kwargs})
            return self._responses.pop(0)
        self.list_calls.append({"path": path, **kwargs})
        return copy.deepcopy(self._list_result)

    async def close(self) -> None:
        pass


def _line(event_type: str, obj: dict[str, Any]) -> bytes:
    return json.dumps({"type": event_type, "object": obj}).encode() + b"\n"


def _list_result(*items: dict[str, Any], rv: str = "100") -> dict[str, Any]:
    return {"metadata": {"resourceVersion": rv}, "items": list(items)}


_GONE = {
    "kind": "Status",
    "apiVersion": "v1",
    "status": "Failure",
    "reason": "Expired",
    "message": "too old resource version: 100 (200)",
    "code": 410,
}

_BOOKMARK = {"kind": "Widget", "apiVersion": "example.com/v1", "metadata": {"resourceVersion": "150"}}


def _session(api: _ScriptedApiClient, descriptor: ResourceDescriptor) -> WatchSession:
    return WatchSession(ClusterClient(api), descriptor, WatchTarget.namespaced("default"))


async def _collect(session: WatchSession) -> tuple[list[WatchEvent], TransientStreamError]:
    events: list[WatchEvent] = []
    with pytest.raises(TransientStreamError) as info:
        async for event in session.events():
            events.append(event)
    return events, info.value


# ===========================================================================
# Decoding through the real Watch
# ===========================================================================


class TestRealWatchStream:
    async def test_events_bookmark_and_resume(self, widget_descriptor: ResourceDescriptor) -> None:
        """ADDED is applied, BOOKMARK only moves the checkpoint, a clean end re-watches from it."""
        api = _ScriptedApiClient(
            _list_result(make_object("a", rv="90")),
            _LineResponse(_line("ADDED", make_object("b", rv="120")), _line("BOOKMARK", _BOOKMARK)),
            _LineResponse(_line("ERROR", _GONE)),
        )

        events, error = await _collect(_session(api, widget_descriptor))

        assert [type(e) for e in events] == [Restarted, Applied]
        assert events[1].obj["metadata"]["name"] == "b"  # type: ignore[union-attr]
        assert isinstance(error, CheckpointExpiredError)
        assert len(api.list_calls) == 1
        assert [c["query_params"] for c in api.watch_calls] == [
            [("watch", "true"), ("resourceVersion", "100"), ("timeoutSeconds", "290"), ("allowWatchBookmarks", "true")],
            [("watch", "true"), ("resourceVersion", "150"), ("timeoutSeconds", "290"), ("allowWatchBookmarks", "true")],
        ]
        assert all(c["_preload_content"] is False for c in api.watch_calls)
        assert api.watch_calls[0]["path"] == "/apis/example.com/v1/namespaces/default/widgets"

    async def test_deleted_event(self, widget_descriptor: ResourceDescriptor) -> None:
        api = _ScriptedApiClient(
            _list_result(make_object("a")),
            _LineResponse(_line("DELETED", make_object("a", rv="101")), _line("ERROR", _GONE)),
        )

        events, _ = await _collect(_session(api, widget_descriptor))

        assert events[1].type.value == "deleted"

    async def test_undecodable_line_is_transient(self, widget_descriptor: ResourceDescriptor) -> None:
        response = _LineResponse(b"this is not json\n")
        api = _ScriptedApiClient(_list_result(), response)

        events, error = await _collect(_session(api, widget_descriptor))

        assert [type(e) for e in events] == [Restarted]
        assert not isinstance(error, CheckpointExpiredError)
        assert "not json" in str(error)
        response.release.assert_called()

    async def test_event_without_type_is_transient(self, widget_descriptor: ResourceDescriptor) -> None:
        api = _ScriptedApiClient(_list_result(), _LineResponse(b'{"object": {}}\n'))

        _, error = await _collect(_session(api, widget_descriptor))

        assert "Malformed" in str(error)

    async def test_bookmark_without_resource_version_is_transient(self, widget_descriptor: ResourceDescriptor) -> None:
        api = _ScriptedApiClient(_list_result(), _LineResponse(_line("BOOKMARK", {"kind": "Widget", "metadata": {}})))

        _, error = await _collect(_session(api, widget_descriptor))

        assert type(error) is TransientStreamError

    async def test_non_410_error_event(self, widget_descriptor: ResourceDescriptor) -> None:
        status = dict(_GONE, code=500, reason="InternalError", message="etcd unavailable")
        api = _ScriptedApiClient(_list_result(), _LineResponse(_line("ERROR", status)))

        _, error = await _collect(_session(api, widget_descriptor))

        assert error.status == 500
        assert not isinstance(error, CheckpointExpiredError)


# ===========================================================================
# Reconnect after stream corruption
# ===========================================================================


class TestRealWatchReconnect:
    async def test_garbage_line_triggers_relist(self, widget_descriptor: ResourceDescriptor) -> None:
        """A corrupted stream is retried like any other failure, starting with a fresh Restarted."""
        api = _ScriptedApiClient(_list_result(make_object("a")), _LineResponse(b"this is not json\n"))
        delays: list[float] = []

        async def sleep(delay: float) -> None:
            delays.append(delay)

        def factory():  # type: ignore[no-untyped-def]
            return _session(api, widget_descriptor).events()

        stream = resilient_watch(
            factory, BackoffConfig(jitter=0.0), rng=random.Random(0), sleep=sleep, clock=lambda: 0.0
        )
        events: list[WatchEvent] = []
        async for event in stream:
            events.append(event)
            if len(events) == 2:
                break
        await stream.aclose()

        assert [type(e) for e in events] == [Restarted, Restarted]
        assert delays == [0.8]
        assert len(api.list_calls) == 2
