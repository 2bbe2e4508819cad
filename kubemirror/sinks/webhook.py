"""Generic JSON webhook sink.

Posts every ObservedEvent as a JSON body to a configured HTTP endpoint.
Delivery failures are logged and never interrupt the watch pipeline.
"""

from __future__ import annotations

import httpx
import structlog

from kubemirror.models.events import ObservedEvent
from kubemirror.sinks.base import EventSink

_log = structlog.get_logger(component="sinks.webhook")


class WebhookSink(EventSink):
    """Delivers records by POSTing a JSON payload to a configurable URL.

    Args:
        url:       Full endpoint URL.
        headers:   Optional extra headers (e.g. Authorization).
        timeout:   HTTP request timeout in seconds. Defaults to 10.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("Webhook url must not be empty")
        self._url = url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json", **(headers or {})},
            transport=transport,
        )

    @property
    def sink_name(self) -> str:
        return "webhook"

    async def emit(self, record: ObservedEvent) -> None:
        try:
            response = await self._client.post(self._url, json=record.to_dict())
        except httpx.TimeoutException:
            _log.warning("webhook_request_timeout", url=self._url, event_type=record.event_type.value)
            return
        except httpx.HTTPError as exc:
            _log.warning("webhook_http_error", error=str(exc), event_type=record.event_type.value)
            return
        if not response.is_success:
            _log.warning(
                "webhook_non_2xx_response",
                status_code=response.status_code,
                body=response.text[:200],
                event_type=record.event_type.value,
            )

    async def close(self) -> None:
        await self._client.aclose()
