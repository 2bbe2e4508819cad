"""Application bootstrap for kubemirror.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: K8s client -> discovery -> scope validation -> store -> sinks
              -> status API -> watch pipeline

Configuration and discovery failures abort startup before any watch is
opened.  Once started, the mirror runs until SIGINT/SIGTERM cancels it;
shutdown tears down the pipeline, the API server, the sinks and the client
in reverse order.
"""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass
from typing import TYPE_CHECKING

import click

from kubemirror.cache.store import Store
from kubemirror.client import ClusterClient
from kubemirror.discovery.resolver import resolve_descriptor
from kubemirror.discovery.target import check_scope_flags, resolve_target
from kubemirror.errors import ConfigurationError, DiscoveryError, TransientStreamError
from kubemirror.models.config import MirrorConfig
from kubemirror.models.resources import ResourceDescriptor, WatchTarget
from kubemirror.observability.logging import bind_watch_context, get_logger
from kubemirror.pipeline import build_event_stream, run_pipeline
from kubemirror.sinks import build_sink
from kubemirror.sinks.base import EventSink

if TYPE_CHECKING:
    import structlog

_SHUTDOWN_GRACE_SECONDS = 15

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


@dataclass(frozen=True)
class WatchRequest:
    """What to mirror, as given on the command line."""

    api_version: str
    kind: str
    namespace: str | None = None
    global_: bool = False
    output: str = "console"
    show_objects: bool = False


class MirrorApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``client`` and ``sink`` may be injected (tests, embedding); otherwise they
    are built from the environment and ``config``.  ``stop()`` is safe to call
    on an app that never started.
    """

    def __init__(
        self,
        config: MirrorConfig,
        request: WatchRequest,
        client: ClusterClient | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.config = config
        self.request = request
        self.store = Store()
        self.descriptor: ResourceDescriptor | None = None
        self.target: WatchTarget | None = None

        self._client = client
        self._owns_client = client is None
        self._sink = sink
        self._api_server: object | None = None
        self._background_tasks: list[asyncio.Task[None]] = []
        self._log: structlog.stdlib.BoundLogger = get_logger("app")

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Resolve the resource type and prepare every component.

        Raises:
            ConfigurationError: conflicting or missing scope.
            DiscoveryError: unknown kind or malformed apiversion.
            _ComponentError: the cluster client could not be initialised.
        """
        from kubemirror import __version__

        request = self.request
        self._log.info("kubemirror starting", version=__version__, api_version=request.api_version, kind=request.kind)

        # Rejected for every descriptor, so fail before touching the cluster.
        check_scope_flags(request.namespace, request.global_)

        await self._start_client()
        assert self._client is not None

        self.descriptor = await resolve_descriptor(self._client, request.api_version, request.kind)
        self.target = resolve_target(self.descriptor, request.namespace, request.global_)
        bind_watch_context(str(self.descriptor), str(self.target))
        self._log.info("watch target resolved", resource=str(self.descriptor), target=str(self.target))

        if self._sink is None:
            self._sink = build_sink(request.output, self.config.sinks, show_objects=request.show_objects)

        await self._start_api()

    async def _start_client(self) -> None:
        if self._client is not None:
            return
        try:
            self._client = await ClusterClient.from_environment()
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    async def _start_api(self) -> None:
        """Start the uvicorn status server when enabled."""
        if not self.config.api.enabled:
            return
        assert self.descriptor is not None
        import uvicorn

        from kubemirror.api import create_app

        fastapi_app = create_app(store=self.store, descriptor=self.descriptor)
        uv_config = uvicorn.Config(
            app=fastapi_app,
            host="0.0.0.0",
            port=self.config.api.port,
            log_config=None,  # structlog handles all logging
            access_log=False,
        )
        server = uvicorn.Server(uv_config)
        task = asyncio.create_task(server.serve(), name="status-api")
        self._background_tasks.append(task)
        self._api_server = server
        self._log.info("status api started", port=self.config.api.port)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Run the watch pipeline until cancelled."""
        assert self._client is not None
        assert self.descriptor is not None
        assert self.target is not None
        assert self._sink is not None
        events = build_event_stream(self._client, self.descriptor, self.target, self.store, self.config)
        await run_pipeline(events, self._sink, str(self.descriptor))

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop background tasks, then sinks and client, each independently."""
        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()

        if self._sink is not None:
            try:
                await asyncio.wait_for(self._sink.close(), timeout=_SHUTDOWN_GRACE_SECONDS)
            except TimeoutError:
                self._log.warning("sink close timed out", timeout=_SHUTDOWN_GRACE_SECONDS)
            except Exception as exc:
                self._log.error("sink close raised an error", error=str(exc))

        if self._client is not None and self._owns_client:
            try:
                await self._client.close()
            except Exception as exc:
                self._log.debug("k8s client close raised (non-fatal)", error=str(exc))
            self._client = None

        self._log.info("kubemirror stopped")


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(
    config: MirrorConfig,
    request: WatchRequest,
    client: ClusterClient | None = None,
    sink: EventSink | None = None,
) -> int:
    """Start the mirror, run until a signal arrives, and return an exit code."""
    app = MirrorApp(config, request, client=client, sink=sink)
    log = get_logger("app")

    try:
        await app.start()
    except ConfigurationError as exc:
        click.echo(f"error: {exc}", err=True)
        await app.stop()
        return EXIT_CONFIGURATION
    except DiscoveryError as exc:
        click.echo(f"error: {exc}", err=True)
        await app.stop()
        return EXIT_FAILURE
    except _ComponentError as exc:
        log.critical("fatal startup error", component=exc.component, error=str(exc.cause))
        click.echo(f"error: {exc}", err=True)
        await app.stop()
        return EXIT_FAILURE

    loop = asyncio.get_running_loop()
    pipeline = asyncio.create_task(app.run(), name="mirror-pipeline")
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, pipeline.cancel)

    try:
        await pipeline
    except asyncio.CancelledError:
        if not pipeline.cancelled():
            raise
        log.info("shutdown requested")
    except TransientStreamError as exc:
        log.critical("watch stream gave up", error=str(exc))
        return EXIT_FAILURE
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
        await app.stop()
    return EXIT_OK
