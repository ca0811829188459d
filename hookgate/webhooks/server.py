"""aiohttp integration and webhook HTTP server."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from aiohttp import web
from aiohttp.typedefs import Handler

from hookgate.config import DEFAULT_WEBHOOK_PATH, Settings
from hookgate.utils.logging import get_logger
from hookgate.webhooks.middleware import (
    Delegate,
    GateState,
    Receiver,
    ResponseSink,
    Routing,
    Terminate,
    handle_delivery,
)
from hookgate.webhooks.models import DeliveryOutcome

log = get_logger(__name__)


# ------------------------------------------------------------------
# Gate adapters
# ------------------------------------------------------------------

async def dispatch(
    state: GateState, request: web.Request, routing: Routing
) -> web.StreamResponse:
    """Run the gate in its own task and return the first response it writes.

    The task is kept in ``state.background`` until it finishes, so a delivery
    that outlives the deadline keeps running after the 202 has been returned.
    """
    sink = ResponseSink()
    task = asyncio.create_task(
        handle_delivery(state, request, sink, routing),
        name=f"webhook-{request.headers.get('x-github-delivery', request.path)}",
    )
    state.background.add(task)
    task.add_done_callback(state.background.discard)
    task.add_done_callback(lambda t: _on_gate_done(state, sink, t))
    return await sink.wait()


def _on_gate_done(
    state: GateState, sink: ResponseSink, task: asyncio.Task[DeliveryOutcome]
) -> None:
    if task.cancelled():
        sink.abort()
        return

    exc = task.exception()
    if exc is not None:
        if sink.finished:
            state.log.error("webhook_gate_failed", exc_info=exc)
        else:
            sink.abort(exc)
        return

    state.log.debug("webhook_delivery_done", outcome=task.result().value)


def webhooks_middleware(
    webhooks: Receiver,
    path: str = DEFAULT_WEBHOOK_PATH,
    logger: Any = None,
) -> Callable[..., Awaitable[web.StreamResponse]]:
    """Build an aiohttp middleware; other routes of the app keep working."""
    state = GateState(receiver=webhooks, path=path)
    if logger is not None:
        state.log = logger

    @web.middleware
    async def _webhooks(request: web.Request, handler: Handler) -> web.StreamResponse:
        return await dispatch(state, request, Delegate(handler))

    return _webhooks


def webhooks_handler(
    webhooks: Receiver,
    path: str = DEFAULT_WEBHOOK_PATH,
    logger: Any = None,
) -> Callable[..., Awaitable[web.StreamResponse]]:
    """Build a request handler that answers 404 for anything but deliveries."""
    state = GateState(receiver=webhooks, path=path)
    if logger is not None:
        state.log = logger

    async def _webhooks(request: web.Request) -> web.StreamResponse:
        return await dispatch(state, request, Terminate())

    return _webhooks


async def _health(request: web.Request) -> web.Response:
    return web.Response(text="ok\n")


def create_app(webhooks: Receiver, settings: Settings) -> web.Application:
    app = web.Application()
    if settings.health_path:
        app.router.add_get(settings.health_path, _health)
    # Catch-all last: the router matches resources in registration order
    app.router.add_route(
        "*", "/{tail:.*}", webhooks_handler(webhooks, settings.webhooks.path)
    )
    return app


# ------------------------------------------------------------------
# Server
# ------------------------------------------------------------------

class WebhookServer:
    """Hosts the webhook gate on its own aiohttp site."""

    def __init__(self, settings: Settings, webhooks: Receiver) -> None:
        self._settings = settings
        self._webhooks = webhooks
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if not self._settings.webhooks.secret:
            log.warning("webhook_secret_missing", path=self._settings.webhooks.path)
        app = create_app(self._webhooks, self._settings)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(
            self._runner, self._settings.server.bind, self._settings.server.port
        )
        await site.start()
        log.info(
            "webhook_server_started",
            bind=self._settings.server.bind,
            port=self._settings.server.port,
            path=self._settings.webhooks.path,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        log.info("webhook_server_stopped")
