"""Delivery gate: turns one inbound request into exactly one response.

The gate recognizes webhook deliveries by method and path, checks the
required GitHub headers, then reads, verifies and dispatches the payload.
GitHub abandons a delivery after 10 seconds, so a deadline timer answers
``202 still processing`` if dispatch is slower than :data:`RESPONSE_DEADLINE`;
whatever dispatch produces afterwards is discarded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol, Union

from aiohttp import web

from hookgate.config import DEFAULT_WEBHOOK_PATH
from hookgate.utils.logging import get_logger
from hookgate.webhooks.errors import (
    MissingHeadersError,
    VerificationError,
    WebhookError,
)
from hookgate.webhooks.models import (
    DELIVERY_HEADER,
    EVENT_HEADER,
    SIGNATURE_256_HEADER,
    SIGNATURE_HEADER,
    DeliveryOutcome,
    WebhookEvent,
)
from hookgate.webhooks.payload import get_payload

log = get_logger(__name__)

RESPONSE_DEADLINE = 9.0


class Receiver(Protocol):
    async def verify_and_receive(self, event: WebhookEvent) -> None: ...

    async def receive_error(self, error: BaseException) -> Any: ...


@dataclass(frozen=True)
class Delegate:
    """Hand non-webhook requests to the rest of the application."""
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]]


@dataclass(frozen=True)
class Terminate:
    """Answer non-webhook requests with 404."""


Routing = Union[Delegate, Terminate]


@dataclass
class GateState:
    receiver: Receiver
    path: str = DEFAULT_WEBHOOK_PATH
    log: Any = field(default_factory=lambda: log)
    background: set[asyncio.Task[DeliveryOutcome]] = field(default_factory=set)


class ResponseSink:
    """Holds the single response written for a request.

    Writing a second time raises, the same way writing to a finished HTTP
    response would.
    """

    def __init__(self) -> None:
        self._response: asyncio.Future[web.StreamResponse] = (
            asyncio.get_running_loop().create_future()
        )
        self.writes = 0

    @property
    def finished(self) -> bool:
        return self._response.done()

    def end(self, body: str, status: int = 200) -> None:
        self._set(web.Response(status=status, text=body))
        self.writes += 1

    def delegate(self, response: web.StreamResponse) -> None:
        """Adopt a response produced by a downstream handler."""
        self._set(response)

    def abort(self, exc: BaseException | None = None) -> None:
        if self.finished:
            return
        if exc is None:
            self._response.cancel()
        else:
            self._response.set_exception(exc)

    async def wait(self) -> web.StreamResponse:
        return await asyncio.shield(self._response)

    def _set(self, response: web.StreamResponse) -> None:
        if self.finished:
            raise RuntimeError("response already sent")
        self._response.set_result(response)


def isnt_webhook(request: web.Request, path: str) -> bool:
    # GitHub only ever POSTs deliveries; request.path excludes the query string
    if request.method != "POST":
        return True
    return request.path != path


def get_missing_headers(request: web.Request) -> list[str]:
    missing = []
    if EVENT_HEADER not in request.headers:
        missing.append(EVENT_HEADER)
    if SIGNATURE_256_HEADER not in request.headers and SIGNATURE_HEADER not in request.headers:
        missing.append(SIGNATURE_256_HEADER)
    if DELIVERY_HEADER not in request.headers:
        missing.append(DELIVERY_HEADER)
    return missing


async def handle_delivery(
    state: GateState,
    request: web.Request,
    sink: ResponseSink,
    routing: Routing,
) -> DeliveryOutcome:
    if isnt_webhook(request, state.path):
        if isinstance(routing, Delegate):
            sink.delegate(await routing.handler(request))
            return DeliveryOutcome.DELEGATED

        state.log.debug("webhook_ignored", method=request.method, path=request.path)
        sink.end("Not found", status=404)
        return DeliveryOutcome.NOT_A_WEBHOOK

    missing = get_missing_headers(request)
    if missing:
        error = MissingHeadersError(missing)
        sink.end(str(error), status=400)
        try:
            await state.receiver.receive_error(error)
        except Exception:
            state.log.debug("webhook_error_report_failed", exc_info=True)
        return DeliveryOutcome.MISSING_HEADERS

    event_name = request.headers[EVENT_HEADER]
    delivery_id = request.headers[DELIVERY_HEADER]
    signature = (
        request.headers.get(SIGNATURE_256_HEADER)
        or request.headers.get(SIGNATURE_HEADER, "")
    )
    state.log.debug("webhook_event_received", github_event=event_name, id=delivery_id)

    timed_out = False

    def _on_deadline() -> None:
        nonlocal timed_out
        timed_out = True
        sink.end("still processing\n", status=202)

    timer = asyncio.get_running_loop().call_later(RESPONSE_DEADLINE, _on_deadline)

    try:
        payload, body = await get_payload(request)
        await state.receiver.verify_and_receive(
            WebhookEvent(
                id=delivery_id,
                name=event_name,
                payload=payload,
                signature=signature,
                raw_body=body,
            )
        )
    except Exception as exc:
        if timed_out:
            state.log.debug("webhook_failed_after_deadline", github_event=event_name, id=delivery_id)
            return DeliveryOutcome.TIMED_OUT

        error = exc if isinstance(exc, WebhookError) else WebhookError.from_exceptions([exc])
        status = error.status if error.status is not None else 500
        sink.end(str(error), status=status)
        if isinstance(error, VerificationError):
            return DeliveryOutcome.VERIFICATION_FAILED
        return DeliveryOutcome.HANDLED_WITH_ERROR
    finally:
        timer.cancel()

    if timed_out:
        state.log.debug("webhook_completed_after_deadline", github_event=event_name, id=delivery_id)
        return DeliveryOutcome.TIMED_OUT

    sink.end("ok\n")
    return DeliveryOutcome.HANDLED_OK
