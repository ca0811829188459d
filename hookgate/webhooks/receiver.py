"""Event handler registry with signature verification."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Iterable

from hookgate.utils.logging import get_logger
from hookgate.webhooks import signature as sig
from hookgate.webhooks.errors import VerificationError, WebhookError
from hookgate.webhooks.models import WILDCARD, WebhookEvent, is_known_event

log = get_logger(__name__)

Handler = Callable[[WebhookEvent], "Awaitable[None] | None"]
ErrorHandler = Callable[[WebhookError], "Awaitable[None] | None"]


async def _call(handler: Callable[[Any], Any], arg: Any) -> None:
    result = handler(arg)
    if inspect.isawaitable(result):
        await result


class Webhooks:
    """Verifies deliveries and fans them out to registered handlers.

    Handlers are registered per event name (``"issues"``), per event and
    action (``"issues.opened"``), or for every event via :meth:`on_any`.
    All handlers matching a delivery run concurrently; their failures are
    collected into a single :class:`WebhookError`.
    """

    def __init__(
        self,
        secret: str,
        additional_secrets: Iterable[str] = (),
        logger: Any = None,
    ) -> None:
        if not secret:
            raise ValueError("[hookgate] secret is required")
        self._secret = secret
        self._additional_secrets = [s for s in additional_secrets if s]
        self._handlers: dict[str, list[Handler]] = {}
        self._error_handlers: list[ErrorHandler] = []
        self.log = logger if logger is not None else log

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def on(self, event: str | Iterable[str], handler: Handler) -> None:
        names = [event] if isinstance(event, str) else list(event)
        for name in names:
            if name == WILDCARD:
                raise ValueError(
                    'Using the "*" event with on() is not supported. '
                    "Use on_any() instead"
                )
            if name == "error":
                raise ValueError(
                    'Using the "error" event with on() is not supported. '
                    "Use on_error() instead"
                )
            if not is_known_event(name):
                self.log.warning("webhook_unknown_event", github_event=name)
            self._handlers.setdefault(name, []).append(handler)

    def on_any(self, handler: Handler) -> None:
        self._handlers.setdefault(WILDCARD, []).append(handler)

    def on_error(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    def remove_listener(self, event: str | Iterable[str], handler: Handler) -> None:
        names = [event] if isinstance(event, str) else list(event)
        for name in names:
            handlers = self._handlers.get(name, [])
            if handler in handlers:
                handlers.remove(handler)

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    @property
    def secrets(self) -> list[str]:
        return [self._secret, *self._additional_secrets]

    def sign(self, payload: bytes | str | dict[str, Any]) -> str:
        return sig.sign(self._secret, payload)

    def verify(self, payload: bytes | str | dict[str, Any], signature: str) -> bool:
        return sig.verify_with_secrets(self.secrets, payload, signature)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def verify_and_receive(self, event: WebhookEvent) -> None:
        body = event.raw_body if event.raw_body is not None else event.payload
        if not self.verify(body, event.signature):
            raise VerificationError.single(
                "[hookgate] signature does not match event payload and secret",
                status=400,
            )
        await self.receive(event)

    async def receive(self, event: WebhookEvent) -> None:
        handlers = self._matching_handlers(event)
        if not handlers:
            return

        results = await asyncio.gather(
            *(_call(handler, event) for handler in handlers),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if not failures:
            return

        error = WebhookError.from_exceptions(failures)
        self.log.debug(
            "webhook_handlers_failed",
            github_event=event.name,
            id=event.id,
            failures=len(error),
        )
        await self._run_error_handlers(error)
        raise error

    async def receive_error(self, error: BaseException) -> WebhookError:
        """Report an error that occurred before dispatch to the error handlers."""
        if not isinstance(error, WebhookError):
            error = WebhookError.from_exceptions([error])
        await self._run_error_handlers(error)
        return error

    def _matching_handlers(self, event: WebhookEvent) -> list[Handler]:
        handlers = list(self._handlers.get(event.name, []))
        if event.action:
            handlers.extend(self._handlers.get(f"{event.name}.{event.action}", []))
        handlers.extend(self._handlers.get(WILDCARD, []))
        return handlers

    async def _run_error_handlers(self, error: WebhookError) -> None:
        for handler in list(self._error_handlers):
            try:
                await _call(handler, error)
            except Exception:
                self.log.exception("webhook_error_handler_failed")
