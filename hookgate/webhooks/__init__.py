"""GitHub webhook verification, dispatch and aiohttp integration."""

from .errors import ErrorEntry, MissingHeadersError, VerificationError, WebhookError
from .middleware import RESPONSE_DEADLINE, Delegate, GateState, ResponseSink, Terminate, handle_delivery
from .models import DeliveryOutcome, WebhookEvent
from .receiver import Webhooks
from .server import WebhookServer, create_app, webhooks_handler, webhooks_middleware
from .signature import sign, verify

__all__ = [
    "RESPONSE_DEADLINE",
    "Delegate",
    "DeliveryOutcome",
    "ErrorEntry",
    "GateState",
    "MissingHeadersError",
    "ResponseSink",
    "Terminate",
    "VerificationError",
    "WebhookError",
    "WebhookEvent",
    "WebhookServer",
    "Webhooks",
    "create_app",
    "handle_delivery",
    "sign",
    "verify",
    "webhooks_handler",
    "webhooks_middleware",
]
