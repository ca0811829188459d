"""Request body reading and JSON parsing."""

from __future__ import annotations

import json
from typing import Any

from aiohttp import web

from hookgate.webhooks.errors import VerificationError


async def get_payload(request: web.Request) -> tuple[dict[str, Any], bytes]:
    """Read the full request body and parse it as a JSON object.

    Returns the parsed payload together with the raw bytes, which are what
    the signature was computed over.
    """
    body = await request.read()
    try:
        payload = json.loads(body.decode("utf-8"))
    except ValueError as exc:
        # UnicodeDecodeError is a ValueError too
        raise VerificationError.single(
            f"[hookgate] invalid JSON payload: {exc}", status=400
        ) from exc
    if not isinstance(payload, dict):
        raise VerificationError.single(
            "[hookgate] invalid JSON payload: expected an object", status=400
        )
    return payload, body
