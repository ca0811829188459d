"""HMAC signing and verification of webhook payloads."""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Iterable

_ALGORITHMS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


def _to_bytes(payload: bytes | str | dict[str, Any]) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode()
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode()


def sign(
    secret: str, payload: bytes | str | dict[str, Any], algorithm: str = "sha256"
) -> str:
    """Return the ``<algorithm>=<hexdigest>`` signature GitHub would send."""
    if not secret:
        raise ValueError("secret is required to sign a payload")
    digest = _ALGORITHMS.get(algorithm)
    if digest is None:
        raise ValueError(f"unsupported signature algorithm: {algorithm}")
    mac = hmac.new(secret.encode(), _to_bytes(payload), digest).hexdigest()
    return f"{algorithm}={mac}"


def verify(secret: str, payload: bytes | str | dict[str, Any], signature: str) -> bool:
    """Validate an ``x-hub-signature`` or ``x-hub-signature-256`` value.

    The algorithm is taken from the signature prefix. Returns False for an
    empty secret, an empty signature or an unknown prefix.
    """
    if not secret:
        return False
    if not signature:
        return False
    algorithm, sep, _ = signature.partition("=")
    if not sep or algorithm not in _ALGORITHMS:
        return False
    expected = sign(secret, payload, algorithm)
    return hmac.compare_digest(expected.encode(), signature.encode())


def verify_with_secrets(
    secrets: Iterable[str], payload: bytes | str | dict[str, Any], signature: str
) -> bool:
    body = _to_bytes(payload)
    return any(verify(secret, body, signature) for secret in secrets)
