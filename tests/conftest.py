"""Shared fixtures for webhook tests."""

import asyncio
import json

import pytest
from multidict import CIMultiDict

from hookgate.config import DEFAULT_WEBHOOK_PATH
from hookgate.webhooks.signature import sign

SECRET = "gh-secret"


class FakeRequest:
    """The parts of ``aiohttp.web.Request`` the gate reads."""

    def __init__(self, method="POST", path=DEFAULT_WEBHOOK_PATH, headers=None, body=b"{}"):
        self.method = method
        self.path = path
        self.headers = CIMultiDict(headers or {})
        self._body = body

    async def read(self):
        return self._body


class FakeReceiver:
    def __init__(self, error=None, report_error=None, release=None):
        self.error = error
        self.report_error = report_error
        self.release = release
        self.events = []
        self.reported = []

    async def verify_and_receive(self, event):
        self.events.append(event)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error

    async def receive_error(self, error):
        self.reported.append(error)
        if self.report_error is not None:
            raise self.report_error
        return error


def delivery_headers(body, event="push", delivery="72d3162e-cc78-11e3-81ab-4c9367dc0958", secret=SECRET):
    return {
        "X-GitHub-Event": event,
        "X-GitHub-Delivery": delivery,
        "X-Hub-Signature-256": sign(secret, body),
        "Content-Type": "application/json",
    }


@pytest.fixture
def push_body():
    return json.dumps({
        "ref": "refs/heads/main",
        "pusher": {"name": "alice"},
        "repository": {"full_name": "org/repo"},
    }).encode()


@pytest.fixture
def short_deadline(monkeypatch):
    monkeypatch.setattr("hookgate.webhooks.middleware.RESPONSE_DEADLINE", 0.05)
    return 0.05


@pytest.fixture
def release():
    return asyncio.Event()
