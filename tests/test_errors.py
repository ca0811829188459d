"""Tests for aggregated webhook errors."""

import pytest

from hookgate.webhooks.errors import ErrorEntry, MissingHeadersError, WebhookError


class StatusError(Exception):
    status = 403


class TestErrorEntry:
    def test_status_from_exception(self):
        entry = ErrorEntry.from_exception(StatusError("forbidden"))
        assert entry == ErrorEntry("forbidden", 403)

    def test_non_int_status_ignored(self):
        exc = RuntimeError("boom")
        exc.status = "teapot"
        assert ErrorEntry.from_exception(exc).status is None

    def test_empty_message_uses_type_name(self):
        assert ErrorEntry.from_exception(KeyError()).message == "KeyError"


class TestWebhookError:
    def test_requires_entries(self):
        with pytest.raises(ValueError):
            WebhookError([])

    def test_string_form_joins_all_entries(self):
        error = WebhookError([ErrorEntry("first", 422), ErrorEntry("second", 401)])
        assert str(error) == "first\nsecond"
        assert len(error) == 2

    def test_status_is_first_entry_only(self):
        assert WebhookError([ErrorEntry("a"), ErrorEntry("b", 422)]).status is None
        assert WebhookError([ErrorEntry("a", 401), ErrorEntry("b", 422)]).status == 401

    def test_from_exceptions_flattens_nested(self):
        inner = WebhookError([ErrorEntry("inner", 400)])
        error = WebhookError.from_exceptions([inner, StatusError("outer")])
        assert list(error) == [ErrorEntry("inner", 400), ErrorEntry("outer", 403)]


class TestMissingHeadersError:
    def test_message_and_status(self):
        error = MissingHeadersError(["x-github-event", "x-github-delivery"])
        assert str(error) == "[hookgate] Required headers missing: x-github-event, x-github-delivery"
        assert error.status == 400
        assert error.missing == ("x-github-event", "x-github-delivery")
