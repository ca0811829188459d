"""Webhook error types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class ErrorEntry:
    message: str
    status: int | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorEntry:
        status = getattr(exc, "status", None)
        if not isinstance(status, int) or isinstance(status, bool):
            status = None
        return cls(message=str(exc) or type(exc).__name__, status=status)


class WebhookError(Exception):
    """One or more failures raised while verifying or dispatching a delivery.

    Entries keep the order they were collected in. Only the first entry's
    status is used when a response code is chosen; the string form always
    covers every entry.
    """

    def __init__(self, entries: Iterable[ErrorEntry]) -> None:
        self.entries: tuple[ErrorEntry, ...] = tuple(entries)
        if not self.entries:
            raise ValueError("WebhookError requires at least one entry")
        super().__init__("\n".join(entry.message for entry in self.entries))

    @classmethod
    def single(cls, message: str, status: int | None = None) -> WebhookError:
        return cls([ErrorEntry(message, status)])

    @classmethod
    def from_exceptions(cls, errors: Iterable[BaseException]) -> WebhookError:
        entries: list[ErrorEntry] = []
        for exc in errors:
            if isinstance(exc, WebhookError):
                entries.extend(exc.entries)
            else:
                entries.append(ErrorEntry.from_exception(exc))
        return cls(entries)

    @property
    def status(self) -> int | None:
        return self.entries[0].status

    def __iter__(self) -> Iterator[ErrorEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class VerificationError(WebhookError):
    """The delivery's payload or signature could not be trusted."""


class MissingHeadersError(WebhookError):
    def __init__(self, missing: Iterable[str], prefix: str = "[hookgate]") -> None:
        self.missing: tuple[str, ...] = tuple(missing)
        super().__init__([
            ErrorEntry(
                f"{prefix} Required headers missing: {', '.join(self.missing)}",
                status=400,
            )
        ])
