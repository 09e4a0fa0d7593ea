"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StyleHubError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(StyleHubError):
    """A required field is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        self.fields = list(fields)
        super().__init__(message)

    @classmethod
    def for_fields(cls, fields: Iterable[str], reason: str = "required") -> "ValidationError":
        names = list(fields)
        return cls(f"Invalid or missing fields ({reason}): {', '.join(names)}", names)


class NotFoundError(StyleHubError):
    """Entity is absent or not visible to the caller."""

    status_code = 404


class UnauthorizedError(StyleHubError):
    status_code = 401


class ForbiddenError(StyleHubError):
    status_code = 403


class UpstreamError(StyleHubError):
    """Backing store, aggregation or AI provider failure."""

    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(message)


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Re-raise database failures inside the block as :class:`UpstreamError`."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Failed to %s: %s", action, exc)
        raise UpstreamError(f"Failed to {action}.", detail=str(exc)) from exc
