"""Error taxonomy for the loan client.

Every failure surfaces as a subclass of :class:`LoanClientError`:

* :class:`ValidationError` - a local precondition failed; nothing was sent.
* :class:`TransportError` - the request could not be sent or no response came back.
* :class:`DecodeError` - the response body was not JSON or not the expected shape.
* :class:`RemoteError` - the service answered with a non-success status; the
  message is the service's own JSON body.
"""
from __future__ import annotations

import json
from typing import Any, Optional

__all__ = [
    "LoanClientError",
    "ValidationError",
    "TransportError",
    "DecodeError",
    "RemoteError",
]


class LoanClientError(Exception):
    """Base class for all errors raised by ``supremo_loan``."""


class ValidationError(LoanClientError):
    """Local input or configuration is invalid."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class TransportError(LoanClientError):
    """The HTTP exchange failed before a response was received."""


class DecodeError(LoanClientError):
    """A response body could not be decoded into the expected shape."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteError(LoanClientError):
    """Non-success response; ``body`` is the decoded JSON error payload."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(json.dumps(body, separators=(",", ":"), ensure_ascii=False))
        self.status_code = status_code
        self.body = body
