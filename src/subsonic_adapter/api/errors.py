# subsonic_adapter/api/errors.py

"""Errors raised by the protocol adapter.

Transport failures are not wrapped: ``httpx.HTTPError`` reaches the caller
as-is.
"""

from __future__ import annotations


class SubsonicError(Exception):
    """Base class for all adapter errors."""


class ProtocolError(SubsonicError):
    """The server answered, but not with an ``ok`` envelope."""

    def __init__(
        self,
        message: str,
        *,
        status: str | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class AuthenticationError(ProtocolError):
    """Credentials were rejected by the ping check."""


class MissingPayloadError(ProtocolError):
    """An ``ok`` envelope lacked the entity the operation asked for."""
