# subsonic_adapter/api/request.py

"""Request signing, envelope handling and URL builders for the Subsonic API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from subsonic_adapter.api.errors import ProtocolError
from subsonic_adapter.config import API_VERSION, RESPONSE_FORMAT

logger = logging.getLogger(__name__)

ENVELOPE_KEY = "subsonic-response"
COVER_ART_SIZE = 300


@dataclass(frozen=True, slots=True)
class Credentials:
    """Snapshot of the session credentials used to sign a request."""

    server: str = ""
    username: str = ""
    salt: str = ""
    hash: str = ""


def _join(server: str, path: str) -> str:
    return f"{server.rstrip('/')}/{path.lstrip('/')}"


def auth_params(credentials: Credentials, client_name: str) -> dict[str, str]:
    """Return the parameters every authenticated call carries, in wire order."""
    return {
        "u": credentials.username,
        "s": credentials.salt,
        "p": credentials.hash,
        "c": client_name,
        "f": RESPONSE_FORMAT,
        "v": API_VERSION,
    }


def build_request(
    credentials: Credentials,
    path: str,
    params: Mapping[str, Any] | None = None,
    *,
    client_name: str,
) -> httpx.Request:
    """Build a signed GET request for ``path`` on the configured server.

    Parameters whose value is None are dropped; the auth parameters are
    appended after the operation's own.
    """
    query: dict[str, Any] = {
        key: value for key, value in (params or {}).items() if value is not None
    }
    query.update(auth_params(credentials, client_name))
    return httpx.Request("GET", _join(credentials.server, path), params=query)


def unwrap_envelope(payload: Any) -> dict[str, Any]:
    """Return the inner envelope of a decoded body, or raise ProtocolError."""
    envelope = payload.get(ENVELOPE_KEY) if isinstance(payload, dict) else None
    if not isinstance(envelope, dict):
        msg = f"Response has no {ENVELOPE_KEY!r} envelope."
        raise ProtocolError(msg)

    status = envelope.get("status")
    if status != "ok":
        error = envelope.get("error")
        if not isinstance(error, dict):
            error = {}
        message = error.get("message") or str(status)
        logger.debug("Server returned status=%s: %s", status, message)
        raise ProtocolError(message, status=status, code=error.get("code"))

    return envelope


def read_envelope(response: httpx.Response) -> dict[str, Any]:
    """Validate an HTTP response and return its ``ok`` envelope.

    HTTP error statuses raise ``httpx.HTTPStatusError``; a body that is not
    JSON counts as a missing envelope.
    """
    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as exc:
        msg = f"Response body is not valid JSON: {exc}"
        raise ProtocolError(msg) from exc
    return unwrap_envelope(payload)


def _query_suffix(credentials: Credentials, client_name: str) -> str:
    return (
        f"&v={API_VERSION}"
        f"&u={credentials.username}"
        f"&s={credentials.salt}"
        f"&p={credentials.hash}"
        f"&c={client_name}"
    )


def download_url(credentials: Credentials, client_name: str, item_id: Any) -> str:
    return (
        _join(credentials.server, "rest/download.view")
        + f"?id={item_id}"
        + _query_suffix(credentials, client_name)
    )


def cover_art_url(credentials: Credentials, client_name: str, cover_art: Any) -> str | None:
    """Build a thumbnail URL, or None when the record has no art reference."""
    if not cover_art:
        return None
    return (
        _join(credentials.server, "rest/getCoverArt.view")
        + f"?id={cover_art}"
        + _query_suffix(credentials, client_name)
        + f"&size={COVER_ART_SIZE}"
    )


def stream_url(credentials: Credentials, client_name: str, item_id: Any) -> str:
    return (
        _join(credentials.server, "rest/stream.view")
        + f"?id={item_id}"
        + "&format=raw"
        + _query_suffix(credentials, client_name)
    )


class UrlBuilder:
    """Binds the URL builders to a credentials snapshot for normalization."""

    def __init__(self, credentials: Credentials, client_name: str) -> None:
        self._credentials = credentials
        self._client_name = client_name

    def download(self, item_id: Any) -> str:
        return download_url(self._credentials, self._client_name, item_id)

    def cover_art(self, cover_art: Any) -> str | None:
        return cover_art_url(self._credentials, self._client_name, cover_art)

    def stream(self, item_id: Any) -> str | None:
        if not item_id:
            return None
        return stream_url(self._credentials, self._client_name, item_id)
