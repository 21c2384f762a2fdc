# subsonic_adapter/auth/service.py

"""Session credentials: restore, verify against the server, persist."""

from __future__ import annotations

import logging

import httpx

from subsonic_adapter import config
from subsonic_adapter.api.errors import AuthenticationError, ProtocolError
from subsonic_adapter.api.request import Credentials, build_request, read_envelope
from subsonic_adapter.io.session_storage import KeyValueStorage

logger = logging.getLogger(__name__)

PING_PATH = "rest/ping.view"

KEY_SERVER = "server"
KEY_USERNAME = "username"
KEY_SALT = "salt"
KEY_HASH = "hash"


class CredentialStore:
    """Holds {server, username, salt, hash} for the current session.

    The in-memory state changes only on a successful ``verify`` or on
    ``logout``; a rejected login leaves it untouched.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        server_url: str | None = None,
        client_name: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._storage = storage
        self._pinned_server = server_url or config.get_server_url()
        self._client_name = client_name or config.get_client_name()
        self._transport = transport

        self.server = ""
        self.username = ""
        self.salt = ""
        self.hash = ""
        self._authenticated = False

        self.restore()

    @property
    def client_name(self) -> str:
        return self._client_name

    @property
    def server_pinned(self) -> bool:
        return bool(self._pinned_server)

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            server=self.server,
            username=self.username,
            salt=self.salt,
            hash=self.hash,
        )

    def restore(self) -> None:
        """Load persisted credentials; a pinned server overrides the stored one."""
        self.server = self._pinned_server or self._storage.get(KEY_SERVER) or ""
        self.username = self._storage.get(KEY_USERNAME) or ""
        self.salt = self._storage.get(KEY_SALT) or ""
        self.hash = self._storage.get(KEY_HASH) or ""

    def _save_session(self) -> None:
        if not self._pinned_server:
            self._storage.set(KEY_SERVER, self.server)
        self._storage.set(KEY_USERNAME, self.username)
        self._storage.set(KEY_SALT, self.salt)
        self._storage.set(KEY_HASH, self.hash)

    async def auto_login(self) -> bool:
        """Verify the restored credentials. Never raises."""
        if not self.server or not self.username:
            return False

        try:
            await self.verify(self.server, self.username, self.hash, remember=False)
        except Exception as exc:
            logger.warning("Automatic login to %s failed: %s", self.server, exc)
            return False
        return True

    async def login_with_password(
        self,
        server: str,
        username: str,
        password: str,
        remember: bool,
    ) -> None:
        # The password is sent as the token as-is; no hashing happens here.
        await self.verify(server, username, password, remember=remember)

    async def verify(
        self,
        server: str,
        username: str,
        token: str,
        remember: bool,
    ) -> None:
        """Ping the server with the given credentials and adopt them on success.

        Raises:
            AuthenticationError: the server answered with a non-ok status.
            httpx.HTTPError: the server could not be reached.
        """
        candidate = Credentials(
            server=server,
            username=username,
            salt=self.salt,
            hash=token,
        )
        request = build_request(candidate, PING_PATH, client_name=self._client_name)

        async with httpx.AsyncClient(transport=self._transport) as http:
            response = await http.send(request)

        try:
            read_envelope(response)
        except ProtocolError as exc:
            status = exc.status or exc.message
            logger.info("Login rejected for %s@%s (status=%s).", username, server, status)
            raise AuthenticationError(status, status=exc.status, code=exc.code) from exc

        self._authenticated = True
        self.server = server
        self.username = username
        self.hash = token
        logger.info("Logged in as %s on %s.", username, server)

        if remember:
            self._save_session()

    def logout(self) -> None:
        """Clear every persisted key and forget the in-memory session."""
        self._storage.clear()
        self._authenticated = False
        self.server = self._pinned_server or ""
        self.username = ""
        self.salt = ""
        self.hash = ""

    def is_authenticated(self) -> bool:
        return self._authenticated
